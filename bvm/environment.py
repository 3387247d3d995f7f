"""Environment collaborator for PATH lookups and plugin install directories.

Responsibilities:
- Define the narrow environment capability consumed by resolution code.
- Resolve executables on the system `PATH` while skipping the bvm shims directory.
- Map installed binaries to their deterministic plugin cache directories.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Protocol
import sys

from semver import Version

from .models.datatypes import BinaryName, CommandName


_WINDOWS_EXECUTABLE_SUFFIXES = (".exe", ".cmd", ".bat")


class Environment(Protocol):
    """Protocol for environment reads used by resolution helpers."""

    def find_path_executable(self, command_name: CommandName) -> Path | None:
        """Return a PATH executable for a command, excluding bvm shims."""

    def get_user_data_dir(self) -> Path:
        """Return the bvm data directory holding installed binaries."""


def get_plugin_dir(environment: Environment, name: BinaryName, version: Version) -> Path:
    """Return the install directory of one binary version."""

    return environment.get_user_data_dir() / "binaries" / name.owner / name.name / str(version)


class SystemEnvironment:
    """Environment backed by the real filesystem and process `PATH`."""

    def __init__(
        self,
        data_dir: Path,
        shims_dir: Path,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize directories and the environment mapping used for `PATH`."""

        self._data_dir = data_dir
        self._shims_dir = shims_dir
        self._env: Mapping[str, str] = os.environ if env is None else env

    def get_user_data_dir(self) -> Path:
        """Return the bvm data directory holding installed binaries."""

        return self._data_dir

    def find_path_executable(self, command_name: CommandName) -> Path | None:
        """Return the first executable on `PATH` outside the shims directory.

        Resolution order follows `PATH` entries; within an entry the bare command
        name is tried before Windows executable suffixes. Filesystem errors other
        than missing entries propagate to the caller.
        """

        normalized = command_name.strip()
        if not normalized:
            return None

        shims_dir = _normalized_dir(self._shims_dir)
        for directory in self._path_dirs():
            if _normalized_dir(directory) == shims_dir:
                continue
            for name in _candidate_names(normalized):
                candidate = directory / name
                if _is_executable_file(candidate):
                    return candidate
        return None

    def _path_dirs(self) -> list[Path]:
        """Return non-empty `PATH` entries in lookup order."""

        raw_path = self._env.get("PATH", "")
        return [Path(entry) for entry in raw_path.split(os.pathsep) if entry.strip()]


def _candidate_names(command_name: str) -> tuple[str, ...]:
    """Return command name variants including Windows executable suffixes."""

    if sys.platform != "win32":
        return (command_name,)
    lowered = command_name.lower()
    if lowered.endswith(_WINDOWS_EXECUTABLE_SUFFIXES):
        return (command_name,)
    return (command_name,) + tuple(
        f"{command_name}{suffix}" for suffix in _WINDOWS_EXECUTABLE_SUFFIXES
    )


def _is_executable_file(path: Path) -> bool:
    """Return whether a path is an executable regular file."""

    if not path.is_file():
        return False
    return os.access(path, os.X_OK)


def _normalized_dir(path: Path) -> str:
    """Return a comparable directory path string with symlinks resolved."""

    return os.path.normcase(str(path.expanduser().resolve()))
