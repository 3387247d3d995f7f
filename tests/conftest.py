"""Shared pytest fixtures for the full bvm test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from bvm.models.datatypes import BinaryCommand, BinaryManifestItem, BinaryName, CommandName
from bvm.parsing import parse_version


class FakeEnvironment:
    """In-memory environment with a fixed data directory and PATH executables."""

    def __init__(
        self,
        data_dir: Path,
        path_executables: dict[str, Path] | None = None,
        path_error: OSError | None = None,
    ) -> None:
        """Initialize fake directories, PATH hits, and an optional lookup failure."""

        self.data_dir = data_dir
        self.path_executables = dict(path_executables or {})
        self.path_error = path_error
        self.path_lookups: list[str] = []

    def find_path_executable(self, command_name: CommandName) -> Path | None:
        """Return a configured PATH executable or raise the configured error."""

        self.path_lookups.append(command_name)
        if self.path_error is not None:
            raise self.path_error
        return self.path_executables.get(command_name)

    def get_user_data_dir(self) -> Path:
        """Return the fake data directory."""

        return self.data_dir


MakeBinary = Callable[..., BinaryManifestItem]


def _make_binary(
    owner: str,
    name: str,
    version: str,
    commands: dict[str, str] | None = None,
) -> BinaryManifestItem:
    """Build an installed binary; commands default to `{name: name}`."""

    command_map = commands if commands is not None else {name: name}
    return BinaryManifestItem(
        name=BinaryName(owner=owner, name=name),
        version=parse_version(version),
        commands=tuple(
            BinaryCommand(name=command_name, path=path)
            for command_name, path in command_map.items()
        ),
    )


@pytest.fixture
def make_binary() -> MakeBinary:
    """Provide a factory for installed binary records."""

    return _make_binary


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Provide an isolated bvm data directory path."""

    return tmp_path / "bvm-home"


@pytest.fixture
def fake_environment(data_dir: Path) -> FakeEnvironment:
    """Provide an environment without PATH executables."""

    return FakeEnvironment(data_dir=data_dir)


@pytest.fixture
def fake_environment_factory(data_dir: Path) -> Callable[..., FakeEnvironment]:
    """Provide a factory for environments with custom PATH behavior."""

    def _factory(
        path_executables: dict[str, Path] | None = None,
        path_error: OSError | None = None,
    ) -> FakeEnvironment:
        return FakeEnvironment(
            data_dir=data_dir, path_executables=path_executables, path_error=path_error
        )

    return _factory
