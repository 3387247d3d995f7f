"""Configuration model and loaders for bvm.

Responsibilities:
- Define runtime directory configuration as a typed dataclass.
- Resolve directories with deterministic precedence: CLI > env > platform default.
- Load project config files declaring the binaries a project uses.

Key types:
- `BvmConfig`: normalized runtime settings for one invocation.
- `ConfigLoader`: construction helpers for `BvmConfig`.
- `ProjectConfigLoader`: loader for `.bvmrc.json` / `bvm.yml` project files.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
import sys
from typing import Any, Mapping

import yaml

from .models.datatypes import ConfigFileBinary, ProjectConfig, VersionSelector
from .parsing import normalize_optional_string, parse_required_boolean


PROJECT_CONFIG_FILE_NAMES = (".bvmrc.json", "bvm.yml")
_DEFAULT_MANIFEST_FILE_NAME = "manifest.json"
_DEFAULT_SHIMS_DIR_NAME = "shims"


@dataclass(frozen=True, slots=True)
class BvmConfig:
    """Runtime configuration for one bvm invocation.

    Attributes:
        home_dir: Root data directory holding installed binaries.
        manifest_path: Path of the JSON binary manifest.
        shims_dir: Directory holding bvm shims, skipped during PATH lookups.
        log_enabled: Whether resolution events are logged to stderr.
    """

    home_dir: Path
    manifest_path: Path
    shims_dir: Path
    log_enabled: bool = False

    def validate(self) -> None:
        """Validate directory settings before resolution."""

        if self.home_dir.exists() and not self.home_dir.is_dir():
            raise ValueError(f"`home_dir` `{self.home_dir}` exists but is not a directory.")
        if self.manifest_path.exists() and self.manifest_path.is_dir():
            raise ValueError(f"`manifest_path` `{self.manifest_path}` is a directory.")


class ConfigLoader:
    """Factory methods for creating `BvmConfig` from external sources."""

    @staticmethod
    def from_env(
        env: Mapping[str, str] | None = None,
        home_dir: Path | None = None,
        manifest_path: Path | None = None,
        log_enabled: bool | None = None,
    ) -> BvmConfig:
        """Create a validated config from explicit overrides and environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        resolved_home = (
            home_dir
            or ConfigLoader._optional_env_path(env_map, "BVM_HOME")
            or ConfigLoader._default_home_dir(env_map)
        )
        resolved_manifest = (
            manifest_path
            or ConfigLoader._optional_env_path(env_map, "BVM_MANIFEST")
            or resolved_home / _DEFAULT_MANIFEST_FILE_NAME
        )
        resolved_log_enabled = log_enabled
        if resolved_log_enabled is None:
            raw_log = normalize_optional_string(env_map.get("BVM_LOG"))
            resolved_log_enabled = (
                parse_required_boolean(raw_log, "BVM_LOG") if raw_log is not None else False
            )

        config = BvmConfig(
            home_dir=resolved_home,
            manifest_path=resolved_manifest,
            shims_dir=resolved_home / _DEFAULT_SHIMS_DIR_NAME,
            log_enabled=resolved_log_enabled,
        )
        config.validate()
        return config

    @staticmethod
    def _optional_env_path(env_map: Mapping[str, str], key: str) -> Path | None:
        """Read an optional path environment variable."""

        value = normalize_optional_string(env_map.get(key))
        if value is None:
            return None
        return Path(value).expanduser()

    @staticmethod
    def _default_home_dir(env_map: Mapping[str, str]) -> Path:
        """Return the platform default bvm data directory."""

        if sys.platform == "win32":
            app_data = normalize_optional_string(env_map.get("APPDATA"))
            if app_data is not None:
                return Path(app_data) / "bvm"
        xdg_data_home = normalize_optional_string(env_map.get("XDG_DATA_HOME"))
        if xdg_data_home is not None:
            return Path(xdg_data_home) / "bvm"
        return Path.home() / ".local" / "share" / "bvm"


class ProjectConfigLoader:
    """Loader for project config files declaring required binaries."""

    _SUPPORTED_ROOT_KEYS = frozenset({"binaries"})
    _SUPPORTED_BINARY_KEYS = frozenset({"path", "version", "checksum"})

    @staticmethod
    def from_path(path: Path) -> ProjectConfig:
        """Create a validated project config from a JSON or YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = ProjectConfigLoader._parse_payload(path_text, path)
        unknown = sorted(set(payload.keys()) - ProjectConfigLoader._SUPPORTED_ROOT_KEYS)
        if unknown:
            raise ValueError(
                f"Project config `{path}` has unsupported key(s): {', '.join(unknown)}."
            )

        raw_binaries = payload.get("binaries", [])
        if not isinstance(raw_binaries, list):
            raise ValueError(f"Project config `{path}` key `binaries` must be a list.")

        binaries = tuple(
            ProjectConfigLoader._parse_binary(entry, index, path)
            for index, entry in enumerate(raw_binaries)
        )
        return ProjectConfig(binaries=binaries, source_path=path)

    @staticmethod
    def _parse_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse JSON/YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"Project config `{path}` is not valid JSON/YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"Project config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _parse_binary(entry: object, index: int, path: Path) -> ConfigFileBinary:
        """Parse one `binaries` entry given as a URL string or a mapping."""

        label = f"`binaries[{index}]` in `{path}`"
        if isinstance(entry, str):
            url = normalize_optional_string(entry)
            if url is None:
                raise ValueError(f"{label} must be a non-empty URL or path.")
            return ConfigFileBinary(path=url)

        if not isinstance(entry, Mapping):
            raise ValueError(f"{label} must be a string or a mapping with `path`.")

        unknown = sorted(set(entry.keys()) - ProjectConfigLoader._SUPPORTED_BINARY_KEYS)
        if unknown:
            raise ValueError(f"{label} has unsupported key(s): {', '.join(unknown)}.")

        url = normalize_optional_string(entry.get("path"))
        if url is None:
            raise ValueError(f"{label} is missing required key `path`.")

        version_text = normalize_optional_string(entry.get("version"))
        version: VersionSelector | None = None
        if version_text is not None:
            try:
                version = VersionSelector.parse(version_text)
            except ValueError as exc:
                raise ValueError(f"{label} has an invalid `version`: {exc}") from exc

        return ConfigFileBinary(
            path=url,
            version=version,
            checksum=normalize_optional_string(entry.get("checksum")),
        )


def find_project_config(start_dir: Path) -> Path | None:
    """Return the nearest project config file walking up from `start_dir`."""

    current = start_dir.resolve()
    for directory in (current, *current.parents):
        for file_name in PROJECT_CONFIG_FILE_NAMES:
            candidate = directory / file_name
            if candidate.is_file():
                return candidate
    return None
