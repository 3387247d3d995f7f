"""Unit tests for PATH executable lookup and plugin directories."""

from __future__ import annotations

import os
from pathlib import Path
import sys

import pytest
from semver import Version

from bvm.environment import SystemEnvironment, get_plugin_dir
from bvm.models.datatypes import BinaryName


pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX executable bits")


def _write_executable(directory: Path, name: str) -> Path:
    """Create an executable stub file."""

    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("#!/bin/sh\n", encoding="utf-8")
    path.chmod(0o755)
    return path


def test_find_path_executable_skips_shims_dir(tmp_path: Path) -> None:
    """The bvm shim should be ignored in favor of the next PATH entry."""

    shims_dir = tmp_path / "home" / "shims"
    system_dir = tmp_path / "usr-bin"
    _write_executable(shims_dir, "fmt")
    system_fmt = _write_executable(system_dir, "fmt")
    environment = SystemEnvironment(
        data_dir=tmp_path / "home",
        shims_dir=shims_dir,
        env={"PATH": os.pathsep.join([str(shims_dir), str(system_dir)])},
    )

    assert environment.find_path_executable("fmt") == system_fmt


def test_find_path_executable_returns_none_when_only_shim_exists(tmp_path: Path) -> None:
    """Only a shim on PATH means there is no PATH executable."""

    shims_dir = tmp_path / "home" / "shims"
    _write_executable(shims_dir, "fmt")
    environment = SystemEnvironment(
        data_dir=tmp_path / "home",
        shims_dir=shims_dir,
        env={"PATH": str(shims_dir)},
    )

    assert environment.find_path_executable("fmt") is None


def test_find_path_executable_ignores_non_executable_files(tmp_path: Path) -> None:
    """Plain files and missing PATH directories should be skipped."""

    plain_dir = tmp_path / "plain"
    plain_dir.mkdir()
    (plain_dir / "fmt").write_text("data", encoding="utf-8")
    (plain_dir / "fmt").chmod(0o644)
    system_fmt = _write_executable(tmp_path / "bin", "fmt")
    environment = SystemEnvironment(
        data_dir=tmp_path / "home",
        shims_dir=tmp_path / "home" / "shims",
        env={
            "PATH": os.pathsep.join(
                [str(tmp_path / "missing"), str(plain_dir), "", str(tmp_path / "bin")]
            )
        },
    )

    assert environment.find_path_executable("fmt") == system_fmt
    assert environment.find_path_executable("   ") is None


def test_find_path_executable_skips_symlinked_shims_dir(tmp_path: Path) -> None:
    """A PATH entry that links to the shims directory is still the shims directory."""

    shims_dir = tmp_path / "home" / "shims"
    system_dir = tmp_path / "usr-bin"
    _write_executable(shims_dir, "fmt")
    system_fmt = _write_executable(system_dir, "fmt")
    linked_shims = tmp_path / "linked-shims"
    linked_shims.symlink_to(shims_dir, target_is_directory=True)
    environment = SystemEnvironment(
        data_dir=tmp_path / "home",
        shims_dir=shims_dir,
        env={"PATH": os.pathsep.join([str(linked_shims), str(system_dir)])},
    )

    assert environment.find_path_executable("fmt") == system_fmt


def test_get_plugin_dir_layout(tmp_path: Path) -> None:
    """Install directories should be laid out by owner, name, and version."""

    environment = SystemEnvironment(
        data_dir=tmp_path, shims_dir=tmp_path / "shims", env={"PATH": ""}
    )

    plugin_dir = get_plugin_dir(environment, BinaryName("acme", "fmt"), Version.parse("1.2.0"))

    assert plugin_dir == tmp_path / "binaries" / "acme" / "fmt" / "1.2.0"


def test_get_plugin_dir_keeps_prerelease_text(tmp_path: Path) -> None:
    """Prerelease versions should name their install directory verbatim."""

    environment = SystemEnvironment(
        data_dir=tmp_path, shims_dir=tmp_path / "shims", env={"PATH": ""}
    )

    plugin_dir = get_plugin_dir(
        environment, BinaryName("acme", "fmt"), Version.parse("1.2.0-beta.1+build.7")
    )

    assert plugin_dir == tmp_path / "binaries" / "acme" / "fmt" / "1.2.0-beta.1+build.7"
