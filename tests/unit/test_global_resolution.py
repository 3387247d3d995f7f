"""Unit tests for global command path resolution."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from bvm.errors import ResolutionErrorKind, ResolutionFailure
from bvm.manifest import BinaryManifest
from bvm.models.datatypes import BinaryIdentifier, BvmBinaryLocation, PathBinaryLocation
from bvm.resolution import resolve_global_command_path
from bvm.telemetry.logger import ResolutionLogger


def test_bvm_binding_resolves_to_plugin_dir_command_path(
    make_binary, fake_environment_factory, data_dir: Path
) -> None:
    """A binding to an installed binary should join its install dir and command path."""

    fmt = make_binary("acme", "fmt", "1.2.0", commands={"fmt": "fmt-bin"})
    manifest = BinaryManifest.build(
        items=[fmt],
        global_locations={"fmt": BvmBinaryLocation(identifier=fmt.identifier)},
    )
    environment = fake_environment_factory(path_executables={"fmt": Path("/usr/bin/fmt")})

    result = resolve_global_command_path(environment, manifest, "fmt")

    assert result == data_dir / "binaries" / "acme" / "fmt" / "1.2.0" / "fmt-bin"
    assert environment.path_lookups == []


def test_bvm_binding_to_prerelease_keeps_version_text_in_path(
    make_binary, fake_environment, data_dir: Path
) -> None:
    """Prerelease installs should resolve under their exact SemVer directory name."""

    fmt = make_binary("acme", "fmt", "1.2.0-beta.1", commands={"fmt": "fmt-bin"})
    manifest = BinaryManifest.build(
        items=[fmt],
        global_locations={"fmt": BvmBinaryLocation(identifier=fmt.identifier)},
    )

    result = resolve_global_command_path(fake_environment, manifest, "fmt")

    assert result == data_dir / "binaries" / "acme" / "fmt" / "1.2.0-beta.1" / "fmt-bin"


def test_stale_bvm_binding_reports_stale_binding(make_binary, fake_environment) -> None:
    """A binding to an uninstalled identifier should fail with a reselect hint."""

    manifest = BinaryManifest.build(
        items=[make_binary("acme", "fmt", "1.3.0")],
        global_locations={
            "fmt": BvmBinaryLocation(identifier=BinaryIdentifier.parse("acme/fmt@1.2.0"))
        },
    )

    result = resolve_global_command_path(fake_environment, manifest, "fmt")

    assert isinstance(result, ResolutionFailure)
    assert result.kind is ResolutionErrorKind.STALE_BINDING
    assert "acme/fmt@1.2.0" in result.detail
    assert result.hint is not None and "bvm use fmt" in result.hint


def test_bvm_binding_without_command_record_is_a_defect(make_binary, fake_environment) -> None:
    """A bound binary missing the command record should report a defect, not not-found."""

    fmt = make_binary("acme", "fmt", "1.2.0", commands={"fmtd": "fmtd"})
    manifest = BinaryManifest.build(
        items=[fmt],
        global_locations={"fmt": BvmBinaryLocation(identifier=fmt.identifier)},
    )

    result = resolve_global_command_path(fake_environment, manifest, "fmt")

    assert isinstance(result, ResolutionFailure)
    assert result.kind is ResolutionErrorKind.DEFECT
    assert result.kind is not ResolutionErrorKind.NOT_FOUND
    assert "Report this as a bug" in result.detail


def test_path_binding_uses_path_executable(fake_environment_factory) -> None:
    """A PATH binding should return the PATH executable."""

    manifest = BinaryManifest.build(global_locations={"node": PathBinaryLocation()})
    environment = fake_environment_factory(path_executables={"node": Path("/usr/bin/node")})

    assert resolve_global_command_path(environment, manifest, "node") == Path("/usr/bin/node")


def test_path_binding_without_path_executable_fails(make_binary, fake_environment) -> None:
    """A PATH binding with only the shim on PATH should explain how to select a version."""

    manifest = BinaryManifest.build(
        items=[make_binary("acme", "node", "20.0.0")],
        global_locations={"node": PathBinaryLocation()},
    )

    result = resolve_global_command_path(fake_environment, manifest, "node")

    assert isinstance(result, ResolutionFailure)
    assert result.kind is ResolutionErrorKind.NOT_FOUND
    assert "only the bvm version exists on the path" in result.detail
    assert result.installed_versions == ()


def test_unbound_command_prefers_path_executable(make_binary, fake_environment_factory) -> None:
    """Unbound commands should use a PATH executable before installed binaries."""

    manifest = BinaryManifest.build(items=[make_binary("acme", "fmt", "1.2.0")])
    environment = fake_environment_factory(path_executables={"fmt": Path("/opt/fmt")})

    assert resolve_global_command_path(environment, manifest, "fmt") == Path("/opt/fmt")


def test_unbound_command_lists_single_installed_candidate(make_binary, fake_environment) -> None:
    """Unbound commands missing from PATH should list installed candidate versions."""

    manifest = BinaryManifest.build(
        items=[
            make_binary("acme", "fmt", "1.2.0", commands={"fmt": "fmt-bin"}),
            make_binary("acme", "lint", "3.0.0"),
        ]
    )

    result = resolve_global_command_path(fake_environment, manifest, "fmt")

    assert isinstance(result, ResolutionFailure)
    assert result.kind is ResolutionErrorKind.NOT_FOUND
    assert result.installed_versions == ("1.2.0",)
    assert result.hint is not None and "bvm use fmt <version>" in result.hint


def test_unbound_command_without_candidates_fails_plainly(fake_environment) -> None:
    """Unknown commands should fail with the plain not-found message."""

    result = resolve_global_command_path(fake_environment, BinaryManifest.build(), "fmt")

    assert isinstance(result, ResolutionFailure)
    assert result.kind is ResolutionErrorKind.NOT_FOUND
    assert result.detail == "Could not find binary on the path for command 'fmt'."
    assert result.hint is None


def test_environment_errors_propagate_unchanged(fake_environment_factory) -> None:
    """Filesystem errors from PATH lookups should not be converted into failures."""

    environment = fake_environment_factory(path_error=PermissionError("denied"))

    with pytest.raises(PermissionError, match="denied"):
        resolve_global_command_path(environment, BinaryManifest.build(), "fmt")


def test_resolution_logs_complete_and_failure_events(make_binary, fake_environment) -> None:
    """Resolution should log deterministic start, complete, and failure lines."""

    sink = io.StringIO()
    run_logger = ResolutionLogger(sink=sink, level="DEBUG")
    fmt = make_binary("acme", "fmt", "1.2.0")
    manifest = BinaryManifest.build(
        items=[fmt],
        global_locations={"fmt": BvmBinaryLocation(identifier=fmt.identifier)},
    )

    resolve_global_command_path(fake_environment, manifest, "fmt", run_logger)
    resolve_global_command_path(fake_environment, manifest, "lint", run_logger)

    lines = sink.getvalue().splitlines()
    assert lines == [
        "[resolve] level=DEBUG stage=global-command event=start command=fmt",
        "[resolve] level=INFO stage=global-command event=complete command=fmt source=bvm",
        "[resolve] level=DEBUG stage=global-command event=start command=lint",
        "[resolve] level=WARNING stage=global-command event=failure command=lint"
        " error_kind=not_found",
    ]
