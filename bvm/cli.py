"""Command-line interface for bvm resolution.

Responsibilities:
- Expose read-only commands over the installed binary manifest.
- Convert CLI arguments into `BvmConfig`, run resolution, and render results.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    echo_binary_list,
    echo_config_binary_status,
    exit_with_command_error,
)
from .config import BvmConfig, ConfigLoader, ProjectConfigLoader, find_project_config
from .environment import SystemEnvironment, get_plugin_dir
from .errors import ResolutionError, ResolutionErrorKind, unwrap_resolution
from .manifest import BinaryManifest
from .models.datatypes import NameSelector, VersionSelector
from .resolution import (
    get_binary_with_name_and_version,
    resolve_config_binaries,
    resolve_global_command_path,
)
from .storage import ManifestStore
from .telemetry.logger import ResolutionLogger

app = typer.Typer(
    name="bvm",
    no_args_is_help=True,
    help="Resolve installed binaries and command executables.",
)

HomeOption = Annotated[
    Path | None,
    typer.Option("--home", help="bvm data directory (overrides `BVM_HOME`)."),
]
ManifestOption = Annotated[
    Path | None,
    typer.Option("--manifest", help="Manifest JSON path (overrides `BVM_MANIFEST`)."),
]
LogOption = Annotated[
    bool | None,
    typer.Option("--log/--no-log", help="Log resolution events to stderr (overrides `BVM_LOG`)."),
]


def _load_config(home: Path | None, manifest: Path | None, log: bool | None) -> BvmConfig:
    """Resolve runtime config and map validation failures to config errors."""

    try:
        return ConfigLoader.from_env(home_dir=home, manifest_path=manifest, log_enabled=log)
    except ValueError as exc:
        raise ResolutionError(
            kind=ResolutionErrorKind.CONFIG,
            detail=f"Invalid bvm configuration: {exc}",
            hint="Check `--home`, `--manifest`, `BVM_HOME`, `BVM_MANIFEST`, and `BVM_LOG`.",
        ) from exc


def _load_manifest(config: BvmConfig) -> BinaryManifest:
    """Load the manifest snapshot for one command invocation."""

    return ManifestStore(config.manifest_path).load()


def _load_project_config(config_file: Path | None, cwd: Path) -> Path:
    """Resolve the project config path from an explicit option or discovery."""

    if config_file is not None:
        return config_file
    discovered = find_project_config(cwd)
    if discovered is None:
        raise ResolutionError(
            kind=ResolutionErrorKind.CONFIG,
            detail=f"Could not find `.bvmrc.json` or `bvm.yml` in `{cwd}` or its parents.",
            hint="Pass `--config <path>` or create a project config file.",
        )
    return discovered


@app.command("resolve")
def resolve_command(
    command_name: Annotated[str, typer.Argument(help="Command name to resolve.")],
    home: HomeOption = None,
    manifest: ManifestOption = None,
    log: LogOption = None,
) -> None:
    """Print the executable path the given command should launch."""

    try:
        config = _load_config(home, manifest, log)
        binary_manifest = _load_manifest(config)
        environment = SystemEnvironment(data_dir=config.home_dir, shims_dir=config.shims_dir)
        run_logger = ResolutionLogger() if config.log_enabled else None
        path = unwrap_resolution(
            resolve_global_command_path(environment, binary_manifest, command_name, run_logger)
        )
    except Exception as exc:
        exit_with_command_error("resolve", exc)

    typer.echo(str(path))


@app.command("lookup")
def lookup_command(
    name: Annotated[str, typer.Argument(help="Binary name as `name` or `owner/name`.")],
    version: Annotated[
        str,
        typer.Argument(
            help=(
                "SemVer selector: `1.2.3`, `1.x`, `1.2.*`, `^1.2.3`, `~1.2.3`, "
                "`>=1.2.0 <2.0.0`, or `*`."
            )
        ),
    ] = "*",
    home: HomeOption = None,
    manifest: ManifestOption = None,
) -> None:
    """Find the single installed binary matching a name and version selector."""

    try:
        try:
            name_selector = NameSelector.parse(name)
            version_selector = VersionSelector.parse(version)
        except ValueError as exc:
            raise ResolutionError(
                kind=ResolutionErrorKind.CONFIG,
                detail=str(exc),
                hint="Use `owner/name` or `name`, and a valid version selector.",
            ) from exc
        config = _load_config(home, manifest, None)
        binary_manifest = _load_manifest(config)
        binary = unwrap_resolution(
            get_binary_with_name_and_version(binary_manifest, name_selector, version_selector)
        )
        environment = SystemEnvironment(data_dir=config.home_dir, shims_dir=config.shims_dir)
        install_dir = get_plugin_dir(environment, binary.name, binary.version)
    except Exception as exc:
        exit_with_command_error("lookup", exc)

    typer.echo(f"Binary: {binary.identifier}")
    typer.echo(f"Install directory: {install_dir}")
    for command in binary.commands:
        typer.echo(f"Command: {command.name} -> {install_dir / command.path}")


@app.command("list")
def list_command(
    home: HomeOption = None,
    manifest: ManifestOption = None,
) -> None:
    """List installed binaries."""

    try:
        config = _load_config(home, manifest, None)
        binary_manifest = _load_manifest(config)
    except Exception as exc:
        exit_with_command_error("list", exc)

    echo_binary_list(binary_manifest.binaries())


@app.command("status")
def status_command(
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Project config path (default: nearest `.bvmrc.json`)."),
    ] = None,
    home: HomeOption = None,
    manifest: ManifestOption = None,
) -> None:
    """Show which installed binary each project config declaration resolves to."""

    try:
        config = _load_config(home, manifest, None)
        project_config_path = _load_project_config(config_file, Path.cwd())
        try:
            project_config = ProjectConfigLoader.from_path(project_config_path)
        except FileNotFoundError as exc:
            raise ResolutionError(
                kind=ResolutionErrorKind.CONFIG,
                detail=f"Project config not found: `{project_config_path}`.",
                hint="Provide an existing path via `--config <path>`.",
            ) from exc
        except ValueError as exc:
            raise ResolutionError(
                kind=ResolutionErrorKind.CONFIG,
                detail=str(exc),
                hint="Fix the project config and rerun.",
            ) from exc
        binary_manifest = _load_manifest(config)
        rows = resolve_config_binaries(binary_manifest, project_config)
    except Exception as exc:
        exit_with_command_error("status", exc)

    typer.echo(f"Project config: {project_config_path}")
    echo_config_binary_status(rows)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
