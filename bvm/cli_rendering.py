"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
installed binary listings, and project binary status rows.
"""

from __future__ import annotations

from typing import NoReturn, Sequence

import typer

from .errors import ResolutionError
from .models.datatypes import BinaryManifestItem, ConfigFileBinary


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, ResolutionError):
        typer.secho(
            f"{command_name} failed [{exc.kind.value}]: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_binary_list(binaries: Sequence[BinaryManifestItem]) -> None:
    """Print installed binaries with the commands they provide."""

    if not binaries:
        typer.echo("No binaries installed.")
        return
    for binary in binaries:
        commands = ", ".join(command.name for command in binary.commands) or "-"
        typer.echo(f"{binary.name} {binary.version} ({commands})")


def echo_config_binary_status(
    rows: Sequence[tuple[ConfigFileBinary, BinaryManifestItem | None]],
) -> None:
    """Print one status row per project binary declaration."""

    if not rows:
        typer.echo("Project config declares no binaries.")
        return
    for config_binary, binary in rows:
        requested = f" ({config_binary.version})" if config_binary.version is not None else ""
        resolved = binary.identifier if binary is not None else "not installed"
        typer.echo(f"{config_binary.path}{requested}: {resolved}")
