"""Binary resolution helpers.

Responsibilities:
- Resolve project config declarations to installed binaries.
- Select the latest binary among selector matches and detect owner ambiguity.
- Resolve a command name to one executable path through global bindings,
  falling back to the system `PATH`.

All helpers are pure reads over a manifest snapshot. Expected failures are
returned as `ResolutionFailure` values; only environment filesystem errors raise.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence, cast

from .environment import Environment, get_plugin_dir
from .errors import ResolutionErrorKind, ResolutionFailure
from .manifest import ManifestQueries
from .models.datatypes import (
    BinaryManifestItem,
    BvmBinaryLocation,
    CommandName,
    ConfigFileBinary,
    NameSelector,
    PathBinaryLocation,
    ProjectConfig,
    VersionSelector,
)
from .telemetry.logger import ResolutionLogger


def get_installed_binary_for_config_binary(
    manifest: ManifestQueries,
    config_binary: ConfigFileBinary,
) -> BinaryManifestItem | None:
    """Return the installed binary a project config declaration refers to.

    The exact URL-pinned version wins. Otherwise the latest installed binary of
    the same owner and name satisfying the declared version range is used.
    """

    # unassociated urls are not installed plugins at all
    identifier = manifest.get_identifier_from_url(config_binary.path)
    if identifier is None:
        return None

    binary = manifest.get_binary(identifier)
    if binary is not None:
        return binary

    if config_binary.version is not None:
        name_selector = identifier.binary_name.to_selector()
        return get_latest_binary_matching_name_and_version(
            manifest, name_selector, config_binary.version
        )

    return None


def resolve_config_binaries(
    manifest: ManifestQueries,
    project_config: ProjectConfig,
) -> list[tuple[ConfigFileBinary, BinaryManifestItem | None]]:
    """Pair each project config declaration with its installed binary, if any."""

    return [
        (config_binary, get_installed_binary_for_config_binary(manifest, config_binary))
        for config_binary in project_config.binaries
    ]


def get_latest_binary_matching_name_and_version(
    manifest: ManifestQueries,
    name_selector: NameSelector,
    version_selector: VersionSelector,
) -> BinaryManifestItem | None:
    """Return the latest installed binary matching both selectors."""

    binaries = manifest.get_binaries_matching_name_and_version(name_selector, version_selector)
    return get_latest_binary(binaries)


def get_binary_with_name_and_version(
    manifest: ManifestQueries,
    name_selector: NameSelector,
    version_selector: VersionSelector,
) -> BinaryManifestItem | ResolutionFailure:
    """Return the single installed binary that unambiguously satisfies both selectors.

    Multiple matching versions of one owner resolve to the latest. Matches from
    different owners are never auto-selected.
    """

    binaries = manifest.get_binaries_matching_name_and_version(name_selector, version_selector)

    if not binaries:
        named_binaries = manifest.get_binaries_matching_name(name_selector)
        if not named_binaries:
            return ResolutionFailure(
                kind=ResolutionErrorKind.NOT_FOUND,
                detail=f"Could not find any installed binaries named '{name_selector}'.",
                hint="Run `bvm list` to see installed binaries.",
            )
        return ResolutionFailure(
            kind=ResolutionErrorKind.VERSION_MISMATCH,
            detail=(
                f"Could not find binary '{name_selector}' that matched version "
                f"'{version_selector}'."
            ),
            hint="Select one of the installed versions.",
            installed_versions=tuple(display_binaries_versions(named_binaries)),
        )

    if not get_have_same_owner(binaries):
        return ResolutionFailure(
            kind=ResolutionErrorKind.AMBIGUOUS_OWNER,
            detail=(
                f"There were multiple binaries with the specified name '{name_selector}' "
                f"that matched version '{version_selector}'."
            ),
            hint="Include the owner (`owner/name`) to disambiguate.",
            installed_versions=tuple(display_binaries_versions(binaries)),
        )

    return cast(BinaryManifestItem, get_latest_binary(binaries))


def display_binaries_versions(binaries: Sequence[BinaryManifestItem]) -> list[str]:
    """Return sorted display lines for binaries.

    Bare versions are enough when every binary shares one owner; mixed owners
    are shown as `owner/name version`.
    """

    if not binaries:
        return []

    ordered = sorted(binaries, key=BinaryManifestItem.comparison_key)
    have_same_owner = get_have_same_owner(ordered)
    if have_same_owner:
        return [str(binary.version) for binary in ordered]
    return [f"{binary.name} {binary.version}" for binary in ordered]


def get_have_same_owner(binaries: Sequence[BinaryManifestItem]) -> bool:
    """Return whether all binaries share one owner; empty sequences do."""

    if not binaries:
        return True
    first_owner = binaries[0].name.owner
    return all(binary.name.owner == first_owner for binary in binaries)


def get_latest_binary(binaries: Sequence[BinaryManifestItem]) -> BinaryManifestItem | None:
    """Return the maximum binary by (name, version); the first maximum wins ties."""

    latest_binary: BinaryManifestItem | None = None
    for binary in binaries:
        if latest_binary is None or latest_binary.comparison_key() < binary.comparison_key():
            latest_binary = binary
    return latest_binary


def resolve_global_command_path(
    environment: Environment,
    manifest: ManifestQueries,
    command_name: CommandName,
    run_logger: ResolutionLogger | None = None,
) -> Path | ResolutionFailure:
    """Resolve the executable path a command should launch.

    Decision order:
    1. Bound to an installed binary: that binary's command path.
    2. Bound to `PATH`: the first non-shim executable on `PATH`.
    3. Unbound: the first non-shim executable on `PATH`, else a diagnostic
       listing installed binaries that provide the command.
    """

    if run_logger is not None:
        run_logger.log_resolution_start("global-command", command=command_name)

    location = manifest.get_global_binary_location(command_name)
    if isinstance(location, BvmBinaryLocation):
        result = _resolve_bvm_location(environment, manifest, command_name, location)
        source = "bvm"
    elif isinstance(location, PathBinaryLocation):
        result = _resolve_path_location(environment, command_name)
        source = "path"
    else:
        result = _resolve_unbound(environment, manifest, command_name)
        source = "path"

    if run_logger is not None:
        if isinstance(result, ResolutionFailure):
            run_logger.log_resolution_failure(
                "global-command", result.kind.value, command=command_name
            )
        else:
            run_logger.log_resolution_complete(
                "global-command", command=command_name, source=source
            )
    return result


def _resolve_bvm_location(
    environment: Environment,
    manifest: ManifestQueries,
    command_name: CommandName,
    location: BvmBinaryLocation,
) -> Path | ResolutionFailure:
    """Resolve a command pinned to an installed binary."""

    item = manifest.get_binary(location.identifier)
    if item is None:
        return ResolutionFailure(
            kind=ResolutionErrorKind.STALE_BINDING,
            detail=(
                f"Binary '{location.identifier}' selected for command '{command_name}' "
                "is no longer installed."
            ),
            hint=f"Run `bvm use {command_name} <some other version>` to select a version.",
        )

    command = item.get_command(command_name)
    if command is None:
        return ResolutionFailure(
            kind=ResolutionErrorKind.DEFECT,
            detail=(
                f"Should have found executable path for command '{command_name}' in "
                f"binary '{location.identifier}'. Report this as a bug."
            ),
            hint=f"Update the version used by running `bvm use {command_name} <some other version>`.",
        )

    return get_plugin_dir(environment, item.name, item.version) / command.path


def _resolve_path_location(
    environment: Environment,
    command_name: CommandName,
) -> Path | ResolutionFailure:
    """Resolve a command explicitly delegated to the system `PATH`."""

    path_executable = environment.find_path_executable(command_name)
    if path_executable is not None:
        return path_executable

    return ResolutionFailure(
        kind=ResolutionErrorKind.NOT_FOUND,
        detail=(
            f"Binary '{command_name}' is configured to use the executable on the path, "
            "but only the bvm version exists on the path."
        ),
        hint=f"Run `bvm use {command_name} <some other version>` to select a version to run.",
    )


def _resolve_unbound(
    environment: Environment,
    manifest: ManifestQueries,
    command_name: CommandName,
) -> Path | ResolutionFailure:
    """Resolve a command with no global binding."""

    path_executable = environment.find_path_executable(command_name)
    if path_executable is not None:
        return path_executable

    binaries = manifest.get_binaries_with_command(command_name)
    if not binaries:
        return ResolutionFailure(
            kind=ResolutionErrorKind.NOT_FOUND,
            detail=f"Could not find binary on the path for command '{command_name}'.",
        )

    return ResolutionFailure(
        kind=ResolutionErrorKind.NOT_FOUND,
        detail=f"No binary is set on the path for command '{command_name}'.",
        hint=f"Run `bvm use {command_name} <version>` to set a global version.",
        installed_versions=tuple(display_binaries_versions(binaries)),
    )
