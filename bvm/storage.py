"""Read-only manifest storage.

Responsibilities:
- Load the JSON binary manifest into an immutable `BinaryManifest` snapshot.
- Map malformed payloads to manifest-scoped errors with actionable hints.

Manifest payload shape::

    {
      "binaries": [
        {"owner": "acme", "name": "fmt", "version": "1.2.0",
         "commands": [{"name": "fmt", "path": "fmt-bin"}]}
      ],
      "url_identifiers": {"https://example.com/fmt.json": "acme/fmt@1.2.0"},
      "global_locations": {"fmt": {"kind": "bvm", "identifier": "acme/fmt@1.2.0"},
                           "node": {"kind": "path"}}
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from .errors import ResolutionError, ResolutionErrorKind
from .manifest import BinaryManifest
from .models.datatypes import (
    BinaryCommand,
    BinaryIdentifier,
    BinaryManifestItem,
    BinaryName,
    BvmBinaryLocation,
    GlobalBinaryLocation,
    PathBinaryLocation,
)
from .parsing import normalize_optional_string, parse_version


class ManifestStore:
    """Filesystem-backed, read-only manifest loader."""

    def __init__(self, path: Path) -> None:
        """Initialize the store with the manifest file path."""

        self.path = path

    def exists(self) -> bool:
        """Return whether the manifest file exists."""

        return self.path.is_file()

    def load(self) -> BinaryManifest:
        """Load the manifest; a missing file is an empty manifest."""

        if not self.exists():
            return BinaryManifest.build()

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ResolutionError(
                kind=ResolutionErrorKind.MANIFEST,
                detail=f"Manifest is not valid JSON: {self.path}",
                hint="Reinstall binaries or restore the manifest file.",
            ) from exc

        try:
            return manifest_from_payload(payload)
        except ValueError as exc:
            raise ResolutionError(
                kind=ResolutionErrorKind.MANIFEST,
                detail=f"Invalid manifest `{self.path}`: {exc}",
                hint="Reinstall binaries or restore the manifest file.",
            ) from exc


def manifest_from_payload(payload: object) -> BinaryManifest:
    """Build a manifest snapshot from a decoded JSON payload.

    Raises:
        ValueError: If the payload shape or any value is invalid.
    """

    if not isinstance(payload, Mapping):
        raise ValueError("manifest root must be a JSON object")

    raw_binaries = payload.get("binaries", [])
    if not isinstance(raw_binaries, list):
        raise ValueError("`binaries` must be a list")
    items = [_item_from_payload(entry, index) for index, entry in enumerate(raw_binaries)]

    url_identifiers = {
        str(url): _identifier_from_text(value, f"url_identifiers[{url!r}]")
        for url, value in _mapping(payload, "url_identifiers").items()
    }
    global_locations = {
        str(command): _location_from_payload(value, str(command))
        for command, value in _mapping(payload, "global_locations").items()
    }
    return BinaryManifest.build(
        items=items,
        url_identifiers=url_identifiers,
        global_locations=global_locations,
    )


def _mapping(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """Return an optional object-valued key, defaulting to empty."""

    value = payload.get(key, {})
    if not isinstance(value, Mapping):
        raise ValueError(f"`{key}` must be an object")
    return value


def _required_string(entry: Mapping[str, Any], key: str, label: str) -> str:
    """Return a required non-empty string value."""

    value = normalize_optional_string(entry.get(key))
    if value is None:
        raise ValueError(f"{label} is missing `{key}`")
    return value


def _item_from_payload(entry: object, index: int) -> BinaryManifestItem:
    """Build one installed binary record."""

    label = f"binaries[{index}]"
    if not isinstance(entry, Mapping):
        raise ValueError(f"{label} must be an object")

    raw_commands = entry.get("commands", [])
    if not isinstance(raw_commands, list):
        raise ValueError(f"{label}.commands must be a list")

    commands: list[BinaryCommand] = []
    for command_index, command in enumerate(raw_commands):
        command_label = f"{label}.commands[{command_index}]"
        if not isinstance(command, Mapping):
            raise ValueError(f"{command_label} must be an object")
        commands.append(
            BinaryCommand(
                name=_required_string(command, "name", command_label),
                path=_required_string(command, "path", command_label),
            )
        )

    return BinaryManifestItem(
        name=BinaryName(
            owner=_required_string(entry, "owner", label),
            name=_required_string(entry, "name", label),
        ),
        version=parse_version(_required_string(entry, "version", label)),
        commands=tuple(commands),
    )


def _identifier_from_text(value: object, label: str) -> BinaryIdentifier:
    """Parse an `owner/name@version` identifier value."""

    if not isinstance(value, str):
        raise ValueError(f"{label} must be an `owner/name@version` string")
    return BinaryIdentifier.parse(value)


def _location_from_payload(value: object, command_name: str) -> GlobalBinaryLocation:
    """Build one global binding."""

    label = f"global_locations[{command_name!r}]"
    if not isinstance(value, Mapping):
        raise ValueError(f"{label} must be an object")

    kind = _required_string(value, "kind", label).lower()
    if kind == "path":
        return PathBinaryLocation()
    if kind == "bvm":
        return BvmBinaryLocation(
            identifier=_identifier_from_text(value.get("identifier"), f"{label}.identifier")
        )
    raise ValueError(f"{label}.kind must be `path` or `bvm`, got `{kind}`")
