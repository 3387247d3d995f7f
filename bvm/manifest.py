"""In-memory binary manifest snapshot and its query surface.

Responsibilities:
- Index installed binaries, URL associations, and global command bindings.
- Expose read-only queries consumed by the resolution helpers.

Key types:
- `ManifestQueries`: narrow capability interface used by resolution code.
- `BinaryManifest`: immutable manifest snapshot implementing `ManifestQueries`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Protocol

from .models.datatypes import (
    BinaryIdentifier,
    BinaryManifestItem,
    CommandName,
    GlobalBinaryLocation,
    NameSelector,
    VersionSelector,
)


class ManifestQueries(Protocol):
    """Protocol for manifest reads performed by resolution helpers."""

    def get_identifier_from_url(self, url: str) -> BinaryIdentifier | None:
        """Return the identifier associated with a plugin URL, if any."""

    def get_binary(self, identifier: BinaryIdentifier) -> BinaryManifestItem | None:
        """Return the installed binary with an exact identifier, if any."""

    def get_binaries_matching_name_and_version(
        self, name_selector: NameSelector, version_selector: VersionSelector
    ) -> list[BinaryManifestItem]:
        """Return installed binaries matching both selectors."""

    def get_binaries_matching_name(self, name_selector: NameSelector) -> list[BinaryManifestItem]:
        """Return installed binaries matching a name selector."""

    def get_binaries_with_command(self, command_name: CommandName) -> list[BinaryManifestItem]:
        """Return installed binaries providing a command."""

    def get_global_binary_location(
        self, command_name: CommandName
    ) -> GlobalBinaryLocation | None:
        """Return the global binding for a command, if any."""


@dataclass(frozen=True, slots=True)
class BinaryManifest:
    """Immutable snapshot of installed binaries and global command bindings.

    Attributes:
        items: Installed binaries in manifest order.
        url_identifiers: Plugin URL to installed identifier associations.
        global_locations: Command name to global binding; one binding per command.
    """

    items: tuple[BinaryManifestItem, ...] = field(default_factory=tuple)
    url_identifiers: Mapping[str, BinaryIdentifier] = field(
        default_factory=lambda: MappingProxyType({})
    )
    global_locations: Mapping[CommandName, GlobalBinaryLocation] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def build(
        cls,
        items: Iterable[BinaryManifestItem] = (),
        url_identifiers: Mapping[str, BinaryIdentifier] | None = None,
        global_locations: Mapping[CommandName, GlobalBinaryLocation] | None = None,
    ) -> BinaryManifest:
        """Create a manifest from plain collections, copying them defensively.

        Raises:
            ValueError: If the same identifier is installed more than once.
        """

        ordered = tuple(items)
        seen: set[BinaryIdentifier] = set()
        for item in ordered:
            if item.identifier in seen:
                raise ValueError(f"Binary `{item.identifier}` is listed more than once.")
            seen.add(item.identifier)

        return cls(
            items=ordered,
            url_identifiers=MappingProxyType(dict(url_identifiers or {})),
            global_locations=MappingProxyType(dict(global_locations or {})),
        )

    def binaries(self) -> list[BinaryManifestItem]:
        """Return installed binaries sorted by owner-qualified name and version."""

        return sorted(self.items, key=lambda item: (str(item.name), item.version))

    def has_binary(self, identifier: BinaryIdentifier) -> bool:
        """Return whether a binary with the exact identifier is installed."""

        return self.get_binary(identifier) is not None

    def get_identifier_from_url(self, url: str) -> BinaryIdentifier | None:
        """Return the identifier associated with a plugin URL, if any."""

        return self.url_identifiers.get(url)

    def get_binary(self, identifier: BinaryIdentifier) -> BinaryManifestItem | None:
        """Return the installed binary with an exact identifier, if any."""

        for item in self.items:
            if item.identifier == identifier:
                return item
        return None

    def get_binaries_matching_name_and_version(
        self, name_selector: NameSelector, version_selector: VersionSelector
    ) -> list[BinaryManifestItem]:
        """Return installed binaries matching both selectors, in manifest order."""

        return [
            item
            for item in self.items
            if name_selector.is_match(item.name) and version_selector.matches(item.version)
        ]

    def get_binaries_matching_name(self, name_selector: NameSelector) -> list[BinaryManifestItem]:
        """Return installed binaries matching a name selector, in manifest order."""

        return [item for item in self.items if name_selector.is_match(item.name)]

    def get_binaries_with_command(self, command_name: CommandName) -> list[BinaryManifestItem]:
        """Return installed binaries providing a command, in manifest order."""

        return [item for item in self.items if item.has_command(command_name)]

    def get_global_binary_location(
        self, command_name: CommandName
    ) -> GlobalBinaryLocation | None:
        """Return the global binding for a command, if any."""

        return self.global_locations.get(command_name)
