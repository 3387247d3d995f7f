"""Core datatypes shared across bvm modules.

Responsibilities:
- Represent immutable identities, selectors, and manifest records used by resolution.
- Keep ordering explicit: binaries order by (short name, version) while owner is
  checked separately through identity comparisons.

Key types:
- `BinaryName`, `BinaryIdentifier`, `NameSelector`, `VersionSelector`,
  `BinaryCommand`, `BinaryManifestItem`, `PathBinaryLocation`,
  `BvmBinaryLocation`, `ConfigFileBinary`, and `ProjectConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from semver import Version

from ..parsing import (
    VersionComparator,
    comparators_match,
    normalize_optional_string,
    parse_version,
    parse_version_range,
)


CommandName = str


@dataclass(frozen=True, slots=True)
class BinaryName:
    """Owner-qualified binary name.

    Attributes:
        owner: Publisher of the binary.
        name: Short binary name.
    """

    owner: str
    name: str

    def to_selector(self) -> NameSelector:
        """Return an owner-qualified selector matching only this name."""

        return NameSelector(name=self.name, owner=self.owner)

    def same_identity(self, other: BinaryName) -> bool:
        """Return whether both names refer to the same publisher's binary."""

        return self.owner == other.owner and self.name == other.name

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True, slots=True)
class BinaryIdentifier:
    """Fully-qualified identity of one installed binary."""

    owner: str
    name: str
    version: Version

    @property
    def binary_name(self) -> BinaryName:
        """Return the owner-qualified name without version."""

        return BinaryName(owner=self.owner, name=self.name)

    @classmethod
    def parse(cls, text: str) -> BinaryIdentifier:
        """Parse `owner/name@version` text.

        Raises:
            ValueError: If owner, name, or version is missing or invalid.
        """

        qualified, separator, version_text = text.strip().partition("@")
        owner, slash, name = qualified.partition("/")
        if not separator or not slash or not owner.strip() or not name.strip():
            raise ValueError(
                f"Invalid binary identifier `{text}`; expected `owner/name@version`."
            )
        return cls(owner=owner.strip(), name=name.strip(), version=parse_version(version_text))

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}@{self.version}"


@dataclass(frozen=True, slots=True)
class NameSelector:
    """Possibly-partial name query with an optional owner constraint."""

    name: str
    owner: str | None = None

    def is_match(self, binary_name: BinaryName) -> bool:
        """Return whether the selector matches a qualified binary name."""

        if self.name != binary_name.name:
            return False
        return self.owner is None or self.owner == binary_name.owner

    @classmethod
    def parse(cls, text: str) -> NameSelector:
        """Parse `owner/name` or bare `name` selector text."""

        normalized = normalize_optional_string(text)
        if normalized is None:
            raise ValueError("Binary name selector must be a non-empty string.")
        owner, slash, name = normalized.partition("/")
        if not slash:
            return cls(name=normalized)
        if not owner.strip() or not name.strip():
            raise ValueError(
                f"Invalid binary name selector `{text}`; expected `owner/name` or `name`."
            )
        return cls(name=name.strip(), owner=owner.strip())

    def __str__(self) -> str:
        if self.owner is None:
            return self.name
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True, slots=True)
class VersionSelector:
    """Version-range constraint keeping its original text for display.

    Attributes:
        text: Selector text as written by the user.
        exact: Exact version for pinned selectors.
        comparators: Range bounds for partial, caret, tilde, or comparator-set selectors.
    """

    text: str
    exact: Version | None = None
    comparators: tuple[VersionComparator, ...] | None = None

    @classmethod
    def parse(cls, text: str) -> VersionSelector:
        """Parse selector text; see `parse_version_range` for accepted forms."""

        parsed = parse_version_range(text)
        display = text.strip() or "*"
        if isinstance(parsed, Version):
            return cls(text=display, exact=parsed)
        return cls(text=display, comparators=parsed)

    @property
    def is_any(self) -> bool:
        """Return whether every version satisfies this selector."""

        return self.exact is None and self.comparators is None

    def matches(self, version: Version) -> bool:
        """Return whether a version satisfies this selector."""

        if self.exact is not None:
            return version == self.exact
        if self.comparators is None:
            return True
        return comparators_match(self.comparators, version)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class BinaryCommand:
    """Named entry point and its path relative to the binary install directory."""

    name: CommandName
    path: str


@dataclass(frozen=True, slots=True)
class BinaryManifestItem:
    """One installed binary as recorded in the manifest.

    Attributes:
        name: Owner-qualified binary name.
        version: Installed semantic version.
        commands: Ordered commands provided by the binary.
    """

    name: BinaryName
    version: Version
    commands: tuple[BinaryCommand, ...] = field(default_factory=tuple)

    @property
    def identifier(self) -> BinaryIdentifier:
        """Return the fully-qualified identifier of this binary."""

        return BinaryIdentifier(owner=self.name.owner, name=self.name.name, version=self.version)

    def comparison_key(self) -> tuple[str, Version]:
        """Return the ordering key used for "latest" picks and display sorting."""

        return (self.name.name, self.version)

    def get_command(self, command_name: CommandName) -> BinaryCommand | None:
        """Return the first registered command with the given name."""

        for command in self.commands:
            if command.name == command_name:
                return command
        return None

    def has_command(self, command_name: CommandName) -> bool:
        """Return whether this binary provides the given command."""

        return self.get_command(command_name) is not None


@dataclass(frozen=True, slots=True)
class PathBinaryLocation:
    """Global binding that delegates a command to the system PATH."""


@dataclass(frozen=True, slots=True)
class BvmBinaryLocation:
    """Global binding that pins a command to one installed binary."""

    identifier: BinaryIdentifier


GlobalBinaryLocation = Union[PathBinaryLocation, BvmBinaryLocation]


@dataclass(frozen=True, slots=True)
class ConfigFileBinary:
    """Project-level binary declaration.

    Attributes:
        path: URL or path of the plugin file identifying the binary.
        version: Optional version range used when the pinned URL is not installed.
        checksum: Optional checksum declared alongside the URL.
    """

    path: str
    version: VersionSelector | None = None
    checksum: str | None = None


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """Loaded project configuration file."""

    binaries: tuple[ConfigFileBinary, ...]
    source_path: Path | None = None
