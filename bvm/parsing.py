"""Shared parsing helpers for config values, SemVer versions, and version ranges."""

from __future__ import annotations

from dataclasses import dataclass
import operator
import re
from typing import Callable

from semver import Version


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})
_ANY_VERSION_TOKENS = frozenset({"", "*", "x", "latest"})
_WILDCARD_TOKENS = frozenset({"x", "X", "*"})
_PARTIAL_VERSION_PATTERN = re.compile(
    r"^v?(?P<major>\d+|[xX*])(?:\.(?P<minor>\d+|[xX*]))?(?:\.(?P<patch>\d+|[xX*]))?$"
)
_COMPARATOR_PATTERN = re.compile(r"^(?P<op>>=|<=|==|!=|>|<|=)?(?P<version>[^<>=!]+)$")
_OPERATOR_SPACING_PATTERN = re.compile(r"(>=|<=|==|!=|>|<|=)\s+")
_OPERATORS: dict[str, Callable[[Version, Version], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
    "==": operator.eq,
    "!=": operator.ne,
}

Partial = tuple[int | None, int | None, int | None]


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_required_boolean(value: str, field_name: str) -> bool:
    """Parse a required boolean value from accepted textual tokens.

    Raises:
        ValueError: If the token is not one of the accepted boolean values.
    """

    parsed = parse_permissive_boolean(value)
    if parsed is not None:
        return parsed

    raise ValueError(
        f"`{field_name}` must be a boolean value (`true`/`false`, `1`/`0`, `yes`/`no`)."
    )


@dataclass(frozen=True, slots=True)
class VersionComparator:
    """One `<operator> <version>` bound of a version range."""

    operator: str
    version: Version

    def matches(self, version: Version) -> bool:
        """Return whether a version satisfies this bound."""

        return _OPERATORS[self.operator](version, self.version)

    def __str__(self) -> str:
        return f"{self.operator}{self.version}"


def comparators_match(comparators: tuple[VersionComparator, ...], version: Version) -> bool:
    """Return whether a version satisfies every comparator of a range.

    Prerelease versions only satisfy a range when one of its comparators names a
    prerelease of the same `major.minor.patch`.
    """

    if not all(comparator.matches(version) for comparator in comparators):
        return False
    if version.prerelease is None:
        return True
    release = (version.major, version.minor, version.patch)
    return any(
        comparator.version.prerelease is not None
        and (comparator.version.major, comparator.version.minor, comparator.version.patch)
        == release
        for comparator in comparators
    )


def parse_version(value: object) -> Version:
    """Parse a SemVer version such as `1.2.0` or `1.2.0-beta.1`.

    A leading `v` is accepted. The parsed version renders back to the same text,
    so it is safe to use in install directory names.

    Raises:
        ValueError: If the value is blank or not a valid SemVer version.
    """

    text = normalize_optional_string(value)
    if text is None:
        raise ValueError("Version must be a non-empty string.")
    try:
        return Version.parse(text.removeprefix("v"))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid version `{text}`.") from exc


def parse_version_range(text: str) -> Version | tuple[VersionComparator, ...] | None:
    """Parse a version selector expression into an exact version or a range.

    Accepted forms:
    - `*`, `x`, `latest`, or blank: any version (`None`).
    - `1.2.3` or `=1.2.3`: exact version.
    - `1`, `1.x`, `1.2`, `1.2.*`: any version on that major / minor line.
    - `^1.2.3`: no change to the leftmost non-zero component (`^0.0.3` is `<0.0.4`).
    - `~1.2.3`: versions on the same minor line.
    - Comparator sets joined by spaces or commas: `>=1.2.0 <2.0.0`, `>=1.2,<2`.

    Raises:
        ValueError: If the expression cannot be parsed.
    """

    token = text.strip()
    if token.lower() in _ANY_VERSION_TOKENS:
        return None

    try:
        if token.startswith("^"):
            return _caret_range(token[1:].strip())
        if token.startswith("~"):
            return _tilde_range(token[1:].strip())

        parts = [
            part
            for part in re.split(r"[\s,]+", _OPERATOR_SPACING_PATTERN.sub(r"\1", token))
            if part
        ]
        if len(parts) == 1:
            match = _COMPARATOR_PATTERN.match(parts[0])
            if match is not None and match.group("op") in {None, "=", "=="}:
                return _bare_range(match.group("version"))

        comparators: list[VersionComparator] = []
        for part in parts:
            comparators.extend(_comparator_bounds(part))
    except ValueError as exc:
        raise ValueError(f"Invalid version selector `{token}`.") from exc

    if not comparators:
        return None
    return tuple(comparators)


def _parse_partial(text: str) -> Version | Partial:
    """Parse a full version, or a partial one whose missing parts are `None`."""

    match = _PARTIAL_VERSION_PATTERN.match(text)
    if match is None:
        return parse_version(text)

    parts: list[int | None] = []
    for group in ("major", "minor", "patch"):
        value = match.group(group)
        if value is None or value in _WILDCARD_TOKENS:
            break
        parts.append(int(value))
    if len(parts) == 3:
        return parse_version(text)
    parts.extend([None] * (3 - len(parts)))
    return (parts[0], parts[1], parts[2])


def _bounds(lower: Version, upper: Version) -> tuple[VersionComparator, ...]:
    """Return an inclusive-lower, exclusive-upper range."""

    return (VersionComparator(">=", lower), VersionComparator("<", upper))


def _bare_range(text: str) -> Version | tuple[VersionComparator, ...] | None:
    """Parse a version or partial version without an operator."""

    parsed = _parse_partial(text)
    if isinstance(parsed, Version):
        return parsed
    major, minor, _ = parsed
    if major is None:
        return None
    if minor is None:
        return _bounds(Version(major), Version(major + 1))
    return _bounds(Version(major, minor), Version(major, minor + 1))


def _caret_range(text: str) -> tuple[VersionComparator, ...] | None:
    """Parse a caret range, allowing changes right of the leftmost non-zero part."""

    parsed = _parse_partial(text)
    if isinstance(parsed, Version):
        if parsed.major > 0:
            upper = Version(parsed.major + 1)
        elif parsed.minor > 0:
            upper = Version(0, parsed.minor + 1)
        else:
            upper = Version(0, 0, parsed.patch + 1)
        return _bounds(parsed, upper)

    major, minor, _ = parsed
    if major is None:
        return None
    if minor is None or major > 0:
        return _bounds(Version(major, minor or 0), Version(major + 1))
    return _bounds(Version(0, minor), Version(0, minor + 1))


def _tilde_range(text: str) -> tuple[VersionComparator, ...] | None:
    """Parse a tilde range, allowing patch-level changes."""

    parsed = _parse_partial(text)
    if isinstance(parsed, Version):
        return _bounds(parsed, Version(parsed.major, parsed.minor + 1))

    major, minor, _ = parsed
    if major is None:
        return None
    if minor is None:
        return _bounds(Version(major), Version(major + 1))
    return _bounds(Version(major, minor), Version(major, minor + 1))


def _comparator_bounds(part: str) -> tuple[VersionComparator, ...]:
    """Parse one `<op><version>` comparator, expanding partial versions."""

    match = _COMPARATOR_PATTERN.match(part)
    if match is None:
        raise ValueError(f"Invalid comparator `{part}`.")

    op = match.group("op") or "=="
    op = "==" if op == "=" else op
    parsed = _parse_partial(match.group("version"))
    if isinstance(parsed, Version):
        return (VersionComparator(op, parsed),)

    major, minor, _ = parsed
    if major is None:
        if op in {"<", "!="}:
            raise ValueError(f"Comparator `{part}` matches no version.")
        return ()
    lower = Version(major, minor or 0)
    upper = Version(major + 1) if minor is None else Version(major, minor + 1)
    if op == "==":
        return _bounds(lower, upper)
    if op == ">=" or op == "<":
        return (VersionComparator(op, lower),)
    if op == ">":
        return (VersionComparator(">=", upper),)
    if op == "<=":
        return (VersionComparator("<", upper),)
    raise ValueError(f"Comparator `{part}` needs a full version.")
