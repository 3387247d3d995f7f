"""Unit tests for identifier, selector, and manifest item datatypes."""

from __future__ import annotations

import pytest
from semver import Version

from bvm.models.datatypes import (
    BinaryIdentifier,
    BinaryName,
    NameSelector,
    VersionSelector,
)


def test_binary_identifier_parse_and_display() -> None:
    """Identifiers should parse `owner/name@version` and render the same form."""

    identifier = BinaryIdentifier.parse("acme/fmt@1.2.0")

    assert identifier == BinaryIdentifier(
        owner="acme", name="fmt", version=Version.parse("1.2.0")
    )
    assert identifier.binary_name == BinaryName(owner="acme", name="fmt")
    assert str(identifier) == "acme/fmt@1.2.0"


@pytest.mark.parametrize("text", ["fmt@1.2.0", "acme/fmt", "/fmt@1.0.0", "acme/@1.0.0"])
def test_binary_identifier_parse_rejects_partial_text(text: str) -> None:
    """Identifiers missing owner, name, or version should be rejected."""

    with pytest.raises(ValueError):
        BinaryIdentifier.parse(text)


def test_name_selector_matches_short_name_with_optional_owner() -> None:
    """Owner-less selectors match any owner; qualified selectors match one owner."""

    acme = BinaryName(owner="acme", name="fmt")
    other = BinaryName(owner="other", name="fmt")

    assert NameSelector.parse("fmt").is_match(acme)
    assert NameSelector.parse("fmt").is_match(other)
    assert NameSelector.parse("acme/fmt").is_match(acme)
    assert not NameSelector.parse("acme/fmt").is_match(other)
    assert not NameSelector.parse("lint").is_match(acme)


def test_binary_name_to_selector_is_owner_qualified() -> None:
    """Selectors derived from a binary name should keep the owner constraint."""

    selector = BinaryName(owner="acme", name="fmt").to_selector()

    assert selector == NameSelector(name="fmt", owner="acme")
    assert str(selector) == "acme/fmt"


def test_binary_name_same_identity_compares_owner() -> None:
    """Names with different owners should not share identity."""

    assert BinaryName("acme", "fmt").same_identity(BinaryName("acme", "fmt"))
    assert not BinaryName("acme", "fmt").same_identity(BinaryName("other", "fmt"))


def test_version_selector_exact_range_and_any() -> None:
    """Version selectors should match exact pins, ranges, and wildcards."""

    exact = VersionSelector.parse("1.2.0")
    ranged = VersionSelector.parse("^1.2.0")
    wildcard = VersionSelector.parse("*")

    assert exact.matches(Version.parse("1.2.0"))
    assert not exact.matches(Version.parse("1.2.1"))
    assert ranged.matches(Version.parse("1.4.0"))
    assert not ranged.matches(Version.parse("2.0.0"))
    assert wildcard.is_any
    assert wildcard.matches(Version.parse("0.0.1"))
    assert str(ranged) == "^1.2.0"


def test_manifest_item_ordering_excludes_owner(make_binary) -> None:
    """Comparison keys should order by short name then version, ignoring owner."""

    older = make_binary("zeta", "fmt", "1.0.0")
    newer = make_binary("acme", "fmt", "1.10.0")

    assert older.comparison_key() < newer.comparison_key()
    assert make_binary("acme", "fmt", "1.0.0").comparison_key() == older.comparison_key()


def test_manifest_item_command_lookup(make_binary) -> None:
    """Items should find registered commands by name."""

    item = make_binary("acme", "fmt", "1.2.0", commands={"fmt": "fmt-bin", "fmtd": "daemon"})

    command = item.get_command("fmtd")

    assert command is not None and command.path == "daemon"
    assert item.has_command("fmt")
    assert not item.has_command("lint")
    assert str(item.identifier) == "acme/fmt@1.2.0"


def test_version_selector_keeps_prerelease_text() -> None:
    """Prerelease pins should match only themselves and display their original text."""

    selector = VersionSelector.parse("1.0.0-alpha.beta")
    identifier = BinaryIdentifier.parse("acme/fmt@1.2.0-beta.1")

    assert selector.matches(Version.parse("1.0.0-alpha.beta"))
    assert not selector.matches(Version.parse("1.0.0"))
    assert not VersionSelector.parse("^1.0.0").matches(Version.parse("1.2.0-beta.1"))
    assert str(identifier) == "acme/fmt@1.2.0-beta.1"
