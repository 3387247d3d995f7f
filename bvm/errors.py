"""Domain errors and tagged failure results for binary resolution.

Responsibilities:
- Classify resolution failures by kind so callers can tell user errors from defects.
- Carry actionable detail, hint, and installed alternatives for CLI diagnostics.

Key types:
- `ResolutionErrorKind`: failure taxonomy.
- `ResolutionFailure`: immutable failure result returned by resolution helpers.
- `ResolutionError`: raised form used by loaders and the CLI layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar


T = TypeVar("T")


class ResolutionErrorKind(str, Enum):
    """Failure taxonomy for resolution, configuration, and manifest loading."""

    NOT_FOUND = "not_found"
    VERSION_MISMATCH = "version_mismatch"
    AMBIGUOUS_OWNER = "ambiguous_owner"
    STALE_BINDING = "stale_binding"
    DEFECT = "defect"
    CONFIG = "config"
    MANIFEST = "manifest"


class ResolutionError(RuntimeError):
    """Raised when a resolution, configuration, or manifest step fails."""

    def __init__(
        self,
        *,
        kind: ResolutionErrorKind,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a kind-scoped resolution error."""

        super().__init__(detail)
        self.kind = kind
        self.detail = detail
        self.hint = hint


@dataclass(frozen=True, slots=True)
class ResolutionFailure:
    """Expected, non-exceptional failure outcome of a resolution helper.

    Attributes:
        kind: Failure classification.
        detail: User-facing description including the selector involved.
        hint: Optional follow-up action for the user.
        installed_versions: Display lines for installed alternatives, if any.
    """

    kind: ResolutionErrorKind
    detail: str
    hint: str | None = None
    installed_versions: tuple[str, ...] = field(default_factory=tuple)

    @property
    def message(self) -> str:
        """Return detail text followed by the installed alternatives listing."""

        if not self.installed_versions:
            return self.detail
        listing = "\n  ".join(self.installed_versions)
        return f"{self.detail}\n\nInstalled versions:\n  {listing}"

    def to_error(self) -> ResolutionError:
        """Convert this failure into a raisable `ResolutionError`."""

        return ResolutionError(kind=self.kind, detail=self.message, hint=self.hint)


def unwrap_resolution(result: T | ResolutionFailure) -> T:
    """Return a successful resolution value or raise its failure as an error."""

    if isinstance(result, ResolutionFailure):
        raise result.to_error()
    return result
