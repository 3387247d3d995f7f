"""Structured resolution logging utilities.

Responsibilities:
- Emit concise, deterministic resolution-level logs through `loguru`.
- Keep stdout free for resolved paths by writing to stderr by default.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/", "@"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class ResolutionLogger:
    """Emit deterministic logs for command and binary resolution activity."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Initialize logger sink and configure deterministic formatting."""

        self._sink = sink or sys.stderr
        _loguru_logger.remove()
        _loguru_logger.add(self._sink, format="{message}", level=level, colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured resolution log line."""

        line = f"[resolve] level={level} stage={stage} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_resolution_start(self, stage: str, **context: object) -> None:
        """Emit a resolution-start event."""

        self._emit("DEBUG", "start", stage, **context)

    def log_resolution_complete(self, stage: str, **context: object) -> None:
        """Emit a resolution-complete event."""

        self._emit("INFO", "complete", stage, **context)

    def log_resolution_failure(self, stage: str, error_kind: str, **context: object) -> None:
        """Emit a resolution-failure event without user-facing message payloads."""

        self._emit("WARNING", "failure", stage, error_kind=error_kind, **context)
