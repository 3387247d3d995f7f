"""Telemetry scaffolds.

This package records resolution events for deterministic auditing.
"""

from .logger import ResolutionLogger

__all__ = ["ResolutionLogger"]
