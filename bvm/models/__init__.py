"""Shared typed data models for bvm.

This package contains dataclasses used across resolution modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    BinaryCommand,
    BinaryIdentifier,
    BinaryManifestItem,
    BinaryName,
    BvmBinaryLocation,
    CommandName,
    ConfigFileBinary,
    GlobalBinaryLocation,
    NameSelector,
    PathBinaryLocation,
    ProjectConfig,
    VersionSelector,
)

__all__ = [
    "BinaryCommand",
    "BinaryIdentifier",
    "BinaryManifestItem",
    "BinaryName",
    "BvmBinaryLocation",
    "CommandName",
    "ConfigFileBinary",
    "GlobalBinaryLocation",
    "NameSelector",
    "PathBinaryLocation",
    "ProjectConfig",
    "VersionSelector",
]
