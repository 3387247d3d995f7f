"""Top-level package for bvm.

This package resolves which installed binary, or which executable on the
system PATH, a command should launch. The main entry points are
`resolve_global_command_path` and `get_binary_with_name_and_version`.
"""

from .manifest import BinaryManifest
from .resolution import (
    get_binary_with_name_and_version,
    get_installed_binary_for_config_binary,
    resolve_global_command_path,
)

__all__ = [
    "BinaryManifest",
    "__version__",
    "get_binary_with_name_and_version",
    "get_installed_binary_for_config_binary",
    "resolve_global_command_path",
]

__version__ = "0.1.0"
