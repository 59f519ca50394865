"""Error types for the explorer module lifecycle.

Every failure the lifecycle controller surfaces is one of these classes,
so callers can branch on type instead of inspecting message text.
"""

from __future__ import annotations

import errno
from dataclasses import dataclass, field
from typing import Any

# Exit code reported by shells when an executable cannot be found
COMMAND_NOT_FOUND_EXIT_CODE = 127

PERMISSION_ERRNOS = (errno.EACCES, errno.EPERM)


@dataclass
class ExplorerModuleError(Exception):
    """Base error class for lifecycle errors."""

    message: str
    data: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


@dataclass
class ProvisioningPermissionError(ExplorerModuleError):
    """Provisioning files could not be written due to missing permissions."""

    message: str = (
        "Permission denied while writing Block Explorer files. "
        "Rerun the command with elevated privileges (e.g. sudo)."
    )


@dataclass
class CommandError(ExplorerModuleError):
    """External command exited with a non-zero status."""

    command: list[str] = field(default_factory=list)
    returncode: int = 1
    stderr: str = ""


@dataclass
class CommandNotFoundError(CommandError):
    """External command executable is not installed."""

    returncode: int = COMMAND_NOT_FOUND_EXIT_CODE


@dataclass
class VersionResolutionError(ExplorerModuleError):
    """Latest release tag could not be determined."""


@dataclass
class ReleaseLookupError(ExplorerModuleError):
    """Remote release listing could not be queried."""


@dataclass
class NetworkQueryError(ExplorerModuleError):
    """Target network RPC endpoint returned an error or malformed result."""


@dataclass
class ReadinessError(NetworkQueryError):
    """Target network height could not be queried or parsed."""


def is_permission_error(error: BaseException) -> bool:
    """Check whether an exception is a filesystem permission failure.

    Args:
        error: Exception raised while touching the filesystem

    Returns:
        True for PermissionError or an OSError carrying EACCES/EPERM
    """
    if isinstance(error, PermissionError):
        return True
    return isinstance(error, OSError) and error.errno in PERMISSION_ERRNOS
