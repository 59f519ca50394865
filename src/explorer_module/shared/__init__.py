"""Shared modules for explorer-module.

This module provides functionality used by both the lifecycle core
and the command-line surface:
- Paths (module data directory layout)
- Logging (structlog configuration)
"""

from .logging import configure_logging, get_logger
from .paths import EXPLORER_DIR, LOG_DIR, SETTINGS_FILE, ensure_dirs

__all__ = [
    # Paths
    "EXPLORER_DIR",
    "SETTINGS_FILE",
    "LOG_DIR",
    "ensure_dirs",
    # Logging
    "configure_logging",
    "get_logger",
]
