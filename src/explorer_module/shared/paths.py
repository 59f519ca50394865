"""Path management for explorer-module.

Manages the ~/.explorer-module/ directory structure used as the module's
writable data directory.
"""

from pathlib import Path

# Base directory for all module data
EXPLORER_DIR = Path.home() / ".explorer-module"

# User settings file (optional, see config.py)
SETTINGS_FILE = EXPLORER_DIR / "settings.yaml"

# Log directory (same as base for simplicity)
LOG_DIR = EXPLORER_DIR


def ensure_dirs(base_dir: Path | None = None) -> Path:
    """Create the data directory if missing.

    Args:
        base_dir: Data directory to create (default: EXPLORER_DIR)

    Returns:
        The data directory path
    """
    target = base_dir or EXPLORER_DIR
    target.mkdir(mode=0o700, parents=True, exist_ok=True)
    return target


def get_log_file(name: str = "explorer") -> Path:
    """Get path to a log file.

    Args:
        name: Log file name (without extension)

    Returns:
        Path to the log file
    """
    return LOG_DIR / f"{name}.log"
