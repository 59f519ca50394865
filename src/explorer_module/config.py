"""Module settings management.

Handles user settings stored in ~/.explorer-module/settings.yaml.
Supports environment variable overrides; environment wins over the file,
the file wins over defaults.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .shared.logging import get_logger
from .shared.paths import EXPLORER_DIR, SETTINGS_FILE

logger = get_logger(__name__)

# Default values
DEFAULT_RPC_URL = "http://127.0.0.1:8011"
DEFAULT_CHAIN_ID = 260
DEFAULT_NETWORK_NAME = "In-memory node"
DEFAULT_REGISTRY = "matterlabs"
DEFAULT_PROJECT_NAME = "zkcli-block-explorer"
DEFAULT_APP_PORT = 3010
DEFAULT_API_PORT = 3020
DEFAULT_POLL_INTERVAL = 1.0

# Where the active network comes from: static settings or the RPC endpoint
NETWORK_SOURCES = ("settings", "rpc")

# Environment variable mappings
ENV_VARS = {
    "data_dir": "EXPLORER_DATA_DIR",
    "rpc_url": "EXPLORER_RPC_URL",
    "chain_id": "EXPLORER_CHAIN_ID",
    "network_name": "EXPLORER_NETWORK_NAME",
    "network_source": "EXPLORER_NETWORK_SOURCE",
    "registry": "EXPLORER_REGISTRY",
    "project_name": "EXPLORER_PROJECT_NAME",
    "app_port": "EXPLORER_APP_PORT",
    "api_port": "EXPLORER_API_PORT",
    "poll_interval": "EXPLORER_POLL_INTERVAL",
    "reset_state_on_start": "EXPLORER_RESET_STATE_ON_START",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ModuleSettings:
    """Settings for the explorer module."""

    data_dir: Path = field(default_factory=lambda: EXPLORER_DIR)
    rpc_url: str = DEFAULT_RPC_URL
    chain_id: int = DEFAULT_CHAIN_ID
    network_name: str = DEFAULT_NETWORK_NAME
    network_source: str = NETWORK_SOURCES[0]
    registry: str = DEFAULT_REGISTRY
    project_name: str = DEFAULT_PROJECT_NAME
    app_port: int = DEFAULT_APP_PORT
    api_port: int = DEFAULT_API_PORT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    reset_state_on_start: bool = True

    # Track where each value came from
    _sources: dict[str, str] = field(default_factory=dict)

    def get_source(self, key: str) -> str:
        """Get the source of a settings value."""
        return self._sources.get(key, "default")

    @property
    def api_url(self) -> str:
        """Base URL of the explorer API on the host."""
        return f"http://localhost:{self.api_port}"

    def as_dict(self) -> dict[str, Any]:
        """Public settings as a plain dict (for display)."""
        return {key: getattr(self, key) for key in ENV_VARS}


def _coerce(key: str, raw: Any) -> Any:
    """Convert a raw file/env value to the type of the settings field."""
    field_type = {f.name: f.type for f in fields(ModuleSettings)}[key]
    if field_type in ("int", int):
        return int(raw)
    if field_type in ("float", float):
        return float(raw)
    if field_type in ("bool", bool):
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() in _TRUE_VALUES
    if field_type in ("Path", Path):
        return Path(raw).expanduser()
    if key == "network_source" and str(raw) not in NETWORK_SOURCES:
        raise ValueError(f"network_source must be one of {NETWORK_SOURCES}: {raw!r}")
    return str(raw)


def load_settings(settings_path: Path | None = None) -> ModuleSettings:
    """Load module settings.

    Precedence (highest to lowest):
    1. Environment variables
    2. Settings file (~/.explorer-module/settings.yaml)
    3. Defaults

    Args:
        settings_path: Override for the settings file location

    Returns:
        ModuleSettings with values and sources
    """
    settings = ModuleSettings()
    sources: dict[str, str] = {key: "default" for key in ENV_VARS}

    path = settings_path or SETTINGS_FILE
    if path.exists():
        try:
            with open(path) as f:
                file_settings = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("settings_file_unreadable", path=str(path), error=str(e))
            file_settings = {}
        if not isinstance(file_settings, dict):
            file_settings = {}

        for key in ENV_VARS:
            if key in file_settings:
                try:
                    setattr(settings, key, _coerce(key, file_settings[key]))
                    sources[key] = "settings file"
                except (TypeError, ValueError):
                    logger.warning("invalid_setting", key=key, value=file_settings[key])

    for key, env_var in ENV_VARS.items():
        if os.environ.get(env_var):
            try:
                setattr(settings, key, _coerce(key, os.environ[env_var]))
                sources[key] = "environment"
            except ValueError:
                logger.warning("invalid_setting", key=key, env_var=env_var)

    settings._sources = sources
    return settings
