"""Persisted module configuration.

Stores the installed version together with the network it was installed
for. Both are written in a single atomic file replace so a crash between
steps never leaves a half-populated record.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ..shared.logging import get_logger
from .network import NetworkDescriptor

logger = get_logger(__name__)

MODULE_CONFIG_FILE = "module-config.yaml"


@dataclass
class ModuleConfig:
    """Installed version and network of the module."""

    version: str | None = None
    network: NetworkDescriptor | None = None

    @property
    def is_complete(self) -> bool:
        """Whether both version and network are recorded."""
        return bool(self.version) and self.network is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.version:
            data["version"] = self.version
        if self.network is not None:
            data["network"] = self.network.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ModuleConfig:
        version = data.get("version")
        return cls(
            version=str(version) if version else None,
            network=NetworkDescriptor.from_dict(data.get("network")),
        )


class ModuleConfigStore:
    """Read and write ModuleConfig as YAML in the module data directory."""

    def __init__(self, base_dir: Path):
        self.config_file = base_dir / MODULE_CONFIG_FILE

    def get(self) -> ModuleConfig:
        """Load the stored config; an empty config if none was saved."""
        if not self.config_file.exists():
            return ModuleConfig()

        with open(self.config_file) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            logger.warning("module_config_ignored", path=str(self.config_file))
            return ModuleConfig()
        return ModuleConfig.from_dict(data)

    def set(self, config: ModuleConfig) -> None:
        """Replace the stored config atomically."""
        self.config_file.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            dir=self.config_file.parent, prefix=".module-config.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_path, self.config_file)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

        logger.debug("module_config_saved", path=str(self.config_file), version=config.version)
