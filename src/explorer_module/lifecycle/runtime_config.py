"""Runtime configuration injection for the explorer front-end.

The app image reads `window["##runtimeConfig"]` from a config.js file at
start-up, so the active network is written there after the container is
created instead of being baked into the image.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..shared.logging import get_logger
from .compose import ComposeClient, ComposeStack
from .network import NetworkDescriptor

logger = get_logger(__name__)

APP_SERVICE = "app"
CONFIG_FILE_NAME = "config.js"
CONTAINER_CONFIG_PATH = "/usr/src/app/packages/app/dist/config.js"
DEFAULT_NETWORK_NAME = "In-memory node"


@dataclass
class RuntimeConfigPayload:
    """Front-end runtime configuration with a single local network."""

    rpc_url: str
    l2_chain_id: int
    l2_network_name: str = DEFAULT_NETWORK_NAME
    api_url: str = "http://localhost:3020"
    app_environment: str = "default"
    hostnames: list[str] = field(default_factory=lambda: ["localhost"])
    icon: str = "/images/icons/zksync-arrows.svg"

    def to_dict(self) -> dict[str, Any]:
        return {
            "appEnvironment": self.app_environment,
            "environmentConfig": {
                "networks": [
                    {
                        "apiUrl": self.api_url,
                        "hostnames": self.hostnames,
                        "icon": self.icon,
                        "l2ChainId": self.l2_chain_id,
                        "l2NetworkName": self.l2_network_name,
                        "maintenance": False,
                        "name": "local",
                        "published": True,
                        "rpcUrl": self.rpc_url,
                    }
                ]
            },
        }

    def render(self) -> str:
        """Render as the assignment script the front-end loads."""
        return f'window["##runtimeConfig"] = {json.dumps(self.to_dict(), indent=2)};\n'


class RuntimeConfigInjector:
    """Write the runtime config and push it into the app container."""

    def __init__(self, compose: ComposeClient, api_url: str = "http://localhost:3020"):
        self.compose = compose
        self.api_url = api_url

    def build_payload(self, network: NetworkDescriptor) -> RuntimeConfigPayload:
        return RuntimeConfigPayload(
            rpc_url=network.rpc_url,
            l2_chain_id=network.chain_id,
            l2_network_name=network.name or DEFAULT_NETWORK_NAME,
            api_url=self.api_url,
        )

    async def inject(self, stack: ComposeStack, network: NetworkDescriptor) -> Path:
        """Render config.js locally and copy it into the app container.

        Raises:
            OSError: If the local file cannot be written.
            CommandError: If the copy into the container fails.
        """
        config_file = stack.compose_dir / CONFIG_FILE_NAME
        config_file.write_text(self.build_payload(network).render())

        container = stack.container_name(APP_SERVICE)
        await self.compose.copy_to_container(container, config_file, CONTAINER_CONFIG_PATH)
        logger.info("runtime_config_injected", container=container, chain_id=network.chain_id)
        return config_file
