"""Target network resolution.

The active network is whatever the host reports through a node-info
provider. Two providers ship with the module: one reading static settings
and one asking the RPC endpoint for its chain id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import urlparse

import httpx

from ..errors import NetworkQueryError
from ..shared.logging import get_logger

logger = get_logger(__name__)

DEFAULT_RPC_PORT = 3050


@dataclass(frozen=True)
class NetworkDescriptor:
    """Identity of the network a stack indexes."""

    chain_id: int
    rpc_url: str
    name: str = field(default="", compare=False)

    @property
    def rpc_port(self) -> int:
        """Port of the RPC URL, or DEFAULT_RPC_PORT when none is given."""
        return urlparse(self.rpc_url).port or DEFAULT_RPC_PORT

    def to_dict(self) -> dict[str, Any]:
        """Serialize for persisted module config."""
        return {"chainId": self.chain_id, "rpcUrl": self.rpc_url}

    @classmethod
    def from_dict(cls, data: Any) -> NetworkDescriptor | None:
        """Deserialize from persisted module config; None if incomplete."""
        if not isinstance(data, dict):
            return None
        chain_id = data.get("chainId")
        rpc_url = data.get("rpcUrl")
        if chain_id is None or not rpc_url:
            return None
        return cls(chain_id=int(chain_id), rpc_url=str(rpc_url))


class NodeInfoProvider(Protocol):
    """Host capability that reports the configured network."""

    async def get_node_info(self) -> NetworkDescriptor: ...


class SettingsNodeInfoProvider:
    """Report a network fixed by configuration."""

    def __init__(self, rpc_url: str, chain_id: int, name: str = ""):
        self.network = NetworkDescriptor(chain_id=chain_id, rpc_url=rpc_url, name=name)

    async def get_node_info(self) -> NetworkDescriptor:
        return self.network


class RpcNodeInfoProvider:
    """Ask the RPC endpoint for its chain id via eth_chainId."""

    def __init__(self, rpc_url: str, name: str = "", timeout_seconds: float = 5.0):
        self.rpc_url = rpc_url
        self.name = name
        self.timeout_seconds = timeout_seconds

    async def get_node_info(self) -> NetworkDescriptor:
        payload = {"jsonrpc": "2.0", "id": 1, "method": "eth_chainId", "params": []}
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(self.rpc_url, json=payload)
                response.raise_for_status()
                data = response.json()
            chain_id = int(data["result"], 16)
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            raise NetworkQueryError(
                message=f"Failed to query chain id from {self.rpc_url}: {e}",
                data={"url": self.rpc_url},
            ) from e
        return NetworkDescriptor(chain_id=chain_id, rpc_url=self.rpc_url, name=self.name)


class NetworkResolver:
    """Resolve the currently configured target network."""

    def __init__(self, provider: NodeInfoProvider):
        self.provider = provider

    async def resolve(self) -> NetworkDescriptor:
        network = await self.provider.get_node_info()
        logger.debug("network_resolved", chain_id=network.chain_id, rpc_url=network.rpc_url)
        return network
