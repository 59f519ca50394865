"""Readiness polling for the explorer stack.

This module waits until the explorer API has indexed up to the current
height of the target network.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx

from ..errors import ReadinessError
from ..shared.logging import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class SyncResult:
    """Result of waiting for readiness convergence."""

    synced: bool
    indexed_height: int | None = None
    target_height: int | None = None
    attempts: int = 0
    elapsed_seconds: float = 0.0


def parse_block_number(raw: Any) -> int:
    """Parse a JSON-RPC quantity (hex string) or decimal number.

    Raises:
        ValueError: If the value is not a valid block number.
    """
    if isinstance(raw, bool):
        raise ValueError(f"not a block number: {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if text.lower().startswith("0x"):
            return int(text, 16)
        return int(text)
    raise ValueError(f"not a block number: {raw!r}")


class ReadinessMonitor:
    """Poll explorer and network heights until they converge."""

    def __init__(
        self,
        api_url: str = "http://localhost:3020",
        interval_seconds: float = 1.0,
        timeout_seconds: float = 5.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize readiness monitor.

        Args:
            api_url: Base URL of the explorer API.
            interval_seconds: Seconds between attempts.
            timeout_seconds: Timeout for each HTTP request.
            sleep: Coroutine used to wait between attempts.
        """
        self.api_url = api_url.rstrip("/")
        self.interval_seconds = interval_seconds
        self.timeout_seconds = timeout_seconds
        self.sleep = sleep

    async def get_indexed_height(self, client: httpx.AsyncClient) -> int:
        """Latest block number the explorer API has indexed."""
        response = await client.get(f"{self.api_url}/blocks", params={"page": 1, "limit": 1})
        response.raise_for_status()
        items = response.json()["items"]
        return parse_block_number(items[0]["number"])

    async def get_target_height(self, client: httpx.AsyncClient, rpc_url: str) -> int:
        """Latest block number of the target network.

        Raises:
            ReadinessError: If the RPC call fails or returns a non-number.
        """
        payload = {"jsonrpc": "2.0", "id": 1, "method": "eth_blockNumber", "params": []}
        body: Any = None
        try:
            response = await client.post(rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
            return parse_block_number(body["result"])
        except httpx.HTTPError as e:
            raise ReadinessError(
                message=f"Failed to query block number from {rpc_url}: {e}",
                data={"url": rpc_url},
            ) from e
        except (ValueError, KeyError, TypeError) as e:
            raise ReadinessError(
                message=f"Unexpected block number response from {rpc_url}: {body!r}",
                data={"url": rpc_url, "payload": body},
            ) from e

    async def wait_for_sync(
        self,
        rpc_url: str,
        on_progress: ProgressCallback | None = None,
        max_iterations: int | None = None,
    ) -> SyncResult:
        """Poll until indexed height equals target height.

        Explorer API failures are retried silently; network failures abort.

        Args:
            rpc_url: JSON-RPC URL of the target network.
            on_progress: Optional callback called with (indexed, target)
                        when heights differ.
            max_iterations: Stop after this many attempts (unbounded if None).

        Returns:
            SyncResult; synced is False only when max_iterations ran out.

        Raises:
            ReadinessError: If the target network height cannot be read.
        """
        start = datetime.now()
        attempt = 0
        indexed: int | None = None
        target: int | None = None

        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            while max_iterations is None or attempt < max_iterations:
                attempt += 1

                try:
                    indexed = await self.get_indexed_height(client)
                except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as e:
                    logger.debug("explorer_api_not_ready", attempt=attempt, error=str(e))
                    await self.sleep(self.interval_seconds)
                    continue

                target = await self.get_target_height(client, rpc_url)

                if indexed == target:
                    elapsed = (datetime.now() - start).total_seconds()
                    logger.info("explorer_synced", height=target, attempts=attempt)
                    return SyncResult(True, indexed, target, attempt, elapsed)

                if on_progress:
                    on_progress(indexed, target)
                await self.sleep(self.interval_seconds)

        elapsed = (datetime.now() - start).total_seconds()
        return SyncResult(False, indexed, target, attempt, elapsed)
