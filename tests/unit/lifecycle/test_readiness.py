"""Unit tests for lifecycle readiness module."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from explorer_module.errors import ReadinessError
from explorer_module.lifecycle import ReadinessMonitor
from explorer_module.lifecycle.readiness import parse_block_number

RPC_URL = "http://127.0.0.1:8011"


def _api_response(number: int) -> MagicMock:
    response = MagicMock()
    response.json.return_value = {"items": [{"number": number}]}
    return response


def _rpc_response(result) -> MagicMock:
    response = MagicMock()
    response.json.return_value = {"jsonrpc": "2.0", "id": 1, "result": result}
    return response


class TestParseBlockNumber:
    """Tests for parse_block_number."""

    def test_hex_quantity(self):
        assert parse_block_number("0x1a") == 26

    def test_decimal(self):
        assert parse_block_number(42) == 42
        assert parse_block_number("42") == 42

    @pytest.mark.parametrize("raw", [None, "latest", "0xzz", True, 1.5, {}])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_block_number(raw)


class TestReadinessMonitor:
    """Tests for ReadinessMonitor."""

    def test_default_config(self):
        monitor = ReadinessMonitor()
        assert monitor.api_url == "http://localhost:3020"
        assert monitor.interval_seconds == 1.0

    @pytest.mark.asyncio
    async def test_synced_when_heights_match(self):
        sleep = AsyncMock()
        monitor = ReadinessMonitor(sleep=sleep)

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value.__aenter__.return_value = mock_client
            mock_client.get.return_value = _api_response(26)
            mock_client.post.return_value = _rpc_response("0x1a")

            result = await monitor.wait_for_sync(RPC_URL)

        assert result.synced is True
        assert result.indexed_height == result.target_height == 26
        assert result.attempts == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reports_progress_until_converged(self):
        sleep = AsyncMock()
        monitor = ReadinessMonitor(interval_seconds=0.5, sleep=sleep)
        progress = []

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value.__aenter__.return_value = mock_client
            mock_client.get.side_effect = [_api_response(5), _api_response(9), _api_response(10)]
            mock_client.post.side_effect = [
                _rpc_response("0xa"),
                _rpc_response("0xa"),
                _rpc_response("0xa"),
            ]

            result = await monitor.wait_for_sync(
                RPC_URL, on_progress=lambda indexed, target: progress.append((indexed, target))
            )

        assert result.synced is True
        assert result.attempts == 3
        assert progress == [(5, 10), (9, 10)]
        assert sleep.await_count == 2
        sleep.assert_awaited_with(0.5)

    @pytest.mark.asyncio
    async def test_retries_silently_while_api_unavailable(self):
        sleep = AsyncMock()
        monitor = ReadinessMonitor(sleep=sleep)
        progress = []

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value.__aenter__.return_value = mock_client
            mock_client.get.side_effect = [
                httpx.ConnectError("Connection refused"),
                httpx.ConnectError("Connection refused"),
                _api_response(3),
            ]
            mock_client.post.return_value = _rpc_response("0x3")

            result = await monitor.wait_for_sync(
                RPC_URL, on_progress=lambda *args: progress.append(args)
            )

        assert result.synced is True
        assert result.attempts == 3
        assert progress == []
        assert mock_client.post.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_block_list_is_retried(self):
        sleep = AsyncMock()
        monitor = ReadinessMonitor(sleep=sleep)

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value.__aenter__.return_value = mock_client
            empty = MagicMock()
            empty.json.return_value = {"items": []}
            mock_client.get.side_effect = [empty, _api_response(0)]
            mock_client.post.return_value = _rpc_response("0x0")

            result = await monitor.wait_for_sync(RPC_URL)

        assert result.synced is True
        assert sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_aborts_on_malformed_network_height(self):
        sleep = AsyncMock()
        monitor = ReadinessMonitor(sleep=sleep)

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value.__aenter__.return_value = mock_client
            mock_client.get.return_value = _api_response(1)
            mock_client.post.return_value = _rpc_response("not-a-number")

            with pytest.raises(ReadinessError) as exc_info:
                await monitor.wait_for_sync(RPC_URL)

        assert "not-a-number" in exc_info.value.message
        assert mock_client.post.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_aborts_on_network_failure(self):
        sleep = AsyncMock()
        monitor = ReadinessMonitor(sleep=sleep)

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value.__aenter__.return_value = mock_client
            mock_client.get.return_value = _api_response(1)
            mock_client.post.side_effect = httpx.ConnectError("Connection refused")

            with pytest.raises(ReadinessError):
                await monitor.wait_for_sync(RPC_URL)

        assert mock_client.post.await_count == 1

    @pytest.mark.asyncio
    async def test_bounded_iterations(self):
        sleep = AsyncMock()
        monitor = ReadinessMonitor(sleep=sleep)

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value.__aenter__.return_value = mock_client
            mock_client.get.return_value = _api_response(1)
            mock_client.post.return_value = _rpc_response("0x64")

            result = await monitor.wait_for_sync(RPC_URL, max_iterations=4)

        assert result.synced is False
        assert result.attempts == 4
        assert result.indexed_height == 1
        assert result.target_height == 100
