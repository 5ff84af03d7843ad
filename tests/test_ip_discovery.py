"""Tests for VM IP discovery polling."""

from unittest.mock import AsyncMock, patch

import pytest

from engine_bootstrap.exceptions import IpDiscoveryError, VmTransitionError
from engine_bootstrap.ip_discovery import IPDiscovery


class TestIPDiscovery:
    @pytest.mark.asyncio
    async def test_returns_first_address(self):
        fetch_ip = AsyncMock(return_value="192.168.99.100\n")
        discovery = IPDiscovery(fetch_ip, attempts=80, interval=0)

        assert await discovery.discover_ip() == "192.168.99.100"
        assert fetch_ip.await_count == 1

    @pytest.mark.asyncio
    async def test_errors_consume_attempts(self):
        fetch_ip = AsyncMock(
            side_effect=[VmTransitionError("not running"), "", "192.168.99.101"]
        )
        discovery = IPDiscovery(fetch_ip, attempts=80, interval=0)

        assert await discovery.discover_ip() == "192.168.99.101"
        assert fetch_ip.await_count == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_80_attempts(self):
        fetch_ip = AsyncMock(side_effect=VmTransitionError("Host is not running"))
        discovery = IPDiscovery(fetch_ip)

        with patch("engine_bootstrap.ip_discovery.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(IpDiscoveryError, match="Could not determine IP"):
                await discovery.discover_ip()

        assert fetch_ip.await_count == 80
        # One delay between consecutive attempts
        assert sleep.await_count == 79
        sleep.assert_awaited_with(1.0)

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self):
        fetch_ip = AsyncMock(side_effect=ValueError("bad"))
        discovery = IPDiscovery(fetch_ip, attempts=3, interval=0)

        with pytest.raises(ValueError):
            await discovery.discover_ip()
        assert fetch_ip.await_count == 1
