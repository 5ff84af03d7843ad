"""IP discovery by polling docker-machine for engine bootstrap."""

import asyncio
import logging
from typing import Awaitable, Callable

from .constants import IP_DISCOVERY_FAILED_MESSAGE, IP_POLL_ATTEMPTS, IP_POLL_INTERVAL
from .exceptions import IpDiscoveryError, VmTransitionError

logger = logging.getLogger(__name__)


class IPDiscovery:
    """Polls the VM for its IP address with a bounded number of attempts."""

    def __init__(
        self,
        fetch_ip: Callable[[], Awaitable[str]],
        attempts: int = IP_POLL_ATTEMPTS,
        interval: float = IP_POLL_INTERVAL,
    ):
        """Initialize IP discovery.

        Args:
            fetch_ip: Coroutine function returning the VM address, e.g. `DockerMachine.ip`
            attempts: Maximum number of calls to `fetch_ip`
            interval: Delay between attempts in seconds
        """
        self.fetch_ip = fetch_ip
        self.attempts = attempts
        self.interval = interval

    async def discover_ip(self) -> str:
        """Discover the VM IP address.

        Returns:
            The first non-empty address reported

        Raises:
            IpDiscoveryError: If no address was obtained within the attempt budget
        """
        tries = self.attempts
        while tries > 0:
            logger.debug(f"Trying to fetch machine IP, tries left: {tries}")
            tries -= 1

            try:
                ip = (await self.fetch_ip()).strip()
            except (VmTransitionError, OSError) as e:
                # Failed attempts only consume the budget
                logger.debug(f"Machine IP query failed: {e}")
                ip = ""

            if ip:
                logger.info(f"Discovered machine IP: {ip}")
                return ip

            if tries > 0:
                await asyncio.sleep(self.interval)

        raise IpDiscoveryError(IP_DISCOVERY_FAILED_MESSAGE)
