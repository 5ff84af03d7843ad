"""Docker engine connector."""

import asyncio
import logging
import random
import ssl
from functools import wraps
from pathlib import Path

import httpx

from .config import SetupConfig
from .constants import NATIVE_HOSTS, TLS_CA_FILE_NAME, TLS_CERT_FILE_NAME, TLS_KEY_FILE_NAME
from .exceptions import EngineBindError

logger = logging.getLogger(__name__)

logging.getLogger("httpcore.connection").setLevel(logging.ERROR)
logging.getLogger("httpcore.http11").setLevel(logging.ERROR)


def retry_on_failure(max_retries=3, base_delay=0.1):
    """Decorator to retry operations with exponential backoff."""

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except (httpx.ConnectError, httpx.TimeoutException):
                    if attempt == max_retries:
                        raise
                    delay = base_delay * (2**attempt) + random.uniform(0, 0.1)
                    await asyncio.sleep(delay)
            return None

        return wrapper

    return decorator


class DockerEngine:
    """Client for the Docker engine API, bound either to the host socket or to a VM."""

    def __init__(self, config: SetupConfig):
        self.config = config
        self._client: httpx.AsyncClient | None = None
        self._stale_clients: list[httpx.AsyncClient] = []
        self.host: str | None = None
        self.machine_name: str | None = None

    @property
    def is_bound(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise EngineBindError("Engine client is not bound")
        return self._client

    def _tls_context(self, machine_name: str) -> ssl.SSLContext:
        """Build a TLS context from the certificates docker-machine generated."""
        cert_dir = self.config.machine_storage_directory / machine_name
        ca_file: Path = cert_dir / TLS_CA_FILE_NAME
        cert_file: Path = cert_dir / TLS_CERT_FILE_NAME
        key_file: Path = cert_dir / TLS_KEY_FILE_NAME

        missing = [str(path) for path in (ca_file, cert_file, key_file) if not path.is_file()]
        if missing:
            raise EngineBindError(
                f"Missing TLS certificates for machine {machine_name}:\n" + "\n".join(missing)
            )

        try:
            context = ssl.create_default_context(cafile=str(ca_file))
            context.load_cert_chain(certfile=str(cert_file), keyfile=str(key_file))
        except (ssl.SSLError, OSError) as e:
            raise EngineBindError(f"Invalid TLS certificates for machine {machine_name}: {e}")
        return context

    def setup(self, host: str, machine_name: str) -> None:
        """Bind the engine client to a host.

        Native hosts are reached through the local engine socket, anything else is
        treated as a docker-machine VM address reachable over TLS.

        Raises:
            EngineBindError: If the client cannot be configured for the host
        """
        if not host:
            raise EngineBindError("Cannot bind engine client: empty host")

        if host in NATIVE_HOSTS:
            transport = httpx.AsyncHTTPTransport(uds=str(self.config.socket_path))
            client = httpx.AsyncClient(
                transport=transport,
                base_url=f"http://{host}",
                timeout=httpx.Timeout(5.0, connect=2.0),
            )
        else:
            context = self._tls_context(machine_name)
            client = httpx.AsyncClient(
                base_url=f"https://{host}:{self.config.engine_tls_port}",
                verify=context,
                timeout=httpx.Timeout(5.0, connect=2.0),
            )

        if self._client is not None:
            self._stale_clients.append(self._client)
        self._client = client
        self.host = host
        self.machine_name = machine_name
        logger.info(f"Engine client bound to {host} (machine: {machine_name})")

    @retry_on_failure(max_retries=2, base_delay=0.1)
    async def ping(self) -> bool:
        """Check that the bound engine answers its ping endpoint."""
        try:
            response = await self.client.get("/_ping")
        except (httpx.ConnectError, httpx.TimeoutException):
            raise
        except httpx.HTTPError as e:
            logger.debug(f"Engine ping failed: {e}")
            return False
        return response.status_code == 200

    async def close(self) -> None:
        """Close HTTP client and cleanup resources."""
        for client in self._stale_clients:
            await client.aclose()
        self._stale_clients.clear()

        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
