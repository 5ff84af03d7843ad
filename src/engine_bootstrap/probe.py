"""Backend probing: platform detection and native socket checks."""

import logging
import os
import stat
import sys
from dataclasses import dataclass
from pathlib import Path

from .constants import DOCKER_SOCKET_PATH, NOT_A_SOCKET_MESSAGE
from .exceptions import SocketNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SocketStat:
    """Result of a socket path check."""

    path: Path
    is_socket: bool


def stat_socket(path: str | Path) -> SocketStat:
    """Stat a path and report whether it is a unix socket.

    Raises:
        SocketNotFoundError: If the path does not exist or cannot be inspected
    """
    socket_path = Path(path)
    try:
        path_stat = os.stat(socket_path)
    except FileNotFoundError:
        raise SocketNotFoundError(f"Socket not found: {socket_path}")
    except OSError as e:
        raise SocketNotFoundError(f"Cannot inspect socket {socket_path}: {e}")

    return SocketStat(path=socket_path, is_socket=stat.S_ISSOCK(path_stat.st_mode))


class BackendProbe:
    """Detects the host platform and whether the engine is natively reachable."""

    def __init__(self, socket_path: str | Path = DOCKER_SOCKET_PATH, platform: str | None = None):
        self.socket_path = Path(socket_path)
        self._platform = platform or sys.platform

    def platform_is_linux(self) -> bool:
        return self._platform.startswith("linux")

    def is_native_capable(self) -> bool:
        """Check whether the native backend should be tried first.

        Linux hosts always run the engine natively. Elsewhere the native path is
        only chosen when the engine socket is already present.
        """
        if self.platform_is_linux():
            return True
        try:
            return stat_socket(self.socket_path).is_socket
        except SocketNotFoundError:
            logger.debug(f"No native engine socket at {self.socket_path}")
            return False

    def check_socket(self) -> SocketStat:
        """Require the native engine socket to exist and be a socket."""
        socket_stat = stat_socket(self.socket_path)
        if not socket_stat.is_socket:
            raise SocketNotFoundError(f"{NOT_A_SOCKET_MESSAGE}: {self.socket_path}")
        logger.debug(f"Found engine socket at {self.socket_path}")
        return socket_stat
