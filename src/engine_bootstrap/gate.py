"""Single-slot pause gate awaited while the operator decides how to retry."""

import asyncio
import logging

from .exceptions import PauseGateError

logger = logging.getLogger(__name__)


class PauseGate:
    """Suspends the setup loop until an operator action resolves it.

    At most one pause may be outstanding. Each pause is resolved at most once;
    resolving when nothing is pending does nothing.
    """

    def __init__(self):
        self._future: asyncio.Future | None = None
        self._armed = asyncio.Event()

    @property
    def pending(self) -> bool:
        """Check if a pause is waiting for resolution."""
        return self._future is not None and not self._future.done()

    def pause(self) -> asyncio.Future:
        """Create a new pause and return the future to await.

        Raises:
            PauseGateError: If an earlier pause has not been resolved yet
        """
        if self.pending:
            raise PauseGateError("A pause is already pending")

        self._future = asyncio.get_running_loop().create_future()
        self._future.add_done_callback(self._on_done)
        self._armed.set()
        logger.debug("Setup paused, waiting for operator")
        return self._future

    def resolve(self) -> bool:
        """Release the pending pause.

        Returns:
            bool: True if a pending pause was released, False if there was none
        """
        if not self.pending:
            logger.debug("No pending pause to resolve")
            return False

        self._future.set_result(None)
        self._armed.clear()
        logger.debug("Pause resolved")
        return True

    def _on_done(self, future: asyncio.Future) -> None:
        if future is self._future:
            self._armed.clear()

    async def wait_armed(self) -> None:
        """Wait until a pause is pending."""
        await self._armed.wait()
