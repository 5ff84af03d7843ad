"""Signal handling for the setup CLI."""

import asyncio
import logging
import signal

logger = logging.getLogger(__name__)


class SignalManager:
    """Turns SIGINT/SIGTERM into a shutdown event the CLI can await."""

    def __init__(self):
        self._shutdown_event = asyncio.Event()
        self._original_handlers = {}
        self._loop: asyncio.AbstractEventLoop | None = None
        self._signals_setup = False

    def setup_signal_handlers(self):
        """Setup signal handlers once."""
        if self._signals_setup:
            logger.debug("Signal handlers already setup")
            return

        self._loop = asyncio.get_running_loop()

        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, stopping setup")
            self._loop.call_soon_threadsafe(self._shutdown_event.set)

        # Store original handlers for cleanup
        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, signal_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, signal_handler)

        self._signals_setup = True
        logger.debug("Signal handlers setup complete")

    @property
    def shutdown_event(self) -> asyncio.Event:
        """Get the shutdown event for async coordination."""
        return self._shutdown_event

    def request_shutdown(self):
        """Manually request shutdown."""
        logger.info("Shutdown requested programmatically")
        self._shutdown_event.set()

    def is_shutdown_requested(self) -> bool:
        return self._shutdown_event.is_set()

    def cleanup(self):
        """Restore original signal handlers."""
        if not self._signals_setup:
            return

        for sig, handler in self._original_handlers.items():
            try:
                signal.signal(sig, handler)
            except (OSError, ValueError) as e:
                logger.error(f"Error restoring signal handler for {sig}: {e}")

        self._original_handlers.clear()
        self._signals_setup = False
        logger.debug("Signal handlers cleaned up")
