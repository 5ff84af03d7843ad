"""Simulated setup progress."""

import asyncio
import logging

from .constants import PROGRESS_INTERVAL_MS
from .interfaces import ProgressReporter

logger = logging.getLogger(__name__)


class ProgressSimulator:
    """Emits time-based progress percentages while a long VM operation runs.

    Ticks are scheduled on the running event loop and are owned by the simulator,
    so they can be cancelled as a unit before an error is shown.
    """

    def __init__(self, reporter: ProgressReporter, interval_ms: int = PROGRESS_INTERVAL_MS):
        self.reporter = reporter
        self.interval_ms = interval_ms
        self._timers: list[asyncio.TimerHandle] = []
        self._pending = 0

    def simulate_progress(self, estimate_seconds: float) -> int:
        """Schedule progress ticks from 0% towards 100% over the estimated duration.

        Returns:
            Number of ticks scheduled
        """
        self.clear_timers()

        estimate_ms = estimate_seconds * 1000
        if estimate_ms <= 0:
            return 0

        loop = asyncio.get_running_loop()
        ticks = int(estimate_ms // self.interval_ms)
        for tick in range(ticks):
            elapsed_ms = tick * self.interval_ms
            handle = loop.call_later(
                elapsed_ms / 1000, self._emit, 100 * elapsed_ms / estimate_ms
            )
            self._timers.append(handle)
        self._pending = ticks

        logger.debug(f"Simulating {estimate_seconds}s of progress with {ticks} ticks")
        return ticks

    def _emit(self, progress: float) -> None:
        self._pending -= 1
        self.reporter.progress(progress)

    def clear_timers(self) -> None:
        for handle in self._timers:
            handle.cancel()
        self._timers = []
        self._pending = 0

    @property
    def active(self) -> int:
        """Number of ticks that have neither fired nor been cancelled."""
        return self._pending
