"""Console and logging implementations of the orchestrator collaborators."""

import logging
import sys
from typing import Any, TextIO

logger = logging.getLogger(__name__)

SEVERITY_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
}


class ConsoleProgressReporter:
    """Writes setup progress and errors to a terminal stream."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream or sys.stdout
        self.last_progress: float | None = None
        self.last_error: Exception | None = None

    def _write(self, line: str) -> None:
        self.stream.write(f"{line}\n")
        self.stream.flush()

    def progress(self, progress: float) -> None:
        self.last_progress = progress
        self._write(f"Setting up... {progress:.0f}%")

    def started(self, started: bool) -> None:
        if started:
            self._write("Setup started")

    def error(self, error: Exception) -> None:
        self.last_error = error
        self._write(f"Setup error: {error}")


class ConsoleNavigator:
    """Tracks the current screen and announces screen changes."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream or sys.stdout
        self.screen: str | None = None
        self.context: dict[str, Any] = {}

    def go_to(
        self,
        screen: str,
        params: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        if screen != self.screen:
            self.stream.write(f"== {screen} ==\n")
            self.stream.flush()
        self.screen = screen
        self.context = dict(context or {})
        logger.debug(f"Navigated to {screen} (params: {params}, context: {context})")


class LoggingTelemetry:
    """Records telemetry events in the application log."""

    def track(self, event: str, attributes: dict[str, Any] | None = None) -> None:
        if attributes:
            formatted = ", ".join(f"{key}={value}" for key, value in attributes.items())
            logger.info(f"Event: {event} ({formatted})")
        else:
            logger.info(f"Event: {event}")


class LoggingDiagnostics:
    """Crash reporter that logs the summary and, at debug level, the full details."""

    def notify(self, title: str, summary: str, details: dict[str, Any], severity: str) -> None:
        level = SEVERITY_LEVELS.get(severity, logging.INFO)
        logger.log(level, f"{title}: {summary}")
        for key, value in details.items():
            logger.debug(f"{title} [{key}]: {value}")
