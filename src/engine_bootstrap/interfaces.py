"""Interfaces of the collaborators the setup orchestrator reports to."""

from typing import Any, Protocol


class ProgressReporter(Protocol):
    """Receives coarse progress and status updates for the setup screen."""

    def progress(self, progress: float) -> None: ...

    def started(self, started: bool) -> None: ...

    def error(self, error: Exception) -> None: ...


class Navigator(Protocol):
    """Routes the presentation layer to a named screen."""

    def go_to(
        self,
        screen: str,
        params: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None: ...


class Telemetry(Protocol):
    def track(self, event: str, attributes: dict[str, Any] | None = None) -> None: ...


class DiagnosticsCollector(Protocol):
    """Crash reporting sink for full error diagnostics."""

    def notify(self, title: str, summary: str, details: dict[str, Any], severity: str) -> None: ...


class PreferenceStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...
