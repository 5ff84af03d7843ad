"""Shared pytest fixtures and fakes for engine bootstrap tests."""

import asyncio
import json
from pathlib import Path
from typing import Any

import pytest

from engine_bootstrap.config import SetupConfig
from engine_bootstrap.machine import MachineState
from engine_bootstrap.orchestrator import SetupOrchestrator


class FakeReporter:
    def __init__(self):
        self.events: list[tuple[str, Any]] = []

    def progress(self, progress: float) -> None:
        self.events.append(("progress", progress))

    def started(self, started: bool) -> None:
        self.events.append(("started", started))

    def error(self, error: Exception) -> None:
        self.events.append(("error", error))

    @property
    def errors(self) -> list[Exception]:
        return [value for kind, value in self.events if kind == "error"]

    @property
    def progress_values(self) -> list[float]:
        return [value for kind, value in self.events if kind == "progress"]


class FakeNavigator:
    def __init__(self):
        self.screens: list[tuple[str, Any, Any]] = []

    def go_to(self, screen, params=None, context=None) -> None:
        self.screens.append((screen, params, context))

    @property
    def current(self) -> str | None:
        return self.screens[-1][0] if self.screens else None


class FakeTelemetry:
    def __init__(self):
        self.events: list[tuple[str, Any]] = []

    def track(self, event, attributes=None) -> None:
        self.events.append((event, attributes))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


class FakeDiagnostics:
    def __init__(self):
        self.notifications: list[tuple[str, str, dict, str]] = []

    def notify(self, title, summary, details, severity) -> None:
        self.notifications.append((title, summary, details, severity))


class FakePreferences:
    def __init__(self, values: dict | None = None):
        self.values = dict(values or {})

    def get(self, key, default=None):
        return self.values.get(key, default)

    def set(self, key, value) -> None:
        self.values[key] = value


class FakeProbe:
    def __init__(self, native_capable=True, linux=True, socket_error: Exception | None = None):
        self.native_capable = native_capable
        self.linux = linux
        self.socket_error = socket_error
        self.socket_checks = 0

    def is_native_capable(self) -> bool:
        return self.native_capable

    def platform_is_linux(self) -> bool:
        return self.linux

    def check_socket(self):
        self.socket_checks += 1
        if self.socket_error is not None:
            raise self.socket_error


class FakeMachine:
    def __init__(self, name="default"):
        self._name = name
        self.is_installed = True
        self.on_disk = True
        self.state = MachineState.RUNNING
        self.machine_version = "0.16.2"
        self.ip_results: list[Any] = ["192.168.99.100"]
        self.calls: list[str] = []
        self.fail: dict[str, Exception] = {}
        self.logs = "VBox log"

    def name(self) -> str:
        return self._name

    def installed(self) -> bool:
        return self.is_installed

    def exists_on_disk(self) -> bool:
        return self.on_disk

    async def _call(self, method: str):
        self.calls.append(method)
        await asyncio.sleep(0)
        if method in self.fail:
            raise self.fail[method]

    async def version(self) -> str:
        await self._call("version")
        return self.machine_version

    async def status(self) -> str:
        await self._call("status")
        return self.state

    async def create(self) -> None:
        await self._call("create")

    async def start(self) -> None:
        await self._call("start")

    async def rm(self) -> None:
        await self._call("rm")

    async def ip(self) -> str:
        await self._call("ip")
        result = self.ip_results.pop(0) if len(self.ip_results) > 1 else self.ip_results[0]
        if isinstance(result, Exception):
            raise result
        return result

    async def virtualbox_logs(self) -> str:
        return self.logs


class FakeVirtualBox:
    def __init__(self):
        self.is_installed = True
        self.exists = True
        self.vbox_version = "6.1.38"

    def installed(self) -> bool:
        return self.is_installed

    async def version(self) -> str:
        return self.vbox_version

    async def vm_exists(self, name: str) -> bool:
        return self.exists


class FakeEngine:
    def __init__(self):
        self.bindings: list[tuple[str, str]] = []
        self.failures: list[Exception] = []

    def setup(self, host: str, machine_name: str) -> None:
        if self.failures:
            raise self.failures.pop(0)
        self.bindings.append((host, machine_name))


class FakeSimulator:
    def __init__(self):
        self.estimates: list[float] = []
        self.clears = 0

    def simulate_progress(self, estimate_seconds: float) -> int:
        self.estimates.append(estimate_seconds)
        return 0

    def clear_timers(self) -> None:
        self.clears += 1


@pytest.fixture
def config_file(tmp_path: Path):
    """Write a JSON configuration with fast polling and return a factory for more fields."""

    def _write(**overrides) -> str:
        values = {
            "ip_poll_attempts": 5,
            "ip_poll_interval": 0,
            "settings_file": str(tmp_path / "settings.json"),
            "socket_path": str(tmp_path / "docker.sock"),
        }
        values.update(overrides)
        path = tmp_path / "config.json"
        path.write_text(json.dumps(values))
        return str(path)

    return _write


@pytest.fixture
def config(config_file, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> SetupConfig:
    monkeypatch.setenv("ENGINE_BOOTSTRAP_MACHINE_STORAGE", str(tmp_path / "machines"))
    return SetupConfig(config_path=config_file())


class Harness:
    """Orchestrator wired to fakes."""

    def __init__(self, config: SetupConfig, use_native: bool | None = None):
        self.probe = FakeProbe()
        self.machine = FakeMachine()
        self.virtualbox = FakeVirtualBox()
        self.engine = FakeEngine()
        self.reporter = FakeReporter()
        self.navigator = FakeNavigator()
        self.telemetry = FakeTelemetry()
        self.diagnostics = FakeDiagnostics()
        self.simulator = FakeSimulator()
        preferences = {} if use_native is None else {"setting.useNative": use_native}
        self.preferences = FakePreferences(preferences)
        self.config = config

    def build(self) -> SetupOrchestrator:
        return SetupOrchestrator(
            self.config,
            probe=self.probe,
            machine=self.machine,
            virtualbox=self.virtualbox,
            engine=self.engine,
            reporter=self.reporter,
            navigator=self.navigator,
            telemetry=self.telemetry,
            diagnostics=self.diagnostics,
            preferences=self.preferences,
            simulator=self.simulator,
        )


@pytest.fixture
def native_harness(config: SetupConfig) -> Harness:
    return Harness(config, use_native=True)


@pytest.fixture
def virtual_harness(config: SetupConfig) -> Harness:
    return Harness(config, use_native=False)


async def wait_for_pause(orchestrator: SetupOrchestrator, timeout: float = 2.0) -> None:
    """Wait until the orchestrator is blocked on its pause gate."""
    await asyncio.wait_for(orchestrator.gate.wait_armed(), timeout=timeout)
    assert orchestrator.gate.pending


async def cancel(task: asyncio.Task) -> None:
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass

