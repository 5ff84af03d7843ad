"""Setup orchestrator: brings the Docker engine to a ready state."""

import logging
from dataclasses import dataclass
from enum import Enum

from .config import SetupConfig
from .constants import (
    CREATE_ESTIMATE_SECONDS,
    DIAGNOSTICS_SEVERITY,
    DOCKER_MACHINE_TOOL_NAME,
    EVENT_NATIVE_SETUP_FAILED,
    EVENT_RETRIED_SETUP,
    EVENT_RETRIED_WITH_VBOX,
    EVENT_SETUP_FAILED,
    EVENT_SETUP_FINISHED,
    EVENT_STARTED_SETUP,
    GENERIC_MACHINE_ERROR,
    LOADING_SCREEN,
    NATIVE_HOST,
    NATIVE_LINUX_HOST,
    NO_SOCKET_MESSAGE,
    RESUME_SAVED_ESTIMATE_SECONDS,
    SETUP_SCREEN,
    START_STOPPED_ESTIMATE_SECONDS,
    USE_NATIVE_SETTING,
    VIRTUALBOX_TOOL_NAME,
)
from .engine import DockerEngine
from .exceptions import SocketNotFoundError, ToolNotInstalledError, VmTransitionError
from .gate import PauseGate
from .interfaces import DiagnosticsCollector, Navigator, PreferenceStore, ProgressReporter, Telemetry
from .ip_discovery import IPDiscovery
from .machine import DockerMachine, MachineState, VirtualBox
from .probe import BackendProbe
from .progress import ProgressSimulator

logger = logging.getLogger(__name__)


class BackendSelection(Enum):
    """How the Docker engine is reached."""

    NATIVE = "native"
    VIRTUALIZED = "virtualized"


class SetupState(Enum):
    """Setup loop states."""

    PROBING = "probing"
    NATIVE_ATTEMPT = "native_attempt"
    VIRTUAL_ATTEMPT = "virtual_attempt"
    AWAITING_OPERATOR = "awaiting_operator"
    READY = "ready"


@dataclass
class SetupAttempt:
    """What one virtualized setup iteration found out."""

    virtualbox_version: str | None = None
    machine_version: str | None = None
    ip_address: str | None = None
    last_error: Exception | None = None

    @property
    def versions(self) -> dict:
        return {
            "virtualbox_version": self.virtualbox_version,
            "machine_version": self.machine_version,
        }


def error_summary(error: Exception) -> str:
    """Short, user-presentable summary of a multi-line error message.

    Tool output usually ends with the actual failure, so the last non-empty line
    is used. Single-line messages get a generic summary.
    """
    lines = str(error).split("\n")
    if len(lines) > 1:
        for line in reversed(lines):
            if line.strip():
                return line.strip()
    return GENERIC_MACHINE_ERROR


class SetupOrchestrator:
    """Retries engine setup until it succeeds, pausing for the operator after each failure."""

    def __init__(
        self,
        config: SetupConfig,
        *,
        probe: BackendProbe,
        machine: DockerMachine,
        virtualbox: VirtualBox,
        engine: DockerEngine,
        reporter: ProgressReporter,
        navigator: Navigator,
        telemetry: Telemetry,
        diagnostics: DiagnosticsCollector,
        preferences: PreferenceStore,
        simulator: ProgressSimulator | None = None,
        gate: PauseGate | None = None,
    ):
        self.config = config
        self.probe = probe
        self.machine = machine
        self.virtualbox = virtualbox
        self.engine = engine
        self.reporter = reporter
        self.navigator = navigator
        self.telemetry = telemetry
        self.diagnostics = diagnostics
        self.preferences = preferences
        self.simulator = simulator or ProgressSimulator(reporter, config.progress_interval_ms)
        self.gate = gate or PauseGate()
        self.ip_discovery = IPDiscovery(
            machine.ip,
            attempts=config.ip_poll_attempts,
            interval=config.ip_poll_interval,
        )

        self.backend = self._initial_backend()
        self.attempt: SetupAttempt | None = None
        self._state = SetupState.PROBING
        self._resuming = False

    def _initial_backend(self) -> BackendSelection:
        use_native = self.preferences.get(USE_NATIVE_SETTING)
        if not isinstance(use_native, bool):
            use_native = self.probe.is_native_capable()
        return BackendSelection.NATIVE if use_native else BackendSelection.VIRTUALIZED

    @property
    def state(self) -> SetupState:
        return self._state

    def _set_state(self, state: SetupState) -> None:
        if state is not self._state:
            logger.debug(f"Setup state: {self._state.value} -> {state.value}")
        self._state = state

    def _persist_backend(self, use_native: bool) -> None:
        try:
            self.preferences.set(USE_NATIVE_SETTING, use_native)
        except OSError as e:
            logger.warning(f"Failed to persist backend selection: {e}")

    async def _pause(self) -> None:
        self._set_state(SetupState.AWAITING_OPERATOR)
        await self.gate.pause()

    async def run_setup(self) -> None:
        """Run setup until the engine is reachable.

        Failures are reported and followed by a pause; this only returns once the
        engine client is bound.
        """
        while True:
            self._set_state(SetupState.PROBING)
            native = self.backend is BackendSelection.NATIVE
            logger.info("Checking setup type...")

            try:
                if native:
                    self._persist_backend(True)
                    self.probe.check_socket()
                    ready = await self._native_setup()
                else:
                    ready = await self._non_native_setup()
            except Exception as e:
                logger.warning(f"Setup check failed: {e}")
                self.navigator.go_to(SETUP_SCREEN, None, {"native": native})
                self.reporter.error(SocketNotFoundError(NO_SOCKET_MESSAGE))
                await self._pause()
                continue

            if ready:
                break

        self._set_state(SetupState.READY)
        logger.info(f"Engine ready ({self.backend.value})")

    async def _native_setup(self) -> bool:
        """Bind the engine client to the host socket.

        Returns:
            bool: True once bound, False if the operator switched to the virtualized backend
        """
        logger.info("Native setup")
        host = NATIVE_LINUX_HOST if self.probe.platform_is_linux() else NATIVE_HOST

        while self.backend is BackendSelection.NATIVE:
            self._set_state(SetupState.NATIVE_ATTEMPT)
            try:
                self.engine.setup(host, self.machine.name())
                return True
            except Exception as e:
                logger.error(f"Native setup failed: {e}")
                self.simulator.clear_timers()
                self.navigator.go_to(SETUP_SCREEN)
                self.telemetry.track(EVENT_NATIVE_SETUP_FAILED)
                self.reporter.error(e)
                self.diagnostics.notify(
                    EVENT_NATIVE_SETUP_FAILED,
                    error_summary(e),
                    {"Docker Machine Logs": str(e)},
                    DIAGNOSTICS_SEVERITY,
                )
                await self._pause()

        logger.info("Backend switched to virtualized, leaving native setup")
        return False

    def _missing_tool(self) -> str | None:
        if not self.virtualbox.installed():
            return VIRTUALBOX_TOOL_NAME
        if not self.machine.installed():
            return DOCKER_MACHINE_TOOL_NAME
        return None

    def _next_attempt(self) -> SetupAttempt:
        """Start a new attempt that remembers the versions found so far."""
        previous = self.attempt
        if previous is None:
            return SetupAttempt()
        return SetupAttempt(
            virtualbox_version=previous.virtualbox_version,
            machine_version=previous.machine_version,
        )

    async def _non_native_setup(self) -> bool:
        """Create or start the docker-machine VM and bind the engine client to it."""
        logger.info("Non-native setup")

        while True:
            self._set_state(SetupState.VIRTUAL_ATTEMPT)
            attempt = self._next_attempt()
            self.attempt = attempt
            self.reporter.started(False)

            missing = self._missing_tool()
            if missing:
                logger.error(f"{missing} is not installed")
                self.simulator.clear_timers()
                self.navigator.go_to(SETUP_SCREEN)
                self.reporter.error(ToolNotInstalledError(missing))
                await self._pause()
                continue

            try:
                attempt.virtualbox_version = await self.virtualbox.version()
                attempt.machine_version = await self.machine.version()

                self.reporter.started(True)
                self.telemetry.track(EVENT_STARTED_SETUP, attempt.versions)

                await self._prepare_machine()

                attempt.ip_address = await self.ip_discovery.discover_ip()
                self.engine.setup(attempt.ip_address, self.machine.name())
                break
            except Exception as e:
                attempt.last_error = e
                await self._handle_machine_failure(attempt, e)

        self.simulator.clear_timers()
        self.telemetry.track(EVENT_SETUP_FINISHED, attempt.versions)
        return True

    async def _prepare_machine(self) -> None:
        """Create the VM if it is missing, start it if it is saved or stopped."""
        name = self.machine.name()
        exists = await self.virtualbox.vm_exists(name) and self.machine.exists_on_disk()

        if not exists:
            logger.info(f"Machine {name} does not exist")
            self.navigator.go_to(SETUP_SCREEN)
            self.reporter.started(True)
            self.simulator.simulate_progress(CREATE_ESTIMATE_SECONDS)
            await self._remove_machine_quietly()
            await self.machine.create()
            return

        state = await self.machine.status()
        if state == MachineState.SAVED:
            self.navigator.go_to(SETUP_SCREEN)
            self.simulator.simulate_progress(RESUME_SAVED_ESTIMATE_SECONDS)
            await self.machine.start()
        elif state == MachineState.STOPPED:
            self.navigator.go_to(SETUP_SCREEN)
            self.simulator.simulate_progress(START_STOPPED_ESTIMATE_SECONDS)
            await self.machine.start()
        else:
            logger.info(f"Machine {name} is {state}, not starting it")

    async def _remove_machine_quietly(self) -> None:
        """Remove the machine, ignoring failures (it may not exist at all)."""
        try:
            await self.machine.rm()
        except (VmTransitionError, OSError) as e:
            logger.debug(f"Ignoring machine removal failure: {e}")

    async def _handle_machine_failure(self, attempt: SetupAttempt, error: Exception) -> None:
        logger.error(f"Setup failed: {error}")
        self.simulator.clear_timers()
        self.navigator.go_to(SETUP_SCREEN)
        self.telemetry.track(EVENT_SETUP_FAILED, attempt.versions)
        self.reporter.error(error)

        virtualbox_logs = await self.machine.virtualbox_logs()
        self.diagnostics.notify(
            EVENT_SETUP_FAILED,
            error_summary(error),
            {
                "Docker Machine Logs": str(error),
                "VirtualBox Logs": virtualbox_logs,
                "VirtualBox Version": attempt.virtualbox_version,
                "Machine Version": attempt.machine_version,
                "groupingHash": attempt.machine_version,
            },
            DIAGNOSTICS_SEVERITY,
        )
        await self._pause()

    def _can_resume(self, action: str) -> bool:
        if self._resuming or not self.gate.pending:
            logger.warning(f"Ignoring {action}: setup is not waiting for the operator")
            return False
        return True

    def retry(self) -> bool:
        """Resume setup as is."""
        if not self._can_resume("retry"):
            return False

        self.telemetry.track(EVENT_RETRIED_SETUP, {"remove_vm": False})
        self.navigator.go_to(LOADING_SCREEN)
        return self.gate.resolve()

    async def retry_with_vm_removal(self) -> bool:
        """Remove the VM, then resume setup so it gets recreated."""
        if not self._can_resume("retry with VM removal"):
            return False

        self._resuming = True
        try:
            self.telemetry.track(EVENT_RETRIED_SETUP, {"remove_vm": True})
            self.navigator.go_to(LOADING_SCREEN)
            await self._remove_machine_quietly()
        finally:
            self._resuming = False
        return self.gate.resolve()

    def switch_backend(self) -> bool:
        """Switch to the virtualized backend and resume setup."""
        if not self._can_resume("backend switch"):
            return False

        self.telemetry.track(EVENT_RETRIED_WITH_VBOX)
        self.backend = BackendSelection.VIRTUALIZED
        self._persist_backend(False)
        self.navigator.go_to(LOADING_SCREEN)
        return self.gate.resolve()
