"""CLI entry point for engine bootstrap."""

import asyncio
import logging
import os
import sys
from typing import TextIO

import httpx

from .config import SetupConfig
from .engine import DockerEngine
from .exceptions import SetupConfigurationError
from .machine import DockerMachine, VirtualBox
from .orchestrator import BackendSelection, SetupOrchestrator
from .preferences import JsonPreferenceStore
from .probe import BackendProbe
from .reporting import ConsoleNavigator, ConsoleProgressReporter, LoggingDiagnostics, LoggingTelemetry
from .signal_manager import SignalManager

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_orchestrator(config: SetupConfig) -> SetupOrchestrator:
    """Wire the orchestrator to the console, docker-machine and the settings file."""
    reporter = ConsoleProgressReporter()
    return SetupOrchestrator(
        config,
        probe=BackendProbe(config.socket_path),
        machine=DockerMachine(config),
        virtualbox=VirtualBox(config),
        engine=DockerEngine(config),
        reporter=reporter,
        navigator=ConsoleNavigator(),
        telemetry=LoggingTelemetry(),
        diagnostics=LoggingDiagnostics(),
        preferences=JsonPreferenceStore(config.settings_file),
    )


def operator_prompt(orchestrator: SetupOrchestrator) -> str:
    options = ["[r] retry", "[d] remove the VM and retry"]
    if orchestrator.backend is BackendSelection.NATIVE:
        options.append("[v] use VirtualBox instead")
    return f"Setup is paused. Choose: {', '.join(options)}: "


async def operator_console(
    orchestrator: SetupOrchestrator, reader: asyncio.StreamReader, stream: TextIO | None = None
) -> None:
    """Read operator choices whenever setup is paused."""
    stream = stream or sys.stdout

    while True:
        await orchestrator.gate.wait_armed()
        if not orchestrator.gate.pending:
            await asyncio.sleep(0)
            continue

        stream.write(operator_prompt(orchestrator))
        stream.flush()

        line = await reader.readline()
        if not line:
            logger.info("Operator input closed")
            return

        choice = line.decode(errors="replace").strip().lower()
        if choice == "r":
            orchestrator.retry()
        elif choice == "d":
            await orchestrator.retry_with_vm_removal()
        elif choice == "v" and orchestrator.backend is BackendSelection.NATIVE:
            orchestrator.switch_backend()
        else:
            stream.write(f"Unknown choice: {choice!r}\n")


async def open_stdin_reader() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    return reader


async def run_until_ready(
    orchestrator: SetupOrchestrator,
    signal_manager: SignalManager,
    reader: asyncio.StreamReader | None,
) -> bool:
    """Run setup alongside the operator console until it is ready or shutdown is requested.

    Returns:
        bool: True if setup finished, False if it was interrupted
    """
    setup_task = asyncio.create_task(orchestrator.run_setup())
    shutdown_task = asyncio.create_task(signal_manager.shutdown_event.wait())
    background = [shutdown_task]
    if reader is not None:
        background.append(asyncio.create_task(operator_console(orchestrator, reader)))

    try:
        await asyncio.wait([setup_task, shutdown_task], return_when=asyncio.FIRST_COMPLETED)
    finally:
        # Cancel remaining tasks
        for task in [setup_task, *background]:
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

    if setup_task.cancelled():
        return False
    setup_task.result()
    return True


async def main() -> int:
    """Main CLI entry point."""
    signal_manager = SignalManager()

    try:
        config_file_env = os.getenv("ENGINE_BOOTSTRAP_CONFIG_FILE")
        config = SetupConfig(config_path=config_file_env)

        setup_logging(config.debug_enabled)
        logger.debug(f"Configuration: {config}")

        signal_manager.setup_signal_handlers()

        try:
            reader = await open_stdin_reader()
        except (OSError, ValueError) as e:
            logger.warning(f"Operator input unavailable, setup cannot be resumed after a failure: {e}")
            reader = None

        orchestrator = build_orchestrator(config)
        async with orchestrator.engine as engine:
            if not await run_until_ready(orchestrator, signal_manager, reader):
                logger.info("Setup interrupted")
                return 130

            try:
                if await engine.ping():
                    logger.info("Docker engine is responding")
                else:
                    logger.warning("Docker engine did not answer ping")
            except httpx.HTTPError as e:
                logger.warning(f"Docker engine ping failed: {e}")

        return 0

    except SetupConfigurationError as e:
        logging.error(f"Configuration error: {e}")
        return 1
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 0
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        return 1
    finally:
        signal_manager.cleanup()


def cli_main() -> None:
    """Entry point for CLI."""
    try:
        exit_code = asyncio.run(main())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    cli_main()
