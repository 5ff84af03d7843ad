"""docker-machine and VirtualBox command wrappers."""

import asyncio
import logging
import re
import shutil
from pathlib import Path

import aiofiles

from .config import SetupConfig
from .constants import MACHINE_DRIVER, VBOX_LOG_RELATIVE_PATH
from .exceptions import VmTransitionError

logger = logging.getLogger(__name__)


MACHINE_VERSION_REGEXP = re.compile(r"version\s+v?([^\s,]+)")
VBOX_VM_LINE_REGEXP = re.compile(r'^"(?P<name>.*)"\s+\{(?P<uuid>[0-9a-fA-F-]+)\}$')


class MachineState:
    """Enumeration of machine states reported by `docker-machine status`."""

    RUNNING = "Running"
    PAUSED = "Paused"
    SAVED = "Saved"
    STOPPED = "Stopped"
    STOPPING = "Stopping"
    STARTING = "Starting"
    ERROR = "Error"
    TIMEOUT = "Timeout"
    DOES_NOT_EXIST = "Does not exist"


async def run_command(cmd: list[str]) -> str:
    """Run a command and return its stripped stdout.

    Raises:
        VmTransitionError: If the command cannot be started or exits non-zero
    """
    logger.debug(f"Running command: {' '.join(cmd)}")

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise VmTransitionError(f"Failed to run {cmd[0]}: {e}", command=cmd)

    stdout, stderr = await process.communicate()
    out = stdout.decode(errors="replace")
    err = stderr.decode(errors="replace")

    if process.returncode != 0:
        output = "\n".join(part.strip() for part in (out, err) if part.strip())
        raise VmTransitionError(
            f"Command '{' '.join(cmd)}' failed with exit code {process.returncode}\n{output}\n",
            command=cmd,
            output=output,
        )

    return out.strip()


def _binary_available(binary: str) -> bool:
    if shutil.which(binary):
        return True
    return Path(binary).is_file()


def parse_machine_version(output: str) -> str:
    """Extract the version from `docker-machine -v` output."""
    match = MACHINE_VERSION_REGEXP.search(output)
    return match.group(1) if match else output.strip()


def parse_vbox_version(output: str) -> str:
    """Strip the build revision from `VBoxManage -v` output (e.g. 6.1.38r153438)."""
    return output.strip().split("r", 1)[0]


def parse_vm_names(output: str) -> list[str]:
    """Parse VM names from `VBoxManage list vms` output."""
    names = []
    for line in output.splitlines():
        match = VBOX_VM_LINE_REGEXP.match(line.strip())
        if match:
            names.append(match.group("name"))
    return names


class DockerMachine:
    """Drives a VirtualBox-backed VM through the docker-machine CLI."""

    def __init__(self, config: SetupConfig):
        self.config = config
        self.binary = config.docker_machine_path
        self._name = config.machine_name

    def name(self) -> str:
        return self._name

    @property
    def machine_directory(self) -> Path:
        """Directory where docker-machine keeps this machine's state."""
        return self.config.machine_storage_directory / self._name

    def installed(self) -> bool:
        return _binary_available(self.binary)

    def exists_on_disk(self) -> bool:
        return self.machine_directory.is_dir()

    async def _run(self, *args: str) -> str:
        return await run_command([self.binary, *args])

    async def version(self) -> str:
        return parse_machine_version(await self._run("-v"))

    async def status(self) -> str:
        state = await self._run("status", self._name)
        logger.debug(f"Machine {self._name} state: {state}")
        return state

    async def create(self) -> None:
        logger.info(f"Creating machine {self._name}...")
        await self._run("create", "-d", MACHINE_DRIVER, self._name)
        logger.info(f"Machine {self._name} created")

    async def start(self) -> None:
        logger.info(f"Starting machine {self._name}...")
        await self._run("start", self._name)
        logger.info(f"Machine {self._name} started")

    async def rm(self) -> None:
        logger.info(f"Removing machine {self._name}...")
        await self._run("rm", "-f", "-y", self._name)

    async def ip(self) -> str:
        return await self._run("ip", self._name)

    async def virtualbox_logs(self) -> str:
        """Read the hypervisor log of this machine, or an empty string if there is none."""
        log_path = self.machine_directory / self._name / VBOX_LOG_RELATIVE_PATH
        try:
            async with aiofiles.open(log_path, "r", errors="replace") as file:
                return await file.read()
        except FileNotFoundError:
            logger.debug(f"VirtualBox log not found: {log_path}")
            return ""
        except OSError as e:
            logger.warning(f"Failed to read VirtualBox log {log_path}: {e}")
            return ""


class VirtualBox:
    """Queries the VirtualBox installation through VBoxManage."""

    def __init__(self, config: SetupConfig):
        self.binary = config.vboxmanage_path

    def installed(self) -> bool:
        return _binary_available(self.binary)

    async def version(self) -> str:
        return parse_vbox_version(await run_command([self.binary, "-v"]))

    async def vm_exists(self, name: str) -> bool:
        output = await run_command([self.binary, "list", "vms"])
        return name in parse_vm_names(output)
