"""Docker engine bootstrap package."""

from importlib.metadata import version

from .exceptions import (
    EngineBindError,
    EngineBootstrapError,
    IpDiscoveryError,
    PauseGateError,
    SetupConfigurationError,
    SocketNotFoundError,
    ToolNotInstalledError,
    VmTransitionError,
)

__version__ = version("engine_bootstrap")


# Lazy imports to avoid dependency issues when importing submodules
def _get_orchestrator():
    from .orchestrator import SetupOrchestrator

    return SetupOrchestrator


def _get_setup_config():
    from .config import SetupConfig

    return SetupConfig


def _get_backend_selection():
    from .orchestrator import BackendSelection

    return BackendSelection


def _get_pause_gate():
    from .gate import PauseGate

    return PauseGate


def __getattr__(name):
    if name == "SetupOrchestrator":
        return _get_orchestrator()
    elif name == "SetupConfig":
        return _get_setup_config()
    elif name == "BackendSelection":
        return _get_backend_selection()
    elif name == "PauseGate":
        return _get_pause_gate()
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "__version__",
    "SetupOrchestrator",
    "SetupConfig",
    "BackendSelection",
    "PauseGate",
    "EngineBootstrapError",
    "SetupConfigurationError",
    "SocketNotFoundError",
    "ToolNotInstalledError",
    "VmTransitionError",
    "IpDiscoveryError",
    "EngineBindError",
    "PauseGateError",
]
