"""Custom exceptions for engine bootstrap."""


class EngineBootstrapError(Exception):
    """Base exception for all engine bootstrap errors."""

    pass


class SetupConfigurationError(EngineBootstrapError):
    """Raised when the setup configuration is invalid."""

    pass


class SocketNotFoundError(EngineBootstrapError):
    """Raised when the native engine socket is missing or is not a socket."""

    pass


class ToolNotInstalledError(EngineBootstrapError):
    """Raised when VirtualBox or Docker Machine is not installed."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"{tool} is not installed. Please install it via the Docker Toolbox.")


class VmTransitionError(EngineBootstrapError):
    """Raised when a docker-machine or VBoxManage command fails."""

    def __init__(self, message: str, command: list[str] | None = None, output: str = ""):
        self.command = command or []
        self.output = output
        super().__init__(message)


class IpDiscoveryError(EngineBootstrapError):
    """Raised when the VM IP address cannot be determined."""

    pass


class EngineBindError(EngineBootstrapError):
    """Raised when the engine client cannot be bound to an endpoint."""

    pass


class PauseGateError(EngineBootstrapError):
    """Raised when a pause is requested while another one is still pending."""

    pass
