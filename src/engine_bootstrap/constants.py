"""
Constants for engine bootstrap.

Paths, polling budgets and the names shared with the presentation, telemetry and
crash-reporting layers.
"""

# Native engine endpoint
DOCKER_SOCKET_PATH = "/var/run/docker.sock"
NATIVE_LINUX_HOST = "localhost"
NATIVE_HOST = "docker.local"
NATIVE_HOSTS = (NATIVE_LINUX_HOST, NATIVE_HOST)
ENGINE_TLS_PORT = 2376

# docker-machine layout
DEFAULT_MACHINE_NAME = "default"
MACHINE_DRIVER = "virtualbox"
MACHINE_STORAGE_DIRECTORY = "~/.docker/machine/machines"
VBOX_LOG_RELATIVE_PATH = "Logs/VBox.log"
TLS_CA_FILE_NAME = "ca.pem"
TLS_CERT_FILE_NAME = "cert.pem"
TLS_KEY_FILE_NAME = "key.pem"

# Tool binaries
DOCKER_MACHINE_BINARY = "docker-machine"
VBOXMANAGE_BINARY = "VBoxManage"
VIRTUALBOX_TOOL_NAME = "VirtualBox"
DOCKER_MACHINE_TOOL_NAME = "Docker Machine"

# Settings
SETTINGS_FILE = "~/.config/engine-bootstrap/settings.json"
USE_NATIVE_SETTING = "setting.useNative"

# IP polling
IP_POLL_ATTEMPTS = 80
IP_POLL_INTERVAL = 1.0

# Simulated progress
PROGRESS_INTERVAL_MS = 200
CREATE_ESTIMATE_SECONDS = 60
RESUME_SAVED_ESTIMATE_SECONDS = 10
START_STOPPED_ESTIMATE_SECONDS = 25

# Screens
SETUP_SCREEN = "setup"
LOADING_SCREEN = "loading"

# Telemetry events
EVENT_STARTED_SETUP = "Started Setup"
EVENT_SETUP_FINISHED = "Setup Finished"
EVENT_SETUP_FAILED = "Setup Failed"
EVENT_NATIVE_SETUP_FAILED = "Native Setup Failed"
EVENT_RETRIED_SETUP = "Retried Setup"
EVENT_RETRIED_WITH_VBOX = "Retried Setup with VBox"

# Messages
NO_SOCKET_MESSAGE = "No Docker socket found."
NOT_A_SOCKET_MESSAGE = "File found is not a socket"
GENERIC_MACHINE_ERROR = "Docker Machine encountered an error."
IP_DISCOVERY_FAILED_MESSAGE = "Could not determine IP from docker-machine."
DIAGNOSTICS_SEVERITY = "info"
