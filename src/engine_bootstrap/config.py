"""Configuration management for engine bootstrap."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from .constants import (
    DEFAULT_MACHINE_NAME,
    DOCKER_MACHINE_BINARY,
    DOCKER_SOCKET_PATH,
    ENGINE_TLS_PORT,
    IP_POLL_ATTEMPTS,
    IP_POLL_INTERVAL,
    MACHINE_STORAGE_DIRECTORY,
    PROGRESS_INTERVAL_MS,
    SETTINGS_FILE,
    VBOXMANAGE_BINARY,
)
from .exceptions import SetupConfigurationError

logger = logging.getLogger(__name__)


class SetupConfig:
    """Setup configuration management."""

    def __init__(self, config_path: str | None = None):
        """Initialize setup configuration.

        Args:
            config_path: Path to JSON configuration file. Defaults are used when omitted.
        """
        self.config_path: Path | None = Path(config_path) if config_path else None
        self._config: Dict[str, Any] = self._load_config()
        self._validate_and_store_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        if self.config_path is None:
            logger.debug("No configuration file given, using defaults")
            return {}

        try:
            with open(self.config_path) as f:
                config = json.load(f)
        except FileNotFoundError:
            raise SetupConfigurationError(f"Configuration file not found: {self.config_path}")
        except json.JSONDecodeError as e:
            raise SetupConfigurationError(f"Invalid JSON in configuration file: {e}")
        except Exception as e:
            raise SetupConfigurationError(f"Failed to load configuration: {e}")

        if not isinstance(config, dict):
            raise SetupConfigurationError(
                f"Invalid configuration in {self.config_path}: expected a JSON object"
            )
        logger.debug(f"Loaded configuration from {self.config_path}")
        return config

    def _string_setting(self, key: str, default: str) -> str:
        value = self._config.get(key, default)
        if not isinstance(value, str) or not value:
            raise SetupConfigurationError(f"Invalid {key}: {value}. Expected: non-empty string")
        return value

    def _validate_and_store_config(self) -> None:
        """Validate configuration parameters and store validated values."""
        self._machine_name = self._string_setting("machine_name", DEFAULT_MACHINE_NAME)
        self._socket_path = self._string_setting("socket_path", DOCKER_SOCKET_PATH)
        self._docker_machine_path = self._string_setting(
            "docker_machine_path", DOCKER_MACHINE_BINARY
        )
        self._vboxmanage_path = self._string_setting("vboxmanage_path", VBOXMANAGE_BINARY)
        self._settings_file = self._string_setting("settings_file", SETTINGS_FILE)

        # Validate and store debug
        debug = self._config.get("debug", False)
        if not isinstance(debug, bool):
            raise SetupConfigurationError(f"Invalid debug setting: {debug}. Expected: boolean")
        self._debug_enabled = debug

        # Validate and store IP polling budget
        attempts = self._config.get("ip_poll_attempts", IP_POLL_ATTEMPTS)
        if not isinstance(attempts, int) or isinstance(attempts, bool) or attempts < 1:
            raise SetupConfigurationError(
                f"Invalid ip_poll_attempts: {attempts}. Expected: positive integer"
            )
        self._ip_poll_attempts = attempts

        interval = self._config.get("ip_poll_interval", IP_POLL_INTERVAL)
        if not isinstance(interval, (int, float)) or isinstance(interval, bool) or interval < 0:
            raise SetupConfigurationError(
                f"Invalid ip_poll_interval: {interval}. Expected: non-negative number"
            )
        self._ip_poll_interval = float(interval)

        # Validate and store progress cadence
        progress_interval = self._config.get("progress_interval_ms", PROGRESS_INTERVAL_MS)
        if (
            not isinstance(progress_interval, int)
            or isinstance(progress_interval, bool)
            or progress_interval < 1
        ):
            raise SetupConfigurationError(
                f"Invalid progress_interval_ms: {progress_interval}. Expected: positive integer"
            )
        self._progress_interval_ms = progress_interval

        # Validate and store TLS port
        port = self._config.get("engine_tls_port", ENGINE_TLS_PORT)
        if not isinstance(port, int) or isinstance(port, bool) or port < 1 or port > 65535:
            raise SetupConfigurationError(
                f"Invalid engine_tls_port: {port}. Expected: integer between 1 and 65535"
            )
        self._engine_tls_port = port

    @property
    def machine_name(self) -> str:
        """Get the docker-machine VM name."""
        return self._machine_name

    @property
    def socket_path(self) -> Path:
        """Get the native engine socket path."""
        return Path(self._socket_path)

    @property
    def docker_machine_path(self) -> str:
        return self._docker_machine_path

    @property
    def vboxmanage_path(self) -> str:
        return self._vboxmanage_path

    @property
    def settings_file(self) -> Path:
        """Get the persisted settings file."""
        return Path(self._settings_file).expanduser()

    @property
    def debug_enabled(self) -> bool:
        """Check if debug mode is enabled."""
        return self._debug_enabled

    @property
    def ip_poll_attempts(self) -> int:
        """Get the number of IP discovery attempts."""
        return self._ip_poll_attempts

    @property
    def ip_poll_interval(self) -> float:
        """Get the delay between IP discovery attempts in seconds."""
        return self._ip_poll_interval

    @property
    def progress_interval_ms(self) -> int:
        """Get the simulated progress cadence in milliseconds."""
        return self._progress_interval_ms

    @property
    def engine_tls_port(self) -> int:
        return self._engine_tls_port

    @property
    def machine_storage_directory(self) -> Path:
        """Get the docker-machine storage directory."""
        value = os.getenv("ENGINE_BOOTSTRAP_MACHINE_STORAGE", MACHINE_STORAGE_DIRECTORY)
        return Path(value).expanduser()

    def __repr__(self) -> str:
        """String representation of configuration."""
        return ", ".join(
            [
                f"SetupConfig(debug={self.debug_enabled}",
                f"docker_machine_path={self.docker_machine_path}",
                f"engine_tls_port={self.engine_tls_port}",
                f"ip_poll_attempts={self.ip_poll_attempts}",
                f"ip_poll_interval={self.ip_poll_interval}",
                f"machine_name={self.machine_name}",
                f"machine_storage_directory={self.machine_storage_directory}",
                f"progress_interval_ms={self.progress_interval_ms}",
                f"settings_file={self.settings_file}",
                f"socket_path={self.socket_path}",
                f"vboxmanage_path={self.vboxmanage_path})",
            ]
        )
