"""Tests for setup configuration loading and validation."""

from pathlib import Path

import pytest

from engine_bootstrap.config import SetupConfig
from engine_bootstrap.exceptions import SetupConfigurationError


class TestSetupConfig:
    def test_defaults_without_file(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("ENGINE_BOOTSTRAP_MACHINE_STORAGE", raising=False)
        config = SetupConfig()

        assert config.machine_name == "default"
        assert config.socket_path == Path("/var/run/docker.sock")
        assert config.ip_poll_attempts == 80
        assert config.ip_poll_interval == 1.0
        assert config.progress_interval_ms == 200
        assert config.engine_tls_port == 2376
        assert config.debug_enabled is False
        assert config.docker_machine_path == "docker-machine"
        assert config.vboxmanage_path == "VBoxManage"
        assert config.machine_storage_directory == (
            Path.home() / ".docker" / "machine" / "machines"
        )
        assert config.settings_file.name == "settings.json"

    def test_loads_file(self, config_file):
        config = SetupConfig(config_file(machine_name="dev", debug=True, ip_poll_attempts=3))

        assert config.machine_name == "dev"
        assert config.debug_enabled is True
        assert config.ip_poll_attempts == 3
        assert config.ip_poll_interval == 0.0
        assert "machine_name=dev" in repr(config)

    def test_machine_storage_from_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path):
        monkeypatch.setenv("ENGINE_BOOTSTRAP_MACHINE_STORAGE", str(tmp_path))

        assert SetupConfig().machine_storage_directory == tmp_path

    def test_missing_file(self, tmp_path):
        with pytest.raises(SetupConfigurationError, match="not found"):
            SetupConfig(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(SetupConfigurationError, match="Invalid JSON"):
            SetupConfig(str(path))

    def test_non_object_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")

        with pytest.raises(SetupConfigurationError, match="expected a JSON object"):
            SetupConfig(str(path))

    @pytest.mark.parametrize(
        "overrides",
        [
            {"ip_poll_attempts": 0},
            {"ip_poll_attempts": True},
            {"ip_poll_interval": -1},
            {"progress_interval_ms": 0},
            {"engine_tls_port": 70000},
            {"debug": "yes"},
            {"machine_name": ""},
            {"socket_path": 5},
        ],
    )
    def test_invalid_values(self, config_file, overrides):
        with pytest.raises(SetupConfigurationError):
            SetupConfig(config_file(**overrides))
