# tests/test_config.py
"""Tests for configuration loading and saving."""
import pytest

import shellmend.config as config_module
from shellmend.config import ConfigManager, AppConfig, MonitorConfig, ApiConfig


@pytest.fixture
def config_paths(tmp_path, monkeypatch):
    """Point the configuration at a temporary directory and clear the environment."""
    config_dir = tmp_path / "shellmend"
    config_file = config_dir / "config.toml"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_file)
    monkeypatch.setattr(config_module, "load_dotenv", lambda: False)
    for name in ("GEMINI_API_KEY", "SHELLMEND_MODEL", "SHELLMEND_REQUEST_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    return config_file


def test_defaults(config_paths):
    manager = ConfigManager()
    manager.load_config()

    assert manager.config.api.gemini_api_key is None
    assert manager.config.monitor.dedup_window_seconds == 30
    assert manager.config.monitor.history_capacity == 10
    assert manager.config.monitor.grace_delay_seconds == 0.3


def test_environment_overrides(config_paths, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env_key")
    monkeypatch.setenv("SHELLMEND_MODEL", "env-model")
    monkeypatch.setenv("SHELLMEND_REQUEST_TIMEOUT", "10")

    manager = ConfigManager()

    assert manager.config.api.gemini_api_key == "env_key"
    assert manager.config.api.model == "env-model"
    assert manager.config.api.request_timeout == 10.0


def test_invalid_timeout_ignored(config_paths, monkeypatch):
    monkeypatch.setenv("SHELLMEND_REQUEST_TIMEOUT", "soon")
    manager = ConfigManager()
    assert manager.config.api.request_timeout == 15


def test_save_and_load_round_trip(config_paths):
    manager = ConfigManager()
    manager.config.api.gemini_api_key = "saved_key"
    manager.config.monitor.grace_delay_seconds = 0.5
    manager.save_config()

    assert config_paths.exists()

    loaded = ConfigManager()
    loaded.load_config()
    assert loaded.config.api.gemini_api_key == "saved_key"
    assert loaded.config.monitor.grace_delay_seconds == 0.5


def test_environment_wins_over_file(config_paths, monkeypatch):
    config_paths.parent.mkdir(parents=True)
    config_paths.write_text('[api]\ngemini_api_key = "file_key"\n')
    monkeypatch.setenv("GEMINI_API_KEY", "env_key")

    manager = ConfigManager()
    manager.load_config()
    assert manager.config.api.gemini_api_key == "env_key"


def test_invalid_toml_falls_back_to_defaults(config_paths):
    config_paths.parent.mkdir(parents=True)
    config_paths.write_text("this is [not toml")

    manager = ConfigManager()
    manager.load_config()
    assert manager.config == AppConfig()


def test_invalid_values_fall_back_to_defaults(config_paths):
    config_paths.parent.mkdir(parents=True)
    config_paths.write_text("[monitor]\nhistory_capacity = -1\n")

    manager = ConfigManager()
    manager.load_config()
    assert manager.config.monitor == MonitorConfig()


def test_request_timeout_must_be_positive():
    with pytest.raises(ValueError):
        ApiConfig(request_timeout=0)
