# shellmend/config.py
"""
Configuration management for shellmend.
Uses TOML format for configuration files.
"""
import os
import sys
from typing import Optional

# --- TOML Library Handling ---

# Reader (tomllib for >= 3.11, tomli for < 3.11)
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

# Writer (tomli-w)
import tomli_w

# --- Pydantic and Environment Handling ---
from pydantic import BaseModel, Field, ValidationError
from dotenv import load_dotenv

from shellmend.constants import (
    CONFIG_DIR,
    CONFIG_FILE,
    GEMINI_MODEL,
    REQUEST_TIMEOUT,
    DEDUP_WINDOW_SECONDS,
    HISTORY_CAPACITY,
    MAX_DEDUP_ENTRIES,
    GRACE_DELAY_SECONDS,
)
from shellmend.utils.logging import get_logger

# --- Configuration Models ---

class ApiConfig(BaseModel):
    """API configuration settings."""
    gemini_api_key: Optional[str] = Field(None, description="Google Gemini API Key")
    model: str = Field(GEMINI_MODEL, description="Model identifier sent with each request")
    request_timeout: float = Field(REQUEST_TIMEOUT, gt=0, description="Seconds to wait for a reply")


class MonitorConfig(BaseModel):
    """Failure detection and deduplication settings."""
    dedup_window_seconds: int = Field(DEDUP_WINDOW_SECONDS, gt=0, description="Width of a dedup bucket")
    history_capacity: int = Field(HISTORY_CAPACITY, gt=0, description="Recent commands kept per session")
    max_dedup_entries: int = Field(MAX_DEDUP_ENTRIES, gt=0, description="Dedup keys kept per session")
    grace_delay_seconds: float = Field(GRACE_DELAY_SECONDS, ge=0, description="Delay before accepting new failures")


class AppConfig(BaseModel):
    """Application configuration settings."""
    api: ApiConfig = Field(default_factory=ApiConfig, description="API configuration")
    monitor: MonitorConfig = Field(default_factory=MonitorConfig, description="Monitoring configuration")
    debug: bool = Field(False, description="Enable debug mode")


# --- Configuration Manager ---

class ConfigManager:
    """Manages the configuration for shellmend using TOML."""

    def __init__(self):
        """Initializes the ConfigManager with default settings."""
        self._config: AppConfig = AppConfig()
        self._logger = get_logger(__name__)
        self._load_environment()

    def _load_environment(self) -> None:
        """Loads API keys and overrides from environment variables and .env file."""
        load_dotenv()  # Load .env file if present
        gemini_api_key = os.getenv("GEMINI_API_KEY")
        if gemini_api_key:
            self._config.api.gemini_api_key = gemini_api_key

        model = os.getenv("SHELLMEND_MODEL")
        if model:
            self._config.api.model = model

        timeout = os.getenv("SHELLMEND_REQUEST_TIMEOUT")
        if timeout:
            try:
                self._config.api.request_timeout = float(timeout)
            except ValueError:
                self._logger.warning(f"Ignoring invalid SHELLMEND_REQUEST_TIMEOUT value: {timeout!r}")

    def _ensure_config_dir(self) -> None:
        """Ensures the application's configuration directory exists."""
        try:
            CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._logger.error(f"Error creating configuration directory {CONFIG_DIR}: {e}")

    def load_config(self) -> None:
        """Loads configuration from the TOML config file, then applies the environment."""
        if not CONFIG_FILE.exists():
            self._logger.debug(f"Configuration file not found at '{CONFIG_FILE}'. Using defaults.")
            return

        try:
            self._logger.debug(f"Loading configuration from: {CONFIG_FILE}")
            with open(CONFIG_FILE, "rb") as f:  # TOML requires binary read mode
                config_data = tomllib.load(f)

            # Update configuration with loaded data, using Pydantic validation
            if "api" in config_data and isinstance(config_data["api"], dict):
                self._config.api = ApiConfig(**config_data["api"])

            if "monitor" in config_data and isinstance(config_data["monitor"], dict):
                self._config.monitor = MonitorConfig(**config_data["monitor"])

            if "debug" in config_data:
                if isinstance(config_data["debug"], bool):
                    self._config.debug = config_data["debug"]
                else:
                    self._logger.warning(
                        f"Invalid type for 'debug' in {CONFIG_FILE}. Expected boolean, "
                        f"got {type(config_data['debug'])}. Ignoring."
                    )

        except tomllib.TOMLDecodeError as e:
            self._logger.error(f"Error decoding TOML configuration file ({CONFIG_FILE}): {e}")
            self._reset()
        except ValidationError as e:
            self._logger.error(f"Invalid values in configuration file ({CONFIG_FILE}): {e}")
            self._reset()
        except OSError as e:
            self._logger.error(f"I/O error accessing configuration file: {e}")
            self._reset()

        # Environment always wins over the file
        self._load_environment()

    def _reset(self) -> None:
        self._logger.warning("Using default configuration and environment variables.")
        self._config = AppConfig()
        self._load_environment()

    def save_config(self) -> None:
        """Saves the current configuration to the config file (as TOML)."""
        self._ensure_config_dir()
        # TOML has no null, so unset optional values are dropped
        config_dict = self._config.model_dump(exclude_none=True)
        try:
            with open(CONFIG_FILE, "wb") as f:
                tomli_w.dump(config_dict, f)
            self._logger.info(f"Configuration saved to {CONFIG_FILE}")
        except OSError as e:
            self._logger.error(f"Error saving TOML configuration to {CONFIG_FILE}: {e}")
            raise

    @property
    def config(self) -> AppConfig:
        """Provides read-only access to the current application configuration."""
        return self._config


# --- Global Instance ---

# Create a single, globally accessible instance of the ConfigManager
config_manager = ConfigManager()

# Load the configuration from file immediately when this module is imported.
config_manager.load_config()
