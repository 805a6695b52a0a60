"""
Constants for the shellmend application.
"""
from pathlib import Path
import os

# Application information
APP_NAME = "shellmend"
APP_VERSION = "0.1.0"
APP_DESCRIPTION = "Watches an interactive shell and suggests fixes for failed commands"

# Paths
CONFIG_DIR = Path(os.path.expanduser("~/.config/shellmend"))
CONFIG_FILE = CONFIG_DIR / "config.toml"
LOG_DIR = CONFIG_DIR / "logs"

# Shell
DEFAULT_SHELL = "/bin/bash"

# Logging
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {extra[logger_name]} | {message}"
LOG_ROTATION = "10 MB"
LOG_RETENTION = "10 days"

# API
GEMINI_MODEL = "gemini-2.0-flash"
GEMINI_MAX_TOKENS = 300
GEMINI_TEMPERATURE = 0.2
REQUEST_TIMEOUT = 15  # seconds

# Monitoring
DEDUP_WINDOW_SECONDS = 30
HISTORY_CAPACITY = 10
MAX_DEDUP_ENTRIES = 256
GRACE_DELAY_SECONDS = 0.3

# Suggestions
VALID_COMMAND_MESSAGE = "Command is valid. No suggestions needed."
DEFAULT_DESCRIPTION = "Suggested command"
PARSE_MISS_COMMAND = "echo 'Unable to parse suggestions'"
PARSE_MISS_DESCRIPTION = "Try a different command or check API response format"
FETCHING_MESSAGE = "Getting command suggestions..."
