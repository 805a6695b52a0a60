"""
Logging configuration for shellmend.
"""
import sys

from loguru import logger
from shellmend.constants import LOG_DIR, LOG_FORMAT, LOG_ROTATION, LOG_RETENTION
from shellmend.utils.enhanced_logging import EnhancedLogger

# Records emitted through the bare loguru logger still need a name for LOG_FORMAT
logger.configure(extra={"logger_name": "shellmend", "context": {}})

# Dictionary to store enhanced logger instances
_enhanced_loggers = {}


def setup_logging(debug: bool = False, console_level: str = None) -> None:
    """
    Configure the application logging.

    Args:
        debug: Whether to enable debug logging.
        console_level: Override for the stderr level. The PTY shell raises
            this so log lines do not interleave with the raw terminal.
    """
    # Remove default handlers
    logger.remove()

    # Add console handler with appropriate level
    log_level = console_level or ("DEBUG" if debug else "INFO")
    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level=log_level,
        diagnose=debug,  # Include variable values in traceback if debug is True
    )

    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"Cannot create log directory {LOG_DIR}: {e}. File logging disabled.")
        return

    # Add file handler
    log_file = LOG_DIR / "shellmend.log"
    logger.add(
        log_file,
        format=LOG_FORMAT,
        level="DEBUG" if debug else "INFO",
        rotation=LOG_ROTATION,
        retention=LOG_RETENTION,
        compression="zip",
    )

    # Add structured JSON log file
    json_log_file = LOG_DIR / "shellmend_structured.log"
    logger.add(
        json_log_file,
        serialize=True,  # Output as JSON
        level="INFO",
        rotation=LOG_ROTATION,
        retention=LOG_RETENTION,
        compression="zip",
    )

    logger.debug(f"Logging initialized. Log files: {log_file}, {json_log_file}")


def get_logger(name: str = "shellmend") -> EnhancedLogger:
    """
    Get a logger instance with the given name.

    Args:
        name: The name for the logger.

    Returns:
        An enhanced logger instance.
    """
    # Check if we already have an enhanced logger for this name
    if name in _enhanced_loggers:
        return _enhanced_loggers[name]

    # Create a new enhanced logger
    enhanced_logger = EnhancedLogger(name)
    _enhanced_loggers[name] = enhanced_logger

    return enhanced_logger
