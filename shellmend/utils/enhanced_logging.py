# shellmend/utils/enhanced_logging.py
import json
from typing import Dict, Any, Optional, Union

from loguru import logger as _loguru_logger


class EnhancedLogger:
    """Logger with context tracking that forwards to loguru."""

    def __init__(self, name: str):
        self._name = name
        self._logger = _loguru_logger.bind(logger_name=name)
        self._context: Dict[str, Any] = {}

    def add_context(self, key: str, value: Any) -> None:
        """Add context information for subsequent log messages."""
        self._context[key] = value

    def remove_context(self, key: str) -> None:
        """Remove context information."""
        if key in self._context:
            del self._context[key]

    def clear_context(self) -> None:
        """Clear all context information."""
        self._context.clear()

    def with_context(self, **context) -> 'EnhancedLogger':
        """Create a new logger with added context."""
        new_logger = EnhancedLogger(self._name)
        new_logger._context = {**self._context, **context}
        return new_logger

    def _format_message(self, msg: str, extra: Optional[Dict[str, Any]] = None) -> str:
        """Append the combined context to the message as compact JSON."""
        context = {**self._context}
        if extra:
            context.update(extra)
        if not context:
            return msg
        return f"{msg} | {json.dumps(context, default=str)}"

    def _emit(self, level: str, msg: str, extra: Optional[Dict[str, Any]], exception: bool = False) -> None:
        # depth=2 attributes the record to the caller of debug()/info()/...
        context = {**self._context, **(extra or {})}
        self._logger.bind(context=context).opt(depth=2, exception=exception).log(
            level, self._format_message(msg, extra)
        )

    def debug(self, msg: str, **kwargs) -> None:
        """Log a debug message with context."""
        self._emit("DEBUG", msg, kwargs.pop("extra", {}))

    def info(self, msg: str, **kwargs) -> None:
        """Log an info message with context."""
        self._emit("INFO", msg, kwargs.pop("extra", {}))

    def warning(self, msg: str, **kwargs) -> None:
        """Log a warning message with context."""
        self._emit("WARNING", msg, kwargs.pop("extra", {}))

    def error(self, msg: str, **kwargs) -> None:
        """Log an error message with context."""
        self._emit("ERROR", msg, kwargs.pop("extra", {}))

    def critical(self, msg: str, **kwargs) -> None:
        """Log a critical message with context."""
        self._emit("CRITICAL", msg, kwargs.pop("extra", {}))

    def exception(self, msg: str, exc_info: Union[bool, BaseException] = True, **kwargs) -> None:
        """Log an error message together with the active exception."""
        extra = kwargs.pop("extra", {})
        if isinstance(exc_info, BaseException):
            extra = {
                **extra,
                "exception_type": type(exc_info).__name__,
                "exception_message": str(exc_info),
            }
        self._emit("ERROR", msg, extra, exception=bool(exc_info))

    @property
    def name(self) -> str:
        """Get the logger name."""
        return self._name

    @property
    def context(self) -> Dict[str, Any]:
        """Get a copy of the bound context."""
        return dict(self._context)
