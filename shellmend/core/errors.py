"""
Exception types for the suggestion pipeline.

A reply that cannot be parsed is not an error: the parser returns an empty
list and the orchestrator substitutes a placeholder suggestion.
"""


class ShellmendError(Exception):
    """Base class for errors raised by shellmend."""
    pass


class InputError(ShellmendError):
    """Raised when a failed command is empty and cannot be sent upstream."""
    pass


class ConfigError(ShellmendError):
    """Raised when no assistant credential is configured."""
    pass


class UpstreamError(ShellmendError):
    """Raised when the assistant call fails, times out or is rejected."""
    pass


class FormatError(UpstreamError):
    """Raised when the assistant reply lacks the expected text field."""
    pass
