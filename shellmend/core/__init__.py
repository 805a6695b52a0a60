"""
Core types shared across shellmend components.
"""
from .errors import ShellmendError, InputError, ConfigError, UpstreamError, FormatError

__all__ = ['ShellmendError', 'InputError', 'ConfigError', 'UpstreamError', 'FormatError']
