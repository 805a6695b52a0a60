"""
Terminal-facing surfaces: rendering and the assisted PTY shell.
"""
from .formatter import TerminalFormatter, terminal_formatter

__all__ = ['TerminalFormatter', 'terminal_formatter']
