"""
Per-session context: command tracking and session state.
"""
from .tracker import CommandTracker, CommandSubmission, RecentCommands, InputKind, InputUnit, tokenize_input
from .session import SessionState

__all__ = [
    'CommandTracker', 'CommandSubmission', 'RecentCommands',
    'InputKind', 'InputUnit', 'tokenize_input', 'SessionState',
]
