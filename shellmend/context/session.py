# shellmend/context/session.py

from datetime import datetime
from typing import Any, Dict, List, Optional

from shellmend.config import MonitorConfig
from shellmend.context.tracker import CommandTracker, CommandSubmission
from shellmend.monitoring.dedup import DedupCache
from shellmend.monitoring.single_flight import SingleFlight
from shellmend.utils.logging import get_logger

logger = get_logger(__name__)


class SessionState:
    """
    Everything known about one active shell connection.

    Lives only as long as the connection; nothing here is persisted.
    """

    def __init__(self, session_id: str, monitor: Optional[MonitorConfig] = None):
        """
        Initialize session state.

        Args:
            session_id: Identifier of the shell connection
            monitor: Capacity and window settings
        """
        monitor = monitor or MonitorConfig()
        self.session_id = session_id
        self.tracker = CommandTracker(history_capacity=monitor.history_capacity)
        self.dedup = DedupCache(
            window_seconds=monitor.dedup_window_seconds,
            max_entries=monitor.max_dedup_entries,
        )
        self.guard = SingleFlight()
        self.last_error_line = ""
        self.last_batch = None
        self.config_error_reported = False
        self.closed = False
        self.created = datetime.now()

    @property
    def last_command(self) -> str:
        return self.tracker.last_command

    @last_command.setter
    def last_command(self, command: str) -> None:
        self.tracker.last_command = command

    @property
    def history(self):
        return self.tracker.history

    def record_input(self, data: str) -> List[CommandSubmission]:
        """
        Apply operator input and react to command changes.

        When a different command is submitted, dedup keys of the previous
        command are purged and the last-seen error line is cleared, so the
        new command's failures are never suppressed by stale state.

        Args:
            data: Raw input text sent toward the shell

        Returns:
            Submissions registered by this input
        """
        submissions = self.tracker.feed(data)
        for submission in submissions:
            if submission.changed:
                self.dedup.purge_command(submission.previous)
                self.last_error_line = ""
        return submissions

    def correlate_command(self, command: str) -> None:
        """
        Attribute the current failure to a command named by the shell.

        Dedup keys of the replaced command are purged as on submission. The
        last-seen error line is kept, since it already belongs to the new
        command and must still suppress an immediate repeat.

        Args:
            command: The command the failure was correlated with
        """
        previous = self.last_command
        if command == previous:
            return
        self.tracker.last_command = command
        if previous:
            self.dedup.purge_command(previous)

    def get_context_dict(self) -> Dict[str, Any]:
        """
        Get the session state as a dictionary.

        Returns:
            A dictionary representation used for logging and debugging
        """
        return {
            "session_id": self.session_id,
            "buffer": self.tracker.buffer,
            "last_command": self.last_command,
            "last_error_line": self.last_error_line,
            "recent_commands": self.history.as_list(),
            "dedup_keys": len(self.dedup),
            "pipeline_state": self.guard.state.value,
            "created": self.created.isoformat(),
        }
