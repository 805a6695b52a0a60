# shellmend/monitoring/dedup.py
"""
Time-bucketed suppression of repeated (command, error) pairs.
"""
import time
from collections import OrderedDict
from typing import Optional, Tuple

from shellmend.constants import DEDUP_WINDOW_SECONDS, MAX_DEDUP_ENTRIES
from shellmend.utils.logging import get_logger

logger = get_logger(__name__)

DedupKey = Tuple[str, str, int]


class DedupCache:
    """
    Remembers which command/error pairs were already handled.

    Keys are (command, error_line, floor(now / window)), so an identical
    failure is handled at most once per window bucket.
    """

    def __init__(self, window_seconds: int = DEDUP_WINDOW_SECONDS, max_entries: int = MAX_DEDUP_ENTRIES):
        self._window = window_seconds
        self._max_entries = max_entries
        # Insertion order doubles as age order for eviction
        self._keys: "OrderedDict[DedupKey, None]" = OrderedDict()

    def make_key(self, command: str, error_line: str, now: float) -> DedupKey:
        return (command, error_line, int(now // self._window))

    def should_process(
        self,
        command: str,
        error_line: str,
        now: Optional[float] = None,
        fresh: bool = False
    ) -> bool:
        """
        Decide whether a failure is new, recording it if so.

        Args:
            command: The command associated with the failure
            error_line: The evidence line
            now: Current time in seconds (defaults to time.time())
            fresh: Clear every key of this command before testing, so the
                failure is always processed (used for "command not found")

        Returns:
            True if the pair has not been seen in the current bucket
        """
        if now is None:
            now = time.time()
        if fresh:
            self.purge_command(command)

        key = self.make_key(command, error_line, now)
        if key in self._keys:
            logger.debug(f"Skipping duplicate command+error pair: {key}")
            return False

        self._keys[key] = None
        while len(self._keys) > self._max_entries:
            self._keys.popitem(last=False)
        return True

    def purge_command(self, command: str) -> int:
        """
        Drop every key recorded for a command.

        Returns:
            Number of keys removed
        """
        stale = [key for key in self._keys if key[0] == command]
        for key in stale:
            del self._keys[key]
        if stale:
            logger.debug(f"Purged {len(stale)} dedup keys for command: {command}")
        return len(stale)

    def clear(self) -> None:
        self._keys.clear()

    def __contains__(self, key: DedupKey) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)
