# shellmend/context/tracker.py
"""
Reconstruction of the logical command line from raw terminal input.

Keystrokes travel to the shell as raw bytes. The tracker follows the same
stream and keeps a buffer of what the operator typed, so that when a failure
shows up in the output we know which command produced it.
"""
import re
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Iterator, List, Optional

from shellmend.constants import HISTORY_CAPACITY
from shellmend.utils.logging import get_logger

logger = get_logger(__name__)

ESC = "\x1b"
CTRL_C = "\x03"
BACKSPACE_CHARS = ("\x7f", "\b")

# CSI (ESC [ params final), SS3 (ESC O x) and two-character escapes (ESC x)
_ESCAPE_RE = re.compile(r"\x1b(?:\[[0-?]*[ -/]*[@-~]|O.|.)?", re.DOTALL)
_TEXT_RE = re.compile(r"[^\x00-\x1f\x7f]+")


class InputKind(Enum):
    """Kinds of input unit the tracker understands."""
    TEXT = "text"
    ENTER = "enter"
    BACKSPACE = "backspace"
    CTRL_C = "ctrl_c"
    CONTROL = "control"


@dataclass(frozen=True)
class InputUnit:
    """One unit of operator input."""
    kind: InputKind
    text: str = ""


def tokenize_input(data: str) -> Iterator[InputUnit]:
    """
    Split a raw input read into input units.

    A single read may hold several keystrokes (type-ahead, pastes, or a
    terminal that batches writes), so each one is classified separately.

    Args:
        data: Raw text read from the operator's terminal

    Yields:
        InputUnit instances in input order
    """
    pos = 0
    length = len(data)
    while pos < length:
        char = data[pos]

        if char == "\r":
            # \r\n is a single Enter
            pos += 2 if data.startswith("\r\n", pos) else 1
            yield InputUnit(InputKind.ENTER)
        elif char == "\n":
            pos += 1
            yield InputUnit(InputKind.ENTER)
        elif char in BACKSPACE_CHARS:
            pos += 1
            yield InputUnit(InputKind.BACKSPACE)
        elif char == CTRL_C:
            pos += 1
            yield InputUnit(InputKind.CTRL_C)
        elif char == ESC:
            match = _ESCAPE_RE.match(data, pos)
            yield InputUnit(InputKind.CONTROL, match.group(0))
            pos = match.end()
        else:
            match = _TEXT_RE.match(data, pos)
            if match:
                yield InputUnit(InputKind.TEXT, match.group(0))
                pos = match.end()
            else:
                # Any other C0 control character (tab, Ctrl-D, ...)
                yield InputUnit(InputKind.CONTROL, char)
                pos += 1


class RecentCommands:
    """Bounded, de-duplicated history of submitted commands."""

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        self._items: Deque[str] = deque(maxlen=capacity)

    def add(self, command: str) -> bool:
        """
        Record a command unless it is already present.

        Returns:
            True if the command was appended
        """
        if command in self._items:
            return False
        # deque(maxlen=...) drops the oldest entry on overflow
        self._items.append(command)
        return True

    def find_matching(self, name: str) -> Optional[str]:
        """
        Find the most recent command that invokes the given program name.

        Args:
            name: Program name, e.g. taken from "zsh: command not found: mk"

        Returns:
            The matching command, or None
        """
        for command in reversed(self._items):
            if command == name or command.startswith(name + " "):
                return command
        return None

    @property
    def capacity(self) -> int:
        return self._items.maxlen

    def __contains__(self, command: str) -> bool:
        return command in self._items

    def __len__(self) -> int:
        return len(self._items)

    def as_list(self) -> List[str]:
        return list(self._items)


@dataclass(frozen=True)
class CommandSubmission:
    """Result of an Enter keystroke that registered a command."""
    command: str
    previous: str

    @property
    def changed(self) -> bool:
        return self.command != self.previous


class CommandTracker:
    """
    State machine that follows operator keystrokes.

    The tracker never fails; it only mutates its buffer, the last submitted
    command and the recent-command history.
    """

    def __init__(self, history_capacity: int = HISTORY_CAPACITY):
        self.buffer = ""
        self.last_command = ""
        self.history = RecentCommands(history_capacity)

    def feed(self, data: str) -> List[CommandSubmission]:
        """
        Apply a raw input read.

        Args:
            data: Raw text sent toward the shell

        Returns:
            The submissions registered by Enter keystrokes in this read
        """
        submissions = []
        for unit in tokenize_input(data):
            submission = self.apply(unit)
            if submission is not None:
                submissions.append(submission)
        return submissions

    def apply(self, unit: InputUnit) -> Optional[CommandSubmission]:
        """Apply a single input unit."""
        if unit.kind is InputKind.ENTER:
            return self._submit()

        if unit.kind is InputKind.BACKSPACE:
            self.buffer = self.buffer[:-1]
        elif unit.kind is InputKind.CTRL_C:
            self.buffer = ""
        elif unit.kind is InputKind.TEXT:
            self.buffer += unit.text
        # CONTROL units (cursor keys, tab, ...) never reach the buffer
        return None

    def _submit(self) -> Optional[CommandSubmission]:
        command = self.buffer.strip()
        self.buffer = ""
        if not command:
            return None

        submission = CommandSubmission(command=command, previous=self.last_command)
        self.last_command = command
        if self.history.add(command):
            logger.debug(f"Updated command history: {self.history.as_list()}")
        logger.debug(f"Command submitted: {command}")
        return submission
