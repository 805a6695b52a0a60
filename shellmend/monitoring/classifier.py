# shellmend/monitoring/classifier.py
"""
Failure detection in streamed shell output.

Shell output arrives in arbitrary chunks. The classifier decides, per chunk,
whether it carries evidence of a failed command and picks the single line
that best shows it.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Pattern, Tuple

from shellmend.utils.logging import get_logger

logger = get_logger(__name__)


class ErrorKind(str, Enum):
    """Classes of failure recognised in shell output."""
    COMMAND_NOT_FOUND = "command_not_found"
    PERMISSION_DENIED = "permission_denied"
    MISSING_PATH = "missing_path"
    BAD_OPTION = "bad_option"
    UNKNOWN_COMMAND = "unknown_command"
    NOT_A_DIRECTORY = "not_a_directory"
    SYNTAX_ERROR = "syntax_error"
    CRASH = "crash"
    RUNTIME_ERROR = "runtime_error"
    EXCEPTION = "exception"
    GENERIC = "generic"


# Ordered most specific first; the first pattern matching a line names its kind
ERROR_PATTERNS: List[Tuple[str, ErrorKind]] = [
    (r"\w+:\s+command not found:\s+\S+", ErrorKind.COMMAND_NOT_FOUND),  # zsh: command not found: mk
    (r"command not found", ErrorKind.COMMAND_NOT_FOUND),
    (r"permission denied", ErrorKind.PERMISSION_DENIED),
    (r"no such file or directory", ErrorKind.MISSING_PATH),
    (r"cannot access", ErrorKind.MISSING_PATH),
    (r"/\S*node:.*bad option", ErrorKind.BAD_OPTION),  # /usr/local/bin/node: bad option: -ver
    (r"bad option", ErrorKind.BAD_OPTION),
    (r"\b(?:unknown|unrecognized|invalid|illegal) (?:option|flag)", ErrorKind.BAD_OPTION),
    (r"bad flag", ErrorKind.BAD_OPTION),
    (r"\b(?:unknown|unrecognized) command", ErrorKind.UNKNOWN_COMMAND),
    (r"not a directory", ErrorKind.NOT_A_DIRECTORY),
    (r"not recognized", ErrorKind.UNKNOWN_COMMAND),
    (r"syntax error", ErrorKind.SYNTAX_ERROR),
    (r"segmentation fault", ErrorKind.CRASH),
    (r"\b(?:ModuleNotFoundError|ImportError|AttributeError)\b", ErrorKind.RUNTIME_ERROR),
    (r"python[\d.]*:.*error", ErrorKind.RUNTIME_ERROR),
    (r"traceback", ErrorKind.EXCEPTION),
    (r"exception", ErrorKind.EXCEPTION),
    (r"error:", ErrorKind.GENERIC),
    (r"failed:", ErrorKind.GENERIC),
]

# CSI sequences, OSC sequences (terminated by BEL or ST) and two-character escapes
ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)|\x1b[@-Z\\-_]")
LINE_SPLIT_RE = re.compile(r"\r\n|\n|\r")

_SHELL_NOT_FOUND_RE = re.compile(r"\w+:\s+command not found:\s+(\S+)", re.IGNORECASE)
_PLAIN_NOT_FOUND_RE = re.compile(r"([^\s:]+):\s+command not found", re.IGNORECASE)


@dataclass(frozen=True)
class ErrorEvent:
    """A detected failure: the evidence line and the command it belongs to."""
    line: str
    kind: ErrorKind
    associated_command: str = ""


def strip_ansi(text: str) -> str:
    """Remove terminal escape sequences from text."""
    return ANSI_ESCAPE_RE.sub("", text)


def extract_missing_command(line: str) -> Optional[str]:
    """
    Pull the program name out of a "command not found" line.

    Handles both "zsh: command not found: mk" and "bash: mk: command not found".
    """
    match = _SHELL_NOT_FOUND_RE.search(line)
    if match:
        return match.group(1).strip()
    match = _PLAIN_NOT_FOUND_RE.search(line)
    if match:
        return match.group(1).strip()
    return None


class OutputClassifier:
    """Finds the evidence line of a failure in a chunk of shell output."""

    def __init__(self, patterns: Optional[List[Tuple[str, ErrorKind]]] = None):
        patterns = patterns or ERROR_PATTERNS
        self._patterns: List[Tuple[Pattern, ErrorKind]] = [
            (re.compile(pattern, re.IGNORECASE), kind) for pattern, kind in patterns
        ]
        self._any = re.compile("|".join(f"(?:{pattern})" for pattern, _ in patterns), re.IGNORECASE)

    def match_line(self, line: str) -> Optional[ErrorKind]:
        """Return the kind of the first pattern matching a line, if any."""
        for pattern, kind in self._patterns:
            if pattern.search(line):
                return kind
        return None

    def classify(self, chunk: str, command: str = "") -> Optional[ErrorEvent]:
        """
        Classify a chunk of shell output.

        Args:
            chunk: Raw output text as received from the shell
            command: The command to associate with a detected failure

        Returns:
            An ErrorEvent for the first matching line, or None when the chunk
            holds no evidence of failure
        """
        text = strip_ansi(chunk)

        # Fast reject before splitting into lines
        if not self._any.search(text):
            return None

        for raw_line in LINE_SPLIT_RE.split(text):
            line = raw_line.strip()
            if not line:
                continue
            kind = self.match_line(line)
            if kind is not None:
                logger.debug(f"Error message identified ({kind.value}): {line}")
                return ErrorEvent(line=line, kind=kind, associated_command=command)

        # A pattern matched across a line break but no single line carries it
        logger.debug("Chunk matched an error pattern but no single line did")
        return None
