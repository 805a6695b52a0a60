# shellmend/ai/parser.py
"""
Parsing of free-text assistant replies into command suggestions.

Replies are requested in one exact format, but models drift: numbering goes
missing, separators change, commands get wrapped in backticks. Each line is
tried against an ordered list of matchers and the first hit wins.
"""
import re
from typing import Callable, List, Optional

from pydantic import BaseModel, Field

from shellmend.constants import VALID_COMMAND_MESSAGE, DEFAULT_DESCRIPTION
from shellmend.utils.logging import get_logger

logger = get_logger(__name__)


class CommandSuggestion(BaseModel):
    """A corrected command proposed by the assistant."""
    command: str = Field(..., description="The suggested shell command")
    description: str = Field("", description="Short explanation of the command")


class SuggestionBatch(BaseModel):
    """Ordered suggestions produced for one failure."""
    command: str = Field(..., description="The command that failed")
    error_line: str = Field(..., description="The evidence line of the failure")
    suggestions: List[CommandSuggestion] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.suggestions


# Program names accepted by the last-resort matcher
COMMAND_TOKENS = (
    "git", "node", "npm", "npx", "python", "python3", "pip", "pip3", "cd", "ls",
    "mkdir", "touch", "rm", "cp", "mv", "echo", "cat", "ssh", "curl", "wget",
    "docker", "kubectl", "sudo", "brew", "apt",
)

SEPARATOR_CHARS = ("→", "~")

_VALID_SENTINEL_RE = re.compile(r"no (?:corrections|suggestions) needed", re.IGNORECASE)
_NUMBERING_RE = re.compile(r"^\s*\d+\.\s+")

_ARROW_RE = re.compile(r"^\s*\d+\.\s+(.+?)\s*(?:→|->|=>)\s*(.+)$")
_COLON_RE = re.compile(r"^\s*\d+\.\s+([^:]+):\s*(.+)$")
_HYPHEN_RE = re.compile(r"^\s*\d+\.\s+(.+?)\s+-\s+(.+)$")
_QUOTED_RE = re.compile(r"^\s*\d+\.\s+[`'\"](.+?)[`'\"]\s*[-–—]+\s*(.+)$")
_TILDE_RE = re.compile(r"^\s*(?:\d+\.\s+)?(.+?)\s+~\s+(.+)$")
_COMMAND_TOKEN_RE = re.compile(
    r"^(?:%s)(?:\s|$)" % "|".join(re.escape(token) for token in COMMAND_TOKENS),
    re.IGNORECASE,
)

_QUOTE_CHARS = "`'\""
_LABEL_RE = re.compile(r"^[A-Za-z][\w-]*:\s+")


def _unquote(text: str) -> str:
    """Remove one pair of quotes or backticks wrapping the whole text."""
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in _QUOTE_CHARS and text[0] not in text[1:-1]:
        text = text[1:-1].strip()
    return text


def _clean_command(command: str) -> str:
    """Strip surrounding quotes/backticks and a leading "label:" prefix."""
    command = _LABEL_RE.sub("", _unquote(command))
    return _unquote(command)


def _clean_description(description: str) -> str:
    return _unquote(description)


def _build(command: str, description: str) -> Optional[CommandSuggestion]:
    command = _clean_command(command)
    if not command:
        return None
    return CommandSuggestion(
        command=command,
        description=_clean_description(description) or DEFAULT_DESCRIPTION,
    )


def _from_regex(pattern: "re.Pattern") -> Callable[[str], Optional[CommandSuggestion]]:
    def matcher(line: str) -> Optional[CommandSuggestion]:
        match = pattern.match(line)
        if not match:
            return None
        return _build(match.group(1), match.group(2))
    return matcher


def match_separator(line: str) -> Optional[CommandSuggestion]:
    """Split at the first separator character found anywhere in the line."""
    positions = [line.find(sep) for sep in SEPARATOR_CHARS if line.find(sep) > 0]
    if not positions:
        return None
    index = min(positions)
    command = _NUMBERING_RE.sub("", line[:index])
    return _build(command, line[index + 1:])


def match_command_token(line: str, allow_placeholder: bool = True) -> Optional[CommandSuggestion]:
    """
    Last-resort matcher for lines without any recognisable separator.

    A line starting with a known program name is split at its first
    whitespace. Any other line becomes a bare command with a placeholder
    description when allow_placeholder is set.
    """
    text = _NUMBERING_RE.sub("", line).strip()
    if not text:
        return None

    if _COMMAND_TOKEN_RE.match(text):
        parts = text.split(None, 1)
        description = parts[1] if len(parts) > 1 else ""
        return _build(parts[0], description)

    if allow_placeholder:
        return _build(text, DEFAULT_DESCRIPTION)
    return None


# Tried in order for every non-blank line
STRATEGIES: List[Callable[[str], Optional[CommandSuggestion]]] = [
    _from_regex(_ARROW_RE),    # 1. node -v → Show version
    _from_regex(_COLON_RE),    # 1. node -v: Show version
    _from_regex(_HYPHEN_RE),   # 1. node -v - Show version
    _from_regex(_QUOTED_RE),   # 1. `node -v` -- Show version
    _from_regex(_TILDE_RE),    # node -v ~ Show version
    match_separator,           # node -v→Show version
]


def _match_line(line: str) -> Optional[CommandSuggestion]:
    for strategy in STRATEGIES:
        suggestion = strategy(line)
        if suggestion is not None:
            return suggestion

    # Numbered lines are list items even without a separator
    if _NUMBERING_RE.match(line):
        logger.debug(f"Fallback parsing for: {line.strip()!r}")
        return match_command_token(line, allow_placeholder=True)

    logger.debug(f"Line didn't match any suggestion format: {line!r}")
    return None


def parse_suggestions(text: str) -> List[CommandSuggestion]:
    """
    Parse an assistant reply into an ordered list of suggestions.

    Never raises. An unrecognisable reply yields an empty list.

    Args:
        text: The raw reply text

    Returns:
        Suggestions in reply order, repeats included
    """
    if not text or not text.strip():
        return []

    if _VALID_SENTINEL_RE.search(text):
        logger.debug("Command is valid message detected")
        return [CommandSuggestion(command=VALID_COMMAND_MESSAGE, description="")]

    lines = text.splitlines()
    logger.debug(f"Parsing {len(lines)} lines of suggestions")

    suggestions: List[CommandSuggestion] = []
    for line in lines:
        if not line.strip():
            continue
        suggestion = _match_line(line)
        if suggestion is not None:
            suggestions.append(suggestion)

    if not suggestions:
        logger.debug("No structured suggestions found. Sweeping lines for known commands...")
        for line in lines:
            suggestion = match_command_token(line, allow_placeholder=False)
            if suggestion is not None:
                suggestions.append(suggestion)

    return suggestions
