# tests/test_parser.py
"""Tests for parsing assistant replies into suggestions."""
import pytest

from shellmend.ai.parser import parse_suggestions, CommandSuggestion, SuggestionBatch
from shellmend.constants import VALID_COMMAND_MESSAGE, DEFAULT_DESCRIPTION


def _pairs(suggestions):
    return [(s.command, s.description) for s in suggestions]


def test_numbered_arrow_format():
    reply = "1. mkdir → Create directory\n2. touch → Create a file"
    assert _pairs(parse_suggestions(reply)) == [
        ("mkdir", "Create directory"),
        ("touch", "Create a file"),
    ]


@pytest.mark.parametrize("arrow", ["→", "->", "=>"])
def test_arrow_variants(arrow):
    reply = f"1. node -v {arrow} Show Node.js version"
    assert _pairs(parse_suggestions(reply)) == [("node -v", "Show Node.js version")]


def test_numbered_colon_format():
    assert _pairs(parse_suggestions("1. ls -la: List all files")) == [("ls -la", "List all files")]


def test_numbered_hyphen_format():
    assert _pairs(parse_suggestions("1. git status - Show the working tree status")) == [
        ("git status", "Show the working tree status")
    ]


def test_quoted_command_with_dashes():
    reply = "1. `npm install`-- Install dependencies"
    assert _pairs(parse_suggestions(reply)) == [("npm install", "Install dependencies")]


def test_tilde_format():
    assert _pairs(parse_suggestions("pip install requests ~ Install requests")) == [
        ("pip install requests", "Install requests")
    ]


def test_separator_anywhere():
    assert _pairs(parse_suggestions("cd ..→Go up one directory")) == [("cd ..", "Go up one directory")]


def test_backticks_and_label_stripped():
    reply = "1. Command: `ls -la` → List files"
    assert _pairs(parse_suggestions(reply)) == [("ls -la", "List files")]


def test_numbered_line_with_known_program():
    assert _pairs(parse_suggestions("1. mkdir Create a directory")) == [("mkdir", "Create a directory")]


def test_numbered_line_without_known_program():
    assert _pairs(parse_suggestions("1. frobnicate")) == [("frobnicate", DEFAULT_DESCRIPTION)]


def test_order_preserved_with_duplicates():
    reply = "1. ls → a\n2. ls → a\n3. pwd → b"
    assert [s.command for s in parse_suggestions(reply)] == ["ls", "ls", "pwd"]


def test_blank_lines_ignored():
    reply = "\n\n1. ls → List\n\n   \n2. pwd → Print directory\n"
    assert len(parse_suggestions(reply)) == 2


@pytest.mark.parametrize("reply", [
    "Command is valid. No suggestions needed.",
    "The command looks right. no corrections needed",
])
def test_valid_sentinel(reply):
    suggestions = parse_suggestions(reply)
    assert len(suggestions) == 1
    assert suggestions[0].command == VALID_COMMAND_MESSAGE
    assert suggestions[0].description == ""


def test_prose_gives_empty_list():
    assert parse_suggestions("I am not sure what you meant by that.") == []


def test_empty_reply():
    assert parse_suggestions("") == []
    assert parse_suggestions("   \n  ") == []


def test_sweep_picks_up_known_commands():
    reply = "Try this instead:\ngit status\nor maybe that."
    assert _pairs(parse_suggestions(reply)) == [("git", "status")]


def test_markdown_fences_ignored():
    reply = "```\n1. ls → List files\n```"
    assert _pairs(parse_suggestions(reply)) == [("ls", "List files")]


def test_batch_model():
    batch = SuggestionBatch(command="mk dir", error_line="zsh: command not found: mk")
    assert batch.is_empty
    batch.suggestions.append(CommandSuggestion(command="mkdir dir", description="Create"))
    assert not batch.is_empty


def test_unnumbered_tilde_command():
    assert _pairs(parse_suggestions("mkdir ~ Create directory")) == [("mkdir", "Create directory")]


@pytest.mark.parametrize("line,expected", [
    ('1. git commit -m "fix bug" → Commit with a message', 'git commit -m "fix bug"'),
    ("1. echo 'hello' → Print hello", "echo 'hello'"),
    ('1. mkdir "my dir" → Create a directory with a space', 'mkdir "my dir"'),
    ('1. "git status" → Show status', "git status"),
    ("1. `grep -r 'todo' .` → Search for todo", "grep -r 'todo' ."),
])
def test_quoted_arguments_kept_intact(line, expected):
    suggestions = parse_suggestions(line)
    assert [s.command for s in suggestions] == [expected]


def test_label_prefix_with_quoted_argument():
    reply = '1. Command: `git commit -m "wip"` → Commit work in progress'
    assert _pairs(parse_suggestions(reply)) == [('git commit -m "wip"', "Commit work in progress")]
