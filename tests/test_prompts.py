# tests/test_prompts.py
"""Tests for prompt building."""
import pytest

from shellmend.ai.prompts import build_fix_prompt, identify_related_command, SEPARATOR
from shellmend.ai.fallbacks import fallback_suggestions


def test_prompt_embeds_command_and_error():
    prompt = build_fix_prompt("git stauts", "git: 'stauts' is not a git command")

    assert "User command: git stauts" in prompt
    assert "Error message: git: 'stauts' is not a git command" in prompt
    assert f"1. <command> {SEPARATOR} <description>" in prompt
    assert "No suggestions needed" in prompt


def test_prompt_adds_related_hint():
    prompt = build_fix_prompt("mk dir", "zsh: command not found: mk")
    assert "Possible related command: mkdir" in prompt


def test_prompt_without_related_hint():
    assert "Possible related command" not in build_fix_prompt("git stauts", "error")


@pytest.mark.parametrize("name,related", [
    ("mk", "mkdir"),
    ("mkdi", "mkdir"),
    ("pyhton", "python"),
    ("nodejs", "node"),
    ("npm-run", "node"),
    ("kubectl", "kubernetes"),
    ("ls", "ls"),
])
def test_identify_related_command(name, related):
    assert identify_related_command(name) == related


def test_fallback_for_ver_flag():
    suggestions = fallback_suggestions("python -ver", "python: unknown option -ver")
    assert [(s.command, s.description) for s in suggestions] == [
        ("python -v", "Use -v instead of -ver for version flag")
    ]


def test_no_fallback_for_other_commands():
    assert fallback_suggestions("make", "error: missing target") == []


def test_fallback_for_node_ver_flag_not_repeated():
    suggestions = fallback_suggestions("node -ver", "/usr/local/bin/node: bad option: -ver")
    assert [(s.command, s.description) for s in suggestions] == [
        ("node -v", "Use -v instead of -ver for version flag")
    ]


def test_fallback_for_node_bad_option():
    suggestions = fallback_suggestions("node --inspct", "node: bad option: --inspct")
    assert [s.command for s in suggestions] == ["node -v", "node -h"]
