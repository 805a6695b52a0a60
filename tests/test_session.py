# tests/test_session.py
"""Tests for per-connection session state."""
from shellmend.monitoring.single_flight import PipelineState


def test_record_input_purges_previous_command(session_state):
    session_state.record_input("make\r")
    session_state.dedup.should_process("make", "error: a")
    session_state.last_error_line = "error: a"

    session_state.record_input("ls\r")

    assert session_state.dedup.purge_command("make") == 0
    assert session_state.last_error_line == ""


def test_correlate_command_purges_replaced_command(session_state):
    session_state.record_input("make\r")
    session_state.dedup.should_process("make", "error: a")
    session_state.last_error_line = "zsh: command not found: mk"

    session_state.correlate_command("mk")

    assert session_state.last_command == "mk"
    assert session_state.dedup.purge_command("make") == 0
    # The error line is the correlated command's own
    assert session_state.last_error_line == "zsh: command not found: mk"


def test_correlate_same_command_keeps_keys(session_state):
    session_state.record_input("mk\r")
    session_state.dedup.should_process("mk", "zsh: command not found: mk")

    session_state.correlate_command("mk")

    assert len(session_state.dedup) == 1


def test_get_context_dict(session_state):
    session_state.record_input("git stauts\r")
    session_state.record_input("git sta")
    session_state.last_error_line = "git: 'stauts' is not a git command"

    context = session_state.get_context_dict()

    assert context["session_id"] == "test-session"
    assert context["buffer"] == "git sta"
    assert context["last_command"] == "git stauts"
    assert context["last_error_line"] == "git: 'stauts' is not a git command"
    assert context["recent_commands"] == ["git stauts"]
    assert context["dedup_keys"] == 0
    assert context["pipeline_state"] == PipelineState.IDLE.value
    assert context["created"] == session_state.created.isoformat()
