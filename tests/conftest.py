# tests/conftest.py
"""
Common test fixtures for shellmend.
"""
import pytest
from unittest.mock import patch, MagicMock, AsyncMock

from shellmend.config import ApiConfig, MonitorConfig
from shellmend.context.session import SessionState
from shellmend.orchestrator import SessionOrchestrator, SuggestionListener


class RecordingListener(SuggestionListener):
    """Collects everything the pipeline reports for assertions."""
    def __init__(self):
        self.failures = []
        self.batches = []
        self.messages = []

    def on_failure_detected(self, message):
        self.failures.append(message)

    def on_suggestions_ready(self, command, error_line, batch):
        self.batches.append((command, error_line, batch))

    def on_message(self, text, is_error=False):
        self.messages.append((text, is_error))

    @property
    def errors(self):
        return [text for text, is_error in self.messages if is_error]


@pytest.fixture
def listener():
    """Returns a RecordingListener instance."""
    return RecordingListener()


@pytest.fixture
def api_config():
    """API settings with a test credential."""
    return ApiConfig(gemini_api_key="test_key", model="test-model", request_timeout=1)


@pytest.fixture
def session_state():
    """Fresh session state with default monitor settings."""
    return SessionState("test-session", MonitorConfig())


@pytest.fixture
def mock_fetcher():
    """A fetcher whose fetch() returns a two-item reply."""
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock(return_value=(
        "1. mkdir dir → Create a directory\n"
        "2. mkdir -p dir → Create a directory with parents"
    ))
    return fetcher


@pytest.fixture
def orchestrator(session_state, listener, mock_fetcher):
    """Orchestrator with a mocked fetcher and no grace delay."""
    return SessionOrchestrator(session_state, listener, fetcher=mock_fetcher, grace_delay=0)


@pytest.fixture
def mock_genai():
    """Mock the google.generativeai module."""
    with patch("shellmend.ai.client.genai") as mock:
        mock.GenerativeModel.return_value.generate_content.return_value = MagicMock(
            text="1. ls -la → List files",
            prompt_feedback=None,
            candidates=[{"content": "1. ls -la → List files"}],
        )
        yield mock
