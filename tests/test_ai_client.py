# tests/test_ai_client.py
"""Tests for the Gemini API client."""
import pytest
from unittest.mock import MagicMock

from shellmend.ai.client import GeminiClient, GeminiRequest
from shellmend.constants import GEMINI_MODEL


@pytest.fixture
def client(mock_genai):
    """Create a test client with mocked API."""
    return GeminiClient(api_key="test_key")


def test_client_initialization(mock_genai):
    """Test the client initialization."""
    GeminiClient(api_key="test_key")

    mock_genai.configure.assert_called_once_with(api_key="test_key")
    mock_genai.GenerativeModel.assert_called_once_with(GEMINI_MODEL)


def test_client_custom_model(mock_genai):
    client = GeminiClient(api_key="test_key", model_name="other-model")
    assert client.model_name == "other-model"
    mock_genai.GenerativeModel.assert_called_once_with("other-model")


def test_client_requires_api_key(mock_genai):
    with pytest.raises(ValueError):
        GeminiClient(api_key=None)
    mock_genai.configure.assert_not_called()


@pytest.mark.asyncio
async def test_generate_text(client):
    """Test the generate_text method."""
    response = await client.generate_text(GeminiRequest(prompt="Test prompt"))

    assert response.text == "1. ls -la → List files"
    assert response.raw_response == {"content": "1. ls -la → List files"}


@pytest.mark.asyncio
async def test_generate_text_passes_prompt(mock_genai, client):
    await client.generate_text(GeminiRequest(prompt="Test prompt"))

    generate = mock_genai.GenerativeModel.return_value.generate_content
    args, kwargs = generate.call_args
    assert args == ("Test prompt",)
    assert "generation_config" in kwargs


@pytest.mark.asyncio
async def test_api_errors_propagate(mock_genai, client):
    mock_genai.GenerativeModel.return_value.generate_content.side_effect = RuntimeError("API error")

    with pytest.raises(RuntimeError, match="API error"):
        await client.generate_text(GeminiRequest(prompt="Test prompt"))


@pytest.mark.asyncio
async def test_blocked_prompt(mock_genai, client):
    mock_genai.GenerativeModel.return_value.generate_content.return_value = MagicMock(
        text="",
        prompt_feedback=MagicMock(block_reason="SAFETY"),
        candidates=[],
    )

    with pytest.raises(ValueError, match="blocked"):
        await client.generate_text(GeminiRequest(prompt="Test prompt"))


@pytest.mark.asyncio
async def test_empty_response(mock_genai, client):
    """Test handling of empty responses."""
    mock_genai.GenerativeModel.return_value.generate_content.return_value = MagicMock(
        text="",
        prompt_feedback=None,
        parts=[],
        candidates=[{"content": ""}],
    )

    with pytest.raises(ValueError, match="Empty response"):
        await client.generate_text(GeminiRequest(prompt="Test prompt"))
