# shellmend/ai/fetcher.py
"""
Request/response exchange with the assistant for one failed command.
"""
import asyncio
from typing import Callable, Optional

from shellmend.ai.client import GeminiClient, GeminiRequest
from shellmend.ai.prompts import build_fix_prompt
from shellmend.config import ApiConfig
from shellmend.core.errors import InputError, ConfigError, UpstreamError, FormatError
from shellmend.utils.logging import get_logger

logger = get_logger(__name__)


class SuggestionFetcher:
    """
    Sends a correction request and returns the assistant's raw reply text.

    The client is created on first use, so a missing credential surfaces as
    a ConfigError at fetch time rather than at import time.
    """

    def __init__(
        self,
        api_config: Optional[ApiConfig] = None,
        client_factory: Callable[..., GeminiClient] = GeminiClient
    ):
        """
        Initialize the fetcher.

        Args:
            api_config: Credential, model and timeout settings. Defaults to the
                loaded application configuration.
            client_factory: Callable building the assistant client from an
                API key and a model name
        """
        if api_config is None:
            from shellmend.config import config_manager
            api_config = config_manager.config.api
        self._api_config = api_config
        self._client_factory = client_factory
        self._client = None

    @property
    def timeout(self) -> float:
        return self._api_config.request_timeout

    def _get_client(self):
        if self._client is None:
            self._client = self._client_factory(
                api_key=self._api_config.gemini_api_key,
                model_name=self._api_config.model,
            )
        return self._client

    async def fetch(self, command: str, error_line: str) -> str:
        """
        Ask the assistant for corrected alternatives of a failed command.

        Args:
            command: The command that failed
            error_line: The evidence line of the failure

        Returns:
            The reply text, unparsed

        Raises:
            InputError: If the command is empty
            ConfigError: If no credential is configured
            UpstreamError: On transport failure, API failure or timeout
            FormatError: If the reply carries no text
        """
        if not command or not command.strip():
            raise InputError("Command is required")

        if not self._api_config.gemini_api_key:
            raise ConfigError("Gemini API key is not configured. Run 'shellmend init' to set it up.")

        prompt = build_fix_prompt(command, error_line)
        logger.with_context(command=command).debug(f"Requesting suggestions for error: {error_line}")

        try:
            client = self._get_client()
        except ValueError as e:
            raise ConfigError(str(e)) from e

        try:
            response = await asyncio.wait_for(
                client.generate_text(GeminiRequest(prompt=prompt)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Suggestion request timed out after {self.timeout}s")
            raise UpstreamError(f"Request timed out after {self.timeout}s") from e
        except ValueError as e:
            # The client signals blocked prompts and text-less replies this way
            logger.error(f"Invalid response from assistant: {e}")
            raise FormatError(str(e)) from e
        except Exception as e:
            logger.error(f"Error calling assistant API: {e}")
            raise UpstreamError(f"Failed to get suggestions: {e}") from e

        text = (response.text or "").strip()
        if not text:
            raise FormatError("Invalid response format from assistant")

        logger.debug(f"Received reply of {len(text)} chars")
        return text
