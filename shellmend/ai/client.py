# shellmend/ai/client.py
import asyncio
from typing import Dict, Any, Optional

import google.generativeai as genai
from google.generativeai.types import GenerationConfig

from pydantic import BaseModel, Field

from shellmend.constants import GEMINI_MODEL, GEMINI_MAX_TOKENS, GEMINI_TEMPERATURE
from shellmend.utils.logging import get_logger

logger = get_logger(__name__)


class GeminiRequest(BaseModel):
    prompt: str
    temperature: float = Field(default=GEMINI_TEMPERATURE)
    max_output_tokens: int = Field(default=GEMINI_MAX_TOKENS)


class GeminiResponse(BaseModel):
    text: str
    raw_response: Dict[str, Any]


class GeminiClient:
    """Thin async wrapper over the Gemini SDK. Makes a single attempt per call."""

    def __init__(self, api_key: str, model_name: Optional[str] = None):
        if not api_key:
            logger.error("Gemini API key is not configured.")
            raise ValueError("Gemini API key is not configured. Run 'shellmend init' to set it up.")

        self.model_name = model_name or GEMINI_MODEL
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(self.model_name)
        logger.debug(f"Gemini API client initialized with model: {self.model_name}")

    async def generate_text(self, request: GeminiRequest) -> GeminiResponse:
        """
        Send a prompt and return the reply text.

        Raises:
            ValueError: If the prompt is blocked or the reply holds no text
            Exception: Whatever the SDK raises for transport or API failures
        """
        logger.debug(f"GEMINI API REQUEST PROMPT ({len(request.prompt)} chars)")
        logger.debug(f"Temperature: {request.temperature}, Max Tokens: {request.max_output_tokens}")

        generation_config = GenerationConfig(
            temperature=request.temperature,
            max_output_tokens=request.max_output_tokens,
        )

        # The SDK call blocks, so it runs in a worker thread
        response_obj = await asyncio.to_thread(
            self.model.generate_content,
            request.prompt,
            generation_config=generation_config,
        )

        prompt_feedback = getattr(response_obj, "prompt_feedback", None)
        if prompt_feedback and getattr(prompt_feedback, "block_reason", None):
            error_message = f"Prompt blocked by API safety filters: {prompt_feedback.block_reason}"
            logger.error(error_message)
            raise ValueError(error_message)

        response_text_content = ""
        try:
            response_text_content = response_obj.text or ""
        except ValueError:
            # .text raises when the candidate has no text parts
            parts = getattr(response_obj, "parts", None) or []
            response_text_content = "".join(part.text for part in parts if hasattr(part, "text"))

        if not response_text_content:
            logger.error("Empty response content from Gemini API.")
            raise ValueError("Empty response from Gemini API (no text or parts with text).")

        raw_response_data: Dict[str, Any] = {"text_content_from_api": response_text_content}
        candidates = getattr(response_obj, "candidates", None)
        if candidates:
            candidate_one = candidates[0]
            if hasattr(candidate_one, "to_dict"):
                raw_response_data = candidate_one.to_dict()
            elif isinstance(candidate_one, dict):
                raw_response_data = candidate_one

        result = GeminiResponse(
            text=response_text_content,
            raw_response=raw_response_data,
        )

        logger.debug(f"Gemini API response received. Length: {len(result.text)}")
        return result
