"""
Feedback generator clients.

The orchestrator only depends on the FeedbackGenerator protocol; the Gemini
client talks to Gemini through its OpenAI compatibility endpoint.
"""

import logging
from typing import Optional, Protocol, runtime_checkable

from openai import AsyncOpenAI, OpenAIError

from interview_coach.config import (
    get_feedback_model,
    get_feedback_temperature,
    get_feedback_timeout_seconds,
    get_gemini_api_key,
)
from ..exceptions import GenerationFailedError

logger = logging.getLogger(__name__)


@runtime_checkable
class FeedbackGenerator(Protocol):
    """Anything that turns a prompt into a text completion."""

    async def generate(self, prompt: str) -> str:
        """Return the completion text.

        Raises:
            GenerationFailedError: The capability failed or returned nothing.
        """
        ...


class GeminiFeedbackGenerator:
    """Feedback generator backed by Gemini via OpenAI compatibility"""

    # Gemini OpenAI compatibility endpoint
    GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """Initialize Gemini client using OpenAI SDK"""
        self.model = model or get_feedback_model()
        self.temperature = get_feedback_temperature() if temperature is None else temperature

        if client is not None:
            self.client = client
            return

        api_key = api_key or get_gemini_api_key()
        if not api_key:
            raise ValueError("Gemini API key not configured")

        # Retries are left to the caller: a failed call is reported, not repeated.
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=self.GEMINI_BASE_URL,
            timeout=timeout or get_feedback_timeout_seconds(),
            max_retries=0,
        )

    async def generate(self, prompt: str) -> str:
        """Generate a non-streaming completion for ``prompt``."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                stream=False,
            )
        except OpenAIError as e:
            logger.error("Gemini API error: %s", str(e))
            raise GenerationFailedError(
                "Failed to get AI feedback",
                details={"model": self.model, "error": type(e).__name__},
            ) from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            logger.error("Gemini returned an empty completion for model %s", self.model)
            raise GenerationFailedError(
                "AI returned an empty response",
                details={"model": self.model},
            )
        return content
