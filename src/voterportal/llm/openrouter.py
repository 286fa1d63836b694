"""
OpenRouter provider implementation.

Uses an OpenAI-compatible chat completions API (OpenRouter by default) with
image input to read Aadhaar cards.
"""

from typing import Optional

import openai
from loguru import logger

from .base import (
    CompletionResponse,
    ConfigurationError,
    IdDocumentExtractor,
    LLMError,
    RateLimitError,
)


class OpenRouterIdExtractor(IdDocumentExtractor):
    """Aadhaar extractor backed by a vision model on OpenRouter."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://openrouter.ai/api/v1",
        app_name: Optional[str] = "VoterPortal",
        client: Optional[openai.AsyncOpenAI] = None,
    ):
        """
        Initialize OpenRouter extractor.

        Args:
            api_key: OpenRouter (or other OpenAI-compatible) API key
            model: Vision-capable model identifier
            base_url: API base URL
            app_name: Optional app name for tracking
            client: Pre-built client (tests inject a mock here)
        """
        if not api_key and client is None:
            raise ConfigurationError("Vision API key is required")

        self.model = model
        self.client = client or openai.AsyncOpenAI(base_url=base_url, api_key=api_key)

        self.extra_headers = {}
        if app_name:
            self.extra_headers["X-Title"] = app_name

    @property
    def name(self) -> str:
        return "openrouter"

    async def complete_with_image(self, prompt: str, image_data_url: str) -> CompletionResponse:
        """Generate completion with image input using OpenRouter."""
        if not image_data_url.startswith("data:"):
            # Bare base64 from the camera component
            image_data_url = f"data:image/jpeg;base64,{image_data_url}"

        messages = [{
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image_data_url}},
            ],
        }]

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0,
                extra_headers=self.extra_headers if self.extra_headers else None,
            )
        except openai.RateLimitError as e:
            raise RateLimitError(f"Rate limit exceeded: {e}") from e
        except openai.OpenAIError as e:
            raise LLMError(f"Vision extraction failed: {e}") from e

        text = response.choices[0].message.content or ""
        tokens = response.usage.total_tokens if getattr(response, "usage", None) else None
        logger.debug(f"Vision response ({tokens} tokens): {text[:200]!r}")

        return CompletionResponse(
            text=text,
            model=self.model,
            provider=self.name,
            tokens_used=tokens,
        )
