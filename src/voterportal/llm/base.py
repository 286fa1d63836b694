"""
Base classes and interfaces for Aadhaar card extraction.
"""

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from voterportal.models import ExtractedIdentity
from voterportal.utils.formatting import normalize_aadhar, to_iso_date


# Custom exceptions
class LLMError(Exception):
    """Base exception for LLM-related errors."""
    pass


class RateLimitError(LLMError):
    """Raised when rate limits are exceeded."""
    pass


class ConfigurationError(LLMError):
    """Raised when provider is misconfigured."""
    pass


@dataclass
class CompletionResponse:
    """Response from a vision completion request."""
    text: str
    model: str
    provider: str
    tokens_used: Optional[int] = None
    metadata: dict[str, Any] = field(default_factory=dict)


EXTRACTION_PROMPT = (
    "This is a photo of an Indian Aadhaar card. Read the 12-digit Aadhaar "
    "number and the date of birth. Reply with JSON only, in the form "
    '{"aadhar": "123456789012", "dob": "DD/MM/YYYY"}. '
    "Use null for any value you cannot read. Ignore the 16-digit VID."
)

# 1234 5678 9012, 1234-5678-9012 or 123456789012, not part of a longer run
_AADHAR_PATTERN = re.compile(r"(?<!\d)(?<!\d[ \-])(\d{4})[ \-]?(\d{4})[ \-]?(\d{4})(?![ \-]?\d)")
_DATE_PATTERN = re.compile(r"\b(\d{2}[/\-.]\d{2}[/\-.]\d{4}|\d{4}-\d{2}-\d{2})\b")
_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def parse_identity_text(text: str | None) -> ExtractedIdentity:
    """Pull an Aadhaar number and birth date out of model output.

    Accepts the JSON reply the prompt asks for, and falls back to scanning
    free text when the model answers in prose.

    Args:
        text: Raw response text

    Returns:
        ExtractedIdentity with ISO dob; fields not found are None
    """
    if not text:
        return ExtractedIdentity()

    cleaned = _CODE_FENCE.sub("", text.strip())
    try:
        data = json.loads(cleaned)
    except ValueError:
        data = None

    if isinstance(data, dict):
        aadhar = normalize_aadhar(str(data.get("aadhar") or ""))
        return ExtractedIdentity(
            aadhar=aadhar if len(aadhar) == 12 else None,
            dob=to_iso_date(str(data.get("dob") or "")),
        )

    aadhar_match = _AADHAR_PATTERN.search(cleaned)
    date_match = _DATE_PATTERN.search(cleaned)
    return ExtractedIdentity(
        aadhar="".join(aadhar_match.groups()) if aadhar_match else None,
        dob=to_iso_date(date_match.group(1)) if date_match else None,
    )


class IdDocumentExtractor(ABC):
    """Reads identity fields from an Aadhaar card image."""

    @abstractmethod
    async def complete_with_image(self, prompt: str, image_data_url: str) -> CompletionResponse:
        """
        Generate completion with image input.

        Args:
            prompt: The text prompt
            image_data_url: Image as a base64 data URL (data:image/jpeg;base64,...)

        Returns:
            CompletionResponse with generated text

        Raises:
            RateLimitError: If rate limits exceeded
            LLMError: For other errors
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass

    async def extract(self, image_data_url: str) -> ExtractedIdentity:
        """Extract Aadhaar number and birth date from a card photo.

        Args:
            image_data_url: Card image as a base64 data URL

        Returns:
            Best-effort identity fields; None where unreadable

        Raises:
            LLMError: If the provider call fails
        """
        response = await self.complete_with_image(EXTRACTION_PROMPT, image_data_url)
        return parse_identity_text(response.text)
