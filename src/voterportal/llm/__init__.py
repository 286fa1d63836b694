"""
Aadhaar card extraction for VoterPortal.

Reads the Aadhaar number and birth date from a card photo using a vision
model behind an OpenAI-compatible API.
"""

from .base import (
    CompletionResponse,
    ConfigurationError,
    IdDocumentExtractor,
    LLMError,
    RateLimitError,
    parse_identity_text,
)
from .factory import create_id_extractor
from .openrouter import OpenRouterIdExtractor

__all__ = [
    'CompletionResponse',
    'ConfigurationError',
    'IdDocumentExtractor',
    'LLMError',
    'OpenRouterIdExtractor',
    'RateLimitError',
    'create_id_extractor',
    'parse_identity_text',
]
