"""
Factory for the configured Aadhaar extractor.
"""

from typing import Optional

from loguru import logger

from voterportal.config import Config

from .base import IdDocumentExtractor
from .openrouter import OpenRouterIdExtractor


def create_id_extractor(config: Config) -> Optional[IdDocumentExtractor]:
    """
    Build the extractor described by configuration.

    Args:
        config: Application configuration

    Returns:
        Extractor instance, or None when no API key is configured
    """
    if not config.ocr_enabled:
        logger.info("Aadhaar photo extraction disabled (no ocr_api_key)")
        return None

    logger.info(f"Aadhaar photo extraction via {config.ocr_base_url} ({config.ocr_model})")
    return OpenRouterIdExtractor(
        api_key=config.ocr_api_key,
        model=config.ocr_model,
        base_url=config.ocr_base_url,
    )
