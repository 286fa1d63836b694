"""Configuration module for VoterPortal."""

from voterportal.config.constants import (
    AADHAR_LENGTH,
    DEFAULT_GENDER,
    DEFAULT_REFERENCE_DATE,
    DELETE_REASONS,
    GENDER_OPTIONS,
)
from voterportal.config.settings import Config, get_config

__all__ = [
    "Config",
    "get_config",
    "AADHAR_LENGTH",
    "DEFAULT_GENDER",
    "DEFAULT_REFERENCE_DATE",
    "DELETE_REASONS",
    "GENDER_OPTIONS",
]
