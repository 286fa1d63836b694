"""Data models for voter records and store results."""

from voterportal.models.results import ErrorKind, StoreResult
from voterportal.models.voter import (
    DuplicateCheckResult,
    DuplicateMember,
    ExtractedIdentity,
    StoreMetadata,
    VoterKey,
    VoterRecord,
)

__all__ = [
    "DuplicateCheckResult",
    "DuplicateMember",
    "ErrorKind",
    "ExtractedIdentity",
    "StoreMetadata",
    "StoreResult",
    "VoterKey",
    "VoterRecord",
]
