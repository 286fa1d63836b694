"""Storage for the reference voter sheet."""

from voterportal.database.voter_sheet import VoterSheetRepository

__all__ = ["VoterSheetRepository"]
