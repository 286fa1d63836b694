"""Utility helpers for VoterPortal."""
