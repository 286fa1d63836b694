"""Installed VoterPortal version."""

from importlib.metadata import PackageNotFoundError, version

__all__ = ["VERSION", "format_version_string"]


def _installed_version() -> str:
    try:
        return version("voterportal")
    except PackageNotFoundError:
        # Source checkout that was never installed
        return "0.0.0+local"


VERSION = _installed_version()


def format_version_string() -> str:
    """One-line banner shown by the CLI, e.g. ``VoterPortal v0.1.0``."""
    return f"VoterPortal v{VERSION}"
