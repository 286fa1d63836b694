"""Command-line interface for VoterPortal.

This module provides the CLI commands for starting the data-entry UI and
the reference voter sheet store.
"""

import sys
from typing import Optional

from loguru import logger

from voterportal.version import format_version_string

__all__ = ["cli_main"]


def print_version() -> None:
    """Print version information."""
    print(format_version_string())


def cmd_start() -> int:
    """Start the data-entry UI in the foreground.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    print_version()
    print()
    print("Starting VoterPortal...")
    print("(Use Ctrl+C to stop)")
    print()

    try:
        from voterportal.main import main as run_app

        run_app()
        return 0
    except KeyboardInterrupt:
        print("\n✓ VoterPortal stopped")
        return 0
    except Exception as e:
        print(f"\n✗ Error: {e}")
        logger.exception("Application error")
        return 1


def cmd_store() -> int:
    """Serve the reference voter sheet store.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    print_version()
    print()

    try:
        from voterportal.main import run_store

        run_store()
        return 0
    except KeyboardInterrupt:
        print("\n✓ Store stopped")
        return 0
    except Exception as e:
        print(f"\n✗ Store error: {e}", file=sys.stderr)
        logger.exception("Store error")
        return 1


def print_help() -> None:
    """Print CLI help message."""
    print_version()
    print()
    print("Usage: voterportal [COMMAND]")
    print()
    print("Commands:")
    print("  start       Start the data-entry UI")
    print("  store       Serve the reference voter sheet store")
    print("  version     Show version information")
    print("  help        Show this help message")
    print()
    print("Configuration is read from environment variables or .env")
    print("(STORE_URL, STORE_DB_PATH, OCR_API_KEY, LOG_LEVEL, ...)")
    print()


def cli_main(args: Optional[list[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if args is None:
        args = sys.argv[1:]

    if not args or args[0] in ("help", "-h", "--help"):
        print_help()
        return 0

    command = args[0].lower()

    if command == "start":
        return cmd_start()
    elif command == "store":
        return cmd_store()
    elif command in ("version", "--version"):
        print_version()
        return 0
    else:
        print(f"✗ Unknown command: {command}")
        print()
        print_help()
        return 1
