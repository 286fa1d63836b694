"""Main application entry point for VoterPortal."""

import sys
from pathlib import Path

from loguru import logger
from nicegui import ui

from voterportal.config import Config, get_config
from voterportal.llm import create_id_extractor
from voterportal.services import RemoteStoreClient
from voterportal.ui.tabs.voter_entry import VoterEntryTab

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(config: Config) -> Path:
    """Add the rotating file sink.

    Returns:
        Path of the log file
    """
    log_path = Path(config.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Rotation at 10 MB, keep 5 old files
    logger.add(
        log_path,
        rotation="10 MB",
        retention=5,
        level=config.log_level,
        format=LOG_FORMAT,
        backtrace=True,
        diagnose=True,
    )
    logger.info(f"Logging to file: {log_path}")
    return log_path


def setup_app() -> None:
    """Set up the VoterPortal page."""
    config = get_config()
    setup_logging(config)

    logger.info("Starting VoterPortal application")
    logger.info(f"Voter store endpoint: {config.store_url}")

    extractor = create_id_extractor(config)

    @ui.page("/")
    def index() -> None:
        """Data-entry page. Each browser tab gets its own collection."""
        ui.page_title("VoterPortal - Voter Roll Entry")

        with ui.header().classes("items-center justify-between bg-primary text-white py-1 px-4"):
            ui.label("VoterPortal").classes("text-xl font-bold")
            ui.label("Voter roll Aadhaar entry").classes("text-xs text-blue-200 hidden md:block")

        client = RemoteStoreClient(config.store_url, timeout_seconds=config.request_timeout_seconds)
        tab = VoterEntryTab(client, extractor=extractor, reference_date=config.reference_date)
        tab.render()


def run_store() -> None:
    """Serve the reference voter sheet store with uvicorn."""
    import uvicorn

    from voterportal.api import create_store_app
    from voterportal.database import VoterSheetRepository

    config = get_config()
    setup_logging(config)

    repository = VoterSheetRepository(config.store_db_path)
    logger.info(f"Serving voter sheet {repository.db_path} on {config.store_host}:{config.store_port}")
    uvicorn.run(create_store_app(repository), host=config.store_host, port=config.store_port)


def main() -> None:
    """Run the application."""
    # Trick NiceGUI into thinking we're in __main__
    # This is needed when called as an entry point script
    original_main = sys.modules.get("__main__")
    sys.modules["__main__"] = sys.modules[__name__]

    try:
        setup_app()

        config = get_config()
        logger.info(f"Running in {'native' if config.native_mode else 'browser'} mode")

        ui.run(
            title="VoterPortal",
            native=config.native_mode,
            reload=False,
            show=True,
            port=config.ui_port,
        )
    finally:
        # Restore original __main__
        if original_main:
            sys.modules["__main__"] = original_main


if __name__ in {"__main__", "__mp_main__"}:
    main()
