"""
Application Entry Point.

This module contains the main() function and cleanup logic for the application.
Separated from MainWindow to allow for easier testing.
"""

import sys

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Imports after load_dotenv() to allow modules to access environment variables
from PySide6.QtCore import Qt  # noqa: E402
from PySide6.QtWidgets import QApplication, QMessageBox  # noqa: E402

from src.app.config import AppConfig  # noqa: E402
from src.app.constants import WINDOW_SETTINGS_APP, WINDOW_SETTINGS_KEY  # noqa: E402
from src.core.logging_config import (  # noqa: E402
    get_logger,
    setup_logging,
    shutdown_logging,
)
from src.services.demo_data import seed_demo_board  # noqa: E402
from src.services.grant_store import InMemoryGrantStore, StoreError  # noqa: E402

logger = get_logger(__name__)


def build_store(config: AppConfig) -> InMemoryGrantStore:
    """
    Creates the grant store and fills it from the seed file, or with demo
    grants when no seed file is configured.

    Args:
        config: Application configuration.

    Returns:
        InMemoryGrantStore: The populated store.

    Raises:
        StoreError: If the seed file cannot be loaded.
    """
    store = InMemoryGrantStore()
    if config.seed_file:
        store.load_seed_file(config.seed_file)
    else:
        seed_demo_board(store, config.board_id, config.viewer_id)
    return store


def main() -> None:
    """Application entry point."""
    from src.app.main_window import MainWindow

    config = AppConfig.from_env()
    setup_logging(debug_mode=config.debug)

    try:
        logger.info("Starting Application...")

        QApplication.setHighDpiScaleFactorRoundingPolicy(
            Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
        )

        app = QApplication(sys.argv)
        app.setOrganizationName(WINDOW_SETTINGS_KEY)
        app.setApplicationName(WINDOW_SETTINGS_APP)

        try:
            store = build_store(config)
        except StoreError as e:
            logger.error(f"Could not load seed data: {e}")
            QMessageBox.critical(None, "Seed Data Error", str(e))
            store = InMemoryGrantStore()

        window = MainWindow(store, config)
        window.show()

        logger.info("Entering Event Loop...")
        exit_code = app.exec()
        cleanup_app()
        sys.exit(exit_code)
    except Exception:
        logger.exception("CRITICAL: Unhandled exception in main application loop")
        sys.exit(1)


def cleanup_app() -> None:
    """Performs global cleanup operations before exit."""
    logger.info("Shutting down logging.")
    shutdown_logging()
