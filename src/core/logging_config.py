"""
Logging Configuration Module.

Centralized logging setup for Grant Tracker: a rotating log file under
``logs/`` plus optional console output. Modules log through
``logging.getLogger(__name__)``.
"""

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Optional

# Configuration
LOG_DIR = "logs"
LOG_FILENAME = "grant_tracker.log"
MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class SafeRotatingFileHandler(RotatingFileHandler):
    """
    RotatingFileHandler that keeps writing to the current file when Windows
    refuses to rotate a file another process still holds open.
    """

    def doRollover(self) -> None:
        """
        Rotates the log file, skipping the rotation on Windows lock errors.
        """
        try:
            super().doRollover()
        except PermissionError:
            if sys.platform != "win32":
                raise
            # Locked on Windows: retry at the next rollover


def _resolve_log_path(log_dir: str) -> str:
    """Returns the log file path, falling back to the working directory."""
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError as e:
        print(f"Failed to create log directory: {e}. Logging to current directory.")
        return LOG_FILENAME
    return os.path.join(log_dir, LOG_FILENAME)


def setup_logging(
    debug_mode: bool = False,
    log_to_console: bool = True,
    log_dir: Optional[str] = None,
) -> str:
    """
    Configures the root logger with a rotating file handler
    and optional console handler.

    Calling it again replaces the previous handlers.

    Args:
        debug_mode (bool): If True, sets level to DEBUG. Defaults to False (INFO).
        log_to_console (bool): If True, adds a StreamHandler. Defaults to True.
        log_dir (str, optional): Directory for the log file. Defaults to LOG_DIR.

    Returns:
        str: Path of the log file.
    """
    log_path = _resolve_log_path(log_dir or LOG_DIR)

    root_logger = logging.getLogger()
    # Remove existing handlers to avoid duplicates if called multiple times
    if root_logger.handlers:
        root_logger.handlers.clear()

    level = logging.DEBUG if debug_mode else logging.INFO
    root_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    try:
        file_handler = SafeRotatingFileHandler(
            log_path,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)
    except OSError as e:
        print(f"CRITICAL: Could not set up file logging: {e}")

    if log_to_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

    logging.info("=" * 60)
    logging.info(f"Grant Tracker Session Started at {datetime.now().isoformat()}")
    logging.info("=" * 60)
    return log_path


def get_logger(name: str) -> logging.Logger:
    """
    Convenience function to get a logger with the given name.

    Args:
        name (str): The name of the logger (usually __name__).

    Returns:
        logging.Logger: The logger instance.
    """
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """
    Explicitly closes all logging handlers to release file locks.
    """
    logging.shutdown()
