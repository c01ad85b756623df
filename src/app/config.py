"""
Configuration helpers for the Grant Tracker application.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from src.app.constants import (
    DEFAULT_BOARD_ID,
    ENV_BOARD,
    ENV_DEBUG,
    ENV_SEED,
    ENV_VIEWER,
    ENV_ZOOM,
)
from src.core.timeline_scale import ZoomMode

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def parse_bool(value: Optional[str]) -> bool:
    """Returns True for 1/true/yes/on (case-insensitive)."""
    return value is not None and value.strip().lower() in _TRUE_VALUES


@dataclass
class AppConfig:
    viewer_id: Optional[str] = None
    board_id: str = DEFAULT_BOARD_ID
    seed_file: Optional[str] = None
    debug: bool = False
    zoom_mode: ZoomMode = ZoomMode.MONTHLY

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """
        Builds the configuration from environment variables.

        Call after load_dotenv() so values from a .env file are visible.

        Args:
            environ: Mapping to read instead of os.environ.

        Returns:
            AppConfig: The parsed configuration.
        """
        env = os.environ if environ is None else environ
        config = cls(
            viewer_id=env.get(ENV_VIEWER) or None,
            board_id=env.get(ENV_BOARD) or DEFAULT_BOARD_ID,
            seed_file=env.get(ENV_SEED) or None,
            debug=parse_bool(env.get(ENV_DEBUG)),
            zoom_mode=ZoomMode.from_value(env.get(ENV_ZOOM) or ZoomMode.MONTHLY.value),
        )
        logger.debug(f"Loaded configuration: {config}")
        return config
