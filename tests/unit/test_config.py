"""
Unit tests for AppConfig and logging setup.
"""

import logging

import pytest

from src.app.config import AppConfig, parse_bool
from src.core.logging_config import LOG_FILENAME, setup_logging
from src.core.timeline_scale import ZoomMode


def test_defaults_from_empty_environment():
    config = AppConfig.from_env({})
    assert config == AppConfig()
    assert config.board_id == "default"
    assert config.zoom_mode is ZoomMode.MONTHLY


def test_values_from_environment():
    config = AppConfig.from_env(
        {
            "GRANT_TRACKER_VIEWER": "alice",
            "GRANT_TRACKER_BOARD": "lab",
            "GRANT_TRACKER_SEED": "seed.json",
            "GRANT_TRACKER_DEBUG": "yes",
            "GRANT_TRACKER_ZOOM": "yearly",
        }
    )
    assert config.viewer_id == "alice"
    assert config.board_id == "lab"
    assert config.seed_file == "seed.json"
    assert config.debug
    assert config.zoom_mode is ZoomMode.YEARLY


def test_unknown_zoom_falls_back_to_monthly():
    assert AppConfig.from_env({"GRANT_TRACKER_ZOOM": "daily"}).zoom_mode is ZoomMode.MONTHLY


def test_from_env_reads_process_environment(monkeypatch):
    monkeypatch.setenv("GRANT_TRACKER_VIEWER", "bob")
    assert AppConfig.from_env().viewer_id == "bob"


@pytest.mark.parametrize(
    "value, expected",
    [("1", True), ("TRUE", True), (" on ", True), ("0", False), ("", False), (None, False)],
)
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected


def test_setup_logging_writes_to_log_dir(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        path = setup_logging(debug_mode=True, log_to_console=False, log_dir=str(tmp_path))
        logging.getLogger("src.test").debug("hello from test")
        for handler in root.handlers:
            handler.flush()

        assert path.endswith(LOG_FILENAME)
        assert root.level == logging.DEBUG
        assert "hello from test" in (tmp_path / LOG_FILENAME).read_text(encoding="utf-8")
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            if handler not in saved_handlers:
                handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
