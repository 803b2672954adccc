"""Tests for diagnostic logging setup."""

import logging

import pytest

from src.core.logging_config import get_logger, setup_logging, shutdown_logging


@pytest.fixture
def logs_dir(temp_dir):
    path = temp_dir / "logs"
    yield path
    shutdown_logging()


def flush(name):
    for handler in logging.getLogger(name).handlers:
        handler.flush()


class TestLogging:
    """Tests for setup_logging and get_logger."""

    def test_logger_names(self):
        assert get_logger().name == "tweakd"
        assert get_logger("engine").name == "tweakd.engine"
        assert get_logger("tweaks.catalog").name == "tweakd.tweaks.catalog"

    def test_creates_log_files(self, logs_dir):
        setup_logging(logs_dir, console_output=False)

        get_logger("catalog").info("catalog message")
        get_logger("engine").info("engine message")
        flush("tweakd")
        flush("tweakd.engine")

        main_log = (logs_dir / "main.log").read_text(encoding="utf-8")
        engine_log = (logs_dir / "engine.log").read_text(encoding="utf-8")
        assert "catalog message" in main_log
        assert "engine message" in engine_log
        assert "engine message" not in main_log

    def test_level_threshold(self, logs_dir):
        setup_logging(logs_dir, log_level=logging.WARNING, console_output=False)

        get_logger("catalog").info("quiet")
        get_logger("catalog").warning("loud")
        flush("tweakd")

        text = (logs_dir / "main.log").read_text(encoding="utf-8")
        assert "loud" in text
        assert "quiet" not in text

    def test_setup_twice_replaces_handlers(self, logs_dir):
        setup_logging(logs_dir, console_output=True)
        setup_logging(logs_dir, console_output=False)

        assert len(logging.getLogger("tweakd").handlers) == 1
        assert len(logging.getLogger("tweakd.engine").handlers) == 1

    def test_shutdown_restores_propagation(self, logs_dir):
        setup_logging(logs_dir, console_output=False)
        assert logging.getLogger("tweakd.engine").propagate is False

        shutdown_logging()

        assert logging.getLogger("tweakd").handlers == []
        assert logging.getLogger("tweakd.engine").propagate is True
