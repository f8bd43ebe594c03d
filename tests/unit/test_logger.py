"""Tests for logging setup and the contextual logger."""

from __future__ import annotations

import logging

import pytest

from waitfor.core.models.config import LoggingConfig
from waitfor.log_config.logger import (
    ContextualLogger,
    get_logger,
    setup_logging,
    setup_logging_from,
)


@pytest.fixture
def package_logger():
    """Restore the ``waitfor`` logger after each test."""
    logger = logging.getLogger("waitfor")
    level = logger.level
    yield logger
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)


class TestSetupLogging:
    def test_console_only(self, package_logger):
        logger = setup_logging("DEBUG")

        assert logger is package_logger
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_root_logger_untouched(self, package_logger):
        root_handlers = list(logging.getLogger().handlers)
        setup_logging("INFO")
        assert logging.getLogger().handlers == root_handlers

    def test_file_handler(self, package_logger, tmp_path):
        log_dir = tmp_path / "logs"
        logger = setup_logging("INFO", log_dir=str(log_dir))

        logger.info("written to file")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert "written to file" in (log_dir / "waitfor.log").read_text(encoding="utf-8")

    def test_repeated_setup_replaces_handlers(self, package_logger):
        setup_logging("INFO")
        setup_logging("INFO")
        assert len(package_logger.handlers) == 1

    def test_unknown_level_falls_back_to_warning(self, package_logger):
        assert setup_logging("CHATTY").level == logging.WARNING

    def test_from_config(self, package_logger):
        logger = setup_logging_from(LoggingConfig(log_level="ERROR"))
        assert logger.level == logging.ERROR


class TestContextualLogger:
    def test_prefixes_context(self, caplog):
        log = ContextualLogger(get_logger("waitfor.test"), wait="abc123")

        with caplog.at_level(logging.DEBUG, logger="waitfor.test"):
            log.debug("Race started with %d branches", 2)

        assert "[wait=abc123] Race started with 2 branches" in caplog.text

    def test_multiple_keys(self, caplog):
        log = ContextualLogger(get_logger("waitfor.test"), wait="w1", branch=0)

        with caplog.at_level(logging.WARNING, logger="waitfor.test"):
            log.warning("slow")

        assert "[wait=w1] [branch=0] slow" in caplog.text

    def test_no_context(self, caplog):
        log = ContextualLogger(get_logger("waitfor.test"))

        with caplog.at_level(logging.INFO, logger="waitfor.test"):
            log.info("plain")

        assert caplog.records[-1].getMessage() == "plain"
