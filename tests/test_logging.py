"""Tests for credvault.core.logging: filtered, configurable logging."""

import io
import json
import logging

import pytest

from credvault.core.config import LoggingConfig
from credvault.core.logging import ROOT_LOGGER_NAME, SecureLogFilter, configure_logging, get_secure_logger


@pytest.fixture
def reset_credvault_logger():
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    logger.handlers.clear()
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


def _record(msg, *args):
    return logging.LogRecord("t", logging.INFO, __file__, 1, msg, args, None)


class TestSecureLogFilter:
    def test_redacts_message(self):
        record = _record("password=hunter2 accepted")
        SecureLogFilter().filter(record)
        assert "hunter2" not in record.getMessage()
        assert "[REDACTED]" in record.getMessage()

    def test_redacts_args(self):
        record = _record("wrapped %s", "QUJDREVGR0hJSktMTU5PUFFSU1RVVldYWVphYmNkZWZnaGlqa2xt")
        SecureLogFilter().filter(record)
        assert "QUJDREVG" not in record.getMessage()

    def test_keeps_plain_messages(self):
        record = _record("Deleting %s -- version %d", "db-prod", 3)
        assert SecureLogFilter().filter(record)
        assert record.getMessage() == "Deleting db-prod -- version 3"


class TestConfigureLogging:
    def test_children_use_filtered_handler(self, reset_credvault_logger):
        stream = io.StringIO()
        configure_logging(LoggingConfig(level="INFO"), stream=stream)
        logging.getLogger("credvault.driver").info("token=abc123 stored")
        output = stream.getvalue()
        assert "credvault.driver" in output
        assert "abc123" not in output

    def test_level_respected(self, reset_credvault_logger):
        stream = io.StringIO()
        configure_logging(LoggingConfig(level="WARNING"), stream=stream)
        logging.getLogger("credvault.driver").info("hidden")
        assert stream.getvalue() == ""

    def test_json_output(self, reset_credvault_logger):
        stream = io.StringIO()
        configure_logging(LoggingConfig(level="INFO", enable_json=True), stream=stream)
        logging.getLogger("credvault.multi").warning("Skipping %s", "db-prod")
        data = json.loads(stream.getvalue().strip())
        assert data["level"] == "WARNING"
        assert data["logger"] == "credvault.multi"
        assert data["message"] == "Skipping db-prod"

    def test_idempotent(self, reset_credvault_logger):
        logger = get_secure_logger(ROOT_LOGGER_NAME, stream=io.StringIO())
        again = get_secure_logger(ROOT_LOGGER_NAME, stream=io.StringIO())
        assert logger is again
        assert len(logger.handlers) == 1
