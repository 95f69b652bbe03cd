"""
Tests for logging infrastructure.

Verifies logger configuration, file creation, and rotation.
"""

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

import pytest

import dictanow.utils.logger as logger_module
from dictanow.utils.logger import get_log_dir, get_logger, shutdown_logging


@pytest.fixture
def log_dir(tmp_path):
    """Point the log directory at a temp folder and rebuild the root logger."""
    shutdown_logging()
    with patch("dictanow.utils.logger.user_log_path", return_value=tmp_path / "logs"):
        yield tmp_path / "logs"
        shutdown_logging()


class TestLoggerConfiguration:
    """Tests for logger setup and configuration."""

    def test_get_logger_returns_logger(self, log_dir):
        logger = get_logger("dictanow.test")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "dictanow.test"

    def test_get_logger_singleton(self, log_dir):
        assert get_logger() is get_logger("dictanow")
        assert logger_module._logger_instance is get_logger()

    def test_log_directory_creation(self, log_dir):
        result = get_log_dir()

        assert result == log_dir
        assert result.is_dir()

    def test_logger_writes_to_file(self, log_dir):
        get_logger("dictanow.core").info("Test message")
        for handler in logging.getLogger("dictanow").handlers:
            handler.flush()

        content = (log_dir / "dictanow.log").read_text()
        assert "Test message" in content
        assert "INFO" in content
        assert "dictanow.core" in content

    def test_handlers_not_duplicated(self, log_dir):
        get_logger()
        logger_module._logger_instance = None
        root = get_logger()

        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1


class TestLogRotation:
    """Tests for log rotation functionality."""

    def test_rotation_settings(self, log_dir):
        root = get_logger()
        [handler] = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]

        assert handler.maxBytes == 10 * 1024 * 1024
        assert handler.backupCount == 5

    def test_shutdown_releases_handlers(self, log_dir):
        get_logger()
        shutdown_logging()

        assert logging.getLogger("dictanow").handlers == []
        assert logger_module._logger_instance is None
