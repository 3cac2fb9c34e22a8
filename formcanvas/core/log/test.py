"""Tests for core logging module."""

import logging
from io import StringIO

from .lib import LOG_FORMAT, get_logger, setup_logging


class TestLogging:
    """Test core logging API."""

    def test_get_logger(self) -> None:
        """Verify logger instance creation."""
        logger = get_logger("test")
        assert logger.name == "test"
        assert isinstance(logger, logging.Logger)

    def test_get_logger_default_name(self) -> None:
        """Verify default logger name."""
        logger = get_logger()
        assert logger.name == "formcanvas"

    def test_setup_logging_accepts_level_name(self) -> None:
        """String levels are accepted without raising."""
        stream = StringIO()
        setup_logging(level="debug", stream=stream)
        logger = get_logger("test_setup")
        logger.debug("test message")
        # basicConfig is a no-op once the root logger has handlers
        assert logger.level == logging.NOTSET

    def test_unknown_level_name_falls_back(self) -> None:
        """Unknown level names do not raise."""
        setup_logging(level="not-a-level", stream=StringIO())

    def test_format_contains_logger_name(self) -> None:
        assert "%(name)s" in LOG_FORMAT
