"""
Unit tests for logging setup.
"""

import logging
import sys

from docexpand.logger import LOGGER_NAME, configure_logging, get_default_logger, get_logger, setup_logger


class TestLogger:
    """Test logger configuration."""

    def test_console_handler_writes_to_stderr(self):
        """Test log records never go to stdout."""
        logger = setup_logger("docexpand.test.console", level="DEBUG")

        assert len(logger.handlers) == 1
        assert logger.handlers[0].stream is sys.stderr
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_reconfiguring_does_not_duplicate_handlers(self):
        setup_logger("docexpand.test.repeat")
        logger = setup_logger("docexpand.test.repeat")

        assert len(logger.handlers) == 1

    def test_log_file(self, tmp_path):
        """Test records are appended to the log file."""
        log_file = tmp_path / "logs" / "validate.log"
        logger = setup_logger("docexpand.test.file", level="INFO", log_file=log_file, console_output=False)
        logger.info("Assembling 3 documents")
        for handler in logger.handlers:
            handler.flush()

        assert "INFO - Assembling 3 documents" in log_file.read_text(encoding="utf-8")

    def test_unknown_level_falls_back_to_info(self):
        logger = setup_logger("docexpand.test.level", level="VERBOSE", console_output=False)

        assert logger.level == logging.INFO

    def test_configure_logging_updates_shared_logger(self):
        """Test module loggers see the CLI's level."""
        shared = get_default_logger()
        configure_logging(level="ERROR", console_output=False)

        assert get_logger() is shared
        assert get_logger(LOGGER_NAME).level == logging.ERROR

        configure_logging(level="WARNING")
