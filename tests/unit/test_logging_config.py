"""Unit tests for logging helpers."""

import logging

import pytest

from heic_client.logging_config import (
    LOGGER_NAMESPACE,
    get_logger,
    log_operation_complete,
    log_operation_error,
    log_operation_start,
    log_retry_exhausted,
    log_retry_scheduled,
)


class TestPackageLogger:
    """Test the package logger installed on import."""

    def test_has_null_handler(self):
        """The package logger carries a NullHandler and no output handlers."""
        logger = logging.getLogger(LOGGER_NAMESPACE)
        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)
        assert not any(type(h) is logging.StreamHandler for h in logger.handlers)

    def test_level_left_to_application(self):
        """Importing the package does not set a level on its logger."""
        assert logging.getLogger(LOGGER_NAMESPACE).level == logging.NOTSET


class TestGetLogger:
    """Test the get_logger function."""

    def test_prefixes_namespace(self):
        """Bare names are placed under the package namespace."""
        assert get_logger("retry").name == "heic_client.retry"

    def test_keeps_existing_namespace(self):
        """Names already in the namespace are used unchanged."""
        assert get_logger("heic_client.client").name == "heic_client.client"


class TestOperationLogging:
    """Test the operation logging helpers."""

    def test_log_operation_start(self, caplog: pytest.LogCaptureFixture):
        """Start messages list the operation context."""
        logger = get_logger("ops")
        with caplog.at_level(logging.INFO, logger="heic_client"):
            log_operation_start(logger, "conversion", filename="a.heic")
        assert "Starting conversion: filename=a.heic" in caplog.text

    def test_log_operation_complete_success(self, caplog: pytest.LogCaptureFixture):
        """Successful completion is logged at INFO with its duration."""
        logger = get_logger("ops")
        with caplog.at_level(logging.INFO, logger="heic_client"):
            log_operation_complete(logger, "conversion", True, duration=1.5, filename="a.heic")
        assert "Conversion completed successfully in 1.50s: filename=a.heic" in caplog.text
        assert caplog.records[-1].levelno == logging.INFO

    def test_log_operation_complete_failure(self, caplog: pytest.LogCaptureFixture):
        """Failed completion is logged at ERROR."""
        logger = get_logger("ops")
        with caplog.at_level(logging.INFO, logger="heic_client"):
            log_operation_complete(logger, "conversion", False, filename="a.heic")
        assert "Conversion failed: filename=a.heic" in caplog.text
        assert caplog.records[-1].levelno == logging.ERROR

    def test_log_operation_error(self, caplog: pytest.LogCaptureFixture):
        """Errors are logged at ERROR with the stack trace at DEBUG."""
        logger = get_logger("ops")
        with caplog.at_level(logging.DEBUG, logger="heic_client"):
            log_operation_error(logger, "download", ValueError("broken"), filename="a.heic")
        assert "Error during download: ValueError: broken - filename=a.heic" in caplog.text
        assert "Stack trace for download error" in caplog.text


class TestRetryLogging:
    """Test the retry logging helpers."""

    def test_log_retry_scheduled(self, caplog: pytest.LogCaptureFixture):
        """A scheduled retry is a WARNING naming the delay and attempt count."""
        logger = get_logger("retry")
        with caplog.at_level(logging.INFO, logger="heic_client"):
            log_retry_scheduled(logger, "POST /convert", 2, 3, 1.0, RuntimeError("HTTP 503"))
        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert "Attempt 2 of POST /convert failed: HTTP 503; retrying in 1.00s (2/3)" in (
            record.getMessage()
        )

    def test_log_retry_exhausted(self, caplog: pytest.LogCaptureFixture):
        """Giving up is logged at ERROR with the total attempt count."""
        logger = get_logger("retry")
        with caplog.at_level(logging.INFO, logger="heic_client"):
            log_retry_exhausted(logger, "POST /convert", 4, RuntimeError("HTTP 500"))
        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.getMessage() == "Giving up on POST /convert after 4 attempts: HTTP 500"
