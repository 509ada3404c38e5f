"""
Unit tests for structured logging helpers and the exception hierarchy.

System role: Verification of observability utilities
"""

import logging

import pytest

from docindex.core.exceptions import (
    DimensionMismatchError,
    DocIndexException,
    ProviderError,
    ValidationError,
)
from docindex.observability.logger import configure_logging
from docindex.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)


class TestSafeLogValue:
    """Test suite for safe_log_value()."""

    def test_vectors_should_be_summarized(self) -> None:
        """Test lists are logged by size, never verbatim."""
        assert safe_log_value([0.1] * 1024) == "list(1024 items)"

    def test_long_strings_should_be_truncated(self) -> None:
        """Test strings over max_length are cut."""
        value = safe_log_value("x" * 20, max_length=5)

        assert value.startswith("xxxxx...")
        assert "20 total" in value

    def test_none_should_render(self) -> None:
        assert safe_log_value(None) == "None"


class TestLogWithContext:
    """Test suite for structured log helpers."""

    def test_context_should_be_attached_to_record(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test context keys become LogRecord attributes."""
        logger = logging.getLogger("docindex.tests")

        with caplog.at_level(logging.INFO, logger="docindex.tests"):
            log_with_context(logger, logging.INFO, "synced", package="phoenix", batches=2)

        record = caplog.records[-1]
        assert record.package == "phoenix"
        assert record.batches == "2"

    def test_exception_should_be_logged_with_type(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test exception context carries type and message."""
        logger = logging.getLogger("docindex.tests")
        error = ProviderError("timed out", model="fake-embed", attempts=3)

        with caplog.at_level(logging.ERROR, logger="docindex.tests"):
            log_exception_with_context(logger, "batch failed", error, batch_index=1)

        record = caplog.records[-1]
        assert record.error_type == "ProviderError"
        assert record.exc_info is not None


class TestExceptions:
    """Test suite for the exception hierarchy."""

    def test_dimension_mismatch_should_be_validation_error(self) -> None:
        """Test DimensionMismatchError is caught by ValidationError handlers."""
        error = DimensionMismatchError(expected=1024, actual=768)

        assert isinstance(error, ValidationError)
        assert isinstance(error, DocIndexException)
        assert error.details == {"expected": 1024, "actual": 768, "field": "vector"}

    def test_str_should_include_details(self) -> None:
        """Test details are rendered after the message."""
        error = ProviderError("timed out", model="fake-embed", batch_size=10, attempts=3)

        assert str(error).startswith("timed out | Details: ")
        assert "'attempts': 3" in str(error)


class TestConfigureLogging:
    """Test suite for configure_logging()."""

    def test_should_set_root_level_and_single_handler(self) -> None:
        """Test the root logger gets one stdout handler at the requested level."""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging("DEBUG")
            configure_logging("WARNING")

            assert root.level == logging.WARNING
            assert len(root.handlers) == 1
            assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
