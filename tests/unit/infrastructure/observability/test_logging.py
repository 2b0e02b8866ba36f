"""Tests for structured logging."""

import json
import logging
import sys

from streamspot.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_set_and_get_correlation_id(self):
        """Test setting and getting correlation ID."""
        result = set_correlation_id("run-123")
        assert result == "run-123"
        assert get_correlation_id() == "run-123"

    def test_set_correlation_id_generates_uuid_when_none(self):
        result = set_correlation_id(None)
        assert len(result) == 36
        assert get_correlation_id() == result

    def test_filter_attaches_correlation_id(self):
        set_correlation_id("run-456")
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "run-456"


class TestFormatters:
    def test_json_formatter_fields(self):
        set_correlation_id("run-789")
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
        record = logging.LogRecord(
            "streamspot.test", logging.WARNING, __file__, 42, "album %s skipped", ("AL1",), None
        )
        CorrelationIdFilter().filter(record)

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "album AL1 skipped"
        assert payload["level"] == "WARNING"
        assert payload["logger"] == "streamspot.test"
        assert payload["line"] == 42
        assert payload["correlation_id"] == "run-789"

    def test_compact_formatter_shows_root_cause_first(self):
        formatter = CompactExceptionFormatter()
        try:
            try:
                raise ConnectionError("timed out")
            except ConnectionError as e:
                raise RuntimeError("album fetch failed") from e
        except RuntimeError:
            text = formatter.formatException(sys.exc_info())

        lines = [line for line in text.splitlines() if line.startswith("╰─►")]
        assert lines == [
            "╰─► ConnectionError: timed out",
            "╰─► RuntimeError: album fetch failed",
        ]


class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_debug_level(self):
        configure_logging(log_level="DEBUG", json_format=False, app_name="test-app")
        assert logging.getLogger("test").getEffectiveLevel() <= logging.DEBUG

    def test_configure_logging_json_format(self):
        configure_logging(log_level="INFO", json_format=True, app_name="test-app")
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, CustomJsonFormatter)

    def test_configure_logging_replaces_handlers(self):
        configure_logging(log_level="INFO")
        configure_logging(log_level="INFO")
        assert len(logging.getLogger().handlers) == 1

    def test_http_libraries_are_quieted(self):
        configure_logging(log_level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
