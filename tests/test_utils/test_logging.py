"""Tests for the structured logging utilities."""

import logging
import time
from unittest.mock import MagicMock, patch

from sheet_record_extraction.utils.logging import (
    LogContext,
    PerformanceMetrics,
    StructuredLogFormatter,
    StructuredLogger,
    clear_context,
    configure_logging,
    get_extra_context,
    get_logger,
    get_session_id,
    set_extra_context,
    set_session_id,
    timed_operation,
)


def _record(message: str = "Test message") -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=message,
        args=(),
        exc_info=None,
    )


class TestContextVariables:
    """Tests for context variable management."""

    def test_session_id_default_none(self) -> None:
        assert get_session_id() is None

    def test_set_and_get_session_id(self) -> None:
        set_session_id("sess-123")
        assert get_session_id() == "sess-123"

    def test_extra_context_default_empty(self) -> None:
        assert get_extra_context() == {}

    def test_set_and_get_extra_context(self) -> None:
        ctx = {"sheet": 1, "orientation": "horizontal"}
        set_extra_context(ctx)
        assert get_extra_context() == ctx

    def test_clear_context(self) -> None:
        """Clear context should reset all context variables."""
        set_session_id("sess-123")
        set_extra_context({"key": "value"})

        clear_context()

        assert get_session_id() is None
        assert get_extra_context() == {}


class TestPerformanceMetrics:
    """Tests for PerformanceMetrics class."""

    def test_initialization(self) -> None:
        metrics = PerformanceMetrics(operation="horizontal_scan")
        assert metrics.operation == "horizontal_scan"
        assert metrics.duration_seconds == 0.0
        assert metrics.lines_scanned == 0
        assert metrics.records_produced == 0

    def test_finish_calculates_duration(self) -> None:
        metrics = PerformanceMetrics(operation="scan")
        time.sleep(0.01)
        metrics.finish()
        assert metrics.duration_seconds > 0
        assert metrics.end_time is not None

    def test_to_dict_with_all_fields(self) -> None:
        metrics = PerformanceMetrics(operation="scan")
        metrics.duration_seconds = 1.5
        metrics.lines_scanned = 12
        metrics.records_produced = 10

        result = metrics.to_dict()

        assert result == {
            "operation": "scan",
            "duration_seconds": "1.500",
            "lines_scanned": 12,
            "records_produced": 10,
        }

    def test_to_dict_excludes_zero_values(self) -> None:
        result = PerformanceMetrics(operation="scan").to_dict()
        assert "lines_scanned" not in result
        assert "records_produced" not in result


class TestStructuredLogger:
    """Tests for StructuredLogger class."""

    def setup_method(self) -> None:
        self.logger = get_logger("test_logger")

    def test_get_logger_returns_structured_logger(self) -> None:
        assert isinstance(get_logger(__name__), StructuredLogger)

    def test_logger_property(self) -> None:
        assert isinstance(self.logger.logger, logging.Logger)

    def test_build_message_without_kwargs(self) -> None:
        assert self.logger._build_message("Test message") == "Test message"

    def test_build_message_with_kwargs(self) -> None:
        msg = self.logger._build_message("Scanning", sheet=1, orientation="vertical")
        assert msg == "Scanning | sheet=1, orientation=vertical"

    @patch.object(logging.Logger, "info")
    def test_info_logging(self, mock_info: MagicMock) -> None:
        self.logger.info("Extracted table", records=3)
        mock_info.assert_called_once()
        call_args = mock_info.call_args[0][0]
        assert "Extracted table" in call_args
        assert "records=3" in call_args

    @patch.object(logging.Logger, "debug")
    def test_debug_logging_when_enabled(self, mock_debug: MagicMock) -> None:
        self.logger.logger.setLevel(logging.DEBUG)
        try:
            self.logger.debug("Empty line, stopping", line=5)
        finally:
            self.logger.logger.setLevel(logging.NOTSET)
        mock_debug.assert_called_once()

    @patch.object(logging.Logger, "debug")
    def test_debug_skipped_when_disabled(self, mock_debug: MagicMock) -> None:
        self.logger.logger.setLevel(logging.INFO)
        try:
            self.logger.debug("Empty line, stopping", line=5)
        finally:
            self.logger.logger.setLevel(logging.NOTSET)
        mock_debug.assert_not_called()

    @patch.object(logging.Logger, "warning")
    def test_warning_logging(self, mock_warning: MagicMock) -> None:
        self.logger.warning("Guard field has no assigned value")
        mock_warning.assert_called_once()

    @patch.object(logging.Logger, "info")
    def test_log_performance(self, mock_info: MagicMock) -> None:
        metrics = PerformanceMetrics(operation="vertical_scan")
        metrics.duration_seconds = 0.25
        metrics.records_produced = 4

        self.logger.log_performance(metrics)

        call_args = mock_info.call_args[0][0]
        assert "Performance: vertical_scan" in call_args
        assert "records_produced=4" in call_args


class TestLogContext:
    """Tests for LogContext context manager."""

    def test_context_sets_values(self) -> None:
        with LogContext(session_id="sess-1", sheet=2):
            assert get_session_id() == "sess-1"
            assert get_extra_context() == {"sheet": 2}

    def test_context_restores_values(self) -> None:
        set_session_id("original")
        set_extra_context({"original": "value"})

        with LogContext(session_id="new", sheet=1):
            assert get_session_id() == "new"

        assert get_session_id() == "original"
        assert get_extra_context() == {"original": "value"}

    def test_nested_contexts_merge_extra_values(self) -> None:
        with LogContext(session_id="outer", sheet=1):
            with LogContext(orientation="vertical"):
                assert get_session_id() == "outer"
                assert get_extra_context() == {"sheet": 1, "orientation": "vertical"}
            assert get_extra_context() == {"sheet": 1}

    def test_context_restored_on_error(self) -> None:
        try:
            with LogContext(session_id="failing"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert get_session_id() is None


class TestTimedOperation:
    """Tests for timed_operation context manager."""

    @patch.object(StructuredLogger, "log_performance")
    def test_timed_operation_logs_metrics(self, mock_log: MagicMock) -> None:
        logger = get_logger("test")
        with timed_operation(logger, "horizontal_scan") as metrics:
            metrics.records_produced = 7

        mock_log.assert_called_once()
        logged_metrics = mock_log.call_args[0][0]
        assert logged_metrics.operation == "horizontal_scan"
        assert logged_metrics.records_produced == 7
        assert logged_metrics.end_time is not None

    @patch.object(StructuredLogger, "log_performance")
    def test_timed_operation_logs_on_failure(self, mock_log: MagicMock) -> None:
        logger = get_logger("test")
        try:
            with timed_operation(logger, "vertical_scan"):
                raise ValueError("bad cell")
        except ValueError:
            pass
        mock_log.assert_called_once()


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_with_string_level(self) -> None:
        configure_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_with_int_level(self) -> None:
        configure_logging(level=logging.WARNING)
        assert logging.getLogger().level == logging.WARNING

    def test_configure_with_structured_formatter(self) -> None:
        configure_logging(use_structured_formatter=True)
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, StructuredLogFormatter)

    def test_configure_without_structured_formatter(self) -> None:
        configure_logging(use_structured_formatter=False)
        handler = logging.getLogger().handlers[0]
        assert not isinstance(handler.formatter, StructuredLogFormatter)


class TestStructuredLogFormatter:
    """Tests for StructuredLogFormatter class."""

    def test_format_without_context(self) -> None:
        formatter = StructuredLogFormatter("%(message)s")
        assert formatter.format(_record()) == "Test message"

    def test_format_with_session_and_extra_context(self) -> None:
        set_session_id("sess-9")
        set_extra_context({"sheet": 1})
        formatter = StructuredLogFormatter("%(message)s")

        result = formatter.format(_record())

        assert result == "[session_id=sess-9 sheet=1] Test message"

    def test_format_restores_original_message(self) -> None:
        set_session_id("sess-9")
        record = _record()
        StructuredLogFormatter("%(message)s").format(record)
        assert record.msg == "Test message"
