"""Tests for the structured logging system (labor_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from labor_kernel.exceptions import EntryEditNotAllowedError, ProjectNotFoundError
from labor_kernel.logging_config import (
    CONTEXT_FIELDS,
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "labor_tracker.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("parsed", extra={"entry_count": 42, "layout": "certified_payroll"})

        record = _parse_log(stream)
        assert record["entry_count"] == 42
        assert record["layout"] == "certified_payroll"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        with LogContext.bind(correlation_id="abc-123", project_id="p-1"):
            get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["project_id"] == "p-1"

    def test_bound_field_wins_over_extra(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        with LogContext.bind(layout="certified_payroll"):
            get_logger("test").info("parsed", extra={"layout": "other", "entry_count": 3})

        record = _parse_log(stream)
        assert record["layout"] == "certified_payroll"
        assert record["entry_count"] == 3

    def test_set_rendered_sorted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("codes", extra={"skipped": {"n/a", "junk"}})

        assert _parse_log(stream)["skipped"] == ["junk", "n/a"]

    def test_decimal_serialized_as_string(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hours", extra={"parsed_hours": Decimal("24.50")})

        assert _parse_log(stream)["parsed_hours"] == "24.50"

    def test_uuid_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        uid = uuid4()
        get_logger("test").info("with_uuid", extra={"upload_ref": uid})

        assert _parse_log(stream)["upload_ref"] == str(uid)

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_tracker_exception_code_extracted(self):
        """Tracker exceptions carry a .code attribute and structured fields."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ProjectNotFoundError("p-404")
        except ProjectNotFoundError:
            logger.error("lookup_failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "PROJECT_NOT_FOUND"
        assert record["exc_type"] == "ProjectNotFoundError"
        assert record["exc_project_id"] == "p-404"

    def test_edit_error_fields_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise EntryEditNotAllowedError(("hours",), ("cost_code", "job_description"))
        except EntryEditNotAllowedError:
            logger.warning("edit_rejected", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "ENTRY_EDIT_NOT_ALLOWED"
        assert record["exc_fields"] == ["hours"]

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "upload_id" not in record

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # Default level is INFO
        assert len(logs) == 2
        for record in logs:
            assert {"ts", "level", "logger", "message"} <= set(record)


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_nothing_bound(self):
        assert LogContext.current() == {}

    def test_bind_and_restore(self):
        with LogContext.bind(correlation_id="x", upload_id="y"):
            assert LogContext.current() == {"correlation_id": "x", "upload_id": "y"}
        assert LogContext.current() == {}

    def test_nested_bind_layers(self):
        with LogContext.bind(project_id="outer", source_file="week12.pdf"):
            with LogContext.bind(project_id="inner", upload_id="u-1"):
                assert LogContext.current() == {
                    "project_id": "inner",
                    "upload_id": "u-1",
                    "source_file": "week12.pdf",
                }
            assert LogContext.current() == {"project_id": "outer", "source_file": "week12.pdf"}

    def test_restored_after_exception(self):
        with pytest.raises(ValueError):
            with LogContext.bind(source_file="week12.pdf"):
                raise ValueError("boom")
        assert LogContext.current() == {}

    def test_values_stringified_and_none_skipped(self):
        uid = uuid4()
        with LogContext.bind(project_id=uid, upload_id=None) as bound:
            assert bound == {"project_id": str(uid)}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError, match="unknown_field"):
            with LogContext.bind(correlation_id="c", unknown_field="z"):
                pass

    def test_fields_in_declared_order(self):
        with LogContext.bind(layout="certified_payroll", correlation_id="c"):
            assert list(LogContext.current()) == ["correlation_id", "layout"]
        assert CONTEXT_FIELDS[-1] == "layout"

    def test_clear(self):
        with LogContext.bind(correlation_id="x"):
            LogContext.clear()
            assert LogContext.current() == {}


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op

        handlers = logging.getLogger("labor_tracker").handlers
        assert h1 in handlers
        assert h2 not in handlers

    def test_reset_detaches_json_handler_only(self):
        namespace = logging.getLogger("labor_tracker")
        other = logging.NullHandler()
        namespace.addHandler(other)
        h1, _ = _make_handler()
        configure_logging(handler=h1)

        reset_logging()

        assert h1 not in namespace.handlers
        assert other in namespace.handlers
        namespace.removeHandler(other)

    def test_level_by_name(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level="DEBUG")
        get_logger("test").debug("debug_line")

        assert _parse_log(stream)["message"] == "debug_line"

    def test_get_logger_returns_child(self):
        assert get_logger("ingestion.parser").name == "labor_tracker.ingestion.parser"

    def test_logger_hierarchy(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("deep.nested.module").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "labor_tracker.deep.nested.module"
