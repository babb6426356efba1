"""Tests for the structured logging system (sitecost_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from sitecost_kernel.logging_config import (
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
    """Parse all JSON log lines from a stream."""
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
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "sitecost.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("records_ingested", extra={"activity_count": 3, "policy": "abort"})

        record = _parse_log(stream)
        assert record["activity_count"] == 3
        assert record["policy"] == "abort"

    def test_decimal_serialized_as_string(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("total", extra={"amount": Decimal("14500.00")})

        assert _parse_log(stream)["amount"] == "14500.00"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(export_path="exports/tower-a.json", report_id="rep-456")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["export_path"] == "exports/tower-a.json"
        assert record["report_id"] == "rep-456"

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

    def test_sitecost_exception_code_extracted(self):
        """Site cost exceptions carry .code and structured fields."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from sitecost_kernel.exceptions import InvalidQuantityError

        try:
            raise InvalidQuantityError(0, activity_id="act-9", field="materials[0].qnt")
        except InvalidQuantityError:
            logger.error("record_rejected", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "INVALID_QUANTITY"
        assert record["exc_type"] == "InvalidQuantityError"
        assert record["exc_activity_id"] == "act-9"
        assert record["exc_field"] == "materials[0].qnt"
        assert record["exc_quantity"] == "0"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("bare_message")

        record = _parse_log(stream)
        assert "project_id" not in record
        assert "report_id" not in record

    def test_uuid_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        uid = uuid4()
        logger.info("with_uuid", extra={"report_uuid": uid})

        record = _parse_log(stream)
        assert record["report_uuid"] == str(uid)

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # Default level is INFO, so the debug line is dropped
        assert len(logs) == 2
        for record in logs:
            assert "ts" in record
            assert "level" in record
            assert "logger" in record
            assert "message" in record


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(export_path="a.json", report_id="y")
        assert LogContext.get_all() == {"report_id": "y", "export_path": "a.json"}

    def test_clear(self):
        LogContext.set(report_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(project_id="outer")
        with LogContext.bind(project_id="inner"):
            assert LogContext.get_all()["project_id"] == "inner"
        assert LogContext.get_all()["project_id"] == "outer"

    def test_bind_restores_none(self):
        """bind() restores to None if there was no previous value."""
        assert "report_id" not in LogContext.get_all()
        with LogContext.bind(report_id="temp"):
            assert LogContext.get_all()["report_id"] == "temp"
        assert "report_id" not in LogContext.get_all()

    def test_bind_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(report_id="failing"):
                raise RuntimeError("boom")
        assert LogContext.get_all() == {}

    def test_bind_skips_none_values(self):
        with LogContext.bind(report_id="r1", project_id=None):
            assert LogContext.get_all() == {"report_id": "r1"}

    def test_additive_set(self):
        LogContext.set(report_id="a")
        LogContext.set(project_id="b")
        assert LogContext.get_all() == {"report_id": "a", "project_id": "b"}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="correlation_id"):
            LogContext.set(correlation_id="c")
        with pytest.raises(ValueError):
            with LogContext.bind(actor_id="a"):
                pass


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
        root = logging.getLogger("sitecost")
        assert len(root.handlers) == 1

    def test_get_logger_returns_child(self):
        logger = get_logger("modules.reporting.service")
        assert logger.name == "sitecost.modules.reporting.service"

    def test_logger_hierarchy(self):
        """Child loggers inherit the sitecost root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        child = get_logger("deep.nested.module")
        child.debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "sitecost.deep.nested.module"

    def test_level_by_name(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level="warning")
        logger = get_logger("test")
        logger.info("dropped")
        logger.warning("kept")

        assert [r["message"] for r in _parse_all_logs(stream)] == ["kept"]

    def test_unknown_level_name(self):
        with pytest.raises(ValueError):
            configure_logging(level="chatty")
        assert logging.getLogger("sitecost").handlers == []
