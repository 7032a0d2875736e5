"""Unit tests for the JSON formatter and log context injection."""

import json
import logging

import pytest

from oss_gateway.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    remove_from_log_context,
    set_log_context,
)
from oss_gateway.infra.logging.formatters import JSONFormatter


def make_record(msg="Chunk stored", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="oss_gateway.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def _reset_context():
    clear_log_context()
    yield
    clear_log_context()


class TestJSONFormatter:
    """Test JSONL output."""

    def test_core_fields(self):
        """Test level, logger, message and a UTC timestamp are present."""
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "oss_gateway.test"
        assert data["message"] == "Chunk stored"
        assert data["timestamp"].endswith("Z")

    def test_extras_and_static_fields(self):
        """Test extra attributes and static fields are emitted."""
        formatter = JSONFormatter(static={"service": "oss-gateway"})

        data = json.loads(formatter.format(make_record(upload_session_id="s1", chunk_index=2)))

        assert data["service"] == "oss-gateway"
        assert data["upload_session_id"] == "s1"
        assert data["chunk_index"] == 2

    def test_non_serializable_extra(self):
        """Test unknown types are stringified instead of failing."""
        data = json.loads(JSONFormatter().format(make_record(payload=object())))

        assert data["payload"].startswith("<object")

    def test_exception_on_one_line(self):
        """Test tracebacks stay within a single JSON line."""
        try:
            raise ValueError("bad chunk")
        except ValueError:
            record = make_record()
            record.exc_info = __import__("sys").exc_info()

        line = JSONFormatter().format(record)

        assert "\n" not in line
        assert "ValueError: bad chunk" in json.loads(line)["exception"]


class TestLogContext:
    """Test contextvars-based context."""

    def test_filter_injects_context(self):
        """Test context fields are copied onto records."""
        set_log_context(request_id="r-1", bucket="uploads")
        record = make_record()

        assert ContextInjectingFilter().filter(record) is True
        assert record.request_id == "r-1"
        assert record.bucket == "uploads"

    def test_explicit_extra_wins(self):
        """Test an explicit record attribute is not overwritten."""
        set_log_context(bucket="uploads")
        record = make_record(bucket="media")

        ContextInjectingFilter().filter(record)

        assert record.bucket == "media"

    def test_remove_and_clear(self):
        """Test keys can be removed individually or all at once."""
        set_log_context(a=1, b=2)
        remove_from_log_context("a")
        assert get_log_context() == {"b": 2}

        clear_log_context()
        assert get_log_context() == {}
