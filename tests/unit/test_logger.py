"""Unit tests for logging infrastructure."""

import json
import logging
import sys

from foodieai.logger import JSONFormatter, TextFormatter, get_logger


def _record(msg="Test message", level=logging.INFO, exc_info=None):
    return logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:
    """JSONFormatter produces structured output."""

    def test_outputs_valid_json(self):
        """Test the basic fields."""
        parsed = json.loads(JSONFormatter().format(_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test_logger"
        assert parsed["message"] == "Test message"
        assert "timestamp" in parsed

    def test_includes_request_id(self):
        """Test the JSON-RPC correlation id is carried through."""
        record = _record()
        record.request_id = "req-123"

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["request_id"] == "req-123"

    def test_includes_exception(self):
        """Test tracebacks are serialized."""
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record("failed", logging.ERROR, sys.exc_info())

        parsed = json.loads(JSONFormatter().format(record))

        assert "ValueError" in parsed["exception"]


class TestTextFormatter:
    """TextFormatter produces single-line colored text."""

    def test_contains_level_and_message(self):
        """Test level name and message are present."""
        output = TextFormatter().format(_record("hello"))

        assert "INFO" in output
        assert "hello" in output

    def test_request_id_prefix(self):
        """Test the request id is shown in brackets."""
        record = _record("hello")
        record.request_id = "abc"

        assert "[abc] hello" in TextFormatter().format(record)


class TestGetLogger:
    """get_logger() configuration."""

    def test_json_type_selects_json_formatter(self, monkeypatch):
        """Test LOG_TYPE=json."""
        monkeypatch.setenv("LOG_TYPE", "json")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        logger = get_logger("foodieai.tests.json_logger")

        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_handlers_are_not_duplicated(self):
        """Test calling twice returns the same configured logger."""
        first = get_logger("foodieai.tests.same_logger")
        second = get_logger("foodieai.tests.same_logger")

        assert first is second
        assert len(second.handlers) == 1

    def test_child_logger_emits_once(self, capsys):
        """Test a foodieai.<module> logger under a configured parent prints one line."""
        parent = get_logger("foodieai.tests.parent")
        child = get_logger("foodieai.tests.parent.child")

        child.warning("draft incomplete")

        lines = [line for line in capsys.readouterr().out.splitlines() if "draft incomplete" in line]
        assert len(lines) == 1
        assert parent.propagate is False
        assert child.propagate is False
