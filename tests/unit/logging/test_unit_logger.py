# tests/unit/logging/test_unit_logger.py — v1
"""Tests for logging/logger.py — logger factory and formatters."""

from __future__ import annotations

import json
import logging

from storesync.logging.context import clear_context, set_request_context
from storesync.logging.logger import JsonFormatter, TextFormatter, get_logger, setup_logging


def _record(msg: str = "Hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test", level=logging.INFO, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert "timestamp" in parsed
        assert "context" not in parsed

    def test_format_with_request_context(self):
        set_request_context("req123", "Cart")
        parsed = json.loads(JsonFormatter().format(_record("test msg")))
        assert parsed["context"] == {"request_id": "req123", "resource": "Cart"}

    def test_format_with_data(self):
        parsed = json.loads(JsonFormatter().format(_record(data={"status": 429})))
        assert parsed["data"] == {"status": 429}


class TestTextFormatter:
    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        output = TextFormatter().format(_record("Hello text"))
        assert "Hello text" in output
        assert "INFO" in output

    def test_format_includes_request_id(self):
        set_request_context("abc", "Category")
        output = TextFormatter().format(_record())
        assert "[req=abc]" in output
        assert "(Category)" in output


class TestGetLogger:
    def test_returns_namespaced_logger(self):
        assert get_logger("client").name == "storesync.client"


class TestSetupLogging:
    def teardown_method(self):
        root = logging.getLogger("storesync")
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        root.setLevel(logging.NOTSET)

    def test_json_console(self):
        setup_logging(level="DEBUG", log_format="json")
        root = logging.getLogger("storesync")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_text_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "storesync.log"
        setup_logging(level="INFO", log_format="text", log_file=log_file)
        root = logging.getLogger("storesync")
        assert len(root.handlers) == 2
        assert log_file.parent.is_dir()

    def test_quiets_httpx(self):
        setup_logging()
        assert logging.getLogger("httpx").level == logging.WARNING
