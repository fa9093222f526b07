"""Tests for logging setup and request context propagation."""

import io
import json
import logging

import pytest

from config import Config
from observability.logging import (
    ContextFilter,
    JsonFormatter,
    request_context,
    request_id_var,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _record(message="hello"):
    record = logging.LogRecord("fable.test", logging.INFO, __file__, 1, message, None, None)
    ContextFilter().filter(record)
    return record


class TestRequestContext:

    def test_generates_and_restores_id(self):
        assert request_id_var.get() == "-"
        with request_context() as request_id:
            assert len(request_id) == 8
            assert request_id_var.get() == request_id
        assert request_id_var.get() == "-"

    def test_explicit_id(self):
        with request_context("abc123"):
            assert _record().request_id == "abc123"


class TestJsonFormatter:

    def test_includes_request_id(self):
        with request_context("req42"):
            data = json.loads(JsonFormatter().format(_record("story added")))

        assert data["message"] == "story added"
        assert data["request_id"] == "req42"
        assert data["level"] == "INFO"
        assert "trace_id" not in data


class TestSetupLogging:

    def test_file_and_console_handlers(self, tmp_path, restore_root_logger):
        stream = io.StringIO()
        config = Config(log_dir=tmp_path / "log")

        assert setup_logging(config, console_stream=stream) is True

        logging.getLogger("fable.test").info("ready")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "ready" in stream.getvalue()
        assert "ready" in (tmp_path / "log" / "fable.log").read_text(encoding="utf-8")

    def test_falls_back_to_console(self, tmp_path, restore_root_logger):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        config = Config(log_dir=blocker / "log")

        assert setup_logging(config, console_stream=io.StringIO()) is False
