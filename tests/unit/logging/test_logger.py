# tests/unit/logging/test_logger.py — v2
"""Tests for logging/logger.py — setup and formatters."""

from __future__ import annotations

import json
import logging
import sys

from agenticad.logging.context import clear_context, set_request_context, set_stage_context
from agenticad.logging.logger import ROOT_LOGGER, JsonFormatter, TextFormatter, setup_logging


def _record(msg: str = "Hello", name: str = "agenticad.pipeline.orchestrator", **kwargs) -> logging.LogRecord:
    return logging.LogRecord(
        name=name, level=logging.INFO, pathname="", lineno=0,
        msg=msg, args=(), exc_info=kwargs.get("exc_info"),
    )


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

    def test_format_with_context(self):
        set_request_context("req-1", "photo")
        set_stage_context("provider", "openai")
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["context"] == {
            "request_id": "req-1",
            "modality": "photo",
            "provider": "openai",
            "stage": "provider",
        }

    def test_format_data_extra(self):
        record = _record()
        record.data = {"key": "text_analysis_1"}
        parsed = json.loads(JsonFormatter().format(record))
        assert parsed["data"] == {"key": "text_analysis_1"}

    def test_format_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record(exc_info=sys.exc_info())
        parsed = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: boom" in parsed["exception"]


class TestTextFormatter:
    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        output = TextFormatter().format(_record("Hello text"))
        assert "Hello text" in output
        assert "INFO" in output
        assert "pipeline.orchestrator" in output
        assert "agenticad." not in output

    def test_format_with_stage(self):
        set_request_context("abcdef123456")
        set_stage_context("provider", "google")
        output = TextFormatter().format(_record())
        assert "[abcdef12]" in output
        assert "(provider:google)" in output


class TestSetupLogging:
    def teardown_method(self):
        root = logging.getLogger(ROOT_LOGGER)
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()

    def test_console_only(self):
        root = setup_logging(level="DEBUG", log_format="text")
        assert root.name == "agenticad"
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_repeat_setup_replaces_handlers(self):
        setup_logging()
        root = setup_logging()
        assert len(root.handlers) == 1

    def test_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "agenticad.log"
        root = setup_logging(log_file=log_file)
        assert len(root.handlers) == 2
        logging.getLogger("agenticad.test").warning("written")
        for handler in root.handlers:
            handler.flush()
        assert "written" in log_file.read_text()
