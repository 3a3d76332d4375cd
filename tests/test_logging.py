"""Tests for logging setup and formatters."""

import json
import logging

from sentinel.core.logging import ColorFormatter, StructuredFormatter, setup_logging


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("sentinel.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_structured_formatter_includes_extras():
    line = StructuredFormatter().format(_record(conversation_id="c1", ignored="x"))
    entry = json.loads(line)

    assert entry["msg"] == "hello"
    assert entry["level"] == "INFO"
    assert entry["conversation_id"] == "c1"
    assert "ignored" not in entry


def test_color_formatter_restores_record():
    record = _record()
    out = ColorFormatter(use_color=True).format(record)

    assert "\033[" in out
    assert record.levelname == "INFO"
    assert record.name == "sentinel.test"


def test_plain_formatter_has_no_escapes():
    assert "\033[" not in ColorFormatter(use_color=False).format(_record())


def test_setup_logging_json(monkeypatch):
    monkeypatch.setenv("SENTINEL_LOG_FORMAT", "json")
    monkeypatch.setenv("SENTINEL_LOG_LEVEL", "DEBUG")
    setup_logging()

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert isinstance(root.handlers[0].formatter, StructuredFormatter)
    assert logging.getLogger("httpx").level == logging.WARNING
