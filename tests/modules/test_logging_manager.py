from __future__ import annotations

import json
import logging

from ebook_catalog import logging_manager as log_mgr


def _record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("ebook_catalog", logging.INFO, __file__, 1, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_structured_fields() -> None:
    payload = json.loads(
        log_mgr.JSONLogFormatter().format(_record(event="catalog.stats", duration_ms=1.5, count=3))
    )

    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["event"] == "catalog.stats"
    assert payload["duration_ms"] == 1.5
    assert payload["extra"] == {"count": 3}


def test_log_context_is_scoped() -> None:
    with log_mgr.log_context(correlation_id="req-1", path=None):
        assert log_mgr.get_log_context() == {"correlation_id": "req-1"}
        record = _record()
        log_mgr.LogContextFilter().filter(record)
        assert record.correlation_id == "req-1"

    assert "correlation_id" not in log_mgr.get_log_context()


def test_configure_logging_level_accepts_names() -> None:
    previous = log_mgr.get_logger().level
    try:
        assert log_mgr.configure_logging_level(log_level="warning") == logging.WARNING
        assert log_mgr.configure_logging_level(debug_enabled=True) == logging.DEBUG
    finally:
        log_mgr.configure_logging_level(log_level=previous)


def test_console_helpers_echo_to_stdout(capsys) -> None:
    log_mgr.console_info("Imported: %s", "a.pdf")

    assert capsys.readouterr().out.strip() == "Imported: a.pdf"
