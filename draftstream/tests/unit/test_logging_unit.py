"""Structured logging tests: JSON lines, canonical keys, handler ownership."""
from __future__ import annotations

import json
import logging
import os

from draftstream.base.logging import (
    BASE_LOGGER_NAME,
    REQUIRED_NORMALIZED_KEYS,
    LogContext,
    configure_logger,
    get_logger,
    log_event,
    normalized_log_event,
)
from draftstream.base.log_support import JsonFormatter
from draftstream.tests.utils import assert_true, event_payloads


def test_log_event_merges_context_and_drops_none(log_capture):
    logger = get_logger("draftstream.tests")
    ctx = LogContext(session_id="abc", mode="refine", extra={"round": 2})
    log_event(logger, "cycle.begin", ctx, length=10, missing=None)
    payload = event_payloads(log_capture, "cycle.begin")[0]
    assert payload == {"event": "cycle.begin", "session_id": "abc", "mode": "refine", "round": 2, "length": 10}  # nosec B101


def test_normalized_event_always_has_canonical_keys(log_capture):
    logger = get_logger("draftstream.tests")
    normalized_log_event(logger, "session.stopped", phase="stopped", frames=3, progress=12.3456)
    payload = event_payloads(log_capture, "session.stopped")[0]
    for key in REQUIRED_NORMALIZED_KEYS:
        assert_true(key in payload, f"missing {key}")
    assert payload["content_length"] is None and payload["progress"] == 12.35  # nosec B101
    assert "error_code" not in payload  # nosec B101


def test_error_code_and_extra_fields(log_capture):
    logger = get_logger("draftstream.tests")
    normalized_log_event(logger, "session.failed", phase="failed", error_code="auth", frames=1, stop_reason=None, error="401")
    payload = event_payloads(log_capture, "session.failed")[0]
    assert payload["phase"] == "failed" and payload["error_code"] == "auth"  # nosec B101
    assert payload["error"] == "401" and "stop_reason" not in payload  # nosec B101


def test_json_formatter_hoists_event_payload():
    record = logging.LogRecord("draftstream.x", logging.INFO, __file__, 1, json.dumps({"event": "e", "k": 1}), None, None)
    line = json.loads(JsonFormatter().format(record))
    assert line["event"] == "e" and line["k"] == 1 and line["level"] == "INFO"  # nosec B101
    assert "msg" not in line  # nosec B101

    plain = logging.LogRecord("draftstream.x", logging.WARNING, __file__, 1, "hello %s", ("there",), None)
    out = json.loads(JsonFormatter().format(plain))
    assert out["msg"] == "hello there" and out["logger"] == "draftstream.x"  # nosec B101


def test_child_loggers_propagate_to_single_base_handler():
    base = get_logger(BASE_LOGGER_NAME)
    child = get_logger("draftstream.generation")
    assert base.propagate is False  # nosec B101
    assert child.propagate is True and child.handlers == []  # nosec B101


def test_env_level_is_reapplied(monkeypatch):
    monkeypatch.setenv("DRAFTSTREAM_LOG_LEVEL", "error")
    assert get_logger(BASE_LOGGER_NAME).level == logging.ERROR  # nosec B101
    monkeypatch.setenv("DRAFTSTREAM_LOG_LEVEL", "DEBUG")
    assert get_logger(BASE_LOGGER_NAME).level == logging.DEBUG  # nosec B101


def test_configure_logger_file_handler(tmp_path, monkeypatch):
    monkeypatch.delenv("DRAFTSTREAM_LOG_LEVEL", raising=False)
    target = tmp_path / "logs" / "draftstream.log"
    logger = configure_logger(level="INFO", file_path=str(target))
    try:
        log_event(get_logger("draftstream.tests"), "file.check", answer=42)
        managed = [h for h in logger.handlers if getattr(h, "_draftstream_file_handler", False)]
        assert [h.baseFilename for h in managed] == [os.path.abspath(str(target))]  # nosec B101
        for h in managed:
            h.flush()
        lines = [json.loads(x) for x in target.read_text(encoding="utf-8").splitlines()]
        assert any(x.get("event") == "file.check" and x.get("answer") == 42 for x in lines)  # nosec B101
    finally:
        configure_logger(file_path=None)
    # other libraries (pytest included) may attach handlers of their own
    assert not any(getattr(h, "_draftstream_file_handler", False) for h in logger.handlers)  # nosec B101


def test_bind_returns_new_context():
    base = LogContext(session_id="s1")
    bound = base.bind(mode="generate", failed_phase="read", pending_chars=None)
    assert base.to_dict() == {"session_id": "s1"}  # nosec B101
    assert bound.to_dict() == {"session_id": "s1", "mode": "generate", "failed_phase": "read"}  # nosec B101
    assert bound.bind(failed_phase="open").extra["failed_phase"] == "open"  # nosec B101
