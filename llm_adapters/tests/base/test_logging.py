"""Structured logging helpers."""
from __future__ import annotations

import json
import logging

from llm_adapters.base.logging import (
    REQUIRED_NORMALIZED_KEYS,
    LogContext,
    configure_logger,
    get_logger,
    log_event,
    normalized_log_event,
)
from llm_adapters.base.log_support import JsonFormatter


def test_child_loggers_propagate_to_shared_logger():
    child = get_logger("providers.openai")
    assert child.propagate is True  # nosec B101
    assert get_logger() is logging.getLogger("providers")  # nosec B101


def test_log_event_merges_context_and_drops_none(log_events):
    logger = get_logger("providers.test")
    log_event(logger, "unit.event", LogContext(provider="openai", model="gpt"), status=None, size=3)
    event = log_events[-1]
    assert event["event"] == "unit.event"  # nosec B101
    assert event["provider"] == "openai"  # nosec B101
    assert event["model"] == "gpt"  # nosec B101
    assert event["size"] == 3  # nosec B101
    assert "status" not in event  # nosec B101


def test_normalized_event_keeps_canonical_keys(log_events):
    logger = get_logger("providers.test")
    normalized_log_event(logger, "stream.end", LogContext(provider="groq"), phase="finalize", emitted=4)
    event = log_events[-1]
    for key in REQUIRED_NORMALIZED_KEYS:
        if key == "error_code":
            continue
        assert key in event  # nosec B101
    assert event["emitted"] == 4  # nosec B101
    assert event["attempt"] is None  # nosec B101
    assert "error_code" not in event  # nosec B101


def test_normalized_event_extras_never_override_canonical_values(log_events):
    logger = get_logger("providers.test")
    normalized_log_event(logger, "x", phase="send", attempt=2, error_code="transient", emitted=None, extra_key="v")
    event = log_events[-1]
    assert event["attempt"] == 2  # nosec B101
    assert event["error_code"] == "transient"  # nosec B101
    assert event["extra_key"] == "v"  # nosec B101


def test_tokens_are_coerced_from_usage_objects(log_events):
    class Usage:
        def to_dict(self):
            return {"prompt": 1, "completion": 2}

    normalized_log_event(get_logger("providers.test"), "x", phase="finalize", tokens=Usage())
    assert log_events[-1]["tokens"] == {"prompt": 1, "completion": 2}  # nosec B101


def test_json_formatter_hoists_structured_messages():
    record = logging.LogRecord("providers", logging.INFO, __file__, 1, json.dumps({"event": "e", "a": 1}), None, None)
    out = json.loads(JsonFormatter().format(record))
    assert out["event"] == "e"  # nosec B101
    assert out["a"] == 1  # nosec B101
    assert out["level"] == "INFO"  # nosec B101
    assert "msg" not in out  # nosec B101


def test_configure_logger_manages_file_handler(tmp_path):
    target = tmp_path / "logs" / "providers.log"
    logger = configure_logger(level="DEBUG", file_path=str(target))
    try:
        assert logger.level == logging.DEBUG  # nosec B101
        assert any(getattr(h, "baseFilename", None) == str(target) for h in logger.handlers)  # nosec B101
    finally:
        configure_logger(level=logging.INFO, file_path=None)
    assert not any(getattr(h, "baseFilename", None) == str(target) for h in logger.handlers)  # nosec B101
