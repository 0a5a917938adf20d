"""One-line JSON rendering for adapter log records.

Adapter events are logged as JSON-encoded messages (see ``log_event``). The
formatter decodes such messages and merges their keys into the output line
instead of nesting an encoded string, so a line reads
``{"ts": ..., "level": "INFO", "logger": "providers.openai", "event": ...}``.
Plain-text messages are kept under ``msg``. Attributes passed through
``extra=`` are merged as well; standard ``LogRecord`` attributes are not.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

ISO = "%Y-%m-%dT%H:%M:%S.%fZ"

# Attribute names every LogRecord carries; anything else came from ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
}


def _decode_event(text: str) -> Dict[str, Any] | None:
    if not text.startswith("{"):
        return None
    try:
        decoded = json.loads(text)
    except ValueError:
        return None
    return decoded if isinstance(decoded, dict) else None


class JsonFormatter(logging.Formatter):
    """Render records as single JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        line: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(ISO),
            "level": record.levelname,
            "logger": record.name,
        }
        text = record.getMessage()
        event = _decode_event(text)
        if event is None:
            line["msg"] = text
        else:
            line.update(event)
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                line.setdefault(key, value)
        if record.exc_info:
            line["exc"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


__all__ = ["JsonFormatter", "ISO"]
