"""Structured logging for adapters, the registry and the routing engine.

Layout:
- One managed ``providers`` logger owns the handlers (a stderr console handler
  and, optionally, a rotating file handler). It does not propagate to the root
  logger.
- Components log through children (``providers.openai``,
  ``providers.routing``, ...) that carry no handlers and propagate upward.

Events:
``log_event`` writes one JSON object per event. ``normalized_log_event`` adds
the canonical keys ``structured``, ``phase``, ``attempt``, ``emitted`` and
``tokens`` (plus ``error_code`` on failures) so request-loop, streaming and
routing events share a schema across vendors.

Environment:
``PROVIDERS_LOG_LEVEL`` (DEBUG, INFO, WARN/WARNING, ERROR, CRITICAL;
case-insensitive) is re-read whenever a logger is requested.
"""
from __future__ import annotations

import contextlib
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .log_support import JsonFormatter, LogContext

ROOT_LOGGER_NAME = "providers"
LEVEL_ENV_VAR = "PROVIDERS_LOG_LEVEL"

# Marker attributes identifying what this module installed.
_READY_MARK = "_llm_adapters_ready"
_CONSOLE_MARK = "_llm_adapters_console"
_FILE_MARK = "_llm_adapters_file"

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_FILE_MAX_BYTES = 10 * 1024 * 1024
_FILE_BACKUPS = 5


def _parse_level(value: Any, default: int = logging.INFO) -> int:
    """Level name or number → ``logging`` constant; unknown names give ``default``."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if not isinstance(value, str) or not value.strip():
        return default
    name = value.strip().upper()
    if name == "WARN":
        name = "WARNING"
    if name not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        return default
    return getattr(logging, name)


def _formatter(json_mode: bool) -> logging.Formatter:
    return JsonFormatter() if json_mode else logging.Formatter(_PLAIN_FORMAT)


def _console_handler(level: int, json_mode: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_formatter(json_mode))
    setattr(handler, _CONSOLE_MARK, True)
    return handler


def _handlers_marked(logger: logging.Logger, mark: str) -> list:
    return [h for h in logger.handlers if getattr(h, mark, False)]


def _refresh_console(logger: logging.Logger, level: int, json_mode: bool) -> None:
    """Keep the console handler at ``level`` and attached to a live stream."""
    for handler in _handlers_marked(logger, _CONSOLE_MARK):
        stream = getattr(handler, "stream", None)
        if stream is not None and not getattr(stream, "closed", False):
            handler.setLevel(level)
            continue
        # Test runners may close stderr between tests.
        logger.removeHandler(handler)
        logger.addHandler(_console_handler(level, json_mode))


def _root_logger(json_mode: bool, level: int) -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    wanted = _parse_level(os.getenv(LEVEL_ENV_VAR), default=level)
    if not getattr(logger, _READY_MARK, False):
        logger.handlers[:] = [_console_handler(wanted, json_mode)]
        logger.propagate = False
        setattr(logger, _READY_MARK, True)
    else:
        _refresh_console(logger, wanted, json_mode)
    logger.setLevel(wanted)
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME, json_mode: bool = True, level: int = logging.INFO) -> logging.Logger:
    """Return the managed ``providers`` logger or a propagating child of it."""
    root = _root_logger(json_mode, level)
    if name == ROOT_LOGGER_NAME:
        return root
    child = logging.getLogger(name)
    child.setLevel(logging.NOTSET)
    child.propagate = True
    return child


def _drop_file_handlers(logger: logging.Logger, keep: Optional[str] = None) -> Optional[logging.Handler]:
    """Remove managed file handlers not writing to ``keep``; return the kept one."""
    kept = None
    for handler in _handlers_marked(logger, _FILE_MARK):
        if keep is not None and getattr(handler, "baseFilename", None) == keep:
            kept = handler
            continue
        logger.removeHandler(handler)
        with contextlib.suppress(OSError):
            handler.close()
    return kept


def configure_logger(
    *,
    level: int | str | None = None,
    file_path: Optional[str] = None,
    json_mode: bool = True,
    logger_name: str = ROOT_LOGGER_NAME,
) -> logging.Logger:
    """Adjust the managed logger at runtime.

    ``level`` (name or number) applies to the logger and all its handlers;
    ``None`` leaves it alone. ``file_path`` attaches a rotating file handler
    (10 MB, 5 backups) or, when ``None``, removes the managed one. Handlers
    added by callers are left untouched.
    """
    logger = get_logger(logger_name, json_mode=json_mode)
    if level is not None:
        logger.setLevel(_parse_level(level, default=logger.level))
        for handler in logger.handlers:
            handler.setLevel(logger.level)

    if file_path is None:
        _drop_file_handlers(logger)
        return logger

    target = Path(os.path.abspath(os.path.expanduser(file_path)))
    target.parent.mkdir(parents=True, exist_ok=True)
    handler = _drop_file_handlers(logger, keep=str(target))
    if handler is None:
        handler = RotatingFileHandler(
            str(target), maxBytes=_FILE_MAX_BYTES, backupCount=_FILE_BACKUPS, encoding="utf-8"
        )
        setattr(handler, _FILE_MARK, True)
        logger.addHandler(handler)
    handler.setFormatter(_formatter(json_mode))
    handler.setLevel(logger.level)
    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    level: int = logging.INFO,
    keep_none: bool = False,
    **fields: Any,
) -> None:
    """Log ``event`` with context and fields as one JSON-encoded message.

    ``None`` fields are dropped unless ``keep_none`` is set.
    """
    if not logger.isEnabledFor(level):
        return
    payload: Dict[str, Any] = {"event": event}
    if ctx is not None:
        payload.update(ctx.to_dict())
    payload.update(fields if keep_none else {k: v for k, v in fields.items() if v is not None})
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))


# ---------------------- Normalized events ----------------------------------
REQUIRED_NORMALIZED_KEYS = (
    "structured",
    "phase",
    "attempt",
    "error_code",
    "emitted",
    "tokens",
)


def _coerce_tokens(tokens: Any) -> Optional[Dict[str, Any]]:
    """Usage info (mapping, usage object or pairs) → plain dict."""
    if tokens is None:
        return None
    if isinstance(tokens, Mapping):
        return dict(tokens)
    to_dict = getattr(tokens, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    with contextlib.suppress(TypeError, ValueError):
        return dict(tokens)
    return {"value": repr(tokens)}


def normalized_log_event(  # noqa: PLR0913
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    phase: str,
    attempt: int | None = None,
    error_code: str | None = None,
    emitted: Any = None,
    tokens: Any = None,
    level: int = logging.INFO,
    **extra_fields: Any,
) -> None:
    """Log ``event`` with the canonical key set always present.

    ``error_code`` appears only when set. Extra fields are added unless they
    are ``None`` or collide with a canonical key.
    """
    canonical: Dict[str, Any] = {
        "structured": True,
        "phase": phase,
        "attempt": attempt,
        "emitted": emitted,
        "tokens": _coerce_tokens(tokens),
    }
    if error_code is not None:
        canonical["error_code"] = error_code
    extras = {k: v for k, v in extra_fields.items() if v is not None and k not in canonical}
    log_event(logger, event, ctx, level=level, keep_none=True, **canonical, **extras)


__all__ = [
    "LogContext",
    "get_logger",
    "configure_logger",
    "log_event",
    "normalized_log_event",
    "REQUIRED_NORMALIZED_KEYS",
]
