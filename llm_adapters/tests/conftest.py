"""Shared fixtures for adapter tests.

Provides a scripted in-memory transport, a no-op backoff sleep that records
requested delays, and structured log capture on the ``providers`` logger.
"""
from __future__ import annotations

import importlib
import json
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Union

import pytest

from llm_adapters.base.http import HttpRequest, HttpResponse, TransportError
from llm_adapters.base.logging import get_logger
from llm_adapters.config import DEFAULTS, ENV_FIELD_MAP, reset_config_cache
from llm_adapters.config.env import API_KEY_VARIABLES

# The package re-exports the ``retry`` decorator under the module's name.
retry_module = importlib.import_module("llm_adapters.base.resilience.retry")


def _then_raise(chunks: List[bytes], error: Exception) -> Iterator[bytes]:
    yield from chunks
    raise error


class FakeTransport:
    """Transport returning queued responses in order and recording every request."""

    def __init__(self) -> None:
        self.requests: List[HttpRequest] = []
        self.stream_flags: List[bool] = []
        self.closed_streams = 0
        self._queue: List[Union[HttpResponse, Exception]] = []

    # -- scripting -------------------------------------------------------
    def queue_json(self, status: int, payload: Any) -> "FakeTransport":
        self._queue.append(HttpResponse(status_code=status, body=json.dumps(payload).encode("utf-8")))
        return self

    def queue_raw(self, status: int, body: bytes = b"") -> "FakeTransport":
        self._queue.append(HttpResponse(status_code=status, body=body))
        return self

    def queue_error(self, message: str = "connection refused") -> "FakeTransport":
        self._queue.append(TransportError(message))
        return self

    def queue_stream(
        self,
        chunks: Iterable[Union[bytes, str]],
        status: int = 200,
        fail_with: Optional[Exception] = None,
    ) -> "FakeTransport":
        """Queue a streaming body; ``fail_with`` is raised after the last chunk."""
        encoded = [c.encode("utf-8") if isinstance(c, str) else c for c in chunks]
        body = iter(encoded) if fail_with is None else _then_raise(encoded, fail_with)
        self._queue.append(HttpResponse(status_code=status, chunks=body, closer=self._count_close))
        return self

    def _count_close(self) -> None:
        self.closed_streams += 1

    # -- Transport protocol ---------------------------------------------
    def send(self, request: HttpRequest, *, stream: bool = False) -> HttpResponse:
        self.requests.append(request)
        self.stream_flags.append(stream)
        if not self._queue:
            raise AssertionError(f"unexpected request: {request.method} {request.url}")
        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    # -- inspection -----------------------------------------------------
    @property
    def last(self) -> HttpRequest:
        return self.requests[-1]

    def payload(self, index: int = -1) -> Dict[str, Any]:
        body = self.requests[index].body
        return json.loads(body) if body else {}


class _Capture(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.events: List[Dict[str, Any]] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            parsed = json.loads(record.getMessage())
        except ValueError:
            return
        if isinstance(parsed, dict):
            parsed["_level"] = record.levelno
            self.events.append(parsed)


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture(autouse=True)
def sleeps(monkeypatch) -> List[float]:
    """Replace backoff sleeps with a recorder so retry tests run instantly."""
    recorded: List[float] = []
    monkeypatch.setattr(retry_module.time, "sleep", recorded.append)
    return recorded


@pytest.fixture()
def log_events(monkeypatch):
    """Decoded structured events emitted under the ``providers`` logger."""
    monkeypatch.setenv("PROVIDERS_LOG_LEVEL", "DEBUG")
    logger = get_logger()
    handler = _Capture()
    logger.addHandler(handler)
    try:
        yield handler.events
    finally:
        logger.removeHandler(handler)
        logger.setLevel(logging.INFO)


def _provider_env_names() -> Set[str]:
    """Every variable the config layer, key lookup and timeouts read."""
    names = {"PROVIDERS_CONFIG_FILE", "PROVIDERS_HTTP_TIMEOUT_SECONDS", "PROVIDERS_LOG_LEVEL"}
    for provider in {*DEFAULTS, *API_KEY_VARIABLES}:
        names.update(f"{provider.upper()}_{suffix}" for suffix in ENV_FIELD_MAP)
    for candidates in API_KEY_VARIABLES.values():
        names.update(candidates)
    return names


@pytest.fixture()
def provider_env_names() -> Set[str]:
    return _provider_env_names()


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Keep developer environment variables out of config and key resolution."""
    for name in _provider_env_names():
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


def sse(*payloads: Optional[Any]) -> List[str]:
    """Encode payloads as SSE ``data:`` lines (``None`` → ``[DONE]``)."""
    lines = []
    for payload in payloads:
        text = "[DONE]" if payload is None else json.dumps(payload)
        lines.append(f"data: {text}\n\n")
    return lines


@pytest.fixture()
def sse_lines():
    return sse
