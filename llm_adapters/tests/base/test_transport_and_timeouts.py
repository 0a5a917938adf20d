"""Timeout normalization, default transport and transport tracking."""
from __future__ import annotations

import json

import httpx
import pytest

from llm_adapters.base.http import (
    HttpRequest,
    HttpResponse,
    HttpxTransport,
    Transport,
    TransportError,
    close_all_transports,
    create_transport,
    tracked_count,
)
from llm_adapters.base.timeouts import get_default_timeout, resolve_timeouts


def setup_function(_):
    close_all_transports()


def teardown_function(_):
    close_all_transports()


@pytest.mark.parametrize("configured, connect, send", [(120, 10, 120), (5, 5, 5), (10, 10, 10)])
def test_connect_timeout_is_capped(configured, connect, send):
    pair = resolve_timeouts(configured)
    assert pair.connect == connect  # nosec B101
    assert pair.send == send  # nosec B101


def test_default_timeout_from_environment(monkeypatch):
    monkeypatch.setenv("PROVIDERS_HTTP_TIMEOUT_SECONDS", "12")
    assert get_default_timeout() == 12  # nosec B101
    monkeypatch.setenv("PROVIDERS_HTTP_TIMEOUT_SECONDS", "garbage")
    assert get_default_timeout() == 30  # nosec B101


def test_created_transports_are_tracked_and_closed():
    t1 = create_transport(20)
    t2 = create_transport(20)
    assert t1 is not t2  # nosec B101
    assert tracked_count() == 2  # nosec B101
    close_all_transports()
    assert tracked_count() == 0  # nosec B101


def test_httpx_transport_sends_and_buffers():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["x-test"] == "1"  # nosec B101
        return httpx.Response(201, json={"ok": True})

    transport = HttpxTransport(30, client=httpx.Client(transport=httpx.MockTransport(handler)))
    assert isinstance(transport, Transport)  # nosec B101
    response = transport.send(HttpRequest("POST", "https://api.test/x", {"x-test": "1"}, b"{}"))
    assert response.status_code == 201  # nosec B101
    assert json.loads(response.read()) == {"ok": True}  # nosec B101


def test_httpx_transport_streams_chunks():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"line1\nline2\n")

    transport = HttpxTransport(30, client=httpx.Client(transport=httpx.MockTransport(handler)))
    response = transport.send(HttpRequest("POST", "https://api.test/x"), stream=True)
    assert b"".join(response.iter_chunks()) == b"line1\nline2\n"  # nosec B101
    response.close()


def test_httpx_transport_maps_connection_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = HttpxTransport(30, client=httpx.Client(transport=httpx.MockTransport(handler)))
    with pytest.raises(TransportError):
        transport.send(HttpRequest("GET", "https://api.test/x"))


def test_http_response_read_drains_and_closes_once():
    closed = []
    response = HttpResponse(200, chunks=iter([b"a", b"b"]), closer=lambda: closed.append(1))
    assert response.read() == b"ab"  # nosec B101
    assert response.read() == b"ab"  # nosec B101
    response.close()
    assert closed == [1]  # nosec B101
