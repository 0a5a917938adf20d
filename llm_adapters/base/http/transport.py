"""Transport boundary between adapters and the network.

Purpose:
    Adapters never build sockets or TLS themselves. They hand an
    :class:`HttpRequest` to a :class:`Transport` and get back an
    :class:`HttpResponse` (buffered, or with a lazy chunk iterator when
    streaming). Connection-level failures surface as :class:`TransportError`
    so the request loop can tell them apart from HTTP error statuses.

External dependencies:
    - ``httpx`` backs the default :class:`HttpxTransport`.

Timeout strategy:
    - ``HttpxTransport`` is bound to one :class:`TimeoutPair`: connect is
      capped (see ``base.timeouts``), the overall attempt uses the configured
      timeout. A transport never changes its timeouts; adapters build a new one
      when their timeout changes.

Lifecycle & cleanup:
    - Transports created through :func:`llm_adapters.base.http.client.create_transport`
      are tracked and closed at interpreter exit.
    - A streaming response owns the underlying connection until its chunk
      iterator is exhausted or :meth:`HttpResponse.close` is called.
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Mapping, Optional, Protocol, runtime_checkable

import httpx

from ..timeouts import TimeoutPair, resolve_timeouts


class TransportError(Exception):
    """Connection refused, DNS failure, timeout, or a broken connection."""


@dataclass
class HttpRequest:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None


@dataclass
class HttpResponse:
    """One HTTP response.

    Attributes:
        status_code: HTTP status.
        headers: Response headers.
        body: Full body for buffered responses.
        chunks: Lazy body iterator for streaming responses (``None`` when buffered).
        closer: Callback releasing the underlying connection.
    """

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    chunks: Optional[Iterator[bytes]] = None
    closer: Optional[Callable[[], None]] = None

    def iter_chunks(self) -> Iterator[bytes]:
        if self.chunks is None:
            if self.body:
                yield self.body
            return
        yield from self.chunks

    def read(self) -> bytes:
        """Drain a streaming body into ``body`` (no-op when buffered)."""
        if self.chunks is not None:
            try:
                self.body = b"".join(self.chunks)
            finally:
                self.chunks = None
                self.close()
        return self.body

    @property
    def text(self) -> str:
        return self.read().decode("utf-8", errors="replace")

    def close(self) -> None:
        if self.closer is not None:
            closer, self.closer = self.closer, None
            closer()


@runtime_checkable
class Transport(Protocol):
    """Send one HTTP request and return one response, or raise ``TransportError``."""

    def send(self, request: HttpRequest, *, stream: bool = False) -> HttpResponse: ...


class HttpxTransport:
    """Default :class:`Transport` backed by a private ``httpx.Client``."""

    def __init__(self, timeout_seconds: float, client: Optional[httpx.Client] = None) -> None:
        self.timeouts: TimeoutPair = resolve_timeouts(timeout_seconds)
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(self.timeouts.send, connect=self.timeouts.connect)
        )

    @property
    def client(self) -> httpx.Client:
        return self._client

    def send(self, request: HttpRequest, *, stream: bool = False) -> HttpResponse:
        req = self._client.build_request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.body,
        )
        try:
            resp = self._client.send(req, stream=stream)
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc
        if not stream:
            return HttpResponse(status_code=resp.status_code, headers=dict(resp.headers), body=resp.content)
        return HttpResponse(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            chunks=self._guarded_chunks(resp),
            closer=resp.close,
        )

    @staticmethod
    def _guarded_chunks(resp: httpx.Response) -> Iterator[bytes]:
        try:
            yield from resp.iter_bytes()
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc
        finally:
            resp.close()

    def close(self) -> None:
        with contextlib.suppress(RuntimeError):
            self._client.close()


__all__ = ["Transport", "TransportError", "HttpRequest", "HttpResponse", "HttpxTransport"]
