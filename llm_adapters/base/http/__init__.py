"""HTTP transport boundary and self-managed transport helpers."""

from .client import close_all_transports, create_transport, tracked_count
from .transport import HttpRequest, HttpResponse, HttpxTransport, Transport, TransportError

__all__ = [
    "Transport",
    "TransportError",
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    "create_transport",
    "close_all_transports",
    "tracked_count",
]
