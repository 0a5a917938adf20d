"""Self-managed transport construction and cleanup.

Purpose:
    Adapters that were not handed a transport build their own through
    :func:`create_transport`. Every transport created here is tracked so that
    network resources are released at interpreter exit, or on demand through
    :func:`close_all_transports` (test teardown, application shutdown).

Design notes:
    - Unlike a shared pool, each adapter owns its transport exclusively; the
      registry below only exists for cleanup and holds weak references, so a
      discarded adapter's transport can be garbage collected.
"""

from __future__ import annotations

import atexit
import threading
import weakref

from .transport import HttpxTransport

_TRANSPORTS: "weakref.WeakSet[HttpxTransport]" = weakref.WeakSet()
_LOCK = threading.RLock()


def create_transport(timeout_seconds: float) -> HttpxTransport:
    """Return a new tracked :class:`HttpxTransport` bound to ``timeout_seconds``."""
    transport = HttpxTransport(timeout_seconds)
    with _LOCK:
        _TRANSPORTS.add(transport)
    return transport


def close_all_transports() -> None:
    """Close every tracked transport that is still alive."""
    with _LOCK:
        for transport in list(_TRANSPORTS):
            transport.close()
        _TRANSPORTS.clear()


def tracked_count() -> int:
    with _LOCK:
        return len(_TRANSPORTS)


atexit.register(close_all_transports)

__all__ = ["create_transport", "close_all_transports", "tracked_count"]
