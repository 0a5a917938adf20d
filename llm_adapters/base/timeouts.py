"""Timeout policy for adapter HTTP traffic.

Key Components
--------------
TimeoutPair
    The two values every transport is built with: ``connect`` (capped) and
    ``send`` (the configured per-attempt timeout, uncapped).

resolve_timeouts(timeout_seconds)
    Derives the pair. The connect phase never waits longer than
    ``CONNECT_TIMEOUT_CAP_SECONDS`` (10s); a slower configured timeout only
    stretches the read/write phases.

get_default_timeout()
    Process-wide default per-attempt timeout. ``PROVIDERS_HTTP_TIMEOUT_SECONDS``
    overrides the built-in 30 seconds; invalid or non-positive values are
    ignored.

Failure Modes
-------------
None. There is no end-to-end deadline across retries; worst-case latency of
one call is ``maxRetries * timeout`` plus backoff delays.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

from ..config.defaults import CONNECT_TIMEOUT_CAP_SECONDS, DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class TimeoutPair:
    """Normalized timeout values (seconds) for one transport client.

    Attributes:
        connect: Time allowed to establish the connection.
        send: Time allowed for the whole attempt (write + read).
    """

    connect: float
    send: float


def resolve_timeouts(timeout_seconds: float) -> TimeoutPair:
    """Return the connect/send pair for a configured per-attempt timeout."""
    send = float(timeout_seconds)
    return TimeoutPair(connect=min(send, float(CONNECT_TIMEOUT_CAP_SECONDS)), send=send)


def get_default_timeout() -> int:
    raw = os.getenv("PROVIDERS_HTTP_TIMEOUT_SECONDS")
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        val = int(float(raw))
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS
    return val if val > 0 else DEFAULT_TIMEOUT_SECONDS


__all__ = ["TimeoutPair", "resolve_timeouts", "get_default_timeout"]
