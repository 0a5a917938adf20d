"""
Failure categories shared by every adapter.

Values are lowercase and appear verbatim in structured log events
(``error_code``), so renaming one is a breaking change for log consumers.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Normalized failure category of a ``ProviderError``."""

    # Vendor answered with a 4xx status
    AUTH = "auth"
    PAYMENT_REQUIRED = "payment_required"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    VALIDATION = "validation"
    # Vendor could not be reached or answered with a 5xx status
    TIMEOUT = "timeout"
    TRANSIENT = "transient"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    # Raised locally, before or after the HTTP exchange
    CONFIGURATION = "configuration"
    MALFORMED = "malformed"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
