"""
Map HTTP statuses and arbitrary exceptions onto :class:`ErrorCode`, and
decide which failures may move a routed call on to its next fallback model.
"""
from __future__ import annotations

from typing import Optional, Tuple

import httpx

from .error_code import ErrorCode
from .provider_error import ProviderError

_STATUS_CODES = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    402: ErrorCode.PAYMENT_REQUIRED,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}

# Checked in order against lowercased messages of foreign exceptions.
_MESSAGE_HINTS: Tuple[Tuple[ErrorCode, Tuple[str, ...]], ...] = (
    (ErrorCode.RATE_LIMIT, ("rate limit", "rate-limit", "too many requests")),
    (ErrorCode.TIMEOUT, ("timeout", "timed out")),
    (ErrorCode.AUTH, ("api key", "unauthorized", "forbidden")),
    (ErrorCode.UNAVAILABLE, ("overloaded", "unavailable", "connection refused")),
    (ErrorCode.NOT_FOUND, ("not found",)),
)


def classify_status(status: int) -> ErrorCode:
    """Failure category of an HTTP status.

    Unlisted 4xx statuses are ``VALIDATION``, unlisted 5xx (and above) are
    ``SERVER_ERROR``; anything below 400 is ``UNKNOWN``.
    """
    if status in _STATUS_CODES:
        return _STATUS_CODES[status]
    if status >= 500:
        return ErrorCode.SERVER_ERROR
    if status >= 400:
        return ErrorCode.VALIDATION
    return ErrorCode.UNKNOWN


def _status_of(exc: BaseException) -> Optional[int]:
    candidates = (
        getattr(exc, "status_code", None),
        getattr(exc, "status", None),
        getattr(getattr(exc, "response", None), "status_code", None),
    )
    for value in candidates:
        if isinstance(value, int) and not isinstance(value, bool) and 100 <= value < 600:
            return value
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Failure category of any exception.

    ``ProviderError`` keeps its own code; timeouts (builtin or httpx) are
    ``TIMEOUT``; an HTTP status found on the exception or its ``response`` is
    classified by :func:`classify_status`; otherwise message hints apply,
    and ``UNKNOWN`` is the last resort.
    """
    if isinstance(exc, ProviderError):
        return exc.code
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    status = _status_of(exc)
    if status is not None:
        return classify_status(status)
    text = str(exc).lower()
    for code, hints in _MESSAGE_HINTS:
        if any(hint in text for hint in hints):
            return code
    return ErrorCode.UNKNOWN


def is_fallback_eligible(exc: BaseException) -> bool:
    """True when a routed call should try its next fallback model.

    Retryable provider errors qualify (exhausted retries, 429/503 rejections)
    and so does any provider error whose message reports an overloaded model.
    Foreign exceptions never do.
    """
    if not isinstance(exc, ProviderError):
        return False
    return exc.retryable or "overloaded" in (exc.message or "").lower()


__all__ = [
    "classify_exception",
    "classify_status",
    "is_fallback_eligible",
]
