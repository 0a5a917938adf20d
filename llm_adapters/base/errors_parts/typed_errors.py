"""
Typed adapter failures.

Each class pins the normalized :class:`ErrorCode` for one failure category so
callers can tell "your credentials are wrong" from "the vendor is down" from
"this vendor cannot do that" by type alone. All of them are
:class:`ProviderError` instances, so generic handlers keep working.
"""
from __future__ import annotations

from typing import Any, Optional

from .classification import classify_status
from .error_code import ErrorCode
from .provider_error import ProviderError


class ConfigurationError(ProviderError):
    """A required setting is missing or invalid at call time."""

    def __init__(self, message: str, provider: str = "", model: Optional[str] = None) -> None:
        super().__init__(code=ErrorCode.CONFIGURATION, message=message, provider=provider, model=model)


class ProviderRejected(ProviderError):
    """The vendor answered with a 4xx status. Never retried by the request loop.

    ``retryable`` is still set for 429/503-classified statuses so the routing
    fallback chain can move on to another model.
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int,
        model: Optional[str] = None,
        body: Any = None,
    ) -> None:
        code = classify_status(status_code)
        super().__init__(
            code=code,
            message=message,
            provider=provider,
            model=model,
            retryable=code in (ErrorCode.RATE_LIMIT, ErrorCode.UNAVAILABLE),
        )
        self.status_code = status_code
        self.body = body


class ProviderUnreachable(ProviderError):
    """Retries were exhausted across transport failures and/or 5xx responses."""

    def __init__(
        self,
        message: str,
        provider: str,
        attempts: int,
        model: Optional[str] = None,
        status_code: Optional[int] = None,
        raw: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            code=classify_status(status_code) if status_code else ErrorCode.UNAVAILABLE,
            message=message,
            provider=provider,
            model=model,
            retryable=True,
            raw=raw,
        )
        self.attempts = attempts
        self.status_code = status_code


class UnsupportedFeature(ProviderError):
    """The vendor does not implement the requested capability."""

    def __init__(self, feature: str, provider: str, message: Optional[str] = None) -> None:
        super().__init__(
            code=ErrorCode.UNSUPPORTED,
            message=message or f"{provider} does not support {feature}",
            provider=provider,
        )
        self.feature = feature


class MalformedPayload(ProviderError):
    """A response body could not be parsed as JSON."""

    def __init__(self, message: str, provider: str = "", raw: Optional[Exception] = None) -> None:
        super().__init__(code=ErrorCode.MALFORMED, message=message, provider=provider, raw=raw)


class UnexpectedShape(ProviderError):
    """A response body parsed, but not into an object or array."""

    def __init__(self, message: str, provider: str = "") -> None:
        super().__init__(code=ErrorCode.MALFORMED, message=message, provider=provider)


class InvalidAdapterType(ProviderError):
    """Registry misuse: the registered constructor is not an adapter."""

    def __init__(self, message: str, adapter_type: str = "") -> None:
        super().__init__(code=ErrorCode.VALIDATION, message=message, provider="registry")
        self.adapter_type = adapter_type


__all__ = [
    "ConfigurationError",
    "ProviderRejected",
    "ProviderUnreachable",
    "UnsupportedFeature",
    "MalformedPayload",
    "UnexpectedShape",
    "InvalidAdapterType",
]
