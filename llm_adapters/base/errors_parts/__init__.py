"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `llm_adapters.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .classification import classify_exception, classify_status, is_fallback_eligible
from .typed_errors import (
    ConfigurationError,
    InvalidAdapterType,
    MalformedPayload,
    ProviderRejected,
    ProviderUnreachable,
    UnexpectedShape,
    UnsupportedFeature,
)

__all__ = [
    "ErrorCode",
    "ProviderError",
    "classify_exception",
    "classify_status",
    "is_fallback_eligible",
    "ConfigurationError",
    "InvalidAdapterType",
    "MalformedPayload",
    "ProviderRejected",
    "ProviderUnreachable",
    "UnexpectedShape",
    "UnsupportedFeature",
]
