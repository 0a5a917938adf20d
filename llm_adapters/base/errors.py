"""Unified adapter error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``llm_adapters.base.errors_parts`` to keep a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.classification import classify_exception, classify_status, is_fallback_eligible
from .errors_parts.typed_errors import (
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
