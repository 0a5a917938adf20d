"""Resilience helpers: retry/backoff policy and ordered fallback execution."""

from .fallback import run_fallback_chain
from .retry import DEFAULT_RETRY_CONFIG, RetryConfig, retry

__all__ = ["DEFAULT_RETRY_CONFIG", "RetryConfig", "retry", "run_fallback_chain"]
