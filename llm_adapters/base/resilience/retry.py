"""Bounded retry with exponential backoff for one logical adapter request.

Purpose
-------
The adapter request loop wraps a single HTTP attempt in :func:`retry`. Each
failed attempt that raises a ``ProviderError`` with a retryable code is
followed by a sleep of ``multiplier * delay_base ** n`` seconds (``n`` counts
from zero), so the default policy waits 0.1 s, 0.2 s, 0.4 s, ... Anything
else (4xx rejections, configuration problems, programming errors) escapes on
the first attempt.

Timeout strategy
----------------
None here. Each attempt is bounded by the transport's timeouts; this module
only decides whether and when to try again. There is no sleep after the
final attempt.
"""

from __future__ import annotations

import functools
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Protocol, Tuple, TypeVar

from ..errors import ErrorCode, ProviderError
from ...config.defaults import BACKOFF_BASE_SECONDS, DEFAULT_MAX_RETRIES

T = TypeVar("T")


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    """Observer told about every attempt; ``delay`` is set only when another attempt follows."""

    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: float | None,
        error: ProviderError | None,
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy for one request.

    ``max_attempts`` counts every attempt including the first, so ``1``
    disables retrying.
    """

    max_attempts: int = DEFAULT_MAX_RETRIES
    delay_base: float = 2.0
    multiplier: float = BACKOFF_BASE_SECONDS
    retryable_codes: Tuple[ErrorCode, ...] = (ErrorCode.TRANSIENT,)
    attempt_logger: Optional[AttemptLogger] = None

    def delays(self) -> Iterable[float]:
        """Sleep durations between consecutive attempts (one fewer than attempts)."""
        return [self.multiplier * self.delay_base**n for n in range(max(1, self.max_attempts) - 1)]

    def should_retry(self, error: ProviderError) -> bool:
        return error.code in self.retryable_codes


DEFAULT_RETRY_CONFIG = RetryConfig()


def retry(config: RetryConfig = DEFAULT_RETRY_CONFIG):
    """Decorate a zero-side-effect-on-failure callable with ``config``'s policy.

    The wrapped callable's last ``ProviderError`` is re-raised unchanged once
    attempts run out.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            schedule: List[Optional[float]] = [*config.delays(), None]
            notify = config.attempt_logger
            for attempt, pause in enumerate(schedule):
                try:
                    outcome = func(*args, **kwargs)
                except ProviderError as exc:
                    again = pause is not None and config.should_retry(exc)
                    if notify is not None:
                        notify(
                            attempt=attempt,
                            max_attempts=config.max_attempts,
                            delay=pause if again else None,
                            error=exc,
                        )
                    if not again:
                        raise
                    time.sleep(pause)
                else:
                    if notify is not None:
                        notify(attempt=attempt, max_attempts=config.max_attempts, delay=None, error=None)
                    return outcome
            # The final slot has no pause, so the loop always returns or raises.
            raise RuntimeError("retry schedule exhausted without an outcome")  # pragma: no cover

        return wrapper

    return decorator


__all__ = [
    "AttemptLogger",
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "retry",
]
