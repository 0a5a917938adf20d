"""Ordered fallback execution for routed calls.

Purpose
-------
Run one logical call against a primary target and, when it fails with a
fallback-eligible error, against each alternate target in order until one
succeeds. Used by the routing engine for aggregator fallback model chains.

Fallback semantics
------------------
- Strictly sequential: one target at a time, in list order.
- Only errors accepted by ``is_eligible`` (by default
  :func:`llm_adapters.base.errors.is_fallback_eligible`) advance the chain;
  any other exception propagates immediately.
- When the list is exhausted the last failure is re-raised unchanged.

Timeout strategy
----------------
None of its own; each attempt is bounded by the adapter's request loop.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence, TypeVar

from ..errors import ProviderError, is_fallback_eligible

T = TypeVar("T")


def run_fallback_chain(
    targets: Sequence[str],
    call: Callable[[str], T],
    *,
    is_eligible: Callable[[BaseException], bool] = is_fallback_eligible,
    on_fallback: Optional[Callable[[str, str, ProviderError], None]] = None,
) -> T:
    """Call ``call(target)`` for each target until one succeeds.

    Parameters
    ----------
    targets:
        Primary target first, then alternates. Must not be empty.
    call:
        Performs the operation for one target.
    is_eligible:
        Decides whether a failure moves on to the next target.
    on_fallback:
        Notified with ``(failed_target, next_target, error)`` before each switch.

    Raises
    ------
    ValueError
        ``targets`` is empty.
    ProviderError
        The last failure once every target failed, or the first non-eligible one.
    """
    if not targets:
        raise ValueError("run_fallback_chain requires at least one target")
    for index, target in enumerate(targets):
        try:
            return call(target)
        except ProviderError as exc:
            is_last = index == len(targets) - 1
            if is_last or not is_eligible(exc):
                raise
            if on_fallback is not None:
                on_fallback(target, targets[index + 1], exc)
    raise AssertionError("unreachable")  # pragma: no cover


__all__ = ["run_fallback_chain"]
