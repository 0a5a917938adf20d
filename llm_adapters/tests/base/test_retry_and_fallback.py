"""Retry decorator and ordered fallback chain."""
from __future__ import annotations

import pytest

from llm_adapters.base.errors import ErrorCode, ProviderError, ProviderRejected, ProviderUnreachable
from llm_adapters.base.resilience import RetryConfig, retry, run_fallback_chain


def _transient(msg: str = "boom") -> ProviderError:
    return ProviderError(code=ErrorCode.TRANSIENT, message=msg, provider="test", retryable=True)


def test_delays_follow_exponential_backoff():
    cfg = RetryConfig(max_attempts=4, delay_base=2.0, multiplier=0.1)
    assert list(cfg.delays()) == pytest.approx([0.1, 0.2, 0.4])  # nosec B101


def test_retry_succeeds_after_transient_failures(sleeps):
    calls = {"n": 0}

    @retry(RetryConfig(max_attempts=3, multiplier=0.1))
    def flaky():
        calls["n"] += 1
        if calls["n"] < 3:
            raise _transient()
        return "ok"

    assert flaky() == "ok"  # nosec B101
    assert calls["n"] == 3  # nosec B101
    assert sleeps == pytest.approx([0.1, 0.2])  # nosec B101


def test_retry_reraises_last_error_without_sleeping_after_final_attempt(sleeps):
    @retry(RetryConfig(max_attempts=2, multiplier=0.1))
    def always_fails():
        raise _transient("last")

    with pytest.raises(ProviderError) as info:
        always_fails()
    assert info.value.message == "last"  # nosec B101
    assert sleeps == pytest.approx([0.1])  # nosec B101


def test_non_retryable_codes_propagate_immediately(sleeps):
    calls = {"n": 0}

    @retry(RetryConfig(max_attempts=5, retryable_codes=(ErrorCode.TRANSIENT,)))
    def rejected():
        calls["n"] += 1
        raise ProviderRejected("nope", provider="test", status_code=401)

    with pytest.raises(ProviderRejected):
        rejected()
    assert calls["n"] == 1  # nosec B101
    assert sleeps == []  # nosec B101


def test_attempt_logger_sees_every_attempt():
    seen = []

    def log(*, attempt, max_attempts, delay, error):
        seen.append((attempt, max_attempts, delay, error is None))

    calls = {"n": 0}

    @retry(RetryConfig(max_attempts=3, multiplier=1.0, attempt_logger=log))
    def flaky():
        calls["n"] += 1
        if calls["n"] == 1:
            raise _transient()
        return 1

    flaky()
    assert seen == [(0, 3, 1.0, False), (1, 3, None, True)]  # nosec B101


def test_fallback_chain_moves_on_for_eligible_errors():
    tried = []
    switches = []

    def call(model):
        tried.append(model)
        if model != "c":
            raise ProviderUnreachable("down", provider="openrouter", attempts=3)
        return f"served by {model}"

    result = run_fallback_chain(["a", "b", "c"], call, on_fallback=lambda f, n, e: switches.append((f, n)))
    assert result == "served by c"  # nosec B101
    assert tried == ["a", "b", "c"]  # nosec B101
    assert switches == [("a", "b"), ("b", "c")]  # nosec B101


def test_fallback_chain_stops_on_ineligible_error():
    tried = []

    def call(model):
        tried.append(model)
        raise ProviderRejected("Invalid OpenRouter API key", provider="openrouter", status_code=401)

    with pytest.raises(ProviderRejected):
        run_fallback_chain(["a", "b"], call)
    assert tried == ["a"]  # nosec B101


def test_fallback_chain_surfaces_last_failure():
    def call(model):
        raise ProviderUnreachable(f"{model} down", provider="openrouter", attempts=1)

    with pytest.raises(ProviderUnreachable) as info:
        run_fallback_chain(["a", "b"], call)
    assert info.value.message == "b down"  # nosec B101


def test_fallback_chain_requires_targets():
    with pytest.raises(ValueError):
        run_fallback_chain([], lambda m: m)
