"""OpenRouter adapter: routing, fallback and account endpoints."""
from __future__ import annotations

import pytest

from llm_adapters.base.errors import ProviderRejected
from llm_adapters.openrouter import OpenRouterAdapter
from llm_adapters.openrouter.helpers import parse_catalog, rejection_message, response_metadata

CATALOG = {
    "data": [
        {
            "id": "anthropic/claude-sonnet-4-5",
            "name": "Claude Sonnet 4.5",
            "context_length": 200000,
            "pricing": {"prompt": "0.000003", "completion": "0.000015"},
            "architecture": {"modality": "multimodal"},
            "supports_function_calling": True,
        },
        {
            "id": "meta-llama/llama-3.3-70b-instruct",
            "context_length": 8000,
            "pricing": {"prompt": "0.0000001", "completion": "0.0000002"},
        },
        {
            "id": "openai/gpt-5.2",
            "context_length": 400000,
            "pricing": {"prompt": "0.00001", "completion": "0.00003"},
            "architecture": {"modality": "multimodal"},
            "supports_function_calling": True,
        },
        {"name": "no id"},
    ]
}


def chat_ok(model="anthropic/claude-sonnet-4-5", **extra):
    body = {
        "id": "gen-1",
        "model": model,
        "choices": [{"message": {"content": "routed"}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 3, "completion_tokens": 2},
    }
    body.update(extra)
    return body


def make(transport, **options):
    opts = {"apiKey": "or-key", "maxRetries": 1}
    opts.update(options)
    return OpenRouterAdapter(opts, transport=transport)


def test_explicit_strategy_skips_catalog_and_sends_attribution(transport):
    transport.queue_json(200, chat_ok(provider="Anthropic", total_cost=0.0012, native_tokens_prompt=4))
    adapter = make(transport, routingStrategy="explicit", siteUrl="https://app.test", appName="Demo")
    response = adapter.chat_completion([{"role": "user", "content": "Hi"}])

    assert len(transport.requests) == 1  # nosec B101
    request = transport.last
    assert request.url == "https://openrouter.ai/api/v1/chat/completions"  # nosec B101
    assert request.headers["X-Title"] == "Demo"  # nosec B101
    assert request.headers["HTTP-Referer"] == "https://app.test"  # nosec B101
    payload = transport.payload()
    assert payload["model"] == "anthropic/claude-sonnet-4-5"  # nosec B101
    assert payload["route"] == "fallback"  # nosec B101
    assert "models" not in payload  # nosec B101

    assert response.content == "routed"  # nosec B101
    assert response.metadata["actual_provider"] == "Anthropic"  # nosec B101
    assert response.metadata["cost"] == 0.0012  # nosec B101
    assert response.metadata["native_tokens"] == {"prompt": 4, "completion": None}  # nosec B101


def test_default_attribution_header(transport):
    transport.queue_json(200, chat_ok())
    make(transport).chat_completion([{"role": "user", "content": "Hi"}], {"model": "x/y"})
    assert transport.last.headers["X-Title"] == "LLM Adapters"  # nosec B101
    assert "HTTP-Referer" not in transport.last.headers  # nosec B101
    assert transport.payload()["model"] == "x/y"  # nosec B101


def test_cost_optimized_routing_uses_cached_catalog(transport):
    transport.queue_json(200, CATALOG).queue_json(200, chat_ok()).queue_json(200, chat_ok())
    adapter = make(transport, routingStrategy="cost_optimized")
    adapter.chat_completion([{"role": "user", "content": "Hi"}])
    adapter.chat_completion([{"role": "user", "content": "Again"}], {"min_context": 100000})

    assert transport.requests[0].method == "GET"  # nosec B101
    assert transport.requests[0].url.endswith("/models")  # nosec B101
    assert transport.payload(1)["model"] == "meta-llama/llama-3.3-70b-instruct"  # nosec B101
    assert transport.payload(2)["model"] == "anthropic/claude-sonnet-4-5"  # nosec B101
    assert len(transport.requests) == 3  # nosec B101


def test_tool_calls_route_to_function_calling_models(transport):
    transport.queue_json(200, CATALOG).queue_json(200, chat_ok())
    adapter = make(transport, routingStrategy="cost_optimized", autoFallback=False)
    adapter.chat_completion_with_tools([{"role": "user", "content": "?"}], [{"type": "function"}])
    payload = transport.payload()
    assert payload["model"] == "anthropic/claude-sonnet-4-5"  # nosec B101
    assert "route" not in payload  # nosec B101
    assert payload["tools"] == [{"type": "function"}]  # nosec B101


def test_catalog_failure_routes_to_default_model(transport):
    transport.queue_json(500, {"error": "down"}).queue_json(200, chat_ok())
    adapter = make(transport, routingStrategy="balanced", defaultModel="openai/gpt-5.2")
    adapter.chat_completion([{"role": "user", "content": "Hi"}])
    assert transport.payload()["model"] == "openai/gpt-5.2"  # nosec B101


def test_fallback_models_tried_in_order(transport, log_events):
    transport.queue_json(503, {"error": {"message": "overloaded"}})
    transport.queue_json(200, chat_ok(model="openai/gpt-5.2"))
    adapter = make(
        transport,
        routingStrategy="explicit",
        fallbackModels="openai/gpt-5.2, meta-llama/llama-3.3-70b-instruct",
    )
    response = adapter.chat_completion([{"role": "user", "content": "Hi"}])

    assert [transport.payload(i)["model"] for i in range(2)] == [  # nosec B101
        "anthropic/claude-sonnet-4-5",
        "openai/gpt-5.2",
    ]
    assert transport.payload(0)["models"] == [  # nosec B101
        "anthropic/claude-sonnet-4-5",
        "openai/gpt-5.2",
        "meta-llama/llama-3.3-70b-instruct",
    ]
    assert response.model == "openai/gpt-5.2"  # nosec B101
    switch = [e for e in log_events if e["event"] == "routing.fallback"]
    assert switch[0]["failed_model"] == "anthropic/claude-sonnet-4-5"  # nosec B101


def test_rejections_use_vendor_messages_and_never_fall_back(transport):
    transport.queue_json(402, {"error": {"message": "no credit"}})
    adapter = make(transport, routingStrategy="explicit", fallbackModels="openai/gpt-5.2")
    with pytest.raises(ProviderRejected) as info:
        adapter.chat_completion([{"role": "user", "content": "Hi"}])
    assert info.value.message == "Insufficient OpenRouter credits"  # nosec B101
    assert len(transport.requests) == 1  # nosec B101


def test_configure_replaces_routing_settings(transport):
    adapter = make(transport, routingStrategy="explicit", fallbackModels="a/b")
    engine = adapter.routing
    adapter.configure({"apiKey": "or-key", "routingStrategy": "performance", "autoFallback": "false"})
    assert adapter.routing is engine  # nosec B101
    assert engine.strategy.value == "performance"  # nosec B101
    assert engine.auto_fallback is False  # nosec B101
    assert engine.fallback_models == []  # nosec B101


def test_vision_prefers_multimodal_default(transport):
    transport.queue_json(200, CATALOG).queue_json(200, chat_ok())
    adapter = make(transport)
    adapter.analyze_image([{"type": "text", "text": "what"}])
    payload = transport.payload()
    assert payload["model"] == "anthropic/claude-sonnet-4-5"  # nosec B101
    assert payload["route"] == "fallback"  # nosec B101


def test_fetch_available_models_and_refresh(transport):
    transport.queue_json(200, CATALOG).queue_json(200, {"data": [{"id": "only/one"}]})
    adapter = make(transport)
    models = adapter.fetch_available_models()
    assert set(models) == {  # nosec B101
        "anthropic/claude-sonnet-4-5",
        "meta-llama/llama-3.3-70b-instruct",
        "openai/gpt-5.2",
    }
    assert models["openai/gpt-5.2"].provider == "openai"  # nosec B101
    assert adapter.fetch_available_models() == models  # nosec B101
    assert list(adapter.fetch_available_models(force_refresh=True)) == ["only/one"]  # nosec B101
    assert len(transport.requests) == 2  # nosec B101


def test_get_credits(transport):
    transport.queue_json(
        200, {"data": {"limit": 25.0, "usage": 3.5, "is_free_tier": False, "rate_limit": {"requests": 200}}}
    )
    credits = make(transport).get_credits()
    assert transport.last.url.endswith("/auth/key")  # nosec B101
    assert credits == {  # nosec B101
        "balance": 25.0,
        "usage": 3.5,
        "is_free_tier": False,
        "rate_limit": {"requests": 200},
    }


@pytest.mark.parametrize(
    "status, expected",
    [
        (400, "Bad request: bad"),
        (401, "Invalid OpenRouter API key"),
        (403, "Forbidden"),
        (429, "Rate limit exceeded"),
        (503, "OpenRouter service unavailable"),
        (418, "OpenRouter API error (418): bad"),
    ],
)
def test_rejection_message(status, expected):
    assert rejection_message(status, "bad") == expected  # nosec B101


def test_catalog_parsing_and_metadata_defaults():
    descriptors = parse_catalog(CATALOG)
    assert [d.id for d in descriptors][0] == "anthropic/claude-sonnet-4-5"  # nosec B101
    assert descriptors[0].is_multimodal  # nosec B101
    assert descriptors[1].provider == "meta-llama"  # nosec B101
    assert descriptors[1].display_name == "meta-llama/llama-3.3-70b-instruct"  # nosec B101
    assert parse_catalog({}) == []  # nosec B101
    meta = response_metadata({})
    assert meta["actual_provider"] == "unknown"  # nosec B101
    assert meta["cost"] is None  # nosec B101
