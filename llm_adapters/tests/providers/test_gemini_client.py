"""Gemini generateContent mapping."""
from __future__ import annotations

from llm_adapters.base.models import FinishReason
from llm_adapters.gemini import GeminiAdapter
from llm_adapters.gemini.helpers import estimate_tokens, to_contents

BASE = "https://generativelanguage.googleapis.com/v1beta"

GENERATE_OK = {
    "candidates": [{"content": {"parts": [{"text": "Hello"}, {"text": " world"}]}, "finishReason": "STOP"}],
    "usageMetadata": {"promptTokenCount": 6, "candidatesTokenCount": 2},
    "modelVersion": "gemini-3-flash-preview-001",
}


def make(transport):
    return GeminiAdapter({"apiKey": "g-key"}, transport=transport)


def test_chat_sends_key_as_query_parameter(transport):
    transport.queue_json(200, GENERATE_OK)
    response = make(transport).chat_completion(
        [
            {"role": "system", "content": "Be nice"},
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello"},
            {"role": "tool", "content": "42"},
        ],
        {"max_tokens": 64, "top_k": 5},
    )
    request = transport.last
    assert request.url == f"{BASE}/models/gemini-3-flash-preview:generateContent?key=g-key"  # nosec B101
    assert "Authorization" not in request.headers  # nosec B101
    payload = transport.payload()
    assert [c["role"] for c in payload["contents"]] == ["user", "model", "user"]  # nosec B101
    assert payload["systemInstruction"] == {"parts": [{"text": "Be nice"}]}  # nosec B101
    assert payload["generationConfig"] == {"temperature": 0.7, "maxOutputTokens": 64, "topK": 5}  # nosec B101

    assert response.content == "Hello world"  # nosec B101
    assert response.model == "gemini-3-flash-preview-001"  # nosec B101
    assert response.usage.total_tokens == 8  # nosec B101
    assert response.finish_reason == FinishReason.STOP  # nosec B101


def test_finish_reasons_and_missing_candidates(transport):
    transport.queue_json(200, {"candidates": [{"finishReason": "SAFETY"}]}).queue_json(200, {})
    adapter = make(transport)
    blocked = adapter.chat_completion([{"role": "user", "content": "x"}], {"model": "gemini-2.5-pro"})
    assert blocked.finish_reason == FinishReason.CONTENT_FILTER  # nosec B101
    assert blocked.model == "gemini-2.5-pro"  # nosec B101
    empty = adapter.chat_completion([{"role": "user", "content": "x"}])
    assert empty.content == ""  # nosec B101
    assert empty.finish_reason == FinishReason.STOP  # nosec B101


def test_function_calls_get_generated_ids(transport):
    transport.queue_json(
        200,
        {
            "candidates": [
                {"content": {"parts": [{"functionCall": {"name": "weather", "args": {"city": "Rome"}}}]}}
            ]
        },
    )
    tools = [{"type": "function", "function": {"name": "weather", "description": "d", "parameters": {}}}]
    response = make(transport).chat_completion_with_tools([{"role": "user", "content": "?"}], tools)
    assert transport.payload()["tools"] == [  # nosec B101
        {"functionDeclarations": [{"name": "weather", "description": "d", "parameters": {}}]}
    ]
    call = response.tool_calls[0]
    assert call.id.startswith("call_")  # nosec B101
    assert call.function_name == "weather"  # nosec B101
    assert call.arguments == {"city": "Rome"}  # nosec B101


def test_embeddings_one_request_per_input(transport):
    transport.queue_json(200, {"embedding": {"values": [0.1, 0.2]}})
    transport.queue_json(200, {"embedding": {"values": [0.3]}})
    response = make(transport).embeddings(["abcdefgh", "abcd"])
    assert len(transport.requests) == 2  # nosec B101
    assert transport.requests[0].url.startswith(f"{BASE}/models/text-embedding-004:embedContent")  # nosec B101
    assert transport.payload(0) == {  # nosec B101
        "model": "models/text-embedding-004",
        "content": {"parts": [{"text": "abcdefgh"}]},
    }
    assert response.embeddings == [[0.1, 0.2], [0.3]]  # nosec B101
    assert response.usage.prompt_tokens == 3  # nosec B101


def test_vision_inline_data(transport):
    transport.queue_json(200, GENERATE_OK)
    content = [
        {"type": "text", "text": "What?"},
        {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,QUJD"}},
    ]
    result = make(transport).analyze_image(content)
    parts = transport.payload()["contents"][0]["parts"]
    assert parts == [{"text": "What?"}, {"inlineData": {"mimeType": "image/jpeg", "data": "QUJD"}}]  # nosec B101
    assert result.description == "Hello"  # nosec B101
    assert result.model == "gemini-3-flash-preview-001"  # nosec B101
    assert result.usage.total_tokens == 8  # nosec B101


def test_streaming_uses_sse_endpoint(transport, sse_lines):
    chunk = lambda text: {"candidates": [{"content": {"parts": [{"text": text}]}}]}  # noqa: E731
    transport.queue_stream(sse_lines(chunk("A"), chunk("B")))
    stream = make(transport).stream_chat_completion([{"role": "user", "content": "Hi"}])
    assert transport.last.url == (  # nosec B101
        f"{BASE}/models/gemini-3-flash-preview:streamGenerateContent?alt=sse&key=g-key"
    )
    assert list(stream) == ["A", "B"]  # nosec B101
    assert transport.closed_streams == 1  # nosec B101


def test_helper_edge_cases():
    contents, system = to_contents([{"role": "user", "content": "only"}])
    assert system is None  # nosec B101
    assert contents == [{"role": "user", "parts": [{"text": "only"}]}]  # nosec B101
    assert estimate_tokens("abc") == 0  # nosec B101
