"""Anthropic Messages API mapping."""
from __future__ import annotations

import pytest

from llm_adapters.anthropic import AnthropicAdapter
from llm_adapters.anthropic.helpers import convert_image_part, map_stop_reason, map_tool_choice
from llm_adapters.base.errors import UnsupportedFeature
from llm_adapters.base.models import FinishReason

MESSAGE_OK = {
    "id": "msg_1",
    "model": "claude-sonnet-4-5-20250929",
    "content": [{"type": "text", "text": "Hi "}, {"type": "text", "text": "there"}],
    "stop_reason": "end_turn",
    "usage": {"input_tokens": 12, "output_tokens": 4},
}


def make(transport):
    return AnthropicAdapter({"apiKey": "sk-ant"}, transport=transport)


def test_chat_lifts_system_prompt_and_uses_vendor_headers(transport):
    transport.queue_json(200, MESSAGE_OK)
    response = make(transport).chat_completion(
        [{"role": "system", "content": "Be terse"}, {"role": "user", "content": "Hello"}],
        {"temperature": 0.2},
    )
    request = transport.last
    assert request.url == "https://api.anthropic.com/v1/messages"  # nosec B101
    assert request.headers["x-api-key"] == "sk-ant"  # nosec B101
    assert request.headers["anthropic-version"] == "2023-06-01"  # nosec B101
    assert "Authorization" not in request.headers  # nosec B101
    payload = transport.payload()
    assert payload["system"] == "Be terse"  # nosec B101
    assert payload["messages"] == [{"role": "user", "content": "Hello"}]  # nosec B101
    assert payload["max_tokens"] == 4096  # nosec B101
    assert payload["temperature"] == 0.2  # nosec B101

    assert response.content == "Hi there"  # nosec B101
    assert response.provider == "claude"  # nosec B101
    assert response.usage.total_tokens == 16  # nosec B101
    assert response.finish_reason == FinishReason.STOP  # nosec B101


def test_tool_use_blocks_become_tool_calls(transport):
    transport.queue_json(
        200,
        {
            "content": [
                {"type": "text", "text": "Checking."},
                {"type": "tool_use", "id": "toolu_1", "name": "weather", "input": {"city": "Oslo"}},
            ],
            "stop_reason": "tool_use",
            "usage": {"input_tokens": 1, "output_tokens": 1},
        },
    )
    tools = [
        {
            "type": "function",
            "function": {"name": "weather", "description": "Look up weather", "parameters": {"type": "object"}},
        }
    ]
    response = make(transport).chat_completion_with_tools(
        [{"role": "user", "content": "?"}], tools, {"tool_choice": "required"}
    )
    payload = transport.payload()
    assert payload["tools"] == [  # nosec B101
        {"name": "weather", "description": "Look up weather", "input_schema": {"type": "object"}}
    ]
    assert payload["tool_choice"] == {"type": "any"}  # nosec B101
    assert response.finish_reason == FinishReason.TOOL_CALLS  # nosec B101
    assert response.tool_calls[0].id == "toolu_1"  # nosec B101
    assert response.tool_calls[0].arguments == {"city": "Oslo"}  # nosec B101
    assert response.content == "Checking."  # nosec B101


def test_vision_converts_data_urls(transport):
    transport.queue_json(200, MESSAGE_OK)
    content = [
        {"type": "text", "text": "Describe"},
        {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}},
    ]
    result = make(transport).analyze_image(content, {"system_prompt": "You see images"})
    user_content = transport.payload()["messages"][0]["content"]
    assert user_content[1] == {  # nosec B101
        "type": "image",
        "source": {"type": "base64", "media_type": "image/png", "data": "AAAA"},
    }
    assert transport.payload()["system"] == "You see images"  # nosec B101
    assert result.description == "Hi there"  # nosec B101


def test_stream_stops_at_message_stop(transport, sse_lines):
    transport.queue_stream(
        sse_lines(
            {"type": "message_start", "message": {}},
            {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "Hel"}},
            {"type": "content_block_delta", "delta": {"type": "input_json_delta", "partial_json": "{"}},
            {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "lo"}},
            {"type": "message_stop"},
            {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "ignored"}},
        )
    )
    stream = make(transport).stream_chat_completion([{"role": "user", "content": "Hi"}])
    assert "".join(stream) == "Hello"  # nosec B101
    assert stream.completed  # nosec B101
    assert transport.closed_streams == 1  # nosec B101


def test_embeddings_are_unsupported(transport):
    with pytest.raises(UnsupportedFeature):
        make(transport).embeddings(["x"])
    assert transport.requests == []  # nosec B101


@pytest.mark.parametrize(
    "choice, expected",
    [
        ("auto", {"type": "auto"}),
        ("none", {"type": "none"}),
        ("required", {"type": "any"}),
        ("weather", {"type": "tool", "name": "weather"}),
        (None, {"type": "auto"}),
    ],
)
def test_map_tool_choice(choice, expected):
    assert map_tool_choice(choice) == expected  # nosec B101


def test_map_stop_reason_passes_unknown_values_through():
    assert map_stop_reason("max_tokens") == FinishReason.LENGTH  # nosec B101
    assert map_stop_reason("pause_turn") == "pause_turn"  # nosec B101
    assert map_stop_reason("") == FinishReason.STOP  # nosec B101


def test_plain_image_urls_use_url_source():
    block = convert_image_part({"type": "image_url", "image_url": {"url": "https://img.test/a.png"}})
    assert block == {"type": "image", "source": {"type": "url", "url": "https://img.test/a.png"}}  # nosec B101
    assert convert_image_part({"type": "audio"}) is None  # nosec B101
