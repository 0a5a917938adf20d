"""Anthropic Claude adapter.

Speaks the Messages API directly over the shared request loop:

- auth via ``x-api-key`` plus the pinned ``anthropic-version`` header;
- system prompt sent in the top-level ``system`` field;
- SSE streaming where ``content_block_delta`` events carry the text and
  ``message_stop`` ends the stream.

Anthropic offers no embeddings endpoint, so ``embeddings()`` keeps the base
``UnsupportedFeature`` behavior. Request/response mapping lives in
``helpers``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..base import accessor
from ..base.adapter import (
    FEATURE_CHAT,
    FEATURE_COMPLETION,
    FEATURE_STREAMING,
    FEATURE_TOOLS,
    FEATURE_VISION,
    BaseAdapter,
)
from ..base.http import HttpResponse
from ..base.models import CompletionResponse, VisionResponse
from ..base.streaming import DeltaStream, SSEDecoder
from ..config.defaults import (
    ANTHROPIC_API_VERSION,
    ANTHROPIC_DEFAULT_BASE_URL,
    ANTHROPIC_DEFAULT_MODEL,
    DEFAULT_MAX_TOKENS,
)
from .helpers import (
    convert_tools,
    convert_vision_content,
    extract_stream_delta,
    is_message_stop,
    map_stop_reason,
    map_tool_choice,
    parse_content,
    split_system,
    usage_counts,
)

MESSAGES_ENDPOINT = "messages"


class AnthropicAdapter(BaseAdapter):
    IDENTIFIER = "claude"
    NAME = "Anthropic Claude"
    DEFAULT_BASE_URL = ANTHROPIC_DEFAULT_BASE_URL
    DEFAULT_MODEL = ANTHROPIC_DEFAULT_MODEL
    SUPPORTED_FEATURES = frozenset(
        {FEATURE_CHAT, FEATURE_COMPLETION, FEATURE_VISION, FEATURE_STREAMING, FEATURE_TOOLS}
    )
    STATIC_MODELS = {
        "claude-opus-4-5-20251124": "Claude Opus 4.5 (Most Capable)",
        "claude-sonnet-4-5-20250929": "Claude Sonnet 4.5 (Recommended)",
        "claude-opus-4-1-20250805": "Claude Opus 4.1",
        "claude-opus-4-20250514": "Claude Opus 4",
        "claude-sonnet-4-20250514": "Claude Sonnet 4",
        "claude-3-5-sonnet-20241022": "Claude 3.5 Sonnet (Legacy)",
        "claude-3-5-haiku-20241022": "Claude 3.5 Haiku (Legacy)",
    }
    SUPPORTED_IMAGE_FORMATS = ("png", "jpeg", "jpg", "gif", "webp")
    MAX_IMAGE_SIZE = 20 * 1024 * 1024

    def _auth_headers(self, api_key: str) -> Dict[str, str]:
        return {"x-api-key": api_key} if api_key else {}

    def _extra_headers(self) -> Dict[str, str]:
        return {"anthropic-version": ANTHROPIC_API_VERSION}

    def _messages_payload(
        self, messages: Sequence[Mapping[str, Any]], options: Mapping[str, Any], model: str
    ) -> Dict[str, Any]:
        system, remaining = split_system(messages)
        payload: Dict[str, Any] = {
            "model": model,
            "messages": remaining,
            "max_tokens": accessor.get_int(options, "max_tokens", DEFAULT_MAX_TOKENS),
        }
        if system is not None:
            payload["system"] = system
        if options.get("temperature") is not None:
            payload["temperature"] = accessor.get_float(options, "temperature")
        if options.get("top_p") is not None:
            payload["top_p"] = accessor.get_float(options, "top_p")
        if options.get("stop_sequences") is not None:
            payload["stop_sequences"] = options["stop_sequences"]
        return payload

    def _to_completion(self, data: Any, model: str) -> CompletionResponse:
        body = accessor.as_array(data)
        content, tool_calls = parse_content(body)
        prompt_tokens, completion_tokens = usage_counts(body)
        return self._build_completion_response(
            content=content,
            model=accessor.get_string(body, "model") or model,
            usage=self._build_usage(prompt_tokens, completion_tokens),
            finish_reason=map_stop_reason(accessor.get_string(body, "stop_reason", "end_turn")),
            tool_calls=tool_calls,
        )

    def chat_completion(
        self, messages: Sequence[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> CompletionResponse:
        opts = dict(options or {})
        model = self._model_from(opts)
        data = self._send_request(MESSAGES_ENDPOINT, self._messages_payload(messages, opts, model), model=model)
        return self._to_completion(data, model)

    def chat_completion_with_tools(
        self,
        messages: Sequence[Mapping[str, Any]],
        tools: Sequence[Mapping[str, Any]],
        options: Optional[Mapping[str, Any]] = None,
    ) -> CompletionResponse:
        opts = dict(options or {})
        model = self._model_from(opts)
        payload = self._messages_payload(messages, opts, model)
        payload["tools"] = convert_tools(tools)
        if opts.get("tool_choice") is not None:
            payload["tool_choice"] = map_tool_choice(opts["tool_choice"])
        data = self._send_request(MESSAGES_ENDPOINT, payload, model=model)
        return self._to_completion(data, model)

    def analyze_image(
        self, content: List[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> VisionResponse:
        opts = dict(options or {})
        model = self._model_from(opts)
        payload: Dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": convert_vision_content(content)}],
            "max_tokens": accessor.get_int(opts, "max_tokens", DEFAULT_MAX_TOKENS),
        }
        system_prompt = accessor.get_nullable_string(opts, "system_prompt")
        if system_prompt is not None:
            payload["system"] = system_prompt
        body = accessor.as_array(self._send_request(MESSAGES_ENDPOINT, payload, model=model))
        description, _ = parse_content(body)
        prompt_tokens, completion_tokens = usage_counts(body)
        return self._build_vision_response(
            description=description,
            model=accessor.get_string(body, "model") or model,
            usage=self._build_usage(prompt_tokens, completion_tokens),
        )

    def stream_chat_completion(
        self, messages: Sequence[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> DeltaStream:
        opts = dict(options or {})
        model = self._model_from(opts)
        payload = self._messages_payload(messages, opts, model)
        payload["stream"] = True
        decoder = SSEDecoder(
            extract_stream_delta,
            is_final=is_message_stop,
            on_malformed=self._log_malformed_chunk(model),
        )

        def _decode(response: HttpResponse, on_close) -> DeltaStream:
            return decoder.decode(response.iter_chunks(), on_close)

        return self._send_stream(MESSAGES_ENDPOINT, payload, _decode, model=model)

    def get_supported_image_formats(self) -> List[str]:
        return list(self.SUPPORTED_IMAGE_FORMATS)

    def get_max_image_size(self) -> int:
        return self.MAX_IMAGE_SIZE


__all__ = ["AnthropicAdapter", "MESSAGES_ENDPOINT"]
