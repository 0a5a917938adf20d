"""OpenAI-compatible adapter base.

Purpose:
    OpenAI, Groq, Mistral, OpenRouter, Azure OpenAI and "custom" endpoints all
    speak the ``chat/completions`` dialect. :class:`OpenAIStyleAdapter`
    implements that dialect once (chat, tool calling, embeddings, vision,
    SSE streaming, connection probe) so vendor subclasses only declare their
    constants and the handful of payload keys they add.

Response mapping:
    Pure functions at module level turn the decoded response maps into value
    objects; they never raise on missing or differently-typed fields (see
    ``base.accessor``).

Failure modes:
    - Capabilities absent from ``SUPPORTED_FEATURES`` raise
      ``UnsupportedFeature`` before any request is built.
    - Tool-call arguments that are not valid JSON objects decode to ``{}``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from . import accessor
from .adapter import (
    FEATURE_EMBEDDINGS,
    FEATURE_STREAMING,
    FEATURE_TOOLS,
    FEATURE_VISION,
    BaseAdapter,
)
from .errors import UnsupportedFeature
from .http import HttpResponse
from .models import CompletionResponse, EmbeddingResponse, FinishReason, ToolCall, UsageStatistics, VisionResponse
from .streaming import DeltaStream, SSEDecoder
from ..config.defaults import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE

# Optional request keys forwarded verbatim when present in call options.
PASSTHROUGH_OPTIONS = ("top_p", "frequency_penalty", "presence_penalty", "stop")


def extract_stream_delta(chunk: Any) -> str:
    """``choices[0].delta.content`` of one SSE chunk, or ``""``."""
    if not isinstance(chunk, Mapping):
        return ""
    return accessor.get_nested_string(chunk, "choices.0.delta.content", "")


def normalize_finish_reason(reason: Any) -> str:
    value = accessor.as_string(reason, "").strip().lower()
    if not value:
        return FinishReason.STOP
    if value == "function_call":
        return FinishReason.TOOL_CALLS
    return value


def decode_arguments(raw: Any) -> Dict[str, Any]:
    """Decode a tool-call argument string into a map; malformed → ``{}``."""
    if isinstance(raw, Mapping):
        return dict(raw)
    if not isinstance(raw, str) or not raw.strip():
        return {}
    try:
        decoded = json.loads(raw)
    except ValueError:
        return {}
    return decoded if isinstance(decoded, dict) else {}


def parse_tool_calls(message: Mapping[str, Any]) -> Optional[List[ToolCall]]:
    calls: List[ToolCall] = []
    for index, item in enumerate(accessor.get_list(message, "tool_calls")):
        entry = accessor.as_array(item)
        function = accessor.get_array(entry, "function")
        name = accessor.get_string(function, "name")
        if not name:
            continue
        calls.append(
            ToolCall(
                id=accessor.get_string(entry, "id") or f"call_{index}",
                function_name=name,
                arguments=decode_arguments(function.get("arguments") if isinstance(function, Mapping) else None),
                type=accessor.get_string(entry, "type", "function") or "function",
            )
        )
    return calls or None


def usage_from(data: Mapping[str, Any]) -> UsageStatistics:
    usage = accessor.get_array(data, "usage")
    return UsageStatistics.of(
        accessor.get_int(usage, "prompt_tokens"),
        accessor.get_int(usage, "completion_tokens"),
    )


def first_choice(data: Mapping[str, Any]) -> Dict[str, Any]:
    choices = accessor.get_list(data, "choices")
    return accessor.as_array(choices[0]) if choices else {}


class OpenAIStyleAdapter(BaseAdapter):
    """Shared implementation of the OpenAI ``chat/completions`` dialect."""

    CHAT_ENDPOINT = "chat/completions"
    EMBEDDINGS_ENDPOINT = "embeddings"
    MODELS_ENDPOINT = "models"
    DEFAULT_EMBEDDING_MODEL = ""
    DEFAULT_VISION_MODEL = ""
    SUPPORTED_IMAGE_FORMATS = ("png", "jpeg", "jpg", "gif", "webp")
    MAX_IMAGE_SIZE = 20 * 1024 * 1024

    # ------------------------------------------------------------------
    # Payload construction
    # ------------------------------------------------------------------
    def _base_payload(
        self, messages: Sequence[Mapping[str, Any]], options: Mapping[str, Any], model: str
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": model,
            "messages": [dict(m) for m in messages],
            "temperature": accessor.get_float(options, "temperature", DEFAULT_TEMPERATURE),
            "max_tokens": accessor.get_int(options, "max_tokens", DEFAULT_MAX_TOKENS),
        }
        for key in PASSTHROUGH_OPTIONS:
            if options.get(key) is not None:
                payload[key] = options[key]
        payload.update(self._vendor_payload(options))
        return payload

    def _vendor_payload(self, options: Mapping[str, Any]) -> Dict[str, Any]:
        """Vendor-specific request keys derived from call options."""
        return {}

    def _tool_payload(self, options: Mapping[str, Any]) -> Dict[str, Any]:
        """Extra keys sent only with tool-calling requests."""
        return {}

    def _ensure_feature(self, feature: str) -> None:
        if not self.supports_feature(feature):
            raise UnsupportedFeature(feature, self.IDENTIFIER)

    # ------------------------------------------------------------------
    # Response mapping
    # ------------------------------------------------------------------
    def _completion_metadata(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        meta: Dict[str, Any] = {}
        if response_id := accessor.get_nullable_string(data, "id"):
            meta["id"] = response_id
        return meta

    def _to_completion(self, data: Any, requested_model: str) -> CompletionResponse:
        body = accessor.as_array(data)
        choice = first_choice(body)
        message = accessor.get_array(choice, "message")
        return self._build_completion_response(
            content=accessor.get_string(message, "content"),
            model=accessor.get_string(body, "model") or requested_model,
            usage=usage_from(body),
            finish_reason=normalize_finish_reason(accessor.get_string(choice, "finish_reason")),
            tool_calls=parse_tool_calls(message),
            metadata=self._completion_metadata(body),
        )

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------
    def _complete_chat(
        self,
        messages: Sequence[Mapping[str, Any]],
        options: Mapping[str, Any],
        model: str,
        tools: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> CompletionResponse:
        """One chat request against one model (with tools when given)."""
        payload = self._base_payload(messages, options, model)
        if tools is not None:
            payload["tools"] = [dict(t) for t in tools]
            if options.get("tool_choice") is not None:
                payload["tool_choice"] = options["tool_choice"]
            payload.update(self._tool_payload(options))
        data = self._send_request(self.CHAT_ENDPOINT, payload, model=model)
        return self._to_completion(data, model)

    def chat_completion(
        self, messages: Sequence[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> CompletionResponse:
        opts = dict(options or {})
        return self._complete_chat(messages, opts, self._model_from(opts))

    def chat_completion_with_tools(
        self,
        messages: Sequence[Mapping[str, Any]],
        tools: Sequence[Mapping[str, Any]],
        options: Optional[Mapping[str, Any]] = None,
    ) -> CompletionResponse:
        self._ensure_feature(FEATURE_TOOLS)
        opts = dict(options or {})
        return self._complete_chat(messages, opts, self._model_from(opts), tools)

    def embeddings(
        self, inputs: Union[str, Sequence[str]], options: Optional[Mapping[str, Any]] = None
    ) -> EmbeddingResponse:
        self._ensure_feature(FEATURE_EMBEDDINGS)
        opts = dict(options or {})
        model = accessor.get_string(opts, "model") or self.DEFAULT_EMBEDDING_MODEL
        payload: Dict[str, Any] = {"model": model, "input": self._as_input_list(inputs)}
        if opts.get("dimensions") is not None:
            payload["dimensions"] = accessor.get_int(opts, "dimensions")
        data = accessor.as_array(self._send_request(self.EMBEDDINGS_ENDPOINT, payload, model=model))

        items = [accessor.as_array(item) for item in accessor.get_list(data, "data")]
        items.sort(key=lambda item: accessor.get_int(item, "index"))
        vectors = [[accessor.as_float(v) for v in accessor.get_list(item, "embedding")] for item in items]
        usage = accessor.get_array(data, "usage")
        return self._build_embedding_response(
            embeddings=vectors,
            model=accessor.get_string(data, "model") or model,
            usage=self._build_usage(accessor.get_int(usage, "prompt_tokens"), 0),
        )

    def analyze_image(
        self, content: List[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> VisionResponse:
        self._ensure_feature(FEATURE_VISION)
        opts = dict(options or {})
        model = self._vision_model(opts)
        messages: List[Dict[str, Any]] = []
        if system_prompt := accessor.get_string(opts, "system_prompt"):
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": [dict(part) for part in content]})
        payload: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "max_tokens": accessor.get_int(opts, "max_tokens", DEFAULT_MAX_TOKENS),
        }
        payload.update(self._vision_payload(opts))
        data = accessor.as_array(self._send_request(self.CHAT_ENDPOINT, payload, model=model))
        message = accessor.get_array(first_choice(data), "message")
        return self._build_vision_response(
            description=accessor.get_string(message, "content"),
            model=accessor.get_string(data, "model") or model,
            usage=usage_from(data),
            metadata=self._completion_metadata(data),
        )

    def _vision_payload(self, options: Mapping[str, Any]) -> Dict[str, Any]:
        return {}

    def _vision_model(self, options: Mapping[str, Any]) -> str:
        return accessor.get_string(options, "model") or self.DEFAULT_VISION_MODEL or self.get_default_model()

    def stream_chat_completion(
        self, messages: Sequence[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> DeltaStream:
        self._ensure_feature(FEATURE_STREAMING)
        opts = dict(options or {})
        model = self._model_from(opts)
        payload = self._base_payload(messages, opts, model)
        payload["stream"] = True
        decoder = SSEDecoder(extract_stream_delta, on_malformed=self._log_malformed_chunk(model))

        def _decode(response: HttpResponse, on_close) -> DeltaStream:
            return decoder.decode(response.iter_chunks(), on_close)

        return self._send_stream(self.CHAT_ENDPOINT, payload, _decode, model=model)

    def get_supported_image_formats(self) -> List[str]:
        return list(self.SUPPORTED_IMAGE_FORMATS) if self.supports_vision() else []

    def get_max_image_size(self) -> int:
        return self.MAX_IMAGE_SIZE if self.supports_vision() else 0

    def list_remote_models(self) -> Dict[str, str]:
        """Model ids reported by the vendor's ``models`` endpoint."""
        data = accessor.as_array(self._send_request(self.MODELS_ENDPOINT, method="GET"))
        listed: Dict[str, str] = {}
        for item in accessor.get_list(data, "data"):
            entry = accessor.as_array(item)
            model_id = accessor.get_string(entry, "id")
            if model_id:
                listed[model_id] = accessor.get_string(entry, "name") or model_id
        return listed

    def test_connection(self) -> Dict[str, Any]:
        models = self.list_remote_models()
        return {
            "success": True,
            "message": f"Connection successful. Found {len(models)} models.",
            "models": models,
        }


__all__ = [
    "OpenAIStyleAdapter",
    "extract_stream_delta",
    "normalize_finish_reason",
    "decode_arguments",
    "parse_tool_calls",
    "usage_from",
    "first_choice",
]
