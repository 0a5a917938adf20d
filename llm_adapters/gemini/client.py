"""Google Gemini adapter.

Purpose:
- Map chat, tool calling, embeddings, vision and streaming onto the
  Generative Language REST API (``models/<model>:generateContent`` family).

Notes:
- The API key travels as the ``key`` query parameter, never as a header.
- Embeddings are requested one input at a time (``embedContent``), in input
  order; usage is a ``len(text) // 4`` estimate because the endpoint reports
  none.
- Streaming uses ``streamGenerateContent?alt=sse`` and the shared SSE decoder.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from urllib.parse import quote

from ..base import accessor
from ..base.adapter import (
    FEATURE_CHAT,
    FEATURE_COMPLETION,
    FEATURE_EMBEDDINGS,
    FEATURE_STREAMING,
    FEATURE_TOOLS,
    FEATURE_VISION,
    BaseAdapter,
)
from ..base.http import HttpResponse
from ..base.models import CompletionResponse, EmbeddingResponse, VisionResponse
from ..base.streaming import DeltaStream, SSEDecoder
from ..config.defaults import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    GEMINI_DEFAULT_BASE_URL,
    GEMINI_DEFAULT_EMBEDDING_MODEL,
    GEMINI_DEFAULT_MODEL,
)
from .helpers import (
    estimate_tokens,
    extract_stream_delta,
    first_candidate,
    first_text,
    function_declarations,
    generation_config,
    map_finish_reason,
    parse_parts,
    to_contents,
    usage_counts,
    vision_parts,
)


def _model_endpoint(model: str, action: str) -> str:
    return f"models/{quote(model, safe='-._/')}:{action}"


class GeminiAdapter(BaseAdapter):
    IDENTIFIER = "gemini"
    NAME = "Google Gemini"
    DEFAULT_BASE_URL = GEMINI_DEFAULT_BASE_URL
    DEFAULT_MODEL = GEMINI_DEFAULT_MODEL
    SUPPORTED_FEATURES = frozenset(
        {FEATURE_CHAT, FEATURE_COMPLETION, FEATURE_EMBEDDINGS, FEATURE_VISION, FEATURE_STREAMING, FEATURE_TOOLS}
    )
    STATIC_MODELS = {
        "gemini-3-flash-preview": "Gemini 3 Flash (Latest)",
        "gemini-3-pro": "Gemini 3 Pro (Most Capable)",
        "gemini-2.5-flash": "Gemini 2.5 Flash",
        "gemini-2.5-pro": "Gemini 2.5 Pro",
        "gemini-2.5-flash-lite": "Gemini 2.5 Flash Lite (Fast)",
        "gemini-2.0-flash": "Gemini 2.0 Flash (Legacy)",
    }
    SUPPORTED_IMAGE_FORMATS = ("png", "jpeg", "jpg", "gif", "webp", "heic", "heif")
    MAX_IMAGE_SIZE = 20 * 1024 * 1024

    def _auth_headers(self, api_key: str) -> Dict[str, str]:
        return {}

    def _auth_query(self, api_key: str) -> Dict[str, str]:
        return {"key": api_key} if api_key else {}

    def _generate_payload(
        self, messages: Sequence[Mapping[str, Any]], options: Mapping[str, Any]
    ) -> Dict[str, Any]:
        contents, system = to_contents(messages)
        payload: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": generation_config(options, DEFAULT_TEMPERATURE, DEFAULT_MAX_TOKENS),
        }
        if system is not None:
            payload["systemInstruction"] = system
        return payload

    def _to_completion(self, data: Any, model: str) -> CompletionResponse:
        body = accessor.as_array(data)
        candidate = first_candidate(body)
        content, tool_calls = parse_parts(candidate)
        prompt_tokens, completion_tokens = usage_counts(body)
        return self._build_completion_response(
            content=content,
            model=accessor.get_string(body, "modelVersion") or model,
            usage=self._build_usage(prompt_tokens, completion_tokens),
            finish_reason=map_finish_reason(accessor.get_string(candidate, "finishReason", "STOP")),
            tool_calls=tool_calls,
        )

    def chat_completion(
        self, messages: Sequence[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> CompletionResponse:
        opts = dict(options or {})
        model = self._model_from(opts)
        data = self._send_request(
            _model_endpoint(model, "generateContent"), self._generate_payload(messages, opts), model=model
        )
        return self._to_completion(data, model)

    def chat_completion_with_tools(
        self,
        messages: Sequence[Mapping[str, Any]],
        tools: Sequence[Mapping[str, Any]],
        options: Optional[Mapping[str, Any]] = None,
    ) -> CompletionResponse:
        opts = dict(options or {})
        model = self._model_from(opts)
        payload = self._generate_payload(messages, opts)
        payload["tools"] = [function_declarations(tools)]
        data = self._send_request(_model_endpoint(model, "generateContent"), payload, model=model)
        return self._to_completion(data, model)

    def embeddings(
        self, inputs: Union[str, Sequence[str]], options: Optional[Mapping[str, Any]] = None
    ) -> EmbeddingResponse:
        opts = dict(options or {})
        model = accessor.get_string(opts, "model") or GEMINI_DEFAULT_EMBEDDING_MODEL
        vectors: List[List[float]] = []
        estimated = 0
        for text in self._as_input_list(inputs):
            payload = {"model": f"models/{model}", "content": {"parts": [{"text": text}]}}
            data = accessor.as_array(
                self._send_request(_model_endpoint(model, "embedContent"), payload, model=model)
            )
            values = accessor.get_nested_array(data, "embedding.values", [])
            vectors.append([accessor.as_float(v) for v in accessor.as_list(values)])
            estimated += estimate_tokens(text)
        return self._build_embedding_response(
            embeddings=vectors, model=model, usage=self._build_usage(estimated, 0)
        )

    def analyze_image(
        self, content: List[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> VisionResponse:
        opts = dict(options or {})
        model = self._model_from(opts)
        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": vision_parts(content)}],
            "generationConfig": {"maxOutputTokens": accessor.get_int(opts, "max_tokens", DEFAULT_MAX_TOKENS)},
        }
        system_prompt = accessor.get_nullable_string(opts, "system_prompt")
        if system_prompt is not None:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}
        body = accessor.as_array(
            self._send_request(_model_endpoint(model, "generateContent"), payload, model=model)
        )
        prompt_tokens, completion_tokens = usage_counts(body)
        return self._build_vision_response(
            description=first_text(first_candidate(body)),
            model=accessor.get_string(body, "modelVersion") or model,
            usage=self._build_usage(prompt_tokens, completion_tokens),
        )

    def stream_chat_completion(
        self, messages: Sequence[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> DeltaStream:
        opts = dict(options or {})
        model = self._model_from(opts)
        decoder = SSEDecoder(extract_stream_delta, on_malformed=self._log_malformed_chunk(model))

        def _decode(response: HttpResponse, on_close) -> DeltaStream:
            return decoder.decode(response.iter_chunks(), on_close)

        return self._send_stream(
            _model_endpoint(model, "streamGenerateContent") + "?alt=sse",
            self._generate_payload(messages, opts),
            _decode,
            model=model,
        )

    def get_supported_image_formats(self) -> List[str]:
        return list(self.SUPPORTED_IMAGE_FORMATS)

    def get_max_image_size(self) -> int:
        return self.MAX_IMAGE_SIZE


__all__ = ["GeminiAdapter"]
