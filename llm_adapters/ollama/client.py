"""Ollama adapter for a local (or LAN) daemon.

Purpose:
- Chat, embeddings and NDJSON streaming against the Ollama REST API.

Availability:
- No credential is required. The adapter is available as soon as a base URL
  is configured (``http://localhost:11434`` by default).

Model listing:
- ``get_available_models()`` asks ``api/tags`` and falls back to a curated
  list when the daemon cannot be reached (logged at warning level).
- ``test_connection()`` always performs the request and lets failures
  propagate.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..base import accessor
from ..base.adapter import FEATURE_CHAT, FEATURE_COMPLETION, FEATURE_EMBEDDINGS, FEATURE_STREAMING, BaseAdapter
from ..base.errors import ProviderError
from ..base.http import HttpResponse
from ..base.logging import LogContext, log_event
from ..base.models import CompletionResponse, EmbeddingResponse
from ..base.streaming import DeltaStream, NDJSONDecoder
from ..config.defaults import OLLAMA_DEFAULT_EMBEDDING_MODEL, OLLAMA_DEFAULT_HOST, OLLAMA_DEFAULT_MODEL
from .helpers import build_options, extract_stream_delta, finish_reason, is_done, model_names

CHAT_ENDPOINT = "api/chat"
EMBEDDINGS_ENDPOINT = "api/embeddings"
TAGS_ENDPOINT = "api/tags"


class OllamaAdapter(BaseAdapter):
    IDENTIFIER = "ollama"
    NAME = "Ollama"
    DEFAULT_BASE_URL = OLLAMA_DEFAULT_HOST
    DEFAULT_MODEL = OLLAMA_DEFAULT_MODEL
    SUPPORTED_FEATURES = frozenset({FEATURE_CHAT, FEATURE_COMPLETION, FEATURE_EMBEDDINGS, FEATURE_STREAMING})
    REQUIRES_API_KEY = False
    STATIC_MODELS = {
        "llama3.2": "Llama 3.2",
        "llama3.2:70b": "Llama 3.2 70B",
        "mistral": "Mistral",
        "codellama": "Code Llama",
        "phi3": "Phi-3",
    }

    def _chat_payload(
        self, messages: Sequence[Mapping[str, Any]], options: Mapping[str, Any], model: str, stream: bool
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": model,
            "messages": [dict(m) for m in messages],
            "stream": stream,
        }
        if extra := build_options(options, streaming=stream):
            payload["options"] = extra
        return payload

    def chat_completion(
        self, messages: Sequence[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> CompletionResponse:
        opts = dict(options or {})
        model = self._model_from(opts)
        data = accessor.as_array(
            self._send_request(CHAT_ENDPOINT, self._chat_payload(messages, opts, model, False), model=model)
        )
        return self._build_completion_response(
            content=accessor.get_nested_string(data, "message.content"),
            model=accessor.get_string(data, "model") or model,
            usage=self._build_usage(
                accessor.get_int(data, "prompt_eval_count"), accessor.get_int(data, "eval_count")
            ),
            finish_reason=finish_reason(data),
        )

    def embeddings(
        self, inputs: Union[str, Sequence[str]], options: Optional[Mapping[str, Any]] = None
    ) -> EmbeddingResponse:
        opts = dict(options or {})
        model = accessor.get_string(opts, "model") or OLLAMA_DEFAULT_EMBEDDING_MODEL
        vectors: List[List[float]] = []
        prompt_tokens = 0
        for text in self._as_input_list(inputs):
            data = accessor.as_array(
                self._send_request(EMBEDDINGS_ENDPOINT, {"model": model, "prompt": text}, model=model)
            )
            vectors.append([accessor.as_float(v) for v in accessor.get_list(data, "embedding")])
            prompt_tokens += accessor.get_int(data, "prompt_eval_count")
        return self._build_embedding_response(
            embeddings=vectors, model=model, usage=self._build_usage(prompt_tokens, 0)
        )

    def stream_chat_completion(
        self, messages: Sequence[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> DeltaStream:
        opts = dict(options or {})
        model = self._model_from(opts)
        decoder = NDJSONDecoder(extract_stream_delta, is_done=is_done, on_malformed=self._log_malformed_chunk(model))

        def _decode(response: HttpResponse, on_close) -> DeltaStream:
            return decoder.decode(response.iter_chunks(), on_close)

        return self._send_stream(CHAT_ENDPOINT, self._chat_payload(messages, opts, model, True), _decode, model=model)

    def _reported_usage(self, body: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(body, Mapping) or "prompt_eval_count" not in body and "eval_count" not in body:
            return None
        return {
            "prompt_eval_count": accessor.get_int(body, "prompt_eval_count"),
            "eval_count": accessor.get_int(body, "eval_count"),
        }

    def _build_headers(self, api_key: str, stream: bool = False) -> Dict[str, str]:
        headers = super()._build_headers(api_key, stream=False)
        if stream:
            headers["Accept"] = "application/x-ndjson"
        return headers

    def list_local_models(self) -> Dict[str, str]:
        """Models installed on the daemon (``api/tags``); errors propagate."""
        return model_names(accessor.as_array(self._send_request(TAGS_ENDPOINT, method="GET")))

    def get_available_models(self) -> Dict[str, str]:
        try:
            return self.list_local_models()
        except ProviderError as exc:
            log_event(
                self._logger,
                "models.fallback",
                LogContext(provider=self.IDENTIFIER),
                level=logging.WARNING,
                error_code=exc.code.value,
                message=exc.message,
            )
            return dict(self.STATIC_MODELS)

    def test_connection(self) -> Dict[str, Any]:
        models = self.list_local_models()
        return {
            "success": True,
            "message": f"Connection successful. Found {len(models)} models.",
            "models": models,
        }


__all__ = ["OllamaAdapter"]
