"""OpenRouter adapter: one key, many upstream vendors.

Purpose:
    OpenRouter speaks the OpenAI ``chat/completions`` dialect, so requests and
    responses reuse :class:`OpenAIStyleAdapter`. What is specific here is
    model routing (which upstream model serves a call) and fallback, both
    delegated to :class:`llm_adapters.base.routing.RoutingEngine`.

Vendor options (``configure()``):
    - ``siteUrl`` / ``appName``: attribution headers ``HTTP-Referer`` and
      ``X-Title`` (app name defaults to ``"LLM Adapters"``).
    - ``routingStrategy``: cost_optimized | performance | balanced | explicit.
    - ``autoFallback``: adds ``route: fallback`` payload hints and retries
      eligible failures on ``fallbackModels`` (comma list) in order.
    - ``transforms``: forwarded verbatim (e.g. ``["middle-out"]``).

Failure modes:
    - 4xx statuses are rewritten to OpenRouter-specific messages (invalid key,
      insufficient credits, rate limit, ...); they never trigger fallback.
    - A failing catalog fetch never breaks a call: routing falls back to the
      configured default model.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..base import accessor
from ..base.adapter import (
    FEATURE_CHAT,
    FEATURE_COMPLETION,
    FEATURE_EMBEDDINGS,
    FEATURE_STREAMING,
    FEATURE_TOOLS,
    FEATURE_VISION,
)
from ..base.models import CompletionResponse, ModelDescriptor
from ..base.openai_style import OpenAIStyleAdapter
from ..base.routing import RoutingEngine
from ..config.defaults import (
    OPENROUTER_DEFAULT_APP_NAME,
    OPENROUTER_DEFAULT_BASE_URL,
    OPENROUTER_DEFAULT_EMBEDDING_MODEL,
    OPENROUTER_DEFAULT_MODEL,
)
from .helpers import parse_catalog, parse_credits, rejection_message, response_metadata


class OpenRouterAdapter(OpenAIStyleAdapter):
    IDENTIFIER = "openrouter"
    NAME = "OpenRouter"
    DEFAULT_BASE_URL = OPENROUTER_DEFAULT_BASE_URL
    DEFAULT_MODEL = OPENROUTER_DEFAULT_MODEL
    DEFAULT_EMBEDDING_MODEL = OPENROUTER_DEFAULT_EMBEDDING_MODEL
    SUPPORTED_FEATURES = frozenset(
        {FEATURE_CHAT, FEATURE_COMPLETION, FEATURE_EMBEDDINGS, FEATURE_VISION, FEATURE_STREAMING, FEATURE_TOOLS}
    )
    CREDITS_ENDPOINT = "auth/key"
    STATIC_MODELS = {
        "anthropic/claude-sonnet-4-5": "Claude Sonnet 4.5 (via OpenRouter)",
        "anthropic/claude-opus-4-1": "Claude Opus 4.1 (via OpenRouter)",
        "openai/gpt-5.2": "GPT-5.2 (via OpenRouter)",
        "openai/gpt-5.2-instant": "GPT-5.2 Instant (via OpenRouter)",
        "google/gemini-3-flash-preview": "Gemini 3 Flash Preview (via OpenRouter)",
        "google/gemini-2.5-pro": "Gemini 2.5 Pro (via OpenRouter)",
        "meta-llama/llama-3.3-70b-instruct": "Llama 3.3 70B Instruct (via OpenRouter)",
        "mistralai/mistral-large": "Mistral Large (via OpenRouter)",
        "deepseek/deepseek-chat": "DeepSeek Chat (via OpenRouter)",
    }

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def _configure_vendor(self, options: Dict[str, Any]) -> None:
        self.site_url = accessor.get_string(options, "siteUrl")
        self.app_name = accessor.get_string(options, "appName") or OPENROUTER_DEFAULT_APP_NAME
        self.transforms = accessor.as_list(options.get("transforms"))
        strategy = options.get("routingStrategy")
        auto_fallback = options.get("autoFallback", True)
        fallback_models = options.get("fallbackModels", ())
        routing: Optional[RoutingEngine] = getattr(self, "_routing", None)
        if routing is None:
            self._routing = RoutingEngine(
                self._fetch_catalog,
                self.get_default_model(),
                strategy,
                auto_fallback,
                fallback_models,
                provider=self.IDENTIFIER,
                logger=self._logger,
            )
        else:
            routing.configure(self.get_default_model(), strategy, auto_fallback, fallback_models)

    @property
    def routing(self) -> RoutingEngine:
        return self._routing

    def _extra_headers(self) -> Dict[str, str]:
        headers = {"X-Title": self.app_name}
        if self.site_url:
            headers["HTTP-Referer"] = self.site_url
        return headers

    def _rejected_message(self, status: int, message: str) -> str:
        return rejection_message(status, message)

    # ------------------------------------------------------------------
    # Routing hooks
    # ------------------------------------------------------------------
    def _model_from(self, options: Optional[Mapping[str, Any]]) -> str:
        return self._routing.select(options)

    def _base_payload(
        self, messages: Sequence[Mapping[str, Any]], options: Mapping[str, Any], model: str
    ) -> Dict[str, Any]:
        payload = super()._base_payload(messages, options, model)
        payload.update(self._routing.payload_hints(model))
        if self.transforms:
            payload["transforms"] = list(self.transforms)
        return payload

    def _vision_model(self, options: Mapping[str, Any]) -> str:
        return accessor.get_string(options, "model") or self._routing.select_vision_model()

    def _vision_payload(self, options: Mapping[str, Any]) -> Dict[str, Any]:
        return {"route": "fallback"} if self._routing.auto_fallback else {}

    def _completion_metadata(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        meta = super()._completion_metadata(data)
        meta.update(response_metadata(data))
        return meta

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------
    def chat_completion(
        self, messages: Sequence[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> CompletionResponse:
        opts = dict(options or {})
        primary = self._model_from(opts)
        return self._routing.run_with_fallback(primary, lambda model: self._complete_chat(messages, opts, model))

    def chat_completion_with_tools(
        self,
        messages: Sequence[Mapping[str, Any]],
        tools: Sequence[Mapping[str, Any]],
        options: Optional[Mapping[str, Any]] = None,
    ) -> CompletionResponse:
        opts = dict(options or {})
        opts.setdefault("function_calling", True)
        primary = self._model_from(opts)
        return self._routing.run_with_fallback(
            primary, lambda model: self._complete_chat(messages, opts, model, tools)
        )

    # ------------------------------------------------------------------
    # Catalog & account
    # ------------------------------------------------------------------
    def _fetch_catalog(self) -> List[ModelDescriptor]:
        data = accessor.as_array(self._send_request(self.MODELS_ENDPOINT, method="GET"))
        return parse_catalog(data)

    def fetch_available_models(self, force_refresh: bool = False) -> Dict[str, ModelDescriptor]:
        """Routing catalog keyed by model id (cached unless ``force_refresh``)."""
        return {model.id: model for model in self._routing.catalog(force_refresh=force_refresh)}

    def get_credits(self) -> Dict[str, Any]:
        """Account balance, usage and rate limit for the configured key."""
        data = accessor.as_array(self._send_request(self.CREDITS_ENDPOINT, method="GET"))
        return parse_credits(data)


__all__ = ["OpenRouterAdapter"]
