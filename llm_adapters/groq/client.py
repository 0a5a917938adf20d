"""Groq adapter (OpenAI-compatible LPU inference).

Groq exposes no embeddings endpoint; ``embeddings()`` raises
``UnsupportedFeature``. ``seed`` is forwarded on chat requests and
``parallel_tool_calls`` on tool-calling requests.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ..base import accessor
from ..base.adapter import FEATURE_CHAT, FEATURE_COMPLETION, FEATURE_STREAMING, FEATURE_TOOLS
from ..base.openai_style import OpenAIStyleAdapter
from ..config.defaults import GROQ_DEFAULT_BASE_URL, GROQ_DEFAULT_MODEL, GROQ_FAST_MODEL, GROQ_VISION_MODEL


class GroqAdapter(OpenAIStyleAdapter):
    IDENTIFIER = "groq"
    NAME = "Groq"
    DEFAULT_BASE_URL = GROQ_DEFAULT_BASE_URL
    DEFAULT_MODEL = GROQ_DEFAULT_MODEL
    SUPPORTED_FEATURES = frozenset({FEATURE_CHAT, FEATURE_COMPLETION, FEATURE_STREAMING, FEATURE_TOOLS})
    STATIC_MODELS = {
        "llama-3.3-70b-versatile": "Llama 3.3 70B Versatile",
        "llama-3.3-70b-specdec": "Llama 3.3 70B SpecDec (Fast)",
        "llama-3.1-70b-versatile": "Llama 3.1 70B Versatile",
        "llama-3.1-8b-instant": "Llama 3.1 8B Instant (Ultra-Fast)",
        "llama-3.2-90b-vision-preview": "Llama 3.2 90B Vision (Preview)",
        "llama-3.2-11b-vision-preview": "Llama 3.2 11B Vision (Preview)",
        "mixtral-8x7b-32768": "Mixtral 8x7B (32K context)",
        "gemma2-9b-it": "Gemma 2 9B Instruct",
    }

    def _vendor_payload(self, options: Mapping[str, Any]) -> Dict[str, Any]:
        if options.get("seed") is None:
            return {}
        return {"seed": accessor.get_int(options, "seed")}

    def _tool_payload(self, options: Mapping[str, Any]) -> Dict[str, Any]:
        if options.get("parallel_tool_calls") is None:
            return {}
        return {"parallel_tool_calls": accessor.get_bool(options, "parallel_tool_calls")}

    @staticmethod
    def get_fast_model() -> str:
        return GROQ_FAST_MODEL

    @staticmethod
    def get_quality_model() -> str:
        return GROQ_DEFAULT_MODEL

    @staticmethod
    def get_vision_model() -> str:
        return GROQ_VISION_MODEL


__all__ = ["GroqAdapter"]
