"""Mistral AI adapter (OpenAI-compatible).

Differences from the OpenAI dialect: the seed option is sent as
``random_seed`` and ``safe_prompt`` toggles Mistral's guardrail prompt.
Image analysis is not offered.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ..base import accessor
from ..base.adapter import FEATURE_CHAT, FEATURE_COMPLETION, FEATURE_EMBEDDINGS, FEATURE_STREAMING, FEATURE_TOOLS
from ..base.openai_style import OpenAIStyleAdapter
from ..config.defaults import (
    MISTRAL_CODE_MODEL,
    MISTRAL_DEFAULT_BASE_URL,
    MISTRAL_DEFAULT_EMBEDDING_MODEL,
    MISTRAL_DEFAULT_MODEL,
    MISTRAL_SMALL_MODEL,
)


class MistralAdapter(OpenAIStyleAdapter):
    IDENTIFIER = "mistral"
    NAME = "Mistral AI"
    DEFAULT_BASE_URL = MISTRAL_DEFAULT_BASE_URL
    DEFAULT_MODEL = MISTRAL_DEFAULT_MODEL
    DEFAULT_EMBEDDING_MODEL = MISTRAL_DEFAULT_EMBEDDING_MODEL
    SUPPORTED_FEATURES = frozenset(
        {FEATURE_CHAT, FEATURE_COMPLETION, FEATURE_EMBEDDINGS, FEATURE_STREAMING, FEATURE_TOOLS}
    )
    STATIC_MODELS = {
        "mistral-large-latest": "Mistral Large (Latest)",
        "mistral-large-2411": "Mistral Large 2411",
        "mistral-medium-latest": "Mistral Medium",
        "mistral-small-latest": "Mistral Small (Latest)",
        "open-mistral-nemo": "Mistral Nemo (Open)",
        "codestral-latest": "Codestral (Code)",
        "ministral-8b-latest": "Ministral 8B",
        "ministral-3b-latest": "Ministral 3B",
    }

    def _vendor_payload(self, options: Mapping[str, Any]) -> Dict[str, Any]:
        extra: Dict[str, Any] = {}
        if options.get("seed") is not None:
            extra["random_seed"] = accessor.get_int(options, "seed")
        if options.get("safe_prompt") is not None:
            extra["safe_prompt"] = accessor.get_bool(options, "safe_prompt")
        return extra

    @staticmethod
    def get_code_model() -> str:
        return MISTRAL_CODE_MODEL

    @staticmethod
    def get_small_model() -> str:
        return MISTRAL_SMALL_MODEL


__all__ = ["MistralAdapter"]
