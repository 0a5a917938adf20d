"""OpenAI adapter built on :class:`OpenAIStyleAdapter`.

Also serves Azure OpenAI deployments and arbitrary OpenAI-compatible
("custom") endpoints: the registry constructs this class with the record's
base URL. The optional ``organizationId`` option is sent as the
``OpenAI-Organization`` header.
"""

from __future__ import annotations

from typing import Dict

from ..base.adapter import (
    FEATURE_CHAT,
    FEATURE_COMPLETION,
    FEATURE_EMBEDDINGS,
    FEATURE_STREAMING,
    FEATURE_TOOLS,
    FEATURE_VISION,
)
from ..base.openai_style import OpenAIStyleAdapter
from ..config.defaults import OPENAI_DEFAULT_BASE_URL, OPENAI_DEFAULT_EMBEDDING_MODEL, OPENAI_DEFAULT_MODEL


class OpenAIAdapter(OpenAIStyleAdapter):
    IDENTIFIER = "openai"
    NAME = "OpenAI"
    DEFAULT_BASE_URL = OPENAI_DEFAULT_BASE_URL
    DEFAULT_MODEL = OPENAI_DEFAULT_MODEL
    DEFAULT_EMBEDDING_MODEL = OPENAI_DEFAULT_EMBEDDING_MODEL
    SUPPORTED_FEATURES = frozenset(
        {FEATURE_CHAT, FEATURE_COMPLETION, FEATURE_EMBEDDINGS, FEATURE_VISION, FEATURE_STREAMING, FEATURE_TOOLS}
    )
    STATIC_MODELS = {
        "gpt-5.2": "GPT-5.2 Thinking (Current)",
        "gpt-5.2-pro": "GPT-5.2 Pro (Most Capable)",
        "gpt-5.2-instant": "GPT-5.2 Instant (Fast)",
        "o3": "O3 (Advanced Reasoning)",
        "o4-mini": "O4 Mini (Reasoning)",
        "gpt-5": "GPT-5 (Legacy)",
        "gpt-4.1": "GPT-4.1 (Legacy)",
    }

    def _extra_headers(self) -> Dict[str, str]:
        if self.config.organization_id:
            return {"OpenAI-Organization": self.config.organization_id}
        return {}


__all__ = ["OpenAIAdapter"]
