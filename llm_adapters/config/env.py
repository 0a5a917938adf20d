"""llm_adapters.config.env
======================

Where each adapter type looks for its API key in the process environment.

Every adapter type maps to an ordered tuple of variable names; the first
non-empty value that does not look like a placeholder wins. Ollama has no
entry because the local daemon needs no key.

Failure Modes
-------------
Lookups never raise. Unknown adapter types and unset variables resolve to
``(None, None)``.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

API_KEY_VARIABLES: Dict[str, Tuple[str, ...]] = {
    "openai": ("OPENAI_API_KEY",),
    "anthropic": ("ANTHROPIC_API_KEY", "CLAUDE_API_KEY"),
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "openrouter": ("OPENROUTER_API_KEY",),
    "groq": ("GROQ_API_KEY",),
    "mistral": ("MISTRAL_API_KEY",),
    "azure_openai": ("AZURE_OPENAI_API_KEY",),
}
# The Anthropic adapter identifies itself as "claude".
API_KEY_VARIABLES["claude"] = API_KEY_VARIABLES["anthropic"]

_PLACEHOLDER_MARKERS = ("placeholder", "changeme", "example")


def is_placeholder(value: Optional[str]) -> bool:
    """True for sample credentials: ``test_...`` or containing placeholder/changeme/example."""
    if value is None:
        return False
    text = str(value).strip().lower()
    return text.startswith("test_") or any(marker in text for marker in _PLACEHOLDER_MARKERS)


def get_env_var_candidates(provider: str) -> Iterable[str]:
    """Variable names consulted for ``provider``, in lookup order."""
    return API_KEY_VARIABLES.get((provider or "").strip().lower(), ())


def resolve_provider_key(provider: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, variable_name)`` of the first usable key, else ``(None, None)``."""
    for name in get_env_var_candidates(provider):
        value = os.environ.get(name)
        if value and not is_placeholder(value):
            return value, name
    return None, None


__all__ = [
    "API_KEY_VARIABLES",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_provider_key",
]
