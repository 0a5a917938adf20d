"""Per-adapter-type ``configure()`` options assembled from layered sources.

``get_provider_config("openrouter")`` returns a flat options map. Sources
are applied in this order, each overriding the previous one:

1. Built-in defaults (model and base URL)
2. The section for the adapter type in the file named by
   ``PROVIDERS_CONFIG_FILE`` (YAML or JSON)
3. Environment variables
4. The key repository, only while no ``apiKey``/``apiKeyIdentifier`` is set
5. Non-``None`` overrides passed by the caller

Environment Variable Conventions
--------------------------------
<PROVIDER>_MODEL, <PROVIDER>_API_KEY, <PROVIDER>_BASE_URL, <PROVIDER>_TIMEOUT,
<PROVIDER>_MAX_RETRIES, e.g. OPENROUTER_BASE_URL.

External Config File
--------------------
The file is parsed with PyYAML (a JSON document is valid YAML). Sections are
keyed by vendor; both snake_case and option-style keys are accepted::

    openrouter:
      model: openrouter/auto
      routingStrategy: cost_optimized
      fallbackModels: "openai/gpt-5.2, google/gemini-3-flash"
    ollama:
      base_url: http://gpu-box:11434

Public API
----------
* get_provider_config(provider: str, overrides: dict | None = None) -> dict
* get_model(provider: str) -> str | None
* reset_config_cache() -> None
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .defaults import (
    ANTHROPIC_DEFAULT_BASE_URL,
    ANTHROPIC_DEFAULT_MODEL,
    GEMINI_DEFAULT_BASE_URL,
    GEMINI_DEFAULT_MODEL,
    GROQ_DEFAULT_BASE_URL,
    GROQ_DEFAULT_MODEL,
    MISTRAL_DEFAULT_BASE_URL,
    MISTRAL_DEFAULT_MODEL,
    OLLAMA_DEFAULT_HOST,
    OLLAMA_DEFAULT_MODEL,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_MODEL,
    OPENROUTER_DEFAULT_BASE_URL,
    OPENROUTER_DEFAULT_MODEL,
)

# -------------------- Defaults --------------------

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "openai": {"defaultModel": OPENAI_DEFAULT_MODEL, "baseUrl": OPENAI_DEFAULT_BASE_URL},
    "anthropic": {"defaultModel": ANTHROPIC_DEFAULT_MODEL, "baseUrl": ANTHROPIC_DEFAULT_BASE_URL},
    "gemini": {"defaultModel": GEMINI_DEFAULT_MODEL, "baseUrl": GEMINI_DEFAULT_BASE_URL},
    "ollama": {"defaultModel": OLLAMA_DEFAULT_MODEL, "baseUrl": OLLAMA_DEFAULT_HOST},
    "openrouter": {"defaultModel": OPENROUTER_DEFAULT_MODEL, "baseUrl": OPENROUTER_DEFAULT_BASE_URL},
    "groq": {"defaultModel": GROQ_DEFAULT_MODEL, "baseUrl": GROQ_DEFAULT_BASE_URL},
    "mistral": {"defaultModel": MISTRAL_DEFAULT_MODEL, "baseUrl": MISTRAL_DEFAULT_BASE_URL},
}

# Environment suffix → option key
ENV_FIELD_MAP = {
    "MODEL": "defaultModel",
    "API_KEY": "apiKey",  # pragma: allowlist secret - env suffix name, not a secret
    "BASE_URL": "baseUrl",
    "TIMEOUT": "timeout",
    "MAX_RETRIES": "maxRetries",
}

# File keys accepted in snake_case and mapped onto option keys
_FILE_KEY_ALIASES = {
    "model": "defaultModel",
    "default_model": "defaultModel",
    "api_key": "apiKey",  # pragma: allowlist secret - key name
    "api_key_identifier": "apiKeyIdentifier",
    "base_url": "baseUrl",
    "host": "baseUrl",
    "max_retries": "maxRetries",
    "organization_id": "organizationId",
    "site_url": "siteUrl",
    "app_name": "appName",
    "routing_strategy": "routingStrategy",
    "auto_fallback": "autoFallback",
    "fallback_models": "fallbackModels",
}

_FILE_CACHE: Optional[Dict[str, Any]] = None


def _canonical(name: str) -> str:
    name = (name or "").lower().strip()
    return "anthropic" if name == "claude" else name


def _load_external_config() -> Dict[str, Any]:
    """Load and cache the PROVIDERS_CONFIG_FILE document (empty when absent or invalid)."""
    global _FILE_CACHE  # noqa: PLW0603 - documented module cache
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv("PROVIDERS_CONFIG_FILE")
    data: Any = {}
    if path and Path(path).is_file():
        try:
            data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        except yaml.YAMLError:
            data = {}
    _FILE_CACHE = data if isinstance(data, dict) else {}
    return _FILE_CACHE


def reset_config_cache() -> None:
    """Forget the cached external config file (tests and reloads)."""
    global _FILE_CACHE  # noqa: PLW0603
    _FILE_CACHE = None


def _normalize_file_section(section: Dict[str, Any]) -> Dict[str, Any]:
    return {_FILE_KEY_ALIASES.get(k, k): v for k, v in section.items()}


def _env_overrides(provider: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = provider.upper()
    for suffix, option in ENV_FIELD_MAP.items():
        val = os.getenv(f"{prefix}_{suffix}")
        if val is not None:
            out[option] = val
    return out


def get_provider_config(provider: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configure() options for a vendor.

    Merge order (later wins): defaults -> external config -> env vars -> key repo -> overrides
    """
    name = _canonical(provider)
    cfg: Dict[str, Any] = dict(DEFAULTS.get(name, {}))

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= _normalize_file_section(file_cfg)

    cfg |= _env_overrides(name)

    if not cfg.get("apiKey") and not cfg.get("apiKeyIdentifier"):
        # Local import: the keys repository itself reads config.env
        from ..base.repositories.keys import KeysRepository

        if key := KeysRepository().get_api_key(name):
            cfg["apiKey"] = key

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}
    return cfg


def get_model(provider: str) -> Optional[str]:
    return get_provider_config(provider).get("defaultModel")


__all__ = [
    "get_provider_config",
    "get_model",
    "reset_config_cache",
    "DEFAULTS",
]
