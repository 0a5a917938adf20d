"""Adapter registry: adapter type → adapter class → configured instance.

Purpose
-------
Resolve an adapter type (``"openai"``, ``"ollama"``, ...) to an adapter class,
allow callers to register their own classes, and build configured adapters
from external provider records. Built-in classes are referenced by module
path and imported lazily with ``importlib`` so importing the registry does not
import every vendor package.

External dependencies
---------------------
- Standard library ``importlib`` for lazy imports.
- Pydantic DTOs (:class:`ProviderRecord`, :class:`ModelRecord`) as inputs.

Caching
-------
Instances built by :meth:`AdapterRegistry.create_adapter_from_provider` are
cached by the record's ``uid``. Entries are replaced, never mutated: a changed
record only takes effect after :meth:`AdapterRegistry.clear_cache`. Records
without a ``uid`` are never cached.

Failure modes
-------------
- Unknown adapter types never fail: a warning is logged and the
  OpenAI-compatible adapter is used.
- :meth:`AdapterRegistry.register_adapter` raises ``InvalidAdapterType`` for
  anything that is not a ``ProviderAdapter`` class.
- :meth:`AdapterRegistry.test_provider_connection` never raises.
"""

from __future__ import annotations

import logging
from enum import Enum
from importlib import import_module
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type, Union

from .errors import ConfigurationError, InvalidAdapterType, classify_exception
from .http import Transport
from .interfaces import ProviderAdapter
from .logging import LogContext, get_logger, log_event
from .dto import ModelRecord, ProviderRecord
from .repositories import SecretResolver
from ..config.defaults import (
    ANTHROPIC_DEFAULT_BASE_URL,
    GEMINI_DEFAULT_BASE_URL,
    GROQ_DEFAULT_BASE_URL,
    MISTRAL_DEFAULT_BASE_URL,
    OLLAMA_DEFAULT_HOST,
    OPENAI_DEFAULT_BASE_URL,
    OPENROUTER_DEFAULT_BASE_URL,
)


class AdapterType(str, Enum):
    """Built-in adapter types."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    OPENROUTER = "openrouter"
    MISTRAL = "mistral"
    GROQ = "groq"
    OLLAMA = "ollama"
    AZURE_OPENAI = "azure_openai"
    CUSTOM = "custom"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def default_endpoint(self) -> str:
        """Vendor API root; empty for deployments that always bring their own URL."""
        return _DEFAULT_ENDPOINTS.get(self, "")

    @property
    def requires_api_key(self) -> bool:
        return self is not AdapterType.OLLAMA

    @classmethod
    def parse(cls, value: Any) -> Optional["AdapterType"]:
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


_LABELS = {
    AdapterType.OPENAI: "OpenAI",
    AdapterType.ANTHROPIC: "Anthropic (Claude)",
    AdapterType.GEMINI: "Google Gemini",
    AdapterType.OPENROUTER: "OpenRouter",
    AdapterType.MISTRAL: "Mistral AI",
    AdapterType.GROQ: "Groq",
    AdapterType.OLLAMA: "Ollama (Local)",
    AdapterType.AZURE_OPENAI: "Azure OpenAI",
    AdapterType.CUSTOM: "Custom (OpenAI-compatible)",
}

_DEFAULT_ENDPOINTS = {
    AdapterType.OPENAI: OPENAI_DEFAULT_BASE_URL,
    AdapterType.ANTHROPIC: ANTHROPIC_DEFAULT_BASE_URL,
    AdapterType.GEMINI: GEMINI_DEFAULT_BASE_URL,
    AdapterType.OPENROUTER: OPENROUTER_DEFAULT_BASE_URL,
    AdapterType.MISTRAL: MISTRAL_DEFAULT_BASE_URL,
    AdapterType.GROQ: GROQ_DEFAULT_BASE_URL,
    AdapterType.OLLAMA: OLLAMA_DEFAULT_HOST,
}

_OPENAI_COMPATIBLE: Tuple[str, str] = ("llm_adapters.openai.client", "OpenAIAdapter")

# Map adapter types to import paths and class names
_BUILTIN_ADAPTERS: Dict[str, Tuple[str, str]] = {
    AdapterType.OPENAI.value: _OPENAI_COMPATIBLE,
    AdapterType.ANTHROPIC.value: ("llm_adapters.anthropic.client", "AnthropicAdapter"),
    AdapterType.GEMINI.value: ("llm_adapters.gemini.client", "GeminiAdapter"),
    AdapterType.OPENROUTER.value: ("llm_adapters.openrouter.client", "OpenRouterAdapter"),
    AdapterType.MISTRAL.value: ("llm_adapters.mistral.client", "MistralAdapter"),
    AdapterType.GROQ.value: ("llm_adapters.groq.client", "GroqAdapter"),
    AdapterType.OLLAMA.value: ("llm_adapters.ollama.client", "OllamaAdapter"),
    AdapterType.AZURE_OPENAI.value: _OPENAI_COMPATIBLE,
    AdapterType.CUSTOM.value: _OPENAI_COMPATIBLE,
}


def _load_class(module_path: str, class_name: str) -> Type[Any]:
    return getattr(import_module(module_path), class_name)


# Adapter identifiers that differ from their adapter type
_TYPE_ALIASES = {"claude": AdapterType.ANTHROPIC.value}


def _normalize_type(adapter_type: Union[str, AdapterType]) -> str:
    if isinstance(adapter_type, AdapterType):
        return adapter_type.value
    key = str(adapter_type or "").strip().lower()
    return _TYPE_ALIASES.get(key, key)


def default_endpoint_for(adapter_type: Union[str, AdapterType]) -> str:
    """Default base URL for ``adapter_type``; empty for unknown or bring-your-own types."""
    parsed = AdapterType.parse(_normalize_type(adapter_type))
    return parsed.default_endpoint if parsed is not None else ""


class AdapterRegistry:
    """Resolves adapter classes and builds configured adapter instances.

    Construct one per application context and pass it to consumers.

    Parameters
    ----------
    secret_resolver:
        Handed to every adapter for ``apiKeyIdentifier`` lookups.
    transport_factory:
        Optional zero-argument callable returning the transport injected into
        each new adapter (tests, shared pools). Adapters manage their own
        transport when omitted.
    """

    def __init__(
        self,
        secret_resolver: Optional[SecretResolver] = None,
        transport_factory: Optional[Callable[[], Transport]] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._secret_resolver = secret_resolver
        self._transport_factory = transport_factory
        self._custom: Dict[str, Type[Any]] = {}
        self._cache: Dict[int, ProviderAdapter] = {}
        self._logger = logger or get_logger("providers.registry")

    # ------------------------------------------------------------------
    # Class lookup
    # ------------------------------------------------------------------
    def get_adapter_class(self, adapter_type: Union[str, AdapterType]) -> Type[Any]:
        """Class for ``adapter_type``; custom registrations win over built-ins.

        Unknown types log a warning and resolve to the OpenAI-compatible adapter.
        """
        key = _normalize_type(adapter_type)
        if key in self._custom:
            return self._custom[key]
        target = _BUILTIN_ADAPTERS.get(key)
        if target is None:
            log_event(
                self._logger,
                "registry.unknown_type",
                LogContext(provider="registry"),
                level=logging.WARNING,
                adapter_type=key,
            )
            target = _OPENAI_COMPATIBLE
        return _load_class(*target)

    def register_adapter(self, adapter_type: Union[str, AdapterType], adapter_class: Any) -> None:
        key = _normalize_type(adapter_type)
        if not key:
            raise InvalidAdapterType("Adapter type must be a non-empty string", adapter_type=key)
        if not isinstance(adapter_class, type) or not issubclass(adapter_class, ProviderAdapter):
            raise InvalidAdapterType(
                f"Adapter for type '{key}' must be a class implementing ProviderAdapter", adapter_type=key
            )
        self._custom[key] = adapter_class

    def has_adapter(self, adapter_type: Union[str, AdapterType]) -> bool:
        key = _normalize_type(adapter_type)
        return key in self._custom or key in _BUILTIN_ADAPTERS

    def get_registered_adapters(self) -> Dict[str, str]:
        """Adapter type → label; custom types not shadowing a built-in are labelled by name."""
        adapters = {member.value: member.label for member in AdapterType}
        for key in self._custom:
            adapters.setdefault(key, key)
        return adapters

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def create_adapter(
        self, adapter_type: Union[str, AdapterType], config: Optional[Mapping[str, Any]] = None
    ) -> ProviderAdapter:
        """Construct an uncached adapter of ``adapter_type`` configured with ``config``."""
        adapter_class = self.get_adapter_class(adapter_type)
        kwargs: Dict[str, Any] = {"secret_resolver": self._secret_resolver}
        if self._transport_factory is not None:
            kwargs["transport"] = self._transport_factory()
        return adapter_class(dict(config or {}), **kwargs)

    @staticmethod
    def build_config(record: ProviderRecord) -> Dict[str, Any]:
        """Flat ``configure()`` options for ``record``; the JSON ``options`` field is merged last."""
        config: Dict[str, Any] = {
            "baseUrl": record.endpoint_url.strip() or default_endpoint_for(record.adapter_type),
            "timeout": record.timeout,
            "maxRetries": record.max_retries,
        }
        if record.api_key:
            config["apiKey"] = record.api_key
        if record.api_key_identifier:
            config["apiKeyIdentifier"] = record.api_key_identifier
        if record.organization_id:
            config["organizationId"] = record.organization_id
        config.update(record.options_dict())
        return config

    def create_adapter_from_provider(self, record: ProviderRecord, bypass_cache: bool = False) -> ProviderAdapter:
        uid = record.uid
        use_cache = not bypass_cache and uid is not None
        if use_cache and uid in self._cache:
            cached = self._cache[uid]
            log_event(
                self._logger,
                "registry.cache_hit",
                LogContext(provider=cached.get_identifier()),
                level=logging.DEBUG,
                uid=uid,
                identifier=record.identifier,
            )
            return cached
        adapter = self.create_adapter(record.adapter_type, self.build_config(record))
        if use_cache:
            self._cache[uid] = adapter
        log_event(
            self._logger,
            "registry.adapter_created",
            LogContext(provider=adapter.get_identifier()),
            level=logging.DEBUG,
            uid=uid,
            identifier=record.identifier,
            adapter_type=record.adapter_type,
            cached=use_cache,
        )
        return adapter

    def create_adapter_from_model(self, model: ModelRecord) -> ProviderAdapter:
        """Fresh adapter for the model's provider with ``defaultModel`` set to the model id."""
        if model.provider is None:
            raise ConfigurationError(f'Model "{model.identifier or model.model_id}" has no associated provider')
        config = self.build_config(model.provider)
        config["defaultModel"] = model.model_id
        return self.create_adapter(model.provider.adapter_type, config)

    def clear_cache(self, uid: Optional[int] = None) -> None:
        if uid is None:
            self._cache.clear()
        else:
            self._cache.pop(uid, None)

    def cached_uids(self) -> Tuple[int, ...]:
        return tuple(self._cache)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def test_provider_connection(self, record: ProviderRecord) -> Dict[str, Any]:
        """Build a fresh adapter and probe it; failures become ``{"success": False, ...}``."""
        try:
            adapter = self.create_adapter_from_provider(record, bypass_cache=True)
            if not adapter.is_available():
                return {"success": False, "message": "Provider is not available (API key may be missing)"}
            return adapter.test_connection()
        except Exception as exc:  # noqa: BLE001 - diagnostics report every failure
            log_event(
                self._logger,
                "registry.connection_failed",
                LogContext(provider=record.adapter_type),
                level=logging.WARNING,
                error_code=classify_exception(exc).value,
                error=str(exc),
            )
            return {"success": False, "message": f"Connection failed: {exc}"}


__all__ = ["AdapterRegistry", "AdapterType", "default_endpoint_for"]
