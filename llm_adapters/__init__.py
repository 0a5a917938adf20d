"""llm_adapters package

One adapter contract over many LLM vendors.

Purpose:
    Provide a single, vendor-neutral surface for chat, tool calling,
    embeddings, vision and streaming, with a shared retry/backoff request
    loop, typed errors and an adapter registry. Callers obtain adapters from
    an :class:`AdapterRegistry` (or construct a vendor class directly) and
    work with the normalized response objects.

Public API (re-exported):
    - Version: ``__version__``
    - Errors: :class:`ProviderError`, :class:`ErrorCode` and typed subclasses
    - Registry: :class:`AdapterRegistry`, :class:`AdapterType`, :func:`create`
"""

from typing import Any, Mapping, Optional

from .base import (
    AdapterRegistry,
    AdapterType,
    BaseAdapter,
    CompletionResponse,
    ConfigurationError,
    DeltaStream,
    EmbeddingResponse,
    ErrorCode,
    ProviderAdapter,
    ProviderError,
    ProviderRejected,
    ProviderUnreachable,
    UnsupportedFeature,
    VisionResponse,
)
from .config import get_provider_config

__version__ = "0.1.0"


def create(adapter_type: str, options: Optional[Mapping[str, Any]] = None) -> ProviderAdapter:
    """Build an adapter configured from defaults, config file and environment.

    ``options`` win over every other source (see :func:`get_provider_config`).
    """
    config = get_provider_config(adapter_type, dict(options or {}))
    return AdapterRegistry().create_adapter(adapter_type, config)


__all__ = [
    "__version__",
    "create",
    "AdapterRegistry",
    "AdapterType",
    "BaseAdapter",
    "ProviderAdapter",
    "ProviderError",
    "ErrorCode",
    "ConfigurationError",
    "ProviderRejected",
    "ProviderUnreachable",
    "UnsupportedFeature",
    "CompletionResponse",
    "EmbeddingResponse",
    "VisionResponse",
    "DeltaStream",
]
