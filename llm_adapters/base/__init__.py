"""
Adapters Base Package

Provider-agnostic building blocks shared by every vendor adapter:
- Errors: normalized error codes and typed failures
- Models: response value objects
- Interfaces: the ``ProviderAdapter`` contract
- Adapter: request loop, credentials and transport lifecycle
- Registry: lazy creation of adapters by adapter type
"""

from .errors import (
    ConfigurationError,
    ErrorCode,
    InvalidAdapterType,
    MalformedPayload,
    ProviderError,
    ProviderRejected,
    ProviderUnreachable,
    UnexpectedShape,
    UnsupportedFeature,
)
from .models import (
    CompletionResponse,
    EmbeddingResponse,
    FinishReason,
    ModelDescriptor,
    ToolCall,
    UsageStatistics,
    VisionResponse,
)
from .interfaces import ProviderAdapter
from .adapter import BaseAdapter
from .repositories.keys import KeyResolution, KeysRepository, SecretResolver, StaticSecretResolver
from .streaming import DeltaStream, NDJSONDecoder, SSEDecoder
from .registry import AdapterRegistry, AdapterType

__all__ = [
    # Errors
    "ErrorCode",
    "ProviderError",
    "ConfigurationError",
    "ProviderRejected",
    "ProviderUnreachable",
    "UnsupportedFeature",
    "MalformedPayload",
    "UnexpectedShape",
    "InvalidAdapterType",
    # Models
    "CompletionResponse",
    "EmbeddingResponse",
    "VisionResponse",
    "UsageStatistics",
    "ToolCall",
    "FinishReason",
    "ModelDescriptor",
    # Contracts
    "ProviderAdapter",
    "BaseAdapter",
    # Secrets
    "SecretResolver",
    "KeysRepository",
    "KeyResolution",
    "StaticSecretResolver",
    # Streaming
    "DeltaStream",
    "SSEDecoder",
    "NDJSONDecoder",
    # Registry
    "AdapterRegistry",
    "AdapterType",
]
