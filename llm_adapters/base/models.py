"""Stable import surface for response value objects."""

from .models_parts import (
    CompletionResponse,
    EmbeddingResponse,
    FinishReason,
    Modality,
    ModelDescriptor,
    ToolCall,
    UsageStatistics,
    VisionResponse,
)

__all__ = [
    "CompletionResponse",
    "EmbeddingResponse",
    "FinishReason",
    "Modality",
    "ModelDescriptor",
    "ToolCall",
    "UsageStatistics",
    "VisionResponse",
]
