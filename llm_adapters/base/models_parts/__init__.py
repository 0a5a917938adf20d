"""Response value objects, one class per module."""

from .completion_response import CompletionResponse, FinishReason
from .embedding_response import EmbeddingResponse
from .model_descriptor import Modality, ModelDescriptor
from .tool_call import ToolCall
from .usage_statistics import UsageStatistics
from .vision_response import VisionResponse

__all__ = [
    "CompletionResponse",
    "FinishReason",
    "EmbeddingResponse",
    "Modality",
    "ModelDescriptor",
    "ToolCall",
    "UsageStatistics",
    "VisionResponse",
]
