"""
EmbeddingResponse DTO: one float vector per input text, in input order.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .usage_statistics import UsageStatistics


@dataclass(frozen=True)
class EmbeddingResponse:
    embeddings: List[List[float]]
    model: str
    usage: UsageStatistics
    provider: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def dimensions(self) -> int:
        return len(self.embeddings[0]) if self.embeddings else 0

    def first(self) -> List[float]:
        return self.embeddings[0] if self.embeddings else []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "embeddings": [list(v) for v in self.embeddings],
            "model": self.model,
            "usage": self.usage.to_dict(),
            "provider": self.provider,
            "metadata": dict(self.metadata),
        }


__all__ = ["EmbeddingResponse"]
