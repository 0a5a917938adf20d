"""
VisionResponse DTO returned by image analysis calls.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from .usage_statistics import UsageStatistics


@dataclass(frozen=True)
class VisionResponse:
    description: str
    model: str
    usage: UsageStatistics
    provider: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.description

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "model": self.model,
            "usage": self.usage.to_dict(),
            "provider": self.provider,
            "metadata": dict(self.metadata),
        }


__all__ = ["VisionResponse"]
