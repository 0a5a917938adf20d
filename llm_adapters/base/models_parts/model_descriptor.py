"""
ModelDescriptor DTO for aggregator catalog entries used by routing.

Represents a single model as returned by a vendor's model listing endpoint.
Prices are per token, in the vendor's currency.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


class Modality:
    TEXT = "text"
    MULTIMODAL = "multimodal"


@dataclass(frozen=True)
class ModelDescriptor:
    """A single routable model.

    Attributes:
        id: Stable model identifier (``vendor/model`` on aggregators).
        display_name: Human-friendly name.
        context_length: Maximum context window in tokens (0 when unknown).
        prompt_cost: Price per prompt token.
        completion_cost: Price per completion token.
        supports_function_calling: Whether tool calling is available.
        modality: ``"text"`` or ``"multimodal"``.
        provider: Upstream vendor extracted from the id (``"unknown"`` without a prefix).
    """

    id: str
    display_name: str = ""
    context_length: int = 0
    prompt_cost: float = 0.0
    completion_cost: float = 0.0
    supports_function_calling: bool = False
    modality: str = Modality.TEXT
    provider: str = "unknown"

    @property
    def combined_cost(self) -> float:
        return self.prompt_cost + self.completion_cost

    @property
    def is_multimodal(self) -> bool:
        return self.modality == Modality.MULTIMODAL

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["ModelDescriptor", "Modality"]
