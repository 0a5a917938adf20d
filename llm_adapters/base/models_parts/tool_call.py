"""
Normalized tool (function) invocation requested by a model.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class ToolCall:
    """One tool call in vendor order.

    Attributes:
        id: Vendor call id (generated when the vendor supplies none).
        function_name: Name of the tool to invoke.
        arguments: Decoded argument map (empty when the vendor sent malformed JSON).
        type: Always ``"function"`` for the vendors supported today.
    """

    id: str
    function_name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    type: str = "function"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "function": {"name": self.function_name, "arguments": dict(self.arguments)},
        }


__all__ = ["ToolCall"]
