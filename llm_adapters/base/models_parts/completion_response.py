"""
CompletionResponse DTO returned by chat, completion and tool-calling calls.

Immutable once returned. ``model`` echoes the vendor-reported model (which can
differ from the requested one, e.g. after aggregator routing), and
``finish_reason`` is normalized onto :class:`FinishReason` values where the
vendor vocabulary allows it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .tool_call import ToolCall
from .usage_statistics import UsageStatistics


class FinishReason:
    """Normalized finish reasons; unmapped vendor reasons pass through lowercased."""

    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"
    TOOL_CALLS = "tool_calls"


@dataclass(frozen=True)
class CompletionResponse:
    """Provider-agnostic result of one completion call.

    Attributes:
        content: Generated text (may be empty when only tool calls were returned).
        model: Model reported by the vendor.
        usage: Token accounting.
        finish_reason: Normalized reason the generation ended.
        provider: Identifier of the adapter that produced the response.
        tool_calls: Ordered tool calls, or ``None`` when the model requested none.
        metadata: Open map for vendor extras (cost, routed provider, ...).
    """

    content: str
    model: str
    usage: UsageStatistics
    finish_reason: str = FinishReason.STOP
    provider: str = ""
    tool_calls: Optional[List[ToolCall]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.content

    def was_truncated(self) -> bool:
        return self.finish_reason == FinishReason.LENGTH

    def was_filtered(self) -> bool:
        return self.finish_reason == FinishReason.CONTENT_FILTER

    def is_complete(self) -> bool:
        return self.finish_reason == FinishReason.STOP

    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "model": self.model,
            "usage": self.usage.to_dict(),
            "finish_reason": self.finish_reason,
            "provider": self.provider,
            "tool_calls": [tc.to_dict() for tc in self.tool_calls] if self.tool_calls else None,
            "metadata": dict(self.metadata),
        }


__all__ = ["CompletionResponse", "FinishReason"]
