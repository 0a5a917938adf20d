"""
Token usage accounting attached to every response object.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class UsageStatistics:
    """Prompt/completion token counts.

    ``total_tokens`` is always derived from the two counts when built through
    :meth:`of`; vendor-reported totals are never trusted.
    """

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def of(cls, prompt_tokens: int, completion_tokens: int) -> "UsageStatistics":
        return cls(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["UsageStatistics"]
