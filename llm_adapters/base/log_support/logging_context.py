"""Fields shared by every event one adapter call emits."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class LogContext:
    """Who is talking to which model.

    ``provider`` is the adapter identifier, ``model`` the model of the call.
    ``extra`` holds per-call keys such as the HTTP ``method``; ``None`` values
    never reach the log line.
    """

    provider: Optional[str] = None
    model: Optional[str] = None
    request_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for item in fields(self):
            if item.name == "extra":
                continue
            value = getattr(self, item.name)
            if value is not None:
                out[item.name] = value
        out.update((k, v) for k, v in self.extra.items() if v is not None)
        return out


__all__ = ["LogContext"]
