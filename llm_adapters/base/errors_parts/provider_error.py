"""
Root exception of the adapter layer.

Everything an adapter, the registry or the routing engine raises on purpose
is a :class:`ProviderError`; the typed subclasses in ``typed_errors`` pin the
``code`` for each failure category.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class ProviderError(Exception):
    """A failure attributed to one adapter (and optionally one model).

    Attributes:
        code: Failure category.
        message: Text suitable for end users and logs.
        provider: Adapter identifier (``"openrouter"``, ``"registry"``, ...).
        model: Model the failing call targeted, when known.
        retryable: True when another model might succeed; read by the
            routing fallback chain, not by the request loop.
        raw: Underlying exception, kept for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: str = ""
    model: Optional[str] = None
    retryable: bool = False
    raw: Optional[Exception] = None

    def __str__(self) -> str:
        where = f"{self.provider}/{self.model}" if self.model else self.provider or "-"
        return f"[{where}] {self.code.value}: {self.message}"


__all__ = ["ProviderError"]
