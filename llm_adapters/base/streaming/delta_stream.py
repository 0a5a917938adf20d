"""Pull-based stream of text deltas.

:class:`DeltaStream` is what every ``stream_chat_completion`` call returns.
It is a plain iterator (``for delta in stream``) that also exposes an
explicit ``next_delta()`` → ``str | None`` contract and a ``close()`` that
stops consuming the underlying body. Stopping early is the cancellation
mechanism: it never raises to the caller.

The stream is forward-only and not restartable.
"""
from __future__ import annotations

from typing import Callable, Iterator, Optional


class DeltaStream:
    """Lazy, finite, forward-only sequence of non-empty text deltas."""

    def __init__(
        self,
        deltas: Iterator[str],
        on_close: Optional[Callable[["DeltaStream"], None]] = None,
    ) -> None:
        self._deltas = deltas
        self._on_close = on_close
        self._closed = False
        self.emitted = 0
        self.completed = False

    def __iter__(self) -> "DeltaStream":
        return self

    def __next__(self) -> str:
        if self._closed:
            raise StopIteration
        try:
            delta = next(self._deltas)
        except StopIteration:
            self.completed = True
            self.close()
            raise
        except BaseException:
            self.close()
            raise
        self.emitted += 1
        return delta

    def next_delta(self) -> Optional[str]:
        """Return the next delta, or ``None`` once the stream has ended."""
        try:
            return next(self)
        except StopIteration:
            return None

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop consuming the underlying body. Idempotent."""
        if self._closed:
            return
        self._closed = True
        close = getattr(self._deltas, "close", None)
        if callable(close):
            close()
        if self._on_close is not None:
            self._on_close(self)

    def __enter__(self) -> "DeltaStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __del__(self) -> None:  # pragma: no cover - GC timing
        if not getattr(self, "_closed", True):
            self.close()


__all__ = ["DeltaStream"]
