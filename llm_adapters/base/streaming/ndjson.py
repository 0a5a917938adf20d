"""Newline-delimited JSON decoder (Ollama-style vendors).

Each non-blank line is one JSON object. The delta of a line is yielded (when
non-empty) and the stream stops after the first line whose ``done`` flag is
true. Malformed lines are skipped, not fatal.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Iterable, Iterator, Optional

from .delta_stream import DeltaStream
from .lines import iter_lines


def _default_done(data: Any) -> bool:
    return isinstance(data, dict) and data.get("done") is True


class NDJSONDecoder:
    """Turn an NDJSON byte stream into a :class:`DeltaStream`."""

    def __init__(
        self,
        extract: Callable[[Any], str],
        is_done: Callable[[Any], bool] = _default_done,
        on_malformed: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._extract = extract
        self._is_done = is_done
        self._on_malformed = on_malformed

    def iter_deltas(self, chunks: Iterable[bytes]) -> Iterator[str]:
        for line in iter_lines(chunks):
            text = line.strip()
            if not text:
                continue
            try:
                data = json.loads(text)
            except ValueError:
                if self._on_malformed is not None:
                    self._on_malformed(text)
                continue
            delta = self._extract(data)
            if delta:
                yield delta
            if self._is_done(data):
                return

    def decode(
        self,
        chunks: Iterable[bytes],
        on_close: Optional[Callable[[DeltaStream], None]] = None,
    ) -> DeltaStream:
        return DeltaStream(self._iterate(chunks), on_close=on_close)

    def _iterate(self, chunks: Iterable[bytes]) -> Iterator[str]:
        try:
            yield from self.iter_deltas(chunks)
        finally:
            close = getattr(chunks, "close", None)
            if callable(close):
                close()


__all__ = ["NDJSONDecoder"]
