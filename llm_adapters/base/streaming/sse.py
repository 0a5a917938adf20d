"""Server-Sent-Events decoder (OpenAI-compatible and Anthropic-style vendors).

Only ``data:`` lines are considered. Comments, ``event:`` lines, ids and
keep-alives are skipped silently. A ``[DONE]`` payload ends the stream. Each
remaining payload is parsed as JSON and handed to the vendor ``extract``
function; malformed JSON is skipped (reported through ``on_malformed``), and
empty deltas are never yielded.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Iterable, Iterator, Optional

from .delta_stream import DeltaStream
from .lines import iter_lines

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"

Extractor = Callable[[Any], str]


class SSEDecoder:
    """Turn an SSE byte stream into a :class:`DeltaStream`.

    Parameters:
        extract: Maps one decoded ``data:`` JSON payload to its delta text.
        is_final: Optional predicate marking a payload as end-of-stream
            (e.g. Anthropic ``message_stop``).
        on_malformed: Optional callback receiving the raw payload of a chunk
            that failed to parse.
    """

    def __init__(
        self,
        extract: Extractor,
        is_final: Optional[Callable[[Any], bool]] = None,
        on_malformed: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._extract = extract
        self._is_final = is_final
        self._on_malformed = on_malformed

    def iter_deltas(self, chunks: Iterable[bytes]) -> Iterator[str]:
        for line in iter_lines(chunks):
            if not line.startswith(DATA_PREFIX):
                continue
            payload = line[len(DATA_PREFIX) :].strip()
            if payload == DONE_SENTINEL:
                return
            if not payload:
                continue
            try:
                data = json.loads(payload)
            except ValueError:
                if self._on_malformed is not None:
                    self._on_malformed(payload)
                continue
            if self._is_final is not None and self._is_final(data):
                return
            delta = self._extract(data)
            if delta:
                yield delta

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


__all__ = ["SSEDecoder", "DATA_PREFIX", "DONE_SENTINEL"]
