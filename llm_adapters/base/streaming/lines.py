"""Chunk-to-line reassembly shared by the stream decoders.

Transports deliver bodies in arbitrary chunks: one read can hold several
lines, half a line, or half a multi-byte UTF-8 character. :func:`iter_lines`
buffers raw bytes and only decodes once a full line is available.
"""
from __future__ import annotations

from typing import Iterable, Iterator


def iter_lines(chunks: Iterable[bytes]) -> Iterator[str]:
    """Yield complete text lines (without terminators) from a chunk iterator.

    ``\\n`` and ``\\r\\n`` terminators are both accepted. A trailing line
    without terminator is flushed when the chunk iterator ends.
    """
    buffer = b""
    for chunk in chunks:
        if not chunk:
            continue
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        buffer += chunk
        while True:
            pos = buffer.find(b"\n")
            if pos < 0:
                break
            raw, buffer = buffer[:pos], buffer[pos + 1 :]
            yield raw.rstrip(b"\r").decode("utf-8", errors="replace")
    if buffer:
        yield buffer.rstrip(b"\r").decode("utf-8", errors="replace")


__all__ = ["iter_lines"]
