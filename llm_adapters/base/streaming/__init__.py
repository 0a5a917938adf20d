"""Streaming decoders: byte chunks in, lazy text deltas out."""

from .delta_stream import DeltaStream
from .lines import iter_lines
from .ndjson import NDJSONDecoder
from .sse import DATA_PREFIX, DONE_SENTINEL, SSEDecoder

__all__ = [
    "DeltaStream",
    "iter_lines",
    "NDJSONDecoder",
    "SSEDecoder",
    "DATA_PREFIX",
    "DONE_SENTINEL",
]
