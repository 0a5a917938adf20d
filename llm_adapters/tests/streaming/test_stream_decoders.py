"""SSE / NDJSON decoding and DeltaStream lifecycle."""
from __future__ import annotations

import json

from llm_adapters.base.streaming import DeltaStream, NDJSONDecoder, SSEDecoder, iter_lines


def _content(chunk):
    return chunk.get("choices", [{}])[0].get("delta", {}).get("content", "") if isinstance(chunk, dict) else ""


def test_iter_lines_reassembles_split_lines_and_multibyte_characters():
    text = "data: héllo\r\nsecond\nlast"
    raw = text.encode("utf-8")
    chunks = [raw[i : i + 3] for i in range(0, len(raw), 3)]
    assert list(iter_lines(chunks)) == ["data: héllo", "second", "last"]  # nosec B101


def test_sse_yields_only_data_lines_until_done():
    body = (
        ": keep-alive\n"
        "event: message\n"
        'data: {"choices": [{"delta": {"content": "Hel"}}]}\n\n'
        'data: {"choices": [{"delta": {"content": ""}}]}\n\n'
        'data: {"choices": [{"delta": {"content": "lo"}}]}\n\n'
        "data: [DONE]\n\n"
        'data: {"choices": [{"delta": {"content": "ignored"}}]}\n\n'
    )
    stream = SSEDecoder(_content).decode([body.encode("utf-8")])
    assert list(stream) == ["Hel", "lo"]  # nosec B101
    assert stream.completed  # nosec B101
    assert stream.emitted == 2  # nosec B101


def test_sse_handles_events_split_across_chunks():
    event = 'data: {"choices": [{"delta": {"content": "split"}}]}\n\n'.encode("utf-8")
    chunks = [event[:7], event[7:20], event[20:]]
    assert list(SSEDecoder(_content).decode(chunks)) == ["split"]  # nosec B101


def test_sse_skips_malformed_payloads_and_reports_them():
    bad = []
    body = b'data: {broken\n\ndata: {"choices": [{"delta": {"content": "ok"}}]}\n\n'
    stream = SSEDecoder(_content, on_malformed=bad.append).decode([body])
    assert list(stream) == ["ok"]  # nosec B101
    assert bad == ["{broken"]  # nosec B101


def test_sse_vendor_stop_predicate_ends_stream():
    def extract(data):
        return data.get("text", "")

    body = b'data: {"text": "a"}\n\ndata: {"type": "message_stop"}\n\ndata: {"text": "b"}\n\n'
    stream = SSEDecoder(extract, is_final=lambda d: d.get("type") == "message_stop").decode([body])
    assert list(stream) == ["a"]  # nosec B101


def test_sse_stream_without_done_ends_with_body():
    body = b'data: {"choices": [{"delta": {"content": "x"}}]}'
    assert list(SSEDecoder(_content).decode([body])) == ["x"]  # nosec B101


def test_ndjson_stops_after_done_line_and_yields_its_delta():
    lines = [
        {"message": {"content": "a"}, "done": False},
        {"message": {"content": "b"}, "done": True},
        {"message": {"content": "c"}, "done": False},
    ]
    body = "\n".join(json.dumps(line) for line in lines).encode("utf-8")
    stream = NDJSONDecoder(lambda d: d.get("message", {}).get("content", "")).decode([body])
    assert list(stream) == ["a", "b"]  # nosec B101


def test_ndjson_skips_blank_and_malformed_lines():
    bad = []
    body = b'\n{not json}\n\n{"message": {"content": "ok"}, "done": true}\n'
    stream = NDJSONDecoder(lambda d: d["message"]["content"], on_malformed=bad.append).decode([body])
    assert list(stream) == ["ok"]  # nosec B101
    assert bad == ["{not json}"]  # nosec B101


def test_close_stops_consumption_and_releases_body():
    released = []
    pulled = []

    def chunks():
        try:
            for i in range(100):
                pulled.append(i)
                yield f'data: {{"choices": [{{"delta": {{"content": "{i}"}}}}]}}\n\n'.encode("utf-8")
        finally:
            released.append(True)

    closed_streams = []
    stream = SSEDecoder(_content).decode(chunks(), on_close=closed_streams.append)
    assert stream.next_delta() == "0"  # nosec B101
    assert stream.next_delta() == "1"  # nosec B101
    stream.close()
    stream.close()
    assert stream.next_delta() is None  # nosec B101
    assert released == [True]  # nosec B101
    assert len(pulled) == 2  # nosec B101
    assert closed_streams == [stream]  # nosec B101
    assert not stream.completed  # nosec B101
    assert stream.emitted == 2  # nosec B101


def test_context_manager_closes_stream():
    finished = []
    with DeltaStream(iter(["a", "b"]), on_close=finished.append) as stream:
        assert next(stream) == "a"  # nosec B101
    assert stream.closed  # nosec B101
    assert finished == [stream]  # nosec B101


def test_exhaustion_marks_completed_and_closes_once():
    finished = []
    stream = DeltaStream(iter(["x"]), on_close=finished.append)
    assert list(stream) == ["x"]  # nosec B101
    assert stream.completed  # nosec B101
    assert list(stream) == []  # nosec B101
    assert finished == [stream]  # nosec B101
