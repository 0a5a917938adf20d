"""Gemini request/response mapping.

Pure functions translating between the normalized message/tool shapes and
Gemini's ``contents``/``parts`` dialect. Nothing here performs I/O.
"""

from __future__ import annotations

import re
import uuid
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..base import accessor
from ..base.models import FinishReason, ToolCall

_DATA_URL = re.compile(r"^data:(image/[\w.+-]+);base64,(.+)$", re.DOTALL)

FINISH_REASON_MAP = {
    "STOP": FinishReason.STOP,
    "MAX_TOKENS": FinishReason.LENGTH,
    "SAFETY": FinishReason.CONTENT_FILTER,
    "RECITATION": FinishReason.CONTENT_FILTER,
}


def to_contents(messages: Sequence[Mapping[str, Any]]) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
    """Return ``(contents, system_instruction)``.

    ``assistant`` becomes ``model``; every other non-system role is sent as
    ``user``. The last system message becomes the system instruction.
    """
    contents: List[Dict[str, Any]] = []
    system: Optional[Dict[str, Any]] = None
    for message in messages:
        role = accessor.get_string(message, "role")
        text = accessor.get_string(message, "content")
        if role == "system":
            system = {"parts": [{"text": text}]}
            continue
        contents.append({"role": "model" if role == "assistant" else "user", "parts": [{"text": text}]})
    return contents, system


def generation_config(options: Mapping[str, Any], temperature: float, max_tokens: int) -> Dict[str, Any]:
    config: Dict[str, Any] = {
        "temperature": accessor.get_float(options, "temperature", temperature),
        "maxOutputTokens": accessor.get_int(options, "max_tokens", max_tokens),
    }
    if options.get("top_p") is not None:
        config["topP"] = accessor.get_float(options, "top_p")
    if options.get("top_k") is not None:
        config["topK"] = accessor.get_int(options, "top_k")
    if options.get("stop_sequences") is not None:
        config["stopSequences"] = options["stop_sequences"]
    return config


def function_declarations(tools: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    declarations = []
    for tool in tools:
        function = accessor.get_array(tool, "function")
        declarations.append(
            {
                "name": accessor.get_string(function, "name"),
                "description": accessor.get_string(function, "description"),
                "parameters": accessor.get_array(function, "parameters"),
            }
        )
    return {"functionDeclarations": declarations}


def map_finish_reason(reason: str) -> str:
    return FINISH_REASON_MAP.get(reason, reason.lower() or FinishReason.STOP)


def first_candidate(data: Mapping[str, Any]) -> Dict[str, Any]:
    candidates = accessor.get_list(data, "candidates")
    return accessor.as_array(candidates[0]) if candidates else {}


def candidate_parts(candidate: Mapping[str, Any]) -> List[Any]:
    return accessor.get_list(accessor.get_array(candidate, "content"), "parts")


def first_text(candidate: Mapping[str, Any]) -> str:
    parts = candidate_parts(candidate)
    return accessor.get_string(accessor.as_array(parts[0]), "text") if parts else ""


def new_call_id() -> str:
    return f"call_{uuid.uuid4().hex[:24]}"


def parse_parts(candidate: Mapping[str, Any]) -> Tuple[str, Optional[List[ToolCall]]]:
    """Concatenate text parts and turn ``functionCall`` parts into tool calls."""
    text: List[str] = []
    calls: List[ToolCall] = []
    for part in candidate_parts(candidate):
        entry = accessor.as_array(part)
        chunk = accessor.get_nullable_string(entry, "text")
        if chunk is not None:
            text.append(chunk)
        call = accessor.get_array(entry, "functionCall")
        if call:
            args = accessor.get_array(call, "args")
            calls.append(
                ToolCall(
                    id=new_call_id(),
                    function_name=accessor.get_string(call, "name"),
                    arguments=dict(args) if isinstance(args, dict) else {},
                )
            )
    return "".join(text), calls or None


def usage_counts(data: Mapping[str, Any]) -> Tuple[int, int]:
    usage = accessor.get_array(data, "usageMetadata")
    return accessor.get_int(usage, "promptTokenCount"), accessor.get_int(usage, "candidatesTokenCount")


def vision_parts(content: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    parts: List[Dict[str, Any]] = []
    for item in content:
        entry = accessor.as_array(item)
        kind = accessor.get_string(entry, "type")
        if kind == "text":
            if text := accessor.get_string(entry, "text"):
                parts.append({"text": text})
        elif kind == "image_url":
            url = accessor.get_nested_string(entry, "image_url.url") or accessor.get_string(entry, "image_url")
            match = _DATA_URL.match(url) if url.startswith("data:") else None
            if url.startswith("data:"):
                parts.append(
                    {
                        "inlineData": {
                            "mimeType": match.group(1) if match else "image/jpeg",
                            "data": match.group(2) if match else "",
                        }
                    }
                )
            else:
                parts.append({"fileData": {"mimeType": "image/jpeg", "fileUri": url}})
    return parts


def extract_stream_delta(chunk: Any) -> str:
    """``candidates[0].content.parts[0].text`` of one streamed chunk."""
    return accessor.get_nested_string(accessor.as_array(chunk), "candidates.0.content.parts.0.text", "")


def estimate_tokens(text: str) -> int:
    """Rough token estimate for endpoints that report no usage."""
    return len(text) // 4


__all__ = [
    "FINISH_REASON_MAP",
    "to_contents",
    "generation_config",
    "function_declarations",
    "map_finish_reason",
    "first_candidate",
    "first_text",
    "parse_parts",
    "usage_counts",
    "vision_parts",
    "extract_stream_delta",
    "estimate_tokens",
]
