"""Anthropic helpers module.

Purpose:
- Pure request/response mapping for the Anthropic Messages API, kept out of
  ``client.py`` so the adapter only wires these functions to the request
  loop.

Mappings:
- System messages are lifted out of the message list into ``system``.
- OpenAI-style function tools become ``{name, description, input_schema}``.
- ``tool_choice`` strings map auto/none/required to Anthropic's
  ``auto``/``none``/``any``; any other string names a tool.
- Data-URL images become base64 image sources; plain URLs become URL sources.
- Stop reasons map onto the normalized finish reasons.

Failure modes:
- None. Malformed blocks are skipped; missing fields fall back to defaults.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..base import accessor
from ..base.models import FinishReason, ToolCall

_DATA_URL = re.compile(r"^data:(image/[\w.+-]+);base64,(.+)$", re.DOTALL)

STOP_REASON_MAP = {
    "end_turn": FinishReason.STOP,
    "max_tokens": FinishReason.LENGTH,
    "stop_sequence": FinishReason.STOP,
    "tool_use": FinishReason.TOOL_CALLS,
}


def split_system(messages: Sequence[Mapping[str, Any]]) -> Tuple[Optional[str], List[Dict[str, Any]]]:
    """Return ``(system_prompt, remaining_messages)``; the last system message wins."""
    system: Optional[str] = None
    remaining: List[Dict[str, Any]] = []
    for message in messages:
        if accessor.get_string(message, "role") == "system":
            system = accessor.get_string(message, "content")
        else:
            remaining.append(dict(message))
    return system, remaining


def convert_tools(tools: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    converted: List[Dict[str, Any]] = []
    for tool in tools:
        function = accessor.get_array(tool, "function")
        converted.append(
            {
                "name": accessor.get_string(function, "name"),
                "description": accessor.get_string(function, "description"),
                "input_schema": accessor.get_array(function, "parameters"),
            }
        )
    return converted


def map_tool_choice(choice: Any) -> Dict[str, Any]:
    if isinstance(choice, str):
        if choice in ("auto", "none"):
            return {"type": choice}
        if choice == "required":
            return {"type": "any"}
        return {"type": "tool", "name": choice}
    if isinstance(choice, Mapping):
        return dict(choice)
    return {"type": "auto"}


def map_stop_reason(reason: str) -> str:
    return STOP_REASON_MAP.get(reason, reason.lower() or FinishReason.STOP)


def convert_image_part(part: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """Map one OpenAI-style content part to an Anthropic content block."""
    kind = accessor.get_string(part, "type")
    if kind == "text":
        return {"type": "text", "text": accessor.get_string(part, "text")}
    if kind != "image_url":
        return None
    url = accessor.get_nested_string(part, "image_url.url") or accessor.get_string(part, "image_url")
    if url.startswith("data:"):
        match = _DATA_URL.match(url)
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": match.group(1) if match else "image/jpeg",
                "data": match.group(2) if match else "",
            },
        }
    return {"type": "image", "source": {"type": "url", "url": url}}


def convert_vision_content(content: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    blocks = (convert_image_part(accessor.as_array(part)) for part in content)
    return [block for block in blocks if block is not None]


def parse_content(data: Mapping[str, Any]) -> Tuple[str, Optional[List[ToolCall]]]:
    """Concatenate text blocks and collect ``tool_use`` blocks in order."""
    text_parts: List[str] = []
    calls: List[ToolCall] = []
    for block in accessor.get_list(data, "content"):
        entry = accessor.as_array(block)
        kind = accessor.get_string(entry, "type")
        if kind == "text":
            text_parts.append(accessor.get_string(entry, "text"))
        elif kind == "tool_use":
            arguments = accessor.get_array(entry, "input")
            calls.append(
                ToolCall(
                    id=accessor.get_string(entry, "id"),
                    function_name=accessor.get_string(entry, "name"),
                    arguments=dict(arguments) if isinstance(arguments, dict) else {},
                )
            )
    return "".join(text_parts), calls or None


def usage_counts(data: Mapping[str, Any]) -> Tuple[int, int]:
    usage = accessor.get_array(data, "usage")
    return accessor.get_int(usage, "input_tokens"), accessor.get_int(usage, "output_tokens")


def extract_stream_delta(event: Any) -> str:
    """Text of a ``content_block_delta`` / ``text_delta`` event, else ``""``."""
    if accessor.get_string(accessor.as_array(event), "type") != "content_block_delta":
        return ""
    delta = accessor.get_array(event, "delta")
    if accessor.get_string(delta, "type") != "text_delta":
        return ""
    return accessor.get_string(delta, "text")


def is_message_stop(event: Any) -> bool:
    return accessor.get_string(accessor.as_array(event), "type") == "message_stop"


__all__ = [
    "STOP_REASON_MAP",
    "split_system",
    "convert_tools",
    "map_tool_choice",
    "map_stop_reason",
    "convert_image_part",
    "convert_vision_content",
    "parse_content",
    "usage_counts",
    "extract_stream_delta",
    "is_message_stop",
]
