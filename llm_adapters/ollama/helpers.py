"""Ollama request/response mapping helpers (pure functions)."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ..base import accessor
from ..base.models import FinishReason
from ..config.defaults import DEFAULT_MAX_TOKENS


def build_options(options: Mapping[str, Any], *, streaming: bool = False) -> Dict[str, Any]:
    """Translate call options into Ollama's ``options`` object.

    Only keys the caller set are sent, so the daemon's model defaults apply
    otherwise. Streaming requests forward temperature only.
    """
    out: Dict[str, Any] = {}
    if options.get("temperature") is not None:
        out["temperature"] = accessor.get_float(options, "temperature")
    if streaming:
        return out
    if options.get("top_p") is not None:
        out["top_p"] = accessor.get_float(options, "top_p")
    if options.get("num_predict") is not None or options.get("max_tokens") is not None:
        out["num_predict"] = accessor.get_int(
            options, "num_predict", accessor.get_int(options, "max_tokens", DEFAULT_MAX_TOKENS)
        )
    return out


def extract_stream_delta(line: Any) -> str:
    """``message.content`` of one NDJSON line."""
    return accessor.get_nested_string(accessor.as_array(line), "message.content", "")


def is_done(line: Any) -> bool:
    return accessor.get_bool(accessor.as_array(line), "done")


def finish_reason(data: Mapping[str, Any]) -> str:
    return accessor.get_string(data, "done_reason") or FinishReason.STOP


def model_names(data: Mapping[str, Any]) -> Dict[str, str]:
    """Map the ``api/tags`` listing to ``{name: name}``."""
    names: Dict[str, str] = {}
    for item in accessor.get_list(data, "models"):
        name = accessor.get_string(accessor.as_array(item), "name")
        if name:
            names[name] = name
    return names


__all__ = ["build_options", "extract_stream_delta", "is_done", "finish_reason", "model_names"]
