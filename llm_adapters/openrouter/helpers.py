"""OpenRouter response mapping helpers.

Catalog entries from ``GET models`` become :class:`ModelDescriptor` values,
``GET auth/key`` becomes a credits summary, and 4xx statuses get the
OpenRouter-specific messages callers expect.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from ..base import accessor
from ..base.models import Modality, ModelDescriptor

REJECTION_MESSAGES = {
    401: "Invalid OpenRouter API key",
    402: "Insufficient OpenRouter credits",
    403: "Forbidden",
    429: "Rate limit exceeded",
    503: "OpenRouter service unavailable",
}


def provider_from_model_id(model_id: str) -> str:
    """Upstream vendor prefix of ``vendor/model`` ids; ``"unknown"`` otherwise."""
    if "/" in model_id:
        return model_id.split("/", 1)[0]
    return "unknown"


def descriptor_from_entry(entry: Mapping[str, Any]) -> ModelDescriptor:
    model_id = accessor.get_string(entry, "id")
    modality = accessor.get_nested_string(entry, "architecture.modality")
    return ModelDescriptor(
        id=model_id,
        display_name=accessor.get_string(entry, "name") or model_id,
        context_length=accessor.get_int(entry, "context_length"),
        prompt_cost=accessor.as_float(accessor.get_nested_string(entry, "pricing.prompt", "0")),
        completion_cost=accessor.as_float(accessor.get_nested_string(entry, "pricing.completion", "0")),
        supports_function_calling=accessor.get_bool(entry, "supports_function_calling"),
        modality=Modality.MULTIMODAL if modality == Modality.MULTIMODAL else Modality.TEXT,
        provider=provider_from_model_id(model_id),
    )


def parse_catalog(data: Mapping[str, Any]) -> List[ModelDescriptor]:
    descriptors: List[ModelDescriptor] = []
    for item in accessor.get_list(data, "data"):
        entry = accessor.as_array(item)
        if accessor.get_string(entry, "id"):
            descriptors.append(descriptor_from_entry(entry))
    return descriptors


def parse_credits(data: Mapping[str, Any]) -> Dict[str, Any]:
    info = accessor.get_array(data, "data")
    return {
        "balance": accessor.get_float(info, "limit"),
        "usage": accessor.get_float(info, "usage"),
        "is_free_tier": accessor.get_bool(info, "is_free_tier"),
        "rate_limit": accessor.get_array(info, "rate_limit"),
    }


def response_metadata(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "actual_provider": accessor.get_string(data, "provider") or "unknown",
        "cost": data.get("total_cost") if isinstance(data, Mapping) else None,
        "native_tokens": {
            "prompt": accessor.get_nullable_int(data, "native_tokens_prompt"),
            "completion": accessor.get_nullable_int(data, "native_tokens_completion"),
        },
    }


def rejection_message(status: int, message: str) -> str:
    if status == 400:
        return f"Bad request: {message}"
    if status in REJECTION_MESSAGES:
        return REJECTION_MESSAGES[status]
    return f"OpenRouter API error ({status}): {message}"


__all__ = [
    "REJECTION_MESSAGES",
    "provider_from_model_id",
    "descriptor_from_entry",
    "parse_catalog",
    "parse_credits",
    "response_metadata",
    "rejection_message",
]
