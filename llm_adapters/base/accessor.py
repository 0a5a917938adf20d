"""Type-coercing read helpers over decoded JSON payloads.

Purpose
-------
Vendor responses are loosely typed: numbers arrive as strings, objects
arrive where lists were documented, fields go missing. Every adapter reads
payloads through these helpers so that a differently-shaped body degrades to a
caller-supplied default instead of raising ``TypeError``/``KeyError`` deep
inside response mapping.

Coercion rules
--------------
- Numeric strings coerce to int/float (``"12"`` → ``12``, ``"3.5"`` → ``3``
  for ints); non-finite values are rejected.
- int/float coerce to str.
- ``bool`` never crosses to or from another scalar kind.
- Containers ("arrays") never coerce to scalars and vice versa. A decoded
  JSON object (``dict``) or array (``list``) both count as an array.
- A missing key, or an explicit ``null``, yields the default.

Failure modes
-------------
Only :func:`decode_json_response` raises (``MalformedPayload`` /
``UnexpectedShape``); every other helper is total.
"""
from __future__ import annotations

import json
import math
from typing import Any, List, Mapping, Optional, Union

from .errors import MalformedPayload, UnexpectedShape

JsonArray = Union[dict, list]

_MISSING = object()


def _numeric(value: Any) -> Optional[Union[int, float]]:
    """Return ``value`` as a number when it is numeric, else ``None``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def _lookup(data: Any, key: str) -> Any:
    if isinstance(data, Mapping):
        value = data.get(key, _MISSING)
        return _MISSING if value is None else value
    return _MISSING


# ---- direct value coercion -------------------------------------------------


def as_string(value: Any, default: str = "") -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def as_int(value: Any, default: int = 0) -> int:
    number = _numeric(value)
    return default if number is None else int(number)


def as_float(value: Any, default: float = 0.0) -> float:
    number = _numeric(value)
    return default if number is None else float(number)


def as_bool(value: Any, default: bool = False) -> bool:
    return value if isinstance(value, bool) else default


def as_array(value: Any, default: Optional[JsonArray] = None) -> JsonArray:
    if isinstance(value, (dict, list)):
        return value
    return {} if default is None else default


def as_list(value: Any, default: Optional[List[Any]] = None) -> List[Any]:
    """Return ``value`` when it is a list (tuples are copied), else ``default`` or ``[]``."""
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [] if default is None else default


# ---- keyed lookups ---------------------------------------------------------


def get_string(data: Mapping[str, Any], key: str, default: str = "") -> str:
    value = _lookup(data, key)
    return default if value is _MISSING else as_string(value, default)


def get_int(data: Mapping[str, Any], key: str, default: int = 0) -> int:
    value = _lookup(data, key)
    return default if value is _MISSING else as_int(value, default)


def get_float(data: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    value = _lookup(data, key)
    return default if value is _MISSING else as_float(value, default)


def get_bool(data: Mapping[str, Any], key: str, default: bool = False) -> bool:
    value = _lookup(data, key)
    return default if value is _MISSING else as_bool(value, default)


def get_array(data: Mapping[str, Any], key: str, default: Optional[JsonArray] = None) -> JsonArray:
    value = _lookup(data, key)
    return as_array(None if value is _MISSING else value, default)


def get_list(data: Mapping[str, Any], key: str) -> List[Any]:
    """Return the list at ``key``; absence or a non-list value yields ``[]``."""
    value = _lookup(data, key)
    return [] if value is _MISSING else as_list(value)


def get_nullable_string(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = _lookup(data, key)
    if value is _MISSING:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def get_nullable_int(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = _lookup(data, key)
    if value is _MISSING:
        return None
    number = _numeric(value)
    return None if number is None else int(number)


# ---- dotted-path lookups ---------------------------------------------------


def _walk(data: Any, path: str) -> Any:
    """Follow a dot-separated path; list segments must be integer indexes."""
    current = data
    for segment in path.split("."):
        if isinstance(current, Mapping):
            if segment not in current:
                return _MISSING
            current = current[segment]
        elif isinstance(current, list):
            if not segment.isdigit() or int(segment) >= len(current):
                return _MISSING
            current = current[int(segment)]
        else:
            return _MISSING
    return _MISSING if current is None else current


def get_nested_array(data: Mapping[str, Any], path: str, default: Optional[JsonArray] = None) -> JsonArray:
    value = _walk(data, path)
    return as_array(None if value is _MISSING else value, default)


def get_nested_string(data: Mapping[str, Any], path: str, default: str = "") -> str:
    value = _walk(data, path)
    return default if value is _MISSING else as_string(value, default)


def get_nested_int(data: Mapping[str, Any], path: str, default: int = 0) -> int:
    value = _walk(data, path)
    return default if value is _MISSING else as_int(value, default)


# ---- strict decoding -------------------------------------------------------


def decode_json_response(text: Union[str, bytes], provider: str = "") -> JsonArray:
    """Decode a response body into a JSON object or array.

    Raises:
        MalformedPayload: ``text`` is not valid JSON.
        UnexpectedShape: the document is a bare scalar (string, number, bool,
            null). Top-level arrays are accepted.
    """
    try:
        decoded = json.loads(text)
    except (ValueError, TypeError) as exc:
        raise MalformedPayload(f"Invalid JSON in provider response: {exc}", provider=provider, raw=exc) from exc
    if not isinstance(decoded, (dict, list)):
        raise UnexpectedShape(
            f"Expected JSON object, got {type(decoded).__name__}", provider=provider
        )
    return decoded


__all__ = [
    "as_string",
    "as_int",
    "as_float",
    "as_bool",
    "as_array",
    "as_list",
    "get_string",
    "get_int",
    "get_float",
    "get_bool",
    "get_array",
    "get_list",
    "get_nullable_string",
    "get_nullable_int",
    "get_nested_array",
    "get_nested_string",
    "get_nested_int",
    "decode_json_response",
]
