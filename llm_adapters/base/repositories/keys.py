"""
Keys Repository

Purpose
- Turn an API key *identifier* (as stored on a provider record) into the
  secret value an adapter sends on the wire.
- Provide the abstract ``SecretResolver`` boundary the adapters depend on, so
  a real vault can be plugged in without touching adapter code.

Design
- Non-throwing accessors: an unresolvable identifier yields ``""`` (resolve)
  or ``None`` (get_api_key). Adapters treat an empty secret as "unavailable".
- Environment-backed by default. An identifier is resolved first as a vendor
  name through the env map in ``llm_adapters.config.env`` and then as a
  literal environment variable name. Placeholder values never resolve.

Usage
- repo = KeysRepository()
- key = repo.get_api_key("openai")
- secret = repo.resolve("MY_TEAM_OPENAI_KEY")
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable

from ...config.env import is_placeholder, resolve_provider_key


@runtime_checkable
class SecretResolver(Protocol):
    """Resolve a named secret to its value; empty string when unknown."""

    def resolve(self, identifier: str) -> str: ...


@dataclass
class KeyResolution:
    provider: str
    api_key: Optional[str]
    source: str  # "env", "env_var", "none"
    extra: Dict[str, Any] = field(default_factory=dict)


class KeysRepository:
    """
    Resolve credentials from the process environment with a strict order:

    1) Vendor env map (canonical variable, then aliases)
    2) Identifier used verbatim as an environment variable name
    3) Nothing

    This repository only reads values; it never mutates the environment.
    """

    def get_api_key(self, provider: str) -> Optional[str]:
        return self.get_resolution(provider).api_key

    def get_resolution(self, provider: str) -> KeyResolution:
        name = (provider or "").strip()
        val, used = resolve_provider_key(name.lower())
        if val:
            return KeyResolution(provider=name, api_key=val, source="env", extra={"env_var": used})
        direct = os.environ.get(name) if name else None
        if direct and not is_placeholder(direct):
            return KeyResolution(provider=name, api_key=direct, source="env_var", extra={"env_var": name})
        return KeyResolution(provider=name, api_key=None, source="none")

    def resolve(self, identifier: str) -> str:
        return self.get_api_key(identifier) or ""


class StaticSecretResolver:
    """In-memory resolver over a fixed mapping (wiring tests, embedded use)."""

    def __init__(self, secrets: Mapping[str, str] | None = None) -> None:
        self._secrets = dict(secrets or {})

    def resolve(self, identifier: str) -> str:
        return self._secrets.get(identifier, "")


__all__ = ["SecretResolver", "KeyResolution", "KeysRepository", "StaticSecretResolver"]
