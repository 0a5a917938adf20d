"""External provider/model configuration records consumed by the registry.

Persistence of these records is out of scope; callers load them from
wherever they live and hand them over as plain DTOs. The registry only reads
them.

External dependencies
---------------------
- Pydantic v2 ``BaseModel``; unknown fields are ignored.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class ProviderRecord(BaseModel):
    """One configured vendor endpoint.

    Attributes
    ----------
    uid:
        Stable identity used as the registry cache key; ``None`` for records
        that were never persisted (never cached).
    identifier:
        Human-chosen slug (e.g. ``"openai-prod"``).
    adapter_type:
        Registry key selecting the adapter class (``"openai"``, ``"ollama"``, ...).
    endpoint_url:
        Optional custom base URL; empty means the adapter type's default.
    api_key:
        Literal credential, when the caller resolves secrets itself.
    api_key_identifier:
        Secret name handed to the registry's secret resolver.
    organization_id, timeout, max_retries:
        Copied into the adapter config.
    options:
        JSON object string with vendor-specific options merged last.
    """

    uid: Optional[int] = None
    identifier: str = ""
    name: str = ""
    adapter_type: str = "openai"
    endpoint_url: str = ""
    api_key: str = ""
    api_key_identifier: str = ""
    organization_id: str = ""
    timeout: int = 30
    max_retries: int = 3
    options: str = ""
    is_active: bool = True

    def options_dict(self) -> Dict[str, Any]:
        """Decode ``options``; malformed or non-object JSON yields ``{}``."""
        if not self.options.strip():
            return {}
        try:
            decoded = json.loads(self.options)
        except ValueError:
            return {}
        return decoded if isinstance(decoded, dict) else {}


class ModelRecord(BaseModel):
    """A concrete model offered by a configured provider."""

    model_config = ConfigDict(protected_namespaces=())

    uid: Optional[int] = None
    identifier: str = ""
    model_id: str
    provider: Optional[ProviderRecord] = None


__all__ = ["ProviderRecord", "ModelRecord"]
