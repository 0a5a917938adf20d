"""Typed adapter configuration built from a flat ``configure()`` options map.

Purpose
-------
Capture the settings every adapter shares (credential, endpoint, timeout,
retry budget, default model) in one validated object, while keeping the
vendor-specific options available in ``extra``.

External dependencies
---------------------
- Pydantic v2 ``BaseModel`` for the typed container and ``model_copy``.

Failure modes & side effects
----------------------------
- :meth:`AdapterConfig.from_options` never raises: raw option values are
  coerced through the safe accessor first, so a wrongly-typed value falls
  back to its default instead of failing validation. Missing credentials are
  reported later, at call time, by the adapter.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping

from pydantic import BaseModel, Field

from .. import accessor
from ...config.defaults import DEFAULT_MAX_RETRIES
from ..timeouts import get_default_timeout, resolve_timeouts


class AdapterConfig(BaseModel):
    """Common adapter settings.

    Attributes
    ----------
    api_key:
        Literal credential. Wins over ``api_key_identifier`` when both are set.
    api_key_identifier:
        Name resolved through the adapter's secret resolver.
    base_url:
        API root without trailing slash.
    timeout:
        Per-attempt timeout in seconds (send timeout; connect is capped).
    max_retries:
        Total attempts made by the request loop, at least 1.
    default_model:
        Model used when a call does not name one; empty means vendor default.
    organization_id:
        Optional tenant header value (OpenAI, Azure).
    extra:
        The full options map, for vendor-specific keys.
    """

    api_key: str = ""
    api_key_identifier: str = ""
    base_url: str = ""
    timeout: int = Field(default_factory=get_default_timeout)
    max_retries: int = DEFAULT_MAX_RETRIES
    default_model: str = ""
    organization_id: str = ""
    extra: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_options(cls, options: Mapping[str, Any], default_base_url: str = "") -> "AdapterConfig":
        """Build a config with full-replace semantics from a flat options map.

        Recognized keys: apiKey, apiKeyIdentifier, baseUrl, timeout,
        maxRetries, defaultModel, organizationId. Others are kept in ``extra``.
        """
        opts = dict(options or {})
        base_url = accessor.get_string(opts, "baseUrl", "").strip() or default_base_url
        timeout = accessor.get_int(opts, "timeout", get_default_timeout())
        return cls(
            api_key=accessor.get_string(opts, "apiKey", ""),
            api_key_identifier=accessor.get_string(opts, "apiKeyIdentifier", ""),
            base_url=base_url.rstrip("/"),
            timeout=timeout if timeout > 0 else get_default_timeout(),
            max_retries=max(1, accessor.get_int(opts, "maxRetries", DEFAULT_MAX_RETRIES)),
            default_model=accessor.get_string(opts, "defaultModel", ""),
            organization_id=accessor.get_string(opts, "organizationId", ""),
            extra=opts,
        )

    @property
    def connect_timeout(self) -> float:
        return resolve_timeouts(self.timeout).connect

    @property
    def send_timeout(self) -> float:
        return resolve_timeouts(self.timeout).send


__all__ = ["AdapterConfig"]
