"""Typed DTOs used at the configuration boundary."""

from .adapter_config import AdapterConfig
from .provider_record import ModelRecord, ProviderRecord

__all__ = ["AdapterConfig", "ModelRecord", "ProviderRecord"]
