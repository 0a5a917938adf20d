"""OpenRouter aggregator adapter."""

from .client import OpenRouterAdapter

__all__ = ["OpenRouterAdapter"]
