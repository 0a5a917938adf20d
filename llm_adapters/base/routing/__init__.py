"""Model routing and fallback for aggregator adapters."""

from .engine import (
    LIGHT_TIER_KEYWORDS,
    MID_TIER_KEYWORDS,
    RoutingEngine,
    RoutingStrategy,
    parse_flag,
    parse_model_list,
)

__all__ = [
    "RoutingEngine",
    "RoutingStrategy",
    "LIGHT_TIER_KEYWORDS",
    "MID_TIER_KEYWORDS",
    "parse_flag",
    "parse_model_list",
]
