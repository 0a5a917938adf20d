"""Model routing for aggregator adapters.

Purpose
-------
Pick which upstream model serves a request when one adapter can reach many
(OpenRouter), and drive the ordered fallback sequence when the chosen model
fails.

Selection
---------
1. An explicit ``model`` option always wins.
2. ``explicit`` strategy returns the configured default model verbatim.
3. The cached catalog is filtered by the requested constraints
   (``min_context``, ``vision_required``, ``function_calling``).
4. An empty catalog (fetch failed or returned nothing) or an empty candidate
   set falls back to the default model. Selection never raises.
5. Remaining candidates are ranked by strategy and the best one wins:

   ``cost_optimized``
       Ascending combined prompt + completion price.
   ``performance``
       Price/tier proxy for latency: ids naming a light tier (flash, haiku,
       turbo, instant, mini) first, then cheapest. This is an approximation;
       no latency is measured.
   ``balanced``
       Drops the cheapest and the most expensive candidate (when at least
       three remain), then prefers multimodal + function-calling entries,
       then mid-tier names (sonnet, medium, 3.5, pro), then lower price.

Catalog cache
-------------
Fetched lazily on first use and kept for the engine's lifetime; only
``force_refresh`` refetches. A failed fetch is logged and not cached.

Fallback
--------
With ``auto_fallback`` enabled, :meth:`RoutingEngine.run_with_fallback` tries
the primary model and then each fallback model in order, moving on only for
fallback-eligible failures (exhausted retries, 429/503, "overloaded").
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, TypeVar

from .. import accessor
from ..errors import ProviderError
from ..logging import LogContext, get_logger, log_event, normalized_log_event
from ..models import ModelDescriptor
from ..resilience.fallback import run_fallback_chain
from ...config.defaults import OPENROUTER_DEFAULT_VISION_MODEL, OPENROUTER_VISION_MODELS

T = TypeVar("T")

LIGHT_TIER_KEYWORDS = ("flash", "haiku", "turbo", "instant", "mini")
MID_TIER_KEYWORDS = ("sonnet", "medium", "3.5", "pro")

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})


class RoutingStrategy(str, Enum):
    COST_OPTIMIZED = "cost_optimized"
    PERFORMANCE = "performance"
    BALANCED = "balanced"
    EXPLICIT = "explicit"

    @classmethod
    def parse(cls, value: Any) -> "RoutingStrategy":
        """Map a configured value onto a strategy; unknown values become ``BALANCED``."""
        if isinstance(value, cls):
            return value
        text = accessor.as_string(value, "").strip().lower()
        for strategy in cls:
            if strategy.value == text:
                return strategy
        return cls.BALANCED


def parse_flag(value: Any, default: bool = False) -> bool:
    """Coerce a configured flag; accepts bools, numbers and truthy strings."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return default


def parse_model_list(value: Any) -> List[str]:
    """Comma-separated string (or list) → trimmed ids, empty entries dropped."""
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    else:
        items = accessor.as_list(value)
    return [text for text in (accessor.as_string(item).strip() for item in items) if text]


def _has_keyword(model_id: str, keywords: Sequence[str]) -> bool:
    lowered = model_id.lower()
    return any(keyword in lowered for keyword in keywords)


class RoutingEngine:
    """Catalog cache, strategy ranking and fallback driver for one adapter.

    Parameters
    ----------
    fetch_catalog:
        Returns the vendor's model catalog; may raise ``ProviderError``.
    default_model:
        Used for the ``explicit`` strategy and whenever ranking cannot run.
    strategy, auto_fallback, fallback_models:
        See :meth:`configure`.
    """

    def __init__(
        self,
        fetch_catalog: Callable[[], Sequence[ModelDescriptor]],
        default_model: str,
        strategy: Any = RoutingStrategy.BALANCED,
        auto_fallback: bool = True,
        fallback_models: Any = (),
        *,
        provider: str = "openrouter",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._fetch_catalog = fetch_catalog
        self._catalog: Optional[List[ModelDescriptor]] = None
        self._provider = provider
        self._logger = logger or get_logger("providers.routing")
        self.default_model = default_model
        self.strategy = RoutingStrategy.BALANCED
        self.auto_fallback = True
        self.fallback_models: List[str] = []
        self.configure(default_model, strategy, auto_fallback, fallback_models)

    def configure(
        self,
        default_model: str,
        strategy: Any = RoutingStrategy.BALANCED,
        auto_fallback: Any = True,
        fallback_models: Any = (),
    ) -> None:
        """Replace routing settings; the catalog cache is kept."""
        self.default_model = default_model
        self.strategy = RoutingStrategy.parse(strategy)
        self.auto_fallback = parse_flag(auto_fallback, default=True)
        self.fallback_models = parse_model_list(fallback_models)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    def catalog(self, force_refresh: bool = False) -> List[ModelDescriptor]:
        if self._catalog is not None and not force_refresh:
            return list(self._catalog)
        try:
            fetched = list(self._fetch_catalog())
        except ProviderError as exc:
            log_event(
                self._logger,
                "routing.catalog_error",
                LogContext(provider=self._provider),
                level=logging.WARNING,
                error_code=exc.code.value,
                message=exc.message,
            )
            return []
        self._catalog = fetched
        return list(fetched)

    def clear_catalog(self) -> None:
        self._catalog = None

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    @staticmethod
    def filter(
        candidates: Sequence[ModelDescriptor],
        *,
        min_context: int = 0,
        vision_required: bool = False,
        function_calling: bool = False,
    ) -> List[ModelDescriptor]:
        selected = list(candidates)
        if min_context > 0:
            selected = [m for m in selected if m.context_length >= min_context]
        if vision_required:
            selected = [m for m in selected if m.is_multimodal]
        if function_calling:
            selected = [m for m in selected if m.supports_function_calling]
        return selected

    def rank(
        self, candidates: Sequence[ModelDescriptor], strategy: Optional[RoutingStrategy] = None
    ) -> List[ModelDescriptor]:
        """Order candidates best-first for ``strategy`` (default: configured)."""
        strategy = strategy or self.strategy
        models = list(candidates)
        if strategy is RoutingStrategy.COST_OPTIMIZED:
            return sorted(models, key=lambda m: m.combined_cost)
        if strategy is RoutingStrategy.PERFORMANCE:
            return sorted(models, key=lambda m: (not _has_keyword(m.id, LIGHT_TIER_KEYWORDS), m.combined_cost))
        if strategy is RoutingStrategy.BALANCED:
            return self._rank_balanced(models)
        return [m for m in models if m.id == self.default_model]

    @staticmethod
    def _rank_balanced(models: List[ModelDescriptor]) -> List[ModelDescriptor]:
        if len(models) >= 3:
            by_cost = sorted(models, key=lambda m: m.combined_cost)
            cheapest, priciest = by_cost[0], by_cost[-1]
            models = [m for m in models if m is not cheapest and m is not priciest]

        def _key(model: ModelDescriptor):
            capable = model.is_multimodal and model.supports_function_calling
            return (not capable, not _has_keyword(model.id, MID_TIER_KEYWORDS), model.combined_cost)

        return sorted(models, key=_key)

    def select(self, options: Optional[Mapping[str, Any]] = None) -> str:
        """Return the model id to use for a call with ``options``."""
        opts = options or {}
        explicit = accessor.get_string(opts, "model")
        if explicit:
            return explicit
        if self.strategy is RoutingStrategy.EXPLICIT:
            return self.default_model
        models = self.catalog()
        if not models:
            return self._selected(self.default_model, "empty_catalog")
        candidates = self.filter(
            models,
            min_context=accessor.get_int(opts, "min_context"),
            vision_required=parse_flag(opts.get("vision_required")),
            function_calling=parse_flag(opts.get("function_calling")),
        )
        if not candidates:
            return self._selected(self.default_model, "no_candidates")
        ranked = self.rank(candidates)
        return self._selected(ranked[0].id if ranked else self.default_model, "ranked")

    def _selected(self, model: str, reason: str) -> str:
        normalized_log_event(
            self._logger,
            "routing.select",
            LogContext(provider=self._provider, model=model),
            phase="route",
            strategy=self.strategy.value,
            reason=reason,
        )
        return model

    def select_vision_model(self) -> str:
        """Default model when the catalog marks it multimodal, else a preferred vision model."""
        models = {m.id: m for m in self.catalog()}
        default = models.get(self.default_model)
        if default is not None and default.is_multimodal:
            return self.default_model
        for model_id in OPENROUTER_VISION_MODELS:
            if not models or model_id in models:
                return model_id
        return OPENROUTER_DEFAULT_VISION_MODEL

    # ------------------------------------------------------------------
    # Fallback
    # ------------------------------------------------------------------
    def attempt_chain(self, primary: str) -> List[str]:
        chain = [primary]
        if self.auto_fallback:
            chain.extend(m for m in self.fallback_models if m not in chain)
        return chain

    def run_with_fallback(self, primary: str, call: Callable[[str], T]) -> T:
        """Run ``call(model)`` for the primary model, then each fallback in order."""

        def _on_fallback(failed: str, following: str, error: ProviderError) -> None:
            normalized_log_event(
                self._logger,
                "routing.fallback",
                LogContext(provider=self._provider, model=following),
                phase="fallback",
                error_code=error.code.value,
                failed_model=failed,
                level=logging.WARNING,
            )

        return run_fallback_chain(self.attempt_chain(primary), call, on_fallback=_on_fallback)

    def payload_hints(self, model: str) -> dict:
        """Vendor-side fallback hints merged into chat payloads."""
        if not self.auto_fallback:
            return {}
        hints: dict = {"route": "fallback"}
        if self.fallback_models:
            hints["models"] = self.attempt_chain(model)
        return hints


__all__ = [
    "RoutingEngine",
    "RoutingStrategy",
    "LIGHT_TIER_KEYWORDS",
    "MID_TIER_KEYWORDS",
    "parse_flag",
    "parse_model_list",
]
