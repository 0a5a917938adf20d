"""RoutingEngine selection, ranking, catalog caching and fallback."""
from __future__ import annotations

import pytest

from llm_adapters.base.errors import ProviderRejected, ProviderUnreachable
from llm_adapters.base.models import ModelDescriptor
from llm_adapters.base.routing import RoutingEngine, RoutingStrategy, parse_flag, parse_model_list

DEFAULT = "default/model"

CHEAP = ModelDescriptor(id="meta/llama-mini", prompt_cost=0.1, completion_cost=0.1, context_length=8000)
MID = ModelDescriptor(
    id="anthropic/claude-sonnet",
    prompt_cost=3.0,
    completion_cost=15.0,
    context_length=200000,
    supports_function_calling=True,
    modality="multimodal",
)
PRICEY = ModelDescriptor(
    id="openai/gpt-big",
    prompt_cost=10.0,
    completion_cost=30.0,
    context_length=400000,
    supports_function_calling=True,
    modality="multimodal",
)
FLASH = ModelDescriptor(id="google/gemini-flash", prompt_cost=0.5, completion_cost=1.0, context_length=1000000)
TEXT_ONLY = ModelDescriptor(id="mistral/medium", prompt_cost=2.0, completion_cost=6.0, context_length=32000)


class CountingCatalog:
    def __init__(self, models=(), error=None):
        self.models = list(models)
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.models)


def engine_with(models, strategy="balanced", **kwargs):
    catalog = CountingCatalog(models)
    return RoutingEngine(catalog, DEFAULT, strategy, **kwargs), catalog


def test_explicit_model_option_always_wins():
    engine, catalog = engine_with([CHEAP, MID])
    assert engine.select({"model": "pinned/one"}) == "pinned/one"  # nosec B101
    assert catalog.calls == 0  # nosec B101


def test_explicit_strategy_uses_default_without_catalog():
    engine, catalog = engine_with([CHEAP], "explicit")
    assert engine.select({}) == DEFAULT  # nosec B101
    assert catalog.calls == 0  # nosec B101


def test_cost_optimized_picks_cheapest():
    engine, _ = engine_with([PRICEY, MID, CHEAP], "cost_optimized")
    assert engine.select() == CHEAP.id  # nosec B101


def test_performance_prefers_light_tier_names():
    engine, _ = engine_with([MID, FLASH, PRICEY, CHEAP], "performance")
    ranked = [m.id for m in engine.rank([MID, FLASH, PRICEY, CHEAP])]
    assert ranked == [CHEAP.id, FLASH.id, MID.id, PRICEY.id]  # nosec B101


def test_balanced_drops_extremes_and_prefers_capable_models():
    engine, _ = engine_with([CHEAP, TEXT_ONLY, MID, PRICEY, FLASH])
    ranked = [m.id for m in engine.rank([CHEAP, TEXT_ONLY, MID, PRICEY, FLASH])]
    assert CHEAP.id not in ranked and PRICEY.id not in ranked  # nosec B101
    assert ranked[0] == MID.id  # nosec B101
    assert ranked[1] == TEXT_ONLY.id  # nosec B101


def test_balanced_keeps_small_candidate_sets():
    engine, _ = engine_with([])
    assert [m.id for m in engine.rank([CHEAP, PRICEY])] == [PRICEY.id, CHEAP.id]  # nosec B101


def test_filters_constrain_candidates():
    engine, _ = engine_with([CHEAP, MID, PRICEY, TEXT_ONLY], "cost_optimized")
    assert engine.select({"min_context": 300000}) == PRICEY.id  # nosec B101
    assert engine.select({"vision_required": True}) == MID.id  # nosec B101
    assert engine.select({"function_calling": "true"}) == MID.id  # nosec B101
    assert engine.select({"min_context": 10**9}) == DEFAULT  # nosec B101


def test_catalog_is_cached_until_forced(log_events):
    engine, catalog = engine_with([CHEAP], "cost_optimized")
    engine.select()
    engine.select()
    assert catalog.calls == 1  # nosec B101
    catalog.models = [MID]
    assert [m.id for m in engine.catalog(force_refresh=True)] == [MID.id]  # nosec B101
    assert catalog.calls == 2  # nosec B101
    engine.clear_catalog()
    engine.catalog()
    assert catalog.calls == 3  # nosec B101
    selected = [e for e in log_events if e["event"] == "routing.select"]
    assert selected[0]["reason"] == "ranked"  # nosec B101


def test_failed_catalog_is_not_cached_and_never_raises(log_events):
    catalog = CountingCatalog(error=ProviderUnreachable("down", provider="openrouter", attempts=3))
    engine = RoutingEngine(catalog, DEFAULT, "cost_optimized")
    assert engine.select() == DEFAULT  # nosec B101
    assert engine.select() == DEFAULT  # nosec B101
    assert catalog.calls == 2  # nosec B101
    assert any(e["event"] == "routing.catalog_error" for e in log_events)  # nosec B101


def test_vision_model_selection():
    engine, _ = engine_with([MID, CHEAP])
    engine.configure(MID.id)
    assert engine.select_vision_model() == MID.id  # nosec B101

    engine.configure(CHEAP.id)
    assert engine.select_vision_model() == "openai/gpt-5.2"  # nosec B101

    empty, _ = engine_with([])
    assert empty.select_vision_model() == "anthropic/claude-sonnet-4-5"  # nosec B101


def test_attempt_chain_and_payload_hints():
    engine, _ = engine_with([], fallback_models="b, a ,,c")
    assert engine.fallback_models == ["b", "a", "c"]  # nosec B101
    assert engine.attempt_chain("a") == ["a", "b", "c"]  # nosec B101
    assert engine.payload_hints("a") == {"route": "fallback", "models": ["a", "b", "c"]}  # nosec B101

    engine.configure(DEFAULT, auto_fallback=False, fallback_models=["b"])
    assert engine.attempt_chain("a") == ["a"]  # nosec B101
    assert engine.payload_hints("a") == {}  # nosec B101


def test_run_with_fallback_moves_on_for_eligible_failures():
    engine, _ = engine_with([], fallback_models=["second", "third"])
    tried = []

    def call(model):
        tried.append(model)
        if model != "third":
            raise ProviderUnreachable("busy", provider="openrouter", attempts=1)
        return "ok"

    assert engine.run_with_fallback("first", call) == "ok"  # nosec B101
    assert tried == ["first", "second", "third"]  # nosec B101


def test_run_with_fallback_stops_on_rejection():
    engine, _ = engine_with([], fallback_models=["second"])
    tried = []

    def call(model):
        tried.append(model)
        raise ProviderRejected("Invalid key", provider="openrouter", status_code=401)

    with pytest.raises(ProviderRejected):
        engine.run_with_fallback("first", call)
    assert tried == ["first"]  # nosec B101


def test_strategy_parsing():
    assert RoutingStrategy.parse("COST_OPTIMIZED") is RoutingStrategy.COST_OPTIMIZED  # nosec B101
    assert RoutingStrategy.parse("fastest") is RoutingStrategy.BALANCED  # nosec B101
    assert RoutingStrategy.parse(None) is RoutingStrategy.BALANCED  # nosec B101


@pytest.mark.parametrize(
    "value, expected",
    [(None, True), (True, True), (0, False), ("yes", True), ("off", False), ([], True)],
)
def test_parse_flag(value, expected):
    assert parse_flag(value, default=True) is expected  # nosec B101


def test_parse_model_list():
    assert parse_model_list(None) == []  # nosec B101
    assert parse_model_list(["x", " ", 3]) == ["x", "3"]  # nosec B101
