
import json
import pytest
from feedrank.scoring.registry import DEFAULT_REGISTRY, FactorRegistry, build_definition
from feedrank.scoring.selector import select_factors

@pytest.fixture
def registry():
    return FactorRegistry([
        build_definition("first", "feature_a", [(0, 1.0), (1, 0.5)], 0.1),
        build_definition("second", "feature_b", [(0, 0.9)], 1.0),
        build_definition("third", "feature_c", [(3, 0.3)], 0.7),
    ])

def test_empty_selection_selects_all(registry):
    assert [f.name for f in select_factors(registry)] == ["first", "second", "third"]
    assert [f.name for f in select_factors(registry, [])] == ["first", "second", "third"]
    assert [f.name for f in select_factors(registry, None)] == ["first", "second", "third"]

def test_selection_follows_registry_order(registry):
    """指定順ではなくレジストリの宣言順になること"""
    active = select_factors(registry, ["third", "first"])
    assert [f.name for f in active] == ["first", "third"]

def test_unknown_names_are_ignored(registry):
    with_unknown = select_factors(registry, ["second", "bogus"])
    without = select_factors(registry, ["second"])
    assert with_unknown == without

def test_only_unknown_names_behaves_like_no_selection(registry):
    assert select_factors(registry, ["bogus"]) == select_factors(registry)

def test_single_name_string(registry):
    assert [f.name for f in select_factors(registry, "second")] == ["second"]

def test_override_replaces_steps_and_fallback(registry):
    active = select_factors(
        registry, ["first"],
        {"first": {"steps": [(0, 0.2)], "fallback_weight": 0.4}},
    )
    assert len(active) == 1
    assert active[0].steps[0].weight == 0.2
    assert active[0].fallback_weight == 0.4
    assert active[0].feature_key == "feature_a"

def test_override_cannot_change_feature_key(registry):
    """呼び出し側から読む特徴量を差し替えられないこと"""
    active = select_factors(
        registry, ["first"],
        {"first": {"feature_key": "feature_z", "steps": [(0, 0.2)], "fallback_weight": 0.4}},
    )
    assert active[0].feature_key == "feature_a"
    assert active[0].fallback_weight == 0.4

@pytest.mark.parametrize("override", [
    {"steps": [(0, 0.2)]},
    {"fallback_weight": 0.3},
    {"steps": [(0, 0.2), (0, 0.3)], "fallback_weight": 0.3},
    {"steps": [(0, "x")], "fallback_weight": 0.3},
    "not a mapping",
    None,
])
def test_partial_or_invalid_override_reverts_to_default(registry, override):
    active = select_factors(registry, ["first"], {"first": override})
    assert active == [registry.get("first")]

def test_override_for_unselected_factor_is_ignored(registry):
    active = select_factors(
        registry, ["second"],
        {"first": {"steps": [(0, 0.2)], "fallback_weight": 0.4}},
    )
    assert active == [registry.get("second")]

def test_registry_is_not_mutated_by_overrides():
    before = DEFAULT_REGISTRY.get("spaminess_factor")
    select_factors(DEFAULT_REGISTRY, overrides={
        "spaminess_factor": {"steps": [(0, 0.5)], "fallback_weight": 0.5},
    })
    assert DEFAULT_REGISTRY.get("spaminess_factor") is before
    assert before.fallback_weight == 0.05

def test_nan_override_reverts_to_default(registry):
    """JSON由来のNaNを含む上書きは無視され、デフォルト定義が使われること"""
    override = json.loads('{"steps": [[0, NaN], [1, 0.9]], "fallback_weight": 0}')
    active = select_factors(registry, ["first"], {"first": override})
    assert active == [registry.get("first")]
