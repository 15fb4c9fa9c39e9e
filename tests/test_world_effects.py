"""
World effect tests: caps, expiry and weighted market impact
"""
import pytest

from contract_engine.types import ContractBalanceConfig, ContractWorldEffect, MarketComponent
from contract_engine.world_effects import WorldEffectsManager


def _effect(magnitude, component=MarketComponent.MARKETING, rival="r1", category="cloud", quarters=2, effect_id="e"):
    return ContractWorldEffect(
        effect_id=effect_id,
        issuing_rival_id=rival,
        target_category_id=category,
        component=component,
        magnitude=magnitude,
        duration_quarters=quarters,
        quarters_remaining=quarters,
    )


def test_effect_over_total_cap_is_rejected_and_list_unchanged():
    mgr = WorldEffectsManager(ContractBalanceConfig())
    assert mgr.add_effect(_effect(0.06, MarketComponent.MARKETING, effect_id="a"))
    assert mgr.add_effect(_effect(0.04, MarketComponent.PRICE, effect_id="b"))
    assert mgr.get_total_effect("r1", "cloud") == pytest.approx(0.10)

    before = mgr.active_effects
    assert not mgr.add_effect(_effect(0.05, MarketComponent.QUALITY, effect_id="c"))
    assert mgr.active_effects == before
    assert mgr.get_total_effect("r1", "cloud") == pytest.approx(0.10)


def test_component_cap_is_enforced_on_insert():
    mgr = WorldEffectsManager(ContractBalanceConfig())
    assert mgr.add_effect(_effect(0.05))
    assert not mgr.add_effect(_effect(0.04))
    assert mgr.get_component_effect("r1", "cloud", MarketComponent.MARKETING) == pytest.approx(0.05)


def test_caps_are_per_issuer_and_category():
    mgr = WorldEffectsManager(ContractBalanceConfig())
    assert mgr.add_effect(_effect(0.06, rival="r1"))
    assert mgr.add_effect(_effect(0.06, rival="r2"))
    assert mgr.add_effect(_effect(0.06, rival="r1", category="ai"))
    assert len(mgr.active_effects) == 3


def test_duration_is_clamped_to_max_quarters():
    mgr = WorldEffectsManager(ContractBalanceConfig(max_effect_duration_quarters=4))
    effect = _effect(0.03, quarters=9)
    assert mgr.add_effect(effect)
    [stored] = mgr.active_effects
    assert stored.duration_quarters == stored.quarters_remaining == 4
    assert effect.duration_quarters == effect.quarters_remaining == 9


def test_manager_owns_its_records():
    mgr = WorldEffectsManager()
    effect = _effect(0.03, quarters=2)
    assert mgr.add_effect(effect)

    mgr.process_quarter_tick()
    assert effect.quarters_remaining == 2
    assert mgr.active_effects[0].quarters_remaining == 1

    mgr.active_effects[0].magnitude = 0.5
    assert mgr.get_total_effect("r1", "cloud") == pytest.approx(0.03)


def test_quarter_tick_expires_effects():
    mgr = WorldEffectsManager()
    mgr.add_effect(_effect(0.03, quarters=1, effect_id="short"))
    mgr.add_effect(_effect(0.03, MarketComponent.PRICE, quarters=2, effect_id="long"))

    expired = mgr.process_quarter_tick()
    assert [e.effect_id for e in expired] == ["short"]
    assert [e.effect_id for e in mgr.active_effects] == ["long"]

    mgr.process_quarter_tick()
    assert mgr.active_effects == []
    assert mgr.get_total_effect("r1", "cloud") == 0.0


def test_weighted_effect_applies_component_weights():
    mgr = WorldEffectsManager()
    mgr.add_effect(_effect(0.04, MarketComponent.MARKETING))
    mgr.add_effect(_effect(0.02, MarketComponent.PRICE))

    assert mgr.get_all_component_effects("r1", "cloud") == {
        MarketComponent.MARKETING: pytest.approx(0.04),
        MarketComponent.PRICE: pytest.approx(0.02),
    }
    assert mgr.get_weighted_effect("r1", "cloud") == pytest.approx(0.25 * 0.04 + 0.15 * 0.02)


def test_none_effect_is_ignored_and_removal_by_rival():
    mgr = WorldEffectsManager()
    assert not mgr.add_effect(None)
    mgr.add_effect(_effect(0.03, rival="r1"))
    mgr.add_effect(_effect(0.03, rival="r2"))
    assert mgr.remove_effects_for_rival("r1") == 1
    assert [e.issuing_rival_id for e in mgr.active_effects] == ["r2"]
    mgr.clear_all_effects()
    assert mgr.active_effects == []
