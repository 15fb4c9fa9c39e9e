from __future__ import annotations

"""Bounded world effects from delivered rival contracts.

Effects are keyed by value (issuer, category, component). Caps are enforced on
insert and again on every component query. The manager keeps its own copy of
every effect it accepts; the caller's record is never mutated.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional

from .types import MARKET_COMPONENT_WEIGHTS, ContractBalanceConfig, ContractWorldEffect, MarketComponent

logger = logging.getLogger(__name__)


class WorldEffectsManager:
    def __init__(self, config: Optional[ContractBalanceConfig] = None) -> None:
        self._config = config or ContractBalanceConfig()
        self._effects: List[ContractWorldEffect] = []

    @property
    def active_effects(self) -> List[ContractWorldEffect]:
        """Snapshot copies; editing them never touches the managed records."""
        return [replace(e) for e in self._effects]

    def _matching(self, rival_id: str, category_id: str) -> List[ContractWorldEffect]:
        return [
            e
            for e in self._effects
            if e.issuing_rival_id == rival_id and e.target_category_id == category_id and not e.is_expired
        ]

    def validate(self, effect: ContractWorldEffect) -> bool:
        cfg = self._config
        total = self.get_total_effect(effect.issuing_rival_id, effect.target_category_id)
        if total + effect.magnitude > cfg.max_total_effect_per_company_category:
            logger.warning(
                "world effect rejected: total cap exceeded for %s in %s (%.3f + %.3f > %.3f)",
                effect.issuing_rival_id,
                effect.target_category_id,
                total,
                effect.magnitude,
                cfg.max_total_effect_per_company_category,
            )
            return False

        component = self.get_component_effect(effect.issuing_rival_id, effect.target_category_id, effect.component)
        if component + effect.magnitude > cfg.max_effect_per_component_per_company_category:
            logger.warning(
                "world effect rejected: %s cap exceeded for %s in %s",
                effect.component.value,
                effect.issuing_rival_id,
                effect.target_category_id,
            )
            return False
        return True

    def add_effect(self, effect: Optional[ContractWorldEffect]) -> bool:
        if effect is None:
            return False
        if not self.validate(effect):
            return False

        effect = replace(effect)
        max_q = int(self._config.max_effect_duration_quarters)
        if effect.duration_quarters > max_q:
            effect.duration_quarters = max_q
            effect.quarters_remaining = max_q

        self._effects.append(effect)
        logger.info(
            "world effect added: %s +%.3f for %s in %s, %dQ",
            effect.component.value,
            effect.magnitude,
            effect.issuing_rival_id,
            effect.target_category_id,
            effect.duration_quarters,
        )
        return True

    def process_quarter_tick(self) -> List[ContractWorldEffect]:
        """Decrement every effect; returns the ones that expired."""
        expired: List[ContractWorldEffect] = []
        kept: List[ContractWorldEffect] = []
        for e in self._effects:
            e.quarters_remaining -= 1
            if e.is_expired:
                expired.append(e)
                logger.info("world effect expired: %s for %s", e.component.value, e.issuing_rival_id)
            else:
                kept.append(e)
        self._effects = kept
        return expired

    def get_total_effect(self, rival_id: str, category_id: str) -> float:
        return sum(e.magnitude for e in self._matching(rival_id, category_id))

    def get_component_effect(self, rival_id: str, category_id: str, component: MarketComponent) -> float:
        total = sum(e.magnitude for e in self._matching(rival_id, category_id) if e.component == component)
        return min(total, self._config.max_effect_per_component_per_company_category)

    def get_all_component_effects(self, rival_id: str, category_id: str) -> Dict[MarketComponent, float]:
        out: Dict[MarketComponent, float] = {}
        for component in MarketComponent:
            v = self.get_component_effect(rival_id, category_id, component)
            if v > 0.0:
                out[component] = v
        return out

    def get_weighted_effect(self, rival_id: str, category_id: str) -> float:
        """Effect on the issuer's market-quality score (component weights applied)."""
        return sum(
            MARKET_COMPONENT_WEIGHTS[c] * v for c, v in self.get_all_component_effects(rival_id, category_id).items()
        )

    def remove_effects_for_rival(self, rival_id: str) -> int:
        before = len(self._effects)
        self._effects = [e for e in self._effects if e.issuing_rival_id != rival_id]
        return before - len(self._effects)

    def clear_all_effects(self) -> None:
        self._effects.clear()
