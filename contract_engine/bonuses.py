from __future__ import annotations

"""Rewards for completed goals.

``BonusApplicator.apply_bonuses`` turns one goal's bonus list into a
``BonusResult``. Results combine with ``merge_bonus_results``; every field
declares its reducer, so merging is order-independent.

The only side effects are fire-and-forget requests to the sink: reputation
gain, morale boosts and burnout recovery for the assigned team. The legacy
``reputation_bonus`` and the perfect-contract reward publish the same requests,
so a host that only listens to the sink sees every reputation and morale change.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from . import config as c_cfg
from . import formulas as f
from .events import BurnoutChangeRequested, EventSink, MoraleChangeRequested, NullSink, ReputationChangeRequested
from .reducers import Reducer, merge, reduced
from .types import BonusDefinition, BonusType, Contract, GoalDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BonusResult:
    # financial
    total_payout_increase: float = reduced(Reducer.SUM, 0.0)
    base_payout_increase: float = reduced(Reducer.SUM, 0.0)
    flat_bonuses: float = reduced(Reducer.SUM, 0.0)
    efficiency_bonus: float = reduced(Reducer.SUM, 0.0)
    early_completion_multiplier: float = reduced(Reducer.SUM, 0.0)
    quality_bonus_multiplier: float = reduced(Reducer.SUM, 0.0)
    # reputation
    reputation_gain: float = reduced(Reducer.SUM, 0.0)
    reputation_multiplier: float = reduced(Reducer.SUM, 0.0)
    client_trust_bonus: float = reduced(Reducer.SUM, 0.0)
    high_tier_unlock_bonus: float = reduced(Reducer.SUM, 0.0)
    # employees
    xp_multiplier: float = reduced(Reducer.PRODUCT, 1.0)
    morale_boost: float = reduced(Reducer.SUM, 0.0)
    burnout_recovery: float = reduced(Reducer.SUM, 0.0)
    productivity_buff_percent: float = reduced(Reducer.MAX, 0.0)
    productivity_buff_days: int = reduced(Reducer.MAX, 0)
    skill_growth_multiplier: float = reduced(Reducer.SUM, 0.0)
    # company
    company_productivity_boost: float = reduced(Reducer.MAX, 0.0)
    company_productivity_boost_days: int = reduced(Reducer.MAX, 0)
    next_contract_burnout_reduction: float = reduced(Reducer.MAX, 0.0)
    burnout_reduction_days: int = reduced(Reducer.MAX, 0)
    contract_frequency_boost: float = reduced(Reducer.SUM, 0.0)
    frequency_boost_days: int = reduced(Reducer.MAX, 0)
    salary_growth_reduction: float = reduced(Reducer.SUM, 0.0)
    salary_reduction_duration: int = reduced(Reducer.MAX, 0)
    # special
    is_perfect_contract: bool = reduced(Reducer.ANY, False)
    streak_bonus_multiplier: float = reduced(Reducer.SUM, 0.0)
    client_satisfaction_bonus: float = reduced(Reducer.SUM, 0.0)


def merge_bonus_results(results: Iterable[BonusResult]) -> BonusResult:
    return merge(BonusResult, results)


def scaled_percent(bonus: BonusDefinition, contract: Contract, contract_value: float) -> float:
    v = bonus.percent_value
    if bonus.scale_by_difficulty:
        v *= f.bonus_difficulty_multiplier(contract.difficulty)
    if bonus.scale_by_contract_value:
        v *= f.contract_value_factor(contract_value)
    return v


def scaled_flat(bonus: BonusDefinition, contract: Contract, contract_value: float) -> float:
    v = bonus.flat_value
    if bonus.scale_by_difficulty:
        v *= f.bonus_difficulty_multiplier(contract.difficulty)
    if bonus.scale_by_contract_value:
        v *= f.contract_value_factor(contract_value)
    return v


# (bonus, contract, base_payout) -> result for that single bonus
BonusHandler = Callable[[BonusDefinition, Contract, float], BonusResult]


def _pct(b: BonusDefinition, c: Contract, base: float) -> float:
    return scaled_percent(b, c, base)


def _flat(b: BonusDefinition, c: Contract, base: float) -> float:
    return scaled_flat(b, c, base)


def _payout_increase(b: BonusDefinition, c: Contract, base: float) -> BonusResult:
    amount = base * _pct(b, c, base) / 100.0
    return BonusResult(total_payout_increase=amount, base_payout_increase=amount)


def _flat_bonus(b: BonusDefinition, c: Contract, base: float) -> BonusResult:
    amount = _flat(b, c, base)
    return BonusResult(total_payout_increase=amount, flat_bonuses=amount)


def _efficiency(b: BonusDefinition, c: Contract, base: float) -> BonusResult:
    amount = base * _pct(b, c, base) / 100.0
    return BonusResult(total_payout_increase=amount, efficiency_bonus=amount)


BONUS_HANDLERS: Dict[BonusType, BonusHandler] = {
    BonusType.INCREASE_BASE_PAYOUT: _payout_increase,
    BonusType.FLAT_BONUS: _flat_bonus,
    BonusType.EARLY_COMPLETION_MULTIPLIER: lambda b, c, base: BonusResult(
        early_completion_multiplier=_pct(b, c, base) / 100.0
    ),
    BonusType.QUALITY_BONUS_MULTIPLIER: lambda b, c, base: BonusResult(
        quality_bonus_multiplier=_pct(b, c, base) / 100.0
    ),
    BonusType.EFFICIENCY_BONUS: _efficiency,
    BonusType.REPUTATION_GAIN: lambda b, c, base: BonusResult(reputation_gain=_flat(b, c, base)),
    BonusType.REPUTATION_MULTIPLIER: lambda b, c, base: BonusResult(reputation_multiplier=_pct(b, c, base) / 100.0),
    BonusType.CLIENT_TRUST_BOOST: lambda b, c, base: BonusResult(client_trust_bonus=_pct(b, c, base)),
    BonusType.UNLOCK_HIGH_TIER_FASTER: lambda b, c, base: BonusResult(high_tier_unlock_bonus=_pct(b, c, base)),
    BonusType.EXTRA_XP: lambda b, c, base: BonusResult(xp_multiplier=1.0 + _pct(b, c, base) / 100.0),
    BonusType.MORALE_BOOST: lambda b, c, base: BonusResult(morale_boost=_flat(b, c, base)),
    BonusType.BURNOUT_RECOVERY: lambda b, c, base: BonusResult(burnout_recovery=_flat(b, c, base)),
    BonusType.PRODUCTIVITY_BUFF_NEXT: lambda b, c, base: BonusResult(
        productivity_buff_percent=_pct(b, c, base), productivity_buff_days=b.duration_days
    ),
    BonusType.SKILL_GROWTH_BOOST: lambda b, c, base: BonusResult(skill_growth_multiplier=_pct(b, c, base) / 100.0),
    BonusType.TEMPORARY_PRODUCTIVITY_BOOST: lambda b, c, base: BonusResult(
        company_productivity_boost=_pct(b, c, base), company_productivity_boost_days=b.duration_days
    ),
    BonusType.REDUCED_BURNOUT_ACCUMULATION: lambda b, c, base: BonusResult(
        next_contract_burnout_reduction=_pct(b, c, base) / 100.0, burnout_reduction_days=b.duration_days
    ),
    BonusType.INCREASED_CONTRACT_FREQUENCY: lambda b, c, base: BonusResult(
        contract_frequency_boost=_pct(b, c, base) / 100.0, frequency_boost_days=b.duration_days
    ),
    BonusType.REDUCED_SALARY_GROWTH: lambda b, c, base: BonusResult(
        salary_growth_reduction=_pct(b, c, base) / 100.0, salary_reduction_duration=b.duration_days
    ),
    # granted by apply_perfect_contract_bonus, not per goal
    BonusType.PERFECT_CONTRACT_BONUS: lambda b, c, base: BonusResult(),
    BonusType.STREAK_BONUS: lambda b, c, base: BonusResult(streak_bonus_multiplier=_pct(b, c, base) / 100.0),
    BonusType.CLIENT_SATISFACTION_BOOST: lambda b, c, base: BonusResult(client_satisfaction_bonus=_pct(b, c, base)),
}


class BonusApplicator:
    def __init__(self, sink: Optional[EventSink] = None, handlers: Dict[BonusType, BonusHandler] = BONUS_HANDLERS):
        self._sink = sink or NullSink()
        self._handlers = handlers

    def apply_single_bonus(self, contract: Contract, bonus: BonusDefinition, base_payout: float) -> BonusResult:
        handler = self._handlers.get(bonus.type)
        if handler is None:
            logger.warning("unknown bonus type: %r", bonus.type)
            return BonusResult()
        result = handler(bonus, contract, base_payout)
        self._publish_side_effects(contract, bonus.type, result)
        return result

    def _publish_side_effects(self, contract: Contract, bonus_type: BonusType, result: BonusResult) -> None:
        if bonus_type == BonusType.REPUTATION_GAIN and result.reputation_gain:
            self._sink.publish(
                ReputationChangeRequested(amount=result.reputation_gain, reason=f"bonus:{contract.contract_id}")
            )
        elif bonus_type == BonusType.MORALE_BOOST and result.morale_boost:
            for emp in contract.assigned_employee_ids:
                self._sink.publish(MoraleChangeRequested(employee_id=emp, amount=result.morale_boost))
        elif bonus_type == BonusType.BURNOUT_RECOVERY and result.burnout_recovery:
            for emp in contract.assigned_employee_ids:
                self._sink.publish(BurnoutChangeRequested(employee_id=emp, amount=-result.burnout_recovery))

    def apply_bonuses(self, contract: Contract, goal: GoalDefinition, base_payout: float) -> BonusResult:
        parts = [self.apply_single_bonus(contract, b, base_payout) for b in goal.bonuses]

        # legacy per-goal rewards
        if goal.bonus_percent > 0:
            parts.append(BonusResult(total_payout_increase=base_payout * goal.bonus_percent / 100.0))
        if goal.reputation_bonus > 0:
            parts.append(BonusResult(reputation_gain=goal.reputation_bonus))
            self._sink.publish(
                ReputationChangeRequested(amount=goal.reputation_bonus, reason=f"goal:{contract.contract_id}")
            )
        if goal.xp_multiplier > 1.0:
            parts.append(BonusResult(xp_multiplier=goal.xp_multiplier))

        result = merge_bonus_results(parts)
        if result.total_payout_increase > 0:
            logger.debug(
                "bonuses for goal %s on %s: +%.0f payout, %.1f reputation, %.2fx xp",
                goal.type.value,
                contract.contract_id,
                result.total_payout_increase,
                result.reputation_gain,
                result.xp_multiplier,
            )
        return result

    def apply_perfect_contract_bonus(
        self, contract: Contract, base_payout: float, goals_completed: int
    ) -> BonusResult:
        if goals_completed <= 0 or goals_completed != len(contract.goals):
            return BonusResult()
        logger.info("perfect contract %s: all %d goals completed", contract.contract_id, goals_completed)
        result = BonusResult(
            total_payout_increase=base_payout * c_cfg.PERFECT_CONTRACT_PAYOUT_PCT / 100.0,
            reputation_gain=c_cfg.PERFECT_CONTRACT_REPUTATION,
            morale_boost=c_cfg.PERFECT_CONTRACT_MORALE,
            is_perfect_contract=True,
        )
        self._sink.publish(
            ReputationChangeRequested(amount=result.reputation_gain, reason=f"perfect:{contract.contract_id}")
        )
        for emp in contract.assigned_employee_ids:
            self._sink.publish(MoraleChangeRequested(employee_id=emp, amount=result.morale_boost))
        return result
