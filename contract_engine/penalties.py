from __future__ import annotations

"""Consequences of failed goals.

Mirror of ``contract_engine.bonuses``: one goal's penalty list reduces to a
``PenaltyResult`` and results merge field by field. Penalties optionally scale
with the company's reputation, so an established studio loses more.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from . import formulas as f
from .events import BurnoutChangeRequested, EventSink, MoraleChangeRequested, NullSink, ReputationChangeRequested
from .reducers import Reducer, merge, reduced
from .types import Contract, GoalDefinition, PenaltyDefinition, PenaltyType, ReputationContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PenaltyResult:
    # financial
    total_payout_reduction: float = reduced(Reducer.SUM, 0.0)
    base_payout_reduction: float = reduced(Reducer.SUM, 0.0)
    flat_fines: float = reduced(Reducer.SUM, 0.0)
    remove_quality_bonus: bool = reduced(Reducer.ANY, False)
    early_bonus_multiplier: float = reduced(Reducer.PRODUCT, 1.0)
    remove_efficiency_bonus: bool = reduced(Reducer.ANY, False)
    # reputation
    reputation_loss: float = reduced(Reducer.SUM, 0.0)
    reputation_gain_multiplier: float = reduced(Reducer.PRODUCT, 1.0)
    client_trust_penalty: float = reduced(Reducer.SUM, 0.0)
    high_tier_limit_days: int = reduced(Reducer.MAX, 0)
    # employees
    burnout_spike: float = reduced(Reducer.SUM, 0.0)
    morale_drop: float = reduced(Reducer.SUM, 0.0)
    xp_multiplier: float = reduced(Reducer.PRODUCT, 1.0)
    productivity_penalty_percent: float = reduced(Reducer.MAX, 0.0)
    productivity_penalty_days: int = reduced(Reducer.MAX, 0)
    # quality
    quality_cap: float = reduced(Reducer.MIN, 100.0)
    quality_multiplier: float = reduced(Reducer.PRODUCT, 1.0)
    client_dissatisfaction: float = reduced(Reducer.SUM, 0.0)
    # company
    company_productivity_debuff: float = reduced(Reducer.MAX, 0.0)
    company_productivity_debuff_days: int = reduced(Reducer.MAX, 0)
    next_contract_burnout_multiplier: float = reduced(Reducer.MAX, 1.0)
    salary_expectation_increase: float = reduced(Reducer.MAX, 0.0)
    salary_expectation_duration: int = reduced(Reducer.MAX, 0)
    next_contract_difficulty_increase: float = reduced(Reducer.MAX, 0.0)


def merge_penalty_results(results: Iterable[PenaltyResult]) -> PenaltyResult:
    return merge(PenaltyResult, results)


def _scale(p: PenaltyDefinition, value: float, c: Contract, rep: ReputationContext) -> float:
    if p.scale_by_difficulty:
        value *= f.penalty_difficulty_multiplier(c.difficulty)
    if p.scale_by_reputation:
        value *= f.penalty_reputation_factor(rep.reputation, rep.max_reputation)
    return value


def scaled_percent(p: PenaltyDefinition, c: Contract, rep: ReputationContext) -> float:
    return _scale(p, p.percent_value, c, rep)


def scaled_flat(p: PenaltyDefinition, c: Contract, rep: ReputationContext) -> float:
    return _scale(p, p.flat_value, c, rep)


PenaltyHandler = Callable[[PenaltyDefinition, Contract, float, ReputationContext], PenaltyResult]


def _reduce_base(p: PenaltyDefinition, c: Contract, base: float, rep: ReputationContext) -> PenaltyResult:
    amount = base * scaled_percent(p, c, rep) / 100.0
    return PenaltyResult(total_payout_reduction=amount, base_payout_reduction=amount)


def _fine(p: PenaltyDefinition, c: Contract, base: float, rep: ReputationContext) -> PenaltyResult:
    amount = scaled_flat(p, c, rep)
    return PenaltyResult(total_payout_reduction=amount, flat_fines=amount)


def _shrink(p: PenaltyDefinition, c: Contract, rep: ReputationContext) -> float:
    """Multiplier left after a percent reduction, floored at 0."""
    return max(1.0 - scaled_percent(p, c, rep) / 100.0, 0.0)


PENALTY_HANDLERS: Dict[PenaltyType, PenaltyHandler] = {
    PenaltyType.REDUCE_BASE_PAYOUT: _reduce_base,
    PenaltyType.FLAT_FINE: _fine,
    PenaltyType.REMOVE_QUALITY_BONUS: lambda p, c, base, rep: PenaltyResult(remove_quality_bonus=True),
    PenaltyType.REDUCE_EARLY_BONUS: lambda p, c, base, rep: PenaltyResult(early_bonus_multiplier=_shrink(p, c, rep)),
    PenaltyType.REMOVE_EFFICIENCY_BONUS: lambda p, c, base, rep: PenaltyResult(remove_efficiency_bonus=True),
    PenaltyType.REPUTATION_LOSS: lambda p, c, base, rep: PenaltyResult(reputation_loss=scaled_flat(p, c, rep)),
    PenaltyType.REDUCE_REPUTATION_GAIN: lambda p, c, base, rep: PenaltyResult(
        reputation_gain_multiplier=_shrink(p, c, rep)
    ),
    PenaltyType.CLIENT_TRUST_DECREASE: lambda p, c, base, rep: PenaltyResult(
        client_trust_penalty=scaled_percent(p, c, rep)
    ),
    PenaltyType.LIMIT_HIGH_TIER_CONTRACTS: lambda p, c, base, rep: PenaltyResult(high_tier_limit_days=p.duration_days),
    PenaltyType.BURNOUT_SPIKE: lambda p, c, base, rep: PenaltyResult(burnout_spike=scaled_flat(p, c, rep)),
    PenaltyType.MORALE_DROP: lambda p, c, base, rep: PenaltyResult(morale_drop=scaled_flat(p, c, rep)),
    PenaltyType.REDUCE_XP_GAIN: lambda p, c, base, rep: PenaltyResult(xp_multiplier=_shrink(p, c, rep)),
    PenaltyType.TEMPORARY_PRODUCTIVITY_PENALTY: lambda p, c, base, rep: PenaltyResult(
        productivity_penalty_percent=scaled_percent(p, c, rep), productivity_penalty_days=p.duration_days
    ),
    PenaltyType.CAP_MAX_QUALITY: lambda p, c, base, rep: PenaltyResult(
        quality_cap=min(100.0, scaled_percent(p, c, rep))
    ),
    PenaltyType.QUALITY_MULTIPLIER_REDUCTION: lambda p, c, base, rep: PenaltyResult(
        quality_multiplier=_shrink(p, c, rep)
    ),
    PenaltyType.CLIENT_DISSATISFACTION: lambda p, c, base, rep: PenaltyResult(
        client_dissatisfaction=scaled_percent(p, c, rep)
    ),
    PenaltyType.PRODUCTIVITY_DEBUFF: lambda p, c, base, rep: PenaltyResult(
        company_productivity_debuff=scaled_percent(p, c, rep), company_productivity_debuff_days=p.duration_days
    ),
    PenaltyType.INCREASED_BURNOUT_NEXT: lambda p, c, base, rep: PenaltyResult(
        next_contract_burnout_multiplier=1.0 + scaled_percent(p, c, rep) / 100.0
    ),
    PenaltyType.HIGHER_SALARY_EXPECTATIONS: lambda p, c, base, rep: PenaltyResult(
        salary_expectation_increase=scaled_percent(p, c, rep), salary_expectation_duration=p.duration_days
    ),
    PenaltyType.NEXT_CONTRACT_HARDER: lambda p, c, base, rep: PenaltyResult(
        next_contract_difficulty_increase=scaled_percent(p, c, rep)
    ),
}


class PenaltyApplicator:
    def __init__(
        self,
        sink: Optional[EventSink] = None,
        handlers: Dict[PenaltyType, PenaltyHandler] = PENALTY_HANDLERS,
    ) -> None:
        self._sink = sink or NullSink()
        self._handlers = handlers

    def apply_single_penalty(
        self, contract: Contract, penalty: PenaltyDefinition, base_payout: float, rep: ReputationContext
    ) -> PenaltyResult:
        handler = self._handlers.get(penalty.type)
        if handler is None:
            logger.warning("unknown penalty type: %r", penalty.type)
            return PenaltyResult()
        result = handler(penalty, contract, base_payout, rep)
        self._publish_side_effects(contract, penalty.type, result)
        return result

    def _publish_side_effects(self, contract: Contract, penalty_type: PenaltyType, result: PenaltyResult) -> None:
        if penalty_type == PenaltyType.REPUTATION_LOSS and result.reputation_loss:
            self._sink.publish(
                ReputationChangeRequested(amount=-result.reputation_loss, reason=f"penalty:{contract.contract_id}")
            )
        elif penalty_type == PenaltyType.BURNOUT_SPIKE and result.burnout_spike:
            for emp in contract.assigned_employee_ids:
                self._sink.publish(BurnoutChangeRequested(employee_id=emp, amount=result.burnout_spike))
        elif penalty_type == PenaltyType.MORALE_DROP and result.morale_drop:
            for emp in contract.assigned_employee_ids:
                self._sink.publish(MoraleChangeRequested(employee_id=emp, amount=-result.morale_drop))

    def apply_penalties(
        self,
        contract: Contract,
        goal: GoalDefinition,
        base_payout: float,
        rep: Optional[ReputationContext] = None,
    ) -> PenaltyResult:
        rep = rep or ReputationContext()
        result = merge_penalty_results(self.apply_single_penalty(contract, p, base_payout, rep) for p in goal.penalties)
        if result.total_payout_reduction > 0:
            logger.debug(
                "penalties for goal %s on %s: -%.0f payout, -%.1f reputation",
                goal.type.value,
                contract.contract_id,
                result.total_payout_reduction,
                result.reputation_loss,
            )
        return result
