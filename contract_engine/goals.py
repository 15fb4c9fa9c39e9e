from __future__ import annotations

"""Goal evaluation.

Each ``GoalType`` maps to one predicate over (contract, goal, tracking). An
unknown type is logged and evaluates to False.

Meta goals (NO_PENALTIES, NO_OPTIONAL_GOAL_FAILURES) depend on how the other
goals went, so ``evaluate_goals`` runs them in a second pass after
``penalty_count`` and ``optional_goal_failures`` are known.
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, List, Tuple

from . import formulas as f
from .tracking import ContractTracking
from .types import Contract, GoalDefinition, GoalType

logger = logging.getLogger(__name__)

GoalPredicate = Callable[[Contract, GoalDefinition, ContractTracking], bool]

META_GOALS = frozenset({GoalType.NO_PENALTIES, GoalType.NO_OPTIONAL_GOAL_FAILURES})


def _target(c: Contract, g: GoalDefinition) -> float:
    return f.adjusted_goal_target(g, c.difficulty)


def _threshold(c: Contract, g: GoalDefinition) -> float:
    return f.adjusted_goal_threshold(g, c.difficulty)


def _integer(c: Contract, g: GoalDefinition) -> int:
    return f.adjusted_goal_integer(g, c.difficulty)


def _time_share(c: Contract) -> float:
    if c.total_days <= 0:
        return 1.0
    return c.days_used / float(c.total_days)


def skill_deficit_percent(c: Contract, t: ContractTracking) -> float:
    """Unmet requirement as a percent of total requirement (0 when nothing is required)."""
    total = c.total_required_skill
    if total <= 0.0:
        return 0.0
    deficit = (
        max(0.0, c.required_dev_skill - t.avg_dev_skill)
        + max(0.0, c.required_design_skill - t.avg_design_skill)
        + max(0.0, c.required_marketing_skill - t.avg_marketing_skill)
    )
    return deficit / total * 100.0


def _balanced(c: Contract, g: GoalDefinition, t: ContractTracking) -> bool:
    if t.highest_skill <= 0.0:
        return False
    return t.lowest_skill / t.highest_skill >= g.percentage_target / 100.0


GOAL_PREDICATES: Dict[GoalType, GoalPredicate] = {
    # skill
    GoalType.REACH_DEV_QUALITY: lambda c, g, t: t.final_quality >= _target(c, g),
    GoalType.REACH_DESIGN_QUALITY: lambda c, g, t: t.avg_design_skill >= _target(c, g),
    GoalType.REACH_MARKETING_QUALITY: lambda c, g, t: t.avg_marketing_skill >= _target(c, g),
    GoalType.NO_SKILL_BELOW_THRESHOLD: lambda c, g, t: t.lowest_effective_skill >= _threshold(c, g),
    GoalType.BALANCED_SKILL_DISTRIBUTION: _balanced,
    GoalType.OVERPERFORM_DEV_REQUIREMENT: lambda c, g, t: (
        t.avg_dev_skill >= c.required_dev_skill * (1.0 + g.percentage_target / 100.0)
    ),
    GoalType.DELIVER_HIGH_QUALITY: lambda c, g, t: t.final_quality >= _target(c, g),
    GoalType.LOW_SKILL_DEFICIT: lambda c, g, t: skill_deficit_percent(c, t) <= g.percentage_target,
    GoalType.MAINTAIN_AVG_EFFECTIVE_SKILL: lambda c, g, t: t.avg_effective_skill >= _target(c, g),
    GoalType.NO_LOW_MORALE_DURING_PROJECT: lambda c, g, t: t.lowest_morale >= _threshold(c, g),
    # time
    GoalType.FINISH_DAYS_EARLY: lambda c, g, t: (c.total_days - c.days_used) >= _integer(c, g),
    GoalType.FINISH_PERCENT_FASTER: lambda c, g, t: _time_share(c) <= 1.0 - g.percentage_target / 100.0,
    GoalType.NOT_EXCEED_TIME_PERCENT: lambda c, g, t: _time_share(c) <= g.percentage_target / 100.0,
    GoalType.FINISH_EXACT_DEADLINE: lambda c, g, t: c.days_used == c.total_days,
    GoalType.FINISH_FIRST_HALF: lambda c, g, t: c.days_used <= c.total_days // 2,
    GoalType.CONSISTENT_PROGRESS: lambda c, g, t: t.longest_stall_days < _integer(c, g),
    GoalType.NO_DAYS_ZERO_PROGRESS: lambda c, g, t: t.zero_days_count == 0,
    GoalType.REACH_PROGRESS_MILESTONE: lambda c, g, t: t.reached_milestone,
    GoalType.NO_OVERTIME_BURNOUT: lambda c, g, t: t.max_burnout <= _threshold(c, g),
    GoalType.NO_BURNOUT_SPIKES: lambda c, g, t: t.max_burnout <= _threshold(c, g),
    # team
    GoalType.USE_MAX_EMPLOYEES: lambda c, g, t: t.max_team_size <= _integer(c, g),
    GoalType.USE_MIN_EMPLOYEES: lambda c, g, t: t.max_team_size >= _integer(c, g),
    GoalType.INCLUDE_DESIGNER: lambda c, g, t: t.had_designer,
    GoalType.INCLUDE_MARKETER: lambda c, g, t: t.had_marketer,
    GoalType.NOT_EXCEED_EMPLOYEES: lambda c, g, t: t.max_team_size <= _integer(c, g),
    GoalType.USE_SINGLE_SPECIALIST: lambda c, g, t: t.max_team_size == 1,
    GoalType.USE_LOW_SKILL_ONLY: lambda c, g, t: t.highest_skill <= _threshold(c, g),
    GoalType.USE_HIGH_SKILL_EMPLOYEE: lambda c, g, t: t.highest_skill >= _threshold(c, g),
    GoalType.NO_TEAM_CHANGES: lambda c, g, t: t.team_change_count == 0,
    GoalType.NO_REASSIGNMENT: lambda c, g, t: t.reassignment_count == 0,
    # wellbeing
    GoalType.MAINTAIN_AVG_MORALE: lambda c, g, t: t.avg_morale >= _threshold(c, g),
    GoalType.FINISH_LOW_BURNOUT: lambda c, g, t: t.final_burnout <= _threshold(c, g),
    GoalType.INCREASE_MORALE: lambda c, g, t: t.morale_change > 0.0,
    GoalType.NO_MORALE_BELOW_THRESHOLD: lambda c, g, t: t.lowest_morale >= _threshold(c, g),
    GoalType.RECOVER_BURNOUT: lambda c, g, t: t.burnout_recovered >= g.percentage_target,
    GoalType.ZERO_BURNOUT_SPIKES: lambda c, g, t: t.burnout_spike_count == 0,
    GoalType.IMPROVE_EMPLOYEE_SKILL: lambda c, g, t: t.skill_improved,
    GoalType.FINISH_HIGHER_MORALE: lambda c, g, t: t.morale_change > 0.0,
    GoalType.NO_NEGATIVE_MORALE_EVENTS: lambda c, g, t: t.negative_morale_events == 0,
    GoalType.LIMIT_BURNOUT_GROWTH: lambda c, g, t: t.total_burnout_growth <= g.percentage_target,
    # efficiency
    GoalType.UNDER_LABOUR_COST: lambda c, g, t: t.labour_cost <= t.projected_labour_cost,
    GoalType.HIGH_PRODUCTIVITY: lambda c, g, t: t.avg_productivity >= 100.0 + g.percentage_target,
    GoalType.AVOID_OVERSTAFFING: lambda c, g, t: not t.was_overstaffed,
    GoalType.HIGH_EFFICIENCY: lambda c, g, t: (
        t.avg_daily_progress >= t.baseline_progress * (1.0 + g.percentage_target / 100.0)
    ),
    GoalType.LOW_PRODUCTIVITY_VARIANCE: lambda c, g, t: t.productivity_variance <= g.percentage_target,
    GoalType.NO_PRODUCTIVITY_DROP: lambda c, g, t: t.min_productivity >= g.percentage_target,
    GoalType.LOW_WASTED_TIME: lambda c, g, t: t.wasted_days <= _integer(c, g),
    GoalType.NO_BURNOUT_MULTIPLIER: lambda c, g, t: not t.had_burnout_multiplier,
    GoalType.EXCEED_SKILL_COVERAGE: lambda c, g, t: t.skill_coverage_percent >= 100.0 + g.percentage_target,
    GoalType.STEADY_PRODUCTIVITY: lambda c, g, t: t.productivity_variance <= g.percentage_target,
    # advanced
    GoalType.CLIENT_SATISFACTION: lambda c, g, t: t.final_quality >= _target(c, g),
    GoalType.NO_PENALTIES: lambda c, g, t: t.penalty_count == 0,
    GoalType.IMPRESS_CLIENT: lambda c, g, t: t.final_quality >= 95.0,
    GoalType.NO_OPTIONAL_GOAL_FAILURES: lambda c, g, t: t.optional_goal_failures == 0,
    GoalType.CONTRACT_STREAK: lambda c, g, t: t.current_streak >= _integer(c, g),
    GoalType.NO_REASSIGNMENT_ADVANCED: lambda c, g, t: t.reassignment_count == 0,
    GoalType.UNDER_QUALIFIED_TEAM: lambda c, g, t: t.avg_skill < c.required_dev_skill * 0.8 and c.progress >= 100.0,
    GoalType.OVERDELIVER: lambda c, g, t: t.raw_quality > 100.0,
    GoalType.RECORD_COMPLETION_TIME: lambda c, g, t: t.completion_time <= t.record_time,
    GoalType.MAINTAIN_COMPANY_MORALE: lambda c, g, t: t.company_avg_morale >= _threshold(c, g),
}


class GoalEvaluator:
    def __init__(self, predicates: Dict[GoalType, GoalPredicate] = GOAL_PREDICATES) -> None:
        self._predicates = predicates

    def evaluate_goal(self, contract: Contract, goal: GoalDefinition, tracking: ContractTracking) -> bool:
        predicate = self._predicates.get(goal.type)
        if predicate is None:
            logger.warning("unknown goal type: %r", goal.type)
            return False
        return bool(predicate(contract, goal, tracking))

    def evaluate_goals(self, contract: Contract, tracking: ContractTracking) -> Tuple[ContractTracking, List[bool]]:
        """Evaluate every goal on ``contract`` and record the outcome on its goal records.

        Returns the tracking with ``penalty_count`` / ``optional_goal_failures``
        filled in, plus the per-goal results in goal order.
        """
        results: List[bool] = [False] * len(contract.goals)

        failed = 0
        optional_failed = 0
        for i, record in enumerate(contract.goals):
            if record.goal.type in META_GOALS:
                continue
            ok = self.evaluate_goal(contract, record.goal, tracking)
            results[i] = ok
            if not ok:
                failed += 1
                if record.goal.is_optional:
                    optional_failed += 1

        tracking = replace(tracking, penalty_count=failed, optional_goal_failures=optional_failed)

        for i, record in enumerate(contract.goals):
            if record.goal.type in META_GOALS:
                results[i] = self.evaluate_goal(contract, record.goal, tracking)

        for record, ok in zip(contract.goals, results):
            record.completed = ok
        return tracking, results
