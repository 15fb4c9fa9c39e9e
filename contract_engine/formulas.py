from __future__ import annotations

"""Contract math formulas (SSOT).

This module contains the *pure* math shared by generation, simulation and
resolution: difficulty tables, reputation scaling, the payout curve, the team
productivity curve, quality and the bonus/penalty scaling factors.

Design goals
------------
- **Pure functions**: no providers, no event sinks, no random draws.
- **Defensive**: tolerate bad inputs (None, strings, NaNs) without raising.
- **Config-driven**: tuning is read from ``contract_engine.config``.

Callers
-------
- ``contract_engine.generator`` and ``contract_engine.offers`` for generation.
- ``contract_engine.simulation`` for the daily tick and UI estimates.
- ``contract_engine.resolver`` / ``bonuses`` / ``penalties`` for economics.
"""

import math
from typing import Any, Dict, Mapping, Sequence, Tuple

from . import config as c_cfg
from .types import ContractDifficulty, GoalDefinition, SkillAxis


# ---------------------------------------------------------------------------
# Generic helpers
# ---------------------------------------------------------------------------


def safe_float(x: Any, default: float = 0.0) -> float:
    try:
        v = float(x)
    except (TypeError, ValueError):
        return float(default)
    if math.isnan(v):
        return float(default)
    return v


def safe_int(x: Any, default: int = 0) -> int:
    v = safe_float(x, float("nan"))
    if math.isnan(v) or math.isinf(v):
        return int(default)
    return int(v)


def clamp(x: Any, lo: float, hi: float) -> float:
    """Clamp ``x`` to the inclusive range [lo, hi]."""
    v = safe_float(x)
    if v < lo:
        return float(lo)
    if v > hi:
        return float(hi)
    return float(v)


def clamp01(x: Any) -> float:
    return clamp(x, 0.0, 1.0)


def clamp100(x: Any) -> float:
    return clamp(x, 0.0, 100.0)


def lerp(a: float, b: float, t: Any) -> float:
    """Linear interpolation with ``t`` clamped to [0, 1]."""
    return float(a) + (float(b) - float(a)) * clamp01(t)


# ---------------------------------------------------------------------------
# Difficulty tables
# ---------------------------------------------------------------------------


def skill_modifier(difficulty: ContractDifficulty) -> float:
    if difficulty == ContractDifficulty.EASY:
        return c_cfg.SKILL_MODIFIER_EASY
    if difficulty == ContractDifficulty.HARD:
        return c_cfg.SKILL_MODIFIER_HARD
    return c_cfg.SKILL_MODIFIER_MEDIUM


def payout_multiplier(difficulty: ContractDifficulty) -> float:
    if difficulty == ContractDifficulty.EASY:
        return c_cfg.PAYOUT_MULT_EASY
    if difficulty == ContractDifficulty.HARD:
        return c_cfg.PAYOUT_MULT_HARD
    return c_cfg.PAYOUT_MULT_MEDIUM


def reputation_difficulty_weights(reputation_percent: Any) -> Tuple[float, float, float]:
    """(easy, medium, hard) draw weights for a reputation percent (0..100)."""
    pct = safe_float(reputation_percent)
    if pct < 20.0:
        return (1.0, 0.0, 0.0)
    if pct < 50.0:
        return (0.7, 0.3, 0.0)
    if pct < 75.0:
        return (0.3, 0.5, 0.2)
    return (0.2, 0.3, 0.5)


def reputation_target_multiplier(reputation_percent: Any) -> float:
    """Share of the best employee's skill a contract should ask for.

    Starts at 2.0 (a new company is expected to staff contracts with a
    couple of people) and eases down as reputation grows.
    """
    pct = clamp(reputation_percent, 0.0, 100.0)
    if pct < 20.0:
        return 2.0 - (pct / 20.0) * 0.2
    if pct < 50.0:
        t = (pct - 20.0) / 30.0
        return 1.8 - t * 0.15
    t = (pct - 50.0) / 50.0
    return 1.65 - t * 0.09


def payout_deadline_factor(deadline_days: Any, base_deadline_days: Any) -> float:
    """Shorter deadlines pay more: ``1 / sqrt(deadline / base)``."""
    d = safe_float(deadline_days)
    base = safe_float(base_deadline_days)
    if d <= 0.0 or base <= 0.0:
        return 1.0
    return 1.0 / math.sqrt(d / base)


def _goal_multiplier(difficulty: ContractDifficulty, easy: float, hard: float) -> float:
    if difficulty == ContractDifficulty.EASY:
        return easy
    if difficulty == ContractDifficulty.HARD:
        return hard
    return 1.0


def adjusted_goal_target(goal: GoalDefinition, difficulty: ContractDifficulty) -> float:
    m = _goal_multiplier(difficulty, c_cfg.GOAL_TARGET_MULT_EASY, c_cfg.GOAL_TARGET_MULT_HARD)
    return clamp100(safe_float(goal.target_value) * m)


def adjusted_goal_threshold(goal: GoalDefinition, difficulty: ContractDifficulty) -> float:
    m = _goal_multiplier(difficulty, c_cfg.GOAL_THRESHOLD_MULT_EASY, c_cfg.GOAL_THRESHOLD_MULT_HARD)
    return clamp100(safe_float(goal.threshold_value) * m)


def adjusted_goal_integer(goal: GoalDefinition, difficulty: ContractDifficulty) -> int:
    m = _goal_multiplier(difficulty, c_cfg.GOAL_TARGET_MULT_EASY, c_cfg.GOAL_TARGET_MULT_HARD)
    return max(0, int(round(safe_float(goal.integer_target) * m)))


def template_offer_weight(
    template_avg_skill: Any,
    reputation01: Any,
    employee_max_skill: Any,
    *,
    sigma: float = c_cfg.OFFER_TEMPLATE_SIGMA,
) -> float:
    """Gaussian weight of a template around the skill level reputation implies."""
    target = clamp01(reputation01) * safe_float(employee_max_skill)
    delta = abs(safe_float(template_avg_skill) - target)
    if sigma <= 0.0:
        return 1.0 if delta == 0.0 else 0.0
    return math.exp(-(delta * delta) / (2.0 * sigma * sigma))


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------


def effective_skill(base_skill: Any, morale: Any, burnout: Any) -> float:
    """Skill after morale/burnout: ``base * (1 + (morale-50)/100 - burnout/200)``."""
    factor = 1.0 + (safe_float(morale, 50.0) - 50.0) / 100.0 - safe_float(burnout) / 200.0
    return clamp100(safe_float(base_skill) * factor)


# ---------------------------------------------------------------------------
# Productivity
# ---------------------------------------------------------------------------


def skill_coverage(
    team_totals: Mapping[SkillAxis, float], required: Mapping[SkillAxis, float]
) -> Dict[SkillAxis, float]:
    """Per-axis coverage: team total / max(required, 1)."""
    out: Dict[SkillAxis, float] = {}
    for axis in SkillAxis:
        need = max(safe_float(required.get(axis)), 1.0)
        out[axis] = max(safe_float(team_totals.get(axis)), 0.0) / need
    return out


def overall_coverage(coverages: Sequence[float]) -> float:
    vals = [safe_float(c) for c in coverages]
    if not vals:
        return 0.0
    lo = min(vals)
    mean = sum(vals) / len(vals)
    return c_cfg.COVERAGE_WEIGHT_MIN * lo + c_cfg.COVERAGE_WEIGHT_MEAN * mean


def base_productivity(overall: Any) -> float:
    """Piecewise coverage curve; continuous at 0.9 and 1.0, steps down at 0.6."""
    o = max(safe_float(overall), 0.0)
    if o < 0.6:
        return (o ** 2.5) * 100.0
    if o < 0.9:
        return 21.6 + (o - 0.6) / 0.3 * 59.4
    if o < 1.0:
        return 81.0 + (o - 0.9) / 0.1 * 19.0
    return 100.0 + (o - 1.0) * 25.0


def team_condition_factor(avg_morale: Any, avg_burnout: Any) -> float:
    m = lerp(0.5, 1.0, safe_float(avg_morale) / 100.0)
    b = lerp(1.0, 0.5, safe_float(avg_burnout) / 100.0)
    return max(m * b, c_cfg.TEAM_FACTOR_FLOOR)


def team_size_factor(team_size: int) -> float:
    n = max(int(team_size), 0)
    if n <= 0:
        return 0.0
    synergy = 1.0 + min(n - 1, c_cfg.TEAM_SYNERGY_MAX_MEMBERS) * c_cfg.TEAM_SYNERGY_PER_MEMBER
    if n > c_cfg.TEAM_OVERHEAD_START:
        overhead = max(
            1.0 - (n - c_cfg.TEAM_OVERHEAD_START) * c_cfg.TEAM_OVERHEAD_PER_MEMBER,
            c_cfg.TEAM_OVERHEAD_FLOOR,
        )
        synergy *= overhead
    return synergy


def team_productivity(
    coverages: Mapping[SkillAxis, float],
    *,
    avg_morale: float,
    avg_burnout: float,
    team_size: int,
) -> float:
    if team_size <= 0:
        return 0.0
    overall = overall_coverage([coverages.get(axis, 0.0) for axis in SkillAxis])
    p = base_productivity(overall)
    p *= team_condition_factor(avg_morale, avg_burnout)
    p *= team_size_factor(team_size)
    p *= c_cfg.FINAL_PRODUCTIVITY_BOOST
    return clamp(p, c_cfg.PRODUCTIVITY_MIN, c_cfg.PRODUCTIVITY_MAX)


def daily_progress(total_days: int, productivity: Any) -> float:
    if total_days <= 0:
        return 0.0
    return 100.0 / float(total_days) * max(safe_float(productivity), 0.0) / 100.0


def overwork_multiplier(productivity: Any) -> float:
    p = safe_float(productivity)
    if p <= c_cfg.OVERWORK_PRODUCTIVITY:
        return 1.0
    m = 1.0 + (p - c_cfg.OVERWORK_PRODUCTIVITY) / 100.0 * c_cfg.OVERWORK_BURNOUT_SLOPE
    return min(m, c_cfg.OVERWORK_BURNOUT_CAP)


def daily_burnout(base_burnout_impact: Any, total_days: int, productivity: Any) -> float:
    if total_days <= 0:
        return 0.0
    return safe_float(base_burnout_impact) / float(total_days) * overwork_multiplier(productivity)


# ---------------------------------------------------------------------------
# Quality & payout
# ---------------------------------------------------------------------------


def team_quality_factor(avg_morale: Any, avg_burnout: Any) -> float:
    m = lerp(c_cfg.QUALITY_MORALE_LO, c_cfg.QUALITY_MORALE_HI, safe_float(avg_morale) / 100.0)
    b = lerp(1.0, c_cfg.QUALITY_BURNOUT_LO, safe_float(avg_burnout) / 100.0)
    return m * b


def deadline_factor(total_days: int, days_used: int) -> float:
    """>1 for early delivery, <1 (floored) for late delivery, 1 on time."""
    if total_days <= 0:
        return 1.0
    early = (total_days - days_used) / float(total_days)
    if early >= 0.0:
        return 1.0 + early * c_cfg.EARLY_FINISH_BONUS_SLOPE
    late = -early
    return max(1.0 - late * c_cfg.LATE_FINISH_PENALTY_SLOPE, c_cfg.LATE_FINISH_FLOOR)


def quality_bonus(quality: Any, base_payout: Any) -> float:
    above = max((safe_float(quality) - c_cfg.QUALITY_BONUS_NEUTRAL) / 100.0, 0.0)
    return above * safe_float(base_payout) * c_cfg.QUALITY_BONUS_RATE


def total_payout(base_payout: Any, bonus: Any, failed_penalty_percents: Sequence[float]) -> float:
    base = safe_float(base_payout)
    penalty = sum(safe_float(p) for p in failed_penalty_percents) / 100.0 * base
    return max(base + safe_float(bonus) - penalty, 0.0)


# ---------------------------------------------------------------------------
# Bonus / penalty scaling
# ---------------------------------------------------------------------------


def bonus_difficulty_multiplier(difficulty: ContractDifficulty) -> float:
    if difficulty == ContractDifficulty.EASY:
        return c_cfg.BONUS_DIFFICULTY_EASY
    if difficulty == ContractDifficulty.HARD:
        return c_cfg.BONUS_DIFFICULTY_HARD
    return c_cfg.BONUS_DIFFICULTY_MEDIUM


def penalty_difficulty_multiplier(difficulty: ContractDifficulty) -> float:
    if difficulty == ContractDifficulty.EASY:
        return c_cfg.PENALTY_DIFFICULTY_EASY
    if difficulty == ContractDifficulty.HARD:
        return c_cfg.PENALTY_DIFFICULTY_HARD
    return c_cfg.PENALTY_DIFFICULTY_MEDIUM


def contract_value_factor(contract_value: Any) -> float:
    return clamp(
        safe_float(contract_value) / c_cfg.CONTRACT_VALUE_REFERENCE,
        c_cfg.CONTRACT_VALUE_FACTOR_MIN,
        c_cfg.CONTRACT_VALUE_FACTOR_MAX,
    )


def penalty_reputation_factor(reputation: Any, max_reputation: Any) -> float:
    max_rep = safe_float(max_reputation)
    share = safe_float(reputation) / max_rep if max_rep > 0.0 else 0.0
    return clamp(
        1.0 + share * c_cfg.PENALTY_REPUTATION_SLOPE,
        c_cfg.PENALTY_REPUTATION_FACTOR_MIN,
        c_cfg.PENALTY_REPUTATION_FACTOR_MAX,
    )
