from __future__ import annotations

"""Procedural contract generation from templates.

All randomness comes from the injected ``RandomSource``; the draw order inside
``generate`` is fixed so a seeded source reproduces the same contract.
"""

import logging
from typing import List, Sequence

from . import config as c_cfg
from . import formulas as f
from .rng import RandomSource
from .types import (
    Contract,
    ContractDifficulty,
    ContractGoal,
    ContractState,
    ContractTemplate,
    GoalDefinition,
    ReputationContext,
)

logger = logging.getLogger(__name__)


class ContractGenerator:
    def __init__(self, rng: RandomSource) -> None:
        self._rng = rng

    # ------------------------------------------------------------------
    # Difficulty
    # ------------------------------------------------------------------
    def _weighted_difficulty(self, easy: float, medium: float, hard: float) -> ContractDifficulty:
        # zero-weight buckets are never picked, even on an edge draw
        r = self._rng.range_float(0.0, easy + medium + hard)
        if r < easy or (medium <= 0 and hard <= 0):
            return ContractDifficulty.EASY
        if r < easy + medium or hard <= 0:
            return ContractDifficulty.MEDIUM
        return ContractDifficulty.HARD

    def select_difficulty(self, template: ContractTemplate) -> ContractDifficulty:
        """Draw on the template's own difficulty weights."""
        total = template.easy_weight + template.medium_weight + template.hard_weight
        if total <= 0:
            logger.warning(
                "template %s has no difficulty weight; defaulting to medium", template.template_id
            )
            return ContractDifficulty.MEDIUM
        return self._weighted_difficulty(template.easy_weight, template.medium_weight, template.hard_weight)

    def select_reputation_adjusted_difficulty(self, ctx: ReputationContext) -> ContractDifficulty:
        easy, medium, hard = f.reputation_difficulty_weights(ctx.reputation_percent)
        return self._weighted_difficulty(easy, medium, hard)

    # ------------------------------------------------------------------
    # Deadline / goals
    # ------------------------------------------------------------------
    def generate_deadline(self, template: ContractTemplate, difficulty: ContractDifficulty) -> int:
        variance = max(int(template.deadline_variance), 0)
        deadline = int(template.base_deadline_days) + self._rng.range_int(-variance, variance + 1)
        if template.adjust_deadline_by_difficulty:
            if difficulty == ContractDifficulty.EASY:
                deadline = int(round(deadline * c_cfg.DEADLINE_EASY_MULT))
            elif difficulty == ContractDifficulty.HARD:
                deadline = int(round(deadline * c_cfg.DEADLINE_HARD_MULT))
        return max(deadline, c_cfg.DEADLINE_MIN_DAYS)

    def goal_count(self, template: ContractTemplate, difficulty: ContractDifficulty) -> int:
        if difficulty == ContractDifficulty.EASY:
            count = template.min_goals
        elif difficulty == ContractDifficulty.HARD:
            count = template.max_goals
        else:
            count = self._rng.range_int(template.min_goals, template.max_goals + 1)
        return max(0, min(int(count), len(template.goal_pool)))

    def shuffle(self, items: Sequence[GoalDefinition]) -> List[GoalDefinition]:
        out = list(items)
        n = len(out)
        for i in range(n):
            j = self._rng.range_int(i, n)
            out[i], out[j] = out[j], out[i]
        return out

    def select_goals(self, template: ContractTemplate, difficulty: ContractDifficulty) -> List[GoalDefinition]:
        if not template.goal_pool:
            return []
        count = self.goal_count(template, difficulty)
        return self.shuffle(template.goal_pool)[:count]

    def roll_goal_penalty(self, goal: GoalDefinition) -> float:
        lo = min(goal.penalty_percent_min, goal.penalty_percent_max)
        hi = max(goal.penalty_percent_min, goal.penalty_percent_max)
        return self._rng.range_float(lo, hi)

    # ------------------------------------------------------------------
    # Skills / payout
    # ------------------------------------------------------------------
    def generate_reputation_scaling(self, ctx: ReputationContext) -> float:
        """Keep required skills in reach of the current best employee."""
        target = f.reputation_target_multiplier(ctx.reputation_percent)
        scaling = (ctx.employee_max_skill * target) / 100.0
        scaling *= self._rng.range_float(c_cfg.REP_SCALING_JITTER_MIN, c_cfg.REP_SCALING_JITTER_MAX)
        return f.clamp(scaling, c_cfg.REP_SCALING_MIN, c_cfg.REP_SCALING_MAX)

    def _skill(self, lo: float, hi: float, difficulty: ContractDifficulty) -> float:
        return self._rng.range_float(lo, hi) * f.skill_modifier(difficulty)

    def generate_dev_skill(self, template: ContractTemplate, difficulty: ContractDifficulty) -> float:
        return self._skill(template.min_dev_skill, template.max_dev_skill, difficulty)

    def generate_design_skill(self, template: ContractTemplate, difficulty: ContractDifficulty) -> float:
        return self._skill(template.min_design_skill, template.max_design_skill, difficulty)

    def generate_marketing_skill(self, template: ContractTemplate, difficulty: ContractDifficulty) -> float:
        return self._skill(template.min_marketing_skill, template.max_marketing_skill, difficulty)

    def generate_payout(self, template: ContractTemplate, difficulty: ContractDifficulty, deadline: int) -> float:
        payout = self._rng.range_float(template.min_payout, template.max_payout)
        payout *= f.payout_multiplier(difficulty)
        payout *= f.payout_deadline_factor(deadline, template.base_deadline_days)
        return payout

    # ------------------------------------------------------------------
    # Full contract
    # ------------------------------------------------------------------
    def generate(
        self,
        template: ContractTemplate,
        ctx: ReputationContext,
        *,
        contract_id: str,
        client_name: str,
        current_day: int,
    ) -> Contract:
        difficulty = self.select_reputation_adjusted_difficulty(ctx)
        deadline = self.generate_deadline(template, difficulty)

        goals: List[ContractGoal] = []
        for goal in self.select_goals(template, difficulty):
            goals.append(
                ContractGoal(
                    goal=goal,
                    target_value=f.adjusted_goal_target(goal, difficulty),
                    penalty_percent=self.roll_goal_penalty(goal),
                )
            )

        scaling = self.generate_reputation_scaling(ctx)
        dev = self.generate_dev_skill(template, difficulty) * scaling
        design = self.generate_design_skill(template, difficulty) * scaling
        marketing = self.generate_marketing_skill(template, difficulty) * scaling
        payout = self.generate_payout(template, difficulty, deadline)

        logger.debug(
            "generated contract %s template=%s difficulty=%s days=%d payout=%.0f",
            contract_id,
            template.template_id,
            difficulty.value,
            deadline,
            payout,
        )

        return Contract(
            contract_id=contract_id,
            client_name=client_name,
            template_id=template.template_id,
            difficulty=difficulty,
            title=template.name,
            state=ContractState.AVAILABLE,
            days_remaining=deadline,
            total_days=deadline,
            goals=goals,
            base_payout=payout,
            creation_day=int(current_day),
            required_dev_skill=dev,
            required_design_skill=design,
            required_marketing_skill=marketing,
        )
