from __future__ import annotations

"""Contract resolution (completion / failure).

Callers
-------
- ``contract_engine.service.ContractSystem`` after a day tick reports
  READY_TO_COMPLETE or READY_TO_FAIL.

Design goals
------------
- Idempotent: a contract that is already COMPLETED or FAILED is left alone
  (logged, returns None). No double pay, no double unassign.
- Quality has exactly one formula: mean effective skill of the final team,
  shaped by team condition and delivery timing.
- ``contract.total_payout`` is ``base + quality_bonus - failed goal penalties``.
  Goal bonuses/penalties adjust the cash actually requested on top of that and
  are reported on the returned ``ContractOutcome``.
- XP is split across the three axes in proportion to the contract's
  requirements, so one employee's XP always sums to the base reward.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from . import formulas as f
from .bonuses import BonusApplicator, BonusResult, merge_bonus_results
from .events import (
    CashRequested,
    ContractCompleted,
    ContractFailed,
    EventSink,
    EmployeeUnassignRequested,
    NullSink,
    SkillXPRequested,
)
from .goals import GoalEvaluator
from .penalties import PenaltyApplicator, PenaltyResult, merge_penalty_results
from .providers import EmployeeProvider
from .simulation import TeamSample, sample_team
from .tracking import ContractTracker, ContractTracking
from .types import Contract, ContractState, ReputationContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ContractOutcome:
    contract_id: str
    success: bool
    quality: float = 0.0
    raw_quality: float = 0.0
    total_payout: float = 0.0
    # total_payout adjusted by goal bonuses/penalties; what CashRequested carried
    cash_awarded: float = 0.0
    goal_results: Tuple[bool, ...] = ()
    bonus: BonusResult = BonusResult()
    penalty: PenaltyResult = PenaltyResult()
    tracking: Optional[ContractTracking] = None
    reason: str = ""

    @property
    def goals_completed(self) -> int:
        return sum(1 for ok in self.goal_results if ok)

    @property
    def is_perfect(self) -> bool:
        return self.bonus.is_perfect_contract


def calculate_quality(contract: Contract, team: TeamSample) -> Tuple[float, float]:
    """Return ``(quality, raw_quality)``; raw is the unclamped value (may exceed 100)."""
    if team.size == 0:
        return 0.0, 0.0
    mean_effective = sum(team.skill_totals.values()) / (3.0 * team.size)
    raw = (
        mean_effective
        * f.team_quality_factor(team.avg_morale, team.avg_burnout)
        * f.deadline_factor(contract.total_days, contract.days_used)
    )
    return f.clamp100(raw), max(raw, 0.0)


def xp_split(contract: Contract, base_xp: float) -> Optional[Tuple[float, float, float]]:
    total = contract.total_required_skill
    if total <= 0.0:
        return None
    return (
        base_xp * contract.required_dev_skill / total,
        base_xp * contract.required_design_skill / total,
        base_xp * contract.required_marketing_skill / total,
    )


def cash_award(contract: Contract, bonus: BonusResult, penalty: PenaltyResult) -> float:
    amount = contract.total_payout + bonus.total_payout_increase - penalty.total_payout_reduction
    if penalty.remove_quality_bonus:
        amount -= contract.quality_bonus
    else:
        amount += contract.quality_bonus * bonus.quality_bonus_multiplier
    return max(amount, 0.0)


class ContractResolver:
    def __init__(
        self,
        employees: EmployeeProvider,
        sink: Optional[EventSink] = None,
        goal_evaluator: Optional[GoalEvaluator] = None,
        bonus_applicator: Optional[BonusApplicator] = None,
        penalty_applicator: Optional[PenaltyApplicator] = None,
    ) -> None:
        self._employees = employees
        self._sink = sink or NullSink()
        self._goals = goal_evaluator or GoalEvaluator()
        self._bonuses = bonus_applicator or BonusApplicator(self._sink)
        self._penalties = penalty_applicator or PenaltyApplicator(self._sink)

    def calculate_quality(self, contract: Contract) -> Tuple[float, float]:
        return calculate_quality(contract, sample_team(contract.assigned_employee_ids, self._employees))

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def complete_contract(
        self,
        contract: Contract,
        success: bool,
        current_day: int,
        *,
        base_xp_reward: float = 0.0,
        tracker: Optional[ContractTracker] = None,
        reputation: Optional[ReputationContext] = None,
        current_streak: int = 0,
        record_time: Optional[int] = None,
        reason: str = "Deadline missed",
    ) -> Optional[ContractOutcome]:
        if contract.is_finished:
            logger.warning(
                "contract %s already resolved (%s); ignoring", contract.contract_id, contract.state.value
            )
            return None

        contract.state = ContractState.COMPLETED if success else ContractState.FAILED
        contract.completion_day = int(current_day)
        contract.progress = min(contract.progress, 100.0)

        team = sample_team(contract.assigned_employee_ids, self._employees)
        tracker = tracker or ContractTracker(contract, self._employees)

        if not success:
            return self._fail(contract, team, tracker, current_streak, record_time, reason)

        quality, raw_quality = calculate_quality(contract, team)
        tracking = tracker.build(
            contract,
            final_quality=quality,
            raw_quality=raw_quality,
            final_team=team,
            current_streak=current_streak,
            record_time=record_time,
            company_avg_morale=self._employees.get_company_average_morale(),
        )
        tracking, results = self._goals.evaluate_goals(contract, tracking)

        base = contract.base_payout
        contract.final_quality = quality
        contract.quality_bonus = f.quality_bonus(quality, base)
        contract.total_payout = f.total_payout(
            base, contract.quality_bonus, [g.penalty_percent for g in contract.goals if not g.completed]
        )

        bonus, penalty = self._goal_economics(contract, results, reputation or ReputationContext())
        cash = cash_award(contract, bonus, penalty)

        self._award_xp(contract, base_xp_reward * bonus.xp_multiplier * penalty.xp_multiplier)
        self._release_team(contract)
        self._sink.publish(CashRequested(amount=cash, reason=f"contract:{contract.contract_id}"))
        self._sink.publish(
            ContractCompleted(
                contract_id=contract.contract_id,
                quality=quality,
                total_payout=contract.total_payout,
                cash_awarded=cash,
                is_perfect=bonus.is_perfect_contract,
            )
        )
        logger.info(
            "contract %s completed: quality=%.1f payout=%.0f cash=%.0f goals=%d/%d",
            contract.contract_id,
            quality,
            contract.total_payout,
            cash,
            sum(results),
            len(results),
        )
        return ContractOutcome(
            contract_id=contract.contract_id,
            success=True,
            quality=quality,
            raw_quality=raw_quality,
            total_payout=contract.total_payout,
            cash_awarded=cash,
            goal_results=tuple(results),
            bonus=bonus,
            penalty=penalty,
            tracking=tracking,
        )

    def _fail(
        self,
        contract: Contract,
        team: TeamSample,
        tracker: ContractTracker,
        current_streak: int,
        record_time: Optional[int],
        reason: str,
    ) -> ContractOutcome:
        tracking = tracker.build(
            contract,
            final_team=team,
            current_streak=current_streak,
            record_time=record_time,
            company_avg_morale=self._employees.get_company_average_morale(),
        )
        tracking, results = self._goals.evaluate_goals(contract, tracking)

        contract.quality_bonus = 0.0
        contract.total_payout = 0.0
        contract.final_quality = 0.0

        self._release_team(contract)
        self._sink.publish(ContractFailed(contract_id=contract.contract_id, reason=reason))
        logger.info("contract %s failed: %s (progress %.1f)", contract.contract_id, reason, contract.progress)
        return ContractOutcome(
            contract_id=contract.contract_id,
            success=False,
            goal_results=tuple(results),
            tracking=tracking,
            reason=reason,
        )

    def _goal_economics(
        self, contract: Contract, results: List[bool], rep: ReputationContext
    ) -> Tuple[BonusResult, PenaltyResult]:
        base = contract.base_payout
        bonuses: List[BonusResult] = []
        penalties: List[PenaltyResult] = []
        for record, ok in zip(contract.goals, results):
            if ok:
                bonuses.append(self._bonuses.apply_bonuses(contract, record.goal, base))
            else:
                penalties.append(self._penalties.apply_penalties(contract, record.goal, base, rep))
        bonuses.append(self._bonuses.apply_perfect_contract_bonus(contract, base, sum(results)))
        return merge_bonus_results(bonuses), merge_penalty_results(penalties)

    def _award_xp(self, contract: Contract, base_xp: float) -> None:
        if base_xp <= 0.0:
            return
        split = xp_split(contract, base_xp)
        if split is None:
            logger.warning("contract %s has no skill requirement; skipping xp", contract.contract_id)
            return
        dev, design, marketing = split
        for emp in contract.assigned_employee_ids:
            if not self._employees.has_employee(emp):
                continue
            self._sink.publish(SkillXPRequested(employee_id=emp, dev_xp=dev, design_xp=design, marketing_xp=marketing))

    def _release_team(self, contract: Contract) -> None:
        for emp in contract.assigned_employee_ids:
            self._sink.publish(EmployeeUnassignRequested(employee_id=emp, contract_id=contract.contract_id))
        contract.assigned_employee_ids.clear()
