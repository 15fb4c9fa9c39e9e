from __future__ import annotations

"""In-flight contract metrics.

``ContractTracker`` records one sample per simulated day while a contract is
ACTIVE. At resolution it is folded into an immutable ``ContractTracking``
that the goal evaluator reads once. Trackers are transient and never persisted;
a contract restored from a save starts a fresh tracker.
"""

import logging
import statistics
from dataclasses import dataclass
from typing import List, Optional, Sequence

from . import config as c_cfg
from .providers import EmployeeProvider
from .simulation import ContractTickResult, TeamSample, sample_team
from .types import Contract, SkillAxis

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ContractTracking:
    # skill
    final_quality: float = 0.0
    raw_quality: float = 0.0
    avg_dev_skill: float = 0.0
    avg_design_skill: float = 0.0
    avg_marketing_skill: float = 0.0
    avg_effective_skill: float = 0.0
    lowest_effective_skill: float = 0.0
    lowest_skill: float = 0.0
    highest_skill: float = 0.0
    avg_skill: float = 0.0

    # time
    completion_time: int = 0
    longest_stall_days: int = 0
    zero_days_count: int = 0
    reached_milestone: bool = False
    wasted_days: int = 0
    record_time: int = 0

    # team
    max_team_size: int = 0
    had_designer: bool = False
    had_marketer: bool = False
    team_change_count: int = 0
    reassignment_count: int = 0

    # wellbeing
    avg_morale: float = 0.0
    lowest_morale: float = 0.0
    final_burnout: float = 0.0
    max_burnout: float = 0.0
    morale_change: float = 0.0
    burnout_recovered: float = 0.0
    burnout_spike_count: int = 0
    skill_improved: bool = False
    negative_morale_events: int = 0
    total_burnout_growth: float = 0.0

    # efficiency
    labour_cost: float = 0.0
    projected_labour_cost: float = 0.0
    avg_productivity: float = 0.0
    min_productivity: float = 0.0
    was_overstaffed: bool = False
    avg_daily_progress: float = 0.0
    baseline_progress: float = 0.0
    # population standard deviation of daily productivity, in productivity points
    productivity_variance: float = 0.0
    had_burnout_multiplier: bool = False
    skill_coverage_percent: float = 0.0

    # reputation
    penalty_count: int = 0
    optional_goal_failures: int = 0
    current_streak: int = 0
    company_avg_morale: float = 0.0


def _mean(values: Sequence[float], default: float = 0.0) -> float:
    return sum(values) / len(values) if values else default


class ContractTracker:
    def __init__(self, contract: Contract, employees: EmployeeProvider) -> None:
        self.contract_id = contract.contract_id
        self._employees = employees
        self._total_days = max(int(contract.total_days), 1)

        self.productivity: List[float] = []
        self.progress_deltas: List[float] = []
        self.coverage: List[float] = []
        self.team_sizes: List[int] = []
        self.morale: List[float] = []
        self.burnout: List[float] = []
        self.axis_avg = {axis: [] for axis in SkillAxis}
        self.effective_avg: List[float] = []

        self.lowest_effective: Optional[float] = None
        self.lowest_skill: Optional[float] = None
        self.highest_skill: float = 0.0
        self.lowest_morale: Optional[float] = None
        self.max_burnout: float = 0.0
        self.had_designer = False
        self.had_marketer = False

        self.labour_cost = 0.0
        self.progress = float(contract.progress)
        self.reached_milestone = False
        self.team_change_count = 0
        self.reassignment_count = 0

        self.initial_morale = 0.0
        self.initial_burnout = 0.0
        self.initial_effective = 0.0
        self.projected_labour_cost = 0.0
        self.start(contract.assigned_employee_ids)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    def start(self, employee_ids: Sequence[str]) -> None:
        team = sample_team(employee_ids, self._employees)
        self.initial_morale = team.avg_morale
        self.initial_burnout = team.avg_burnout
        self.initial_effective = self._team_effective_mean(team)
        daily = sum(self._employees.get_daily_cost(e) for e in team.employee_ids)
        self.projected_labour_cost = daily * self._total_days
        self._observe_members(team)

    def record_assignment(self, employee_id: str) -> None:
        self.team_change_count += 1

    def record_unassignment(self, employee_id: str) -> None:
        self.team_change_count += 1
        self.reassignment_count += 1

    def record_day(self, result: ContractTickResult) -> None:
        team = result.team
        day_index = len(self.productivity) + 1

        self.productivity.append(result.productivity)
        self.progress_deltas.append(result.progress_delta)
        self.coverage.append(result.overall_coverage)
        self.team_sizes.append(team.size)

        self.progress = min(self.progress + result.progress_delta, 100.0)
        if self.progress >= c_cfg.PROGRESS_MILESTONE and day_index <= self._total_days / 2.0:
            self.reached_milestone = True

        if team.size:
            self.morale.append(team.avg_morale)
            self.burnout.append(team.avg_burnout)
            for axis in SkillAxis:
                self.axis_avg[axis].append(team.skill_totals.get(axis, 0.0) / team.size)
            self.effective_avg.append(self._team_effective_mean(team))
            self.labour_cost += sum(self._employees.get_daily_cost(e) for e in team.employee_ids)
            self._observe_members(team)

    def _team_effective_mean(self, team: TeamSample) -> float:
        if not team.size:
            return 0.0
        return sum(team.skill_totals.values()) / (3.0 * team.size)

    def _observe_members(self, team: TeamSample) -> None:
        for emp in team.employee_ids:
            skills = {axis: self._employees.get_effective_skill(emp, axis) for axis in SkillAxis}
            mean = sum(skills.values()) / 3.0
            lo = min(skills.values())
            hi = max(skills.values())
            self.lowest_effective = mean if self.lowest_effective is None else min(self.lowest_effective, mean)
            self.lowest_skill = lo if self.lowest_skill is None else min(self.lowest_skill, lo)
            self.highest_skill = max(self.highest_skill, hi)

            morale = self._employees.get_morale(emp)
            self.lowest_morale = morale if self.lowest_morale is None else min(self.lowest_morale, morale)
            self.max_burnout = max(self.max_burnout, self._employees.get_burnout(emp))

            best = max(skills, key=lambda a: skills[a])
            if best == SkillAxis.DESIGN:
                self.had_designer = True
            elif best == SkillAxis.MARKETING:
                self.had_marketer = True

    # ------------------------------------------------------------------
    # Folding
    # ------------------------------------------------------------------
    def _longest_stall(self, baseline: float) -> int:
        limit = baseline * c_cfg.STALL_PROGRESS_RATIO
        longest = run = 0
        for d in self.progress_deltas:
            if d < limit:
                run += 1
                longest = max(longest, run)
            else:
                run = 0
        return longest

    def _count_rises(self, values: Sequence[float], delta: float) -> int:
        return sum(1 for a, b in zip(values, values[1:]) if b - a > delta)

    def build(
        self,
        contract: Contract,
        *,
        final_quality: float = 0.0,
        raw_quality: float = 0.0,
        final_team: Optional[TeamSample] = None,
        current_streak: int = 0,
        record_time: Optional[int] = None,
        company_avg_morale: float = 0.0,
    ) -> ContractTracking:
        team = final_team if final_team is not None else sample_team(contract.assigned_employee_ids, self._employees)
        if team.size:
            self._observe_members(team)

        baseline = 100.0 / self._total_days
        final_burnout = team.avg_burnout if team.size else _mean(self.burnout[-1:], self.initial_burnout)
        final_morale = team.avg_morale if team.size else _mean(self.morale[-1:], self.initial_morale)
        final_effective = self._team_effective_mean(team) if team.size else self.initial_effective
        avg_effective = _mean(self.effective_avg, self.initial_effective)
        morale_series = self.morale + ([final_morale] if team.size else [])
        burnout_series = self.burnout + ([final_burnout] if team.size else [])

        completion_time = contract.days_used

        return ContractTracking(
            final_quality=final_quality,
            raw_quality=raw_quality,
            avg_dev_skill=_mean(self.axis_avg[SkillAxis.DEV]),
            avg_design_skill=_mean(self.axis_avg[SkillAxis.DESIGN]),
            avg_marketing_skill=_mean(self.axis_avg[SkillAxis.MARKETING]),
            avg_effective_skill=avg_effective,
            lowest_effective_skill=self.lowest_effective or 0.0,
            lowest_skill=self.lowest_skill or 0.0,
            highest_skill=self.highest_skill,
            avg_skill=avg_effective,
            completion_time=completion_time,
            longest_stall_days=self._longest_stall(baseline),
            zero_days_count=sum(1 for d in self.progress_deltas if d <= 0.0),
            reached_milestone=self.reached_milestone,
            wasted_days=sum(1 for n in self.team_sizes if n == 0),
            record_time=completion_time if record_time is None else int(record_time),
            max_team_size=max(self.team_sizes + [team.size]),
            had_designer=self.had_designer,
            had_marketer=self.had_marketer,
            team_change_count=self.team_change_count,
            reassignment_count=self.reassignment_count,
            avg_morale=_mean(self.morale, self.initial_morale),
            lowest_morale=self.lowest_morale or 0.0,
            final_burnout=final_burnout,
            max_burnout=self.max_burnout,
            morale_change=final_morale - self.initial_morale,
            burnout_recovered=max(self.initial_burnout - final_burnout, 0.0),
            burnout_spike_count=self._count_rises(burnout_series, c_cfg.BURNOUT_SPIKE_DELTA),
            skill_improved=final_effective > self.initial_effective,
            negative_morale_events=self._count_rises([-m for m in morale_series], c_cfg.NEGATIVE_MORALE_DELTA),
            total_burnout_growth=max(final_burnout - self.initial_burnout, 0.0),
            labour_cost=self.labour_cost,
            projected_labour_cost=self.projected_labour_cost,
            avg_productivity=_mean(self.productivity),
            min_productivity=min(self.productivity) if self.productivity else 0.0,
            was_overstaffed=any(
                n > 1 and c >= c_cfg.OVERSTAFFED_COVERAGE for n, c in zip(self.team_sizes, self.coverage)
            ),
            avg_daily_progress=_mean(self.progress_deltas),
            baseline_progress=baseline,
            productivity_variance=statistics.pstdev(self.productivity) if len(self.productivity) > 1 else 0.0,
            had_burnout_multiplier=any(p > c_cfg.OVERWORK_PRODUCTIVITY for p in self.productivity),
            skill_coverage_percent=_mean(self.coverage) * 100.0,
            current_streak=int(current_streak),
            company_avg_morale=float(company_avg_morale),
        )
