from __future__ import annotations

"""Daily contract progression.

One day tick advances every ACTIVE contract; the burnout pass runs separately
after progress so callers can resolve contracts that finished in between.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from . import formulas as f
from .events import (
    BurnoutChangeRequested,
    ContractProgressUpdated,
    ContractReadyToComplete,
    ContractReadyToFail,
    EventSink,
    NullSink,
)
from .providers import EmployeeProvider
from .types import Contract, ContractState, SkillAxis

logger = logging.getLogger(__name__)


class TickStatus(str, Enum):
    PROGRESS = "progress"
    READY_TO_COMPLETE = "ready_to_complete"
    READY_TO_FAIL = "ready_to_fail"


@dataclass(frozen=True, slots=True)
class TeamSample:
    """Assigned employees the provider could resolve, read at one instant."""

    employee_ids: Tuple[str, ...]
    skill_totals: Dict[SkillAxis, float] = field(default_factory=dict)
    avg_morale: float = 0.0
    avg_burnout: float = 0.0

    @property
    def size(self) -> int:
        return len(self.employee_ids)


def sample_team(employee_ids: Iterable[str], employees: EmployeeProvider) -> TeamSample:
    ids = tuple(e for e in employee_ids if employees.has_employee(e))
    totals = {axis: 0.0 for axis in SkillAxis}
    if not ids:
        return TeamSample(employee_ids=(), skill_totals=totals)
    morale = 0.0
    burnout = 0.0
    for emp in ids:
        for axis in SkillAxis:
            totals[axis] += employees.get_effective_skill(emp, axis)
        morale += employees.get_morale(emp)
        burnout += employees.get_burnout(emp)
    n = float(len(ids))
    return TeamSample(employee_ids=ids, skill_totals=totals, avg_morale=morale / n, avg_burnout=burnout / n)


def required_skills(contract: Contract) -> Dict[SkillAxis, float]:
    return {axis: contract.required_skill(axis) for axis in SkillAxis}


def team_productivity(contract: Contract, team: TeamSample) -> float:
    if team.size == 0:
        return 0.0
    coverages = f.skill_coverage(team.skill_totals, required_skills(contract))
    return f.team_productivity(
        coverages,
        avg_morale=team.avg_morale,
        avg_burnout=team.avg_burnout,
        team_size=team.size,
    )


@dataclass(frozen=True, slots=True)
class ContractTickResult:
    contract_id: str
    status: TickStatus
    productivity: float
    progress_delta: float
    overall_coverage: float
    team: TeamSample


class ContractSimulation:
    def __init__(self, employees: EmployeeProvider, sink: Optional[EventSink] = None) -> None:
        self._employees = employees
        self._sink = sink or NullSink()

    def sample(self, contract: Contract, employee_ids: Optional[Sequence[str]] = None) -> TeamSample:
        ids = contract.assigned_employee_ids if employee_ids is None else employee_ids
        return sample_team(ids, self._employees)

    def calculate_productivity(self, contract: Contract) -> float:
        return team_productivity(contract, self.sample(contract))

    def estimate_productivity(self, contract: Contract, employee_ids: Sequence[str]) -> float:
        """Productivity a proposed team would reach on this contract today."""
        return team_productivity(contract, self.sample(contract, list(dict.fromkeys(employee_ids))))

    # ------------------------------------------------------------------
    # Day tick
    # ------------------------------------------------------------------
    def tick_contract(self, contract: Contract) -> Optional[ContractTickResult]:
        if contract.state != ContractState.ACTIVE:
            return None

        contract.days_remaining -= 1

        team = self.sample(contract)
        productivity = team_productivity(contract, team)
        coverage = 0.0
        if team.size:
            coverage = f.overall_coverage(
                list(f.skill_coverage(team.skill_totals, required_skills(contract)).values())
            )

        delta = f.daily_progress(contract.total_days, productivity)
        contract.progress = min(contract.progress + delta, 100.0)

        if contract.progress >= 100.0:
            status = TickStatus.READY_TO_COMPLETE
            self._sink.publish(ContractReadyToComplete(contract_id=contract.contract_id))
        elif contract.days_remaining <= 0:
            status = TickStatus.READY_TO_FAIL
            self._sink.publish(ContractReadyToFail(contract_id=contract.contract_id, progress=contract.progress))
        else:
            status = TickStatus.PROGRESS
            self._sink.publish(
                ContractProgressUpdated(
                    contract_id=contract.contract_id,
                    progress=contract.progress,
                    productivity=productivity,
                )
            )

        return ContractTickResult(
            contract_id=contract.contract_id,
            status=status,
            productivity=productivity,
            progress_delta=delta,
            overall_coverage=coverage,
            team=team,
        )

    def tick_active_contracts(self, contracts: Iterable[Contract]) -> List[ContractTickResult]:
        results: List[ContractTickResult] = []
        for contract in list(contracts):
            r = self.tick_contract(contract)
            if r is not None:
                results.append(r)
        return results

    def tick_available_contracts(self, contracts: Iterable[Contract]) -> None:
        for contract in contracts:
            if contract.state == ContractState.AVAILABLE:
                contract.days_available += 1

    def apply_daily_burnout(self, contracts: Iterable[Contract], base_burnout: Dict[str, float]) -> int:
        """Publish burnout for every staffed ACTIVE contract.

        ``base_burnout`` maps template id to the template's base burnout impact.
        Returns the number of burnout requests published.
        """
        published = 0
        for contract in contracts:
            if contract.state != ContractState.ACTIVE or not contract.assigned_employee_ids:
                continue
            base = base_burnout.get(contract.template_id)
            if base is None:
                logger.warning("no burnout impact for template %s", contract.template_id)
                continue
            productivity = self.calculate_productivity(contract)
            amount = f.daily_burnout(base, contract.total_days, productivity)
            if amount <= 0.0:
                continue
            for emp in contract.assigned_employee_ids:
                if not self._employees.has_employee(emp):
                    continue
                self._sink.publish(BurnoutChangeRequested(employee_id=emp, amount=amount))
                published += 1
        return published
