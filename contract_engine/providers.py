from __future__ import annotations

"""Collaborator interfaces the engine reads from.

The employee, reputation, rival and market systems live outside this package.
The engine only sees them through the Protocols below. The in-memory
implementations hold plain snapshots and are used by the HTTP facade and by
tests.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from . import config as c_cfg
from .formulas import effective_skill
from .types import ReputationContext, SkillAxis, TechAdoptionPhase

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class EmployeeProvider(Protocol):
    def has_employee(self, employee_id: str) -> bool:
        ...

    def get_effective_skill(self, employee_id: str, axis: SkillAxis) -> float:
        ...

    def get_morale(self, employee_id: str) -> float:
        ...

    def get_burnout(self, employee_id: str) -> float:
        ...

    def get_daily_cost(self, employee_id: str) -> float:
        ...

    def get_company_average_morale(self) -> float:
        ...


@runtime_checkable
class ReputationProvider(Protocol):
    @property
    def current_reputation(self) -> float:
        ...

    @property
    def max_reputation(self) -> float:
        ...

    @property
    def employee_max_skill(self) -> float:
        ...


@dataclass(frozen=True, slots=True)
class RivalCompanySnapshot:
    company_id: str
    name: str
    cash: float = 0.0
    # category_id -> market share in [0, 1]
    category_shares: Mapping[str, float] = field(default_factory=dict)


@runtime_checkable
class RivalProvider(Protocol):
    def list_companies(self) -> Sequence[RivalCompanySnapshot]:
        ...


@runtime_checkable
class MarketProvider(Protocol):
    @property
    def current_era_id(self) -> str:
        ...

    def get_adoption_phase(self, category_id: str) -> Optional[TechAdoptionPhase]:
        ...

    def get_era_market_multiplier(self) -> float:
        ...

    def get_category_tags(self, category_id: str) -> Sequence[str]:
        ...


# ---------------------------------------------------------------------------
# In-memory implementations
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EmployeeSnapshot:
    employee_id: str
    name: str = ""
    dev_skill: float = 0.0
    design_skill: float = 0.0
    marketing_skill: float = 0.0
    morale: float = 50.0
    burnout: float = 0.0
    daily_cost: float = 0.0

    def base_skill(self, axis: SkillAxis) -> float:
        if axis == SkillAxis.DEV:
            return self.dev_skill
        if axis == SkillAxis.DESIGN:
            return self.design_skill
        return self.marketing_skill

    def effective_skill(self, axis: SkillAxis) -> float:
        return effective_skill(self.base_skill(axis), self.morale, self.burnout)


class InMemoryEmployeeProvider:
    def __init__(self, employees: Iterable[EmployeeSnapshot] = ()) -> None:
        self._employees: Dict[str, EmployeeSnapshot] = {}
        for e in employees:
            self.upsert(e)

    def upsert(self, employee: EmployeeSnapshot) -> None:
        self._employees[str(employee.employee_id)] = employee

    def remove(self, employee_id: str) -> None:
        self._employees.pop(str(employee_id), None)

    def get(self, employee_id: str) -> Optional[EmployeeSnapshot]:
        return self._employees.get(str(employee_id))

    def list_employees(self) -> List[EmployeeSnapshot]:
        return list(self._employees.values())

    def apply_burnout(self, employee_id: str, amount: float) -> None:
        e = self.get(employee_id)
        if e is None:
            logger.warning("apply_burnout: unknown employee %s", employee_id)
            return
        self.upsert(replace(e, burnout=min(max(e.burnout + float(amount), 0.0), 100.0)))

    def apply_morale(self, employee_id: str, amount: float) -> None:
        e = self.get(employee_id)
        if e is None:
            logger.warning("apply_morale: unknown employee %s", employee_id)
            return
        self.upsert(replace(e, morale=min(max(e.morale + float(amount), 0.0), 100.0)))

    # ---- EmployeeProvider -----------------------------------------------
    def has_employee(self, employee_id: str) -> bool:
        return str(employee_id) in self._employees

    def get_effective_skill(self, employee_id: str, axis: SkillAxis) -> float:
        e = self.get(employee_id)
        return e.effective_skill(axis) if e is not None else 0.0

    def get_morale(self, employee_id: str) -> float:
        e = self.get(employee_id)
        return e.morale if e is not None else 0.0

    def get_burnout(self, employee_id: str) -> float:
        e = self.get(employee_id)
        return e.burnout if e is not None else 0.0

    def get_daily_cost(self, employee_id: str) -> float:
        e = self.get(employee_id)
        return e.daily_cost if e is not None else 0.0

    def get_company_average_morale(self) -> float:
        if not self._employees:
            return 0.0
        return sum(e.morale for e in self._employees.values()) / len(self._employees)


@dataclass(slots=True)
class StaticReputationProvider:
    current_reputation: float = 0.0
    max_reputation: float = c_cfg.DEFAULT_MAX_REPUTATION
    employee_max_skill: float = c_cfg.DEFAULT_EMPLOYEE_MAX_SKILL


class InMemoryRivalProvider:
    def __init__(self, companies: Iterable[RivalCompanySnapshot] = ()) -> None:
        self._companies: Dict[str, RivalCompanySnapshot] = {c.company_id: c for c in companies}

    def upsert(self, company: RivalCompanySnapshot) -> None:
        self._companies[company.company_id] = company

    def list_companies(self) -> List[RivalCompanySnapshot]:
        return list(self._companies.values())


@dataclass(slots=True)
class StaticMarketProvider:
    current_era_id: str = "default"
    era_market_multiplier: float = 1.0
    phases: Dict[str, TechAdoptionPhase] = field(default_factory=dict)
    category_tags: Dict[str, List[str]] = field(default_factory=dict)

    def get_adoption_phase(self, category_id: str) -> Optional[TechAdoptionPhase]:
        return self.phases.get(category_id)

    def get_era_market_multiplier(self) -> float:
        return self.era_market_multiplier

    def get_category_tags(self, category_id: str) -> List[str]:
        return list(self.category_tags.get(category_id, []))


def reputation_context(provider: Optional[ReputationProvider]) -> ReputationContext:
    """Snapshot a reputation provider; defaults when none is wired."""
    if provider is None:
        return ReputationContext(
            reputation=0.0,
            max_reputation=c_cfg.DEFAULT_MAX_REPUTATION,
            employee_max_skill=c_cfg.DEFAULT_EMPLOYEE_MAX_SKILL,
        )
    return ReputationContext(
        reputation=float(provider.current_reputation),
        max_reputation=float(provider.max_reputation),
        employee_max_skill=float(provider.employee_max_skill),
    )
