"""
Shared fixtures for the contract engine tests
"""
from typing import Iterable, List, Optional

import pytest

from contract_engine.events import CollectingSink
from contract_engine.providers import EmployeeSnapshot, InMemoryEmployeeProvider
from contract_engine.rng import SeededRandom
from contract_engine.types import (
    Contract,
    ContractDifficulty,
    ContractGoal,
    ContractState,
    ContractTemplate,
    GoalDefinition,
)


class ScriptedRandom:
    """RandomSource that replays fixed values.

    Floats are returned as given, clamped into the requested range. Ints are
    taken from their own script and clamped into [min, max). Once a script is
    exhausted it falls back to the range minimum.
    """

    def __init__(self, floats: Iterable[float] = (), ints: Iterable[int] = ()):
        self.floats: List[float] = list(floats)
        self.ints: List[int] = list(ints)
        self.float_calls = 0
        self.int_calls = 0

    def range_float(self, min_value, max_value):
        self.float_calls += 1
        v = self.floats.pop(0) if self.floats else min_value
        return min(max(v, min_value), max_value)

    def range_int(self, min_inclusive, max_exclusive):
        self.int_calls += 1
        if max_exclusive <= min_inclusive:
            return min_inclusive
        v = self.ints.pop(0) if self.ints else min_inclusive
        return min(max(v, min_inclusive), max_exclusive - 1)


@pytest.fixture
def seeded_rng():
    return SeededRandom(1234)


@pytest.fixture
def scripted_rng():
    return ScriptedRandom()


@pytest.fixture
def sink():
    return CollectingSink()


def make_template(template_id="web_app", **overrides):
    """ContractTemplate with test-friendly defaults"""
    values = dict(
        template_id=template_id,
        name="Web App",
        min_dev_skill=30.0,
        max_dev_skill=30.0,
        min_design_skill=20.0,
        max_design_skill=20.0,
        min_marketing_skill=10.0,
        max_marketing_skill=10.0,
        base_deadline_days=10,
        deadline_variance=0,
        min_payout=10000.0,
        max_payout=10000.0,
    )
    values.update(overrides)
    return ContractTemplate(**values)


@pytest.fixture
def template():
    return make_template()


def make_employee(employee_id, dev=50.0, design=50.0, marketing=50.0, morale=50.0, burnout=0.0, daily_cost=100.0):
    return EmployeeSnapshot(
        employee_id=employee_id,
        name=employee_id,
        dev_skill=dev,
        design_skill=design,
        marketing_skill=marketing,
        morale=morale,
        burnout=burnout,
        daily_cost=daily_cost,
    )


@pytest.fixture
def employees():
    return InMemoryEmployeeProvider(
        [
            make_employee("e1", dev=60.0, design=30.0, marketing=20.0),
            make_employee("e2", dev=20.0, design=60.0, marketing=30.0),
            make_employee("e3", dev=20.0, design=20.0, marketing=70.0),
        ]
    )


def make_contract(
    contract_id="c1",
    goals: Optional[Iterable[GoalDefinition]] = None,
    state=ContractState.ACTIVE,
    difficulty=ContractDifficulty.MEDIUM,
    total_days=10,
    employee_ids=("e1",),
    **overrides,
):
    """Contract ready for simulation/resolution tests"""
    values = dict(
        contract_id=contract_id,
        client_name="TechCorp",
        template_id="web_app",
        difficulty=difficulty,
        title="Web App",
        state=state,
        days_remaining=total_days,
        total_days=total_days,
        assigned_employee_ids=list(employee_ids),
        goals=[ContractGoal(goal=g, target_value=g.target_value, penalty_percent=10.0) for g in (goals or ())],
        base_payout=10000.0,
        required_dev_skill=30.0,
        required_design_skill=20.0,
        required_marketing_skill=10.0,
        start_day=0,
    )
    values.update(overrides)
    return Contract(**values)
