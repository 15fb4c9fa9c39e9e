"""
Resolution tests: quality, payout, goal economics, XP and idempotence
"""
import pytest

from conftest import make_contract, make_employee
from contract_engine.events import (
    CashRequested,
    ContractCompleted,
    ContractFailed,
    EmployeeUnassignRequested,
    MoraleChangeRequested,
    ReputationChangeRequested,
    SkillXPRequested,
)
from contract_engine.providers import InMemoryEmployeeProvider
from contract_engine.resolver import ContractResolver, calculate_quality, xp_split
from contract_engine.simulation import sample_team
from contract_engine.types import (
    BonusDefinition,
    BonusType,
    ContractState,
    GoalDefinition,
    GoalType,
    PenaltyDefinition,
    PenaltyType,
)

# ace: effective 90 on every axis, neutral morale, delivered on day 8 of 10
QUALITY = 90.0 * 1.03
QUALITY_BONUS = (QUALITY - 50.0) / 100.0 * 10000.0 * 0.5


@pytest.fixture
def staff():
    return InMemoryEmployeeProvider([make_employee("ace", dev=90.0, design=90.0, marketing=90.0)])


@pytest.fixture
def resolver(staff, sink):
    return ContractResolver(staff, sink)


def _contract(goals=None, **kw):
    kw.setdefault("employee_ids", ("ace",))
    kw.setdefault("progress", 100.0)
    return make_contract(goals=goals, **kw)


def test_successful_completion_pays_and_releases_the_team(resolver, sink):
    contract = _contract()

    outcome = resolver.complete_contract(contract, True, current_day=8, base_xp_reward=10.0)

    assert outcome.success is True
    assert outcome.quality == pytest.approx(QUALITY)
    assert contract.state == ContractState.COMPLETED
    assert contract.completion_day == 8
    assert contract.final_quality == pytest.approx(QUALITY)
    assert contract.quality_bonus == pytest.approx(QUALITY_BONUS)
    assert contract.total_payout == pytest.approx(10000.0 + QUALITY_BONUS)
    assert outcome.cash_awarded == pytest.approx(contract.total_payout)
    assert contract.assigned_employee_ids == []

    assert [type(e) for e in sink.events] == [
        SkillXPRequested,
        EmployeeUnassignRequested,
        CashRequested,
        ContractCompleted,
    ]
    [cash] = sink.of_type(CashRequested)
    assert cash.amount == pytest.approx(outcome.cash_awarded)
    [done] = sink.of_type(ContractCompleted)
    assert done.total_payout == pytest.approx(contract.total_payout)


def test_xp_split_follows_requirements_and_sums_to_base(resolver, sink):
    resolver.complete_contract(_contract(), True, current_day=8, base_xp_reward=12.0)
    [xp] = sink.of_type(SkillXPRequested)
    assert xp.employee_id == "ace"
    assert (xp.dev_xp, xp.design_xp, xp.marketing_xp) == pytest.approx((6.0, 4.0, 2.0))
    assert xp.total == pytest.approx(12.0)


def test_xp_is_skipped_without_requirements(resolver, sink):
    contract = _contract(required_dev_skill=0.0, required_design_skill=0.0, required_marketing_skill=0.0)
    assert xp_split(contract, 10.0) is None
    resolver.complete_contract(contract, True, current_day=8, base_xp_reward=10.0)
    assert sink.of_type(SkillXPRequested) == []
    assert len(sink.of_type(ContractCompleted)) == 1


def test_resolving_twice_is_a_no_op(resolver, sink):
    contract = _contract()
    assert resolver.complete_contract(contract, True, current_day=8) is not None
    events = list(sink.events)

    assert resolver.complete_contract(contract, True, current_day=9) is None
    assert resolver.complete_contract(contract, False, current_day=9) is None
    assert sink.events == events
    assert contract.state == ContractState.COMPLETED
    assert contract.completion_day == 8


def test_failure_pays_nothing_but_records_goals(resolver, sink):
    goal = GoalDefinition(GoalType.NO_DAYS_ZERO_PROGRESS)
    contract = _contract(goals=[goal], progress=40.0)

    outcome = resolver.complete_contract(contract, False, current_day=10, base_xp_reward=10.0)

    assert outcome.success is False
    assert outcome.reason == "Deadline missed"
    assert contract.state == ContractState.FAILED
    assert contract.total_payout == 0.0
    assert contract.quality_bonus == 0.0
    assert len(outcome.goal_results) == len(contract.goals) == 1
    assert contract.assigned_employee_ids == []
    assert sink.of_type(CashRequested) == []
    assert sink.of_type(SkillXPRequested) == []
    [failed] = sink.of_type(ContractFailed)
    assert failed.reason == "Deadline missed"


def test_failed_goal_costs_its_penalty_and_strips_quality_bonus(resolver):
    goal = GoalDefinition(
        GoalType.DELIVER_HIGH_QUALITY,
        target_value=95.0,
        penalties=(PenaltyDefinition(PenaltyType.REMOVE_QUALITY_BONUS),),
    )
    contract = _contract(goals=[goal])

    outcome = resolver.complete_contract(contract, True, current_day=8)

    assert outcome.goal_results == (False,)
    assert contract.total_payout == pytest.approx(10000.0 + QUALITY_BONUS - 1000.0)
    assert outcome.penalty.remove_quality_bonus is True
    assert outcome.cash_awarded == pytest.approx(9000.0)


def test_perfect_contract_adds_goal_and_perfect_bonuses(resolver, sink):
    goal = GoalDefinition(
        GoalType.DELIVER_HIGH_QUALITY,
        target_value=70.0,
        bonuses=(
            BonusDefinition(BonusType.INCREASE_BASE_PAYOUT, percent_value=10.0),
            BonusDefinition(BonusType.EXTRA_XP, percent_value=50.0, scale_by_difficulty=False),
        ),
    )
    contract = _contract(goals=[goal])

    outcome = resolver.complete_contract(contract, True, current_day=8, base_xp_reward=10.0)

    assert outcome.is_perfect is True
    assert outcome.goals_completed == 1
    assert contract.goal_completion_status == (True,)
    assert outcome.bonus.total_payout_increase == pytest.approx(1000.0 + 1500.0)
    assert outcome.cash_awarded == pytest.approx(contract.total_payout + 2500.0)
    [xp] = sink.of_type(SkillXPRequested)
    assert xp.total == pytest.approx(15.0)
    [rep] = sink.of_type(ReputationChangeRequested)
    assert rep.amount == pytest.approx(10.0)
    [morale] = sink.of_type(MoraleChangeRequested)
    assert (morale.employee_id, morale.amount) == ("ace", 15.0)
    [done] = sink.of_type(ContractCompleted)
    assert done.is_perfect is True
    assert done.cash_awarded == pytest.approx(outcome.cash_awarded)


def test_quality_is_clamped_but_raw_quality_is_kept():
    staff = InMemoryEmployeeProvider([make_employee("ace", dev=90.0, design=90.0, marketing=90.0, morale=100.0)])
    contract = _contract(completion_day=8)
    quality, raw = calculate_quality(contract, sample_team(["ace"], staff))
    assert quality == 100.0
    assert raw == pytest.approx(100.0 * 1.1 * 1.03)


def test_quality_of_an_empty_team_is_zero(staff):
    assert calculate_quality(_contract(), sample_team([], staff)) == (0.0, 0.0)
    assert ContractResolver(staff).calculate_quality(_contract(employee_ids=())) == (0.0, 0.0)
