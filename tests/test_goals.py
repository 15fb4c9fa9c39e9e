"""
Goal evaluation tests
"""
import pytest

from conftest import make_contract
from contract_engine.goals import GOAL_PREDICATES, GoalEvaluator, skill_deficit_percent
from contract_engine.tracking import ContractTracking
from contract_engine.types import ContractDifficulty, GoalDefinition, GoalType


def test_every_goal_type_has_a_predicate():
    assert set(GOAL_PREDICATES) == set(GoalType)


@pytest.mark.parametrize("quality", [0.0, 50.0, 100.0])
def test_no_penalties_depends_only_on_penalty_count(quality):
    evaluator = GoalEvaluator()
    goal = GoalDefinition(GoalType.NO_PENALTIES)
    contract = make_contract()
    assert evaluator.evaluate_goal(contract, goal, ContractTracking(final_quality=quality, penalty_count=0))
    assert not evaluator.evaluate_goal(contract, goal, ContractTracking(final_quality=quality, penalty_count=1))


def test_unknown_goal_type_evaluates_false():
    evaluator = GoalEvaluator(predicates={})
    assert evaluator.evaluate_goal(make_contract(), GoalDefinition(GoalType.IMPRESS_CLIENT), ContractTracking()) is False


def test_targets_are_adjusted_by_difficulty():
    goal = GoalDefinition(GoalType.DELIVER_HIGH_QUALITY, target_value=80.0)
    tracking = ContractTracking(final_quality=60.0)
    evaluator = GoalEvaluator()
    assert evaluator.evaluate_goal(make_contract(difficulty=ContractDifficulty.EASY), goal, tracking)
    assert not evaluator.evaluate_goal(make_contract(difficulty=ContractDifficulty.MEDIUM), goal, tracking)


def test_meta_goals_run_after_the_others():
    quality_goal = GoalDefinition(GoalType.DELIVER_HIGH_QUALITY, target_value=70.0)
    meta = GoalDefinition(GoalType.NO_PENALTIES)
    evaluator = GoalEvaluator()

    contract = make_contract(goals=[meta, quality_goal])
    tracking, results = evaluator.evaluate_goals(contract, ContractTracking(final_quality=50.0))
    assert results == [False, False]
    assert tracking.penalty_count == 1
    assert contract.goal_completion_status == (False, False)

    contract = make_contract(goals=[meta, quality_goal])
    tracking, results = evaluator.evaluate_goals(contract, ContractTracking(final_quality=80.0))
    assert results == [True, True]
    assert tracking.penalty_count == 0
    assert contract.goal_completion_status == (True, True)


def test_optional_failures_are_counted_separately():
    optional = GoalDefinition(GoalType.IMPRESS_CLIENT, is_optional=True)
    required = GoalDefinition(GoalType.DELIVER_HIGH_QUALITY, target_value=70.0)
    meta = GoalDefinition(GoalType.NO_OPTIONAL_GOAL_FAILURES)
    contract = make_contract(goals=[optional, required, meta])

    tracking, results = GoalEvaluator().evaluate_goals(contract, ContractTracking(final_quality=80.0))

    assert results == [False, True, False]
    assert tracking.penalty_count == 1
    assert tracking.optional_goal_failures == 1


def test_time_goals_read_the_contract_schedule():
    evaluator = GoalEvaluator()
    contract = make_contract(total_days=10, start_day=2, completion_day=8)
    t = ContractTracking()
    assert evaluator.evaluate_goal(contract, GoalDefinition(GoalType.FINISH_DAYS_EARLY, integer_target=3), t)
    assert not evaluator.evaluate_goal(contract, GoalDefinition(GoalType.FINISH_DAYS_EARLY, integer_target=5), t)
    assert evaluator.evaluate_goal(contract, GoalDefinition(GoalType.FINISH_PERCENT_FASTER, percentage_target=30.0), t)
    assert evaluator.evaluate_goal(contract, GoalDefinition(GoalType.NOT_EXCEED_TIME_PERCENT, percentage_target=70.0), t)
    assert not evaluator.evaluate_goal(contract, GoalDefinition(GoalType.FINISH_EXACT_DEADLINE), t)
    assert not evaluator.evaluate_goal(contract, GoalDefinition(GoalType.FINISH_FIRST_HALF), t)


@pytest.mark.parametrize(
    "goal,tracking,expected",
    [
        (GoalDefinition(GoalType.USE_MAX_EMPLOYEES, integer_target=2), ContractTracking(max_team_size=2), True),
        (GoalDefinition(GoalType.USE_MIN_EMPLOYEES, integer_target=3), ContractTracking(max_team_size=2), False),
        (GoalDefinition(GoalType.USE_SINGLE_SPECIALIST), ContractTracking(max_team_size=1), True),
        (GoalDefinition(GoalType.NO_TEAM_CHANGES), ContractTracking(team_change_count=1), False),
        (GoalDefinition(GoalType.MAINTAIN_AVG_MORALE, threshold_value=60.0), ContractTracking(avg_morale=65.0), True),
        (GoalDefinition(GoalType.FINISH_LOW_BURNOUT, threshold_value=30.0), ContractTracking(final_burnout=31.0), False),
        (GoalDefinition(GoalType.ZERO_BURNOUT_SPIKES), ContractTracking(burnout_spike_count=0), True),
        (GoalDefinition(GoalType.HIGH_PRODUCTIVITY, percentage_target=10.0), ContractTracking(avg_productivity=111.0), True),
        (GoalDefinition(GoalType.AVOID_OVERSTAFFING), ContractTracking(was_overstaffed=True), False),
        (
            GoalDefinition(GoalType.UNDER_LABOUR_COST),
            ContractTracking(labour_cost=800.0, projected_labour_cost=1000.0),
            True,
        ),
        (GoalDefinition(GoalType.OVERDELIVER), ContractTracking(raw_quality=104.0), True),
        (GoalDefinition(GoalType.IMPRESS_CLIENT), ContractTracking(final_quality=94.9), False),
        (GoalDefinition(GoalType.CONTRACT_STREAK, integer_target=3), ContractTracking(current_streak=3), True),
        (GoalDefinition(GoalType.RECORD_COMPLETION_TIME), ContractTracking(completion_time=5, record_time=4), False),
        (
            GoalDefinition(GoalType.MAINTAIN_COMPANY_MORALE, threshold_value=50.0),
            ContractTracking(company_avg_morale=55.0),
            True,
        ),
    ],
)
def test_goal_predicates(goal, tracking, expected):
    assert GoalEvaluator().evaluate_goal(make_contract(), goal, tracking) is expected


def test_skill_deficit_percent():
    contract = make_contract()  # requires 30 / 20 / 10
    t = ContractTracking(avg_dev_skill=15.0, avg_design_skill=25.0, avg_marketing_skill=10.0)
    assert skill_deficit_percent(contract, t) == pytest.approx(25.0)
    assert skill_deficit_percent(make_contract(required_dev_skill=0.0, required_design_skill=0.0,
                                               required_marketing_skill=0.0), t) == 0.0
