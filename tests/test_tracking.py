"""
Tracking tests: per-day samples folded into the goal-facing snapshot
"""
import pytest

from conftest import make_contract, make_employee
from contract_engine.providers import InMemoryEmployeeProvider
from contract_engine.simulation import ContractSimulation, ContractTickResult, TickStatus, sample_team
from contract_engine.tracking import ContractTracker


def _day(employees, delta, productivity=100.0, coverage=1.0, ids=("e1",)):
    return ContractTickResult(
        contract_id="c1",
        status=TickStatus.PROGRESS,
        productivity=productivity,
        progress_delta=delta,
        overall_coverage=coverage,
        team=sample_team(ids, employees),
    )


def test_time_metrics_from_daily_progress(employees):
    contract = make_contract(total_days=10)
    tracker = ContractTracker(contract, employees)
    # baseline is 10/day; below 5 counts as a stall
    for delta in (30.0, 4.0, 0.0, 3.0, 20.0, 15.0):
        tracker.record_day(_day(employees, delta))
    contract.completion_day = 6

    t = tracker.build(contract)

    assert t.completion_time == 6
    assert t.record_time == 6
    assert t.baseline_progress == pytest.approx(10.0)
    assert t.longest_stall_days == 3
    assert t.zero_days_count == 1
    assert t.reached_milestone is True
    assert t.avg_daily_progress == pytest.approx(72.0 / 6)


def test_milestone_missed_when_half_is_reached_late(employees):
    contract = make_contract(total_days=10)
    tracker = ContractTracker(contract, employees)
    for _ in range(6):
        tracker.record_day(_day(employees, 9.0))
    assert tracker.build(contract).reached_milestone is False


def test_explicit_record_time_is_kept(employees):
    contract = make_contract(completion_day=4)
    t = ContractTracker(contract, employees).build(contract, record_time=2)
    assert t.completion_time == 4
    assert t.record_time == 2


def test_team_metrics(employees):
    contract = make_contract(employee_ids=("e1",))
    tracker = ContractTracker(contract, employees)
    tracker.record_day(_day(employees, 10.0))
    tracker.record_day(_day(employees, 0.0, productivity=0.0, ids=()))
    tracker.record_assignment("e2")
    tracker.record_unassignment("e2")
    tracker.record_day(_day(employees, 10.0, coverage=2.0, ids=("e1", "e2")))

    t = tracker.build(contract)

    assert t.max_team_size == 2
    assert t.wasted_days == 1
    assert t.team_change_count == 2
    assert t.reassignment_count == 1
    assert t.had_designer is True
    assert t.had_marketer is False
    assert t.was_overstaffed is True


def test_labour_cost_against_projection(employees):
    contract = make_contract(total_days=10, employee_ids=("e1",))
    tracker = ContractTracker(contract, employees)
    for _ in range(4):
        tracker.record_day(_day(employees, 25.0))

    t = tracker.build(contract)

    assert t.projected_labour_cost == pytest.approx(1000.0)
    assert t.labour_cost == pytest.approx(400.0)


def test_wellbeing_metrics_follow_the_provider():
    employees = InMemoryEmployeeProvider([make_employee("e1", morale=60.0, burnout=20.0)])
    contract = make_contract(employee_ids=("e1",))
    tracker = ContractTracker(contract, employees)

    tracker.record_day(_day(employees, 10.0))
    employees.apply_burnout("e1", 10.0)
    employees.apply_morale("e1", -5.0)
    tracker.record_day(_day(employees, 10.0))
    employees.apply_burnout("e1", -25.0)
    employees.apply_morale("e1", 15.0)

    t = tracker.build(contract)

    assert t.avg_morale == pytest.approx(57.5)
    assert t.lowest_morale == pytest.approx(55.0)
    assert t.morale_change == pytest.approx(10.0)
    assert t.max_burnout == pytest.approx(30.0)
    assert t.final_burnout == pytest.approx(5.0)
    assert t.burnout_recovered == pytest.approx(15.0)
    assert t.total_burnout_growth == 0.0
    assert t.burnout_spike_count == 1
    assert t.negative_morale_events == 1
    assert t.skill_improved is True


def test_productivity_metrics(employees):
    contract = make_contract()
    tracker = ContractTracker(contract, employees)
    for p in (90.0, 110.0, 120.0):
        tracker.record_day(_day(employees, 10.0, productivity=p))

    t = tracker.build(contract)

    assert t.avg_productivity == pytest.approx(320.0 / 3)
    assert t.min_productivity == 90.0
    assert t.productivity_variance == pytest.approx(12.472, abs=1e-3)
    assert t.had_burnout_multiplier is True
    assert t.skill_coverage_percent == pytest.approx(100.0)


def test_tracker_records_real_simulation_days(employees):
    contract = make_contract(total_days=10)
    sim = ContractSimulation(employees)
    tracker = ContractTracker(contract, employees)
    while True:
        result = sim.tick_contract(contract)
        tracker.record_day(result)
        if result.status != TickStatus.PROGRESS:
            break
    contract.completion_day = 10 - contract.days_remaining

    t = tracker.build(contract, current_streak=3, company_avg_morale=50.0)

    assert t.completion_time == contract.days_used
    assert t.avg_productivity == pytest.approx(sim.calculate_productivity(contract))
    assert t.current_streak == 3
    assert t.company_avg_morale == 50.0
    assert t.avg_dev_skill == pytest.approx(60.0)
