"""
ContractSystem tests: lifecycle, day tick ordering, expiry, generation, rivals
"""
import itertools

import pytest

from conftest import make_contract, make_template
from contract_engine.events import (
    BurnoutChangeRequested,
    ContractAccepted,
    ContractCompleted,
    ContractExpired,
    ContractFailed,
    ContractsChanged,
    EmployeeAssignRequested,
    EmployeeUnassignRequested,
    IssuerPaymentRequested,
)
from contract_engine.providers import InMemoryRivalProvider, RivalCompanySnapshot
from contract_engine.rng import SeededRandom
from contract_engine.service import ContractSystem
from contract_engine.types import (
    ContractBalanceConfig,
    ContractState,
    ContractType,
    ContractWorldEffect,
    MarketComponent,
)


def _system(sink, employees, config=None, rivals=None, seed=1):
    counter = itertools.count(1)
    return ContractSystem(
        [make_template()],
        rng=SeededRandom(seed),
        sink=sink,
        employees=employees,
        rivals=rivals,
        config=config or ContractBalanceConfig(),
        id_factory=lambda: f"k{next(counter)}",
    )


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def test_new_game_fills_the_offer_pool(sink, employees):
    system = _system(sink, employees)
    created = system.start_new_game(current_day=3)

    assert len(created) == 5
    assert system.get_available_contracts() == created
    assert all(c.creation_day == 3 for c in created)
    assert system.current_day == 3
    assert sink.of_type(ContractsChanged)


def test_accept_starts_the_contract_with_a_clean_team(sink, employees):
    system = _system(sink, employees)
    system.start_new_game(current_day=2)
    offer = system.get_available_contracts()[0]
    sink.clear()

    assert system.accept_contract(offer.contract_id, ["e1", "e1", "ghost", "e2"])

    assert offer.state == ContractState.ACTIVE
    assert offer.start_day == 2
    assert offer.days_available == 0
    assert offer.assigned_employee_ids == ["e1", "e2"]
    assert [e.employee_id for e in sink.of_type(EmployeeAssignRequested)] == ["e1", "e2"]
    [accepted] = sink.of_type(ContractAccepted)
    assert accepted.employee_ids == ("e1", "e2")
    assert system.find_assignment("e2") is offer


def test_accept_refuses_bad_requests(sink, employees):
    system = _system(sink, employees, ContractBalanceConfig(max_active_contracts=1))
    system.start_new_game()
    first, second = system.get_available_contracts()[:2]

    assert not system.accept_contract("missing")
    assert system.accept_contract(first.contract_id, ["e1"])
    assert not system.accept_contract(first.contract_id)
    assert not system.accept_contract(second.contract_id, ["e2"])
    assert second.state == ContractState.AVAILABLE


def test_employee_on_another_contract_is_skipped(sink, employees):
    system = _system(sink, employees)
    system.start_new_game()
    a, b = system.get_available_contracts()[:2]
    system.accept_contract(a.contract_id, ["e1"])

    assert system.accept_contract(b.contract_id, ["e1", "e3"])
    assert b.assigned_employee_ids == ["e3"]


def test_assign_and_unassign(sink, employees):
    system = _system(sink, employees)
    system.start_new_game()
    a, b = system.get_available_contracts()[:2]
    system.accept_contract(a.contract_id, ["e1"])

    assert not system.assign_employee(b.contract_id, "e2")  # not active
    assert not system.assign_employee(a.contract_id, "e1")  # duplicate
    assert not system.assign_employee(a.contract_id, "ghost")
    assert system.assign_employee(a.contract_id, "e2")
    assert a.assigned_employee_ids == ["e1", "e2"]

    assert system.unassign_employee(a.contract_id, "e1")
    assert not system.unassign_employee(a.contract_id, "e1")
    assert a.assigned_employee_ids == ["e2"]
    assert [e.employee_id for e in sink.of_type(EmployeeUnassignRequested)] == ["e1"]


def test_estimate_for_unknown_contract_is_zero(sink, employees):
    system = _system(sink, employees)
    assert system.estimate_productivity("missing", ["e1"]) == 0.0


# ---------------------------------------------------------------------------
# Day tick
# ---------------------------------------------------------------------------


def test_tick_resolves_before_burnout(sink, employees):
    system = _system(sink, employees)
    finishing = make_contract("done", progress=95.0, employee_ids=("e1",))
    running = make_contract("run", employee_ids=("e2",))
    system.load_contracts([finishing, running])
    sink.clear()

    report = system.process_day_tick()

    assert report.day == 1
    assert [o.contract_id for o in report.completed] == ["done"]
    assert report.progressed == ("run",)
    assert finishing.state == ContractState.COMPLETED
    assert finishing.completion_day == 1
    assert [e.employee_id for e in sink.of_type(BurnoutChangeRequested)] == ["e2"]
    assert report.burnout_requests == 1

    types = [type(e) for e in sink.events]
    assert types.index(ContractCompleted) < types.index(BurnoutChangeRequested)


def test_streak_and_record_time(sink, employees):
    system = _system(sink, employees)
    system.load_contracts([make_contract("a", progress=95.0), make_contract("b", progress=95.0, employee_ids=("e2",))])

    system.process_day_tick()

    assert system.streak == 2
    assert system.record_time("web_app") == 1

    system.load_contracts([make_contract("c", employee_ids=(), days_remaining=1)])
    report = system.process_day_tick()

    assert [o.contract_id for o in report.failed] == ["c"]
    assert system.streak == 0
    [failed] = sink.of_type(ContractFailed)
    assert failed.contract_id == "c"


def test_offers_expire_after_the_configured_days(sink, employees):
    config = ContractBalanceConfig(offer_expiry_days=14, generation_interval_days=1000)
    system = _system(sink, employees, config)
    offers = system.start_new_game()

    for _ in range(13):
        assert system.process_day_tick().expired == ()
    report = system.process_day_tick()

    assert set(report.expired) == {c.contract_id for c in offers}
    assert system.get_available_contracts() == []
    assert len(sink.of_type(ContractExpired)) == len(offers)


def test_generation_runs_on_the_interval_and_respects_the_cap(sink, employees):
    config = ContractBalanceConfig(generation_interval_days=7, offers_per_generation=2, max_available_offers=5)
    system = _system(sink, employees, config)
    system.start_new_game()
    system.accept_contract(system.get_available_contracts()[0].contract_id, ["e1", "e2", "e3"])

    reports = [system.process_day_tick() for _ in range(7)]

    assert [len(r.generated) for r in reports] == [0, 0, 0, 0, 0, 0, 1]
    assert len(system.get_available_contracts()) == 5
    assert system.days_since_generation == 0


def test_rival_share_of_generated_offers(sink, employees):
    rivals = InMemoryRivalProvider(
        [RivalCompanySnapshot("r1", "Rival One", cash=1e5, category_shares={"cloud": 0.3, "ai": 0.3})]
    )
    system = _system(sink, employees, ContractBalanceConfig(max_available_offers=4), rivals=rivals)

    created = system.start_new_game()

    assert len(created) == 4
    assert sum(1 for c in created if c.is_rival_contract) == 2
    assert {c.target_category_id for c in created if c.is_rival_contract} == {"cloud", "ai"}


def test_completed_rival_contract_applies_effect_and_bills_issuer(sink, employees):
    rivals = InMemoryRivalProvider([RivalCompanySnapshot("r1", "Rival One", cash=1e5)])
    system = _system(sink, employees, rivals=rivals)
    effect = ContractWorldEffect("fx", "r1", "cloud", MarketComponent.MARKETING, 0.04, 2, 2)
    contract = make_contract(
        "rv",
        progress=95.0,
        issuing_rival_id="r1",
        target_category_id="cloud",
        contract_type=ContractType.MARKETING_CAMPAIGN,
        world_effect=effect,
    )
    system.load_contracts([contract])

    system.process_day_tick()

    [stored] = system.world_effects.active_effects
    assert stored == ContractWorldEffect("fx", "r1", "cloud", MarketComponent.MARKETING, 0.04, 2, 2)
    assert stored is not contract.world_effect
    [bill] = sink.of_type(IssuerPaymentRequested)
    assert bill.rival_id == "r1"
    assert bill.amount == pytest.approx(contract.total_payout)

    assert system.process_quarter_tick() == 0
    assert system.world_effects.active_effects[0].quarters_remaining == 1
    assert contract.world_effect.quarters_remaining == 2
    assert system.process_quarter_tick() == 1
    assert system.world_effects.active_effects == []
    assert contract.world_effect == ContractWorldEffect("fx", "r1", "cloud", MarketComponent.MARKETING, 0.04, 2, 2)


def test_clear_finished_contracts(sink, employees):
    system = _system(sink, employees)
    system.load_contracts(
        [
            make_contract("a", state=ContractState.COMPLETED),
            make_contract("b", state=ContractState.FAILED),
            make_contract("c"),
        ]
    )
    assert system.clear_finished_contracts() == 2
    assert [c.contract_id for c in system.contracts] == ["c"]
    assert system.clear_finished_contracts() == 0
