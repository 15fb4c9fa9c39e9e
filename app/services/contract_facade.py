from __future__ import annotations

"""Process-wide contract system used by the HTTP layer.

One ``ContractSystem`` lives per server process. Every call goes through
``_LOCK`` so concurrent requests never interleave a day tick with an accept or
an assignment.

The facade also plays host for the engine: employee burnout/morale requests
and reputation changes published by the engine are applied to the in-memory
providers it owns, so a standalone server behaves like a small game.
"""

import logging
import os
import threading
from typing import Any, Dict, Iterable, List, Optional

from contract_engine import errors as e
from contract_engine.codec import contract_to_dict, world_effect_to_dict
from contract_engine.errors import ContractError
from contract_engine.events import (
    BurnoutChangeRequested,
    CollectingSink,
    ContractEvent,
    MoraleChangeRequested,
    ReputationChangeRequested,
)
from contract_engine.providers import EmployeeSnapshot, InMemoryEmployeeProvider, StaticReputationProvider
from contract_engine.rng import DefaultRandom, RandomSource, SeededRandom
from contract_engine.service import ContractSystem, DayTickReport
from contract_engine.types import Contract, ContractState

logger = logging.getLogger(__name__)

_LOCK = threading.Lock()
_SYSTEM: Optional[ContractSystem] = None


class HostSink(CollectingSink):
    """Collects events for the API and applies employee/reputation requests."""

    def __init__(self, employees: InMemoryEmployeeProvider, reputation: StaticReputationProvider) -> None:
        super().__init__()
        self._employees = employees
        self._reputation = reputation

    def publish(self, event: ContractEvent) -> None:
        super().publish(event)
        if isinstance(event, BurnoutChangeRequested):
            self._employees.apply_burnout(event.employee_id, event.amount)
        elif isinstance(event, MoraleChangeRequested):
            self._employees.apply_morale(event.employee_id, event.amount)
        elif isinstance(event, ReputationChangeRequested):
            rep = self._reputation
            rep.current_reputation = min(max(rep.current_reputation + event.amount, 0.0), rep.max_reputation)


def _rng_from_env() -> RandomSource:
    raw = (os.environ.get("CONTRACTS_RNG_SEED") or "").strip()
    if not raw:
        return DefaultRandom()
    try:
        return SeededRandom(int(raw))
    except ValueError:
        logger.warning("CONTRACTS_RNG_SEED=%r is not an integer; using an unseeded source", raw)
        return DefaultRandom()


def build_system(rng: Optional[RandomSource] = None) -> ContractSystem:
    employees = InMemoryEmployeeProvider()
    reputation = StaticReputationProvider()
    return ContractSystem(
        rng=rng or _rng_from_env(),
        sink=HostSink(employees, reputation),
        employees=employees,
        reputation=reputation,
    )


def get_system() -> ContractSystem:
    global _SYSTEM
    if _SYSTEM is None:
        _SYSTEM = build_system()
        _SYSTEM.start_new_game()
    return _SYSTEM


def reset_system(rng: Optional[RandomSource] = None) -> ContractSystem:
    """Replace the process-wide system (tests and new-game requests)."""
    global _SYSTEM
    with _LOCK:
        _SYSTEM = build_system(rng)
        return _SYSTEM


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require_contract(system: ContractSystem, contract_id: str) -> Contract:
    contract = system.get_contract(contract_id)
    if contract is None:
        raise ContractError(e.CONTRACT_NOT_FOUND, f"contract {contract_id} not found", {"contract_id": contract_id})
    return contract


def _require_employee(system: ContractSystem, employee_id: str) -> None:
    if not system.employees.has_employee(employee_id):
        raise ContractError(e.EMPLOYEE_NOT_FOUND, f"employee {employee_id} not found", {"employee_id": employee_id})


def _report_to_dict(report: DayTickReport) -> Dict[str, Any]:
    return {
        "day": report.day,
        "progressed": list(report.progressed),
        "completed": [
            {
                "contract_id": o.contract_id,
                "quality": o.quality,
                "total_payout": o.total_payout,
                "cash_awarded": o.cash_awarded,
                "goals_completed": o.goals_completed,
                "is_perfect": o.is_perfect,
            }
            for o in report.completed
        ],
        "failed": [{"contract_id": o.contract_id, "reason": o.reason} for o in report.failed],
        "expired": list(report.expired),
        "generated": list(report.generated),
        "burnout_requests": report.burnout_requests,
    }


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def list_contracts(state: Optional[str] = None) -> List[Dict[str, Any]]:
    with _LOCK:
        system = get_system()
        contracts = system.contracts
        if state:
            try:
                wanted = ContractState(state.strip().lower())
            except ValueError:
                raise ContractError(e.CONTRACT_BAD_PAYLOAD, f"unknown state {state!r}", {"state": state})
            contracts = [c for c in contracts if c.state == wanted]
        return [contract_to_dict(c) for c in contracts]


def get_contract(contract_id: str) -> Dict[str, Any]:
    with _LOCK:
        return contract_to_dict(_require_contract(get_system(), contract_id))


def estimate_productivity(contract_id: str, employee_ids: Iterable[str]) -> Dict[str, Any]:
    with _LOCK:
        system = get_system()
        _require_contract(system, contract_id)
        ids = list(employee_ids)
        return {
            "contract_id": contract_id,
            "employee_ids": ids,
            "productivity": system.estimate_productivity(contract_id, ids),
        }


def get_status() -> Dict[str, Any]:
    with _LOCK:
        system = get_system()
        return {
            "day": system.current_day,
            "available": len(system.get_available_contracts()),
            "active": len(system.get_active_contracts()),
            "completed": len(system.get_completed_contracts()),
            "failed": len(system.get_failed_contracts()),
            "streak": system.streak,
        }


def list_world_effects() -> List[Dict[str, Any]]:
    with _LOCK:
        return [world_effect_to_dict(x) for x in get_system().world_effects.active_effects]


def drain_events() -> List[Dict[str, Any]]:
    with _LOCK:
        sink = get_system().sink
        if not isinstance(sink, CollectingSink):
            return []
        return [ev.to_payload() for ev in sink.drain()]


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def accept_contract(contract_id: str, employee_ids: Iterable[str]) -> Dict[str, Any]:
    with _LOCK:
        system = get_system()
        contract = _require_contract(system, contract_id)
        if contract.state != ContractState.AVAILABLE:
            raise ContractError(
                e.CONTRACT_INVALID_STATE,
                f"contract {contract_id} is {contract.state.value}",
                {"contract_id": contract_id, "state": contract.state.value},
            )
        if len(system.get_active_contracts()) >= system.config.max_active_contracts:
            raise ContractError(
                e.CONTRACT_LIMIT_REACHED,
                "active contract limit reached",
                {"max_active_contracts": system.config.max_active_contracts},
            )
        ids = list(employee_ids)
        for emp in ids:
            _require_employee(system, emp)
            other = system.find_assignment(emp)
            if other is not None:
                raise ContractError(
                    e.EMPLOYEE_ALREADY_ASSIGNED,
                    f"employee {emp} already works on {other.contract_id}",
                    {"employee_id": emp, "contract_id": other.contract_id},
                )
        system.accept_contract(contract_id, ids)
        return contract_to_dict(contract)


def assign_employee(contract_id: str, employee_id: str) -> Dict[str, Any]:
    with _LOCK:
        system = get_system()
        contract = _require_contract(system, contract_id)
        _require_employee(system, employee_id)
        if contract.state != ContractState.ACTIVE:
            raise ContractError(
                e.CONTRACT_INVALID_STATE,
                f"contract {contract_id} is {contract.state.value}",
                {"contract_id": contract_id, "state": contract.state.value},
            )
        if not system.assign_employee(contract_id, employee_id):
            raise ContractError(
                e.EMPLOYEE_ALREADY_ASSIGNED,
                f"employee {employee_id} is already assigned",
                {"employee_id": employee_id, "contract_id": contract_id},
            )
        return contract_to_dict(contract)


def unassign_employee(contract_id: str, employee_id: str) -> Dict[str, Any]:
    with _LOCK:
        system = get_system()
        contract = _require_contract(system, contract_id)
        if not system.unassign_employee(contract_id, employee_id):
            raise ContractError(
                e.EMPLOYEE_NOT_ASSIGNED,
                f"employee {employee_id} is not assigned to {contract_id}",
                {"employee_id": employee_id, "contract_id": contract_id},
            )
        return contract_to_dict(contract)


def clear_finished_contracts() -> Dict[str, Any]:
    with _LOCK:
        return {"removed": get_system().clear_finished_contracts()}


def advance_days(days: int = 1) -> List[Dict[str, Any]]:
    with _LOCK:
        system = get_system()
        return [_report_to_dict(system.process_day_tick()) for _ in range(max(int(days), 1))]


def advance_quarter() -> Dict[str, Any]:
    with _LOCK:
        system = get_system()
        expired = system.process_quarter_tick()
        return {"expired_effects": expired, "active_effects": len(system.world_effects.active_effects)}


def new_game(seed: Optional[int] = None) -> Dict[str, Any]:
    global _SYSTEM
    with _LOCK:
        _SYSTEM = build_system(SeededRandom(seed) if seed is not None else None)
        created = _SYSTEM.start_new_game()
        return {"day": _SYSTEM.current_day, "offers": [contract_to_dict(c) for c in created]}


def upsert_employees(employees: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    with _LOCK:
        provider = get_system().employees
        if not isinstance(provider, InMemoryEmployeeProvider):
            raise ContractError(e.CONTRACT_BAD_PAYLOAD, "employee provider is read-only")
        count = 0
        for raw in employees:
            provider.upsert(EmployeeSnapshot(**raw))
            count += 1
        return {"upserted": count, "total": len(provider.list_employees())}


def set_reputation(current: float, maximum: Optional[float] = None, employee_max_skill: Optional[float] = None) -> Dict[str, Any]:
    with _LOCK:
        rep = get_system().reputation
        if not isinstance(rep, StaticReputationProvider):
            raise ContractError(e.CONTRACT_BAD_PAYLOAD, "reputation provider is read-only")
        if maximum is not None:
            rep.max_reputation = float(maximum)
        if employee_max_skill is not None:
            rep.employee_max_skill = float(employee_max_skill)
        rep.current_reputation = float(current)
        return {
            "current_reputation": rep.current_reputation,
            "max_reputation": rep.max_reputation,
            "employee_max_skill": rep.employee_max_skill,
        }
