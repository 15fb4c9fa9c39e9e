from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query

from contract_engine.errors import ContractError, http_status
from app.schemas.contracts import (
    AcceptContractRequest,
    AdvanceDayRequest,
    AssignEmployeeRequest,
    NewGameRequest,
    ReputationRequest,
    UpsertEmployeesRequest,
)
from app.schemas.common import EmptyRequest
from app.services import contract_facade as facade

router = APIRouter()
logger = logging.getLogger(__name__)


def _http_error(exc: ContractError) -> HTTPException:
    return HTTPException(
        status_code=http_status(exc.code),
        detail={"code": exc.code, "message": exc.message, "details": exc.details},
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@router.get("/api/contracts")
async def api_contracts_list(state: Optional[str] = None):
    """List contracts, optionally filtered by state (available/active/completed/failed)."""
    try:
        return {"contracts": facade.list_contracts(state)}
    except ContractError as exc:
        raise _http_error(exc)


@router.get("/api/contracts/events")
async def api_contracts_events():
    """Drain the signals published since the last call."""
    return {"events": facade.drain_events()}


@router.get("/api/contracts/{contract_id}")
async def api_contract_detail(contract_id: str):
    try:
        return facade.get_contract(contract_id)
    except ContractError as exc:
        raise _http_error(exc)


@router.get("/api/contracts/{contract_id}/estimate")
async def api_contract_estimate(contract_id: str, employee_ids: List[str] = Query(default=[])):
    """Productivity the proposed team would reach on this contract today."""
    try:
        return facade.estimate_productivity(contract_id, employee_ids)
    except ContractError as exc:
        raise _http_error(exc)


@router.get("/api/world-effects")
async def api_world_effects():
    return {"effects": facade.list_world_effects()}


# ---------------------------------------------------------------------------
# Contract actions
# ---------------------------------------------------------------------------


@router.post("/api/contracts/accept")
async def api_contract_accept(req: AcceptContractRequest):
    try:
        return facade.accept_contract(req.contract_id, req.employee_ids)
    except ContractError as exc:
        raise _http_error(exc)


@router.post("/api/contracts/assign")
async def api_contract_assign(req: AssignEmployeeRequest):
    try:
        return facade.assign_employee(req.contract_id, req.employee_id)
    except ContractError as exc:
        raise _http_error(exc)


@router.post("/api/contracts/unassign")
async def api_contract_unassign(req: AssignEmployeeRequest):
    try:
        return facade.unassign_employee(req.contract_id, req.employee_id)
    except ContractError as exc:
        raise _http_error(exc)


@router.post("/api/contracts/clear-finished")
async def api_contracts_clear_finished(req: Optional[EmptyRequest] = None):
    return facade.clear_finished_contracts()


# ---------------------------------------------------------------------------
# Time / session
# ---------------------------------------------------------------------------


@router.post("/api/contracts/advance-day")
async def api_contracts_advance_day(req: AdvanceDayRequest):
    reports = facade.advance_days(req.days)
    return {"reports": reports, "day": reports[-1]["day"] if reports else None}


@router.post("/api/contracts/advance-quarter")
async def api_contracts_advance_quarter(req: Optional[EmptyRequest] = None):
    return facade.advance_quarter()


@router.post("/api/contracts/new-game")
async def api_contracts_new_game(req: NewGameRequest):
    result: Dict[str, Any] = facade.new_game(req.seed)
    logger.info("new game started with %d offer(s)", len(result["offers"]))
    return result


@router.put("/api/employees")
async def api_employees_upsert(req: UpsertEmployeesRequest):
    try:
        return facade.upsert_employees(item.model_dump() for item in req.employees)
    except ContractError as exc:
        raise _http_error(exc)


@router.put("/api/reputation")
async def api_reputation_set(req: ReputationRequest):
    try:
        return facade.set_reputation(req.current_reputation, req.max_reputation, req.employee_max_skill)
    except ContractError as exc:
        raise _http_error(exc)
