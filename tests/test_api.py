"""
HTTP API tests (FastAPI TestClient against the process-wide facade)
"""
import threading

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services import contract_facade as facade
from conftest import make_contract, make_employee
from contract_engine.providers import InMemoryEmployeeProvider, StaticReputationProvider
from contract_engine.resolver import ContractResolver
from contract_engine.types import GoalDefinition, GoalType

EMPLOYEES = [
    {"employee_id": "e1", "name": "Ada", "dev_skill": 80.0, "design_skill": 40.0, "marketing_skill": 30.0},
    {"employee_id": "e2", "name": "Bo", "dev_skill": 30.0, "design_skill": 80.0, "marketing_skill": 40.0},
]


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv("CONTRACTS_ADMIN_TOKEN", raising=False)
    facade.new_game(seed=7)
    facade.drain_events()
    return TestClient(app)


@pytest.fixture
def staffed(client):
    r = client.put("/api/employees", json={"employees": EMPLOYEES})
    assert r.status_code == 200
    assert r.json()["upserted"] == 2
    return client


def _first_offer(client):
    return client.get("/api/contracts", params={"state": "available"}).json()["contracts"][0]


def _error_code(response):
    return response.json()["detail"]["code"]


def test_root_and_status(client):
    assert client.get("/").status_code == 200
    status = client.get("/api/status").json()
    assert status["day"] == 0
    assert status["available"] == 5
    assert status["active"] == 0
    assert status["streak"] == 0


def test_status_waits_for_the_facade_lock(client):
    result = {}
    worker = threading.Thread(target=lambda: result.update(client.get("/api/status").json()))
    with facade._LOCK:
        worker.start()
        worker.join(timeout=0.3)
        assert worker.is_alive()
    worker.join(timeout=5.0)
    assert not worker.is_alive()
    assert result["day"] == 0
    assert result["available"] == 5

def test_list_and_filter_contracts(client):
    contracts = client.get("/api/contracts").json()["contracts"]
    assert len(contracts) == 5
    assert all(c["state"] == "available" for c in contracts)
    assert client.get("/api/contracts", params={"state": "active"}).json()["contracts"] == []

    bad = client.get("/api/contracts", params={"state": "archived"})
    assert bad.status_code == 400
    assert _error_code(bad) == "CONTRACT_BAD_PAYLOAD"


def test_contract_detail_and_not_found(client):
    offer = _first_offer(client)
    detail = client.get(f"/api/contracts/{offer['contract_id']}")
    assert detail.status_code == 200
    assert detail.json()["contract_id"] == offer["contract_id"]

    missing = client.get("/api/contracts/nope")
    assert missing.status_code == 404
    assert _error_code(missing) == "CONTRACT_NOT_FOUND"


def test_accept_flow_and_conflicts(staffed):
    offer = _first_offer(staffed)
    cid = offer["contract_id"]

    r = staffed.post("/api/contracts/accept", json={"contract_id": cid, "employee_ids": ["e1"]})
    assert r.status_code == 200
    assert r.json()["state"] == "active"
    assert r.json()["assigned_employee_ids"] == ["e1"]

    again = staffed.post("/api/contracts/accept", json={"contract_id": cid, "employee_ids": []})
    assert again.status_code == 409
    assert _error_code(again) == "CONTRACT_INVALID_STATE"

    other = _first_offer(staffed)["contract_id"]
    busy = staffed.post("/api/contracts/accept", json={"contract_id": other, "employee_ids": ["e1"]})
    assert busy.status_code == 409
    assert _error_code(busy) == "EMPLOYEE_ALREADY_ASSIGNED"

    ghost = staffed.post("/api/contracts/accept", json={"contract_id": other, "employee_ids": ["ghost"]})
    assert ghost.status_code == 404
    assert _error_code(ghost) == "EMPLOYEE_NOT_FOUND"


def test_assign_and_unassign(staffed):
    cid = _first_offer(staffed)["contract_id"]
    staffed.post("/api/contracts/accept", json={"contract_id": cid, "employee_ids": ["e1"]})

    r = staffed.post("/api/contracts/assign", json={"contract_id": cid, "employee_id": "e2"})
    assert r.status_code == 200
    assert r.json()["assigned_employee_ids"] == ["e1", "e2"]

    dup = staffed.post("/api/contracts/assign", json={"contract_id": cid, "employee_id": "e2"})
    assert dup.status_code == 409

    r = staffed.post("/api/contracts/unassign", json={"contract_id": cid, "employee_id": "e1"})
    assert r.status_code == 200
    assert r.json()["assigned_employee_ids"] == ["e2"]

    missing = staffed.post("/api/contracts/unassign", json={"contract_id": cid, "employee_id": "e1"})
    assert missing.status_code == 409
    assert _error_code(missing) == "EMPLOYEE_NOT_ASSIGNED"


def test_estimate_productivity(staffed):
    cid = _first_offer(staffed)["contract_id"]
    solo = staffed.get(f"/api/contracts/{cid}/estimate", params={"employee_ids": ["e1"]}).json()
    pair = staffed.get(f"/api/contracts/{cid}/estimate", params={"employee_ids": ["e1", "e2"]}).json()
    assert solo["productivity"] > 0.0
    assert pair["productivity"] >= solo["productivity"]
    assert pair["employee_ids"] == ["e1", "e2"]


def test_advance_days_and_drain_events(staffed):
    cid = _first_offer(staffed)["contract_id"]
    staffed.post("/api/contracts/accept", json={"contract_id": cid, "employee_ids": ["e1", "e2"]})

    r = staffed.post("/api/contracts/advance-day", json={"days": 3})
    assert r.status_code == 200
    body = r.json()
    assert body["day"] == 3
    assert len(body["reports"]) == 3

    events = staffed.get("/api/contracts/events").json()["events"]
    kinds = {e["type"] for e in events}
    assert "contract_accepted" in kinds
    assert "employee_assign_requested" in kinds
    assert staffed.get("/api/contracts/events").json()["events"] == []


def test_advance_day_validates_payload(client):
    assert client.post("/api/contracts/advance-day", json={"days": 0}).status_code == 422


def test_quarter_tick_and_world_effects(client):
    r = client.post("/api/contracts/advance-quarter")
    assert r.status_code == 200
    assert r.json() == {"expired_effects": 0, "active_effects": 0}
    assert client.get("/api/world-effects").json() == {"effects": []}


def test_new_game_with_seed_is_reproducible(client):
    first = client.post("/api/contracts/new-game", json={"seed": 11}).json()
    second = client.post("/api/contracts/new-game", json={"seed": 11}).json()
    assert first["day"] == 0
    assert [o["base_payout"] for o in first["offers"]] == [o["base_payout"] for o in second["offers"]]
    assert [o["total_days"] for o in first["offers"]] == [o["total_days"] for o in second["offers"]]


def test_reputation_update(client):
    r = client.put("/api/reputation", json={"current_reputation": 40.0, "max_reputation": 200.0})
    assert r.status_code == 200
    assert r.json()["current_reputation"] == 40.0
    assert r.json()["max_reputation"] == 200.0
    assert client.put("/api/reputation", json={"current_reputation": -1.0}).status_code == 422


def test_admin_token_guards_post_requests(client, monkeypatch):
    monkeypatch.setenv("CONTRACTS_ADMIN_TOKEN", "s3cret")

    assert client.post("/api/contracts/advance-quarter").status_code == 401
    ok = client.post("/api/contracts/advance-quarter", headers={"X-Admin-Token": "s3cret"})
    assert ok.status_code == 200
    assert client.get("/api/contracts").status_code == 200


def test_host_applies_perfect_contract_reputation_and_morale():
    employees = InMemoryEmployeeProvider([make_employee("ace", dev=90.0, design=90.0, marketing=90.0)])
    reputation = StaticReputationProvider(current_reputation=20.0)
    host = facade.HostSink(employees, reputation)
    goal = GoalDefinition(GoalType.DELIVER_HIGH_QUALITY, target_value=70.0)
    contract = make_contract(goals=[goal], employee_ids=("ace",), progress=100.0)

    outcome = ContractResolver(employees, host).complete_contract(contract, True, current_day=8)

    assert outcome.is_perfect is True
    assert reputation.current_reputation == pytest.approx(30.0)
    assert employees.get_morale("ace") == pytest.approx(65.0)
