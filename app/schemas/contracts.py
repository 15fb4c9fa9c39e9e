from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class AcceptContractRequest(BaseModel):
    contract_id: str
    employee_ids: List[str] = Field(default_factory=list)


class AssignEmployeeRequest(BaseModel):
    contract_id: str
    employee_id: str


class AdvanceDayRequest(BaseModel):
    days: int = Field(1, ge=1, le=365)


class NewGameRequest(BaseModel):
    seed: Optional[int] = None  # seeded RandomSource when set


class EmployeeItem(BaseModel):
    employee_id: str
    name: str = ""
    dev_skill: float = Field(0.0, ge=0.0, le=100.0)
    design_skill: float = Field(0.0, ge=0.0, le=100.0)
    marketing_skill: float = Field(0.0, ge=0.0, le=100.0)
    morale: float = Field(50.0, ge=0.0, le=100.0)
    burnout: float = Field(0.0, ge=0.0, le=100.0)
    daily_cost: float = Field(0.0, ge=0.0)


class UpsertEmployeesRequest(BaseModel):
    employees: List[EmployeeItem] = Field(default_factory=list)


class ReputationRequest(BaseModel):
    current_reputation: float = Field(..., ge=0.0)
    max_reputation: Optional[float] = Field(None, gt=0.0)
    employee_max_skill: Optional[float] = Field(None, gt=0.0)
