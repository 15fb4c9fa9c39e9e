from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ContractError(Exception):
    """Structured error for contract requests made through the HTTP layer.

    The core never raises; the facade turns a refused request into one of
    these so the server can map it to HTTP 4xx while keeping a stable
    machine-readable code for the client/UI.
    """

    code: str
    message: str
    details: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}"


# Error codes (stable API surface)
CONTRACT_NOT_FOUND = "CONTRACT_NOT_FOUND"
CONTRACT_INVALID_STATE = "CONTRACT_INVALID_STATE"
CONTRACT_LIMIT_REACHED = "CONTRACT_LIMIT_REACHED"
EMPLOYEE_NOT_FOUND = "EMPLOYEE_NOT_FOUND"
EMPLOYEE_ALREADY_ASSIGNED = "EMPLOYEE_ALREADY_ASSIGNED"
EMPLOYEE_NOT_ASSIGNED = "EMPLOYEE_NOT_ASSIGNED"
CONTRACT_BAD_PAYLOAD = "CONTRACT_BAD_PAYLOAD"

HTTP_STATUS: Dict[str, int] = {
    CONTRACT_NOT_FOUND: 404,
    EMPLOYEE_NOT_FOUND: 404,
    CONTRACT_INVALID_STATE: 409,
    CONTRACT_LIMIT_REACHED: 409,
    EMPLOYEE_ALREADY_ASSIGNED: 409,
    EMPLOYEE_NOT_ASSIGNED: 409,
    CONTRACT_BAD_PAYLOAD: 400,
}


def http_status(code: str) -> int:
    return HTTP_STATUS.get(code, 400)
