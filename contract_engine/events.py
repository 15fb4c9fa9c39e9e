from __future__ import annotations

"""Notification signals published by the contract engine.

The engine never mutates employees, cash or reputation directly. It publishes
these signals to an ``EventSink`` and the owning systems apply them.

Every event is a frozen dataclass; ``to_payload()`` returns a flat dict with a
top-level ``type`` so UI/network layers can consume it without importing the
event classes.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Protocol, Tuple, Type, TypeVar, runtime_checkable


def _plain(v: Any) -> Any:
    if isinstance(v, Enum):
        return v.value
    if isinstance(v, tuple):
        return [_plain(x) for x in v]
    return v


@dataclass(frozen=True, slots=True)
class ContractEvent:
    event_type: ClassVar[str] = "contract_event"

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": self.event_type}
        for f in fields(self):
            payload[f.name] = _plain(getattr(self, f.name))
        return payload


# ---------------------------------------------------------------------------
# Lifecycle signals
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ContractAccepted(ContractEvent):
    event_type: ClassVar[str] = "contract_accepted"
    contract_id: str
    employee_ids: Tuple[str, ...]
    day: int


@dataclass(frozen=True, slots=True)
class ContractProgressUpdated(ContractEvent):
    event_type: ClassVar[str] = "contract_progress_updated"
    contract_id: str
    progress: float
    productivity: float


@dataclass(frozen=True, slots=True)
class ContractReadyToComplete(ContractEvent):
    event_type: ClassVar[str] = "contract_ready_to_complete"
    contract_id: str


@dataclass(frozen=True, slots=True)
class ContractReadyToFail(ContractEvent):
    event_type: ClassVar[str] = "contract_ready_to_fail"
    contract_id: str
    progress: float


@dataclass(frozen=True, slots=True)
class ContractCompleted(ContractEvent):
    event_type: ClassVar[str] = "contract_completed"
    contract_id: str
    quality: float
    total_payout: float
    cash_awarded: float = 0.0
    is_perfect: bool = False


@dataclass(frozen=True, slots=True)
class ContractFailed(ContractEvent):
    event_type: ClassVar[str] = "contract_failed"
    contract_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class ContractExpired(ContractEvent):
    event_type: ClassVar[str] = "contract_expired"
    contract_id: str


@dataclass(frozen=True, slots=True)
class ContractsChanged(ContractEvent):
    event_type: ClassVar[str] = "contracts_changed"


# ---------------------------------------------------------------------------
# Requests to collaborators
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EmployeeAssignRequested(ContractEvent):
    event_type: ClassVar[str] = "employee_assign_requested"
    employee_id: str
    contract_id: str


@dataclass(frozen=True, slots=True)
class EmployeeUnassignRequested(ContractEvent):
    event_type: ClassVar[str] = "employee_unassign_requested"
    employee_id: str
    contract_id: str


@dataclass(frozen=True, slots=True)
class SkillXPRequested(ContractEvent):
    event_type: ClassVar[str] = "skill_xp_requested"
    employee_id: str
    dev_xp: float
    design_xp: float
    marketing_xp: float

    @property
    def total(self) -> float:
        return self.dev_xp + self.design_xp + self.marketing_xp


@dataclass(frozen=True, slots=True)
class CashRequested(ContractEvent):
    event_type: ClassVar[str] = "cash_requested"
    amount: float
    reason: str = ""


@dataclass(frozen=True, slots=True)
class ReputationChangeRequested(ContractEvent):
    event_type: ClassVar[str] = "reputation_change_requested"
    amount: float
    reason: str = ""


@dataclass(frozen=True, slots=True)
class MoraleChangeRequested(ContractEvent):
    event_type: ClassVar[str] = "morale_change_requested"
    employee_id: str
    amount: float


@dataclass(frozen=True, slots=True)
class BurnoutChangeRequested(ContractEvent):
    event_type: ClassVar[str] = "burnout_change_requested"
    employee_id: str
    amount: float


@dataclass(frozen=True, slots=True)
class IssuerPaymentRequested(ContractEvent):
    event_type: ClassVar[str] = "issuer_payment_requested"
    rival_id: str
    amount: float
    contract_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------


E = TypeVar("E", bound=ContractEvent)


@runtime_checkable
class EventSink(Protocol):
    def publish(self, event: ContractEvent) -> None:
        ...


class NullSink:
    """Drops every event."""

    def publish(self, event: ContractEvent) -> None:
        return None


class CollectingSink:
    """Keeps published events in order until drained."""

    def __init__(self) -> None:
        self.events: List[ContractEvent] = []

    def publish(self, event: ContractEvent) -> None:
        self.events.append(event)

    def of_type(self, cls: Type[E]) -> List[E]:
        return [e for e in self.events if isinstance(e, cls)]

    def drain(self) -> List[ContractEvent]:
        out = self.events
        self.events = []
        return out

    def clear(self) -> None:
        self.events.clear()
