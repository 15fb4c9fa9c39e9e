from __future__ import annotations

"""Contract pool orchestration.

``ContractSystem`` owns the contract pool and drives one day tick in a fixed
order:

1. advance every ACTIVE contract and record tracking samples,
2. resolve contracts that became ready (complete or fail); a completed rival
   contract applies its world effect and bills its issuer,
3. burnout pass over contracts that are still ACTIVE,
4. age AVAILABLE offers and expire them at ``offer_expiry_days``,
5. every ``generation_interval_days``, top the offer pool up (rival share per
   ``rival_offer_ratio``, player offers for the rest).

Requests that cannot be honoured (unknown ids, wrong state, duplicates) are
logged and return False; nothing here raises on bad input.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .catalog import default_templates
from .events import (
    ContractAccepted,
    ContractEvent,
    ContractExpired,
    ContractsChanged,
    EmployeeAssignRequested,
    EmployeeUnassignRequested,
    EventSink,
    IssuerPaymentRequested,
    NullSink,
)
from .generator import ContractGenerator
from .naming import ContractNamingSystem
from .offers import OfferGenerator, new_contract_id
from .providers import (
    EmployeeProvider,
    InMemoryEmployeeProvider,
    MarketProvider,
    ReputationProvider,
    RivalProvider,
    reputation_context,
)
from .resolver import ContractOutcome, ContractResolver
from .rival_offers import RivalOfferGenerator
from .rng import DefaultRandom, RandomSource
from .simulation import ContractSimulation, TickStatus
from .tracking import ContractTracker
from .types import Contract, ContractBalanceConfig, ContractState, ContractTemplate
from .world_effects import WorldEffectsManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DayTickReport:
    day: int
    progressed: Tuple[str, ...] = ()
    completed: Tuple[ContractOutcome, ...] = ()
    failed: Tuple[ContractOutcome, ...] = ()
    expired: Tuple[str, ...] = ()
    generated: Tuple[str, ...] = ()
    burnout_requests: int = 0


class ContractSystem:
    def __init__(
        self,
        templates: Optional[Sequence[ContractTemplate]] = None,
        *,
        rng: Optional[RandomSource] = None,
        sink: Optional[EventSink] = None,
        employees: Optional[EmployeeProvider] = None,
        reputation: Optional[ReputationProvider] = None,
        rivals: Optional[RivalProvider] = None,
        market: Optional[MarketProvider] = None,
        config: Optional[ContractBalanceConfig] = None,
        naming: Optional[ContractNamingSystem] = None,
        id_factory: Callable[[], str] = new_contract_id,
    ) -> None:
        self.templates: List[ContractTemplate] = list(templates) if templates is not None else default_templates()
        self.rng = rng or DefaultRandom()
        self.sink = sink or NullSink()
        self.employees = employees if employees is not None else InMemoryEmployeeProvider()
        self.reputation = reputation
        self.rivals = rivals
        self.market = market
        self.config = config or ContractBalanceConfig()

        self.generator = ContractGenerator(self.rng)
        self.offers = OfferGenerator(self.templates, self.generator, self.rng, reputation, id_factory=id_factory)
        self.rival_offers = RivalOfferGenerator(
            self.templates, self.config, self.generator, self.rng, naming, id_factory=id_factory
        )
        self.world_effects = WorldEffectsManager(self.config)
        self.simulation = ContractSimulation(self.employees, self.sink)
        self.resolver = ContractResolver(self.employees, self.sink)

        self._templates_by_id: Dict[str, ContractTemplate] = {t.template_id: t for t in self.templates}
        self._contracts: List[Contract] = []
        self._trackers: Dict[str, ContractTracker] = {}
        self._record_times: Dict[str, int] = {}
        self.current_day = 0
        self.days_since_generation = 0
        self.streak = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def contracts(self) -> List[Contract]:
        return list(self._contracts)

    def get_contract(self, contract_id: str) -> Optional[Contract]:
        for c in self._contracts:
            if c.contract_id == contract_id:
                return c
        return None

    def _in_state(self, state: ContractState) -> List[Contract]:
        return [c for c in self._contracts if c.state == state]

    def get_available_contracts(self) -> List[Contract]:
        return self._in_state(ContractState.AVAILABLE)

    def get_active_contracts(self) -> List[Contract]:
        return self._in_state(ContractState.ACTIVE)

    def get_completed_contracts(self) -> List[Contract]:
        return self._in_state(ContractState.COMPLETED)

    def get_failed_contracts(self) -> List[Contract]:
        return self._in_state(ContractState.FAILED)

    def template_for(self, contract: Contract) -> Optional[ContractTemplate]:
        return self._templates_by_id.get(contract.template_id)

    def record_time(self, template_id: str) -> Optional[int]:
        return self._record_times.get(template_id)

    def find_assignment(self, employee_id: str) -> Optional[Contract]:
        for c in self.get_active_contracts():
            if employee_id in c.assigned_employee_ids:
                return c
        return None

    def estimate_productivity(self, contract_id: str, employee_ids: Sequence[str]) -> float:
        contract = self.get_contract(contract_id)
        if contract is None:
            logger.warning("estimate for unknown contract %s", contract_id)
            return 0.0
        return self.simulation.estimate_productivity(contract, employee_ids)

    def _publish(self, event: ContractEvent) -> None:
        self.sink.publish(event)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start_new_game(self, current_day: int = 0) -> List[Contract]:
        self._contracts.clear()
        self._trackers.clear()
        self._record_times.clear()
        self.streak = 0
        self.current_day = int(current_day)
        self.days_since_generation = 0
        self.world_effects.clear_all_effects()
        self.rival_offers.reset()

        created = self.generate_offers(self.config.max_available_offers)
        self._publish(ContractsChanged())
        logger.info("new game: %d initial offer(s)", len(created))
        return created

    def load_contracts(self, contracts: Iterable[Contract]) -> int:
        """Replace the pool with restored contracts; trackers restart empty."""
        self._contracts = list(contracts)
        self._trackers = {
            c.contract_id: ContractTracker(c, self.employees)
            for c in self._contracts
            if c.state == ContractState.ACTIVE
        }
        self._publish(ContractsChanged())
        logger.info("loaded %d contract(s)", len(self._contracts))
        return len(self._contracts)

    def accept_contract(self, contract_id: str, employee_ids: Sequence[str] = ()) -> bool:
        contract = self.get_contract(contract_id)
        if contract is None:
            logger.warning("accept: contract %s not found", contract_id)
            return False
        if contract.state != ContractState.AVAILABLE:
            logger.warning("accept: contract %s is %s, not available", contract_id, contract.state.value)
            return False
        if len(self.get_active_contracts()) >= self.config.max_active_contracts:
            logger.warning("accept: active contract limit (%d) reached", self.config.max_active_contracts)
            return False

        team: List[str] = []
        for emp in dict.fromkeys(employee_ids):
            if not self.employees.has_employee(emp):
                logger.warning("accept: unknown employee %s skipped", emp)
                continue
            if self.find_assignment(emp) is not None:
                logger.warning("accept: employee %s already on another contract; skipped", emp)
                continue
            team.append(emp)

        contract.state = ContractState.ACTIVE
        contract.start_day = self.current_day
        contract.days_available = 0
        contract.assigned_employee_ids = list(team)
        self._trackers[contract.contract_id] = ContractTracker(contract, self.employees)

        for emp in team:
            self._publish(EmployeeAssignRequested(employee_id=emp, contract_id=contract.contract_id))
        self._publish(ContractAccepted(contract_id=contract.contract_id, employee_ids=tuple(team), day=self.current_day))
        self._publish(ContractsChanged())
        logger.info("accepted contract %s (%s) with %d employee(s)", contract_id, contract.client_name, len(team))
        return True

    def assign_employee(self, contract_id: str, employee_id: str) -> bool:
        contract = self.get_contract(contract_id)
        if contract is None:
            logger.warning("assign: contract %s not found", contract_id)
            return False
        if contract.state != ContractState.ACTIVE:
            logger.warning("assign: contract %s is not active", contract_id)
            return False
        if not self.employees.has_employee(employee_id):
            logger.warning("assign: unknown employee %s", employee_id)
            return False
        if employee_id in contract.assigned_employee_ids:
            logger.warning("assign: employee %s already assigned to %s", employee_id, contract_id)
            return False
        if self.find_assignment(employee_id) is not None:
            logger.warning("assign: employee %s already on another contract", employee_id)
            return False

        contract.assigned_employee_ids.append(employee_id)
        tracker = self._trackers.get(contract_id)
        if tracker is not None:
            tracker.record_assignment(employee_id)
        self._publish(EmployeeAssignRequested(employee_id=employee_id, contract_id=contract_id))
        return True

    def unassign_employee(self, contract_id: str, employee_id: str) -> bool:
        contract = self.get_contract(contract_id)
        if contract is None:
            logger.warning("unassign: contract %s not found", contract_id)
            return False
        if employee_id not in contract.assigned_employee_ids:
            logger.warning("unassign: employee %s not assigned to %s", employee_id, contract_id)
            return False

        contract.assigned_employee_ids.remove(employee_id)
        tracker = self._trackers.get(contract_id)
        if tracker is not None:
            tracker.record_unassignment(employee_id)
        self._publish(EmployeeUnassignRequested(employee_id=employee_id, contract_id=contract_id))
        return True

    def clear_finished_contracts(self) -> int:
        before = len(self._contracts)
        self._contracts = [c for c in self._contracts if not c.is_finished]
        removed = before - len(self._contracts)
        if removed:
            logger.info("cleared %d finished contract(s)", removed)
            self._publish(ContractsChanged())
        return removed

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------
    def process_day_tick(self, day: Optional[int] = None) -> DayTickReport:
        self.current_day = self.current_day + 1 if day is None else int(day)
        self.days_since_generation += 1

        # 1) progress
        results = self.simulation.tick_active_contracts(self.get_active_contracts())
        for r in results:
            tracker = self._trackers.get(r.contract_id)
            if tracker is not None:
                tracker.record_day(r)

        # 2) resolution
        completed: List[ContractOutcome] = []
        failed: List[ContractOutcome] = []
        for r in results:
            if r.status == TickStatus.PROGRESS:
                continue
            contract = self.get_contract(r.contract_id)
            if contract is None:
                continue
            outcome = self.resolve_contract(contract, success=r.status == TickStatus.READY_TO_COMPLETE)
            if outcome is None:
                continue
            (completed if outcome.success else failed).append(outcome)

        # 3) burnout
        burnout = self.simulation.apply_daily_burnout(
            self.get_active_contracts(), {t.template_id: t.base_burnout_impact for t in self.templates}
        )

        # 4) expiry
        self.simulation.tick_available_contracts(self._contracts)
        expired = self._expire_offers()

        # 5) generation
        generated: List[Contract] = []
        if self.days_since_generation >= self.config.generation_interval_days:
            generated = self.generate_offers(self.config.offers_per_generation)
            self.days_since_generation = 0

        if completed or failed or expired or generated:
            self._publish(ContractsChanged())

        return DayTickReport(
            day=self.current_day,
            progressed=tuple(r.contract_id for r in results if r.status == TickStatus.PROGRESS),
            completed=tuple(completed),
            failed=tuple(failed),
            expired=tuple(expired),
            generated=tuple(c.contract_id for c in generated),
            burnout_requests=burnout,
        )

    def process_quarter_tick(self) -> int:
        """Age world effects and rival cooldowns; returns the number of expired effects."""
        expired = self.world_effects.process_quarter_tick()
        self.rival_offers.process_quarter_tick_cooldowns()
        return len(expired)

    def resolve_contract(self, contract: Contract, success: bool) -> Optional[ContractOutcome]:
        template = self.template_for(contract)
        if template is None:
            logger.warning("contract %s references unknown template %s", contract.contract_id, contract.template_id)
        outcome = self.resolver.complete_contract(
            contract,
            success,
            self.current_day,
            base_xp_reward=template.base_xp_reward if template is not None else 0.0,
            tracker=self._trackers.pop(contract.contract_id, None),
            reputation=reputation_context(self.reputation),
            current_streak=self.streak,
            record_time=self._record_times.get(contract.template_id),
        )
        if outcome is None:
            return None

        if outcome.success:
            self.streak += 1
            best = self._record_times.get(contract.template_id)
            if best is None or contract.days_used < best:
                self._record_times[contract.template_id] = contract.days_used
            self._apply_world_effect(contract)
            self._bill_issuer(contract)
        else:
            self.streak = 0
        return outcome

    def _apply_world_effect(self, contract: Contract) -> None:
        if contract.world_effect is None:
            return
        self.world_effects.add_effect(contract.world_effect)

    def _bill_issuer(self, contract: Contract) -> None:
        if not contract.issuing_rival_id or self.rivals is None:
            return
        self._publish(
            IssuerPaymentRequested(
                rival_id=contract.issuing_rival_id,
                amount=contract.total_payout,
                contract_id=contract.contract_id,
            )
        )

    def _expire_offers(self) -> List[str]:
        limit = self.config.offer_expiry_days
        expired = [
            c for c in self._contracts if c.state == ContractState.AVAILABLE and c.days_available >= limit
        ]
        for c in expired:
            self._contracts.remove(c)
            self._publish(ContractExpired(contract_id=c.contract_id))
            logger.info("offer %s from %s expired after %d day(s)", c.contract_id, c.client_name, c.days_available)
        return [c.contract_id for c in expired]

    def generate_offers(self, count: int) -> List[Contract]:
        """Top the offer pool up by at most ``count``, never past ``max_available_offers``."""
        slots = self.config.max_available_offers - len(self.get_available_contracts())
        count = min(int(count), slots)
        if count <= 0:
            return []

        created: List[Contract] = []
        if self.rivals is not None:
            rival_count = int(round(count * self.config.rival_offer_ratio))
            rival = self.rival_offers.generate_rival_contracts(
                rival_count,
                self.current_day,
                self.rivals,
                self.market,
                reputation_context(self.reputation),
            )
            self._contracts.extend(rival)
            created.extend(rival)

        remaining = count - len(created)
        if remaining > 0:
            created.extend(
                self.offers.generate_new_contracts(
                    self._contracts, remaining, self.config.max_available_offers, self.current_day
                )
            )
        return created
