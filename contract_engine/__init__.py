"""contract_engine package public API.

Contract generation, daily progression and resolution for a business sim.

Typical wiring::

    from contract_engine import ContractSystem, CollectingSink, SeededRandom

    system = ContractSystem(rng=SeededRandom(42), sink=CollectingSink())
    system.start_new_game()
    system.process_day_tick()

The engine never mutates employees, cash or reputation; it publishes requests
to the injected ``EventSink`` and reads state through provider protocols.
"""

from contract_engine.codec import contract_from_dict, contract_to_dict
from contract_engine.errors import ContractError
from contract_engine.events import CollectingSink, ContractEvent, EventSink, NullSink
from contract_engine.generator import ContractGenerator
from contract_engine.goals import GoalEvaluator
from contract_engine.providers import (
    EmployeeSnapshot,
    InMemoryEmployeeProvider,
    InMemoryRivalProvider,
    RivalCompanySnapshot,
    StaticMarketProvider,
    StaticReputationProvider,
)
from contract_engine.resolver import ContractOutcome, ContractResolver
from contract_engine.rng import DefaultRandom, RandomSource, SeededRandom
from contract_engine.service import ContractSystem, DayTickReport
from contract_engine.types import (
    Contract,
    ContractBalanceConfig,
    ContractDifficulty,
    ContractState,
    ContractTemplate,
    GoalDefinition,
    GoalType,
)
from contract_engine.world_effects import WorldEffectsManager

__all__ = [
    "CollectingSink",
    "Contract",
    "ContractBalanceConfig",
    "ContractDifficulty",
    "ContractError",
    "ContractEvent",
    "ContractGenerator",
    "ContractOutcome",
    "ContractResolver",
    "ContractState",
    "ContractSystem",
    "ContractTemplate",
    "DayTickReport",
    "DefaultRandom",
    "EmployeeSnapshot",
    "EventSink",
    "GoalDefinition",
    "GoalEvaluator",
    "GoalType",
    "InMemoryEmployeeProvider",
    "InMemoryRivalProvider",
    "NullSink",
    "RandomSource",
    "RivalCompanySnapshot",
    "SeededRandom",
    "StaticMarketProvider",
    "StaticReputationProvider",
    "WorldEffectsManager",
    "contract_from_dict",
    "contract_to_dict",
]
