from __future__ import annotations

"""Contract <-> plain dict conversion.

Background
----------
The engine keeps no storage of its own. Hosts persist contracts through
whatever serializer they use (JSON saves, the HTTP API), so this module turns a
``Contract`` into JSON-safe primitives and back.

Design goals
------------
- Every field on ``Contract`` round-trips, including each goal's full
  definition and the attached world effect.
- Decoding is tolerant: missing keys take dataclass defaults, unknown enum
  values are logged and fall back to a neutral member. Goal records always stay
  one-per-goal, so per-goal views keep equal lengths.

Public API
----------
- contract_to_dict(contract) / contract_from_dict(data)
- goal_to_dict / goal_from_dict, world_effect_to_dict / world_effect_from_dict
"""

import logging
from dataclasses import asdict
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from . import formulas as f
from .types import (
    BonusDefinition,
    BonusType,
    Contract,
    ContractDifficulty,
    ContractGoal,
    ContractState,
    ContractType,
    ContractWorldEffect,
    GoalCategory,
    GoalDefinition,
    GoalType,
    MarketComponent,
    PenaltyDefinition,
    PenaltyType,
)

logger = logging.getLogger(__name__)

E = TypeVar("E")


def _enum(cls: Type[E], value: Any, default: E) -> E:
    if isinstance(value, cls):
        return value
    try:
        return cls(value)  # type: ignore[call-arg]
    except ValueError:
        logger.warning("unknown %s value %r; using %r", cls.__name__, value, default)
        return default


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


def goal_definition_to_dict(goal: GoalDefinition) -> Dict[str, Any]:
    return _plain(asdict(goal))


def _bonus_from_dict(d: Mapping[str, Any]) -> Optional[BonusDefinition]:
    bonus_type = _enum(BonusType, d.get("type"), None)
    if bonus_type is None:
        return None
    return BonusDefinition(
        type=bonus_type,
        percent_value=f.safe_float(d.get("percent_value"), 10.0),
        flat_value=f.safe_float(d.get("flat_value"), 500.0),
        duration_days=f.safe_int(d.get("duration_days"), 5),
        scale_by_difficulty=bool(d.get("scale_by_difficulty", True)),
        scale_by_contract_value=bool(d.get("scale_by_contract_value", False)),
    )


def _penalty_from_dict(d: Mapping[str, Any]) -> Optional[PenaltyDefinition]:
    penalty_type = _enum(PenaltyType, d.get("type"), None)
    if penalty_type is None:
        return None
    return PenaltyDefinition(
        type=penalty_type,
        percent_value=f.safe_float(d.get("percent_value"), 10.0),
        flat_value=f.safe_float(d.get("flat_value"), 500.0),
        duration_days=f.safe_int(d.get("duration_days"), 3),
        scale_by_difficulty=bool(d.get("scale_by_difficulty", True)),
        scale_by_reputation=bool(d.get("scale_by_reputation", False)),
    )


def goal_definition_from_dict(d: Mapping[str, Any]) -> Optional[GoalDefinition]:
    goal_type = _enum(GoalType, d.get("type"), None)
    if goal_type is None:
        return None
    bonuses = tuple(b for b in (_bonus_from_dict(x) for x in d.get("bonuses") or ()) if b is not None)
    penalties = tuple(p for p in (_penalty_from_dict(x) for x in d.get("penalties") or ()) if p is not None)
    return GoalDefinition(
        type=goal_type,
        description=str(d.get("description", "")),
        category=_enum(GoalCategory, d.get("category", GoalCategory.SKILL.value), GoalCategory.SKILL),
        target_value=f.safe_float(d.get("target_value"), 50.0),
        threshold_value=f.safe_float(d.get("threshold_value"), 50.0),
        percentage_target=f.safe_float(d.get("percentage_target"), 10.0),
        integer_target=f.safe_int(d.get("integer_target"), 1),
        penalty_percent_min=f.safe_float(d.get("penalty_percent_min"), 5.0),
        penalty_percent_max=f.safe_float(d.get("penalty_percent_max"), 15.0),
        bonus_percent=f.safe_float(d.get("bonus_percent")),
        reputation_bonus=f.safe_float(d.get("reputation_bonus")),
        xp_multiplier=f.safe_float(d.get("xp_multiplier"), 1.0),
        is_optional=bool(d.get("is_optional", False)),
        is_hidden=bool(d.get("is_hidden", False)),
        bonuses=bonuses,
        penalties=penalties,
    )


def goal_to_dict(record: ContractGoal) -> Dict[str, Any]:
    return {
        "goal": goal_definition_to_dict(record.goal),
        "target_value": record.target_value,
        "penalty_percent": record.penalty_percent,
        "completed": record.completed,
    }


def goal_from_dict(d: Mapping[str, Any]) -> Optional[ContractGoal]:
    goal = goal_definition_from_dict(d.get("goal") or {})
    if goal is None:
        return None
    return ContractGoal(
        goal=goal,
        target_value=f.safe_float(d.get("target_value"), goal.target_value),
        penalty_percent=f.safe_float(d.get("penalty_percent")),
        completed=bool(d.get("completed", False)),
    )


# ---------------------------------------------------------------------------
# World effects
# ---------------------------------------------------------------------------


def world_effect_to_dict(effect: ContractWorldEffect) -> Dict[str, Any]:
    return _plain(asdict(effect))


def world_effect_from_dict(d: Mapping[str, Any]) -> ContractWorldEffect:
    duration = f.safe_int(d.get("duration_quarters"), 1)
    return ContractWorldEffect(
        effect_id=str(d.get("effect_id", "")),
        issuing_rival_id=str(d.get("issuing_rival_id", "")),
        target_category_id=str(d.get("target_category_id", "")),
        component=_enum(MarketComponent, d.get("component"), MarketComponent.MARKETING),
        magnitude=f.safe_float(d.get("magnitude")),
        duration_quarters=duration,
        quarters_remaining=f.safe_int(d.get("quarters_remaining"), duration),
    )


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


_SCALAR_FIELDS = (
    "contract_id",
    "client_name",
    "template_id",
    "title",
    "progress",
    "days_remaining",
    "total_days",
    "days_available",
    "base_payout",
    "quality_bonus",
    "total_payout",
    "final_quality",
    "creation_day",
    "start_day",
    "completion_day",
    "required_dev_skill",
    "required_design_skill",
    "required_marketing_skill",
    "issuing_rival_id",
    "target_category_id",
)


def contract_to_dict(contract: Contract) -> Dict[str, Any]:
    out: Dict[str, Any] = {name: getattr(contract, name) for name in _SCALAR_FIELDS}
    out["difficulty"] = contract.difficulty.value
    out["state"] = contract.state.value
    out["contract_type"] = contract.contract_type.value if contract.contract_type is not None else None
    out["assigned_employee_ids"] = list(contract.assigned_employee_ids)
    out["goals"] = [goal_to_dict(g) for g in contract.goals]
    out["world_effect"] = world_effect_to_dict(contract.world_effect) if contract.world_effect is not None else None
    return out


def contract_from_dict(data: Mapping[str, Any]) -> Contract:
    goals: List[ContractGoal] = []
    for raw in data.get("goals") or ():
        record = goal_from_dict(raw)
        if record is None:
            logger.warning("dropping goal with unknown type on contract %s", data.get("contract_id"))
            continue
        goals.append(record)

    contract_type = data.get("contract_type")
    effect = data.get("world_effect")
    contract = Contract(
        contract_id=str(data.get("contract_id", "")),
        client_name=str(data.get("client_name", "")),
        template_id=str(data.get("template_id", "")),
        difficulty=_enum(ContractDifficulty, data.get("difficulty"), ContractDifficulty.MEDIUM),
        title=str(data.get("title", "")),
        state=_enum(ContractState, data.get("state"), ContractState.AVAILABLE),
        progress=f.safe_float(data.get("progress")),
        days_remaining=f.safe_int(data.get("days_remaining"), 0),
        total_days=f.safe_int(data.get("total_days"), 0),
        days_available=f.safe_int(data.get("days_available"), 0),
        assigned_employee_ids=[str(e) for e in data.get("assigned_employee_ids") or ()],
        goals=goals,
        base_payout=f.safe_float(data.get("base_payout")),
        quality_bonus=f.safe_float(data.get("quality_bonus")),
        total_payout=f.safe_float(data.get("total_payout")),
        final_quality=f.safe_float(data.get("final_quality")),
        creation_day=f.safe_int(data.get("creation_day"), 0),
        start_day=f.safe_int(data.get("start_day"), -1),
        completion_day=f.safe_int(data.get("completion_day"), -1),
        required_dev_skill=f.safe_float(data.get("required_dev_skill")),
        required_design_skill=f.safe_float(data.get("required_design_skill")),
        required_marketing_skill=f.safe_float(data.get("required_marketing_skill")),
        issuing_rival_id=data.get("issuing_rival_id") or None,
        target_category_id=data.get("target_category_id") or None,
        contract_type=_enum(ContractType, contract_type, None) if contract_type is not None else None,
        world_effect=world_effect_from_dict(effect) if effect else None,
    )
    return contract
