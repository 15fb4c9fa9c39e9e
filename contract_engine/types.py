from __future__ import annotations

"""Public data types for the contract engine.

Definitions (templates, goals, bonuses, penalties) are immutable. ``Contract``
is the one mutable record: its lifecycle fields move as the simulation ticks.
Goal state is kept as one ``ContractGoal`` per selected goal, so the per-goal
views exposed on ``Contract`` always have equal length.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ContractDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ContractState(str, Enum):
    AVAILABLE = "available"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class SkillAxis(str, Enum):
    DEV = "dev"
    DESIGN = "design"
    MARKETING = "marketing"


class ContractType(str, Enum):
    """Rival contract kinds. Permanent kinds never carry a world effect."""

    MODULE_DEVELOPMENT = "module_development"
    COMPLIANCE_STANDARDS = "compliance_standards"
    ECOSYSTEM_INTEGRATION = "ecosystem_integration"
    MARKETING_CAMPAIGN = "marketing_campaign"
    OPTIMIZATION_COST = "optimization_cost"

    @property
    def is_temporary(self) -> bool:
        return self in (ContractType.MARKETING_CAMPAIGN, ContractType.OPTIMIZATION_COST)


class MarketComponent(str, Enum):
    QUALITY = "quality"
    MARKETING = "marketing"
    REPUTATION = "reputation"
    PRICE = "price"
    STANDARD = "standard"
    ECOSYSTEM = "ecosystem"


# Market-quality weights of each component (sum to 1.0).
MARKET_COMPONENT_WEIGHTS: Dict[MarketComponent, float] = {
    MarketComponent.QUALITY: 0.30,
    MarketComponent.MARKETING: 0.25,
    MarketComponent.REPUTATION: 0.20,
    MarketComponent.PRICE: 0.15,
    MarketComponent.STANDARD: 0.05,
    MarketComponent.ECOSYSTEM: 0.05,
}


class TechAdoptionPhase(str, Enum):
    RESEARCH = "research"
    EARLY_ADOPTION = "early_adoption"
    GROWTH = "growth"
    MAINSTREAM = "mainstream"
    MANDATORY = "mandatory"


class GoalCategory(str, Enum):
    SKILL = "skill"
    TIME = "time"
    TEAM = "team"
    WELLBEING = "wellbeing"
    EFFICIENCY = "efficiency"
    ADVANCED = "advanced"


class GoalType(str, Enum):
    # skill
    REACH_DEV_QUALITY = "reach_dev_quality"
    REACH_DESIGN_QUALITY = "reach_design_quality"
    REACH_MARKETING_QUALITY = "reach_marketing_quality"
    NO_SKILL_BELOW_THRESHOLD = "no_skill_below_threshold"
    BALANCED_SKILL_DISTRIBUTION = "balanced_skill_distribution"
    OVERPERFORM_DEV_REQUIREMENT = "overperform_dev_requirement"
    DELIVER_HIGH_QUALITY = "deliver_high_quality"
    LOW_SKILL_DEFICIT = "low_skill_deficit"
    MAINTAIN_AVG_EFFECTIVE_SKILL = "maintain_avg_effective_skill"
    NO_LOW_MORALE_DURING_PROJECT = "no_low_morale_during_project"
    # time
    FINISH_DAYS_EARLY = "finish_days_early"
    FINISH_PERCENT_FASTER = "finish_percent_faster"
    NOT_EXCEED_TIME_PERCENT = "not_exceed_time_percent"
    FINISH_EXACT_DEADLINE = "finish_exact_deadline"
    FINISH_FIRST_HALF = "finish_first_half"
    CONSISTENT_PROGRESS = "consistent_progress"
    NO_DAYS_ZERO_PROGRESS = "no_days_zero_progress"
    REACH_PROGRESS_MILESTONE = "reach_progress_milestone"
    NO_OVERTIME_BURNOUT = "no_overtime_burnout"
    NO_BURNOUT_SPIKES = "no_burnout_spikes"
    # team
    USE_MAX_EMPLOYEES = "use_max_employees"
    USE_MIN_EMPLOYEES = "use_min_employees"
    INCLUDE_DESIGNER = "include_designer"
    INCLUDE_MARKETER = "include_marketer"
    NOT_EXCEED_EMPLOYEES = "not_exceed_employees"
    USE_SINGLE_SPECIALIST = "use_single_specialist"
    USE_LOW_SKILL_ONLY = "use_low_skill_only"
    USE_HIGH_SKILL_EMPLOYEE = "use_high_skill_employee"
    NO_TEAM_CHANGES = "no_team_changes"
    NO_REASSIGNMENT = "no_reassignment"
    # wellbeing
    MAINTAIN_AVG_MORALE = "maintain_avg_morale"
    FINISH_LOW_BURNOUT = "finish_low_burnout"
    INCREASE_MORALE = "increase_morale"
    NO_MORALE_BELOW_THRESHOLD = "no_morale_below_threshold"
    RECOVER_BURNOUT = "recover_burnout"
    ZERO_BURNOUT_SPIKES = "zero_burnout_spikes"
    IMPROVE_EMPLOYEE_SKILL = "improve_employee_skill"
    FINISH_HIGHER_MORALE = "finish_higher_morale"
    NO_NEGATIVE_MORALE_EVENTS = "no_negative_morale_events"
    LIMIT_BURNOUT_GROWTH = "limit_burnout_growth"
    # efficiency
    UNDER_LABOUR_COST = "under_labour_cost"
    HIGH_PRODUCTIVITY = "high_productivity"
    AVOID_OVERSTAFFING = "avoid_overstaffing"
    HIGH_EFFICIENCY = "high_efficiency"
    LOW_PRODUCTIVITY_VARIANCE = "low_productivity_variance"
    NO_PRODUCTIVITY_DROP = "no_productivity_drop"
    LOW_WASTED_TIME = "low_wasted_time"
    NO_BURNOUT_MULTIPLIER = "no_burnout_multiplier"
    EXCEED_SKILL_COVERAGE = "exceed_skill_coverage"
    STEADY_PRODUCTIVITY = "steady_productivity"
    # advanced
    CLIENT_SATISFACTION = "client_satisfaction"
    NO_PENALTIES = "no_penalties"
    IMPRESS_CLIENT = "impress_client"
    NO_OPTIONAL_GOAL_FAILURES = "no_optional_goal_failures"
    CONTRACT_STREAK = "contract_streak"
    NO_REASSIGNMENT_ADVANCED = "no_reassignment_advanced"
    UNDER_QUALIFIED_TEAM = "under_qualified_team"
    OVERDELIVER = "overdeliver"
    RECORD_COMPLETION_TIME = "record_completion_time"
    MAINTAIN_COMPANY_MORALE = "maintain_company_morale"


class BonusType(str, Enum):
    INCREASE_BASE_PAYOUT = "increase_base_payout"
    FLAT_BONUS = "flat_bonus"
    EARLY_COMPLETION_MULTIPLIER = "early_completion_multiplier"
    QUALITY_BONUS_MULTIPLIER = "quality_bonus_multiplier"
    EFFICIENCY_BONUS = "efficiency_bonus"
    REPUTATION_GAIN = "reputation_gain"
    REPUTATION_MULTIPLIER = "reputation_multiplier"
    CLIENT_TRUST_BOOST = "client_trust_boost"
    UNLOCK_HIGH_TIER_FASTER = "unlock_high_tier_faster"
    EXTRA_XP = "extra_xp"
    MORALE_BOOST = "morale_boost"
    BURNOUT_RECOVERY = "burnout_recovery"
    PRODUCTIVITY_BUFF_NEXT = "productivity_buff_next"
    SKILL_GROWTH_BOOST = "skill_growth_boost"
    TEMPORARY_PRODUCTIVITY_BOOST = "temporary_productivity_boost"
    REDUCED_BURNOUT_ACCUMULATION = "reduced_burnout_accumulation"
    INCREASED_CONTRACT_FREQUENCY = "increased_contract_frequency"
    REDUCED_SALARY_GROWTH = "reduced_salary_growth"
    PERFECT_CONTRACT_BONUS = "perfect_contract_bonus"
    STREAK_BONUS = "streak_bonus"
    CLIENT_SATISFACTION_BOOST = "client_satisfaction_boost"


class PenaltyType(str, Enum):
    REDUCE_BASE_PAYOUT = "reduce_base_payout"
    FLAT_FINE = "flat_fine"
    REMOVE_QUALITY_BONUS = "remove_quality_bonus"
    REDUCE_EARLY_BONUS = "reduce_early_bonus"
    REMOVE_EFFICIENCY_BONUS = "remove_efficiency_bonus"
    REPUTATION_LOSS = "reputation_loss"
    REDUCE_REPUTATION_GAIN = "reduce_reputation_gain"
    CLIENT_TRUST_DECREASE = "client_trust_decrease"
    LIMIT_HIGH_TIER_CONTRACTS = "limit_high_tier_contracts"
    BURNOUT_SPIKE = "burnout_spike"
    MORALE_DROP = "morale_drop"
    REDUCE_XP_GAIN = "reduce_xp_gain"
    TEMPORARY_PRODUCTIVITY_PENALTY = "temporary_productivity_penalty"
    CAP_MAX_QUALITY = "cap_max_quality"
    QUALITY_MULTIPLIER_REDUCTION = "quality_multiplier_reduction"
    CLIENT_DISSATISFACTION = "client_dissatisfaction"
    PRODUCTIVITY_DEBUFF = "productivity_debuff"
    INCREASED_BURNOUT_NEXT = "increased_burnout_next"
    HIGHER_SALARY_EXPECTATIONS = "higher_salary_expectations"
    NEXT_CONTRACT_HARDER = "next_contract_harder"


# ---------------------------------------------------------------------------
# Definitions (immutable)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BonusDefinition:
    type: BonusType
    percent_value: float = 10.0
    flat_value: float = 500.0
    duration_days: int = 5
    scale_by_difficulty: bool = True
    scale_by_contract_value: bool = False


@dataclass(frozen=True, slots=True)
class PenaltyDefinition:
    type: PenaltyType
    percent_value: float = 10.0
    flat_value: float = 500.0
    duration_days: int = 3
    scale_by_difficulty: bool = True
    scale_by_reputation: bool = False


@dataclass(frozen=True, slots=True)
class GoalDefinition:
    """One goal a contract may carry.

    Which of the numeric targets matter depends on ``type``: skill/quality goals
    read ``target_value``, floor/ceiling goals read ``threshold_value``,
    ratio goals read ``percentage_target`` and count goals read
    ``integer_target``.
    """

    type: GoalType
    description: str = ""
    category: GoalCategory = GoalCategory.SKILL

    target_value: float = 50.0
    threshold_value: float = 50.0
    percentage_target: float = 10.0
    integer_target: int = 1

    penalty_percent_min: float = 5.0
    penalty_percent_max: float = 15.0

    # Legacy flat rewards, applied on completion on top of ``bonuses``.
    bonus_percent: float = 0.0
    reputation_bonus: float = 0.0
    xp_multiplier: float = 1.0

    is_optional: bool = False
    is_hidden: bool = False

    bonuses: Tuple[BonusDefinition, ...] = ()
    penalties: Tuple[PenaltyDefinition, ...] = ()


@dataclass(frozen=True, slots=True)
class ContractTemplate:
    template_id: str
    name: str
    description: str = ""

    min_dev_skill: float = 30.0
    max_dev_skill: float = 70.0
    min_design_skill: float = 20.0
    max_design_skill: float = 60.0
    min_marketing_skill: float = 10.0
    max_marketing_skill: float = 50.0

    base_deadline_days: int = 20
    deadline_variance: int = 5
    adjust_deadline_by_difficulty: bool = True

    min_payout: float = 5000.0
    max_payout: float = 15000.0

    easy_weight: float = 40.0
    medium_weight: float = 40.0
    hard_weight: float = 20.0

    min_goals: int = 1
    max_goals: int = 3
    goal_pool: Tuple[GoalDefinition, ...] = ()

    base_burnout_impact: float = 15.0
    base_xp_reward: float = 8.0

    def average_skill_requirement(self) -> float:
        bounds = (
            self.min_dev_skill,
            self.max_dev_skill,
            self.min_design_skill,
            self.max_design_skill,
            self.min_marketing_skill,
            self.max_marketing_skill,
        )
        return sum(bounds) / len(bounds)


# ---------------------------------------------------------------------------
# Runtime records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ReputationContext:
    reputation: float = 0.0
    max_reputation: float = 100.0
    employee_max_skill: float = 90.0

    @property
    def reputation_percent(self) -> float:
        if self.max_reputation <= 0:
            return 0.0
        return self.reputation / self.max_reputation * 100.0


@dataclass(slots=True)
class ContractGoal:
    """A goal selected for one contract, with its rolled values and outcome."""

    goal: GoalDefinition
    target_value: float
    penalty_percent: float
    completed: bool = False


@dataclass(slots=True)
class ContractWorldEffect:
    effect_id: str
    issuing_rival_id: str
    target_category_id: str
    component: MarketComponent
    magnitude: float
    duration_quarters: int
    quarters_remaining: int = 0

    @property
    def is_expired(self) -> bool:
        return self.quarters_remaining <= 0


@dataclass(slots=True)
class Contract:
    contract_id: str
    client_name: str
    template_id: str
    difficulty: ContractDifficulty = ContractDifficulty.MEDIUM
    title: str = ""

    state: ContractState = ContractState.AVAILABLE
    progress: float = 0.0
    days_remaining: int = 0
    total_days: int = 0
    days_available: int = 0

    assigned_employee_ids: List[str] = field(default_factory=list)
    goals: List[ContractGoal] = field(default_factory=list)

    base_payout: float = 0.0
    quality_bonus: float = 0.0
    total_payout: float = 0.0
    final_quality: float = 0.0

    creation_day: int = 0
    start_day: int = -1
    completion_day: int = -1

    required_dev_skill: float = 0.0
    required_design_skill: float = 0.0
    required_marketing_skill: float = 0.0

    issuing_rival_id: Optional[str] = None
    target_category_id: Optional[str] = None
    contract_type: Optional[ContractType] = None
    world_effect: Optional[ContractWorldEffect] = None

    # ---- per-goal views -------------------------------------------------
    @property
    def selected_goals(self) -> Tuple[GoalDefinition, ...]:
        return tuple(g.goal for g in self.goals)

    @property
    def goal_completion_status(self) -> Tuple[bool, ...]:
        return tuple(g.completed for g in self.goals)

    @property
    def goal_penalties(self) -> Tuple[float, ...]:
        return tuple(g.penalty_percent for g in self.goals)

    @property
    def goal_target_values(self) -> Tuple[float, ...]:
        return tuple(g.target_value for g in self.goals)

    # ---- helpers ---------------------------------------------------------
    def required_skill(self, axis: SkillAxis) -> float:
        if axis == SkillAxis.DEV:
            return self.required_dev_skill
        if axis == SkillAxis.DESIGN:
            return self.required_design_skill
        return self.required_marketing_skill

    @property
    def total_required_skill(self) -> float:
        return self.required_dev_skill + self.required_design_skill + self.required_marketing_skill

    @property
    def is_finished(self) -> bool:
        return self.state in (ContractState.COMPLETED, ContractState.FAILED)

    @property
    def is_rival_contract(self) -> bool:
        return bool(self.issuing_rival_id)

    @property
    def days_used(self) -> int:
        if self.start_day < 0 or self.completion_day < 0:
            return 0
        return self.completion_day - self.start_day


def _default_phase_bands() -> Dict[TechAdoptionPhase, Tuple[float, float]]:
    return {
        TechAdoptionPhase.RESEARCH: (0.6, 0.9),
        TechAdoptionPhase.EARLY_ADOPTION: (0.9, 1.2),
        TechAdoptionPhase.GROWTH: (1.0, 1.3),
        TechAdoptionPhase.MAINSTREAM: (1.1, 1.4),
        TechAdoptionPhase.MANDATORY: (1.0, 1.2),
    }


@dataclass(frozen=True, slots=True)
class ContractBalanceConfig:
    """Session-level balance knobs for offers, rivals and world effects."""

    # offers
    max_available_offers: int = 5
    offers_per_generation: int = 2
    generation_interval_days: int = 7
    max_active_contracts: int = 3
    offer_expiry_days: int = 14

    # world effects
    max_total_effect_per_company_category: float = 0.12
    max_effect_per_component_per_company_category: float = 0.08
    max_effect_duration_quarters: int = 4

    # dominance
    dominance_share_threshold: float = 0.55
    dominance_magnitude_multiplier: float = 0.60
    force_dominance_duration_to_1q: bool = True

    # rival offers
    per_issuer_per_category_offer_cooldown_quarters: int = 1
    max_tech_adoption_multiplier: float = 1.5
    tech_phase_weight_bands: Mapping[TechAdoptionPhase, Tuple[float, float]] = field(
        default_factory=_default_phase_bands
    )
    rival_issuer_min_cash: float = 5000.0
    rival_min_market_share: float = 0.01
    rival_base_payout: float = 5000.0
    rival_offer_ratio: float = 0.5
