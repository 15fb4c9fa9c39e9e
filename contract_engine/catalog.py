from __future__ import annotations

"""Built-in content: contract templates, goal pools and naming vocabulary.

Hosts may replace any of this; the engine only needs a sequence of
``ContractTemplate`` and, optionally, a ``ContractNamingSystem``.
"""

from typing import Dict, List, Tuple

from .naming import ContractNamingSystem, EraVocabulary, TechTag
from .types import (
    BonusDefinition,
    BonusType,
    ContractTemplate,
    ContractType,
    GoalCategory,
    GoalDefinition,
    GoalType,
    PenaltyDefinition,
    PenaltyType,
)

# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

_PAYOUT_UP = BonusDefinition(BonusType.INCREASE_BASE_PAYOUT, percent_value=10.0)
_REP_UP = BonusDefinition(BonusType.REPUTATION_GAIN, flat_value=3.0)
_MORALE_UP = BonusDefinition(BonusType.MORALE_BOOST, flat_value=5.0, scale_by_difficulty=False)
_XP_UP = BonusDefinition(BonusType.EXTRA_XP, percent_value=20.0, scale_by_difficulty=False)
_BURNOUT_DOWN = BonusDefinition(BonusType.BURNOUT_RECOVERY, flat_value=8.0, scale_by_difficulty=False)

_PAYOUT_CUT = PenaltyDefinition(PenaltyType.REDUCE_BASE_PAYOUT, percent_value=5.0)
_REP_DOWN = PenaltyDefinition(PenaltyType.REPUTATION_LOSS, flat_value=2.0, scale_by_reputation=True)
_MORALE_DOWN = PenaltyDefinition(PenaltyType.MORALE_DROP, flat_value=4.0, scale_by_difficulty=False)
_NO_QUALITY_BONUS = PenaltyDefinition(PenaltyType.REMOVE_QUALITY_BONUS)


DEFAULT_GOALS: Dict[str, GoalDefinition] = {
    "high_quality": GoalDefinition(
        GoalType.DELIVER_HIGH_QUALITY,
        "Deliver a product of at least the target quality",
        GoalCategory.SKILL,
        target_value=70.0,
        bonuses=(_PAYOUT_UP, _REP_UP),
        penalties=(_NO_QUALITY_BONUS,),
    ),
    "finish_early": GoalDefinition(
        GoalType.FINISH_DAYS_EARLY,
        "Finish some days before the deadline",
        GoalCategory.TIME,
        integer_target=3,
        bonuses=(_PAYOUT_UP,),
        penalties=(_PAYOUT_CUT,),
    ),
    "first_half": GoalDefinition(
        GoalType.FINISH_FIRST_HALF,
        "Finish within the first half of the schedule",
        GoalCategory.TIME,
        is_optional=True,
        bonuses=(BonusDefinition(BonusType.FLAT_BONUS, flat_value=1000.0),),
    ),
    "small_team": GoalDefinition(
        GoalType.NOT_EXCEED_EMPLOYEES,
        "Do not staff more than the allowed team size",
        GoalCategory.TEAM,
        integer_target=2,
        bonuses=(_XP_UP,),
        penalties=(_PAYOUT_CUT,),
    ),
    "include_designer": GoalDefinition(
        GoalType.INCLUDE_DESIGNER,
        "Put a designer on the team",
        GoalCategory.TEAM,
        bonuses=(_REP_UP,),
        penalties=(_REP_DOWN,),
    ),
    "stable_team": GoalDefinition(
        GoalType.NO_TEAM_CHANGES,
        "Keep the same team for the whole project",
        GoalCategory.TEAM,
        is_optional=True,
        bonuses=(_MORALE_UP,),
    ),
    "morale": GoalDefinition(
        GoalType.MAINTAIN_AVG_MORALE,
        "Keep average team morale above the threshold",
        GoalCategory.WELLBEING,
        threshold_value=50.0,
        bonuses=(_MORALE_UP,),
        penalties=(_MORALE_DOWN,),
    ),
    "low_burnout": GoalDefinition(
        GoalType.FINISH_LOW_BURNOUT,
        "Finish with team burnout below the threshold",
        GoalCategory.WELLBEING,
        threshold_value=40.0,
        bonuses=(_BURNOUT_DOWN,),
        penalties=(PenaltyDefinition(PenaltyType.BURNOUT_SPIKE, flat_value=5.0, scale_by_difficulty=False),),
    ),
    "productivity": GoalDefinition(
        GoalType.HIGH_PRODUCTIVITY,
        "Average productivity above 100% plus the target",
        GoalCategory.EFFICIENCY,
        percentage_target=10.0,
        bonuses=(BonusDefinition(BonusType.EFFICIENCY_BONUS, percent_value=8.0),),
        penalties=(_PAYOUT_CUT,),
    ),
    "no_idle_days": GoalDefinition(
        GoalType.NO_DAYS_ZERO_PROGRESS,
        "Make progress every single day",
        GoalCategory.EFFICIENCY,
        bonuses=(_REP_UP,),
    ),
    "impress": GoalDefinition(
        GoalType.IMPRESS_CLIENT,
        "Impress the client with near-perfect quality",
        GoalCategory.ADVANCED,
        is_optional=True,
        bonuses=(_PAYOUT_UP, BonusDefinition(BonusType.CLIENT_SATISFACTION_BOOST, percent_value=10.0)),
    ),
    "no_penalties": GoalDefinition(
        GoalType.NO_PENALTIES,
        "Fail none of the other goals",
        GoalCategory.ADVANCED,
        bonuses=(_REP_UP,),
        penalties=(_REP_DOWN,),
    ),
}


def _pool(*keys: str) -> Tuple[GoalDefinition, ...]:
    return tuple(DEFAULT_GOALS[k] for k in keys)


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

DEFAULT_TEMPLATES: Tuple[ContractTemplate, ...] = (
    ContractTemplate(
        template_id="landing_page",
        name="Landing Page",
        description="A small marketing site for a local business.",
        min_dev_skill=10.0,
        max_dev_skill=30.0,
        min_design_skill=10.0,
        max_design_skill=30.0,
        min_marketing_skill=5.0,
        max_marketing_skill=20.0,
        base_deadline_days=10,
        deadline_variance=3,
        min_payout=2000.0,
        max_payout=5000.0,
        easy_weight=60.0,
        medium_weight=30.0,
        hard_weight=10.0,
        min_goals=1,
        max_goals=2,
        goal_pool=_pool("finish_early", "small_team", "morale", "no_idle_days"),
        base_burnout_impact=8.0,
        base_xp_reward=4.0,
    ),
    ContractTemplate(
        template_id="mobile_app",
        name="Mobile App",
        description="A consumer mobile application with a companion backend.",
        goal_pool=_pool("high_quality", "finish_early", "include_designer", "morale", "productivity"),
    ),
    ContractTemplate(
        template_id="brand_campaign",
        name="Brand Campaign",
        description="A launch campaign across web and social channels.",
        min_dev_skill=10.0,
        max_dev_skill=30.0,
        min_design_skill=30.0,
        max_design_skill=60.0,
        min_marketing_skill=40.0,
        max_marketing_skill=70.0,
        base_deadline_days=15,
        min_payout=4000.0,
        max_payout=11000.0,
        goal_pool=_pool("include_designer", "stable_team", "low_burnout", "first_half"),
        base_burnout_impact=12.0,
        base_xp_reward=6.0,
    ),
    ContractTemplate(
        template_id="enterprise_platform",
        name="Enterprise Platform",
        description="A multi-tenant platform for a large corporate client.",
        min_dev_skill=60.0,
        max_dev_skill=90.0,
        min_design_skill=40.0,
        max_design_skill=70.0,
        min_marketing_skill=20.0,
        max_marketing_skill=50.0,
        base_deadline_days=30,
        deadline_variance=6,
        min_payout=15000.0,
        max_payout=40000.0,
        easy_weight=20.0,
        medium_weight=40.0,
        hard_weight=40.0,
        min_goals=2,
        max_goals=4,
        goal_pool=_pool("high_quality", "low_burnout", "productivity", "stable_team", "impress", "no_penalties"),
        base_burnout_impact=22.0,
        base_xp_reward=14.0,
    ),
)


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------

DEFAULT_ERAS: Tuple[EraVocabulary, ...] = (
    EraVocabulary(
        era_id="era.web_1",
        terms={
            ContractType.MODULE_DEVELOPMENT: ("CGI Module", "Applet Build"),
            ContractType.COMPLIANCE_STANDARDS: ("HTML Standards Audit",),
            ContractType.ECOSYSTEM_INTEGRATION: ("Portal Integration",),
            ContractType.MARKETING_CAMPAIGN: ("Banner Campaign", "Mailing List Push"),
            ContractType.OPTIMIZATION_COST: ("Server Consolidation",),
        },
    ),
    EraVocabulary(
        era_id="era.digital_age",
        terms={
            ContractType.MODULE_DEVELOPMENT: ("Microservice Build", "SDK Module", "Plugin Development"),
            ContractType.COMPLIANCE_STANDARDS: ("Privacy Compliance", "Accessibility Audit"),
            ContractType.ECOSYSTEM_INTEGRATION: ("API Integration", "Marketplace Connector"),
            ContractType.MARKETING_CAMPAIGN: ("Social Campaign", "Influencer Push", "Launch Blitz"),
            ContractType.OPTIMIZATION_COST: ("Cloud Cost Reduction", "Performance Tuning"),
        },
    ),
)

DEFAULT_TECH_TAGS: Tuple[TechTag, ...] = (
    TechTag("cloud", ("Cloud-Native", "Serverless")),
    TechTag("ai", ("AI-Driven", "Predictive")),
    TechTag("mobile", ("Mobile-First",)),
    TechTag("legacy", ()),
)


def default_templates() -> List[ContractTemplate]:
    return list(DEFAULT_TEMPLATES)


def default_naming() -> ContractNamingSystem:
    return ContractNamingSystem(DEFAULT_ERAS, DEFAULT_TECH_TAGS)
