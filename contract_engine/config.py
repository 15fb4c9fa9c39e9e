from __future__ import annotations

"""Tuning parameters for the contract engine.

This module is the single place to tune contract math. Balance knobs that are
expected to vary per game session (offer pool size, world-effect caps,
dominance rules) live on ``ContractBalanceConfig`` instead, so they can be
injected per system.

Generation
----------
- Difficulty modifiers scale required skills and payout.
- Reputation scaling keeps required skills reachable by the current roster.
- Payout follows an inverse square-root law over deadline length.

Simulation
----------
- Productivity is a coverage curve shaped by morale, burnout and team size,
  clamped to [PRODUCTIVITY_MIN, PRODUCTIVITY_MAX].
- Burnout grows faster once productivity exceeds OVERWORK_PRODUCTIVITY.

All values are dimensionless unless noted. Skills, morale, burnout, quality and
progress are on a 0..100 scale.
"""

# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

DEADLINE_MIN_DAYS: int = 5
DEADLINE_EASY_MULT: float = 1.3
DEADLINE_HARD_MULT: float = 0.7

SKILL_MODIFIER_EASY: float = 0.5
SKILL_MODIFIER_MEDIUM: float = 1.0
SKILL_MODIFIER_HARD: float = 1.4

PAYOUT_MULT_EASY: float = 0.5
PAYOUT_MULT_MEDIUM: float = 1.0
PAYOUT_MULT_HARD: float = 2.0

# Reputation scaling of required skills.
REP_SCALING_JITTER_MIN: float = 0.85
REP_SCALING_JITTER_MAX: float = 1.15
REP_SCALING_MIN: float = 0.3
REP_SCALING_MAX: float = 2.5

# Goal target adjustment per difficulty.
GOAL_TARGET_MULT_EASY: float = 0.7
GOAL_TARGET_MULT_HARD: float = 1.4
GOAL_THRESHOLD_MULT_EASY: float = 0.8
GOAL_THRESHOLD_MULT_HARD: float = 1.2

DEFAULT_GOAL_PENALTY_MIN: float = 5.0
DEFAULT_GOAL_PENALTY_MAX: float = 15.0

DEFAULT_MAX_REPUTATION: float = 100.0
DEFAULT_EMPLOYEE_MAX_SKILL: float = 90.0

# Player offer template weighting (gaussian over skill distance).
OFFER_TEMPLATE_SIGMA: float = 25.0

# ---------------------------------------------------------------------------
# Productivity
# ---------------------------------------------------------------------------

PRODUCTIVITY_MIN: float = 0.0
PRODUCTIVITY_MAX: float = 150.0

# overall = min * W_MIN + mean * W_MEAN
COVERAGE_WEIGHT_MIN: float = 0.85
COVERAGE_WEIGHT_MEAN: float = 0.15

TEAM_FACTOR_FLOOR: float = 0.25
TEAM_SYNERGY_PER_MEMBER: float = 0.12
TEAM_SYNERGY_MAX_MEMBERS: int = 4
TEAM_OVERHEAD_START: int = 3
TEAM_OVERHEAD_PER_MEMBER: float = 0.08
TEAM_OVERHEAD_FLOOR: float = 0.7
FINAL_PRODUCTIVITY_BOOST: float = 1.05

# ---------------------------------------------------------------------------
# Burnout
# ---------------------------------------------------------------------------

OVERWORK_PRODUCTIVITY: float = 110.0
OVERWORK_BURNOUT_SLOPE: float = 0.5
OVERWORK_BURNOUT_CAP: float = 1.5

# ---------------------------------------------------------------------------
# Quality & payout
# ---------------------------------------------------------------------------

QUALITY_MORALE_LO: float = 0.9
QUALITY_MORALE_HI: float = 1.1
QUALITY_BURNOUT_LO: float = 0.9

EARLY_FINISH_BONUS_SLOPE: float = 0.15
LATE_FINISH_PENALTY_SLOPE: float = 0.2
LATE_FINISH_FLOOR: float = 0.6

QUALITY_BONUS_NEUTRAL: float = 50.0
QUALITY_BONUS_RATE: float = 0.5

# ---------------------------------------------------------------------------
# Tracking thresholds
# ---------------------------------------------------------------------------

# A day counts as a stall when its progress is below this share of baseline.
STALL_PROGRESS_RATIO: float = 0.5
PROGRESS_MILESTONE: float = 50.0
BURNOUT_SPIKE_DELTA: float = 5.0
NEGATIVE_MORALE_DELTA: float = 3.0
OVERSTAFFED_COVERAGE: float = 1.5

# ---------------------------------------------------------------------------
# Bonus / penalty scaling
# ---------------------------------------------------------------------------

BONUS_DIFFICULTY_EASY: float = 0.8
BONUS_DIFFICULTY_MEDIUM: float = 1.0
BONUS_DIFFICULTY_HARD: float = 1.25

PENALTY_DIFFICULTY_EASY: float = 0.8
PENALTY_DIFFICULTY_MEDIUM: float = 1.0
PENALTY_DIFFICULTY_HARD: float = 1.3

CONTRACT_VALUE_REFERENCE: float = 10000.0
CONTRACT_VALUE_FACTOR_MIN: float = 0.5
CONTRACT_VALUE_FACTOR_MAX: float = 2.0

PENALTY_REPUTATION_SLOPE: float = 0.5
PENALTY_REPUTATION_FACTOR_MIN: float = 0.5
PENALTY_REPUTATION_FACTOR_MAX: float = 2.0

PERFECT_CONTRACT_PAYOUT_PCT: float = 15.0
PERFECT_CONTRACT_REPUTATION: float = 10.0
PERFECT_CONTRACT_MORALE: float = 15.0

# ---------------------------------------------------------------------------
# Rival contracts
# ---------------------------------------------------------------------------

PLAYER_COMPANY_ID: str = "player"

RIVAL_DOMINANT_MARKETING_CHANCE: float = 0.6
RIVAL_EFFECT_MAGNITUDE_MIN: float = 0.03
RIVAL_EFFECT_MAGNITUDE_MAX: float = 0.06
RIVAL_PAYOUT_ROUNDING: int = 100
DEFAULT_ERA_ID: str = "era.digital_age"
