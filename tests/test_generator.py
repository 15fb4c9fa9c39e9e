"""
Contract generation tests: difficulty, deadline, goals, skills and payout
"""
import math

import pytest

from conftest import ScriptedRandom, make_template
from contract_engine.generator import ContractGenerator
from contract_engine.rng import SeededRandom
from contract_engine.types import (
    ContractDifficulty,
    ContractState,
    GoalDefinition,
    GoalType,
    ReputationContext,
)


@pytest.mark.parametrize("draw", [0.0, 0.5, 0.999, 1.0])
def test_template_with_only_easy_weight_always_yields_easy(draw):
    gen = ContractGenerator(ScriptedRandom(floats=[draw]))
    template = make_template(easy_weight=1.0, medium_weight=0.0, hard_weight=0.0)
    assert gen.select_difficulty(template) == ContractDifficulty.EASY


def test_template_without_weights_defaults_to_medium():
    gen = ContractGenerator(ScriptedRandom())
    template = make_template(easy_weight=0.0, medium_weight=0.0, hard_weight=0.0)
    assert gen.select_difficulty(template) == ContractDifficulty.MEDIUM


def test_zero_weight_buckets_are_never_picked():
    gen = ContractGenerator(ScriptedRandom(floats=[1.0, 1.0]))
    assert gen.select_difficulty(make_template(easy_weight=0.0, medium_weight=1.0, hard_weight=0.0)) == (
        ContractDifficulty.MEDIUM
    )
    assert gen.select_difficulty(make_template(easy_weight=0.0, medium_weight=0.0, hard_weight=1.0)) == (
        ContractDifficulty.HARD
    )


def test_new_company_only_sees_easy_contracts(seeded_rng):
    gen = ContractGenerator(seeded_rng)
    ctx = ReputationContext(reputation=0.0)
    assert {gen.select_reputation_adjusted_difficulty(ctx) for _ in range(50)} == {ContractDifficulty.EASY}


def test_deadline_scales_with_difficulty_and_has_a_floor():
    gen = ContractGenerator(ScriptedRandom())
    template = make_template(base_deadline_days=10, deadline_variance=0)
    assert gen.generate_deadline(template, ContractDifficulty.MEDIUM) == 10
    assert gen.generate_deadline(template, ContractDifficulty.EASY) == 13
    assert gen.generate_deadline(template, ContractDifficulty.HARD) == 7

    short = make_template(base_deadline_days=4, deadline_variance=0)
    assert gen.generate_deadline(short, ContractDifficulty.HARD) == 5

    fixed = make_template(base_deadline_days=10, deadline_variance=0, adjust_deadline_by_difficulty=False)
    assert gen.generate_deadline(fixed, ContractDifficulty.EASY) == 10


def test_deadline_variance_stays_in_band(seeded_rng):
    gen = ContractGenerator(seeded_rng)
    template = make_template(base_deadline_days=20, deadline_variance=5)
    values = {gen.generate_deadline(template, ContractDifficulty.MEDIUM) for _ in range(200)}
    assert min(values) >= 15
    assert max(values) <= 25


def _pool(n):
    return tuple(GoalDefinition(GoalType.FINISH_FIRST_HALF, description=f"goal {i}") for i in range(n))


def test_goal_count_follows_difficulty_and_pool_size():
    gen = ContractGenerator(ScriptedRandom(ints=[2]))
    template = make_template(min_goals=1, max_goals=5, goal_pool=_pool(3))
    assert gen.goal_count(template, ContractDifficulty.EASY) == 1
    assert gen.goal_count(template, ContractDifficulty.HARD) == 3
    assert gen.goal_count(template, ContractDifficulty.MEDIUM) == 2


def test_select_goals_without_pool_is_empty():
    gen = ContractGenerator(ScriptedRandom())
    assert gen.select_goals(make_template(), ContractDifficulty.HARD) == []


def test_selected_goals_are_distinct(seeded_rng):
    gen = ContractGenerator(seeded_rng)
    pool = _pool(6)
    template = make_template(min_goals=4, max_goals=4, goal_pool=pool)
    for _ in range(20):
        chosen = gen.select_goals(template, ContractDifficulty.HARD)
        assert len(chosen) == 4
        assert len({g.description for g in chosen}) == 4


def test_reputation_scaling_is_clamped():
    gen = ContractGenerator(ScriptedRandom(floats=[1.15]))
    scaling = gen.generate_reputation_scaling(ReputationContext(reputation=0.0, employee_max_skill=500.0))
    assert scaling == 2.5
    gen = ContractGenerator(ScriptedRandom())
    assert gen.generate_reputation_scaling(ReputationContext(employee_max_skill=1.0)) == 0.3


def test_generate_builds_an_available_contract():
    gen = ContractGenerator(ScriptedRandom())
    template = make_template(min_goals=1, max_goals=1, goal_pool=_pool(2))
    contract = gen.generate(
        template,
        ReputationContext(reputation=0.0, employee_max_skill=90.0),
        contract_id="x1",
        client_name="CloudLabs",
        current_day=4,
    )

    assert contract.state == ContractState.AVAILABLE
    assert contract.difficulty == ContractDifficulty.EASY
    assert contract.total_days == contract.days_remaining == 13
    assert contract.creation_day == 4
    assert contract.progress == 0.0
    assert len(contract.goals) == 1
    assert contract.goals[0].penalty_percent == pytest.approx(5.0)

    # scaling = 90 * 2.0 / 100 * 0.85 jitter
    scaling = 1.53
    assert contract.required_dev_skill == pytest.approx(30.0 * 0.5 * scaling)
    assert contract.required_design_skill == pytest.approx(20.0 * 0.5 * scaling)
    assert contract.required_marketing_skill == pytest.approx(10.0 * 0.5 * scaling)
    assert contract.base_payout == pytest.approx(10000.0 * 0.5 / math.sqrt(1.3))


def test_seeded_generation_is_reproducible():
    template = make_template(deadline_variance=3, min_payout=5000.0, max_payout=9000.0, goal_pool=_pool(4))
    ctx = ReputationContext(reputation=60.0)

    def build(seed):
        gen = ContractGenerator(SeededRandom(seed))
        c = gen.generate(template, ctx, contract_id="c", client_name="n", current_day=0)
        return (
            c.difficulty,
            c.total_days,
            c.base_payout,
            c.required_dev_skill,
            c.required_design_skill,
            c.required_marketing_skill,
            c.goal_penalties,
            tuple(g.description for g in c.selected_goals),
        )

    assert build(42) == build(42)
    assert len({build(s) for s in range(5)}) > 1
