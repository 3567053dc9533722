"""Unit tests for src/ai/policy.py"""

import random
from unittest.mock import Mock

import pytest

from src.ai.policy import RuleAdherencePolicy

TRIALS = 1000


@pytest.mark.parametrize("move_count", range(6))
def test_never_breaks_rules_below_the_threshold(move_count: int) -> None:
    """Even with a certain coin flip, the first moves are always played by the rules."""
    policy = RuleAdherencePolicy(start_move=6, probability=1.0, rng=random.Random(0))
    assert sum(policy.sample(move_count) for _ in range(TRIALS)) == 0


def test_no_random_draw_below_the_threshold() -> None:
    rng = Mock(spec=random.Random)
    policy = RuleAdherencePolicy(start_move=6, probability=0.5, rng=rng)
    policy.sample(5)
    rng.random.assert_not_called()


@pytest.mark.parametrize("move_count", [6, 7, 40])
def test_eligible_from_the_threshold(move_count: int) -> None:
    policy = RuleAdherencePolicy(start_move=6, probability=1.0, rng=random.Random(0))
    assert policy.is_eligible(move_count)
    assert policy.sample(move_count)


def test_probability_zero_never_breaks() -> None:
    policy = RuleAdherencePolicy(start_move=0, probability=0.0, rng=random.Random(0))
    assert not any(policy.sample(10) for _ in range(TRIALS))


def test_default_rate_is_roughly_one_in_five() -> None:
    policy = RuleAdherencePolicy(rng=random.Random(42))
    breaks = sum(policy.sample(10) for _ in range(TRIALS))
    assert 150 < breaks < 250


def test_each_turn_is_sampled_independently() -> None:
    rng = Mock(spec=random.Random)
    rng.random.side_effect = [0.1, 0.9, 0.19, 0.2]
    policy = RuleAdherencePolicy(start_move=6, probability=0.2, rng=rng)
    assert [policy.sample(8) for _ in range(4)] == [True, False, True, False]


@pytest.mark.parametrize("start_move, probability", [(-1, 0.2), (6, -0.1), (6, 1.1)])
def test_invalid_configuration(start_move: int, probability: float) -> None:
    with pytest.raises(ValueError):
        RuleAdherencePolicy(start_move=start_move, probability=probability)
