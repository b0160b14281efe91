"""Tests for the deterministic random sources."""

from __future__ import annotations

import pytest

from millbrook_sim.rng import LcgRandom, bernoulli, random_normal


class FakeRng:
    """Replays a fixed list of uniforms."""

    def __init__(self, values):
        self.values = list(values)

    def random(self) -> float:
        return self.values.pop(0)


def test_lcg_first_value():
    assert LcgRandom(42).random() == ((42 * 9301 + 49297) % 233280) / 233280


def test_lcg_same_seed_same_stream():
    a, b = LcgRandom(7), LcgRandom(7)
    assert [a.random() for _ in range(50)] == [b.random() for _ in range(50)]


def test_lcg_stays_in_unit_interval():
    rng = LcgRandom(123456)
    assert all(0.0 <= rng.random() < 1.0 for _ in range(1000))


def test_lcg_state_round_trip():
    rng = LcgRandom(9)
    rng.random()
    clone = LcgRandom.from_state_dict(rng.get_state_dict())
    assert clone.random() == rng.random()


def test_random_normal_skips_zero_uniforms():
    # u=0.5 after skipping 0.0, v=0.25 -> cos(pi/2) = 0 -> the mean
    value = random_normal(FakeRng([0.0, 0.5, 0.25]), 5.0, 2.0)
    assert value == pytest.approx(5.0, abs=1e-9)


def test_bernoulli_uses_one_draw():
    rng = FakeRng([0.3, 0.7])
    assert bernoulli(rng, 0.5)
    assert not bernoulli(rng, 0.5)
    assert rng.values == []
