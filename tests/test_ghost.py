"""Tests for the ghost player simulation."""

from __future__ import annotations

import pytest

from millbrook_sim.course import MILLBROOK_COURSE, HoleInfo, default_holes
from millbrook_sim.ghost import (
    JUNK_RATE_BANDS,
    difficulty_weight,
    expected_junk_rates,
    generate_ghost_junk,
    generate_ghost_round,
    generate_ghost_scores,
    ghost_reveal_summary,
    ghost_source_name,
    hole_sigma,
)
from millbrook_sim.rng import LcgRandom

CHAMPIONSHIP = MILLBROOK_COURSE.get_tee("championship").holes


class CountingRng:
    calls = 0

    def __init__(self, seed):
        self._rng = LcgRandom(seed)

    def random(self):
        CountingRng.calls += 1
        return self._rng.random()


def test_same_seed_same_round():
    a = generate_ghost_round("g", 12.4, CHAMPIONSHIP, seed=99)
    b = generate_ghost_round("g", 12.4, CHAMPIONSHIP, seed=99)
    assert a == b


def test_seeds_vary_the_round():
    rounds = {tuple(generate_ghost_scores(12.4, CHAMPIONSHIP, seed=s)) for s in range(10)}
    assert len(rounds) > 1


@pytest.mark.parametrize("index", [-3.0, 0.0, 9.5, 18.0, 36.0])
def test_scores_clamped_to_par_window(index):
    for seed in range(40):
        scores = generate_ghost_scores(index, CHAMPIONSHIP, seed=seed)
        assert len(scores) == 18
        for score, hole in zip(scores, CHAMPIONSHIP):
            assert hole.par - 2 <= score <= hole.par + 4


def test_higher_handicap_scores_higher():
    def average(index):
        totals = [sum(generate_ghost_scores(index, CHAMPIONSHIP, seed=s)) for s in range(50)]
        return sum(totals) / len(totals)

    assert average(0.0) < average(10.0) < average(25.0)


@pytest.mark.parametrize("index", [2.0, 14.0, 28.0])
def test_junk_respects_structural_rules(index):
    for seed in range(60):
        ghost = generate_ghost_round("g", index, CHAMPIONSHIP, seed=seed)
        assert set(ghost.junk) == set(range(1, 19))
        for hole in CHAMPIONSHIP:
            flags = ghost.flags_for(hole.number)
            score = ghost.score_for(hole.number)
            if flags.had_bunker_shot:
                assert score <= hole.par
            if flags.on_green_from_tee:
                assert hole.par == 3
            if flags.three_putt:
                assert flags.on_green_from_tee
                assert score > hole.par
            if flags.on_green_from_tee and score > hole.par:
                assert flags.three_putt
            if flags.long_drive:
                assert hole.number == 17


def test_junk_draws_four_uniforms_per_hole():
    holes = default_holes()
    CountingRng.calls = 0
    generate_ghost_junk(10.0, [4] * 18, holes, seed=5, rng_factory=CountingRng)
    assert CountingRng.calls == 4 * 18


def test_long_drive_ignores_scores():
    holes = default_holes()
    good = generate_ghost_junk(3.0, [4] * 18, holes, seed=11)
    bad = generate_ghost_junk(3.0, [8] * 18, holes, seed=11)
    assert good[17].long_drive == bad[17].long_drive


def test_junk_length_mismatch():
    with pytest.raises(ValueError):
        generate_ghost_junk(10.0, [4] * 17, default_holes())


def test_rate_bands():
    assert expected_junk_rates(-3.0) is JUNK_RATE_BANDS[0][1]
    assert expected_junk_rates(0.0) is JUNK_RATE_BANDS[0][1]
    assert expected_junk_rates(0.1) is JUNK_RATE_BANDS[1][1]
    assert expected_junk_rates(12.0) is JUNK_RATE_BANDS[3][1]
    assert expected_junk_rates(100.0) is JUNK_RATE_BANDS[-1][1]
    birdie_rates = [rates.birdie for _, rates in JUNK_RATE_BANDS]
    assert birdie_rates == sorted(birdie_rates, reverse=True)


def test_difficulty_weight_and_sigma():
    assert difficulty_weight(1) == pytest.approx(1.3)
    assert difficulty_weight(18) == pytest.approx(0.7)
    assert hole_sigma(0.0, 1) == pytest.approx(0.55)
    assert hole_sigma(0.0, 18) == pytest.approx(0.45)
    assert hole_sigma(20.0, 10) == pytest.approx(1.0)


def test_high_handicap_gets_floor_over_par_on_hard_holes():
    holes = [HoleInfo(n, 4, 400, n) for n in range(1, 19)]
    for seed in range(20):
        scores = generate_ghost_scores(40.0, holes, seed=seed)
        assert sum(scores) > 90


def test_reveal_text():
    assert ghost_source_name("Ghost (Dan)") == "Dan"
    assert ghost_source_name("Phantom") == "Ghost"
    assert ghost_reveal_summary("Ghost (Dan)", 5, 4) == "Dan: 5 (Bogey)"
    assert ghost_reveal_summary("Ghost (Dan)", 3, 4) == "Dan: 3 (Birdie)"
    assert ghost_reveal_summary("Ghost (Dan)", 6, 4) == "Dan: 6 (Double)"
    assert ghost_reveal_summary("Ghost (Dan)", 7, 4) == "Dan: 7 (+3)"
    assert ghost_reveal_summary("", 2, 5) == "Ghost: 2 (Eagle!)"
