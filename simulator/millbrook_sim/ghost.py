"""Ghost player simulation — seeded gross scores and junk flags.

Scores: per-hole normal draw around par plus an expected over-par share,
rounded and clamped to [par-2, par+4].

    extra  = H + buffer            buffer: 0 plus, 3 mid, 5 for H >= 15
    w(si)  = 1.3 - 0.6 * (si-1)/17 hardest hole 1.3, easiest 0.7
    mu     = par + max(extra * w / sum(w), floors)
    sigma  = (0.5 + 0.025*|H|) * (1.1 if si <= 6, 0.9 if si >= 13, else 1)

Junk: independent Bernoulli draws from handicap-banded rate tables,
modulated by hole difficulty and gated by the same structural rules the
junk evaluator applies. Four uniforms are consumed per hole regardless of
outcome, so the flag stream for a seed never shifts.

A round is generated once at match creation and replayed verbatim.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Sequence

from .course import HoleInfo
from .enums import HOLES, LD10_HOLE, SCORE_LABELS
from .junk import JunkFlags
from .rng import LcgRandom, RngFactory, random_normal

DEFAULT_SEED = 42
JUNK_SEED_OFFSET = 7919

MAX_UNDER_PAR = 2
MAX_OVER_PAR = 4


# ---------------------------------------------------------------------------
# Junk rate tables
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class JunkRates:
    """Per-hole rates for one handicap band."""
    birdie: float
    sandie: float       # bunker save, given par or better
    greenie: float      # par 3 green hit from the tee
    three_putt: float   # given the green was hit
    long_drive: float   # hole 17 only


# (upper bound of handicap index, rates); the first band whose bound >= H wins
JUNK_RATE_BANDS: list[tuple[float, JunkRates]] = [
    (0.0,      JunkRates(birdie=0.13, sandie=0.30, greenie=0.55, three_putt=0.20, long_drive=0.40)),
    (5.0,      JunkRates(birdie=0.09, sandie=0.22, greenie=0.45, three_putt=0.30, long_drive=0.33)),
    (10.0,     JunkRates(birdie=0.06, sandie=0.15, greenie=0.35, three_putt=0.40, long_drive=0.25)),
    (15.0,     JunkRates(birdie=0.04, sandie=0.10, greenie=0.25, three_putt=0.50, long_drive=0.20)),
    (20.0,     JunkRates(birdie=0.02, sandie=0.06, greenie=0.18, three_putt=0.60, long_drive=0.15)),
    (math.inf, JunkRates(birdie=0.01, sandie=0.03, greenie=0.10, three_putt=0.70, long_drive=0.10)),
]


def expected_junk_rates(index: float) -> JunkRates:
    for bound, rates in JUNK_RATE_BANDS:
        if index <= bound:
            return rates
    return JUNK_RATE_BANDS[-1][1]


def difficulty_weight(stroke_index: int) -> float:
    """Linear in stroke index: 1.3 on the hardest hole, 0.7 on the easiest."""
    return 1.3 - 0.6 * ((stroke_index - 1) / 17)


def _clamp_probability(p: float) -> float:
    return min(1.0, max(0.0, p))


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------

def _buffer(index: float) -> float:
    if index >= 15:
        return 5
    if index > 0:
        return 3
    return 0


def hole_mean_over_par(index: float, hole: HoleInfo, total_weight: float) -> float:
    si = hole.stroke_index
    extra = index + _buffer(index)
    mean_over = extra / total_weight * difficulty_weight(si)
    if index >= si:
        mean_over = max(mean_over, 1)
    if index > HOLES and si <= index - HOLES:
        mean_over = max(mean_over, 2)
    return mean_over


def hole_sigma(index: float, stroke_index: int) -> float:
    sigma = 0.5 + 0.025 * abs(index)
    if stroke_index <= 6:
        sigma *= 1.1
    elif stroke_index >= 13:
        sigma *= 0.9
    return sigma


def generate_ghost_scores(
    index: float,
    holes: Sequence[HoleInfo],
    seed: int = DEFAULT_SEED,
    rng_factory: RngFactory = LcgRandom,
) -> list[int]:
    """18 gross scores for a ghost of handicap `index`. Pure in `seed`."""
    rng = rng_factory(seed)
    total_weight = sum(difficulty_weight(h.stroke_index) for h in holes)
    scores = []
    for hole in holes:
        mu = hole.par + hole_mean_over_par(index, hole, total_weight)
        sigma = hole_sigma(index, hole.stroke_index)
        score = round(random_normal(rng, mu, sigma))
        score = max(score, hole.par - MAX_UNDER_PAR)
        score = min(score, hole.par + MAX_OVER_PAR)
        scores.append(int(score))
    return scores


# ---------------------------------------------------------------------------
# Junk flags
# ---------------------------------------------------------------------------

def generate_ghost_junk(
    index: float,
    scores: Sequence[int],
    holes: Sequence[HoleInfo],
    seed: int = DEFAULT_SEED,
    rng_factory: RngFactory = LcgRandom,
) -> dict[int, JunkFlags]:
    """Junk flags keyed by hole number, consistent with the given scores."""
    if len(scores) != len(holes):
        raise ValueError("scores and holes must be the same length")
    rng = rng_factory(seed + JUNK_SEED_OFFSET)
    rates = expected_junk_rates(index)
    flags: dict[int, JunkFlags] = {}

    for hole, score in zip(holes, scores):
        u_sand, u_green, u_putt, u_drive = (rng.random() for _ in range(4))
        w = difficulty_weight(hole.stroke_index)
        ease = 2.0 - w

        bunker = score <= hole.par and u_sand < _clamp_probability(rates.sandie * ease)

        on_green = hole.par == 3 and u_green < _clamp_probability(rates.greenie * ease)
        three_putt = on_green and u_putt < _clamp_probability(rates.three_putt * w)
        if three_putt and score <= hole.par:
            three_putt = False
        if on_green and not three_putt and score > hole.par:
            # over par without three putts: the tee shot missed after all
            on_green = False

        long_drive = hole.number == LD10_HOLE and u_drive < rates.long_drive

        flags[hole.number] = JunkFlags(
            had_bunker_shot=bunker,
            on_green_from_tee=on_green,
            three_putt=three_putt,
            long_drive=long_drive,
        )
    return flags


# ---------------------------------------------------------------------------
# Rounds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GhostRound:
    """A ghost's whole round, fixed for the life of the match."""
    player_id: str
    seed: int
    scores: tuple[int, ...]
    junk: dict[int, JunkFlags] = field(default_factory=dict)

    def score_for(self, hole: int) -> int:
        return self.scores[hole - 1]

    def flags_for(self, hole: int) -> JunkFlags:
        return self.junk.get(hole, JunkFlags.NONE)

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "seed": self.seed,
            "scores": list(self.scores),
            "junk": {str(h): f.to_dict() for h, f in self.junk.items()},
        }

    @classmethod
    def from_dict(cls, d: dict) -> "GhostRound":
        return cls(
            player_id=d["player_id"],
            seed=d["seed"],
            scores=tuple(d["scores"]),
            junk={int(h): JunkFlags.from_dict(f) for h, f in d.get("junk", {}).items()},
        )


def generate_ghost_round(
    player_id: str,
    index: float,
    holes: Sequence[HoleInfo],
    seed: int = DEFAULT_SEED,
    rng_factory: RngFactory = LcgRandom,
) -> GhostRound:
    scores = generate_ghost_scores(index, holes, seed, rng_factory)
    junk = generate_ghost_junk(index, scores, holes, seed, rng_factory)
    return GhostRound(player_id=player_id, seed=seed, scores=tuple(scores), junk=junk)


# ---------------------------------------------------------------------------
# Reveal text
# ---------------------------------------------------------------------------

_SOURCE_NAME = re.compile(r"\(([^)]+)\)")


def ghost_source_name(display_name: str) -> str:
    """"Ghost (Dan)" -> "Dan"; anything else -> "Ghost"."""
    m = _SOURCE_NAME.search(display_name or "")
    return m.group(1) if m else "Ghost"


def ghost_reveal_summary(display_name: str, gross: int, par: int) -> str:
    name = ghost_source_name(display_name)
    to_par = gross - par
    if to_par <= -2:
        label = SCORE_LABELS[-2]
    elif to_par in SCORE_LABELS:
        label = SCORE_LABELS[to_par]
    else:
        label = f"+{to_par}"
    return f"{name}: {gross} ({label})"
