"""Deterministic random sources for ghost simulation.

Same seed, same stream: ghost rounds must be reproducible byte for byte,
so nothing in the statistical model touches the global `random` module.
"""

from __future__ import annotations

import math
from typing import Callable, Protocol


class DeterministicRng(Protocol):
    """Anything that yields uniforms in [0, 1) from a fixed seed."""

    def random(self) -> float:
        ...


# ---------------------------------------------------------------------------
# LCG: classic (9301, 49297, 233280) generator
# ---------------------------------------------------------------------------

LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280


class LcgRandom:
    """Linear congruential generator.

    value_{n+1} = (value_n * 9301 + 49297) mod 233280, output value / 233280.
    """

    def __init__(self, seed: int):
        self.seed = int(seed)
        self._value = self.seed % LCG_MODULUS

    def random(self) -> float:
        self._value = (self._value * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self._value / LCG_MODULUS

    def get_state_dict(self) -> dict:
        return {"seed": self.seed, "value": self._value}

    @classmethod
    def from_state_dict(cls, d: dict) -> "LcgRandom":
        rng = cls(d["seed"])
        rng._value = d["value"]
        return rng


RngFactory = Callable[[int], DeterministicRng]


def random_normal(rng: DeterministicRng, mean: float, stddev: float) -> float:
    """Box–Muller transform: two uniforms in, one normal deviate out."""
    u = 0.0
    v = 0.0
    while u == 0.0:  # log(0) guard
        u = rng.random()
    while v == 0.0:
        v = rng.random()
    z = math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)
    return z * stddev + mean


def bernoulli(rng: DeterministicRng, p: float) -> bool:
    """One draw, always consumes exactly one uniform."""
    return rng.random() < p
