"""Hole payout and zero-sum distribution.

- Push: payout 0, carry += base
- Win:  payout = base + carry (+ base again under the win-bonus rule), carry = 0
- Winners split +payout over their roster, losers split -payout over theirs
- Junk nets out between teams: Red gets +(red - blue) / red_count each,
  Blue gets -(red - blue) / blue_count each

Every hole therefore moves money between players without creating any:
sum(deltas) == 0.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .enums import Team, HoleResult
from .junk import JunkEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HolePayout:
    payout: float
    new_carry: float


@dataclass(frozen=True)
class Distribution:
    """Per-player money movement for one hole."""
    payout: float
    new_carry: float
    red_junk: float
    blue_junk: float
    deltas: tuple[float, ...]

    @property
    def net_junk_to_red(self) -> float:
        return self.red_junk - self.blue_junk


def calculate_hole_payout(result: HoleResult, base: float, carry: float = 0,
                          win_bonus: bool = False) -> HolePayout:
    if result is HoleResult.PUSH:
        return HolePayout(payout=0, new_carry=carry + base)
    payout = base + carry
    if win_bonus:
        payout += base
    return HolePayout(payout=payout, new_carry=0)


def team_junk_totals(events: Sequence[JunkEvent]) -> dict[Team, float]:
    totals = {Team.RED: 0, Team.BLUE: 0}
    for e in events:
        totals[e.team] += e.value
    return totals


def _roster_counts(teams: Sequence[Team]) -> dict[Team, int]:
    counts = {Team.RED: 0, Team.BLUE: 0}
    for t in teams:
        counts[t] += 1
    return counts


def hole_deltas(result: HoleResult, payout: float, teams: Sequence[Team]) -> list[float]:
    """Hole-win money only, split by actual roster size per team."""
    if result is HoleResult.PUSH or not payout:
        return [0.0] * len(teams)
    winner = result.team
    counts = _roster_counts(teams)
    if not counts[winner] or not counts[winner.opponent]:
        return [0.0] * len(teams)
    win_share = payout / counts[winner]
    lose_share = payout / counts[winner.opponent]
    return [win_share if t == winner else -lose_share for t in teams]


def junk_deltas(events: Sequence[JunkEvent], teams: Sequence[Team]) -> list[float]:
    totals = team_junk_totals(events)
    net_to_red = totals[Team.RED] - totals[Team.BLUE]
    counts = _roster_counts(teams)
    if not net_to_red or not counts[Team.RED] or not counts[Team.BLUE]:
        return [0.0] * len(teams)
    red_share = net_to_red / counts[Team.RED]
    blue_share = net_to_red / counts[Team.BLUE]
    return [red_share if t == Team.RED else -blue_share for t in teams]


def distribute(
    result: HoleResult,
    base: float,
    carry_in: float,
    junk_events: Sequence[JunkEvent],
    teams: Sequence[Team],
    win_bonus: bool = False,
) -> Distribution:
    """Settle one hole: hole payout plus junk, as per-player deltas."""
    hp = calculate_hole_payout(result, base, carry_in, win_bonus)
    win = hole_deltas(result, hp.payout, teams)
    junk = junk_deltas(junk_events, teams)
    totals = team_junk_totals(junk_events)
    deltas = tuple(w + j for w, j in zip(win, junk))
    logger.debug("distribute %s base=%s carry=%s payout=%s junk R=%s B=%s deltas=%s",
                 result.value, base, carry_in, hp.payout,
                 totals[Team.RED], totals[Team.BLUE], deltas)
    return Distribution(
        payout=hp.payout,
        new_carry=hp.new_carry,
        red_junk=totals[Team.RED],
        blue_junk=totals[Team.BLUE],
        deltas=deltas,
    )


def update_running_totals(previous: Sequence[float], deltas: Sequence[float]) -> tuple[float, ...]:
    if len(previous) != len(deltas):
        raise ValueError("Number of players in totals and deltas must match")
    return tuple(p + d for p, d in zip(previous, deltas))


def team_sums(totals: Sequence[float], teams: Sequence[Team]) -> dict[Team, float]:
    """Per-team sum of per-player amounts."""
    sums = {Team.RED: 0.0, Team.BLUE: 0.0}
    for amount, team in zip(totals, teams):
        sums[team] += amount
    return sums
