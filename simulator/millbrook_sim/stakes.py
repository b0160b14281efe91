"""Stake state machine — base, carry and doubling across the round.

- hole 1 base = 1, hole 2 base = 2 (scripted opening escalation)
- hole 3+ base = 2 x 2^doubles, where doubles counts called doubles only
- a double is the trailing team's privilege, once per hole, and doubles
  the current hole's base
- a push rolls the hole's base into the carry; a win clears the carry
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from .enums import Team, HoleResult, HOLES, OPENING_BASE, SECOND_HOLE_BASE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StakeState:
    current_hole: int = 1
    base: float = OPENING_BASE
    carry: float = 0
    doubles: int = 0
    double_used_this_hole: bool = False
    trailing_team: Optional[Team] = None


def calculate_base(hole: int, doubles: int) -> float:
    """Base stake for a hole given the number of doubles called before it."""
    if hole <= 1:
        return OPENING_BASE
    if hole == 2:
        return SECOND_HOLE_BASE
    return SECOND_HOLE_BASE * 2 ** doubles


def trailing_team(running_totals: Sequence[float], teams: Sequence[Team]) -> Optional[Team]:
    """Team behind on average per-player running total, or None when level."""
    if not running_totals:
        return None
    sums = {Team.RED: 0.0, Team.BLUE: 0.0}
    counts = {Team.RED: 0, Team.BLUE: 0}
    for total, team in zip(running_totals, teams):
        sums[team] += total
        counts[team] += 1
    if not counts[Team.RED] or not counts[Team.BLUE]:
        return None
    red = sums[Team.RED] / counts[Team.RED]
    blue = sums[Team.BLUE] / counts[Team.BLUE]
    if red < blue:
        return Team.RED
    if blue < red:
        return Team.BLUE
    return None


def is_double_available(state: StakeState) -> bool:
    return state.trailing_team is not None and not state.double_used_this_hole


def call_double(state: StakeState, calling_team: Optional[Team] = None) -> StakeState:
    """Double the current hole's stake. Illegal calls return `state` unchanged.

    `calling_team` defaults to whichever team is trailing; a call from the
    leading team is rejected.
    """
    if not is_double_available(state):
        logger.debug("double rejected on hole %d: trailing=%s used=%s",
                     state.current_hole, state.trailing_team, state.double_used_this_hole)
        return state
    if calling_team is not None and calling_team != state.trailing_team:
        logger.debug("double rejected on hole %d: %s is not trailing",
                     state.current_hole, calling_team.value)
        return state
    return replace(
        state,
        base=state.base * 2,
        doubles=state.doubles + 1,
        double_used_this_hole=True,
    )


def advance(
    state: StakeState,
    result: HoleResult,
    new_carry: float,
    new_trailing: Optional[Team] = None,
) -> StakeState:
    """Settle the current hole and move the stake to the next one.

    `new_carry` comes from the payout calculation. The doubles count carries
    over untouched whether the hole was won or pushed. The hole number stops
    at 18.
    """
    if result is not HoleResult.PUSH and new_carry:
        raise ValueError(f"Carry must reset after a won hole, got {new_carry}")
    if state.current_hole >= HOLES:
        return replace(state, carry=new_carry, double_used_this_hole=False,
                       trailing_team=new_trailing)
    next_hole = state.current_hole + 1
    return StakeState(
        current_hole=next_hole,
        base=calculate_base(next_hole, state.doubles),
        carry=new_carry,
        doubles=state.doubles,
        double_used_this_hole=False,
        trailing_team=new_trailing,
    )
