"""Enumerations and constants for the Millbrook Game engine."""

from __future__ import annotations
from enum import Enum


class Team(str, Enum):
    RED = "Red"
    BLUE = "Blue"

    @property
    def opponent(self) -> "Team":
        return Team.BLUE if self is Team.RED else Team.RED


class HoleResult(str, Enum):
    """Outcome of a hole: a team wins or the hole is pushed."""
    RED = "Red"
    BLUE = "Blue"
    PUSH = "Push"

    @property
    def team(self) -> Team | None:
        if self is HoleResult.PUSH:
            return None
        return Team(self.value)

    @classmethod
    def for_team(cls, team: Team) -> "HoleResult":
        return cls(team.value)


class JunkType(str, Enum):
    BIRDIE = "Birdie"
    SANDIE = "Sandie"
    GREENIE = "Greenie"
    PENALTY = "Penalty"
    LD10 = "LD10"


class Phase(str, Enum):
    ACTIVE = "active"
    FINISHED = "finished"
    CANCELLED = "cancelled"


# Round shape
HOLES = 18
PLAYERS = 4
TEAM_SIZE = 2

# Stakes
OPENING_BASE = 1        # Hole 1
SECOND_HOLE_BASE = 2    # Hole 2 (scripted opening escalation)

# Junk
LD10_HOLE = 17
LD10_VALUE = 10         # Fixed dollars, independent of base

# Course fallbacks
DEFAULT_PAR = 4
DEFAULT_YARDAGE = 400
DEFAULT_STROKE_INDEX: tuple[int, ...] = tuple(range(1, HOLES + 1))

# Handicap index bounds accepted from the roster collaborator
MIN_INDEX = -10.0      # plus handicaps
MAX_INDEX = 54.0

# Score labels relative to par (for ghost reveal lines)
SCORE_LABELS: dict[int, str] = {
    -2: "Eagle!",
    -1: "Birdie",
    0: "Par",
    1: "Bogey",
    2: "Double",
}
