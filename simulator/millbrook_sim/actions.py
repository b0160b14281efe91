"""Action types for the match engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import Team
from .junk import JunkFlags


@dataclass(frozen=True)
class Action:
    """Base action type."""
    pass


@dataclass(frozen=True)
class EnterHoleScores(Action):
    """Gross scores and junk flags for every player on one hole.

    Ghost slots may hold None; their stored round is replayed instead.
    """
    hole: int
    gross_scores: tuple[Optional[int], ...]
    junk_flags: tuple[Optional[JunkFlags], ...] = ()

    def __post_init__(self):
        if not isinstance(self.gross_scores, tuple):
            object.__setattr__(self, 'gross_scores', tuple(self.gross_scores))
        if not isinstance(self.junk_flags, tuple):
            object.__setattr__(self, 'junk_flags', tuple(self.junk_flags))


@dataclass(frozen=True)
class CallDouble(Action):
    """Double the current hole's stake. Defaults to the trailing team."""
    team: Optional[Team] = None


@dataclass(frozen=True)
class FinishRound(Action):
    ended_at: Optional[str] = None


@dataclass(frozen=True)
class CancelMatch(Action):
    ended_at: Optional[str] = None
