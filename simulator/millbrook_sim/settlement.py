"""Settlement views over a match: team money, junk, stats and history records."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .enums import Team, HoleResult
from .payout import team_sums
from .state import MatchState


def team_totals(state: MatchState) -> dict[Team, float]:
    return team_sums(state.running_totals, state.teams)


def player_junk_total(state: MatchState, player_id: str) -> float:
    """Junk a player earned for their team."""
    return sum(e.value for e in state.junk_events if e.player_id == player_id)


def team_junk_total(state: MatchState, team: Team) -> float:
    return sum(e.value for e in state.junk_events if e.team == team)


@dataclass
class GameStats:
    holes_played: int
    doubles_called: int
    pushes: int
    max_carry: float
    junk_count: int
    junk_value: float
    big_game_total: int
    big_game_to_par: int


def calculate_game_stats(state: MatchState) -> GameStats:
    return GameStats(
        holes_played=state.holes_played,
        doubles_called=state.doubles,
        pushes=sum(1 for r in state.ledger if r.winner is HoleResult.PUSH),
        max_carry=max((r.carry_after for r in state.ledger), default=0),
        junk_count=len(state.junk_events),
        junk_value=sum(e.value for e in state.junk_events),
        big_game_total=state.big_game_total,
        big_game_to_par=state.big_game_to_par,
    )


def calculate_hole_wins(state: MatchState) -> dict[HoleResult, int]:
    counts = Counter(r.winner for r in state.ledger)
    return {result: counts.get(result, 0) for result in HoleResult}


def determine_winning_team(state: MatchState) -> Optional[Team]:
    totals = team_totals(state)
    if totals[Team.RED] > totals[Team.BLUE]:
        return Team.RED
    if totals[Team.BLUE] > totals[Team.RED]:
        return Team.BLUE
    return None


def format_currency(amount: float) -> str:
    """+$5, -$2.50, $0"""
    if not amount:
        return "$0"
    sign = "+" if amount > 0 else "-"
    value = abs(amount)
    text = f"{value:.0f}" if float(value).is_integer() else f"{value:.2f}"
    return f"{sign}${text}"


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

@dataclass
class GameHistory:
    """Record kept for a finished or cancelled match."""
    id: str
    date: str
    course_name: str
    players: list[dict] = field(default_factory=list)
    team_totals: dict[str, float] = field(default_factory=dict)
    big_game_total: int = 0
    started_at: Optional[str] = None
    ended_at: Optional[str] = None
    duration_minutes: Optional[int] = None
    holes_played: int = 0
    is_complete: bool = False
    big_game_enabled: bool = False
    status: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "course_name": self.course_name,
            "players": list(self.players),
            "team_totals": dict(self.team_totals),
            "big_game_total": self.big_game_total,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "duration_minutes": self.duration_minutes,
            "holes_played": self.holes_played,
            "is_complete": self.is_complete,
            "big_game_enabled": self.big_game_enabled,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "GameHistory":
        return cls(**{k: d[k] for k in cls.__dataclass_fields__ if k in d})


def _duration_minutes(started_at: Optional[str], ended_at: Optional[str]) -> Optional[int]:
    if not started_at or not ended_at:
        return None
    delta = datetime.fromisoformat(ended_at) - datetime.fromisoformat(started_at)
    return max(0, round(delta.total_seconds() / 60))


def build_history(state: MatchState) -> GameHistory:
    totals = state.running_totals
    return GameHistory(
        id=state.id,
        date=state.date,
        course_name=state.course_name or "Unknown Course",
        players=[
            {
                "id": p.id,
                "name": p.name or p.full_name,
                "index": p.index,
                "team": t.value,
                "is_ghost": p.is_ghost,
                "total": totals[i],
            }
            for i, (p, t) in enumerate(zip(state.players, state.teams))
        ],
        team_totals={t.value: v for t, v in team_totals(state).items()},
        big_game_total=state.big_game_total,
        started_at=state.started_at,
        ended_at=state.ended_at,
        duration_minutes=_duration_minutes(state.started_at, state.ended_at),
        holes_played=state.holes_played,
        is_complete=state.is_complete,
        big_game_enabled=state.big_game,
        status=state.phase.value,
    )
