"""Match state — the complete, serializable state of one Millbrook match.

Everything needed to resume a match at any hole boundary lives here. The
engine treats it as a value: `step()` copies, never mutates.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from .big_game import BigGameRow, big_game_to_par
from .course import HoleInfo
from .enums import Team, HoleResult, Phase, HOLES, PLAYERS, OPENING_BASE
from .ghost import GhostRound, DEFAULT_SEED
from .junk import JunkEvent
from .stakes import StakeState, trailing_team


@dataclass(frozen=True)
class Player:
    id: str
    name: str = ""
    index: float = 0.0
    is_ghost: bool = False
    source_player_id: Optional[str] = None  # real player a ghost stands in for
    first: str = ""
    last: str = ""

    @property
    def full_name(self) -> str:
        if self.first or self.last:
            return f"{self.first} {self.last}".strip()
        return self.name or self.id

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "index": self.index,
            "is_ghost": self.is_ghost,
            "source_player_id": self.source_player_id,
            "first": self.first,
            "last": self.last,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Player":
        return cls(
            id=str(d["id"]),
            name=d.get("name", ""),
            index=float(d.get("index", 0.0)),
            is_ghost=bool(d.get("is_ghost", False)),
            source_player_id=d.get("source_player_id"),
            first=d.get("first", ""),
            last=d.get("last", ""),
        )


@dataclass(frozen=True)
class HoleScore:
    hole: int
    gross: tuple[int, ...]
    net: tuple[int, ...]
    team_net: tuple[int, int]   # (red, blue), lower net per team

    def to_dict(self) -> dict:
        return {
            "hole": self.hole,
            "gross": list(self.gross),
            "net": list(self.net),
            "team_net": list(self.team_net),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "HoleScore":
        return cls(
            hole=d["hole"],
            gross=tuple(d["gross"]),
            net=tuple(d["net"]),
            team_net=tuple(d["team_net"]),
        )


@dataclass(frozen=True)
class LedgerRow:
    """One settled hole. `running_totals` always sums to zero."""
    hole: int
    winner: HoleResult
    base: float
    carry_in: float
    carry_after: float
    doubles: int
    payout: float
    red_junk: float
    blue_junk: float
    deltas: tuple[float, ...]
    running_totals: tuple[float, ...]

    def to_dict(self) -> dict:
        return {
            "hole": self.hole,
            "winner": self.winner.value,
            "base": self.base,
            "carry_in": self.carry_in,
            "carry_after": self.carry_after,
            "doubles": self.doubles,
            "payout": self.payout,
            "red_junk": self.red_junk,
            "blue_junk": self.blue_junk,
            "deltas": list(self.deltas),
            "running_totals": list(self.running_totals),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "LedgerRow":
        return cls(
            hole=d["hole"],
            winner=HoleResult(d["winner"]),
            base=d["base"],
            carry_in=d["carry_in"],
            carry_after=d["carry_after"],
            doubles=d["doubles"],
            payout=d["payout"],
            red_junk=d["red_junk"],
            blue_junk=d["blue_junk"],
            deltas=tuple(d["deltas"]),
            running_totals=tuple(d["running_totals"]),
        )


@dataclass
class MatchOptions:
    """House rules and course selection for one match."""
    big_game: bool = False
    course_id: Optional[str] = None
    player_tee_ids: list[str] = field(default_factory=list)
    big_game_specific_index: Optional[float] = None
    ghost_seed: int = DEFAULT_SEED
    win_bonus: bool = False   # winners also collect the base again

    def to_dict(self) -> dict:
        return {
            "big_game": self.big_game,
            "course_id": self.course_id,
            "player_tee_ids": list(self.player_tee_ids),
            "big_game_specific_index": self.big_game_specific_index,
            "ghost_seed": self.ghost_seed,
            "win_bonus": self.win_bonus,
        }

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "MatchOptions":
        d = d or {}
        return cls(
            big_game=bool(d.get("big_game", False)),
            course_id=d.get("course_id"),
            player_tee_ids=list(d.get("player_tee_ids") or []),
            big_game_specific_index=d.get("big_game_specific_index"),
            ghost_seed=int(d.get("ghost_seed", DEFAULT_SEED)),
            win_bonus=bool(d.get("win_bonus", False)),
        )


@dataclass
class MatchState:
    """Complete match state. All fields needed to resume from any hole."""

    # Identity
    id: str = ""
    date: str = ""               # ISO date the match was created
    course_id: Optional[str] = None
    course_name: str = ""
    phase: Phase = Phase.ACTIVE

    # Roster
    players: list[Player] = field(default_factory=list)
    teams: list[Team] = field(default_factory=list)
    player_tee_ids: list[str] = field(default_factory=list)
    player_holes: list[tuple[HoleInfo, ...]] = field(default_factory=list)
    hole_par: list[int] = field(default_factory=list)

    # Stakes
    current_hole: int = 1
    base: float = OPENING_BASE
    carry: float = 0
    doubles: int = 0
    double_used_this_hole: bool = False
    win_bonus: bool = False

    # Big Game
    big_game: bool = False
    big_game_specific_index: Optional[float] = None
    big_game_total: int = 0
    big_game_par: int = 0        # sum of pars on holes that produced a row

    # History
    hole_scores: list[HoleScore] = field(default_factory=list)
    ledger: list[LedgerRow] = field(default_factory=list)
    junk_events: list[JunkEvent] = field(default_factory=list)
    big_game_rows: list[BigGameRow] = field(default_factory=list)

    # Ghosts, keyed by player id
    ghost_seed: int = DEFAULT_SEED
    ghost_rounds: dict[str, GhostRound] = field(default_factory=dict)

    # Timing (ISO timestamps)
    started_at: Optional[str] = None
    ended_at: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.phase in (Phase.FINISHED, Phase.CANCELLED)

    @property
    def holes_played(self) -> int:
        return len(self.ledger)

    @property
    def is_complete(self) -> bool:
        return self.holes_played >= HOLES

    @property
    def running_totals(self) -> tuple[float, ...]:
        if self.ledger:
            return self.ledger[-1].running_totals
        return tuple(0.0 for _ in range(len(self.players) or PLAYERS))

    @property
    def big_game_to_par(self) -> int:
        return big_game_to_par(self.big_game_total, [self.big_game_par]) if self.big_game_rows else 0

    @property
    def trailing_team(self) -> Optional[Team]:
        return trailing_team(self.running_totals, self.teams)

    @property
    def stake(self) -> StakeState:
        return StakeState(
            current_hole=self.current_hole,
            base=self.base,
            carry=self.carry,
            doubles=self.doubles,
            double_used_this_hole=self.double_used_this_hole,
            trailing_team=self.trailing_team,
        )

    def with_stake(self, stake: StakeState) -> "MatchState":
        return replace(
            self,
            current_hole=stake.current_hole,
            base=stake.base,
            carry=stake.carry,
            doubles=stake.doubles,
            double_used_this_hole=stake.double_used_this_hole,
        )

    def stroke_index_tables(self) -> list[list[int]]:
        return [[h.stroke_index for h in holes] for holes in self.player_holes]

    def copy(self) -> "MatchState":
        """Copy for the reducer. History entries are frozen, so list copies suffice."""
        return replace(
            self,
            players=list(self.players),
            teams=list(self.teams),
            player_tee_ids=list(self.player_tee_ids),
            player_holes=list(self.player_holes),
            hole_par=list(self.hole_par),
            hole_scores=list(self.hole_scores),
            ledger=list(self.ledger),
            junk_events=list(self.junk_events),
            big_game_rows=list(self.big_game_rows),
            ghost_rounds=dict(self.ghost_rounds),
        )

    # --- Serialization ---

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "course_id": self.course_id,
            "course_name": self.course_name,
            "phase": self.phase.value,
            "players": [p.to_dict() for p in self.players],
            "teams": [t.value for t in self.teams],
            "player_tee_ids": list(self.player_tee_ids),
            "player_holes": [[h.to_dict() for h in holes] for holes in self.player_holes],
            "hole_par": list(self.hole_par),
            "current_hole": self.current_hole,
            "base": self.base,
            "carry": self.carry,
            "doubles": self.doubles,
            "double_used_this_hole": self.double_used_this_hole,
            "win_bonus": self.win_bonus,
            "big_game": self.big_game,
            "big_game_specific_index": self.big_game_specific_index,
            "big_game_total": self.big_game_total,
            "big_game_par": self.big_game_par,
            "hole_scores": [s.to_dict() for s in self.hole_scores],
            "ledger": [r.to_dict() for r in self.ledger],
            "junk_events": [e.to_dict() for e in self.junk_events],
            "big_game_rows": [r.to_dict() for r in self.big_game_rows],
            "ghost_seed": self.ghost_seed,
            "ghost_rounds": {pid: g.to_dict() for pid, g in self.ghost_rounds.items()},
            "started_at": self.started_at,
            "ended_at": self.ended_at,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "MatchState":
        return cls(
            id=d["id"],
            date=d.get("date", ""),
            course_id=d.get("course_id"),
            course_name=d.get("course_name", ""),
            phase=Phase(d.get("phase", Phase.ACTIVE.value)),
            players=[Player.from_dict(p) for p in d["players"]],
            teams=[Team(t) for t in d["teams"]],
            player_tee_ids=list(d.get("player_tee_ids") or []),
            player_holes=[
                tuple(HoleInfo.from_dict(h) for h in holes)
                for holes in d.get("player_holes", [])
            ],
            hole_par=list(d.get("hole_par", [])),
            current_hole=d.get("current_hole", 1),
            base=d.get("base", OPENING_BASE),
            carry=d.get("carry", 0),
            doubles=d.get("doubles", 0),
            double_used_this_hole=d.get("double_used_this_hole", False),
            win_bonus=d.get("win_bonus", False),
            big_game=d.get("big_game", False),
            big_game_specific_index=d.get("big_game_specific_index"),
            big_game_total=d.get("big_game_total", 0),
            big_game_par=d.get("big_game_par", 0),
            hole_scores=[HoleScore.from_dict(s) for s in d.get("hole_scores", [])],
            ledger=[LedgerRow.from_dict(r) for r in d.get("ledger", [])],
            junk_events=[JunkEvent.from_dict(e) for e in d.get("junk_events", [])],
            big_game_rows=[BigGameRow.from_dict(r) for r in d.get("big_game_rows", [])],
            ghost_seed=d.get("ghost_seed", DEFAULT_SEED),
            ghost_rounds={
                pid: GhostRound.from_dict(g) for pid, g in d.get("ghost_rounds", {}).items()
            },
            started_at=d.get("started_at"),
            ended_at=d.get("ended_at"),
        )
