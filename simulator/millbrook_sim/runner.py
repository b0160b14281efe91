"""Match runner — plays and hosts matches on top of the pure engine.

Provides:
- MatchSession: owns the single mutable MatchState reference for a live match
- run_match(): plays a full round with a pluggable score source
- ParScoreSource: every live player makes par
- SimulatedScoreSource: every live player is simulated like a ghost
- MatchResult: structured result with final money
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, Sequence

from .actions import Action, EnterHoleScores, CallDouble, FinishRound, CancelMatch
from .course import Course
from .engine import MatchEngine, HoleSummary, hole_summary, is_double_available
from .enums import Team, HOLES
from .ghost import GhostRound, generate_ghost_round
from .junk import JunkFlags
from .settlement import determine_winning_team
from .state import MatchState, MatchOptions, Player, LedgerRow


class ScoreSource(Protocol):
    """Supplies one hole of gross scores and junk flags, plus the doubling decision."""

    def hole_scores(self, state: MatchState, hole: int) -> tuple[list[Optional[int]], list[JunkFlags]]:
        ...

    def wants_double(self, state: MatchState) -> bool:
        ...


class ParScoreSource:
    """Every live player makes par with no junk. Ghost slots are left to the engine."""

    def __init__(self, double_when_trailing: bool = False):
        self.double_when_trailing = double_when_trailing

    def hole_scores(self, state: MatchState, hole: int) -> tuple[list[Optional[int]], list[JunkFlags]]:
        scores = [None if p.is_ghost else holes[hole - 1].par
                  for p, holes in zip(state.players, state.player_holes)]
        return scores, [JunkFlags.NONE] * len(state.players)

    def wants_double(self, state: MatchState) -> bool:
        return self.double_when_trailing


class SimulatedScoreSource:
    """Live players are played by the ghost model, each with their own seed."""

    def __init__(self, seed: int = 0, double_when_trailing: bool = False):
        self.seed = seed
        self.double_when_trailing = double_when_trailing
        self._rounds: dict[str, GhostRound] = {}

    def _round_for(self, state: MatchState, i: int) -> GhostRound:
        p = state.players[i]
        if p.id not in self._rounds:
            self._rounds[p.id] = generate_ghost_round(
                p.id, p.index, state.player_holes[i], seed=self.seed * 101 + i)
        return self._rounds[p.id]

    def hole_scores(self, state: MatchState, hole: int) -> tuple[list[Optional[int]], list[JunkFlags]]:
        scores: list[Optional[int]] = []
        flags: list[JunkFlags] = []
        for i, p in enumerate(state.players):
            if p.is_ghost:
                scores.append(None)
                flags.append(JunkFlags.NONE)
                continue
            r = self._round_for(state, i)
            scores.append(r.score_for(hole))
            flags.append(r.flags_for(hole))
        return scores, flags

    def wants_double(self, state: MatchState) -> bool:
        return self.double_when_trailing


@dataclass
class MatchResult:
    """Result of a completed match."""
    match_id: str
    final_totals: tuple[float, ...]
    holes_played: int
    doubles: int
    pushes: int
    junk_count: int
    big_game_total: int
    ledger: list[LedgerRow] = field(default_factory=list)
    state: Optional[MatchState] = field(default=None, repr=False)

    @property
    def winning_team(self) -> Optional[Team]:
        if self.state is None:
            return None
        return determine_winning_team(self.state)

    @property
    def is_zero_sum(self) -> bool:
        return abs(sum(self.final_totals)) < 1e-9


class MatchSession:
    """A live match. Applies one reducer call per operation.

    If an operation raises, the session keeps its previous state.
    """

    def __init__(self, state: Optional[MatchState] = None, engine: Optional[MatchEngine] = None):
        self.engine = engine or MatchEngine()
        self._state = state

    @property
    def state(self) -> MatchState:
        if self._state is None:
            raise RuntimeError("No match in progress; call create_match() first")
        return self._state

    def create_match(
        self,
        players: Sequence[Player | dict],
        teams: Sequence[Team | str],
        options: Optional[MatchOptions] = None,
        course: Optional[Course] = None,
        match_id: Optional[str] = None,
    ) -> MatchState:
        self._state = self.engine.new_match(players, teams, options, course, match_id=match_id)
        return self._state

    def apply(self, action: Action) -> MatchState:
        self._state = self.engine.step(self.state, action)
        return self._state

    def enter_hole_scores(
        self,
        hole: int,
        gross_scores: Sequence[Optional[int]],
        junk_flags: Optional[Sequence[Optional[JunkFlags | dict]]] = None,
    ) -> MatchState:
        return self.apply(EnterHoleScores(hole, tuple(gross_scores), tuple(junk_flags or ())))

    def call_double(self, team: Optional[Team] = None) -> bool:
        """True if the double was accepted."""
        before = self.state.doubles
        self.apply(CallDouble(team))
        return self.state.doubles > before

    def finish_round(self, ended_at: Optional[str] = None) -> MatchState:
        return self.apply(FinishRound(ended_at))

    def cancel_match(self, ended_at: Optional[str] = None) -> MatchState:
        return self.apply(CancelMatch(ended_at))

    def summary(self, hole: int) -> HoleSummary:
        return hole_summary(self.state, hole)

    @property
    def is_double_available(self) -> bool:
        return is_double_available(self.state)


def run_match(
    players: Sequence[Player | dict],
    teams: Sequence[Team | str],
    score_source: ScoreSource,
    options: Optional[MatchOptions] = None,
    course: Optional[Course] = None,
    on_hole: Optional[Callable[[MatchState, int], None]] = None,
) -> MatchResult:
    """Play all 18 holes and finish the round.

    Args:
        players: Four players (Player or dict).
        teams: Team per player, two Red and two Blue.
        score_source: Supplies scores, flags and doubling decisions.
        options: House rules; defaults to MatchOptions().
        course: Course to play; None plays the synthetic par-4 card.
        on_hole: Optional callback(state, hole) after each hole.

    Returns:
        MatchResult with final stats.
    """
    session = MatchSession()
    session.create_match(players, teams, options, course)

    for hole in range(1, HOLES + 1):
        if session.is_double_available and score_source.wants_double(session.state):
            session.call_double()
        scores, flags = score_source.hole_scores(session.state, hole)
        session.enter_hole_scores(hole, scores, flags)
        if on_hole:
            on_hole(session.state, hole)

    state = session.finish_round()
    return MatchResult(
        match_id=state.id,
        final_totals=state.running_totals,
        holes_played=state.holes_played,
        doubles=state.doubles,
        pushes=sum(1 for r in state.ledger if r.winner.team is None),
        junk_count=len(state.junk_events),
        big_game_total=state.big_game_total,
        ledger=list(state.ledger),
        state=state,
    )


def run_batch(
    players: Sequence[Player | dict],
    teams: Sequence[Team | str],
    seeds: list[int],
    options: Optional[MatchOptions] = None,
    course: Optional[Course] = None,
) -> list[MatchResult]:
    """Run simulated matches, one per seed. Ghost seeds follow the match seed."""
    base = options or MatchOptions()
    results = []
    for seed in seeds:
        opts = MatchOptions(**{**base.to_dict(), "ghost_seed": base.ghost_seed + seed * 10})
        results.append(run_match(players, teams, SimulatedScoreSource(seed), opts, course))
    return results
