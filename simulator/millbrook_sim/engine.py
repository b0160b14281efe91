"""Match engine — state machine that drives a Millbrook match.

Accepts Actions, validates them, and returns a new MatchState.
Immutable: step() returns a new state, never modifies the input, so a
rejected hole leaves the caller's state exactly as it was.

Per hole: strokes -> nets -> winner -> payout -> junk -> Big Game -> stakes.
"""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from .actions import Action, EnterHoleScores, CallDouble, FinishRound, CancelMatch
from .big_game import BigGameRow, calculate_big_game_row
from .course import Course, default_holes, resolve_player_holes
from .enums import Team, HoleResult, Phase, HOLES, PLAYERS, TEAM_SIZE
from .errors import (
    InvalidRosterError, InvalidHoleError, InvalidScoresError,
    InvalidJunkFlagsError, MalformedCourseError, GhostDataMissingError,
    MatchFinishedError,
)
from .ghost import generate_ghost_round, ghost_reveal_summary
from .junk import JunkFlags, JunkEvent, evaluate_junk
from .payout import distribute, update_running_totals, team_sums, team_junk_totals
from .stakes import advance, call_double, is_double_available as _stake_double_available
from .state import MatchState, MatchOptions, Player, HoleScore, LedgerRow
from .strokes import allocate_strokes_multi_tee

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def determine_hole_result(team_net: tuple[int, int]) -> HoleResult:
    red, blue = team_net
    if red < blue:
        return HoleResult.RED
    if blue < red:
        return HoleResult.BLUE
    return HoleResult.PUSH


def stroke_matrix(state: MatchState, big_game: bool = False) -> list[list[int]]:
    """Strokes [player][hole-1] for the match, or for the Big Game override.

    A corrupt stroke-index table (e.g. from a hand-edited saved match) falls
    back to the synthetic card rather than aborting the hole.
    """
    indexes = [p.index for p in state.players]
    base_index = state.big_game_specific_index if big_game else None
    try:
        return allocate_strokes_multi_tee(indexes, state.stroke_index_tables(), base_index)
    except MalformedCourseError as e:
        logger.warning("match %s: %s; allocating against default stroke indexes", state.id, e)
        fallback = [h.stroke_index for h in default_holes()]
        return allocate_strokes_multi_tee(indexes, [fallback] * len(indexes), base_index)


def is_double_available(state: MatchState) -> bool:
    if state.is_terminal or state.is_complete:
        return False
    return _stake_double_available(state.stake)


def trailing_team(state: MatchState) -> Optional[Team]:
    return state.trailing_team


@dataclass(frozen=True)
class HoleSummary:
    """Paper trail for one settled hole."""
    hole: int
    par: int
    winner: HoleResult
    base: float
    carry_in: float
    carry_after: float
    doubles: int
    payout: float
    gross: tuple[int, ...]
    net: tuple[int, ...]
    team_net: tuple[int, int]
    previous_totals: tuple[float, ...]
    running_totals: tuple[float, ...]
    team_totals_before: dict[Team, float]
    team_totals_after: dict[Team, float]
    junk: tuple[dict, ...]
    junk_by_team: dict[Team, float]
    big_game: Optional[BigGameRow] = None
    ghost_reveals: tuple[str, ...] = ()

    @property
    def net_junk(self) -> float:
        return self.junk_by_team[Team.RED] - self.junk_by_team[Team.BLUE]

    def to_dict(self) -> dict:
        return {
            "hole": self.hole,
            "par": self.par,
            "winner": self.winner.value,
            "base": self.base,
            "carry_in": self.carry_in,
            "carry_after": self.carry_after,
            "doubles": self.doubles,
            "payout": self.payout,
            "gross": list(self.gross),
            "net": list(self.net),
            "team_net": list(self.team_net),
            "previous_totals": list(self.previous_totals),
            "running_totals": list(self.running_totals),
            "team_totals_before": {t.value: v for t, v in self.team_totals_before.items()},
            "team_totals_after": {t.value: v for t, v in self.team_totals_after.items()},
            "junk": list(self.junk),
            "junk_by_team": {t.value: v for t, v in self.junk_by_team.items()},
            "net_junk": self.net_junk,
            "big_game": self.big_game.to_dict() if self.big_game else None,
            "ghost_reveals": list(self.ghost_reveals),
        }


def hole_summary(state: MatchState, hole: int) -> HoleSummary:
    """Everything that happened on a settled hole, in display order."""
    if not isinstance(hole, int) or not 1 <= hole <= state.holes_played:
        raise InvalidHoleError(f"Hole {hole} has not been played", field="hole")
    i = hole - 1
    row = state.ledger[i]
    score = state.hole_scores[i]
    previous = state.ledger[i - 1].running_totals if i > 0 else tuple(0.0 for _ in state.players)
    events = [e for e in state.junk_events if e.hole == hole]
    names = {p.id: p.name or p.full_name for p in state.players}
    big_game = next((r for r in state.big_game_rows if r.hole == hole), None)
    reveals = tuple(
        ghost_reveal_summary(p.name, score.gross[k], state.player_holes[k][i].par)
        for k, p in enumerate(state.players) if p.is_ghost
    )
    return HoleSummary(
        hole=hole,
        par=state.hole_par[i],
        winner=row.winner,
        base=row.base,
        carry_in=row.carry_in,
        carry_after=row.carry_after,
        doubles=row.doubles,
        payout=row.payout,
        gross=score.gross,
        net=score.net,
        team_net=score.team_net,
        previous_totals=previous,
        running_totals=row.running_totals,
        team_totals_before=team_sums(previous, state.teams),
        team_totals_after=team_sums(row.running_totals, state.teams),
        junk=tuple({**e.to_dict(), "player_name": names.get(e.player_id, "Unknown")} for e in events),
        junk_by_team=team_junk_totals(events),
        big_game=big_game,
        ghost_reveals=reveals,
    )


class MatchEngine:
    """Drives the Millbrook match state machine."""

    # --- Match Creation ---

    def new_match(
        self,
        players: Sequence[Player | dict],
        teams: Sequence[Team | str],
        options: Optional[MatchOptions] = None,
        course: Optional[Course] = None,
        match_id: Optional[str] = None,
        started_at: Optional[str] = None,
    ) -> MatchState:
        """Create a match: validate the roster, resolve tees, roll the ghosts."""
        options = options or MatchOptions()
        roster = self._coerce_players(players)
        team_list = self._validate_roster(roster, teams)

        player_holes = resolve_player_holes(course, options.player_tee_ids, len(roster))

        ghost_rounds = {}
        for i, p in enumerate(roster):
            if p.is_ghost:
                seed = options.ghost_seed + i
                ghost_rounds[p.id] = generate_ghost_round(p.id, p.index, player_holes[i], seed)
                logger.debug("ghost %s (index %.1f) seed %d: %s",
                             p.id, p.index, seed, list(ghost_rounds[p.id].scores))

        started = started_at or _now_iso()
        state = MatchState(
            id=match_id or uuid.uuid4().hex,
            date=started[:10],
            course_id=course.id if course else options.course_id,
            course_name=course.name if course else "",
            phase=Phase.ACTIVE,
            players=roster,
            teams=team_list,
            player_tee_ids=list(options.player_tee_ids),
            player_holes=player_holes,
            hole_par=[h.par for h in player_holes[0]],
            win_bonus=options.win_bonus,
            big_game=options.big_game,
            big_game_specific_index=options.big_game_specific_index,
            ghost_seed=options.ghost_seed,
            ghost_rounds=ghost_rounds,
            started_at=started,
        )
        logger.info("match %s created: %s, big_game=%s, ghosts=%d",
                    state.id, [f"{p.id}({t.value})" for p, t in zip(roster, team_list)],
                    state.big_game, len(ghost_rounds))
        return state

    # --- Core Interface ---

    def step(self, state: MatchState, action: Action) -> MatchState:
        """Execute an action and return the new state. Does not modify input."""
        s = state.copy()

        if isinstance(action, EnterHoleScores):
            if s.is_terminal:
                raise MatchFinishedError(f"Match is {s.phase.value}", field="phase")
            return self._step_enter_scores(s, action)
        elif isinstance(action, CallDouble):
            return self._step_double(s, action)
        elif isinstance(action, FinishRound):
            return self._step_close(s, Phase.FINISHED, action.ended_at)
        elif isinstance(action, CancelMatch):
            return self._step_close(s, Phase.CANCELLED, action.ended_at)
        else:
            raise ValueError(f"Invalid action: {type(action)}")

    def is_terminal(self, state: MatchState) -> bool:
        return state.is_terminal

    # --- Roster ---

    def _coerce_players(self, players: Sequence[Player | dict]) -> list[Player]:
        roster = []
        for i, p in enumerate(players):
            if isinstance(p, Player):
                roster.append(p)
                continue
            try:
                roster.append(Player.from_dict(p))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise InvalidRosterError(f"Player {i} is malformed: {e}",
                                         field=f"players[{i}]") from e
        return roster

    def _validate_roster(self, players: list[Player], teams: Sequence[Team | str]) -> list[Team]:
        if len(players) != PLAYERS:
            raise InvalidRosterError(f"A match needs exactly {PLAYERS} players, got {len(players)}",
                                     field="players")
        if len(teams) != len(players):
            raise InvalidRosterError(f"Expected {len(players)} team assignments, got {len(teams)}",
                                     field="teams")

        team_list = []
        for i, t in enumerate(teams):
            try:
                team_list.append(t if isinstance(t, Team) else Team(t))
            except ValueError as e:
                raise InvalidRosterError(f"Unknown team {t!r}", field=f"teams[{i}]") from e
        for team in Team:
            count = team_list.count(team)
            if count != TEAM_SIZE:
                raise InvalidRosterError(
                    f"Team {team.value} needs exactly {TEAM_SIZE} players, got {count}",
                    field="teams",
                )

        seen = set()
        for i, p in enumerate(players):
            if not p.id:
                raise InvalidRosterError("Player id is required", field=f"players[{i}].id")
            if p.id in seen:
                raise InvalidRosterError(f"Duplicate player id {p.id!r}", field=f"players[{i}].id")
            seen.add(p.id)
            if isinstance(p.index, bool) or not isinstance(p.index, (int, float)) \
                    or not math.isfinite(p.index):
                raise InvalidRosterError(f"Handicap index must be a number, got {p.index!r}",
                                         field=f"players[{i}].index")
        return team_list

    # --- Scoring ---

    def _validate_hole(self, s: MatchState, hole) -> None:
        if isinstance(hole, bool) or not isinstance(hole, int) or not 1 <= hole <= HOLES:
            raise InvalidHoleError(f"Hole must be 1..{HOLES}, got {hole!r}", field="hole")
        if s.is_complete:
            raise InvalidHoleError(f"All {HOLES} holes have been scored", field="hole")
        if hole != s.current_hole:
            raise InvalidHoleError(f"Expected scores for hole {s.current_hole}, got {hole}",
                                   field="hole")

    def _resolve_gross(self, s: MatchState, hole: int,
                       scores: tuple[Optional[int], ...]) -> tuple[int, ...]:
        if len(scores) != len(s.players):
            raise InvalidScoresError(f"Expected {len(s.players)} gross scores, got {len(scores)}",
                                     field="gross_scores")
        gross = []
        for i, (p, value) in enumerate(zip(s.players, scores)):
            if p.is_ghost:
                ghost = s.ghost_rounds.get(p.id)
                if ghost is None:
                    raise GhostDataMissingError(f"No generated round for ghost {p.id!r}",
                                                field=f"gross_scores[{i}]")
                stored = ghost.score_for(hole)
                if value is not None and value != stored:
                    logger.warning("hole %d: ignoring entered score %r for ghost %s, using %d",
                                   hole, value, p.id, stored)
                gross.append(stored)
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidScoresError(f"Gross score for {p.id} must be a whole number >= 1, "
                                         f"got {value!r}", field=f"gross_scores[{i}]")
            gross.append(value)
        return tuple(gross)

    def _resolve_flags(self, s: MatchState, hole: int,
                       flags: tuple[Optional[JunkFlags | dict], ...]) -> list[JunkFlags]:
        if not flags:
            flags = (None,) * len(s.players)
        if len(flags) != len(s.players):
            raise InvalidJunkFlagsError(f"Expected {len(s.players)} junk flag sets, got {len(flags)}",
                                        field="junk_flags")
        resolved = []
        for i, (p, f) in enumerate(zip(s.players, flags)):
            if p.is_ghost:
                resolved.append(s.ghost_rounds[p.id].flags_for(hole))
            elif f is None:
                resolved.append(JunkFlags.NONE)
            elif isinstance(f, JunkFlags):
                resolved.append(f)
            elif isinstance(f, dict):
                resolved.append(JunkFlags.from_dict(f))
            else:
                raise InvalidJunkFlagsError(f"Junk flags for {p.id} must be a mapping, got {f!r}",
                                            field=f"junk_flags[{i}]")
        return resolved

    def _step_enter_scores(self, s: MatchState, action: EnterHoleScores) -> MatchState:
        hole = action.hole
        self._validate_hole(s, hole)
        gross = self._resolve_gross(s, hole, action.gross_scores)
        flags = self._resolve_flags(s, hole, action.junk_flags)
        idx = hole - 1

        # 1. Strokes and nets
        strokes = [row[idx] for row in stroke_matrix(s)]
        net = tuple(g - k for g, k in zip(gross, strokes))
        team_net = (
            min(n for n, t in zip(net, s.teams) if t == Team.RED),
            min(n for n, t in zip(net, s.teams) if t == Team.BLUE),
        )
        result = determine_hole_result(team_net)

        # 2. Junk, valued at this hole's (possibly doubled) base
        junk: list[JunkEvent] = []
        for i, p in enumerate(s.players):
            par = s.player_holes[i][idx].par
            junk.extend(evaluate_junk(hole, p.id, s.teams[i], gross[i], par, flags[i], s.base))

        # 3. Money
        dist = distribute(result, s.base, s.carry, junk, s.teams, s.win_bonus)
        totals = update_running_totals(s.running_totals, dist.deltas)

        s.hole_scores.append(HoleScore(hole=hole, gross=gross, net=net, team_net=team_net))
        s.ledger.append(LedgerRow(
            hole=hole,
            winner=result,
            base=s.base,
            carry_in=s.carry,
            carry_after=dist.new_carry,
            doubles=s.doubles,
            payout=dist.payout,
            red_junk=dist.red_junk,
            blue_junk=dist.blue_junk,
            deltas=dist.deltas,
            running_totals=totals,
        ))
        s.junk_events.extend(junk)

        # 4. Big Game
        if s.big_game:
            self._score_big_game(s, hole, gross)

        # 5. Stakes for the next hole
        stake = advance(s.stake, result, dist.new_carry, new_trailing=s.trailing_team)
        logger.debug("match %s hole %d: nets=%s team_net=%s %s payout=%s carry=%s totals=%s",
                     s.id, hole, net, team_net, result.value, dist.payout,
                     dist.new_carry, totals)
        return s.with_stake(stake)

    def _score_big_game(self, s: MatchState, hole: int, gross: tuple[int, ...]) -> None:
        idx = hole - 1
        matrix = stroke_matrix(s, big_game=True)
        eligible = [i for i, p in enumerate(s.players) if not p.is_ghost]
        nets = [gross[i] - matrix[i][idx] for i in eligible]
        row = calculate_big_game_row(hole, nets, [s.players[i].id for i in eligible])
        if row is None:
            return
        s.big_game_rows.append(row)
        s.big_game_total += row.subtotal
        s.big_game_par += s.hole_par[idx]

    # --- Stakes ---

    def _step_double(self, s: MatchState, action: CallDouble) -> MatchState:
        if s.is_terminal or s.is_complete:
            logger.debug("match %s: double ignored, match is %s", s.id,
                         s.phase.value if s.is_terminal else "complete")
            return s
        team = action.team
        if team is not None and not isinstance(team, Team):
            try:
                team = Team(team)
            except ValueError:
                logger.debug("match %s: double ignored, unknown team %r", s.id, team)
                return s
        before = s.stake
        stake = call_double(before, team)
        if stake is not before:
            logger.info("match %s hole %d: %s doubled, base now %s",
                        s.id, s.current_hole, (team or s.trailing_team).value, stake.base)
        return s.with_stake(stake)

    # --- Lifecycle ---

    def _step_close(self, s: MatchState, phase: Phase, ended_at: Optional[str]) -> MatchState:
        if s.is_terminal:
            raise MatchFinishedError(f"Match is already {s.phase.value}", field="phase")
        s.phase = phase
        s.ended_at = ended_at or _now_iso()
        logger.info("match %s %s after %d holes, totals=%s",
                    s.id, phase.value, s.holes_played, s.running_totals)
        return s

