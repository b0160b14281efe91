"""Tests for settlement views and history records."""

from __future__ import annotations

import pytest

from millbrook_sim.actions import EnterHoleScores, FinishRound
from millbrook_sim.course import Course, HoleInfo, TeeOption
from millbrook_sim.enums import HoleResult, JunkType, Team
from millbrook_sim.junk import JunkFlags
from millbrook_sim.settlement import (
    GameHistory,
    build_history,
    calculate_game_stats,
    calculate_hole_wins,
    determine_winning_team,
    format_currency,
    player_junk_total,
    team_junk_total,
    team_totals,
)

SHORT_FIRST = Course(
    id="short-first",
    name="Short First CC",
    tee_options=(TeeOption(
        id="white",
        holes=tuple(HoleInfo(n, 3 if n == 1 else 4, 400, n) for n in range(1, 19)),
    ),),
)


@pytest.fixture
def penalty_state(engine, players, teams):
    s = engine.new_match(players, teams, course=SHORT_FIRST, match_id="pen",
                         started_at="2026-06-01T09:00:00+00:00")
    # nets 4,4,4,4: the hole is pushed and only the penalty moves money
    flags = (JunkFlags(on_green_from_tee=True, three_putt=True), None, None, None)
    return engine.step(s, EnterHoleScores(1, (4, 5, 5, 5), flags))


def test_penalty_pays_the_players_team(penalty_state):
    event = penalty_state.junk_events[0]
    assert event.type is JunkType.PENALTY
    assert event.team is Team.RED
    assert penalty_state.ledger[0].winner is HoleResult.PUSH
    assert penalty_state.running_totals == (0.5, -0.5, 0.5, -0.5)
    assert team_totals(penalty_state) == {Team.RED: 1, Team.BLUE: -1}
    assert player_junk_total(penalty_state, "p1") == 1
    assert player_junk_total(penalty_state, "p2") == 0
    assert team_junk_total(penalty_state, Team.RED) == 1
    assert team_junk_total(penalty_state, Team.BLUE) == 0
    assert determine_winning_team(penalty_state) is Team.RED


def test_game_stats(penalty_state):
    stats = calculate_game_stats(penalty_state)
    assert stats.holes_played == 1
    assert stats.pushes == 1
    assert stats.max_carry == 1
    assert stats.junk_count == 1
    assert stats.junk_value == 1
    assert calculate_hole_wins(penalty_state) == {
        HoleResult.RED: 0, HoleResult.BLUE: 0, HoleResult.PUSH: 1,
    }


@pytest.mark.parametrize("amount,text", [
    (5, "+$5"),
    (-2.5, "-$2.50"),
    (0, "$0"),
    (0.0, "$0"),
    (12.0, "+$12"),
])
def test_format_currency(amount, text):
    assert format_currency(amount) == text


def test_history_record(engine, penalty_state):
    done = engine.step(penalty_state, FinishRound("2026-06-01T13:30:00+00:00"))
    history = build_history(done)
    assert history.status == "finished"
    assert history.duration_minutes == 270
    assert history.course_name == "Short First CC"
    assert history.date == "2026-06-01"
    assert history.holes_played == 1
    assert not history.is_complete
    assert history.team_totals == {"Red": 1, "Blue": -1}
    assert [p["team"] for p in history.players] == ["Red", "Blue", "Red", "Blue"]
    assert GameHistory.from_dict(history.to_dict()) == history


def test_history_without_course_or_end(state):
    history = build_history(state)
    assert history.course_name == "Unknown Course"
    assert history.duration_minutes is None
    assert history.status == "active"
