"""Shared fixtures for the Millbrook engine tests."""

from __future__ import annotations

import pytest

from millbrook_sim.engine import MatchEngine
from millbrook_sim.enums import Team
from millbrook_sim.runner import MatchSession
from millbrook_sim.state import MatchOptions, Player

# Stroke indexes 1..18 in hole order, mixed like a real card
SI_TABLE = [7, 15, 5, 11, 1, 13, 3, 17, 9, 2, 14, 6, 18, 10, 4, 16, 8, 12]

TEAMS = [Team.RED, Team.BLUE, Team.RED, Team.BLUE]


def make_players(ghost_slot: int | None = None) -> list[Player]:
    players = [
        Player(id="p1", name="Alan", index=6.1, first="Alan", last="Reed"),
        Player(id="p2", name="Bill", index=8.4, first="Bill", last="Burke"),
        Player(id="p3", name="Carl", index=9.3, first="Carl", last="Rossi"),
        Player(id="p4", name="Dan", index=10.2, first="Dan", last="Boyle"),
    ]
    if ghost_slot is not None:
        p = players[ghost_slot]
        players[ghost_slot] = Player(id=p.id, name=f"Ghost ({p.name})", index=p.index,
                                     is_ghost=True, source_player_id=f"src-{p.id}")
    return players


@pytest.fixture
def players() -> list[Player]:
    return make_players()


@pytest.fixture
def teams() -> list[Team]:
    return list(TEAMS)


@pytest.fixture
def engine() -> MatchEngine:
    return MatchEngine()


@pytest.fixture
def state(engine, players, teams):
    """Fresh match on the synthetic card (par 4, SI = hole number)."""
    return engine.new_match(players, teams, match_id="m-test",
                            started_at="2026-06-01T09:00:00+00:00")


@pytest.fixture
def big_game_state(engine, players, teams):
    return engine.new_match(players, teams, MatchOptions(big_game=True), match_id="m-bg",
                            started_at="2026-06-01T09:00:00+00:00")


@pytest.fixture
def session(players, teams) -> MatchSession:
    s = MatchSession()
    s.create_match(players, teams, match_id="m-session")
    return s
