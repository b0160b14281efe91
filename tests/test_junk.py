"""Tests for junk detection."""

from __future__ import annotations

import pytest

from millbrook_sim.enums import JunkType, Team
from millbrook_sim.errors import InvalidJunkFlagsError
from millbrook_sim.junk import JunkEvent, JunkFlags, evaluate_junk
from millbrook_sim.payout import junk_deltas


def _types(events):
    return [e.type for e in events]


def test_no_junk_for_plain_par():
    assert evaluate_junk(1, "p1", Team.RED, 4, 4, JunkFlags.NONE, 1) == []


def test_birdie_scales_with_base():
    events = evaluate_junk(5, "p1", Team.RED, 3, 4, JunkFlags.NONE, 4)
    assert events == [JunkEvent(5, "p1", Team.RED, JunkType.BIRDIE, 4)]


def test_sandie_needs_par_or_better():
    bunker = JunkFlags(had_bunker_shot=True)
    assert _types(evaluate_junk(3, "p2", Team.BLUE, 4, 4, bunker, 2)) == [JunkType.SANDIE]
    assert evaluate_junk(3, "p2", Team.BLUE, 5, 4, bunker, 2) == []


def test_birdie_and_sandie_stack():
    bunker = JunkFlags(had_bunker_shot=True)
    events = evaluate_junk(3, "p2", Team.BLUE, 3, 4, bunker, 2)
    assert _types(events) == [JunkType.BIRDIE, JunkType.SANDIE]
    assert sum(e.value for e in events) == 4


def test_greenie_only_on_par_three():
    on_green = JunkFlags(on_green_from_tee=True)
    assert _types(evaluate_junk(2, "p1", Team.RED, 3, 3, on_green, 2)) == [JunkType.GREENIE]
    assert evaluate_junk(2, "p1", Team.RED, 4, 4, on_green, 2) == []


def test_penalty_credited_to_own_team():
    flags = JunkFlags(on_green_from_tee=True, three_putt=True)
    events = evaluate_junk(2, "p1", Team.RED, 4, 3, flags, 2)
    assert len(events) == 1
    penalty = events[0]
    assert penalty.type is JunkType.PENALTY
    assert penalty.player_id == "p1"
    assert penalty.team is Team.RED
    assert penalty.value == 2


def test_three_putt_without_green_is_not_a_penalty():
    flags = JunkFlags(three_putt=True)
    assert evaluate_junk(2, "p1", Team.RED, 4, 3, flags, 2) == []


def test_ld10_is_fixed_and_hole_17_only():
    drive = JunkFlags(long_drive=True)
    events = evaluate_junk(17, "p3", Team.RED, 5, 4, drive, 8)
    assert events == [JunkEvent(17, "p3", Team.RED, JunkType.LD10, 10)]
    assert evaluate_junk(16, "p3", Team.RED, 5, 4, drive, 8) == []


def test_flags_must_be_bools():
    with pytest.raises(InvalidJunkFlagsError) as exc:
        JunkFlags(had_bunker_shot=1)
    assert exc.value.field == "had_bunker_shot"


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(InvalidJunkFlagsError):
        JunkFlags.from_dict({"chip_in": True})


def test_from_dict_defaults():
    assert JunkFlags.from_dict(None) == JunkFlags.NONE
    assert JunkFlags.from_dict({"long_drive": True}).has_any
    assert not JunkFlags.NONE.has_any


def test_penalty_moves_money_toward_the_players_team():
    flags = JunkFlags(on_green_from_tee=True, three_putt=True)
    events = evaluate_junk(3, "p1", Team.RED, 5, 3, flags, 2)
    assert [(e.type, e.team) for e in events] == [(JunkType.PENALTY, Team.RED)]
    assert junk_deltas(events, [Team.RED, Team.BLUE, Team.RED, Team.BLUE]) == [1.0, -1.0, 1.0, -1.0]
