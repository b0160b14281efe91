"""Tests for the CSV export."""

from __future__ import annotations

import csv
import io

from millbrook_sim.actions import EnterHoleScores
from millbrook_sim.export import export_csv, export_filename


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


def _section(rows, title):
    start = rows.index([title]) + 1
    end = rows.index([], start) if [] in rows[start:] else len(rows)
    return rows[start:end]


def test_export_big_game_match(engine, big_game_state):
    s = engine.step(big_game_state, EnterHoleScores(1, (3, 5, 4, 5)))
    s = engine.step(s, EnterHoleScores(2, (4, 4, 4, 4)))
    rows = _rows(export_csv(s))

    scorecard = _section(rows, "Scorecard")
    assert scorecard[0][:4] == ["Hole", "Par", "SI", "Alan Reed Gross"]
    assert len(scorecard) == 1 + 18
    assert scorecard[1][:7] == ["1", "4", "1", "3", "5", "4", "5"]
    assert scorecard[1][-4:] == ["Red", "Blue", "Red", "Blue"]
    assert scorecard[3][3:] == [""] * 12

    ledger = _section(rows, "Ledger")
    header = ledger[0]
    assert header[:5] == ["Hole", "Base", "Carry", "Doubles", "Payout"]
    assert "Dan Boyle Money" in header
    assert header[-3:] == ["Red Junk", "Blue Junk", "Big Game"]
    assert ledger[1] == ["1", "1", "0", "0", "1", "3", "5", "4", "5", "3", "4", "3", "4",
                         "1", "-1", "1", "-1", "1", "0", "6"]
    assert ledger[2] == ["2", "2", "2", "0", "0", "4", "4", "4", "4", "4", "3", "3", "3",
                         "1", "-1", "1", "-1", "0", "0", "6"]
    assert ledger[3][0] == "Total"
    assert ledger[3][-7:] == ["1", "-1", "1", "-1", "1", "0", "12"]


def test_export_paper_trail(engine, state):
    s = engine.step(state, EnterHoleScores(1, (3, 5, 4, 5)))
    rows = _rows(export_csv(s))
    trail = rows[rows.index(["Paper Trail"]) + 2:]
    steps = [r[1] for r in trail if r and r[0] == "1"]
    assert steps == ["Base bet", "Carry In", "Junk", "Winner", "Payout",
                     "Team Totals Before", "Team Totals After"]
    details = {r[1]: r[2] for r in trail if r and r[0] == "1"}
    assert details["Junk"] == "Alan: Birdie ($1)"
    assert details["Winner"] == "Red"
    assert details["Team Totals After"] == "Red $2, Blue $-2"
    assert "Big Game" not in _section(rows, "Ledger")[0]


def test_export_filename(state):
    assert export_filename(state) == "millbrook-game-2026-06-01.csv"
