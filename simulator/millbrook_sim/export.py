"""CSV export: scorecard, ledger and per-hole paper trail in one sheet."""

from __future__ import annotations

import csv
import io

from .engine import hole_summary
from .enums import HOLES, Team
from .payout import team_junk_totals
from .state import MatchState


def _money(amount: float) -> str:
    return f"{amount:.0f}" if float(amount).is_integer() else f"{amount:.2f}"


def _scorecard(writer, state: MatchState, names: list[str]) -> None:
    writer.writerow(["Scorecard"])
    writer.writerow(
        ["Hole", "Par", "SI"]
        + [f"{n} Gross" for n in names]
        + [f"{n} Net" for n in names]
        + [f"{n} Team" for n in names]
    )
    first_tee = state.player_holes[0] if state.player_holes else ()
    blanks = [""] * (3 * len(names))
    for i in range(HOLES):
        si = first_tee[i].stroke_index if i < len(first_tee) else ""
        par = state.hole_par[i] if i < len(state.hole_par) else ""
        row = [i + 1, par, si]
        if i < len(state.hole_scores):
            score = state.hole_scores[i]
            row += list(score.gross) + list(score.net) + [t.value for t in state.teams]
        else:
            row += blanks
        writer.writerow(row)


def _ledger(writer, state: MatchState, names: list[str]) -> None:
    writer.writerow(["Ledger"])
    header = (
        ["Hole", "Base", "Carry", "Doubles", "Payout"]
        + [f"{n} Gross" for n in names]
        + [f"{n} Net" for n in names]
        + [f"{n} Money" for n in names]
        + ["Red Junk", "Blue Junk"]
    )
    if state.big_game:
        header.append("Big Game")
    writer.writerow(header)

    big_game = {r.hole: r.subtotal for r in state.big_game_rows}
    for row, score in zip(state.ledger, state.hole_scores):
        line = [row.hole, _money(row.base), _money(row.carry_after), row.doubles, _money(row.payout)]
        line += list(score.gross) + list(score.net)
        line += [_money(t) for t in row.running_totals]
        line += [_money(row.red_junk), _money(row.blue_junk)]
        if state.big_game:
            line.append(big_game.get(row.hole, ""))
        writer.writerow(line)

    totals = ["Total", "", "", "", ""] + [""] * (2 * len(names))
    if state.ledger:
        junk = team_junk_totals(state.junk_events)
        totals += [_money(t) for t in state.running_totals]
        totals += [_money(junk[Team.RED]), _money(junk[Team.BLUE])]
    if state.big_game:
        totals.append(state.big_game_total)
    writer.writerow(totals)


def _paper_trail(writer, state: MatchState) -> None:
    writer.writerow(["Paper Trail"])
    writer.writerow(["Hole", "Step", "Detail"])
    for hole in range(1, state.holes_played + 1):
        s = hole_summary(state, hole)
        steps = [
            ("Base bet", f"${_money(s.base)}"),
            ("Carry In", f"${_money(s.carry_in)}"),
        ]
        if s.doubles:
            steps.append(("Doubles", f"Yes ({s.doubles})"))
        for e in s.junk:
            steps.append(("Junk", f"{e['player_name']}: {e['type']} (${_money(e['value'])})"))
        for line in s.ghost_reveals:
            steps.append(("Ghost", line))
        steps.append(("Winner", s.winner.value))
        steps.append(("Payout", f"${_money(s.payout)}"))
        before, after = s.team_totals_before, s.team_totals_after
        steps.append(("Team Totals Before",
                      f"Red ${_money(before[Team.RED])}, Blue ${_money(before[Team.BLUE])}"))
        steps.append(("Team Totals After",
                      f"Red ${_money(after[Team.RED])}, Blue ${_money(after[Team.BLUE])}"))
        for step, detail in steps:
            writer.writerow([hole, step, detail])
        writer.writerow(["", "", ""])


def export_csv(state: MatchState) -> str:
    """The whole match as CSV text, sections separated by a blank row."""
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    names = [p.full_name for p in state.players]
    _scorecard(writer, state, names)
    writer.writerow([])
    _ledger(writer, state, names)
    writer.writerow([])
    _paper_trail(writer, state)
    return out.getvalue()


def export_filename(state: MatchState) -> str:
    return f"millbrook-game-{state.date or state.id}.csv"
