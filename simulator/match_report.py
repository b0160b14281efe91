#!/usr/bin/env python3
"""Match report: print a stored or simulated match, optionally export CSV.

Usage:
    match_report.py <match_id>              # load from the database
    match_report.py --file match.json       # load a saved state dict
    match_report.py --simulate 7 --save     # play a simulated match, store it
    match_report.py --history               # recent finished matches
"""

from __future__ import annotations

import sys
import os
import json

# Ensure project root is on path
_PROJECT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, _PROJECT)
sys.path.insert(0, os.path.dirname(_PROJECT))

from millbrook_sim.course import MILLBROOK_COURSE
from millbrook_sim.enums import Team
from millbrook_sim.export import export_csv, export_filename
from millbrook_sim.runner import run_match, SimulatedScoreSource
from millbrook_sim.settlement import (
    calculate_game_stats, calculate_hole_wins, determine_winning_team,
    format_currency, team_totals,
)
from millbrook_sim.state import MatchState, MatchOptions, Player

from clubhouse import match_db

DEMO_PLAYERS = [
    Player(id="p1", name="Alan", index=6.1),
    Player(id="p2", name="Bill", index=8.4),
    Player(id="p3", name="Carl", index=9.3),
    Player(id="p4", name="Ghost (Dan)", index=10.2, is_ghost=True, source_player_id="dan"),
]
DEMO_TEAMS = [Team.RED, Team.BLUE, Team.RED, Team.BLUE]


def print_match(state: MatchState):
    print("\n" + "=" * 72)
    print(f"MATCH {state.id}  {state.date}  {state.course_name}  [{state.phase.value}]")
    print("=" * 72)

    names = [p.name or p.full_name for p in state.players]
    print(f"{'Hole':<6}{'Base':>6}{'Carry':>7}{'Win':>6}{'Pay':>6}" + "".join(f"{n[:10]:>11}" for n in names))
    print("-" * (31 + 11 * len(names)))
    for row in state.ledger:
        print(f"{row.hole:<6}{row.base:>6g}{row.carry_after:>7g}{row.winner.value[:4]:>6}{row.payout:>6g}"
              + "".join(f"{format_currency(t):>11}" for t in row.running_totals))

    totals = team_totals(state)
    wins = calculate_hole_wins(state)
    stats = calculate_game_stats(state)
    winner = determine_winning_team(state)
    print("\n--- Summary ---")
    print(f"  Red:            {format_currency(totals[Team.RED])}")
    print(f"  Blue:           {format_currency(totals[Team.BLUE])}")
    print(f"  Winner:         {winner.value if winner else 'Tie'}")
    print("  Holes won:      " + ", ".join(f"{k.value} {v}" for k, v in wins.items()))
    print(f"  Doubles:        {stats.doubles_called}")
    print(f"  Junk:           {stats.junk_count} events, ${stats.junk_value:g}")
    if state.big_game:
        print(f"  Big Game:       {stats.big_game_total} ({stats.big_game_to_par:+d})")
    print("=" * 72)


def print_history(limit: int):
    records = match_db.list_history(limit)
    print(f"\n{'Date':<12}{'Status':<11}{'Holes':>6}{'Red':>9}{'Blue':>9}  Course")
    for h in records:
        print(f"{h.date:<12}{h.status:<11}{h.holes_played:>6}"
              f"{format_currency(h.team_totals.get('Red', 0)):>9}"
              f"{format_currency(h.team_totals.get('Blue', 0)):>9}  {h.course_name}")
    print(f"\n{len(records)} match(es)")


def main():
    import argparse
    parser = argparse.ArgumentParser(description="Millbrook match report")
    parser.add_argument("match_id", nargs="?", help="Match id to load from the database")
    parser.add_argument("--file", type=str, help="Load a MatchState JSON file instead")
    parser.add_argument("--simulate", type=int, metavar="SEED", help="Play a simulated match")
    parser.add_argument("--big-game", action="store_true", help="Enable the Big Game when simulating")
    parser.add_argument("--save", action="store_true", help="Store the simulated match and its history")
    parser.add_argument("--history", action="store_true", help="List recent matches")
    parser.add_argument("--limit", type=int, default=20, help="History rows")
    parser.add_argument("--csv", type=str, help="Write the CSV export to this path (or '-' for default name)")
    args = parser.parse_args()

    if args.history:
        print_history(args.limit)
        return

    if args.simulate is not None:
        result = run_match(DEMO_PLAYERS, DEMO_TEAMS, SimulatedScoreSource(args.simulate),
                           MatchOptions(big_game=args.big_game, ghost_seed=42 + args.simulate),
                           MILLBROOK_COURSE)
        state = result.state
        if args.save:
            match_db.save_match(state)
            match_db.save_history(state)
            print(f"Saved match {state.id}")
    elif args.file:
        with open(args.file) as f:
            state = MatchState.from_dict(json.load(f))
    elif args.match_id:
        state = match_db.load_match(args.match_id)
        if state is None:
            print(f"Match {args.match_id} not found")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(2)

    print_match(state)

    if args.csv:
        path = export_filename(state) if args.csv == "-" else args.csv
        with open(path, "w") as f:
            f.write(export_csv(state))
        print(f"\nCSV saved to {path}")


if __name__ == "__main__":
    main()
