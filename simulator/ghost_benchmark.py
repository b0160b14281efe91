#!/usr/bin/env python3
"""Benchmark: ghost score model calibration.

Simulates N ghost rounds per handicap index and reports:
- Avg gross, avg strokes over par, spread
- Score distribution relative to par (eagle .. triple+)
- Simulated birdie rate vs the junk rate table
- Junk flag frequencies (sandie, greenie, penalty, long drive)
- Optional: full simulated matches (pushes, doubles, zero-sum check)
"""

from __future__ import annotations

import sys
import os
import time
import json
import statistics
from dataclasses import dataclass, field
from collections import Counter

# Ensure project root is on path
_PROJECT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, _PROJECT)

from millbrook_sim.course import MILLBROOK_COURSE, HoleInfo
from millbrook_sim.enums import Team
from millbrook_sim.ghost import generate_ghost_round, expected_junk_rates, GhostRound
from millbrook_sim.junk import detect_sandie, detect_greenie, detect_penalty, detect_ld10
from millbrook_sim.runner import run_batch
from millbrook_sim.state import MatchOptions, Player

DEFAULT_INDEXES = [0.0, 5.0, 10.0, 15.0, 20.0, 28.0]
BUCKETS = ["Eagle", "Birdie", "Par", "Bogey", "Double", "Triple+"]


def _bucket(to_par: int) -> str:
    if to_par <= -2:
        return "Eagle"
    return BUCKETS[min(to_par + 2, len(BUCKETS) - 1)]


@dataclass
class GhostBenchmark:
    index: float
    holes: tuple[HoleInfo, ...]
    rounds: list[GhostRound] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def n(self) -> int:
        return len(self.rounds)

    @property
    def par(self) -> int:
        return sum(h.par for h in self.holes)

    @property
    def totals(self) -> list[int]:
        return [sum(r.scores) for r in self.rounds]

    @property
    def avg_gross(self) -> float:
        return statistics.mean(self.totals) if self.rounds else 0.0

    @property
    def avg_over_par(self) -> float:
        return self.avg_gross - self.par

    @property
    def stdev(self) -> float:
        return statistics.pstdev(self.totals) if self.n > 1 else 0.0

    def score_distribution(self) -> dict[str, float]:
        counts = Counter()
        for r in self.rounds:
            for h, s in zip(self.holes, r.scores):
                counts[_bucket(s - h.par)] += 1
        total = max(1, self.n * len(self.holes))
        return {b: counts.get(b, 0) / total for b in BUCKETS}

    def junk_rates(self) -> dict[str, float]:
        """Per-opportunity frequency of each junk event the engine would award."""
        counts = Counter()
        par3s = sum(1 for h in self.holes if h.par == 3)
        for r in self.rounds:
            for h, s in zip(self.holes, r.scores):
                flags = r.flags_for(h.number)
                if detect_sandie(h.number, "g", Team.RED, s, h.par, flags, 1):
                    counts["sandie"] += 1
                if detect_greenie(h.number, "g", Team.RED, s, h.par, flags, 1):
                    counts["greenie"] += 1
                if detect_penalty(h.number, "g", Team.RED, h.par, flags, 1):
                    counts["penalty"] += 1
                if detect_ld10(h.number, "g", Team.RED, flags):
                    counts["long_drive"] += 1
        n = max(1, self.n)
        return {
            "sandie": counts["sandie"] / (n * len(self.holes)),
            "greenie": counts["greenie"] / max(1, n * par3s),
            "penalty": counts["penalty"] / max(1, n * par3s),
            "long_drive": counts["long_drive"] / n,
        }


def run_ghost_benchmark(index: float, n_rounds: int = 500, tee_id: str = "championship") -> GhostBenchmark:
    tee = MILLBROOK_COURSE.get_tee(tee_id) or MILLBROOK_COURSE.default_tee
    bench = GhostBenchmark(index=index, holes=tee.holes)
    t0 = time.time()
    for seed in range(n_rounds):
        bench.rounds.append(generate_ghost_round("ghost", index, tee.holes, seed=seed))
    bench.elapsed = time.time() - t0
    return bench


def print_report(benchmarks: list[GhostBenchmark]):
    """Print comparison table."""
    print("\n" + "=" * 80)
    print("GHOST SCORE MODEL BENCHMARK")
    print("=" * 80)

    names = [f"H={b.index:g}" for b in benchmarks]
    col_w = 10
    header = f"{'Metric':<22}" + "".join(f"{n:>{col_w}}" for n in names)
    print(header)
    print("-" * len(header))

    rows = [
        ("Rounds", [str(b.n) for b in benchmarks]),
        ("Avg Gross", [f"{b.avg_gross:.1f}" for b in benchmarks]),
        ("Avg Over Par", [f"{b.avg_over_par:+.1f}" for b in benchmarks]),
        ("Std Dev", [f"{b.stdev:.2f}" for b in benchmarks]),
        ("Time (s)", [f"{b.elapsed:.2f}" for b in benchmarks]),
    ]
    for label, vals in rows:
        print(f"{label:<22}" + "".join(f"{v:>{col_w}}" for v in vals))

    print("\n--- Score Distribution (% of holes) ---")
    dists = [b.score_distribution() for b in benchmarks]
    for bucket in BUCKETS:
        print(f"  {bucket:<20}" + "".join(f"{d[bucket]:>{col_w}.1%}" for d in dists))

    print("\n--- Birdie Rate (simulated vs table) ---")
    print(f"  {'Simulated':<20}" + "".join(f"{d['Birdie'] + d['Eagle']:>{col_w}.1%}" for d in dists))
    print(f"  {'Table':<20}" + "".join(
        f"{expected_junk_rates(b.index).birdie:>{col_w}.1%}" for b in benchmarks))

    print("\n--- Junk Frequency (per opportunity) ---")
    rates = [b.junk_rates() for b in benchmarks]
    for key in ("sandie", "greenie", "penalty", "long_drive"):
        print(f"  {key:<20}" + "".join(f"{r[key]:>{col_w}.1%}" for r in rates))

    print("=" * 80)


def print_match_report(indexes: list[float], n_matches: int, big_game: bool):
    players = [Player(id=f"p{i + 1}", name=f"Player {i + 1}", index=ix) for i, ix in enumerate(indexes)]
    teams = [Team.RED, Team.BLUE, Team.RED, Team.BLUE]
    t0 = time.time()
    results = run_batch(players, teams, list(range(n_matches)),
                        MatchOptions(big_game=big_game), MILLBROOK_COURSE)
    elapsed = time.time() - t0

    print("\n--- Simulated Matches ---")
    print(f"  Indexes:        {indexes}")
    print(f"  Matches:        {len(results)} in {elapsed:.1f}s")
    print(f"  Avg pushes:     {statistics.mean(r.pushes for r in results):.1f}")
    print(f"  Avg junk:       {statistics.mean(r.junk_count for r in results):.1f}")
    wins = Counter(r.winning_team.value if r.winning_team else "Tie" for r in results)
    print(f"  Winning team:   {dict(wins)}")
    broken = [r.match_id for r in results if not r.is_zero_sum]
    print(f"  Zero-sum:       {'OK' if not broken else f'FAILED {broken}'}")
    if big_game:
        print(f"  Avg Big Game:   {statistics.mean(r.big_game_total for r in results):.1f}")


def main():
    import argparse
    parser = argparse.ArgumentParser(description="Ghost score model benchmark")
    parser.add_argument("-n", "--rounds", type=int, default=500, help="Rounds per handicap")
    parser.add_argument("--indexes", nargs="+", type=float, default=DEFAULT_INDEXES,
                        help="Handicap indexes to simulate")
    parser.add_argument("--tee", type=str, default="championship", help="Millbrook tee id")
    parser.add_argument("--matches", type=int, default=0,
                        help="Also simulate N full matches with the first four indexes")
    parser.add_argument("--big-game", action="store_true", help="Enable the Big Game in matches")
    parser.add_argument("--json", type=str, help="Output JSON results to file")
    args = parser.parse_args()

    benchmarks = []
    for ix in args.indexes:
        print(f"Simulating H={ix:g} ({args.rounds} rounds)...")
        b = run_ghost_benchmark(ix, args.rounds, args.tee)
        benchmarks.append(b)
        print(f"  Done: avg gross {b.avg_gross:.1f} ({b.avg_over_par:+.1f})")

    if benchmarks:
        print_report(benchmarks)

    if args.matches:
        indexes = (args.indexes + DEFAULT_INDEXES)[:4]
        print_match_report(indexes, args.matches, args.big_game)

    # JSON output
    if args.json and benchmarks:
        data = {}
        for b in benchmarks:
            data[f"{b.index:g}"] = {
                "n": b.n,
                "avg_gross": round(b.avg_gross, 2),
                "avg_over_par": round(b.avg_over_par, 2),
                "stdev": round(b.stdev, 2),
                "score_distribution": {k: round(v, 4) for k, v in b.score_distribution().items()},
                "birdie_rate_table": expected_junk_rates(b.index).birdie,
                "junk_rates": {k: round(v, 4) for k, v in b.junk_rates().items()},
            }
        with open(args.json, "w") as f:
            json.dump(data, f, indent=2)
        print(f"\nJSON results saved to {args.json}")


if __name__ == "__main__":
    main()
