"""Big Game — two best net scores per hole among the real players.

Ghosts never count. With fewer than two real players a hole produces no
row and the running total stays where it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

BEST_COUNT = 2


@dataclass(frozen=True)
class BigGameRow:
    hole: int
    best_net: tuple[int, ...]      # player-index order
    player_ids: tuple[str, ...]    # whose scores counted
    subtotal: int

    def to_dict(self) -> dict:
        return {
            "hole": self.hole,
            "best_net": list(self.best_net),
            "player_ids": list(self.player_ids),
            "subtotal": self.subtotal,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "BigGameRow":
        return cls(
            hole=d["hole"],
            best_net=tuple(d["best_net"]),
            player_ids=tuple(d["player_ids"]),
            subtotal=d["subtotal"],
        )


def calculate_big_game_row(
    hole: int,
    net_scores: Sequence[int],
    player_ids: Sequence[str],
) -> Optional[BigGameRow]:
    """Row for the eligible players' nets, or None if fewer than two."""
    if len(net_scores) != len(player_ids):
        raise ValueError("net_scores and player_ids must be the same length")
    if len(net_scores) < BEST_COUNT:
        logger.warning("Big Game hole %d skipped: %d eligible player(s)", hole, len(net_scores))
        return None

    ranked = sorted(range(len(net_scores)), key=lambda i: (net_scores[i], i))
    chosen = sorted(ranked[:BEST_COUNT])
    best = tuple(net_scores[i] for i in chosen)
    return BigGameRow(
        hole=hole,
        best_net=best,
        player_ids=tuple(player_ids[i] for i in chosen),
        subtotal=sum(best),
    )


def big_game_total(rows: Sequence[BigGameRow]) -> int:
    return sum(r.subtotal for r in rows)


def big_game_to_par(total: int, counted_pars: Sequence[int]) -> int:
    """Running total against two balls' par on the holes that counted."""
    return total - BEST_COUNT * sum(counted_pars)
