"""Handicap stroke allocation.

Low-index rule: the lowest index in the group (or an explicit override for
the Big Game) is the baseline, and everybody else receives
floor(index - baseline) strokes, handed out one at a time in ascending
stroke-index order. A player getting more than 18 strokes goes round again,
so the hardest holes take a second stroke before the easiest take a first.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from .course import is_valid_stroke_index_table
from .enums import HOLES
from .errors import MalformedCourseError

logger = logging.getLogger(__name__)


def holes_by_stroke_index(table: Sequence[int]) -> list[int]:
    """Zero-based hole positions ordered hardest (SI 1) first."""
    if len(table) != HOLES:
        raise MalformedCourseError(
            f"Stroke index table must have {HOLES} entries, got {len(table)}",
            field="stroke_index",
        )
    return [idx for idx, _ in sorted(enumerate(table), key=lambda pair: pair[1])]


def total_strokes(index: float, baseline: float) -> int:
    """Strokes received over the round. Never negative."""
    return max(0, math.floor(index - baseline))


def _baseline(indexes: Sequence[float], base_index: Optional[float]) -> float:
    if base_index is not None:
        return base_index
    return min(indexes)


def _spread(count: int, ranked_holes: list[int]) -> list[int]:
    row = [0] * HOLES
    for stroke in range(count):
        row[ranked_holes[stroke % HOLES]] += 1
    return row


def allocate_strokes(
    indexes: Sequence[float],
    stroke_index_table: Sequence[int],
    base_index: Optional[float] = None,
) -> list[list[int]]:
    """Strokes per player per hole against one shared stroke-index table.

    Args:
        indexes: Handicap index per player.
        stroke_index_table: Stroke index of holes 1..18, in hole order.
        base_index: Override baseline (Big Game specific index).

    Returns:
        Matrix [player][hole-1] of strokes received.
    """
    if not indexes:
        return []
    if not is_valid_stroke_index_table(stroke_index_table):
        raise MalformedCourseError(
            f"Stroke index table is not a 1..{HOLES} permutation: {list(stroke_index_table)}",
            field="stroke_index",
        )
    baseline = _baseline(indexes, base_index)
    ranked = holes_by_stroke_index(stroke_index_table)
    matrix = [_spread(total_strokes(ix, baseline), ranked) for ix in indexes]
    logger.debug("allocate_strokes baseline=%s totals=%s",
                 baseline, [sum(row) for row in matrix])
    return matrix


def allocate_strokes_multi_tee(
    indexes: Sequence[float],
    player_tables: Sequence[Sequence[int]],
    base_index: Optional[float] = None,
) -> list[list[int]]:
    """Same rule, but each player is ranked against their own tee's table."""
    if len(player_tables) != len(indexes):
        raise MalformedCourseError(
            f"Expected {len(indexes)} stroke index tables, got {len(player_tables)}",
            field="stroke_index",
        )
    if not indexes:
        return []
    baseline = _baseline(indexes, base_index)
    matrix = []
    for i, (ix, table) in enumerate(zip(indexes, player_tables)):
        if not is_valid_stroke_index_table(table):
            raise MalformedCourseError(
                f"Invalid stroke index table for player {i}: {list(table)}",
                field=f"stroke_index[{i}]",
            )
        matrix.append(_spread(total_strokes(ix, baseline), holes_by_stroke_index(table)))
    logger.debug("allocate_strokes_multi_tee baseline=%s totals=%s",
                 baseline, [sum(row) for row in matrix])
    return matrix


def has_stroke(matrix: list[list[int]], player: int, hole_index: int) -> bool:
    return matrix[player][hole_index] > 0


def get_strokes(matrix: list[list[int]], player: int, hole_index: int) -> int:
    return matrix[player][hole_index]
