"""Course data structures and the built-in Millbrook card.

Course records come from an external collaborator. The engine only reads
them, and anything malformed is replaced by synthetic defaults (par 4,
stroke index 1..18) with a warning rather than an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .enums import HOLES, DEFAULT_PAR, DEFAULT_YARDAGE, DEFAULT_STROKE_INDEX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HoleInfo:
    """One hole as played from a given tee."""
    number: int
    par: int = DEFAULT_PAR
    yardage: int = DEFAULT_YARDAGE
    stroke_index: int = 1

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "par": self.par,
            "yardage": self.yardage,
            "stroke_index": self.stroke_index,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "HoleInfo":
        return cls(
            number=int(d["number"]),
            par=int(d.get("par", DEFAULT_PAR)),
            yardage=int(d.get("yardage", DEFAULT_YARDAGE)),
            stroke_index=int(d.get("strokeIndex", d.get("stroke_index", 1))),
        )


@dataclass(frozen=True)
class TeeOption:
    id: str
    name: str = ""
    color: str = ""
    rating: float = 0.0
    slope: int = 0
    holes: tuple[HoleInfo, ...] = ()

    @property
    def stroke_indexes(self) -> list[int]:
        return [h.stroke_index for h in self.holes]

    @property
    def pars(self) -> list[int]:
        return [h.par for h in self.holes]


@dataclass(frozen=True)
class Course:
    id: str
    name: str = ""
    location: str = ""
    tee_options: tuple[TeeOption, ...] = field(default_factory=tuple)

    def get_tee(self, tee_id: str) -> Optional[TeeOption]:
        for tee in self.tee_options:
            if tee.id == tee_id:
                return tee
        return None

    @property
    def default_tee(self) -> Optional[TeeOption]:
        return self.tee_options[0] if self.tee_options else None


def default_holes() -> tuple[HoleInfo, ...]:
    """Synthetic card: every hole par 4, stroke index equal to hole number."""
    return tuple(
        HoleInfo(number=n, par=DEFAULT_PAR, yardage=DEFAULT_YARDAGE, stroke_index=si)
        for n, si in zip(range(1, HOLES + 1), DEFAULT_STROKE_INDEX)
    )


def is_valid_stroke_index_table(table: Iterable[int]) -> bool:
    """True when the table is a permutation of 1..18."""
    values = list(table)
    return len(values) == HOLES and sorted(values) == list(DEFAULT_STROKE_INDEX)


def sanitize_holes(holes: Iterable[HoleInfo] | None, label: str = "tee") -> tuple[HoleInfo, ...]:
    """Return 18 holes ordered by number, falling back to defaults.

    Missing holes get the default par and yardage. When the stroke indexes
    do not form a 1..18 permutation the whole table is replaced by the
    synthetic ascending table.
    """
    if not holes:
        logger.warning("%s: no hole data, using default card", label)
        return default_holes()

    by_number: dict[int, HoleInfo] = {}
    for h in holes:
        if 1 <= h.number <= HOLES:
            by_number[h.number] = h

    if len(by_number) != HOLES:
        logger.warning("%s: %d of %d holes present, filling defaults",
                       label, len(by_number), HOLES)

    result = []
    for n in range(1, HOLES + 1):
        h = by_number.get(n)
        if h is None:
            h = HoleInfo(number=n, par=DEFAULT_PAR, yardage=DEFAULT_YARDAGE, stroke_index=n)
        elif not 3 <= h.par <= 5:
            logger.warning("%s: hole %d par %d out of range, using %d",
                           label, n, h.par, DEFAULT_PAR)
            h = HoleInfo(number=n, par=DEFAULT_PAR, yardage=h.yardage, stroke_index=h.stroke_index)
        result.append(h)

    if not is_valid_stroke_index_table(h.stroke_index for h in result):
        logger.warning("%s: stroke indexes %s are not 1..18, using ascending table",
                       label, [h.stroke_index for h in result])
        result = [
            HoleInfo(number=h.number, par=h.par, yardage=h.yardage, stroke_index=h.number)
            for h in result
        ]
    return tuple(result)


# ---------------------------------------------------------------------------
# Millbrook Golf & Tennis Club: (hole, par, yardage, stroke index) per tee
# ---------------------------------------------------------------------------

_MILLBROOK_RAW: dict[str, tuple[str, str, float, int, list[tuple[int, int, int, int]]]] = {
    "championship": ("Championship", "White/Blue", 72.0, 133, [
        (1, 5, 497, 7), (2, 3, 190, 9), (3, 5, 518, 5), (4, 4, 289, 13),
        (5, 4, 379, 3), (6, 5, 441, 11), (7, 3, 163, 17), (8, 4, 386, 1),
        (9, 3, 151, 15), (10, 5, 485, 6), (11, 3, 190, 12), (12, 5, 498, 8),
        (13, 4, 320, 4), (14, 4, 328, 16), (15, 4, 389, 2), (16, 3, 150, 18),
        (17, 4, 343, 14), (18, 3, 207, 10),
    ]),
    "member": ("Member", "Blue/Green", 70.2, 129, [
        (1, 5, 485, 7), (2, 3, 190, 9), (3, 5, 498, 5), (4, 4, 320, 13),
        (5, 4, 328, 3), (6, 4, 389, 11), (7, 3, 150, 17), (8, 4, 343, 1),
        (9, 3, 207, 15), (10, 5, 455, 6), (11, 3, 177, 12), (12, 5, 473, 8),
        (13, 4, 218, 4), (14, 4, 328, 16), (15, 4, 325, 2), (16, 3, 140, 18),
        (17, 4, 291, 14), (18, 3, 151, 10),
    ]),
    "senior": ("Senior", "Green/Silver", 68.5, 126, [
        (1, 5, 455, 7), (2, 3, 177, 9), (3, 5, 473, 5), (4, 4, 218, 13),
        (5, 4, 328, 3), (6, 4, 325, 11), (7, 3, 140, 17), (8, 4, 291, 1),
        (9, 3, 151, 15), (10, 5, 455, 6), (11, 3, 140, 12), (12, 5, 414, 8),
        (13, 4, 218, 4), (14, 4, 228, 16), (15, 4, 325, 2), (16, 3, 125, 18),
        (17, 4, 295, 14), (18, 3, 190, 10),
    ]),
    "forward": ("Forward", "Red/Gold", 69.2, 118, [
        (1, 5, 455, 3), (2, 3, 139, 15), (3, 5, 414, 5), (4, 4, 218, 13),
        (5, 4, 232, 11), (6, 5, 389, 7), (7, 3, 109, 17), (8, 4, 291, 1),
        (9, 3, 140, 9), (10, 5, 485, 2), (11, 3, 177, 10), (12, 4, 296, 16),
        (13, 3, 145, 18), (14, 4, 328, 6), (15, 5, 325, 4), (16, 3, 140, 8),
        (17, 5, 343, 14), (18, 4, 207, 12),
    ]),
}


def _build_millbrook() -> Course:
    tees = []
    for tee_id, (name, color, rating, slope, raw) in _MILLBROOK_RAW.items():
        holes = tuple(HoleInfo(n, par, yards, si) for n, par, yards, si in raw)
        tees.append(TeeOption(id=tee_id, name=name, color=color,
                              rating=rating, slope=slope, holes=holes))
    return Course(
        id="millbrook",
        name="Millbrook Golf & Tennis Club",
        location="Millbrook, NY",
        tee_options=tuple(tees),
    )


MILLBROOK_COURSE: Course = _build_millbrook()


def resolve_player_holes(
    course: Optional[Course],
    tee_ids: Optional[list[str]],
    player_count: int,
) -> list[tuple[HoleInfo, ...]]:
    """One sanitized hole table per player.

    Unknown tee ids fall back to the course's first tee; no course at all
    falls back to the synthetic default card.
    """
    if course is None:
        return [default_holes() for _ in range(player_count)]

    ids = list(tee_ids or [])
    tables = []
    for i in range(player_count):
        tee = course.get_tee(ids[i]) if i < len(ids) else None
        if tee is None:
            if i < len(ids):
                logger.warning("Tee %r not found on course %r, using default tee",
                               ids[i], course.id)
            tee = course.default_tee
        holes = tee.holes if tee else None
        tables.append(sanitize_holes(holes, label=f"{course.id}/{tee.id if tee else '?'}"))
    return tables
