"""Junk detection — bonus cash events layered on the hole result.

- Birdie:  gross < par
- Sandie:  bunker shot, then par or better
- Greenie: par 3, on the green from the tee, par or better
- Penalty: par 3, on the green from the tee, then three putts (credited
           to the player's own team, like every other event)
- LD10:    long drive on hole 17, fixed $10

Every rule is evaluated independently, so one player can collect several
events on the same hole. All values except LD10 scale with the hole's base.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import ClassVar, Optional

from .enums import Team, JunkType, LD10_HOLE, LD10_VALUE
from .errors import InvalidJunkFlagsError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JunkFlags:
    """Observed conditions for one player on one hole."""
    had_bunker_shot: bool = False
    on_green_from_tee: bool = False
    three_putt: bool = False
    long_drive: bool = False

    NONE: ClassVar["JunkFlags"]

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, bool):
                raise InvalidJunkFlagsError(
                    f"Junk flag {f.name} must be a bool, got {value!r}",
                    field=f.name,
                )

    @property
    def has_any(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "JunkFlags":
        if not d:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = set(d) - known
        if unknown:
            raise InvalidJunkFlagsError(
                f"Unknown junk flags: {sorted(unknown)}",
                field=sorted(unknown)[0],
            )
        return cls(**d)


JunkFlags.NONE = JunkFlags()


@dataclass(frozen=True)
class JunkEvent:
    """One bonus event. `team` is the team that collects the money."""
    hole: int
    player_id: str
    team: Team
    type: JunkType
    value: float

    def to_dict(self) -> dict:
        return {
            "hole": self.hole,
            "player_id": self.player_id,
            "team": self.team.value,
            "type": self.type.value,
            "value": self.value,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "JunkEvent":
        return cls(
            hole=d["hole"],
            player_id=d["player_id"],
            team=Team(d["team"]),
            type=JunkType(d["type"]),
            value=d["value"],
        )


def detect_birdie(hole: int, player_id: str, team: Team, gross: int, par: int,
                  base: float) -> Optional[JunkEvent]:
    if gross < par:
        return JunkEvent(hole, player_id, team, JunkType.BIRDIE, base)
    return None


def detect_sandie(hole: int, player_id: str, team: Team, gross: int, par: int,
                  flags: JunkFlags, base: float) -> Optional[JunkEvent]:
    if flags.had_bunker_shot and gross <= par:
        return JunkEvent(hole, player_id, team, JunkType.SANDIE, base)
    return None


def detect_greenie(hole: int, player_id: str, team: Team, gross: int, par: int,
                   flags: JunkFlags, base: float) -> Optional[JunkEvent]:
    if par == 3 and flags.on_green_from_tee and gross <= par:
        return JunkEvent(hole, player_id, team, JunkType.GREENIE, base)
    return None


def detect_penalty(hole: int, player_id: str, team: Team, par: int,
                   flags: JunkFlags, base: float) -> Optional[JunkEvent]:
    """Three putts after hitting a par 3 in one."""
    if par == 3 and flags.on_green_from_tee and flags.three_putt:
        return JunkEvent(hole, player_id, team, JunkType.PENALTY, base)
    return None


def detect_ld10(hole: int, player_id: str, team: Team,
                flags: JunkFlags) -> Optional[JunkEvent]:
    if hole == LD10_HOLE and flags.long_drive:
        return JunkEvent(hole, player_id, team, JunkType.LD10, LD10_VALUE)
    return None


def evaluate_junk(
    hole: int,
    player_id: str,
    team: Team,
    gross: int,
    par: int,
    flags: JunkFlags,
    base: float,
) -> list[JunkEvent]:
    """All junk events one player earned on one hole (possibly none)."""
    candidates = (
        detect_birdie(hole, player_id, team, gross, par, base),
        detect_sandie(hole, player_id, team, gross, par, flags, base),
        detect_greenie(hole, player_id, team, gross, par, flags, base),
        detect_penalty(hole, player_id, team, par, flags, base),
        detect_ld10(hole, player_id, team, flags),
    )
    events = [e for e in candidates if e is not None]
    if events:
        logger.debug("hole %d %s: junk %s", hole, player_id,
                     [(e.type.value, e.value) for e in events])
    return events
