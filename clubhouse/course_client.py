"""Course data client — fetches course and tee cards from a golf course API.

Speaks the golfapi.io payload shape: tees carry holes with `number`, `par`,
`length` (yards) and `handicap` (stroke index). Configure with
COURSE_API_URL and, if the service needs one, COURSE_API_KEY.

`load_course()` never raises: anything that goes wrong falls back to the
built-in Millbrook card so a match can always start.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import requests

from millbrook_sim.course import (
    Course, TeeOption, HoleInfo, MILLBROOK_COURSE, sanitize_holes,
    resolve_player_holes as _resolve_player_holes,
)
from millbrook_sim.enums import PLAYERS, DEFAULT_PAR, DEFAULT_YARDAGE

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.golfapi.io/v1"
TIMEOUT = 10


class CourseApiError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def api_url() -> str:
    return os.environ.get("COURSE_API_URL", DEFAULT_API_URL).rstrip("/")


def api_headers() -> dict:
    headers = {"Accept": "application/json"}
    key = os.environ.get("COURSE_API_KEY")
    if key:
        headers["Authorization"] = f"Bearer {key}"
    return headers


def parse_hole(h: dict) -> HoleInfo:
    number = int(h["number"])
    return HoleInfo(
        number=number,
        par=int(h.get("par") or DEFAULT_PAR),
        yardage=int(h.get("length") or DEFAULT_YARDAGE),
        stroke_index=int(h.get("handicap") or number),
    )


def parse_course(payload: dict) -> Course:
    """golfapi course payload -> Course, every tee sanitized to 18 holes."""
    course_id = str(payload["id"])
    tees = []
    for t in payload.get("tees") or []:
        tee_id = str(t["id"])
        holes = [parse_hole(h) for h in t.get("holes") or []]
        tees.append(TeeOption(
            id=tee_id,
            name=t.get("name", ""),
            color=t.get("color", ""),
            rating=float(t.get("rating") or 0),
            slope=int(t.get("slope") or 0),
            holes=sanitize_holes(holes, label=f"{course_id}/{tee_id}"),
        ))
    location = payload.get("location") or ", ".join(
        p for p in (payload.get("city"), payload.get("state")) if p)
    return Course(id=course_id, name=payload.get("name", ""), location=location,
                  tee_options=tuple(tees))


def fetch_course(course_id: str) -> Course:
    url = f"{api_url()}/courses/{course_id}"
    try:
        resp = requests.get(url, headers=api_headers(), timeout=TIMEOUT)
        resp.raise_for_status()
    except requests.HTTPError as e:
        raise CourseApiError(f"Course {course_id}: {e}", e.response.status_code) from e
    except requests.RequestException as e:
        raise CourseApiError(f"Course {course_id}: {e}") from e

    try:
        return parse_course(resp.json())
    except (ValueError, KeyError, TypeError) as e:
        raise CourseApiError(f"Course {course_id}: malformed payload ({e})") from e


def load_course(course_id: Optional[str]) -> Course:
    if not course_id or course_id == MILLBROOK_COURSE.id:
        return MILLBROOK_COURSE
    try:
        course = fetch_course(course_id)
    except CourseApiError as e:
        logger.warning("%s; falling back to %s", e, MILLBROOK_COURSE.name)
        return MILLBROOK_COURSE
    if not course.tee_options:
        logger.warning("Course %s has no tees; falling back to %s", course_id, MILLBROOK_COURSE.name)
        return MILLBROOK_COURSE
    logger.info("Loaded course %s (%s) with %d tees", course.id, course.name, len(course.tee_options))
    return course


def resolve_player_holes(course: Optional[Course], tee_ids: Optional[list[str]],
                         player_count: int = PLAYERS) -> list[tuple[HoleInfo, ...]]:
    """Hole table per player from their tee ids, with default fallbacks."""
    return _resolve_player_holes(course, tee_ids, player_count)
