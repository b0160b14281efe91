"""Engine errors. Each carries the offending field and a stable code for display."""

from __future__ import annotations


class MatchError(ValueError):
    """Base error for rejected match input."""

    code = "match_error"

    def __init__(self, message: str, field: str = "", code: str | None = None):
        super().__init__(message)
        self.field = field
        if code:
            self.code = code

    def to_dict(self) -> dict:
        return {"field": self.field, "code": self.code, "detail": str(self)}


class InvalidRosterError(MatchError):
    code = "invalid_roster"


class InvalidHoleError(MatchError):
    code = "invalid_hole"


class InvalidScoresError(MatchError):
    code = "invalid_scores"


class InvalidJunkFlagsError(MatchError):
    code = "invalid_junk_flags"


class MalformedCourseError(MatchError):
    code = "malformed_course"


class GhostDataMissingError(MatchError):
    """A ghost's pre-generated round is missing at scoring time."""
    code = "ghost_data_missing"


class MatchFinishedError(MatchError):
    code = "match_finished"
