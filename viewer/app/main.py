"""Millbrook Game ⛳ - FastAPI backend.

Live matches are held in memory as MatchSessions. When a database is
configured (DATABASE_URL or MILLBROOK_DB_CONFIG) every committed change is
written through, finished and cancelled matches are dropped from memory once
stored, and matches not in memory are reloaded on demand.
"""

import json
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Optional

import asyncpg
from fastapi import FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field, StrictBool

from millbrook_sim.engine import is_double_available
from millbrook_sim.enums import Team, MIN_INDEX, MAX_INDEX
from millbrook_sim.errors import MatchError, MatchFinishedError
from millbrook_sim.export import export_csv, export_filename
from millbrook_sim.ghost import DEFAULT_SEED
from millbrook_sim.junk import JunkFlags
from millbrook_sim.runner import MatchSession
from millbrook_sim.settlement import GameHistory, build_history, format_currency, team_totals
from millbrook_sim.state import MatchState, MatchOptions, Player

from clubhouse import match_db
from clubhouse.course_client import load_course

logger = logging.getLogger(__name__)


class MatchNotFoundError(MatchError):
    code = "match_not_found"


ERROR_STATUS = {
    MatchNotFoundError: 404,
    MatchFinishedError: 409,
}

_sessions: dict[str, MatchSession] = {}
db_pool: asyncpg.Pool | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global db_pool
    if match_db.is_configured():
        db_pool = await asyncpg.create_pool(match_db.get_database_url(), min_size=1, max_size=5,
                                            statement_cache_size=0)
        await db_pool.execute(match_db.SCHEMA_SQL)
    else:
        logger.info("No database configured; matches are kept in memory only")
    yield
    if db_pool:
        await db_pool.close()
        db_pool = None


app = FastAPI(title="Millbrook Game ⛳", lifespan=lifespan)


@app.exception_handler(MatchError)
async def match_error_handler(request: Request, exc: MatchError):
    status = next((s for cls, s in ERROR_STATUS.items() if isinstance(exc, cls)), 400)
    return JSONResponse(exc.to_dict(), status_code=status)


# ── Request bodies ────────────────────────────────────────────────────

class PlayerIn(BaseModel):
    id: str = Field(min_length=1)
    name: str = ""
    index: float = Field(0.0, ge=MIN_INDEX, le=MAX_INDEX)
    is_ghost: bool = False
    source_player_id: Optional[str] = None
    first: str = ""
    last: str = ""


class CreateMatchIn(BaseModel):
    players: list[PlayerIn]
    teams: list[str]
    big_game: bool = False
    course_id: Optional[str] = None
    player_tee_ids: list[str] = []
    big_game_specific_index: Optional[float] = None
    ghost_seed: int = DEFAULT_SEED
    win_bonus: bool = False


class JunkFlagsIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    had_bunker_shot: StrictBool = False
    on_green_from_tee: StrictBool = False
    three_putt: StrictBool = False
    long_drive: StrictBool = False


class HoleScoresIn(BaseModel):
    gross_scores: list[Optional[int]]
    junk_flags: list[Optional[JunkFlagsIn]] = []


class DoubleIn(BaseModel):
    team: Optional[str] = None


class CloseIn(BaseModel):
    ended_at: Optional[str] = None


# ── Persistence ───────────────────────────────────────────────────────

async def _persist(state: MatchState):
    if not db_pool:
        return
    await db_pool.execute(
        """INSERT INTO millbrook_matches (id, phase, state, updated_at)
           VALUES ($1, $2, $3::jsonb, NOW())
           ON CONFLICT (id) DO UPDATE
           SET phase = EXCLUDED.phase, state = EXCLUDED.state, updated_at = NOW()""",
        state.id, state.phase.value, json.dumps(state.to_dict()),
    )
    if state.is_terminal:
        history = build_history(state)
        played_on = date.fromisoformat(history.date) if history.date else None
        await db_pool.execute(
            """INSERT INTO millbrook_history (id, played_on, status, record)
               VALUES ($1, $2::date, $3, $4::jsonb)
               ON CONFLICT (id) DO UPDATE
               SET status = EXCLUDED.status, record = EXCLUDED.record""",
            history.id, played_on, history.status, json.dumps(history.to_dict()),
        )
        # stored; later reads reload it from the database
        _sessions.pop(state.id, None)


async def _get_session(match_id: str) -> MatchSession:
    session = _sessions.get(match_id)
    if session:
        return session
    if db_pool:
        row = await db_pool.fetchrow("SELECT state FROM millbrook_matches WHERE id = $1", match_id)
        if row:
            session = MatchSession(MatchState.from_dict(json.loads(row["state"])))
            if not session.state.is_terminal:
                _sessions[match_id] = session
            return session
    raise MatchNotFoundError(f"Match {match_id} not found", field="match_id")


def _match_payload(state: MatchState) -> dict:
    totals = team_totals(state)
    return {
        "match": state.to_dict(),
        "is_double_available": is_double_available(state),
        "trailing_team": state.trailing_team.value if state.trailing_team else None,
        "team_totals": {t.value: v for t, v in totals.items()},
        "display_totals": [format_currency(t) for t in state.running_totals],
    }


# ── Matches ───────────────────────────────────────────────────────────

@app.post("/api/matches", status_code=201)
async def create_match(body: CreateMatchIn):
    """Create a match; ghost rounds are rolled here, once."""
    course = await run_in_threadpool(load_course, body.course_id)
    options = MatchOptions(
        big_game=body.big_game,
        course_id=body.course_id,
        player_tee_ids=body.player_tee_ids,
        big_game_specific_index=body.big_game_specific_index,
        ghost_seed=body.ghost_seed,
        win_bonus=body.win_bonus,
    )
    players = [Player(**p.model_dump()) for p in body.players]
    session = MatchSession()
    state = session.create_match(players, body.teams, options, course)
    _sessions[state.id] = session
    await _persist(state)
    return _match_payload(state)


@app.get("/api/matches/{match_id}")
async def get_match(match_id: str):
    session = await _get_session(match_id)
    return _match_payload(session.state)


@app.post("/api/matches/{match_id}/holes/{hole}")
async def enter_hole_scores(match_id: str, hole: int, body: HoleScoresIn):
    """Settle one hole. Rejected input leaves the match untouched."""
    session = await _get_session(match_id)
    flags = [JunkFlags(**f.model_dump()) if f else None for f in body.junk_flags]
    state = session.enter_hole_scores(hole, body.gross_scores, flags)
    await _persist(state)
    payload = _match_payload(state)
    payload["summary"] = session.summary(hole).to_dict()
    return payload


@app.post("/api/matches/{match_id}/double")
async def call_double(match_id: str, body: DoubleIn | None = None):
    session = await _get_session(match_id)
    team = None
    if body and body.team:
        try:
            team = Team(body.team)
        except ValueError:
            raise MatchError(f"Unknown team {body.team!r}", field="team", code="invalid_team")
    accepted = session.call_double(team)
    if accepted:
        await _persist(session.state)
    payload = _match_payload(session.state)
    payload["accepted"] = accepted
    return payload


@app.post("/api/matches/{match_id}/finish")
async def finish_round(match_id: str, body: CloseIn | None = None):
    session = await _get_session(match_id)
    state = session.finish_round(body.ended_at if body else None)
    await _persist(state)
    payload = _match_payload(state)
    payload["history"] = build_history(state).to_dict()
    return payload


@app.post("/api/matches/{match_id}/cancel")
async def cancel_match(match_id: str, body: CloseIn | None = None):
    session = await _get_session(match_id)
    state = session.cancel_match(body.ended_at if body else None)
    await _persist(state)
    payload = _match_payload(state)
    payload["history"] = build_history(state).to_dict()
    return payload


@app.get("/api/matches/{match_id}/summary/{hole}")
async def hole_summary(match_id: str, hole: int):
    session = await _get_session(match_id)
    return session.summary(hole).to_dict()


@app.get("/api/matches/{match_id}/export")
async def export_match(match_id: str):
    session = await _get_session(match_id)
    state = session.state
    return Response(
        content=export_csv(state),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(state)}"'},
    )


# ── History ───────────────────────────────────────────────────────────

@app.get("/api/history")
async def list_history(limit: int = Query(50, ge=1, le=500)):
    """Finished and cancelled matches, most recent first."""
    if db_pool:
        rows = await db_pool.fetch(
            "SELECT record FROM millbrook_history ORDER BY played_on DESC, created_at DESC LIMIT $1",
            limit,
        )
        records = [GameHistory.from_dict(json.loads(r["record"])) for r in rows]
    else:
        records = [build_history(s.state) for s in _sessions.values() if s.state.is_terminal]
        records.sort(key=lambda h: h.ended_at or "", reverse=True)
        records = records[:limit]
    return {"history": [h.to_dict() for h in records], "total": len(records)}


# ── Courses ───────────────────────────────────────────────────────────

@app.get("/api/courses/{course_id}")
async def get_course(course_id: str):
    course = await run_in_threadpool(load_course, course_id)
    return {
        "id": course.id,
        "name": course.name,
        "location": course.location,
        "tees": [
            {
                "id": t.id,
                "name": t.name,
                "color": t.color,
                "rating": t.rating,
                "slope": t.slope,
                "holes": [h.to_dict() for h in t.holes],
            }
            for t in course.tee_options
        ],
    }


# ── Health ────────────────────────────────────────────────────────────

@app.get("/api/health")
async def health():
    """Health check."""
    if not db_pool:
        return {"status": "ok", "db": "disabled", "matches": len(_sessions)}
    try:
        await db_pool.fetchval("SELECT 1")
        return {"status": "ok", "db": "connected", "matches": len(_sessions)}
    except (asyncpg.PostgresError, OSError) as e:
        return JSONResponse({"status": "error", "db": str(e)}, status_code=503)
