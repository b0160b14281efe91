"""Database helper for Millbrook matches — stores match state and history in PostgreSQL."""

import json
import os

import psycopg2

from millbrook_sim.settlement import GameHistory, build_history
from millbrook_sim.state import MatchState

CONFIG_ENV = "MILLBROOK_DB_CONFIG"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS millbrook_matches (
    id          TEXT PRIMARY KEY,
    phase       TEXT NOT NULL,
    state       JSONB NOT NULL,
    updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE TABLE IF NOT EXISTS millbrook_history (
    id          TEXT PRIMARY KEY,
    played_on   DATE,
    status      TEXT NOT NULL,
    record      JSONB NOT NULL,
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""


def get_database_url() -> str:
    # DATABASE_URL wins; otherwise a JSON file with {"database_url": ...}
    db_url = os.environ.get("DATABASE_URL")
    if db_url:
        return db_url
    config = os.environ.get(CONFIG_ENV)
    if not config:
        raise RuntimeError(f"Set DATABASE_URL or {CONFIG_ENV} to use match storage")
    with open(config) as f:
        return json.load(f)["database_url"]


def is_configured() -> bool:
    return bool(os.environ.get("DATABASE_URL") or os.environ.get(CONFIG_ENV))


def _get_conn():
    return psycopg2.connect(get_database_url())


def _decode(value):
    # psycopg2 decodes JSONB already; plain JSON text columns come back as str
    return json.loads(value) if isinstance(value, str) else value


def ensure_schema():
    conn = _get_conn()
    cur = conn.cursor()
    cur.execute(SCHEMA_SQL)
    conn.commit()
    conn.close()


def save_match(state: MatchState):
    """Insert or replace the stored state for a match."""
    conn = _get_conn()
    cur = conn.cursor()
    cur.execute(
        """INSERT INTO millbrook_matches (id, phase, state, updated_at)
           VALUES (%s, %s, %s, NOW())
           ON CONFLICT (id) DO UPDATE
           SET phase = EXCLUDED.phase, state = EXCLUDED.state, updated_at = NOW()""",
        (state.id, state.phase.value, json.dumps(state.to_dict())),
    )
    conn.commit()
    conn.close()


def load_match(match_id: str) -> MatchState | None:
    conn = _get_conn()
    cur = conn.cursor()
    cur.execute("SELECT state FROM millbrook_matches WHERE id = %s", (match_id,))
    row = cur.fetchone()
    conn.close()
    if not row:
        return None
    return MatchState.from_dict(_decode(row[0]))


def save_history(state: MatchState) -> GameHistory:
    """Record a finished or cancelled match in the history table."""
    history = build_history(state)
    conn = _get_conn()
    cur = conn.cursor()
    cur.execute(
        """INSERT INTO millbrook_history (id, played_on, status, record)
           VALUES (%s, %s, %s, %s)
           ON CONFLICT (id) DO UPDATE
           SET status = EXCLUDED.status, record = EXCLUDED.record""",
        (history.id, history.date or None, history.status, json.dumps(history.to_dict())),
    )
    conn.commit()
    conn.close()
    return history


def list_history(limit: int = 50) -> list[GameHistory]:
    """Most recent matches first."""
    conn = _get_conn()
    cur = conn.cursor()
    cur.execute(
        "SELECT record FROM millbrook_history ORDER BY played_on DESC, created_at DESC LIMIT %s",
        (limit,),
    )
    rows = cur.fetchall()
    conn.close()
    return [GameHistory.from_dict(_decode(r[0])) for r in rows]
