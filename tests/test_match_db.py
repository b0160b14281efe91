"""Tests for match storage, with psycopg2 faked out."""

from __future__ import annotations

import json

import pytest

from clubhouse import match_db
from millbrook_sim.actions import EnterHoleScores, FinishRound


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn

    def execute(self, sql, params=None):
        self.conn.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self.conn.rows[0] if self.conn.rows else None

    def fetchall(self):
        return list(self.conn.rows)


class FakeConn:
    def __init__(self, rows=None):
        self.rows = rows or []
        self.executed = []
        self.committed = False
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.committed = True

    def close(self):
        self.closed = True


@pytest.fixture
def fake_db(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://millbrook@localhost/test")
    conns = []
    queued: list = []  # result rows, one list per connection

    def connect(dsn):
        conn = FakeConn(queued.pop(0) if queued else None)
        conn.dsn = dsn
        conns.append(conn)
        return conn

    monkeypatch.setattr(match_db.psycopg2, "connect", connect)
    return conns, queued


def test_database_url_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://a/b")
    assert match_db.get_database_url() == "postgresql://a/b"
    assert match_db.is_configured()


def test_database_url_from_config_file(monkeypatch, tmp_path):
    config = tmp_path / "db.json"
    config.write_text(json.dumps({"database_url": "postgresql://c/d"}))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv(match_db.CONFIG_ENV, str(config))
    assert match_db.get_database_url() == "postgresql://c/d"


def test_not_configured(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv(match_db.CONFIG_ENV, raising=False)
    assert not match_db.is_configured()
    with pytest.raises(RuntimeError):
        match_db.get_database_url()


def test_ensure_schema(fake_db):
    conns, _ = fake_db
    match_db.ensure_schema()
    assert "CREATE TABLE IF NOT EXISTS millbrook_matches" in conns[0].executed[0][0]
    assert conns[0].committed and conns[0].closed


def test_save_match_upserts_state(fake_db, state):
    conns, _ = fake_db
    match_db.save_match(state)
    sql, params = conns[0].executed[0]
    assert sql.startswith("INSERT INTO millbrook_matches")
    assert "ON CONFLICT (id) DO UPDATE" in sql
    assert params[0] == "m-test"
    assert params[1] == "active"
    assert json.loads(params[2])["id"] == "m-test"
    assert conns[0].dsn == "postgresql://millbrook@localhost/test"
    assert conns[0].committed


def test_load_match(fake_db, engine, state):
    _, rows = fake_db
    played = engine.step(state, EnterHoleScores(1, (3, 5, 4, 5)))
    rows.append([(played.to_dict(),)])
    rows.append([(json.dumps(played.to_dict()),)])
    rows.append([])
    assert match_db.load_match("m-test").to_dict() == played.to_dict()
    assert match_db.load_match("m-test").running_totals == (1, -1, 1, -1)
    assert match_db.load_match("missing") is None


def test_history(fake_db, engine, state):
    conns, rows = fake_db
    done = engine.step(state, FinishRound("2026-06-01T13:00:00+00:00"))
    history = match_db.save_history(done)
    sql, params = conns[0].executed[0]
    assert sql.startswith("INSERT INTO millbrook_history")
    assert params[:3] == ("m-test", "2026-06-01", "finished")
    assert history.duration_minutes == 240

    rows.append([(history.to_dict(),)])
    listed = match_db.list_history(10)
    assert conns[1].executed[0][1] == (10,)
    assert listed == [history]
