"""Unit tests for SqliteStateStore."""

import sqlite3

import pytest

from grovetimer.core.errors import PersistenceError
from grovetimer.persistence.store import SqliteStateStore


@pytest.fixture
def store():
    """Create an in-memory SqliteStateStore for each test."""
    s = SqliteStateStore(":memory:")
    s.init_db()
    yield s
    s.close()


# ------------------------------------------------------------------
# Schema / init_db
# ------------------------------------------------------------------

def test_init_db_creates_table(store: SqliteStateStore):
    conn = store._get_conn()
    tables = {
        r[0]
        for r in conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        ).fetchall()
    }
    assert "kv_state" in tables


def test_init_db_idempotent(store: SqliteStateStore):
    """Calling init_db twice should not raise."""
    store.init_db()


# ------------------------------------------------------------------
# get / set
# ------------------------------------------------------------------

def test_get_missing_returns_default(store: SqliteStateStore):
    assert store.get("nope") is None
    assert store.get("nope", []) == []


def test_set_and_get_round_trip(store: SqliteStateStore):
    value = {"sessions": [{"id": "a", "tags": ["x"], "done": True, "n": 1.5}]}
    store.set("k", value)
    assert store.get("k") == value


def test_set_overwrites(store: SqliteStateStore):
    store.set("k", [1])
    store.set("k", [1, 2])
    assert store.get("k") == [1, 2]
    assert store.keys() == ["k"]


def test_set_none_deletes(store: SqliteStateStore):
    store.set("k", "v")
    store.set("k", None)
    assert store.get("k", "gone") == "gone"
    assert store.keys() == []


def test_unicode_values(store: SqliteStateStore):
    store.set("project", "Café ☕")
    assert store.get("project") == "Café ☕"


def test_persists_across_connections(tmp_path):
    db = str(tmp_path / "state.db")
    first = SqliteStateStore(db)
    first.init_db()
    first.set("grovetimer.sessions", [{"id": "s1"}])
    first.close()

    second = SqliteStateStore(db)
    second.init_db()
    assert second.get("grovetimer.sessions") == [{"id": "s1"}]
    second.close()


# ------------------------------------------------------------------
# Failures surface as PersistenceError
# ------------------------------------------------------------------

def test_unserialisable_value_raises(store: SqliteStateStore):
    with pytest.raises(PersistenceError):
        store.set("k", {"when": object()})
    assert store.get("k") is None


def test_corrupt_value_raises(store: SqliteStateStore):
    store._get_conn().execute(
        "INSERT INTO kv_state (key, value) VALUES (?, ?)", ("bad", "{not json")
    )
    with pytest.raises(PersistenceError):
        store.get("bad")


def test_missing_table_raises(tmp_path):
    s = SqliteStateStore(str(tmp_path / "empty.db"))
    with pytest.raises(PersistenceError):
        s.get("k")
    with pytest.raises(PersistenceError):
        s.set("k", 1)
    s.close()


def test_persistence_error_chains_sqlite_error(tmp_path):
    s = SqliteStateStore(str(tmp_path / "empty.db"))
    with pytest.raises(PersistenceError) as excinfo:
        s.get("k")
    assert isinstance(excinfo.value.__cause__, sqlite3.Error)
    s.close()
