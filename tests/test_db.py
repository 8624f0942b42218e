import logging
import sqlite3

import pytest

import db
from config import get_settings


def test_missing_slot_returns_default():
    assert db.get_slot(db.PLANS_KEY) is None
    assert db.get_slot(db.VIEW_KEY, "dashboard") == "dashboard"


def test_slot_round_trip_preserves_order():
    value = [{"id": "b"}, {"id": "a"}, {"id": "c"}]
    db.set_slot(db.USERS_KEY, value)
    assert db.get_slot(db.USERS_KEY) == value


def test_set_slot_overwrites():
    db.set_slot(db.AUTH_KEY, True)
    db.set_slot(db.AUTH_KEY, False)
    assert db.get_slot(db.AUTH_KEY) is False


def test_unreadable_slot_falls_back_to_default():
    db.execute("INSERT INTO app_state(key, value) VALUES(?, ?)", (db.VIEW_KEY, "{not json"))
    assert db.get_slot(db.VIEW_KEY, "dashboard") == "dashboard"


def test_reset_state_clears_all_slots():
    for key in db.SLOT_KEYS:
        db.set_slot(key, 1)
    assert db.stored_keys() == sorted(db.SLOT_KEYS)
    db.reset_state()
    assert db.stored_keys() == []


@pytest.fixture
def unreachable_db(tmp_path, monkeypatch):
    monkeypatch.setenv("DATASWIFT_DB_FILE", str(tmp_path / "missing" / "state.db"))
    get_settings.cache_clear()


def test_failed_write_is_logged_not_raised(unreachable_db, caplog):
    with caplog.at_level(logging.ERROR, logger="db"):
        db.set_slot(db.PLANS_KEY, [])
    assert "Failed to persist slot 'plans'" in caplog.text


def test_init_db_failure_is_fatal(unreachable_db, caplog):
    with caplog.at_level(logging.CRITICAL, logger="db"):
        with pytest.raises(sqlite3.Error):
            db.init_db()
    assert any(r.levelno == logging.CRITICAL for r in caplog.records)


def test_session_slots_are_scoped_per_client():
    db.set_slot(db.client_key(db.AUTH_KEY, "a"), True)
    assert db.get_slot(db.client_key(db.AUTH_KEY, "a")) is True
    assert db.get_slot(db.client_key(db.AUTH_KEY, "b")) is None
