"""Shared pytest fixtures: every test gets its own SQLite state file."""

import pytest

import db
from config import get_settings
from store import RecordStore


@pytest.fixture(autouse=True)
def state_db(tmp_path, monkeypatch):
    monkeypatch.setenv("DATASWIFT_DB_FILE", str(tmp_path / "state.db"))
    get_settings.cache_clear()
    db.init_db()
    yield tmp_path / "state.db"
    get_settings.cache_clear()


@pytest.fixture
def store() -> RecordStore:
    return RecordStore.load()


@pytest.fixture
def root(store):
    return store.root_admin


@pytest.fixture
def customer(store):
    return store.add_user("Kwame Mensah", "0244123456", "password123")


@pytest.fixture
def mtn_1gb(store):
    return next(p for p in store.plans if p.network == "MTN" and p.size == "1GB")
