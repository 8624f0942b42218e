"""
db.py
SQLite helpers + the key/value slots that hold all persisted state.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from typing import Any

from config import get_settings

logger = logging.getLogger(__name__)

AUTH_KEY = "is_authenticated"
CURRENT_USER_KEY = "current_user"
VIEW_KEY = "current_view"
USERS_KEY = "users"
PLANS_KEY = "plans"
TRANSACTIONS_KEY = "transactions"

SLOT_KEYS = (AUTH_KEY, CURRENT_USER_KEY, VIEW_KEY, USERS_KEY, PLANS_KEY, TRANSACTIONS_KEY)


def client_key(key: str, client_id: str) -> str:
    """Session slots are stored once per browser client."""
    return f"{key}:{client_id}"


@contextmanager
def get_conn():
    conn = sqlite3.connect(get_settings().db_file, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def execute(sql: str, params: tuple = ()) -> int:
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.lastrowid


def fetch_one(sql: str, params: tuple = ()):
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.fetchone()


def fetch_all(sql: str, params: tuple = ()) -> list[sqlite3.Row]:
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.fetchall()


def init_db() -> None:
    """
    Create the state table. A database that cannot be opened is fatal:
    logged and re-raised so startup halts.
    """
    try:
        execute(
            """
            CREATE TABLE IF NOT EXISTS app_state (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
    except sqlite3.Error:
        logger.critical("Cannot open state database at %s", get_settings().db_file)
        raise
    logger.info("State database ready at %s", get_settings().db_file)


def get_slot(key: str, default: Any = None) -> Any:
    row = fetch_one("SELECT value FROM app_state WHERE key = ?", (key,))
    if row is None:
        return default
    try:
        return json.loads(row["value"])
    except ValueError:
        logger.warning("Unreadable value in slot %r, using default", key)
        return default


def set_slot(key: str, value: Any) -> None:
    # Best effort: a failed write is logged and the in-memory state stays authoritative.
    try:
        execute(
            """
            INSERT INTO app_state(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, json.dumps(value)),
        )
    except sqlite3.Error:
        logger.exception("Failed to persist slot %r", key)


def stored_keys() -> list[str]:
    return [r["key"] for r in fetch_all("SELECT key FROM app_state ORDER BY key")]


def reset_state() -> None:
    execute("DELETE FROM app_state")
    logger.warning("All persisted state cleared")
