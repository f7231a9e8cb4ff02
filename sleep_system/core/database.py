"""
SQLite database setup and access layer.
Schema: sleep_entries (one row per calendar date, event lists stored as JSON).
"""

import json
import sqlite3
import threading
from contextlib import contextmanager
from typing import Optional

from sleep_system import config

_local = threading.local()

JSON_COLUMNS = (
    "caffeine", "alcohol", "meals", "exercise", "screens",
    "environment", "violations", "breakdown",
)

SCALAR_COLUMNS = {
    "date": "date",
    "bedtime": "bedtime",
    "waketime": "waketime",
    "sleepDuration": "sleep_duration",
    "sleepDebt": "sleep_debt",
    "qualityScore": "quality_score",
}

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS sleep_entries (
    date            TEXT    PRIMARY KEY,
    bedtime         TEXT    NOT NULL,
    waketime        TEXT    NOT NULL,
    sleep_duration  INTEGER NOT NULL CHECK(sleep_duration BETWEEN 0 AND 1439),
    sleep_debt      INTEGER NOT NULL CHECK(sleep_debt >= 0),
    quality_score   INTEGER NOT NULL CHECK(quality_score BETWEEN 0 AND 100),
    caffeine        TEXT    DEFAULT '[]',
    alcohol         TEXT    DEFAULT '[]',
    meals           TEXT    DEFAULT '[]',
    exercise        TEXT    DEFAULT '[]',
    screens         TEXT    DEFAULT '[]',
    environment     TEXT    DEFAULT '{}',
    violations      TEXT    DEFAULT '[]',
    breakdown       TEXT    DEFAULT '{}',
    updated_at      TEXT    DEFAULT (datetime('now'))
);
"""


def get_connection() -> sqlite3.Connection:
    """Thread-local SQLite connection with WAL mode. Reopens if DB_PATH moved."""
    db_path = config.DB_PATH
    if getattr(_local, "conn", None) is None or _local.path != db_path:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        _local.conn = conn
        _local.path = db_path
    return _local.conn


def close_connection():
    conn = getattr(_local, "conn", None)
    if conn is not None:
        conn.close()
    _local.conn = None
    _local.path = None


@contextmanager
def db_cursor():
    """Yield a cursor, auto-commit on success, rollback on error."""
    conn = get_connection()
    cur = conn.cursor()
    try:
        yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def init_db():
    """Create tables if they don't exist."""
    with db_cursor() as cur:
        cur.executescript(SCHEMA_SQL)
    print("[sleep-db] Database initialized at", config.DB_PATH, flush=True)


# --- Row mapping ---

def _row_to_entry(row: sqlite3.Row) -> dict:
    entry = {key: row[col] for key, col in SCALAR_COLUMNS.items()}
    for col in JSON_COLUMNS:
        entry[col] = json.loads(row[col])
    return entry


def _entry_params(entry: dict) -> dict:
    params = {col: entry[key] for key, col in SCALAR_COLUMNS.items()}
    for col in JSON_COLUMNS:
        params[col] = json.dumps(entry[col], ensure_ascii=False)
    return params


# --- Store contract ---

def upsert_entry(entry: dict) -> str:
    """Insert a derived entry or replace the one stored for the same date."""
    params = _entry_params(entry)
    columns = list(params)
    updates = ", ".join(f"{c}=excluded.{c}" for c in columns if c != "date")
    with db_cursor() as cur:
        cur.execute(
            f"""INSERT INTO sleep_entries ({", ".join(columns)})
                VALUES ({", ".join(":" + c for c in columns)})
                ON CONFLICT(date) DO UPDATE SET
                    {updates}, updated_at=datetime('now')""",
            params,
        )
    return entry["date"]


def list_entries() -> list[dict]:
    """All entries, date ascending."""
    with db_cursor() as cur:
        cur.execute("SELECT * FROM sleep_entries ORDER BY date")
        return [_row_to_entry(r) for r in cur.fetchall()]


def find_by_date(date: str) -> Optional[dict]:
    with db_cursor() as cur:
        cur.execute("SELECT * FROM sleep_entries WHERE date=?", (date,))
        row = cur.fetchone()
        return _row_to_entry(row) if row else None


def last_entries(limit: int = config.WEEKLY_WINDOW_DAYS) -> list[dict]:
    """The most recent `limit` entries, date ascending."""
    with db_cursor() as cur:
        cur.execute(
            "SELECT * FROM (SELECT * FROM sleep_entries ORDER BY date DESC LIMIT ?) ORDER BY date",
            (limit,),
        )
        return [_row_to_entry(r) for r in cur.fetchall()]


def reset_entries() -> int:
    """Delete every stored entry. Returns count of deleted rows."""
    with db_cursor() as cur:
        cur.execute("DELETE FROM sleep_entries")
        count = cur.rowcount
    print(f"[sleep-db] Store reset, {count} entries deleted", flush=True)
    return count
