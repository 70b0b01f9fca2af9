"""SQLite database schema and connection management."""

from __future__ import annotations

import sqlite3
from pathlib import Path

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Ingested calls; rows are never updated once written
CREATE TABLE IF NOT EXISTS calls (
    id            TEXT PRIMARY KEY,
    analysis      TEXT,
    contact_name  TEXT,
    direction     TEXT,
    call_source   TEXT,
    created_at    TEXT NOT NULL,
    ingested_at   TEXT DEFAULT (datetime('now'))
);

-- Sales team members for a client
CREATE TABLE IF NOT EXISTS team_members (
    id         TEXT PRIMARY KEY,
    name       TEXT NOT NULL,
    role       TEXT,
    is_active  INTEGER DEFAULT 1,
    created_at TEXT DEFAULT (datetime('now'))
);

-- Which member handled which call
CREATE TABLE IF NOT EXISTS call_assignments (
    call_id        TEXT PRIMARY KEY REFERENCES calls(id) ON DELETE CASCADE,
    team_member_id TEXT NOT NULL REFERENCES team_members(id) ON DELETE CASCADE,
    method         TEXT NOT NULL DEFAULT 'manual',
    confidence     REAL,
    created_at     TEXT DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_calls_created ON calls(created_at);
CREATE INDEX IF NOT EXISTS idx_assignments_member ON call_assignments(team_member_id);
"""


class DataUnavailableError(Exception):
    """The call store for a client could not be read."""


class Database:
    """SQLite database connection manager."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: sqlite3.Connection | None = None

    @classmethod
    def open_existing(cls, db_path: Path) -> Database:
        """Open a database that must already exist (read paths)."""
        if not db_path.exists():
            raise DataUnavailableError(f"No call data found at {db_path}")
        return cls(db_path)

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def initialize(self):
        """Create all tables if they don't exist."""
        self.conn.executescript(SCHEMA_SQL)
        row = self.conn.execute(
            "SELECT version FROM schema_version LIMIT 1"
        ).fetchone()
        if row is None:
            self.conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
        self.conn.commit()

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, *args):
        self.close()
