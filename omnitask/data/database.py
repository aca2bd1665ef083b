"""
SQLite database initialization and connection management.

Single responsibility: own the connection and create the key-value table.
All reads and writes of collections live in Repository.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Default DB lives at the repo root
DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent.parent / "omnitask.db"

SCHEMA_SQL = """
-- One JSON document per persisted collection --------------------------------
CREATE TABLE IF NOT EXISTS app_state (
    key         TEXT    PRIMARY KEY,
    value       TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL DEFAULT (datetime('now'))
);
"""


class Database:
    """Thin wrapper around a SQLite connection."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = db_path or DEFAULT_DB_PATH
        self.conn: Optional[sqlite3.Connection] = None

    # -- lifecycle -----------------------------------------------------------

    def connect(self) -> sqlite3.Connection:
        """Open (or return existing) connection and ensure schema exists."""
        if self.conn is not None:
            return self.conn
        logger.info("Connecting to SQLite at %s", self.db_path)
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self._create_tables()
        return self.conn

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.info("Database connection closed.")

    # -- internal ------------------------------------------------------------

    def _create_tables(self) -> None:
        assert self.conn is not None
        self.conn.executescript(SCHEMA_SQL)
        self.conn.commit()
        logger.info("Database schema ensured.")


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Opens the local SQLite file and makes sure the app_state table exists.
#
# Key pieces:
#   - SCHEMA_SQL: a single key -> JSON table. Every collection (tasks, games,
#     scores, ...) is one row, read once at startup and rewritten on change.
#   - Database class: holds one connection with WAL enabled.
#
# Interviewer-friendly talking points:
#   1. Why SQLite for a key-value store? Atomic upserts for free, so a crash
#      mid-write never leaves a half-written JSON file behind.
#   2. "Last write wins" is the whole durability contract; there is no sync.
