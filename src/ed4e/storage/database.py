"""
SQLite Database Connection Manager and Schema
Handles persistent storage for actor snapshots and the published roll log.
"""

import sqlite3
import json
from pathlib import Path
from typing import Any, Self
from contextlib import contextmanager

# Schema version for migrations
SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- =============================================================================
-- SCHEMA VERSION TRACKING
-- =============================================================================
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- =============================================================================
-- ACTORS TABLE
-- One row per actor, the full Actor model serialized as JSON
-- =============================================================================
CREATE TABLE IF NOT EXISTS actors (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    actor_type TEXT NOT NULL CHECK (actor_type IN (
        'character', 'npc', 'creature', 'spirit', 'horror', 'dragon'
    )),
    data JSON NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_actors_type ON actors(actor_type);

-- =============================================================================
-- CHAT MESSAGES TABLE
-- Rolls and notifications published by workflows
-- =============================================================================
CREATE TABLE IF NOT EXISTS chat_messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    actor_id TEXT,
    level TEXT NOT NULL DEFAULT 'roll' CHECK (level IN (
        'roll', 'info', 'warning', 'error'
    )),
    flavor TEXT,
    content TEXT NOT NULL,
    roll_type TEXT,
    total INTEGER,
    success INTEGER,  -- boolean, NULL when the roll had no target
    data JSON,  -- serialized Roll
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_chat_actor ON chat_messages(actor_id);

-- =============================================================================
-- TRIGGERS FOR AUTO-UPDATING TIMESTAMPS
-- =============================================================================
CREATE TRIGGER IF NOT EXISTS update_actors_timestamp
    AFTER UPDATE ON actors
    BEGIN
        UPDATE actors SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
    END;
"""


class Database:
    """SQLite database connection manager with schema initialization."""

    def __init__(self, db_path: Path | str | None = None):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file.
                     Use ":memory:" for in-memory database.
                     None defaults to data/ed4e.db
        """
        if db_path is None:
            db_path = Path("data") / "ed4e.db"

        self.db_path = Path(db_path) if db_path != ":memory:" else db_path
        self._connection: sqlite3.Connection | None = None

        # Ensure data directory exists
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                self.db_path,
                detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES
            )
            self._connection.execute("PRAGMA foreign_keys = ON")
            # Return dicts instead of tuples
            self._connection.row_factory = sqlite3.Row
        return self._connection

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def execute(self, query: str, params: tuple = ()) -> sqlite3.Cursor:
        return self.connection.execute(query, params)

    def executescript(self, script: str) -> sqlite3.Cursor:
        return self.connection.executescript(script)

    def commit(self) -> None:
        self.connection.commit()

    def rollback(self) -> None:
        self.connection.rollback()

    def fetch_one(self, query: str, params: tuple = ()) -> sqlite3.Row | None:
        """Execute query and fetch one result."""
        cursor = self.execute(query, params)
        return cursor.fetchone()

    def fetch_all(self, query: str, params: tuple = ()) -> list[sqlite3.Row]:
        """Execute query and fetch all results."""
        cursor = self.execute(query, params)
        return cursor.fetchall()

    @contextmanager
    def transaction(self):
        """Context manager for transactions with auto-commit/rollback."""
        try:
            yield
            self.commit()
        except Exception:
            self.rollback()
            raise

    def init_schema(self) -> None:
        """Initialize database schema."""
        self.executescript(SCHEMA_SQL)
        self.execute(
            "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,)
        )
        self.commit()

    def get_schema_version(self) -> int | None:
        try:
            row = self.fetch_one("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
            return row["version"] if row else None
        except sqlite3.OperationalError:
            return None

    def table_exists(self, table_name: str) -> bool:
        row = self.fetch_one(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,)
        )
        return row is not None

    def get_table_count(self, table_name: str) -> int:
        row = self.fetch_one(f"SELECT COUNT(*) as count FROM {table_name}")
        return row["count"] if row else 0

    # =========================================================================
    # ACTORS
    # =========================================================================
    def save_actor(self, actor_id: str, name: str, actor_type: str, data: dict[str, Any]) -> None:
        """Insert or replace the snapshot of one actor."""
        with self.transaction():
            self.execute(
                """
                INSERT INTO actors (id, name, actor_type, data) VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    actor_type = excluded.actor_type,
                    data = excluded.data
                """,
                (actor_id, name, actor_type, to_json(data))
            )

    def load_actor(self, actor_id: str) -> dict[str, Any] | None:
        row = self.fetch_one("SELECT data FROM actors WHERE id = ?", (actor_id,))
        return from_json(row["data"]) if row else None

    def load_actors(self) -> list[dict[str, Any]]:
        return [from_json(row["data"]) for row in self.fetch_all("SELECT data FROM actors ORDER BY name")]

    # =========================================================================
    # CHAT MESSAGES
    # =========================================================================
    def add_chat_message(
        self,
        content: str,
        *,
        level: str = "roll",
        actor_id: str | None = None,
        flavor: str | None = None,
        roll_type: str | None = None,
        total: int | None = None,
        success: bool | None = None,
        data: dict[str, Any] | None = None,
    ) -> int:
        """Append one message to the log and return its row id."""
        with self.transaction():
            cursor = self.execute(
                """
                INSERT INTO chat_messages
                    (actor_id, level, flavor, content, roll_type, total, success, data)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    actor_id, level, flavor, content, roll_type, total,
                    None if success is None else int(success),
                    to_json(data),
                )
            )
        return cursor.lastrowid

    def get_chat_messages(self, actor_id: str | None = None, limit: int = 50) -> list[sqlite3.Row]:
        if actor_id is None:
            return self.fetch_all(
                "SELECT * FROM chat_messages ORDER BY id DESC LIMIT ?", (limit,)
            )
        return self.fetch_all(
            "SELECT * FROM chat_messages WHERE actor_id = ? ORDER BY id DESC LIMIT ?",
            (actor_id, limit)
        )


# Helper functions for JSON serialization
def to_json(obj: Any) -> str | None:
    """Serialize object to JSON string for storage."""
    if obj is None:
        return None
    return json.dumps(obj, default=str)


def from_json(json_str: str | None) -> Any:
    """Deserialize JSON string from storage."""
    if json_str is None:
        return None
    return json.loads(json_str)
