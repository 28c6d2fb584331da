"""Database schema and blob persistence."""

import json
import pathlib
import sqlite3

SCHEMA = """
CREATE TABLE IF NOT EXISTS plugin_data (
    key TEXT PRIMARY KEY,
    value JSON NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""

DEFAULT_KEY = "data"


class PersistError(RuntimeError):
    """Writing the blob failed. The in-memory state is already mutated."""


def init_db(db_path: pathlib.Path | str) -> sqlite3.Connection:
    db_path = pathlib.Path(db_path)
    if str(db_path) != ":memory:":
        db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), timeout=5)
    conn.row_factory = sqlite3.Row
    if str(db_path) != ":memory:":
        conn.execute("PRAGMA journal_mode=WAL")
    conn.executescript(SCHEMA)
    conn.commit()
    return conn


class BlobStorage:
    """Stores one JSON document under a single key."""

    def __init__(self, conn: sqlite3.Connection, key: str = DEFAULT_KEY):
        self.conn = conn
        self.key = key

    def load(self) -> dict | None:
        row = self.conn.execute(
            "SELECT value FROM plugin_data WHERE key=?", (self.key,)).fetchone()
        if not row:
            return None
        try:
            data = json.loads(row["value"])
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    def save(self, data: dict):
        try:
            self.conn.execute("""
                INSERT OR REPLACE INTO plugin_data (key, value, updated_at)
                VALUES (?, ?, datetime('now'))
            """, (self.key, json.dumps(data, ensure_ascii=False)))
            self.conn.commit()
        except sqlite3.Error as e:
            raise PersistError(f"cannot save '{self.key}': {e}") from e
