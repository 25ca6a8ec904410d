"""SQLite-backed string key/value store with browser localStorage semantics."""

import sqlite3
import time
from pathlib import Path

from ricknad.config import settings


class LocalStorage:
    """Persistent string key/value pairs in a single SQLite table."""

    def __init__(self, storage_dir: str | Path | None = None):
        self.storage_dir = Path(storage_dir or settings.storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.db_path = self.storage_dir / "storage.db"
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the database schema."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at INTEGER NOT NULL
                )
            """)
            conn.commit()

    def get_item(self, key: str) -> str | None:
        """Value stored under `key`, or None."""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute("SELECT value FROM storage WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO storage (key, value, updated_at) VALUES (?, ?, ?)",
                (key, str(value), int(time.time())),
            )
            conn.commit()

    def remove_item(self, key: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM storage WHERE key = ?", (key,))
            conn.commit()

    def clear(self) -> None:
        """Remove every key."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM storage")
            conn.commit()

    def keys(self) -> list[str]:
        with sqlite3.connect(self.db_path) as conn:
            return [row[0] for row in conn.execute("SELECT key FROM storage ORDER BY key")]
