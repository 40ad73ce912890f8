"""Persisted client state: a small key/value store behind a storage port."""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

SCHEMA_VERSION = 1


class StorageError(RuntimeError):
    """Raised when persisted client state cannot be read or written."""


class KeyValueStorage(Protocol):
    """String key/value port, the shape of browser local storage."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """In-process storage for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class SqliteStorage:
    """SQLite-backed key/value storage that survives restarts."""

    def __init__(self, db_path: Path | str) -> None:
        """Open the database and bring its schema up to date."""
        if isinstance(db_path, Path):
            db_path.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_path)
        else:
            target = db_path
        try:
            self._conn = sqlite3.connect(target)
        except sqlite3.Error as exc:
            raise StorageError(f"Could not open client state at {target}: {exc}") from exc
        self._conn.row_factory = sqlite3.Row
        try:
            self._apply_migrations()
        except sqlite3.Error as exc:
            self._conn.close()
            raise StorageError(f"Could not open client state at {target}: {exc}") from exc
        except StorageError:
            self._conn.close()
            raise

    def _apply_migrations(self) -> None:
        """Apply forward-only schema migrations to latest version."""
        current = int(self._conn.execute("PRAGMA user_version").fetchone()[0])
        if current > SCHEMA_VERSION:
            raise StorageError(f"Client state schema version {current} is newer than supported {SCHEMA_VERSION}.")

        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """)

        for version in range(current + 1, SCHEMA_VERSION + 1):
            if version == 1:
                self._migrate_to_v1()
            with self._conn:
                self._conn.execute(f"PRAGMA user_version = {version}")
                self._conn.execute(
                    "INSERT OR REPLACE INTO schema_migrations (version, applied_at) VALUES (?, ?)",
                    (version, datetime.now(UTC).isoformat()),
                )

    def _migrate_to_v1(self) -> None:
        """Create the key/value table."""
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS client_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """)

    def get_item(self, key: str) -> str | None:
        """Return the stored value for a key, or None."""
        try:
            row = self._conn.execute("SELECT value FROM client_state WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not read '{key}': {exc}") from exc
        if row is None:
            return None
        return str(row["value"])

    def set_item(self, key: str, value: str) -> None:
        """Insert or replace the value stored under a key."""
        now = datetime.now(UTC).isoformat()
        try:
            with self._conn:
                self._conn.execute(
                    """
                    INSERT INTO client_state (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, now),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Could not write '{key}': {exc}") from exc

    def close(self) -> None:
        """Close db connection."""
        self._conn.close()

    def __del__(self) -> None:  # pragma: no cover
        """Best-effort connection cleanup."""
        try:
            self.close()
        except Exception:
            pass
