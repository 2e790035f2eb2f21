"""Key-value persistence backing the task store and the favorites registry."""

import asyncio
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

import aiosqlite

from src.core.config import settings
from src.core.errors import PersistenceError


logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Load/save capability keyed by logical name."""

    async def load(self, key: str) -> str | None:
        """Return the stored payload for key, or None if nothing was saved."""
        ...

    async def save(self, key: str, payload: str) -> None:
        """Replace the stored payload for key."""
        ...


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


class SQLiteKeyValueStore:
    """aiosqlite-backed implementation of KeyValueStore.

    Holds a single lazily opened connection; call close() on shutdown.
    """

    def __init__(self, db_path: str | None = None) -> None:
        self._path = get_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def _get_connection(self) -> aiosqlite.Connection:
        async with self._lock:
            if self._conn is not None:
                return self._conn

            self._path.parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(str(self._path))
            await conn.execute("PRAGMA journal_mode = WAL")
            await conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated TEXT NOT NULL
                )
                """
            )
            await conn.commit()
            self._conn = conn

            logger.info("Created SQLite connection", extra={"db_path": str(self._path)})
            return conn

    async def load(self, key: str) -> str | None:
        """Return the stored payload for key, or None if nothing was saved."""
        try:
            conn = await self._get_connection()
            cursor = await conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = await cursor.fetchone()
        except Exception as e:
            logger.error("kv_load_failed", extra={"key": key, "error": str(e)})
            msg = f"Failed to load {key}: {e}"
            raise PersistenceError(msg) from e

        if row is None:
            return None
        return row[0]

    async def save(self, key: str, payload: str) -> None:
        """Replace the stored payload for key."""
        try:
            conn = await self._get_connection()
            await conn.execute(
                """
                INSERT INTO kv_store (key, value, updated) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated = excluded.updated
                """,
                (key, payload, datetime.now(UTC).isoformat()),
            )
            await conn.commit()
        except Exception as e:
            logger.error("kv_save_failed", extra={"key": key, "error": str(e)})
            msg = f"Failed to save {key}: {e}"
            raise PersistenceError(msg) from e

        logger.debug("Saved payload", extra={"key": key, "size": len(payload)})

    async def close(self) -> None:
        """Close the underlying connection if open."""
        async with self._lock:
            if self._conn is None:
                return
            try:
                await self._conn.close()
                logger.info("Closed SQLite connection", extra={"db_path": str(self._path)})
            except Exception as e:
                logger.warning("Error closing SQLite connection", extra={"error": str(e)})
            finally:
                self._conn = None
