"""SQLite task store on aiosqlite.

``LocalDatabase`` owns the connection: callers open it once, hand it to
``SqliteTaskStore``, and close it when done. Nothing here is module-global.
"""

from __future__ import annotations

import logging
from pathlib import Path

import aiosqlite

from ..failures import CacheFailure
from ..records import RecordFormatError, TaskRecord
from .base import LocalStoreError, TaskNotFoundError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
TABLE = "tasks"

CREATE_TASKS_TABLE = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT,
    is_completed INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
)
"""

COLUMNS = "id, user_id, title, description, is_completed, created_at"


class LocalDatabase:
    """Lifecycle wrapper around a single aiosqlite connection."""

    def __init__(self, path: str | Path):
        self.path = path if str(path) == ":memory:" else Path(path)
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise LocalStoreError("Local database is not open.")
        return self._conn

    async def open(self) -> LocalDatabase:
        if self._conn is not None:
            return self
        try:
            if isinstance(self.path, Path):
                self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(str(self.path))
        except (aiosqlite.Error, OSError) as e:
            raise LocalStoreError(f"Failed to initialize database: {e}", original=e) from e
        conn.row_factory = aiosqlite.Row
        try:
            await conn.execute("PRAGMA foreign_keys = ON")
            await self._ensure_schema(conn)
        except aiosqlite.Error as e:
            await conn.close()
            raise LocalStoreError(f"Failed to initialize database: {e}", original=e) from e
        self._conn = conn
        logger.info("Local database ready at %s (schema v%d)", self.path, SCHEMA_VERSION)
        return self

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    async def __aenter__(self) -> LocalDatabase:
        return await self.open()

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _ensure_schema(self, conn: aiosqlite.Connection) -> None:
        async with conn.execute("PRAGMA user_version") as cursor:
            row = await cursor.fetchone()
        version = row[0] if row else 0
        if version == 0:
            await conn.execute(CREATE_TASKS_TABLE)
        elif version < SCHEMA_VERSION:
            await self._upgrade(conn, version, SCHEMA_VERSION)
        await conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        await conn.commit()

    async def _upgrade(self, conn: aiosqlite.Connection, old: int, new: int) -> None:
        """Schema upgrade hook. Version 1 is the only version so far."""
        logger.info("Upgrading local database from v%d to v%d", old, new)


class SqliteTaskStore:
    failure_type = CacheFailure

    def __init__(self, database: LocalDatabase):
        self._db = database

    async def list(self) -> list[TaskRecord]:
        try:
            async with self._db.connection.execute(
                f"SELECT {COLUMNS} FROM {TABLE} ORDER BY rowid"
            ) as cursor:
                rows = await cursor.fetchall()
            return [TaskRecord.from_row(r) for r in rows]
        except RecordFormatError as e:
            raise LocalStoreError(f"Failed to parse task data from database: {e}", original=e) from e
        except aiosqlite.Error as e:
            raise LocalStoreError(f"Failed to retrieve tasks from local database: {e}", original=e) from e

    async def add(self, record: TaskRecord) -> TaskRecord:
        conn = self._db.connection
        try:
            await conn.execute(
                f"INSERT OR REPLACE INTO {TABLE} ({COLUMNS}) "
                "VALUES (:id, :user_id, :title, :description, :is_completed, :created_at)",
                record.to_local_row(),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            raise LocalStoreError(f"Failed to add task to local database: {e}", original=e) from e
        logger.debug("sqlite: added task %s", record.id)
        return record

    async def update(self, record: TaskRecord) -> TaskRecord:
        conn = self._db.connection
        try:
            cursor = await conn.execute(
                f"UPDATE {TABLE} SET user_id = :user_id, title = :title, "
                "description = :description, is_completed = :is_completed, "
                "created_at = :created_at WHERE id = :id",
                record.to_local_row(),
            )
            affected = cursor.rowcount
            await cursor.close()
            await conn.commit()
        except aiosqlite.Error as e:
            raise LocalStoreError(f"Failed to update task in local database: {e}", original=e) from e
        if affected == 0:
            raise TaskNotFoundError(f"Task with ID {record.id} not found.")
        logger.debug("sqlite: updated task %s", record.id)
        return record

    async def delete(self, task_id: str) -> None:
        conn = self._db.connection
        try:
            cursor = await conn.execute(f"DELETE FROM {TABLE} WHERE id = ?", (task_id,))
            affected = cursor.rowcount
            await cursor.close()
            await conn.commit()
        except aiosqlite.Error as e:
            raise LocalStoreError(f"Failed to delete task from local database: {e}", original=e) from e
        if affected == 0:
            raise TaskNotFoundError(f"Task with ID {task_id} not found.")
        logger.debug("sqlite: deleted task %s", task_id)

    async def close(self) -> None:
        await self._db.close()
