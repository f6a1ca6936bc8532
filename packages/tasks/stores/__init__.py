"""Task stores and the factory that picks one at startup."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from .base import LocalStoreError, RemoteStoreError, StoreError, TaskNotFoundError, TaskStore
from .memory import MemoryTaskStore
from .sqlite import LocalDatabase, SqliteTaskStore
from .supabase import CurrentUserSource, SupabaseTaskStore

logger = logging.getLogger(__name__)

BACKENDS = ("supabase", "sqlite", "memory")


async def open_store(
    backend: str,
    *,
    db_path: Optional[str | Path] = None,
    client: Any = None,
    auth: Optional[CurrentUserSource] = None,
    fallback: bool = True,
) -> TaskStore:
    """Build the store for ``backend``.

    A local database that cannot be opened falls back to an in-memory store,
    so the app still runs (without persistence) on such clients. With
    ``fallback=False`` the LocalStoreError propagates instead.
    """
    if backend == "memory":
        return MemoryTaskStore()

    if backend == "sqlite":
        if db_path is None:
            raise ValueError("sqlite backend needs a db_path")
        try:
            database = await LocalDatabase(db_path).open()
        except LocalStoreError as e:
            if not fallback:
                raise
            logger.warning("Local database unavailable (%s); using in-memory store", e)
            return MemoryTaskStore()
        return SqliteTaskStore(database)

    if backend == "supabase":
        if client is None or auth is None:
            raise ValueError("supabase backend needs a client and an auth source")
        return SupabaseTaskStore(client, auth)

    raise ValueError(f"Unknown backend {backend!r}; expected one of {', '.join(BACKENDS)}")


__all__ = [
    "BACKENDS",
    "LocalDatabase",
    "LocalStoreError",
    "MemoryTaskStore",
    "RemoteStoreError",
    "SqliteTaskStore",
    "StoreError",
    "SupabaseTaskStore",
    "TaskNotFoundError",
    "TaskStore",
    "open_store",
]
