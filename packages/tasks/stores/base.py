"""Backend contract shared by the memory, SQLite and Supabase task stores."""

from __future__ import annotations

from typing import Optional, Protocol

from ..failures import Failure
from ..records import TaskRecord


class StoreError(Exception):
    """Base class for errors raised inside a task store."""

    def __init__(self, message: str, original: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.original = original

    def __str__(self) -> str:
        if self.original is not None:
            return f"{self.message} (original error: {self.original})"
        return self.message


class LocalStoreError(StoreError):
    """SQLite or in-memory storage failed."""


class RemoteStoreError(StoreError):
    """The Supabase store failed or no user is signed in."""


class TaskNotFoundError(StoreError):
    """Update or delete targeted an id that does not exist."""


class TaskStore(Protocol):
    """Capability set every task backend provides.

    ``failure_type`` is the Failure the repository reports for any error
    from this store other than a missing task.
    """

    failure_type: type[Failure]

    async def list(self) -> list[TaskRecord]:
        """Return every record in this store's scope."""
        ...

    async def add(self, record: TaskRecord) -> TaskRecord:
        """Insert a record, replacing any existing record with the same id."""
        ...

    async def update(self, record: TaskRecord) -> TaskRecord:
        """Replace the record with the same id. Raises TaskNotFoundError if absent."""
        ...

    async def delete(self, task_id: str) -> None:
        """Remove the record with this id. Raises TaskNotFoundError if absent."""
        ...

    async def close(self) -> None:
        ...
