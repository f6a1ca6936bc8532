"""In-memory task store, used when no local database is available and in tests."""

from __future__ import annotations

import logging

from ..failures import CacheFailure
from ..records import TaskRecord
from .base import TaskNotFoundError

logger = logging.getLogger(__name__)


class MemoryTaskStore:
    failure_type = CacheFailure

    def __init__(self, records: list[TaskRecord] | None = None):
        self._records: list[TaskRecord] = list(records or [])

    async def list(self) -> list[TaskRecord]:
        return list(self._records)

    async def add(self, record: TaskRecord) -> TaskRecord:
        index = self._index_of(record.id)
        if index is None:
            self._records.append(record)
        else:
            self._records[index] = record
        logger.debug("memory: added task %s", record.id)
        return record

    async def update(self, record: TaskRecord) -> TaskRecord:
        index = self._index_of(record.id)
        if index is None:
            raise TaskNotFoundError(f"Task with ID {record.id} not found.")
        self._records[index] = record
        logger.debug("memory: updated task %s", record.id)
        return record

    async def delete(self, task_id: str) -> None:
        index = self._index_of(task_id)
        if index is None:
            raise TaskNotFoundError(f"Task with ID {task_id} not found.")
        del self._records[index]
        logger.debug("memory: deleted task %s", task_id)

    async def close(self) -> None:
        return

    def _index_of(self, task_id: str) -> int | None:
        for i, r in enumerate(self._records):
            if r.id == task_id:
                return i
        return None
