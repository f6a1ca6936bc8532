"""Task repository: one store behind it, Failures instead of exceptions in front."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from .failures import Failure, NotFoundFailure, Result
from .models import Task, TaskFilter
from .records import RecordFormatError, TaskRecord
from .stores.base import StoreError, TaskNotFoundError, TaskStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskRepository:
    """Wraps exactly one TaskStore.

    Every store exception is mapped to one Failure here; nothing raises
    past this class. Reads are always newest-first and filtered in memory.
    """

    def __init__(self, store: TaskStore):
        self._store = store

    @property
    def store(self) -> TaskStore:
        return self._store

    async def get_tasks(self, task_filter: Optional[TaskFilter] = None) -> Result[list[Task]]:
        async def fetch() -> list[Task]:
            tasks = [r.to_task() for r in await self._store.list()]
            tasks.sort(key=lambda t: t.created_at.timestamp(), reverse=True)
            if task_filter is None:
                return tasks
            return [t for t in tasks if task_filter.matches(t)]

        return await self._guard("getting tasks", fetch)

    async def add_task(self, task: Task) -> Result[Task]:
        async def add() -> Task:
            record = await self._store.add(TaskRecord.from_task(task))
            return record.to_task()

        return await self._guard("adding task", add)

    async def update_task(self, task: Task) -> Result[Task]:
        async def update() -> Task:
            record = await self._store.update(TaskRecord.from_task(task))
            return record.to_task()

        return await self._guard("updating task", update)

    async def delete_task(self, task_id: str) -> Result[None]:
        async def delete() -> None:
            await self._store.delete(task_id)

        return await self._guard("deleting task", delete)

    async def close(self) -> None:
        await self._store.close()

    async def _guard(self, action: str, operation: Callable[[], Awaitable[T]]) -> Result[T]:
        failure: Failure
        try:
            return await operation()
        except TaskNotFoundError as e:
            failure = NotFoundFailure(e.message)
        except StoreError as e:
            failure = self._store.failure_type(e.message)
        except RecordFormatError as e:
            failure = self._store.failure_type(f"Data format error {action}: {e}")
        except Exception as e:
            logger.exception("Unexpected error while %s", action)
            failure = self._store.failure_type(f"An unexpected error occurred: {e}")
        logger.warning("Failed %s: %s", action, failure)
        return failure
