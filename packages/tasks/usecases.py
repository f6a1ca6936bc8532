"""Use-cases: one async callable per user action, each returning a value or a Failure."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from .failures import Result, ValidationFailure
from .models import Task, TaskFilter
from .repository import TaskRepository


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GetTasks:
    def __init__(self, repository: TaskRepository):
        self._repository = repository

    async def __call__(self, task_filter: Optional[TaskFilter] = None) -> Result[list[Task]]:
        return await self._repository.get_tasks(task_filter)


class AddTask:
    """Create a pending task; the id and timestamp are assigned here, before storage."""

    def __init__(
        self,
        repository: TaskRepository,
        new_id: Callable[[], str] = _new_id,
        now: Callable[[], datetime] = _utcnow,
    ):
        self._repository = repository
        self._new_id = new_id
        self._now = now

    async def __call__(
        self, user_id: str, title: str, description: Optional[str] = None
    ) -> Result[Task]:
        title = title.strip()
        if not title:
            return ValidationFailure("Title must not be empty.")
        if description is not None and not description.strip():
            description = None

        task = Task(
            id=self._new_id(),
            user_id=user_id,
            title=title,
            description=description,
            is_completed=False,
            created_at=self._now(),
        )
        return await self._repository.add_task(task)


class UpdateTaskStatus:
    """Flip a task between pending and completed. Title and description are untouched."""

    def __init__(self, repository: TaskRepository):
        self._repository = repository

    async def __call__(self, task: Task) -> Result[Task]:
        return await self._repository.update_task(task.toggled())


class DeleteTask:
    def __init__(self, repository: TaskRepository):
        self._repository = repository

    async def __call__(self, task_id: str) -> Result[None]:
        return await self._repository.delete_task(task_id)
