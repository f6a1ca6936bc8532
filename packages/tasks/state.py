"""TaskBoard: the task list, loading flag and last error, as shown to the user.

Every state change calls the registered listeners so a front end can redraw.
Operations are not serialized against each other; the list mutation of the
call that finishes last wins.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from .failures import Failure
from .models import Task, TaskFilter
from .usecases import AddTask, DeleteTask, GetTasks, UpdateTaskStatus

logger = logging.getLogger(__name__)

Listener = Callable[["TaskBoard"], None]


class TaskBoard:
    def __init__(
        self,
        get_tasks: GetTasks,
        add_task: AddTask,
        update_task_status: UpdateTaskStatus,
        delete_task: DeleteTask,
    ):
        self._get_tasks = get_tasks
        self._add_task = add_task
        self._update_task_status = update_task_status
        self._delete_task = delete_task

        self._tasks: list[Task] = []
        self._current_filter = TaskFilter.ALL
        self._is_loading = False
        self._error_message: Optional[str] = None
        self._listeners: list[Listener] = []
        self._failed_operation: Optional[Callable[[], Awaitable[None]]] = None

    # ── read-only state ───────────────────────────────────────────────────

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def filtered_tasks(self) -> list[Task]:
        return [t for t in self._tasks if self._current_filter.matches(t)]

    @property
    def current_filter(self) -> TaskFilter:
        return self._current_filter

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def can_retry(self) -> bool:
        return self._failed_operation is not None

    # ── listeners ─────────────────────────────────────────────────────────

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ── operations ────────────────────────────────────────────────────────

    async def load_tasks(self) -> None:
        async def run() -> None:
            result = await self._get_tasks()
            if self._record(result, run):
                self._tasks = list(result)

        await self._run(run)

    async def add_task(self, user_id: str, title: str, description: Optional[str] = None) -> None:
        async def run() -> None:
            result = await self._add_task(user_id, title, description)
            if self._record(result, run):
                self._tasks.append(result)

        await self._run(run)

    async def toggle_task_status(self, task: Task) -> None:
        async def run() -> None:
            result = await self._update_task_status(task)
            if self._record(result, run):
                self._tasks = [result if t.id == result.id else t for t in self._tasks]

        await self._run(run)

    async def delete_task(self, task_id: str) -> None:
        async def run() -> None:
            result = await self._delete_task(task_id)
            if self._record(result, run):
                self._tasks = [t for t in self._tasks if t.id != task_id]

        await self._run(run)

    async def retry(self) -> None:
        """Re-run the last operation that failed. No-op if nothing failed."""
        operation = self._failed_operation
        if operation is not None:
            await self._run(operation)

    def set_filter(self, task_filter: TaskFilter) -> None:
        self._current_filter = task_filter
        self._notify()

    def clear_error(self) -> None:
        self._error_message = None
        self._notify()

    # ── helpers ───────────────────────────────────────────────────────────

    async def _run(self, operation: Callable[[], Awaitable[None]]) -> None:
        self._is_loading = True
        self._error_message = None
        self._notify()
        try:
            await operation()
        finally:
            self._is_loading = False
            self._notify()

    def _record(self, result: object, operation: Callable[[], Awaitable[None]]) -> bool:
        """Store a failure's message, or clear the retry slot on success."""
        if isinstance(result, Failure):
            self._error_message = str(result)
            self._failed_operation = operation
            logger.debug("Board operation failed: %s", result)
            return False
        self._failed_operation = None
        return True
