"""Composition root: picks the backend and wires store, repository, use-cases and board."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .auth import SupabaseAuth
from .client import create_supabase_client
from .config import get_backend, get_database_path, get_local_user_id, get_session_path
from .models import AppUser
from .repository import TaskRepository
from .state import TaskBoard
from .stores import TaskStore, open_store
from .usecases import AddTask, DeleteTask, GetTasks, UpdateTaskStatus

logger = logging.getLogger(__name__)


@dataclass
class TodoApp:
    backend: str
    repository: TaskRepository
    get_tasks: GetTasks
    add_task: AddTask
    update_task_status: UpdateTaskStatus
    delete_task: DeleteTask
    board: TaskBoard
    auth: Optional[SupabaseAuth] = None
    local_user_id: str = "local"

    @classmethod
    def from_store(
        cls,
        store: TaskStore,
        backend: str,
        auth: Optional[SupabaseAuth] = None,
        local_user_id: str = "local",
    ) -> TodoApp:
        repository = TaskRepository(store)
        get_tasks = GetTasks(repository)
        add_task = AddTask(repository)
        update_task_status = UpdateTaskStatus(repository)
        delete_task = DeleteTask(repository)
        board = TaskBoard(get_tasks, add_task, update_task_status, delete_task)
        return cls(
            backend=backend,
            repository=repository,
            get_tasks=get_tasks,
            add_task=add_task,
            update_task_status=update_task_status,
            delete_task=delete_task,
            board=board,
            auth=auth,
            local_user_id=local_user_id,
        )

    @classmethod
    async def open(cls, backend: Optional[str] = None) -> TodoApp:
        backend = backend or get_backend()
        logger.debug("Opening app with %s backend", backend)

        if backend == "supabase":
            client = await create_supabase_client()
            auth = SupabaseAuth(client, get_session_path())
            await auth.restore()
            store = await open_store(backend, client=client, auth=auth)
            return cls.from_store(store, backend, auth=auth)

        db_path = get_database_path() if backend == "sqlite" else None
        store = await open_store(backend, db_path=db_path)
        return cls.from_store(store, backend, local_user_id=get_local_user_id())

    @property
    def current_user(self) -> Optional[AppUser]:
        """Signed-in user for the remote backend; a fixed local user otherwise."""
        if self.auth is not None:
            return self.auth.current_user
        return AppUser(id=self.local_user_id, email="")

    async def close(self) -> None:
        await self.repository.close()
        if self.auth is not None:
            self.auth.close()

    async def __aenter__(self) -> TodoApp:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
