"""Supabase task store: table ``todos``, one row per task, RLS scoped to the caller."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional, Protocol

from postgrest.exceptions import APIError
from supabase import AsyncClient

from ..failures import ServerFailure
from ..models import AppUser
from ..records import RecordFormatError, TaskRecord
from .base import RemoteStoreError, TaskNotFoundError

logger = logging.getLogger(__name__)

TABLE = "todos"


class CurrentUserSource(Protocol):
    @property
    def current_user(self) -> Optional[AppUser]: ...


class SupabaseTaskStore:
    failure_type = ServerFailure

    def __init__(self, client: AsyncClient, auth: CurrentUserSource):
        self._client = client
        self._auth = auth

    def _require_user_id(self) -> str:
        user = self._auth.current_user
        if user is None:
            raise RemoteStoreError("User not authenticated")
        return user.id

    async def list(self) -> list[TaskRecord]:
        user_id = self._require_user_id()
        try:
            rows = (
                await self._client.table(TABLE)
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            ).data
        except APIError as e:
            raise RemoteStoreError(f"Failed to fetch tasks: {e.message}", original=e) from e
        return [self._decode(r) for r in rows]

    async def add(self, record: TaskRecord) -> TaskRecord:
        user_id = self._require_user_id()
        row = replace(record, user_id=user_id).to_remote_row()
        try:
            rows = (await self._client.table(TABLE).upsert(row).execute()).data
        except APIError as e:
            raise RemoteStoreError(f"Failed to add task: {e.message}", original=e) from e
        if not rows:
            raise RemoteStoreError("Failed to add task: no row returned")
        logger.debug("supabase: added task %s", record.id)
        return self._decode(rows[0])

    async def update(self, record: TaskRecord) -> TaskRecord:
        user_id = self._require_user_id()
        row = replace(record, user_id=user_id).to_remote_row()
        try:
            rows = (
                await self._client.table(TABLE)
                .update(row)
                .eq("id", record.id)
                .eq("user_id", user_id)
                .execute()
            ).data
        except APIError as e:
            raise RemoteStoreError(f"Failed to update task: {e.message}", original=e) from e
        if not rows:
            raise TaskNotFoundError(f"Task with ID {record.id} not found")
        logger.debug("supabase: updated task %s", record.id)
        return self._decode(rows[0])

    async def delete(self, task_id: str) -> None:
        user_id = self._require_user_id()
        try:
            rows = (
                await self._client.table(TABLE)
                .delete()
                .eq("id", task_id)
                .eq("user_id", user_id)
                .execute()
            ).data
        except APIError as e:
            raise RemoteStoreError(f"Failed to delete task: {e.message}", original=e) from e
        # RLS hides other users' rows, so "not yours" and "missing" look the same.
        if not rows:
            raise TaskNotFoundError(f"Task with ID {task_id} not found")
        logger.debug("supabase: deleted task %s", task_id)

    async def close(self) -> None:
        return

    @staticmethod
    def _decode(row: dict[str, Any]) -> TaskRecord:
        try:
            return TaskRecord.from_row(row)
        except RecordFormatError as e:
            raise RemoteStoreError("Failed to parse task data from server.", original=e) from e
