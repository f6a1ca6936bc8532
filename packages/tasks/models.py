"""todo-app: domain types shared by the stores, use-cases, CLI, and board."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional


class TaskFilter(str, Enum):
    """Status filter applied to repository reads."""

    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"

    def matches(self, task: Task) -> bool:
        if self is TaskFilter.COMPLETED:
            return task.is_completed
        if self is TaskFilter.PENDING:
            return not task.is_completed
        return True


@dataclass(frozen=True)
class Task:
    """One to-do item. Only title, description and is_completed ever change."""

    id: str
    user_id: str
    title: str
    created_at: datetime
    description: Optional[str] = None
    is_completed: bool = False

    def toggled(self) -> Task:
        return replace(self, is_completed=not self.is_completed)

    @property
    def short_id(self) -> str:
        return self.id[:8]


@dataclass(frozen=True)
class AppUser:
    """The signed-in user, as reported by the auth collaborator."""

    id: str
    email: str
    created_at: Optional[datetime] = None
