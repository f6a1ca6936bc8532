"""Storage-layer task records and their row encodings.

``TaskRecord`` is deliberately separate from :class:`~packages.tasks.models.Task`:
stores only ever see records, the repository converts at the boundary.

Encodings:
  - local (SQLite): ``is_completed`` is 0/1, ``created_at`` an ISO-8601 string
  - remote (Supabase): ``is_completed`` is a native boolean, ``created_at`` ISO-8601

Decoding accepts either form of ``is_completed``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from .models import Task


class RecordFormatError(ValueError):
    """A stored row could not be decoded into a TaskRecord."""


@dataclass(frozen=True)
class TaskRecord:
    id: str
    user_id: str
    title: str
    description: Optional[str]
    is_completed: bool
    created_at: str

    @classmethod
    def from_task(cls, task: Task) -> TaskRecord:
        return cls(
            id=task.id,
            user_id=task.user_id,
            title=task.title,
            description=task.description,
            is_completed=task.is_completed,
            created_at=task.created_at.isoformat(),
        )

    def to_task(self) -> Task:
        try:
            created_at = datetime.fromisoformat(self.created_at)
        except ValueError as e:
            raise RecordFormatError(f"Invalid created_at {self.created_at!r}: {e}") from e
        return Task(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            description=self.description,
            is_completed=self.is_completed,
            created_at=created_at,
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> TaskRecord:
        """Decode a SQLite or Supabase row."""
        try:
            record = cls(
                id=_text(row["id"], "id"),
                user_id=_text(row["user_id"], "user_id"),
                title=_text(row["title"], "title"),
                description=_optional_text(row["description"], "description"),
                is_completed=_flag(row["is_completed"]),
                created_at=_text(row["created_at"], "created_at"),
            )
        except (KeyError, IndexError) as e:
            raise RecordFormatError(f"Missing column {e} in row {dict(row)!r}") from e
        except RecordFormatError as e:
            raise RecordFormatError(f"{e}. Row: {dict(row)!r}") from e
        # Validate the timestamp now, not on first use.
        record.to_task()
        return record

    def to_local_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "is_completed": 1 if self.is_completed else 0,
            "created_at": self.created_at,
        }

    def to_remote_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "is_completed": self.is_completed,
            "created_at": self.created_at,
        }


def _text(value: Any, column: str) -> str:
    if not isinstance(value, str):
        raise RecordFormatError(f"Column {column} must be text, got {type(value).__name__}")
    return value


def _optional_text(value: Any, column: str) -> Optional[str]:
    if value is None:
        return None
    return _text(value, column)


def _flag(value: Any) -> bool:
    # bool first: True/False are ints too.
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return value == 1
    raise RecordFormatError(f"Column is_completed must be a boolean or 0/1, got {value!r}")
