"""Failure taxonomy returned by the repository and use-cases instead of raising."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Failure:
    message: Optional[str] = None

    def __str__(self) -> str:
        return self.message or type(self).__name__


class CacheFailure(Failure):
    """Local storage (SQLite or in-memory) failed."""


class ValidationFailure(Failure):
    """Input was rejected before reaching storage."""


class NotFoundFailure(Failure):
    """No task with the requested id exists for this user."""


class ServerFailure(Failure):
    """The remote store or the auth service failed."""


# Either a value or exactly one Failure, never both.
Result = Union[T, Failure]
