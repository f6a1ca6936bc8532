"""todo-app core: tasks, stores, repository, use-cases, board state, auth and config."""

from .failures import CacheFailure, Failure, NotFoundFailure, ServerFailure, ValidationFailure
from .models import AppUser, Task, TaskFilter
from .records import RecordFormatError, TaskRecord
from .repository import TaskRepository
from .state import TaskBoard
from .usecases import AddTask, DeleteTask, GetTasks, UpdateTaskStatus

__all__ = [
    "AddTask",
    "AppUser",
    "CacheFailure",
    "DeleteTask",
    "Failure",
    "GetTasks",
    "NotFoundFailure",
    "RecordFormatError",
    "ServerFailure",
    "Task",
    "TaskBoard",
    "TaskFilter",
    "TaskRecord",
    "TaskRepository",
    "UpdateTaskStatus",
    "ValidationFailure",
]
