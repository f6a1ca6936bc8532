# tests/conftest.py

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import pytest
import pytest_asyncio

sys.path.insert(0, str(Path(__file__).parent.parent))

from packages.tasks import config
from packages.tasks.models import Task
from packages.tasks.stores import LocalDatabase, MemoryTaskStore, SqliteTaskStore

BASE_TIME = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture()
def make_task() -> Callable[..., Task]:
    """Factory for tasks with distinct ids and increasing timestamps."""
    counter = {"n": 0}

    def _make(title: str = "Buy milk", user_id: str = "u1", **overrides) -> Task:
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "id": f"task-{n}",
            "user_id": user_id,
            "title": title,
            "description": None,
            "is_completed": False,
            "created_at": BASE_TIME + timedelta(minutes=n),
        }
        fields.update(overrides)
        return Task(**fields)

    return _make


@pytest.fixture()
def memory_store() -> MemoryTaskStore:
    return MemoryTaskStore()


@pytest_asyncio.fixture
async def database(tmp_path: Path):
    db = LocalDatabase(tmp_path / "tasks.db")
    await db.open()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def sqlite_store(database: LocalDatabase) -> SqliteTaskStore:
    return SqliteTaskStore(database)


@pytest.fixture()
def todo_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point configuration at an empty per-test home directory."""
    home = tmp_path / "home"
    monkeypatch.setenv("TODO_HOME", str(home))
    for var in ("TODO_BACKEND", "TODO_DB_PATH", "SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_KEY"):
        monkeypatch.delenv(var, raising=False)
    config.reset_config()
    yield home
    config.reset_config()
