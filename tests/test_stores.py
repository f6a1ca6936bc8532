# tests/test_stores.py
"""Contract tests run against both local stores."""

from __future__ import annotations

import pytest
import pytest_asyncio

from packages.tasks.records import TaskRecord
from packages.tasks.stores import LocalStoreError, MemoryTaskStore, TaskNotFoundError, open_store


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path):
    store = await open_store(request.param, db_path=tmp_path / "contract.db")
    yield store
    await store.close()


def _record(task):
    return TaskRecord.from_task(task)


@pytest.mark.asyncio
async def test_added_task_is_listed_once(store, make_task):
    record = _record(make_task(description="semi-skimmed"))

    assert await store.add(record) == record
    assert await store.list() == [record]


@pytest.mark.asyncio
async def test_add_with_existing_id_replaces(store, make_task):
    original = _record(make_task(title="Draft"))
    await store.add(original)

    replacement = TaskRecord(**{**original.to_remote_row(), "title": "Final"})
    await store.add(replacement)

    assert await store.list() == [replacement]


@pytest.mark.asyncio
async def test_list_keeps_insertion_order(store, make_task):
    records = [_record(make_task(title=t)) for t in ("a", "b", "c")]
    for r in records:
        await store.add(r)

    assert await store.list() == records


@pytest.mark.asyncio
async def test_update_replaces_whole_record(store, make_task):
    task = make_task()
    await store.add(_record(task))
    changed = _record(task.toggled())

    assert await store.update(changed) == changed
    assert await store.list() == [changed]


@pytest.mark.asyncio
async def test_update_missing_raises_not_found(store, make_task):
    with pytest.raises(TaskNotFoundError, match="does-not-exist"):
        await store.update(_record(make_task(id="does-not-exist")))


@pytest.mark.asyncio
async def test_delete_removes_record(store, make_task):
    keep, drop = _record(make_task()), _record(make_task())
    await store.add(keep)
    await store.add(drop)

    await store.delete(drop.id)

    assert await store.list() == [keep]


@pytest.mark.asyncio
async def test_delete_missing_raises_not_found(store):
    with pytest.raises(TaskNotFoundError):
        await store.delete("does-not-exist")


@pytest.mark.asyncio
async def test_open_store_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unknown backend"):
        await open_store("firebase")


@pytest.mark.asyncio
async def test_open_store_falls_back_to_memory(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    store = await open_store("sqlite", db_path=blocker / "tasks.db")

    assert isinstance(store, MemoryTaskStore)


@pytest.mark.asyncio
async def test_open_store_without_fallback_raises(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    with pytest.raises(LocalStoreError, match="Failed to initialize database"):
        await open_store("sqlite", db_path=blocker / "tasks.db", fallback=False)
