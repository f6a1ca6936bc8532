# tests/test_records.py

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from packages.tasks.records import RecordFormatError, TaskRecord


def test_local_row_stores_flag_as_integer(make_task):
    task = make_task(is_completed=True, description="2 litres")
    row = TaskRecord.from_task(task).to_local_row()

    assert row["is_completed"] == 1
    assert row["created_at"] == task.created_at.isoformat()
    assert row["description"] == "2 litres"


def test_remote_row_stores_flag_as_boolean(make_task):
    row = TaskRecord.from_task(make_task()).to_remote_row()

    assert row["is_completed"] is False
    assert set(row) == {"id", "user_id", "title", "description", "is_completed", "created_at"}


@pytest.mark.parametrize("encode", ["to_local_row", "to_remote_row"])
@pytest.mark.parametrize("completed", [True, False])
def test_decode_inverts_encode(make_task, encode, completed):
    task = make_task(is_completed=completed, description="note")
    row = getattr(TaskRecord.from_task(task), encode)()

    assert TaskRecord.from_row(row).to_task() == task


def test_decode_accepts_supabase_timestamp_and_extra_columns():
    row = {
        "id": "9b1deb4d-3b7d-4bad-9bdd-2b0d7b3dcb6d",
        "user_id": "u1",
        "title": "Call mum",
        "description": None,
        "is_completed": False,
        "created_at": "2025-03-01T09:30:00.123456+00:00",
        "updated_at": "2025-03-02T10:00:00+00:00",
    }

    task = TaskRecord.from_row(row).to_task()

    assert task.created_at == datetime(2025, 3, 1, 9, 30, 0, 123456, tzinfo=timezone.utc)
    assert task.description is None


@pytest.mark.parametrize(
    "column, value",
    [
        ("is_completed", 2),
        ("is_completed", "yes"),
        ("title", None),
        ("created_at", "not a date"),
        ("id", 42),
    ],
)
def test_decode_rejects_malformed_rows(make_task, column, value):
    row = TaskRecord.from_task(make_task()).to_local_row()
    row[column] = value

    with pytest.raises(RecordFormatError):
        TaskRecord.from_row(row)


def test_decode_rejects_missing_column(make_task):
    row = TaskRecord.from_task(make_task()).to_local_row()
    del row["user_id"]

    with pytest.raises(RecordFormatError, match="user_id"):
        TaskRecord.from_row(row)
