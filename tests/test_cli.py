# tests/test_cli.py

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from packages.tasks import app as app_module
from packages.tasks.failures import Failure
from packages.tasks.models import AppUser
from packages.tasks.repository import TaskRepository
from packages.tasks.stores import MemoryTaskStore, SupabaseTaskStore
from todo_cli import cli, copy_tasks

from .fakes import FakeCurrentUser, FakeGoTrue, FakeSupabaseClient


@pytest.fixture()
def runner(todo_home, monkeypatch) -> CliRunner:
    monkeypatch.setenv("TODO_BACKEND", "sqlite")
    return CliRunner()


def _invoke(runner, *args, input=None):
    return runner.invoke(cli, list(args), input=input, catch_exceptions=False)


def test_add_then_list(runner):
    result = _invoke(runner, "add", "Buy milk", "-d", "semi-skimmed")
    assert result.exit_code == 0
    assert "Added: Buy milk" in result.output

    result = _invoke(runner, "list", "--details")
    assert result.exit_code == 0
    assert "[ ] Buy milk" in result.output
    assert "semi-skimmed" in result.output
    assert "1 pending, 1 total" in result.output


def test_done_toggles_and_filters(runner):
    _invoke(runner, "add", "Buy milk")
    _invoke(runner, "add", "Walk dog")

    result = _invoke(runner, "done", "milk")
    assert result.exit_code == 0
    assert "Done: Buy milk" in result.output

    completed = _invoke(runner, "list", "--filter", "completed").output
    pending = _invoke(runner, "list", "--filter", "pending").output
    assert "[x] Buy milk" in completed and "Walk dog" not in completed
    assert "[ ] Walk dog" in pending and "Buy milk" not in pending

    result = _invoke(runner, "done", "milk")
    assert "Reopened: Buy milk" in result.output


def test_done_with_several_matches_prompts(runner):
    _invoke(runner, "add", "Call mum")
    _invoke(runner, "add", "Call dentist")

    result = _invoke(runner, "done", "call", input="1\n")

    assert "Multiple matches" in result.output
    # Newest first: option 1 is the dentist.
    assert "Done: Call dentist" in result.output


def test_delete_with_confirmation_flag(runner):
    _invoke(runner, "add", "Temporary")

    result = _invoke(runner, "delete", "Temp", "--yes")
    assert result.exit_code == 0
    assert "Deleted: Temporary" in result.output

    assert "No tasks found." in _invoke(runner, "list").output


def test_delete_unknown_task(runner):
    result = _invoke(runner, "delete", "does-not-exist", "--yes")

    assert result.exit_code == 0
    assert "No tasks matching 'does-not-exist'." in result.output


def test_delete_declined_keeps_task(runner):
    _invoke(runner, "add", "Keeper")

    result = runner.invoke(cli, ["delete", "Keeper"], input="n\n")

    assert result.exit_code == 1
    assert "Keeper" in _invoke(runner, "list").output


def test_blank_title_fails(runner):
    result = _invoke(runner, "add", "  ")

    assert result.exit_code == 1
    assert "Title must not be empty." in result.output


def test_whoami_local_user(runner):
    result = _invoke(runner, "whoami")

    assert "local on sqlite" in result.output


def test_login_needs_remote_backend(runner):
    result = _invoke(runner, "login", "sam@example.com", "--password", "x")

    assert result.exit_code == 1
    assert "only available with the supabase backend" in result.output


def test_board_writes_html(runner, tmp_path):
    _invoke(runner, "add", "Water plants")
    out = tmp_path / "board.html"

    result = _invoke(runner, "board", "--output", str(out))

    assert result.exit_code == 0
    assert "Water plants" in out.read_text()


def test_memory_backend_starts_empty(runner):
    _invoke(runner, "add", "Gone soon")

    result = _invoke(runner, "--backend", "memory", "list")

    assert "No tasks found." in result.output


@pytest.mark.asyncio
async def test_copy_tasks_restamps_owner(make_task):
    local = TaskRepository(MemoryTaskStore())
    for task in (make_task(title="first", user_id="local"), make_task(title="second", user_id="local")):
        await local.add_task(task)
    client = FakeSupabaseClient()
    remote = TaskRepository(SupabaseTaskStore(client, FakeCurrentUser(AppUser("u9", "u9@example.com"))))

    assert await copy_tasks(local, remote, "u9") is None

    rows = client.tables["todos"]
    assert [r["title"] for r in rows] == ["first", "second"]
    assert {r["user_id"] for r in rows} == {"u9"}


@pytest.mark.asyncio
async def test_copy_tasks_dry_run_writes_nothing(make_task):
    local = TaskRepository(MemoryTaskStore())
    await local.add_task(make_task())
    client = FakeSupabaseClient()
    remote = TaskRepository(SupabaseTaskStore(client, FakeCurrentUser(AppUser("u9", ""))))

    assert await copy_tasks(local, remote, "u9", dry_run=True) is None
    assert client.calls == []


@pytest.mark.asyncio
async def test_copy_tasks_reports_remote_failure(make_task):
    local = TaskRepository(MemoryTaskStore())
    await local.add_task(make_task(title="stuck"))
    remote = TaskRepository(SupabaseTaskStore(FakeSupabaseClient(), FakeCurrentUser(None)))

    message = await copy_tasks(local, remote, "u9")

    assert message == "Failed on 'stuck': User not authenticated"
    assert not isinstance(message, Failure)


def test_migrate_fails_when_local_database_cannot_open(runner, todo_home, tmp_path, monkeypatch):
    client = FakeSupabaseClient(auth=FakeGoTrue())

    async def create(url=None, key=None):
        return client

    monkeypatch.setattr(app_module, "create_supabase_client", create)
    todo_home.mkdir(parents=True)
    (todo_home / "session.json").write_text(
        json.dumps({"access_token": "access-1", "refresh_token": "refresh-1"})
    )
    # A directory is not a database file.
    monkeypatch.setenv("TODO_DB_PATH", str(tmp_path))

    result = _invoke(runner, "migrate")

    assert result.exit_code == 1
    assert "Could not open local database: Failed to initialize database" in result.output
    assert "No local tasks to migrate." not in result.output
    assert client.calls == []
