#!/usr/bin/env python3
"""todo — personal to-do list CLI backed by Supabase or a local SQLite file."""

import asyncio
import logging
import sys
import webbrowser
from dataclasses import replace
from pathlib import Path
from typing import Awaitable, Callable, Optional

import click

from board import generate_board
from packages.tasks.app import TodoApp
from packages.tasks.auth import AuthError
from packages.tasks.config import get_database_path, get_todo_dir
from packages.tasks.failures import Failure
from packages.tasks.models import Task, TaskFilter
from packages.tasks.repository import TaskRepository
from packages.tasks.stores import BACKENDS, LocalStoreError, open_store


FILTER_CHOICES = [f.value for f in TaskFilter]

Action = Callable[[TodoApp], Awaitable[Optional[str]]]


@click.group()
@click.option("--backend", "-b", type=click.Choice(BACKENDS), default=None,
              help="Storage backend (default: TODO_BACKEND or config.yaml)")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, backend, verbose):
    """todo — personal task list."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["backend"] = backend


def _run(ctx: click.Context, action: Action, backend: Optional[str] = None) -> None:
    """Open the app, run ``action`` and exit 1 if it reports an error message."""

    async def main() -> Optional[str]:
        app = await TodoApp.open(backend or ctx.obj.get("backend"))
        async with app:
            try:
                return await action(app)
            except AuthError as e:
                return e.message

    error = asyncio.run(main())
    if error:
        _fail(error)


def _fail(message: str) -> None:
    click.secho(f"  {message}", fg="red", err=True)
    sys.exit(1)


def _require_remote(app: TodoApp) -> Optional[str]:
    if app.auth is None:
        return "Sign-in is only available with the supabase backend (--backend supabase)."
    return None


def _match(tasks: list[Task], search: str) -> list[Task]:
    """Tasks whose id starts with ``search`` or whose title contains it."""
    by_id = [t for t in tasks if t.id.startswith(search)]
    if by_id:
        return by_id
    search_lower = search.lower()
    return [t for t in tasks if search_lower in t.title.lower()]


def _pick(matches: list[Task], search: str) -> Optional[Task]:
    if not matches:
        click.echo(f"  No tasks matching '{search}'.")
        return None
    if len(matches) == 1:
        return matches[0]

    click.echo(f"  Multiple matches for '{search}':\n")
    for i, t in enumerate(matches, 1):
        status = "[x]" if t.is_completed else "[ ]"
        click.echo(f"    {i}. {status} {t.title} ({t.short_id})")
    click.echo()
    choice = click.prompt("  Pick one", type=int)
    if choice < 1 or choice > len(matches):
        click.echo("  Invalid choice.")
        return None
    return matches[choice - 1]


def _format_task(t: Task) -> str:
    checkbox = "[x]" if t.is_completed else "[ ]"
    created = t.created_at.strftime("%Y-%m-%d")
    line = f"    {checkbox} {t.title}  ({t.short_id}, {created})"
    return click.style(line, fg="green" if t.is_completed else "white")


# ── auth ─────────────────────────────────────────────────────────────────

@cli.command()
@click.argument("email")
@click.password_option()
@click.pass_context
def signup(ctx, email, password):
    """Create an account (supabase backend)."""

    async def action(app: TodoApp) -> Optional[str]:
        error = _require_remote(app)
        if error:
            return error
        user = await app.auth.sign_up(email, password)
        if app.auth.current_user is None:
            click.echo(f"  Account created for {user.email}. Confirm your email, then run `todo login`.")
        else:
            click.echo(f"  Signed up and signed in as {user.email}.")
        return None

    _run(ctx, action)


@cli.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
@click.pass_context
def login(ctx, email, password):
    """Sign in (supabase backend)."""

    async def action(app: TodoApp) -> Optional[str]:
        error = _require_remote(app)
        if error:
            return error
        user = await app.auth.sign_in(email, password)
        click.echo(f"  Signed in as {user.email}.")
        return None

    _run(ctx, action)


@cli.command()
@click.pass_context
def logout(ctx):
    """Sign out and forget the saved session."""

    async def action(app: TodoApp) -> Optional[str]:
        error = _require_remote(app)
        if error:
            return error
        await app.auth.sign_out()
        click.echo("  Signed out.")
        return None

    _run(ctx, action)


@cli.command()
@click.pass_context
def whoami(ctx):
    """Show the user tasks are stored for."""

    async def action(app: TodoApp) -> Optional[str]:
        user = app.current_user
        if user is None:
            click.echo("  Not signed in.")
        elif user.email:
            click.echo(f"  {user.email} ({user.id}) on {app.backend}")
        else:
            click.echo(f"  {user.id} on {app.backend}")
        return None

    _run(ctx, action)


# ── add ──────────────────────────────────────────────────────────────────

@cli.command()
@click.argument("title")
@click.option("--description", "-d", default=None, help="Longer description")
@click.pass_context
def add(ctx, title, description):
    """Add a new task."""

    async def action(app: TodoApp) -> Optional[str]:
        user = app.current_user
        if user is None:
            return "User not authenticated. Run `todo login EMAIL` first."
        await app.board.add_task(user.id, title, description)
        if app.board.error_message:
            return app.board.error_message
        click.echo(f"  Added: {app.board.tasks[-1].title}")
        return None

    _run(ctx, action)


# ── list ─────────────────────────────────────────────────────────────────

@cli.command("list")
@click.option("--filter", "-f", "task_filter", type=click.Choice(FILTER_CHOICES),
              default=TaskFilter.ALL.value, help="Show all, completed or pending tasks")
@click.option("--details", "-l", is_flag=True, help="Show descriptions")
@click.pass_context
def list_tasks(ctx, task_filter, details):
    """List tasks, newest first."""

    async def action(app: TodoApp) -> Optional[str]:
        board = app.board
        board.set_filter(TaskFilter(task_filter))
        await board.load_tasks()
        if board.error_message:
            return board.error_message

        tasks = board.filtered_tasks
        if not tasks:
            click.echo("  No tasks found.")
            return None

        pending = sum(1 for t in board.tasks if not t.is_completed)
        click.echo(f"\n  {click.style('Tasks', bold=True)} ({pending} pending, {len(board.tasks)} total)\n")
        for t in tasks:
            click.echo(_format_task(t))
            if details and t.description:
                click.echo(f"        {t.description}")
        click.echo()
        return None

    _run(ctx, action)


# ── done ─────────────────────────────────────────────────────────────────

@cli.command()
@click.argument("search")
@click.pass_context
def done(ctx, search):
    """Toggle a task between pending and completed (id prefix or title search)."""

    async def action(app: TodoApp) -> Optional[str]:
        board = app.board
        await board.load_tasks()
        if board.error_message:
            return board.error_message

        target = _pick(_match(board.tasks, search), search)
        if target is None:
            return None

        await board.toggle_task_status(target)
        if board.error_message:
            return board.error_message
        verb = "Reopened" if target.is_completed else "Done"
        click.echo(f"  {verb}: {target.title}")
        return None

    _run(ctx, action)


# ── delete ───────────────────────────────────────────────────────────────

@cli.command()
@click.argument("search")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx, search, yes):
    """Delete a task (id prefix or title search)."""

    async def action(app: TodoApp) -> Optional[str]:
        board = app.board
        await board.load_tasks()
        if board.error_message:
            return board.error_message

        target = _pick(_match(board.tasks, search), search)
        if target is None:
            return None
        if not yes:
            click.confirm(f"  Delete '{target.title}'?", abort=True)

        await board.delete_task(target.id)
        if board.error_message:
            return board.error_message
        click.echo(f"  Deleted: {target.title}")
        return None

    _run(ctx, action)


# ── board ────────────────────────────────────────────────────────────────

@cli.command("board")
@click.option("--output", "-o", default=None, help="Output file (default: <TODO_HOME>/board.html)")
@click.option("--filter", "-f", "task_filter", type=click.Choice(FILTER_CHOICES),
              default=TaskFilter.ALL.value)
@click.option("--open", "open_browser", is_flag=True, help="Open the board in a browser")
@click.pass_context
def board_cmd(ctx, output, task_filter, open_browser):
    """Write the HTML task board."""

    async def action(app: TodoApp) -> Optional[str]:
        board = app.board
        board.set_filter(TaskFilter(task_filter))
        await board.load_tasks()
        if board.error_message:
            return board.error_message

        user = app.current_user
        label = (user.email or user.id) if user else ""
        path = generate_board(board, Path(output) if output else get_todo_dir() / "board.html", label)
        click.echo(f"  Board written to {path}")
        if open_browser:
            webbrowser.open(path.resolve().as_uri())
        return None

    _run(ctx, action)


# ── migrate ──────────────────────────────────────────────────────────────

@cli.command()
@click.option("--dry-run", is_flag=True, help="Preview without writing to Supabase")
@click.pass_context
def migrate(ctx, dry_run):
    """Copy every task in the local SQLite file into Supabase for the signed-in user."""

    async def action(app: TodoApp) -> Optional[str]:
        user = app.current_user
        if user is None:
            return "User not authenticated. Run `todo login EMAIL` first."

        try:
            store = await open_store("sqlite", db_path=get_database_path(), fallback=False)
        except LocalStoreError as e:
            return f"Could not open local database: {e.message}"

        source = TaskRepository(store)
        try:
            return await copy_tasks(source, app.repository, user.id, dry_run=dry_run)
        finally:
            await source.close()

    _run(ctx, action, backend="supabase")


async def copy_tasks(
    source: TaskRepository, target: TaskRepository, owner_id: str, dry_run: bool = False
) -> Optional[str]:
    """Add every source task to ``target`` under ``owner_id``. Returns an error message or None."""
    tasks = await source.get_tasks()
    if isinstance(tasks, Failure):
        return f"Could not read local tasks: {tasks}"
    if not tasks:
        click.echo("  No local tasks to migrate.")
        return None

    # Oldest first so creation order survives.
    tasks = list(reversed(tasks))
    click.echo(f"  Found {len(tasks)} local tasks\n")
    for i, task in enumerate(tasks, 1):
        status = "[x]" if task.is_completed else "[ ]"
        click.echo(f"    {i}. {status} {task.title}")
        if dry_run:
            continue
        result = await target.add_task(replace(task, user_id=owner_id))
        if isinstance(result, Failure):
            return f"Failed on '{task.title}': {result}"

    if dry_run:
        click.echo("\n  Dry run, nothing written.")
    else:
        click.echo(f"\n  Migrated {len(tasks)} tasks.")
    return None


if __name__ == "__main__":
    cli()
