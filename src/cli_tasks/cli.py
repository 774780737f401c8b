"""CLI entrypoint for cli-tasks."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from pathlib import Path
import sys
from typing import Annotated, Iterator

import click
import typer

from . import editor, render, storage
from .models import TaskError
from .service import TaskService

USAGE_EXIT_CODE = 1
MAX_TASK_ID = 2**32 - 1

DbOption = Annotated[
    Path | None,
    typer.Option("--db", envvar="TASK_DB", help="Path to the tasks database file"),
]
TaskIdArgument = Annotated[
    int,
    typer.Argument(help="Task id", min=0, max=MAX_TASK_ID, show_default=False),
]
DescriptionArgument = Annotated[str, typer.Argument(help="Task description", show_default=False)]


class TaskTyperGroup(typer.core.TyperGroup):
    def resolve_command(self, ctx: click.Context, args: list[str]):
        cmd_name = args[0] if args else ""
        if (
            cmd_name
            and not cmd_name.startswith("-")
            and not ctx.resilient_parsing
            and self.get_command(ctx, cmd_name) is None
        ):
            typer.echo(f"Feature Not Implemented: {cmd_name}", err=True)
            raise typer.Exit(code=1)
        return super().resolve_command(ctx, args)

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except click.UsageError as exc:
            if _is_arity_error(exc):
                exc.exit_code = USAGE_EXIT_CODE
            raise


def _is_arity_error(exc: click.UsageError) -> bool:
    # Bad values and unknown options (which includes negative ids such as
    # `-1`) keep click's exit code 2; missing or extra arguments exit 1.
    if isinstance(exc, click.MissingParameter):
        return True
    return not isinstance(exc, (click.BadParameter, click.NoSuchOption))


app = typer.Typer(
    cls=TaskTyperGroup,
    help="Command line todo list",
)


def _can_render_rich_list_output() -> bool:
    return sys.stdout.isatty()


def _print_rich(renderable) -> None:
    from rich.console import Console

    Console().print(renderable)


def _warn_config(message: str) -> None:
    typer.echo(f"Warning: {message}", err=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if verbose:
        logging.getLogger("cli_tasks").setLevel(logging.DEBUG)


def _settings() -> dict[str, str]:
    return storage.read_settings(storage.config_path(), warn=_warn_config)


@contextmanager
def _service(db: Path | None, settings: dict[str, str] | None = None) -> Iterator[TaskService]:
    if settings is None:
        settings = _settings()
    conn = storage.connect(storage.resolve_db_path(db, settings))
    try:
        svc = TaskService(conn)
        svc.ensure_schema()
        yield svc
    finally:
        conn.close()


def _run_and_handle(fn) -> None:
    try:
        fn()
    except TaskError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.callback(invoke_without_command=True)
def root_callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output to stderr")] = False,
) -> None:
    """Show help when no command is provided."""
    _configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


@app.command("ls")
def list_cmd(
    as_json: Annotated[bool, typer.Option("--json", help="Print tasks as JSON")] = False,
    db: DbOption = None,
) -> None:
    """List all tasks."""

    def _inner() -> None:
        with _service(db) as svc:
            tasks = svc.list_tasks()
        if as_json:
            typer.echo(render.render_task_list_json(tasks))
        elif _can_render_rich_list_output():
            _print_rich(render.render_task_list_rich(tasks))
        else:
            typer.echo(render.render_task_list_plain(tasks))

    _run_and_handle(_inner)


@app.command("add")
def add_cmd(description: DescriptionArgument, db: DbOption = None) -> None:
    """Add a task."""

    def _inner() -> None:
        with _service(db) as svc:
            task = svc.add_task(description)
        typer.echo(f"Added: {task.id}")

    _run_and_handle(_inner)


@app.command("update")
def update_cmd(
    task_id: TaskIdArgument,
    description: DescriptionArgument,
    db: DbOption = None,
) -> None:
    """Replace the description of a task."""

    def _inner() -> None:
        with _service(db) as svc:
            updated = svc.update_task(task_id, description)
        if updated:
            typer.echo(f"Updated: {task_id}")
        else:
            typer.echo(f"Nothing to update: {task_id}")

    _run_and_handle(_inner)


@app.command("edit")
def edit_cmd(task_id: TaskIdArgument, db: DbOption = None) -> None:
    """Edit a task description in $EDITOR."""

    def _inner() -> None:
        settings = _settings()
        command = editor.resolve_editor(settings.get("editor"))
        with _service(db, settings) as svc:
            task = svc.edit_task(task_id, command)
        typer.echo(f"Updated: {task.id}")

    _run_and_handle(_inner)


@app.command("del")
def delete_cmd(task_id: TaskIdArgument, db: DbOption = None) -> None:
    """Delete a task."""

    def _inner() -> None:
        with _service(db) as svc:
            deleted = svc.delete_task(task_id)
        if deleted:
            typer.echo(f"Deleted: {task_id}")
        else:
            typer.echo(f"Nothing to delete: {task_id}")

    _run_and_handle(_inner)


app.command("list", hidden=True)(list_cmd)
app.command("delete", hidden=True)(delete_cmd)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
