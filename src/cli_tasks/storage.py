"""SQLite access and YAML config IO for cli-tasks."""

from __future__ import annotations

from contextlib import contextmanager
import logging
import os
from pathlib import Path
import sqlite3
from typing import Any, Callable, Iterator

import yaml

from .models import StoreError, Task


logger = logging.getLogger(__name__)

DB_FILENAME = "tasks.db"
CONFIG_FILENAME = "config.yaml"
SUPPORTED_SETTINGS_KEYS = ("database", "editor")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS tasks(
    id INTEGER PRIMARY KEY,
    description TEXT NOT NULL
)
"""


def config_dir(environ: dict[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    base = env.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / "task"
    return Path.home() / ".config" / "task"


def config_path(environ: dict[str, str] | None = None) -> Path:
    return config_dir(environ) / CONFIG_FILENAME


def default_db_path(environ: dict[str, str] | None = None) -> Path:
    return config_dir(environ) / DB_FILENAME


def read_config(path: Path, warn: Callable[[str], None] | None = None) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError):
        if warn is not None:
            warn(f"Unable to parse config at {path}. Falling back to defaults.")
        return {}
    if not isinstance(payload, dict):
        if warn is not None:
            warn(f"Invalid config format at {path}. Falling back to defaults.")
        return {}
    return payload


def read_settings(path: Path, warn: Callable[[str], None] | None = None) -> dict[str, str]:
    """Return the recognised string settings from the config file.

    Unknown keys and non-string values are reported through ``warn`` and
    skipped so a broken config never blocks the command.
    """
    data = read_config(path, warn=warn)
    for key in data.keys():
        if key != "settings" and warn is not None:
            warn(f"Unsupported config key '{key}' in {path}. Ignoring.")

    settings = data.get("settings", {})
    if not isinstance(settings, dict):
        if warn is not None:
            warn(f"Invalid settings section in {path}. Using defaults.")
        return {}

    resolved: dict[str, str] = {}
    for key, value in settings.items():
        if key not in SUPPORTED_SETTINGS_KEYS:
            if warn is not None:
                warn(f"Unsupported settings key '{key}' in {path}. Ignoring.")
            continue
        if not isinstance(value, str) or not value.strip():
            if warn is not None:
                warn(f"Invalid settings.{key} in {path}. Using default.")
            continue
        resolved[key] = value.strip()
    return resolved


def resolve_db_path(
    explicit: Path | None,
    settings: dict[str, str],
    environ: dict[str, str] | None = None,
) -> Path:
    if explicit is not None:
        return explicit.expanduser()
    configured = settings.get("database")
    if configured:
        return Path(configured).expanduser()
    return default_db_path(environ)


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise StoreError(f"Unable to {action}: {exc}") from exc


def connect(db_path: Path) -> sqlite3.Connection:
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StoreError(f"Unable to create database directory {db_path.parent}: {exc}") from exc
    with _store_errors(f"open database {db_path}"):
        conn = sqlite3.connect(str(db_path))
    logger.debug("Opened database %s", db_path)
    return conn


def ensure_schema(conn: sqlite3.Connection) -> None:
    with _store_errors("create tasks table"), conn:
        conn.execute(SCHEMA_SQL)


def fetch_tasks(conn: sqlite3.Connection) -> list[Task]:
    with _store_errors("read tasks"):
        rows = conn.execute("SELECT id, description FROM tasks ORDER BY id").fetchall()
    return [Task(id=row[0], description=row[1]) for row in rows]


def fetch_task(conn: sqlite3.Connection, task_id: int) -> Task | None:
    with _store_errors(f"read task {task_id}"):
        row = conn.execute(
            "SELECT id, description FROM tasks WHERE id = ?",
            (task_id,),
        ).fetchone()
    if row is None:
        return None
    return Task(id=row[0], description=row[1])


def insert_task(conn: sqlite3.Connection, description: str) -> int:
    with _store_errors("add task"), conn:
        cursor = conn.execute("INSERT INTO tasks (description) VALUES (?)", (description,))
    logger.debug("Inserted task %s", cursor.lastrowid)
    return int(cursor.lastrowid)


def delete_task(conn: sqlite3.Connection, task_id: int) -> bool:
    with _store_errors(f"delete task {task_id}"), conn:
        cursor = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
    logger.debug("Deleted %d row(s) for task %s", cursor.rowcount, task_id)
    return cursor.rowcount > 0


def update_task(conn: sqlite3.Connection, task_id: int, description: str) -> bool:
    with _store_errors(f"update task {task_id}"), conn:
        cursor = conn.execute(
            "UPDATE tasks SET description = ? WHERE id = ?",
            (description, task_id),
        )
    logger.debug("Updated %d row(s) for task %s", cursor.rowcount, task_id)
    return cursor.rowcount > 0
