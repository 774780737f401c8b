from __future__ import annotations

from pathlib import Path
import sqlite3

import pytest

from cli_tasks import storage
from cli_tasks.models import StoreError, Task


@pytest.fixture
def conn(tmp_path: Path):
    connection = storage.connect(tmp_path / "tasks.db")
    storage.ensure_schema(connection)
    yield connection
    connection.close()


def _write_config(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _table_sql(connection: sqlite3.Connection) -> list[str]:
    rows = connection.execute("SELECT sql FROM sqlite_master WHERE type = 'table'").fetchall()
    return [row[0] for row in rows]


def test_connect_creates_parent_directories(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "dir" / "tasks.db"
    connection = storage.connect(db_path)
    try:
        storage.ensure_schema(connection)
    finally:
        connection.close()
    assert db_path.exists()


def test_ensure_schema_is_idempotent(conn: sqlite3.Connection) -> None:
    before = _table_sql(conn)
    storage.ensure_schema(conn)
    storage.ensure_schema(conn)
    assert _table_sql(conn) == before
    assert len(before) == 1
    assert "description TEXT NOT NULL" in before[0]


def test_fetch_tasks_empty(conn: sqlite3.Connection) -> None:
    assert storage.fetch_tasks(conn) == []


def test_insert_assigns_distinct_ids(conn: sqlite3.Connection) -> None:
    first = storage.insert_task(conn, "buy milk")
    second = storage.insert_task(conn, "buy milk")
    assert first != second
    assert storage.fetch_tasks(conn) == [
        Task(id=first, description="buy milk"),
        Task(id=second, description="buy milk"),
    ]


def test_insert_is_committed(tmp_path: Path) -> None:
    db_path = tmp_path / "tasks.db"
    connection = storage.connect(db_path)
    storage.ensure_schema(connection)
    storage.insert_task(connection, "persisted")
    connection.close()

    reopened = storage.connect(db_path)
    try:
        assert [task.description for task in storage.fetch_tasks(reopened)] == ["persisted"]
    finally:
        reopened.close()


def test_fetch_task_missing_returns_none(conn: sqlite3.Connection) -> None:
    assert storage.fetch_task(conn, 42) is None


def test_delete_missing_is_noop(conn: sqlite3.Connection) -> None:
    storage.insert_task(conn, "keep me")
    before = storage.fetch_tasks(conn)
    assert storage.delete_task(conn, 999) is False
    assert storage.fetch_tasks(conn) == before


def test_update_replaces_description(conn: sqlite3.Connection) -> None:
    task_id = storage.insert_task(conn, "d1")
    assert storage.update_task(conn, task_id, "d2") is True
    assert storage.fetch_task(conn, task_id) == Task(id=task_id, description="d2")
    assert len(storage.fetch_tasks(conn)) == 1


def test_update_missing_is_noop(conn: sqlite3.Connection) -> None:
    assert storage.update_task(conn, 7, "nothing") is False
    assert storage.fetch_tasks(conn) == []


def test_sqlite_errors_become_store_errors(tmp_path: Path) -> None:
    connection = storage.connect(tmp_path / "tasks.db")
    connection.close()
    with pytest.raises(StoreError, match="Unable to read tasks"):
        storage.fetch_tasks(connection)


def test_missing_table_raises_store_error(tmp_path: Path) -> None:
    connection = storage.connect(tmp_path / "tasks.db")
    try:
        with pytest.raises(StoreError, match="add task"):
            storage.insert_task(connection, "no schema yet")
    finally:
        connection.close()


def test_connect_rejects_file_as_parent(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(StoreError, match="database directory"):
        storage.connect(blocker / "tasks.db")


def test_config_dir_prefers_xdg(tmp_path: Path) -> None:
    env = {"XDG_CONFIG_HOME": str(tmp_path)}
    assert storage.config_dir(env) == tmp_path / "task"
    assert storage.config_path(env) == tmp_path / "task" / "config.yaml"
    assert storage.default_db_path(env) == tmp_path / "task" / "tasks.db"


def test_config_dir_defaults_to_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    assert storage.config_dir({}) == tmp_path / ".config" / "task"


def test_read_settings_missing_file(tmp_path: Path) -> None:
    warnings: list[str] = []
    assert storage.read_settings(tmp_path / "config.yaml", warn=warnings.append) == {}
    assert warnings == []


def test_read_settings_valid(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "settings:\n  database: /tmp/other.db\n  editor: nano -w\n")
    warnings: list[str] = []
    assert storage.read_settings(path, warn=warnings.append) == {
        "database": "/tmp/other.db",
        "editor": "nano -w",
    }
    assert warnings == []


def test_read_settings_warns_and_skips_bad_entries(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(
        path,
        "theme: dark\nsettings:\n  editor: 3\n  colour: red\n  database: ' '\n",
    )
    warnings: list[str] = []
    assert storage.read_settings(path, warn=warnings.append) == {}
    assert any("Unsupported config key 'theme'" in message for message in warnings)
    assert any("Unsupported settings key 'colour'" in message for message in warnings)
    assert any("Invalid settings.editor" in message for message in warnings)
    assert any("Invalid settings.database" in message for message in warnings)


def test_read_settings_unparseable_yaml(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "settings: [unclosed\n")
    warnings: list[str] = []
    assert storage.read_settings(path, warn=warnings.append) == {}
    assert any("Unable to parse config" in message for message in warnings)


def test_read_settings_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "- just\n- a list\n")
    warnings: list[str] = []
    assert storage.read_settings(path, warn=warnings.append) == {}
    assert any("Invalid config format" in message for message in warnings)


def test_resolve_db_path_order(tmp_path: Path) -> None:
    env = {"XDG_CONFIG_HOME": str(tmp_path)}
    explicit = tmp_path / "explicit.db"
    configured = {"database": str(tmp_path / "configured.db")}
    assert storage.resolve_db_path(explicit, configured, env) == explicit
    assert storage.resolve_db_path(None, configured, env) == tmp_path / "configured.db"
    assert storage.resolve_db_path(None, {}, env) == tmp_path / "task" / "tasks.db"
