"""Task store façade over an open SQLite connection."""

from __future__ import annotations

import sqlite3

from . import editor, storage
from .models import StoreError, Task, TaskNotFoundError


class TaskService:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def ensure_schema(self) -> None:
        storage.ensure_schema(self.conn)

    def list_tasks(self) -> list[Task]:
        return storage.fetch_tasks(self.conn)

    def view_task(self, task_id: int) -> Task:
        task = storage.fetch_task(self.conn, task_id)
        if task is None:
            raise TaskNotFoundError(f"Task not found: {task_id}")
        return task

    def add_task(self, description: str) -> Task:
        task_id = storage.insert_task(self.conn, description)
        return Task(id=task_id, description=description)

    def delete_task(self, task_id: int) -> bool:
        """Delete a task; returns False when no row matched."""
        return storage.delete_task(self.conn, task_id)

    def update_task(self, task_id: int, description: str) -> bool:
        """Replace a task description; returns False when no row matched."""
        return storage.update_task(self.conn, task_id, description)

    def edit_task(self, task_id: int, editor_command: list[str]) -> Task:
        """Edit a task description in an external editor.

        Whatever the file holds after the editor exits is stored as-is,
        including unchanged or empty text.
        """
        task = self.view_task(task_id)
        description, buffer_path = editor.edit_text(task.description, editor_command)
        if not self.update_task(task_id, description):
            raise StoreError(f"Task {task_id} disappeared during edit; edit kept in {buffer_path}")
        editor.discard_buffer(buffer_path)
        task.description = description
        return task
