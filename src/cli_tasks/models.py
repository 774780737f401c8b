"""Core task model and error types."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(slots=True)
class Task:
    id: int
    description: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class TaskError(Exception):
    """Base error for task operations."""


class StoreError(TaskError):
    """Raised when the database rejects a read or write."""


class TaskNotFoundError(TaskError):
    """Raised when a task id has no matching row."""


class ConfigError(TaskError):
    """Raised when required configuration is missing."""


class TempFileError(TaskError):
    """Raised when the edit buffer cannot be created, written or read."""


class EditorLaunchError(TaskError):
    """Raised when the external editor process cannot be started."""
