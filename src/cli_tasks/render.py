"""Renderers for task list output."""

from __future__ import annotations

import json
from typing import Iterable

from .models import Task


EMPTY_MESSAGE = "No Tasks"
HEADERS = ("ID", "Description")
LINE_BREAK_MARKER = "⏎"


def _one_line(description: str) -> str:
    text = description.rstrip("\r\n")
    return text.replace("\r\n", LINE_BREAK_MARKER).replace("\n", LINE_BREAK_MARKER)


def render_task_list_plain(tasks: Iterable[Task]) -> str:
    rows = [(str(task.id), _one_line(task.description)) for task in tasks]
    if not rows:
        return EMPTY_MESSAGE

    id_width = max(len(HEADERS[0]), *(len(task_id) for task_id, _ in rows))
    desc_width = max(len(HEADERS[1]), *(len(desc) for _, desc in rows))

    lines = [
        f"{HEADERS[0].rjust(id_width)} | {HEADERS[1]}",
        f"{'-' * id_width}-+-{'-' * desc_width}",
    ]
    for task_id, desc in rows:
        lines.append(f"{task_id.rjust(id_width)} | {desc}".rstrip())
    return "\n".join(lines)


def render_task_list_rich(tasks: Iterable[Task]):
    from rich import box
    from rich.table import Table
    from rich.text import Text

    task_list = list(tasks)
    if not task_list:
        return EMPTY_MESSAGE

    table = Table(
        box=box.ASCII2,
        show_edge=False,
        show_header=True,
        header_style="bold white",
        pad_edge=False,
    )
    table.add_column(HEADERS[0], justify="right", style="dim")
    table.add_column(HEADERS[1])
    for task in task_list:
        table.add_row(str(task.id), Text(_one_line(task.description)))
    return table


def render_task_list_json(tasks: Iterable[Task]) -> str:
    return json.dumps([task.to_dict() for task in tasks], indent=2)
