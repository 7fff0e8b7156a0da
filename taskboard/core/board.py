"""
Task Board — Manual board operations.

Backs the kanban columns (To_Do / Doing / Done) and the Eisenhower matrix
for tasks the user types in directly. State lives in memory and is written
through to the ``tasks`` key after every change; if a write fails the
in-memory board stays authoritative for the rest of the session.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import TYPE_CHECKING

from taskboard.data.models import STATUS_ORDER, TASK_STATUSES, TO_DO, Task
from taskboard.data.task_store import DEFAULT_QUADRANT

if TYPE_CHECKING:
    from taskboard.data.task_store import BoardTaskStore

logger = logging.getLogger(__name__)

QUADRANT_TITLES: dict[int, tuple[str, str]] = {
    1: ("Urgent & Important", "Do First"),
    2: ("Not Urgent & Important", "Schedule"),
    3: ("Urgent & Not Important", "Delegate"),
    4: ("Not Urgent & Not Important", "Eliminate"),
}


def validate_status(status: str) -> str:
    if status not in STATUS_ORDER:
        raise ValueError(
            f"Unknown status {status!r}; expected one of {', '.join(TASK_STATUSES)}"
        )
    return status


def place_in_column(
    tasks: list[Task], moved: Task, status: str, index: int | None = None
) -> list[Task]:
    """Return the board with ``moved`` placed at ``index`` of its column.

    ``tasks`` is the board in display order and must not contain ``moved``.
    Columns are laid out in status order; a missing or too-large index puts
    the task at the bottom of the column.
    """
    columns: dict[str, list[Task]] = {s: [] for s in TASK_STATUSES}
    others: list[Task] = []
    for task in tasks:
        columns.get(task.status, others).append(task)

    column = columns[status]
    if index is None or index > len(column):
        index = len(column)
    column.insert(max(index, 0), moved)

    ordered: list[Task] = []
    for s in TASK_STATUSES:
        ordered.extend(columns[s])
    return ordered + others


class BoardService:
    """Manual task board with write-through persistence."""

    def __init__(self, store: BoardTaskStore) -> None:
        self._store = store
        self._tasks: list[Task] = store.load()

    def _persist(self) -> bool:
        ok = self._store.save(self._tasks)
        if not ok:
            logger.warning("Board changes kept in memory only")
        return ok

    def _find(self, task_id: str) -> int | None:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        return None

    def list_tasks(self) -> list[Task]:
        return list(self._tasks)

    def tasks_by_status(self) -> dict[str, list[Task]]:
        board: dict[str, list[Task]] = {s: [] for s in TASK_STATUSES}
        for task in self._tasks:
            if task.status in board:
                board[task.status].append(task)
        return board

    def tasks_by_quadrant(self) -> dict[int, list[Task]]:
        matrix: dict[int, list[Task]] = {q: [] for q in QUADRANT_TITLES}
        for task in self._tasks:
            matrix.get(task.quadrant or DEFAULT_QUADRANT, matrix[DEFAULT_QUADRANT]).append(task)
        return matrix

    def add_task(self, text: str) -> Task:
        text = text.strip()
        if not text:
            raise ValueError("Task text must not be empty")
        now_ms = int(time.time() * 1000)
        task = Task(
            id=f"task-{now_ms}-{len(self._tasks)}",
            text=text,
            status=TO_DO,
            quadrant=DEFAULT_QUADRANT,
            last_updated=now_ms,
        )
        self._tasks.append(task)
        self._persist()
        logger.info("Task added: %s", task.id)
        return task

    def move_task(self, task_id: str, status: str, index: int | None = None) -> Task | None:
        validate_status(status)
        i = self._find(task_id)
        if i is None:
            return None
        moved = replace(
            self._tasks[i], status=status, last_updated=int(time.time() * 1000)
        )
        rest = self._tasks[:i] + self._tasks[i + 1:]
        self._tasks = place_in_column(rest, moved, status, index)
        self._persist()
        return moved

    def set_quadrant(self, task_id: str, quadrant: int) -> Task | None:
        if quadrant not in QUADRANT_TITLES:
            raise ValueError(f"Quadrant must be 1-4, got {quadrant}")
        i = self._find(task_id)
        if i is None:
            return None
        self._tasks[i] = replace(
            self._tasks[i], quadrant=quadrant, last_updated=int(time.time() * 1000)
        )
        self._persist()
        return self._tasks[i]

    def delete_task(self, task_id: str) -> bool:
        i = self._find(task_id)
        if i is None:
            return False
        del self._tasks[i]
        self._persist()
        logger.info("Task deleted: %s", task_id)
        return True

    def clear(self) -> bool:
        self._tasks = []
        return self._store.clear()
