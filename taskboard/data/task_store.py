"""
Task Board — Task persistence on top of a KeyValueStore.

Two keys are used:
- ``calendarTasks``: calendar-derived (and reconciled) tasks, with positions.
- ``tasks``: the manual board, ``{id, text, status, quadrant}`` entries.

Both loaders are tolerant: an absent, unreadable or malformed value loads
as an empty board instead of raising, since stored state has no schema
version and older clients may have written it.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from functools import cmp_to_key
from typing import TYPE_CHECKING

from taskboard.data.models import STATUS_ORDER, Task
from taskboard.ports.storage_port import StorageError

if TYPE_CHECKING:
    from taskboard.ports.storage_port import KeyValueStore

logger = logging.getLogger(__name__)

CALENDAR_TASKS_KEY = "calendarTasks"
BOARD_TASKS_KEY = "tasks"
DEFAULT_QUADRANT = 4


def _due_timestamp(task: Task) -> float | None:
    if not task.due_date:
        return None
    try:
        parsed = datetime.fromisoformat(task.due_date.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def compare_tasks(a: Task, b: Task) -> int:
    """Board order: status column, then position, then due date.

    Positions are only compared when both tasks have one; otherwise the
    earlier due date wins and tasks without a due date sink to the end.
    """
    status_diff = STATUS_ORDER.get(a.status, len(STATUS_ORDER)) - STATUS_ORDER.get(
        b.status, len(STATUS_ORDER)
    )
    if status_diff:
        return status_diff

    if a.position is not None and b.position is not None:
        return a.position - b.position

    due_a, due_b = _due_timestamp(a), _due_timestamp(b)
    if due_a is None and due_b is None:
        return 0
    if due_a is None:
        return 1
    if due_b is None:
        return -1
    return (due_a > due_b) - (due_a < due_b)


def sort_tasks(tasks: list[Task]) -> list[Task]:
    return sorted(tasks, key=cmp_to_key(compare_tasks))


def _read_entries(kv: KeyValueStore, key: str) -> list[dict]:
    """Raw JSON list stored under key; [] on any read or parse problem."""
    try:
        raw = kv.get_item(key)
    except StorageError as exc:
        logger.error("Could not read %s: %s", key, exc)
        return []
    if not raw:
        return []
    try:
        entries = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Stored %s is not valid JSON (%s); treating as empty", key, exc)
        return []
    if not isinstance(entries, list):
        logger.warning("Stored %s is not a list; treating as empty", key)
        return []
    return entries


def _write_entries(kv: KeyValueStore, key: str, tasks: list[Task]) -> bool:
    try:
        payload = json.dumps([t.to_dict() for t in tasks])
        kv.set_item(key, payload)
    except (TypeError, ValueError, StorageError) as exc:
        logger.error("Error storing %s: %s", key, exc)
        return False
    return True


class CalendarTaskStore:
    """Persistence for reconciled calendar tasks."""

    def __init__(self, kv: KeyValueStore, key: str = CALENDAR_TASKS_KEY) -> None:
        self._kv = kv
        self._key = key

    def store(self, tasks: list[Task]) -> bool:
        """Persist tasks in the given order.

        Every task's position is reassigned to its index, so the caller
        decides the final order. Returns False if the write failed.
        """
        positioned = [replace(task, position=index) for index, task in enumerate(tasks)]
        ok = _write_entries(self._kv, self._key, positioned)
        if ok:
            logger.debug("Stored %d calendar task(s)", len(tasks))
        return ok

    def load(self) -> list[Task]:
        tasks: list[Task] = []
        for entry in _read_entries(self._kv, self._key):
            try:
                tasks.append(Task.from_dict(entry))
            except ValueError as exc:
                logger.warning("Skipping malformed calendar task: %s", exc)
        return sort_tasks(tasks)


class BoardTaskStore:
    """Persistence for the manual board (kanban + Eisenhower matrix)."""

    def __init__(self, kv: KeyValueStore, key: str = BOARD_TASKS_KEY) -> None:
        self._kv = kv
        self._key = key

    def save(self, tasks: list[Task]) -> bool:
        return _write_entries(self._kv, self._key, tasks)

    def load(self) -> list[Task]:
        """Load manual tasks in stored order.

        Older entries may lack an id or a quadrant; ids are generated and
        the quadrant defaults to 4 ("not urgent, not important").
        """
        now_ms = int(time.time() * 1000)
        tasks: list[Task] = []
        for n, entry in enumerate(_read_entries(self._kv, self._key)):
            if isinstance(entry, dict) and not entry.get("id"):
                entry = {**entry, "id": f"task-{now_ms}-{n}"}
            try:
                task = Task.from_dict(entry)
            except ValueError as exc:
                logger.warning("Skipping malformed board task: %s", exc)
                continue
            if task.quadrant is None:
                task.quadrant = DEFAULT_QUADRANT
            tasks.append(task)
        return tasks

    def clear(self) -> bool:
        try:
            self._kv.remove_item(self._key)
        except StorageError as exc:
            logger.error("Error clearing %s: %s", self._key, exc)
            return False
        return True
