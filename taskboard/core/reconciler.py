"""
Task Board — Calendar task reconciliation.

Merges freshly converted calendar tasks into the stored board without
clobbering what the user did on the board:

- unseen events are appended at the end;
- known events get their content (title, due date, colors) refreshed, but
  keep the board's status, position and last edit time;
- known events edited within the recency threshold are left alone, so a
  sync that races a drag-and-drop does not undo the drag.

Nothing is ever removed: manual tasks and calendar tasks whose event left
the fetch window stay exactly as they were.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace

from taskboard.data.models import Task

logger = logging.getLogger(__name__)

TWO_HOURS_MS = 2 * 60 * 60 * 1000


def _is_recent(task: Task, now_ms: int, recency_ms: int) -> bool:
    if not task.last_updated:
        return False
    return now_ms - task.last_updated <= recency_ms


def merge_tasks(
    existing: list[Task],
    incoming: list[Task],
    *,
    now_ms: int | None = None,
    recency_ms: int = TWO_HOURS_MS,
) -> list[Task]:
    """Merge incoming calendar drafts into the existing task list.

    Neither input list (nor any task in it) is modified. The result is in
    insertion order; positions are normalized when the list is stored.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    merged = list(existing)
    index_by_event: dict[str, int] = {}
    for i, task in enumerate(merged):
        if task.event_id is not None:
            index_by_event.setdefault(task.event_id, i)

    added = refreshed = protected = 0
    for new_task in incoming:
        if new_task.event_id is None:
            continue

        i = index_by_event.get(new_task.event_id)
        if i is None:
            index_by_event[new_task.event_id] = len(merged)
            merged.append(replace(new_task, position=len(merged)))
            added += 1
            continue

        current = merged[i]
        if _is_recent(current, now_ms, recency_ms):
            protected += 1
            continue

        merged[i] = replace(
            new_task,
            status=current.status,
            position=current.position,
            last_updated=current.last_updated,
            quadrant=current.quadrant,
        )
        refreshed += 1

    logger.debug(
        "Merged %d incoming task(s): %d added, %d refreshed, %d protected",
        len(incoming),
        added,
        refreshed,
        protected,
    )
    return merged
