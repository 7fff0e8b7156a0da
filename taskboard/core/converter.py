"""
Task Board — Calendar event → task conversion.

The task id is derived from the event id, so converting the same event on
every sync always targets the same card. Status, position and the last
edit time belong to the board once a card exists, so they are inherited
from the stored copy instead of being reset.
"""

from __future__ import annotations

import time

from taskboard.data.models import TO_DO, CalendarEvent, Task

CALENDAR_TASK_PREFIX = "cal_"
PRIMARY_CALENDAR_ID = "primary"


def calendar_task_id(event_id: str) -> str:
    return f"{CALENDAR_TASK_PREFIX}{event_id}"


def _find_by_event_id(tasks: list[Task], event_id: str) -> Task | None:
    for task in tasks:
        if task.event_id == event_id:
            return task
    return None


def event_to_task(
    event: CalendarEvent,
    stored_tasks: list[Task],
    *,
    now_ms: int | None = None,
) -> Task:
    """Draft a board task for one calendar event.

    ``stored_tasks`` is only read, never modified.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    existing = _find_by_event_id(stored_tasks, event.id)

    return Task(
        id=calendar_task_id(event.id),
        text=event.summary,
        status=(existing.status if existing else None) or TO_DO,
        due_date=event.end_time,
        event_id=event.id,
        calendar_id=PRIMARY_CALENDAR_ID,
        background_color=event.background_color,
        foreground_color=event.foreground_color,
        last_updated=(existing.last_updated if existing else None) or now_ms,
        position=existing.position if existing else None,
    )


def events_to_tasks(
    events: list[CalendarEvent],
    stored_tasks: list[Task],
    *,
    now_ms: int | None = None,
) -> list[Task]:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return [event_to_task(e, stored_tasks, now_ms=now_ms) for e in events]
