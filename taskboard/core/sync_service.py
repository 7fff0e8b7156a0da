"""
Task Board — Calendar sync orchestration.

One sync = fetch the event window → convert events to task drafts → merge
them into the stored calendar tasks → store the result. Every failure mode
comes back as a SyncResult instead of an exception, so the caller can tell
"sign in again" apart from "try again".

Only one sync runs at a time: a sync requested while another is in flight
is dropped (not queued) and reported as SKIPPED.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

from taskboard.core.board import place_in_column, validate_status
from taskboard.core.converter import events_to_tasks
from taskboard.core.reconciler import TWO_HOURS_MS, merge_tasks
from taskboard.data.task_store import sort_tasks
from taskboard.ports.calendar_port import CalendarAuthError, CalendarError

if TYPE_CHECKING:
    from taskboard.data.models import Task
    from taskboard.data.task_store import CalendarTaskStore
    from taskboard.ports.calendar_port import CalendarPort

logger = logging.getLogger(__name__)


class SyncStatus(Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    AUTH_REQUIRED = "auth_required"
    FETCH_FAILED = "fetch_failed"


@dataclass
class SyncResult:
    status: SyncStatus
    tasks: list[Task] = field(default_factory=list)
    stored: bool = False
    error_message: str = ""


class CalendarSyncService:
    """Keeps the stored calendar tasks in step with Google Calendar."""

    def __init__(
        self,
        calendar: CalendarPort,
        task_store: CalendarTaskStore,
        *,
        recency_ms: int = TWO_HOURS_MS,
        default_days: int = 1,
    ) -> None:
        self._calendar = calendar
        self._store = task_store
        self._recency_ms = recency_ms
        self._default_days = default_days
        self._sync_in_progress = False
        # Set when the last write failed; in-memory state wins until a write succeeds.
        self._unsaved: list[Task] | None = None

    @property
    def sync_in_progress(self) -> bool:
        return self._sync_in_progress

    def list_tasks(self) -> list[Task]:
        if self._unsaved is not None:
            return list(self._unsaved)
        return self._store.load()

    def _save(self, tasks: list[Task]) -> tuple[list[Task], bool]:
        """Store tasks; return them as the board will show them, and the write status."""
        positioned = [replace(t, position=i) for i, t in enumerate(tasks)]
        stored = self._store.store(tasks)
        ordered = sort_tasks(positioned)
        self._unsaved = None if stored else ordered
        if not stored:
            logger.warning("Calendar tasks kept in memory only")
        return ordered, stored

    async def sync(
        self, access_token: str | None, days: int | None = None
    ) -> SyncResult:
        if self._sync_in_progress:
            logger.info("Calendar sync already running; request dropped")
            return SyncResult(status=SyncStatus.SKIPPED, tasks=self.list_tasks())

        days = days or self._default_days
        self._sync_in_progress = True
        try:
            try:
                listing = await self._calendar.list_events(access_token, days)
            except CalendarAuthError as exc:
                logger.info("Calendar sync needs sign-in: %s", exc)
                return SyncResult(
                    status=SyncStatus.AUTH_REQUIRED,
                    tasks=self.list_tasks(),
                    error_message=str(exc),
                )
            except CalendarError as exc:
                logger.error("Calendar sync failed: %s", exc)
                return SyncResult(
                    status=SyncStatus.FETCH_FAILED,
                    tasks=self.list_tasks(),
                    error_message=str(exc),
                )

            now_ms = int(time.time() * 1000)
            existing = self.list_tasks()
            incoming = events_to_tasks(listing.events, existing, now_ms=now_ms)
            merged = merge_tasks(
                existing, incoming, now_ms=now_ms, recency_ms=self._recency_ms
            )
            tasks, stored = self._save(merged)
            logger.info(
                "Calendar sync done: %d event(s), %d task(s) on board",
                len(listing.events),
                len(tasks),
            )
            return SyncResult(status=SyncStatus.SUCCESS, tasks=tasks, stored=stored)
        finally:
            self._sync_in_progress = False

    def move_task(
        self, task_id: str, status: str, index: int | None = None
    ) -> Task | None:
        """Drag a calendar task to ``status``, at ``index`` within that column.

        Stamps ``last_updated`` so the next sync leaves the card alone for
        the recency window.
        """
        validate_status(status)
        tasks = self.list_tasks()
        for i, task in enumerate(tasks):
            if task.id == task_id:
                break
        else:
            return None

        moved = replace(task, status=status, last_updated=int(time.time() * 1000))
        rest = tasks[:i] + tasks[i + 1:]
        ordered, _ = self._save(place_in_column(rest, moved, status, index))
        return next(t for t in ordered if t.id == task_id)
