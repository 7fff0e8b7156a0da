"""Task Board API — FastAPI application factory.

Wires the session manager, the Google Calendar adapter and the task stores
into app.state; the route dependencies read them from there. Tests pass
their own collaborators to create_app().
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI

from taskboard.api.routes import router

if TYPE_CHECKING:
    from taskboard.core.board import BoardService
    from taskboard.core.session import SessionManager
    from taskboard.core.sync_service import CalendarSyncService
    from taskboard.ports.calendar_port import CalendarPort
    from taskboard.ports.storage_port import KeyValueStore

logger = logging.getLogger(__name__)


def create_app(
    *,
    kv_store: KeyValueStore | None = None,
    calendar: CalendarPort | None = None,
    session_manager: SessionManager | None = None,
    sync_service: CalendarSyncService | None = None,
    board_service: BoardService | None = None,
) -> FastAPI:
    """Build the board API; any collaborator not given gets its default."""
    from taskboard.config import settings
    from taskboard.core.board import BoardService
    from taskboard.core.session import SessionManager
    from taskboard.core.sync_service import CalendarSyncService
    from taskboard.data.task_store import BoardTaskStore, CalendarTaskStore

    if kv_store is None:
        from taskboard.adapters.sqlite_store import SQLiteKeyValueStore

        kv_store = SQLiteKeyValueStore(settings.DATABASE_PATH)

    if calendar is None:
        from taskboard.adapters.google_calendar import GoogleCalendarAdapter

        calendar = GoogleCalendarAdapter()

    app = FastAPI(title="Task Board")
    app.state.default_days = settings.CALENDAR_WINDOW_DAYS
    app.state.calendar = calendar
    app.state.session_manager = session_manager or SessionManager()
    app.state.sync_service = sync_service or CalendarSyncService(
        calendar,
        CalendarTaskStore(kv_store),
        recency_ms=settings.RECENCY_THRESHOLD_MINUTES * 60 * 1000,
        default_days=settings.CALENDAR_WINDOW_DAYS,
    )
    app.state.board_service = board_service or BoardService(BoardTaskStore(kv_store))
    app.include_router(router)

    logger.info("Task Board API ready (calendar window: %d day(s))", settings.CALENDAR_WINDOW_DAYS)
    return app
