"""Shared test fixtures and configuration.

Sets up fake environment variables so taskboard.config doesn't sys.exit(),
and provides common fixtures like in-memory stores and a task factory.
"""

import os

# Patch env vars BEFORE any taskboard imports
os.environ.setdefault("GOOGLE_CLIENT_ID", "fake-client-id-for-tests")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "fake-client-secret-for-tests")
os.environ.setdefault("TIMEZONE", "UTC")
os.environ.setdefault("CALENDAR_WINDOW_DAYS", "1")
os.environ.setdefault("RECENCY_THRESHOLD_MINUTES", "120")

import pytest


@pytest.fixture
def kv():
    """Return an empty in-memory key-value store."""
    from taskboard.adapters.memory_store import MemoryKeyValueStore
    return MemoryKeyValueStore()


@pytest.fixture
def sqlite_kv(tmp_path):
    """Return a SQLiteKeyValueStore backed by a temp file."""
    from taskboard.adapters.sqlite_store import SQLiteKeyValueStore
    return SQLiteKeyValueStore(db_path=str(tmp_path / "test_taskboard.db"))


@pytest.fixture
def calendar_store(kv):
    from taskboard.data.task_store import CalendarTaskStore
    return CalendarTaskStore(kv)


@pytest.fixture
def board_store(kv):
    from taskboard.data.task_store import BoardTaskStore
    return BoardTaskStore(kv)


@pytest.fixture
def make_task():
    """Factory for calendar-derived tasks keyed by event id."""
    from taskboard.data.models import Task

    def _make(event_id, text=None, **kwargs):
        kwargs.setdefault("status", "To_Do")
        return Task(
            id=f"cal_{event_id}",
            text=text if text is not None else f"Event {event_id}",
            event_id=event_id,
            calendar_id="primary",
            **kwargs,
        )

    return _make


@pytest.fixture
def make_event():
    """Factory for CalendarEvent objects."""
    from taskboard.data.models import CalendarEvent

    def _make(event_id, summary="Meeting", end="2026-02-14T11:00:00+00:00", **kwargs):
        return CalendarEvent(
            id=event_id,
            summary=summary,
            start={"dateTime": "2026-02-14T10:00:00+00:00", "timeZone": "UTC"},
            end={"dateTime": end, "timeZone": "UTC"},
            **kwargs,
        )

    return _make
