"""
Task Board — Data Models.

Tasks live in a local key-value store as JSON; calendar events live in
Google Calendar and are only ever read. The JSON shape of a Task keeps the
camelCase keys the board front-end already persists, so the stored state
stays readable by older clients.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

TO_DO = "To_Do"
DOING = "Doing"
DONE = "Done"

# Column order on the board; load() sorts by this.
STATUS_ORDER: dict[str, int] = {TO_DO: 0, DOING: 1, DONE: 2}
TASK_STATUSES: tuple[str, ...] = tuple(STATUS_ORDER)

REFRESH_TOKEN_ERROR = "RefreshAccessTokenError"


@dataclass
class Grant:
    """One-time token bundle issued by the provider at sign-in."""

    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None   # epoch seconds, provider units


@dataclass
class AuthToken:
    """Server-side OAuth token record.

    ``error`` is set (to REFRESH_TOKEN_ERROR) when the last refresh failed;
    the token must not be used for API calls until the user signs in again.
    """

    access_token: str | None
    refresh_token: str | None = None
    access_token_expires_at_ms: int = 0
    error: str | None = None

    @property
    def is_usable(self) -> bool:
        return bool(self.access_token) and self.error is None


@dataclass
class CalendarEvent:
    """A Google Calendar event, reduced to what the board needs."""

    id: str
    summary: str
    start: dict = field(default_factory=dict)   # {"dateTime"|"date", "timeZone"}
    end: dict = field(default_factory=dict)
    status: str = "confirmed"
    color_id: str | None = None
    background_color: str | None = None
    foreground_color: str | None = None

    @classmethod
    def from_api(cls, item: dict) -> CalendarEvent:
        return cls(
            id=item.get("id", ""),
            summary=item.get("summary", "(no title)"),
            start=dict(item.get("start") or {}),
            end=dict(item.get("end") or {}),
            status=item.get("status", "confirmed"),
            color_id=item.get("colorId"),
            background_color=item.get("backgroundColor"),
            foreground_color=item.get("foregroundColor"),
        )

    @property
    def end_time(self) -> str | None:
        """End as an ISO string; all-day events only carry a date."""
        return self.end.get("dateTime") or self.end.get("date")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "summary": self.summary,
            "start": self.start,
            "end": self.end,
            "status": self.status,
        }
        if self.color_id is not None:
            data["colorId"] = self.color_id
        if self.background_color is not None:
            data["backgroundColor"] = self.background_color
        if self.foreground_color is not None:
            data["foregroundColor"] = self.foreground_color
        return data


@dataclass
class EventListing:
    """Result of one fetch: the events plus the provider's color palette."""

    events: list[CalendarEvent] = field(default_factory=list)
    colors: dict = field(default_factory=dict)


# JSON key ↔ attribute name, in serialization order.
_TASK_FIELDS: tuple[tuple[str, str], ...] = (
    ("id", "id"),
    ("text", "text"),
    ("status", "status"),
    ("dueDate", "due_date"),
    ("eventId", "event_id"),
    ("calendarId", "calendar_id"),
    ("backgroundColor", "background_color"),
    ("foregroundColor", "foreground_color"),
    ("lastUpdated", "last_updated"),
    ("position", "position"),
    ("quadrant", "quadrant"),
)

_OPTIONAL_STR_FIELDS = (
    "status",
    "due_date",
    "event_id",
    "calendar_id",
    "background_color",
    "foreground_color",
)


@dataclass
class Task:
    """A card on the board.

    Manual tasks have no ``event_id``; calendar-derived tasks point back at
    the event they came from (lookup only, the task does not own the event).
    """

    id: str
    text: str
    status: str = TO_DO
    due_date: str | None = None
    event_id: str | None = None
    calendar_id: str | None = None
    background_color: str | None = None
    foreground_color: str | None = None
    last_updated: int | None = None     # epoch ms of the last local edit
    position: int | None = None         # order within its status column
    quadrant: int | None = None         # Eisenhower quadrant 1-4

    @property
    def is_calendar_task(self) -> bool:
        return self.event_id is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for key, attr in _TASK_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Task:
        """Build a Task from its stored JSON shape.

        Raises ValueError when the entry is not a usable task.
        """
        if not isinstance(data, dict):
            raise ValueError(f"task entry must be an object, got {type(data).__name__}")
        task_id = data.get("id")
        text = data.get("text")
        if not isinstance(task_id, str) or not task_id:
            raise ValueError("task entry is missing an id")
        if not isinstance(text, str):
            raise ValueError(f"task {task_id!r} has no text")

        kwargs: dict[str, Any] = {}
        for key, attr in _TASK_FIELDS:
            if key in data and data[key] is not None:
                kwargs[attr] = data[key]
        for attr in _OPTIONAL_STR_FIELDS:
            if attr in kwargs and not isinstance(kwargs[attr], str):
                raise ValueError(f"{attr} must be a string, got {kwargs[attr]!r}")
        for attr in ("last_updated", "position", "quadrant"):
            if attr in kwargs:
                kwargs[attr] = _coerce_int(kwargs[attr], attr)
        return cls(**kwargs)


def _coerce_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    return int(value)
