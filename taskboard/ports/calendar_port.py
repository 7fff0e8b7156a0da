"""Calendar port — abstract interface for reading calendar events.

Core modules depend on this protocol, never on a specific provider.
"""

from __future__ import annotations

from typing import Protocol

from taskboard.data.models import EventListing


class CalendarError(Exception):
    """Raised when any calendar provider operation fails."""


class CalendarAuthError(CalendarError):
    """The access token is missing or was rejected; the user must sign in."""


class CalendarFetchError(CalendarError):
    """The provider failed for a reason unrelated to auth; safe to retry."""


class CalendarPort(Protocol):
    """Abstract calendar interface used by core modules."""

    async def list_events(
        self, access_token: str | None, days: int = 1
    ) -> EventListing: ...
