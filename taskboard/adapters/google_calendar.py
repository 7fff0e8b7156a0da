"""Google Calendar adapter — implements CalendarPort for Google Calendar API.

All Google-specific logic lives here. Core modules never import this directly;
they depend on the CalendarPort protocol.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from taskboard.config import settings
from taskboard.data.models import CalendarEvent, EventListing
from taskboard.ports.calendar_port import CalendarAuthError, CalendarFetchError

logger = logging.getLogger(__name__)


def _window_bounds(days: int, now: datetime | None = None) -> tuple[str, str]:
    """[start of today, start of today + days) in the calendar time zone."""
    tz = ZoneInfo(settings.TIMEZONE)
    now = now.astimezone(tz) if now is not None else datetime.now(tz)
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = start + timedelta(days=days)
    return start.isoformat(), end.isoformat()


def resolve_event_colors(item: dict, palette: dict) -> tuple[str, str]:
    """Background/foreground for an event, by colorId lookup in the palette."""
    color_id = item.get("colorId")
    entry = (palette.get("event") or {}).get(color_id) if color_id else None
    entry = entry or {}
    return (
        entry.get("background") or settings.DEFAULT_EVENT_BACKGROUND,
        entry.get("foreground") or settings.DEFAULT_EVENT_FOREGROUND,
    )


def _http_status(exc: HttpError) -> int | None:
    status = getattr(exc, "status_code", None)
    if status is None and getattr(exc, "resp", None) is not None:
        status = getattr(exc.resp, "status", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def _build_service(access_token: str):
    creds = Credentials(token=access_token)
    return build("calendar", "v3", credentials=creds, cache_discovery=False)


class GoogleCalendarAdapter:
    """Google Calendar implementation of CalendarPort."""

    def __init__(self, calendar_id: str = "primary") -> None:
        self._calendar_id = calendar_id

    async def list_events(
        self, access_token: str | None, days: int = 1
    ) -> EventListing:
        if days < 1:
            raise ValueError(f"days must be >= 1, got {days}")
        if not access_token:
            raise CalendarAuthError("No access token — sign in with Google first")

        try:
            return await asyncio.to_thread(self._list_events_sync, access_token, days)
        except HttpError as exc:
            status = _http_status(exc)
            if status == 401:
                logger.info("Google Calendar rejected the access token")
                raise CalendarAuthError("Access token was rejected") from exc
            logger.error("Google Calendar API error (%s): %s", status, exc)
            raise CalendarFetchError(f"Failed to fetch events: {exc}") from exc
        except RefreshError as exc:
            logger.info("Google Calendar credentials expired: %s", exc)
            raise CalendarAuthError("Access token expired") from exc
        except Exception as exc:
            logger.error("Failed to fetch calendar events: %s", exc)
            raise CalendarFetchError(f"Failed to fetch events: {exc}") from exc

    def _list_events_sync(self, access_token: str, days: int) -> EventListing:
        service = _build_service(access_token)
        palette = service.colors().get().execute()
        time_min, time_max = _window_bounds(days)

        items: list[dict] = []
        page_token: str | None = None
        while True:
            result = (
                service.events()
                .list(
                    calendarId=self._calendar_id,
                    timeMin=time_min,
                    timeMax=time_max,
                    singleEvents=True,
                    orderBy="startTime",
                    pageToken=page_token,
                )
                .execute()
            )
            items.extend(result.get("items", []))
            page_token = result.get("nextPageToken")
            if not page_token:
                break

        events = []
        for item in items:
            background, foreground = resolve_event_colors(item, palette)
            event = CalendarEvent.from_api(item)
            event.background_color = background
            event.foreground_color = foreground
            events.append(event)

        logger.info(
            "Fetched %d event(s) between %s and %s", len(events), time_min, time_max
        )
        return EventListing(events=events, colors=palette)
