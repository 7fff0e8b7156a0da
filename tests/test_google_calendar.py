"""Tests for the Google Calendar adapter.

All Google API calls are mocked.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import httplib2
import pytest
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from taskboard.adapters.google_calendar import (
    GoogleCalendarAdapter,
    _window_bounds,
    resolve_event_colors,
)
from taskboard.ports.calendar_port import CalendarAuthError, CalendarFetchError

_PATCH_BUILD = "taskboard.adapters.google_calendar._build_service"

PALETTE = {
    "event": {
        "5": {"background": "#fbd75b", "foreground": "#1d1d1d"},
        "11": {"background": "#dc2127", "foreground": "#1d1d1d"},
    }
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mock_service(pages=None, palette=None):
    """Create a mock Google Calendar service returning the given event pages."""
    service = MagicMock()
    service.colors.return_value.get.return_value.execute.return_value = (
        palette if palette is not None else PALETTE
    )
    list_call = service.events.return_value.list
    list_call.return_value.execute.side_effect = pages or [{"items": []}]
    return service


def _http_error(status):
    return HttpError(
        resp=httplib2.Response({"status": status}),
        content=b'{"error": {"message": "nope"}}',
    )


# ---------------------------------------------------------------------------
# Window and colors
# ---------------------------------------------------------------------------


class TestWindowBounds:
    def test_starts_at_midnight_today(self):
        now = datetime(2026, 2, 14, 15, 30, tzinfo=timezone.utc)
        start, end = _window_bounds(1, now=now)
        assert start == "2026-02-14T00:00:00+00:00"
        assert end == "2026-02-15T00:00:00+00:00"

    def test_week_window(self):
        now = datetime(2026, 2, 14, 8, 0, tzinfo=timezone.utc)
        start, end = _window_bounds(7, now=now)
        assert end == "2026-02-21T00:00:00+00:00"


class TestResolveEventColors:
    def test_palette_lookup(self):
        assert resolve_event_colors({"colorId": "11"}, PALETTE) == ("#dc2127", "#1d1d1d")

    def test_default_when_no_color_id(self):
        assert resolve_event_colors({}, PALETTE) == ("#265073", "#FFFFFF")

    def test_default_when_color_id_unknown(self):
        assert resolve_event_colors({"colorId": "99"}, PALETTE) == ("#265073", "#FFFFFF")

    def test_default_when_palette_empty(self):
        assert resolve_event_colors({"colorId": "5"}, {}) == ("#265073", "#FFFFFF")


# ---------------------------------------------------------------------------
# list_events
# ---------------------------------------------------------------------------


class TestListEvents:
    @pytest.mark.asyncio
    async def test_returns_events_with_colors(self):
        items = [
            {
                "id": "e1",
                "summary": "Standup",
                "start": {"dateTime": "2026-02-14T09:00:00Z"},
                "end": {"dateTime": "2026-02-14T09:15:00Z"},
                "status": "confirmed",
                "colorId": "5",
            },
            {
                "id": "e2",
                "summary": "Lunch",
                "start": {"dateTime": "2026-02-14T12:00:00Z"},
                "end": {"dateTime": "2026-02-14T13:00:00Z"},
            },
        ]
        mock_svc = _mock_service(pages=[{"items": items}])
        with patch(_PATCH_BUILD, return_value=mock_svc):
            listing = await GoogleCalendarAdapter().list_events("token", days=1)

        assert [e.id for e in listing.events] == ["e1", "e2"]
        assert listing.events[0].background_color == "#fbd75b"
        assert listing.events[0].foreground_color == "#1d1d1d"
        assert listing.events[1].background_color == "#265073"
        assert listing.events[1].foreground_color == "#FFFFFF"
        assert listing.colors == PALETTE

    @pytest.mark.asyncio
    async def test_lists_primary_calendar_single_events_by_start(self):
        mock_svc = _mock_service()
        with patch(_PATCH_BUILD, return_value=mock_svc):
            await GoogleCalendarAdapter().list_events("token", days=7)

        kwargs = mock_svc.events.return_value.list.call_args.kwargs
        assert kwargs["calendarId"] == "primary"
        assert kwargs["singleEvents"] is True
        assert kwargs["orderBy"] == "startTime"
        start = datetime.fromisoformat(kwargs["timeMin"])
        end = datetime.fromisoformat(kwargs["timeMax"])
        assert (end - start).days == 7
        assert (start.hour, start.minute) == (0, 0)

    @pytest.mark.asyncio
    async def test_follows_pagination(self):
        pages = [
            {"items": [{"id": "e1", "summary": "A"}], "nextPageToken": "p2"},
            {"items": [{"id": "e2", "summary": "B"}]},
        ]
        mock_svc = _mock_service(pages=pages)
        with patch(_PATCH_BUILD, return_value=mock_svc):
            listing = await GoogleCalendarAdapter().list_events("token")

        assert [e.id for e in listing.events] == ["e1", "e2"]
        second_call = mock_svc.events.return_value.list.call_args_list[1]
        assert second_call.kwargs["pageToken"] == "p2"

    @pytest.mark.asyncio
    async def test_empty_calendar(self):
        with patch(_PATCH_BUILD, return_value=_mock_service()):
            listing = await GoogleCalendarAdapter().list_events("token")
        assert listing.events == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, ""])
    async def test_missing_token_is_auth_error(self, token):
        with patch(_PATCH_BUILD) as mock_build:
            with pytest.raises(CalendarAuthError):
                await GoogleCalendarAdapter().list_events(token)
        mock_build.assert_not_called()

    @pytest.mark.asyncio
    async def test_401_is_auth_error(self):
        mock_svc = _mock_service()
        mock_svc.colors.return_value.get.return_value.execute.side_effect = _http_error(401)
        with patch(_PATCH_BUILD, return_value=mock_svc):
            with pytest.raises(CalendarAuthError):
                await GoogleCalendarAdapter().list_events("expired")

    @pytest.mark.asyncio
    async def test_refresh_error_is_auth_error(self):
        mock_svc = _mock_service()
        mock_svc.events.return_value.list.return_value.execute.side_effect = RefreshError("no refresh")
        with patch(_PATCH_BUILD, return_value=mock_svc):
            with pytest.raises(CalendarAuthError):
                await GoogleCalendarAdapter().list_events("expired")

    @pytest.mark.asyncio
    async def test_500_is_fetch_error(self):
        mock_svc = _mock_service()
        mock_svc.events.return_value.list.return_value.execute.side_effect = _http_error(500)
        with patch(_PATCH_BUILD, return_value=mock_svc):
            with pytest.raises(CalendarFetchError):
                await GoogleCalendarAdapter().list_events("token")

    @pytest.mark.asyncio
    async def test_transport_failure_is_fetch_error(self):
        mock_svc = _mock_service()
        mock_svc.colors.return_value.get.return_value.execute.side_effect = OSError("network down")
        with patch(_PATCH_BUILD, return_value=mock_svc):
            with pytest.raises(CalendarFetchError, match="network down"):
                await GoogleCalendarAdapter().list_events("token")

    @pytest.mark.asyncio
    async def test_rejects_non_positive_window(self):
        with pytest.raises(ValueError):
            await GoogleCalendarAdapter().list_events("token", days=0)
