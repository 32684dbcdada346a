"""Unit tests for family_dashboard.calendar.fetcher."""

from __future__ import annotations

import datetime
from unittest.mock import MagicMock

import pytest
from googleapiclient.errors import HttpError

from family_dashboard.calendar.fetcher import GoogleCalendarFetcher
from family_dashboard.core.exceptions import CalendarFetchError

pytestmark = pytest.mark.unit

START = datetime.datetime(2024, 6, 9, tzinfo=datetime.timezone(datetime.timedelta(hours=-7)))
END = datetime.datetime(2024, 6, 16, tzinfo=datetime.timezone(datetime.timedelta(hours=-7)))


def _service_returning(*pages: dict) -> MagicMock:
    service = MagicMock()
    service.events.return_value.list.return_value.execute.side_effect = list(pages)
    return service


async def test_fetch_events_when_called_then_requests_expanded_ordered_window():
    service = _service_returning({"items": []})
    fetcher = GoogleCalendarFetcher(service)

    await fetcher.fetch_events("a1", START, END)

    service.events.return_value.list.assert_called_once_with(
        calendarId="a1",
        showDeleted=False,
        singleEvents=True,
        timeMin="2024-06-09T00:00:00-07:00",
        timeMax="2024-06-16T00:00:00-07:00",
        orderBy="startTime",
        maxResults=250,
        pageToken=None,
    )


async def test_fetch_events_when_items_returned_then_parsed_in_order():
    service = _service_returning(
        {
            "items": [
                {"id": "e1", "summary": "Dentist", "start": {"date": "2024-06-12"}},
                {
                    "id": "e2",
                    "summary": "Piano",
                    "start": {"dateTime": "2024-06-13T16:00:00-07:00"},
                    "originalStartTime": {"dateTime": "2024-06-11T16:00:00-07:00"},
                },
            ]
        }
    )

    events = await GoogleCalendarFetcher(service).fetch_events("a1", START, END)

    assert [ev.id for ev in events] == ["e1", "e2"]
    assert events[0].start.date == "2024-06-12"
    assert events[1].original_start_time.date_time == "2024-06-11T16:00:00-07:00"


async def test_fetch_events_when_paginated_then_follows_next_page_token():
    service = _service_returning(
        {"items": [{"id": "e1", "start": {"date": "2024-06-10"}}], "nextPageToken": "p2"},
        {"items": [{"id": "e2", "start": {"date": "2024-06-11"}}]},
    )

    events = await GoogleCalendarFetcher(service, page_size=1).fetch_events("a1", START, END)

    assert [ev.id for ev in events] == ["e1", "e2"]
    second_call = service.events.return_value.list.call_args_list[1]
    assert second_call.kwargs["pageToken"] == "p2"
    assert second_call.kwargs["maxResults"] == 1


async def test_fetch_events_when_record_malformed_then_skipped():
    service = _service_returning(
        {
            "items": [
                {"id": "bad", "start": "not-an-object"},
                {"id": "good", "start": {"date": "2024-06-12"}},
            ]
        }
    )

    events = await GoogleCalendarFetcher(service).fetch_events("a1", START, END)

    assert [ev.id for ev in events] == ["good"]


async def test_fetch_events_when_http_error_then_raises_calendar_fetch_error():
    resp = MagicMock(status=404, reason="Not Found")
    service = MagicMock()
    service.events.return_value.list.return_value.execute.side_effect = HttpError(
        resp, b'{"error": {"message": "Not Found"}}'
    )

    with pytest.raises(CalendarFetchError) as exc_info:
        await GoogleCalendarFetcher(service).fetch_events("missing", START, END)

    assert exc_info.value.calendar_id == "missing"
    assert "404" in str(exc_info.value)


async def test_fetch_events_when_network_error_then_raises_calendar_fetch_error():
    service = MagicMock()
    service.events.return_value.list.return_value.execute.side_effect = OSError("timed out")

    with pytest.raises(CalendarFetchError, match="timed out"):
        await GoogleCalendarFetcher(service).fetch_events("a1", START, END)


async def test_fetch_events_when_item_is_not_an_object_then_only_that_item_skipped():
    service = _service_returning(
        {"items": ["oops", None, {"id": "good", "start": {"date": "2024-06-12"}}]}
    )

    events = await GoogleCalendarFetcher(service).fetch_events("a1", START, END)

    assert [ev.id for ev in events] == ["good"]
