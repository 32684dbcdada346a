"""Fetch single-occurrence events for one calendar and one time window."""

from __future__ import annotations

import asyncio
import datetime
import logging
from typing import Any, Optional, Protocol

from googleapiclient.errors import HttpError
from pydantic import ValidationError

from family_dashboard.calendar.models import FetchedEvent
from family_dashboard.core.exceptions import CalendarFetchError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 250


class CalendarFetcher(Protocol):
    """Calendar backend contract consumed by the snapshot builder.

    Implementations return events in ``[start, end)`` with deleted events
    excluded and recurring series expanded into single occurrences, ordered
    by start time. Failures raise CalendarFetchError.
    """

    async def fetch_events(
        self, calendar_id: str, start: datetime.datetime, end: datetime.datetime
    ) -> list[FetchedEvent]: ...


class GoogleCalendarFetcher:
    """CalendarFetcher backed by the Google Calendar v3 API.

    The API client is blocking and not thread-safe, so each fetch runs in
    the default executor and callers must not fetch concurrently.
    """

    def __init__(self, service: Any, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._service = service
        self._page_size = page_size

    def _list_events(self, calendar_id: str, time_min: str, time_max: str) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        page_token: Optional[str] = None

        while True:
            response = (
                self._service.events()
                .list(
                    calendarId=calendar_id,
                    showDeleted=False,
                    singleEvents=True,
                    timeMin=time_min,
                    timeMax=time_max,
                    orderBy="startTime",
                    maxResults=self._page_size,
                    pageToken=page_token,
                )
                .execute()
            )
            items.extend(response.get("items", []))
            page_token = response.get("nextPageToken")
            if not page_token:
                return items

    async def fetch_events(
        self, calendar_id: str, start: datetime.datetime, end: datetime.datetime
    ) -> list[FetchedEvent]:
        """Fetch and validate the events of ``calendar_id`` in ``[start, end)``.

        Records that do not match the expected event shape are skipped.

        Raises:
            CalendarFetchError: on any API, network or auth failure
        """
        loop = asyncio.get_running_loop()
        try:
            raw_items = await loop.run_in_executor(
                None, self._list_events, calendar_id, start.isoformat(), end.isoformat()
            )
        except HttpError as exc:
            status = getattr(exc.resp, "status", "?")
            raise CalendarFetchError(calendar_id, f"Google API error {status}: {exc}") from exc
        except Exception as exc:
            raise CalendarFetchError(calendar_id, str(exc) or exc.__class__.__name__) from exc

        events: list[FetchedEvent] = []
        for item in raw_items:
            try:
                events.append(FetchedEvent.model_validate(item))
            except ValidationError as exc:
                item_id = item.get("id") if isinstance(item, dict) else None
                logger.warning("Skipping malformed event %r from %s: %s", item_id, calendar_id, exc)

        logger.debug("Fetched %d events from %s", len(events), calendar_id)
        return events
