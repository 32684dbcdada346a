"""Resolve the calendar date an event is bucketed under."""

from __future__ import annotations

from typing import Optional

from family_dashboard.calendar.models import EventDateTime, FetchedEvent

DATE_KEY_LENGTH = len("YYYY-MM-DD")


def _date_portion(value: Optional[EventDateTime]) -> str:
    if value is None:
        return ""
    if value.date:
        return value.date
    if value.date_time:
        return value.date_time[:DATE_KEY_LENGTH]
    return ""


def extract_day_key(event: FetchedEvent) -> str:
    """Return the YYYY-MM-DD day key for ``event``, or "" if it has none.

    A moved instance of a recurring series is keyed by its original
    scheduled date so it stays in the weekday slot the family expects.
    Otherwise the event's own start is used. Date-only values win over
    date-times within each of the two sources.

    Date-times are not converted between zones; the date is taken as
    written by the calendar backend.
    """
    return _date_portion(event.original_start_time) or _date_portion(event.start)
