"""Sunday-to-Saturday week boundaries in the process's local time zone."""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

from family_dashboard.calendar.models import DAY_LABELS

DAYS_PER_WEEK = len(DAY_LABELS)


def now_local() -> datetime.datetime:
    """Current time as an aware datetime in the local zone."""
    return datetime.datetime.now().astimezone()


def to_local(instant: datetime.datetime) -> datetime.datetime:
    """Interpret naive values as local wall-clock time, convert aware ones to local."""
    return instant.astimezone()


def local_midnight(day: datetime.date) -> datetime.datetime:
    """Aware local midnight at the start of ``day``.

    Built from the calendar date rather than by subtracting a duration, so
    the result stays on midnight across daylight-saving transitions.
    """
    return datetime.datetime.combine(day, datetime.time.min).astimezone()


@dataclass(frozen=True)
class WeekWindow:
    """Half-open interval ``[start, end)`` covering one Sunday-first week.

    Attributes:
        start: Local midnight of the week's Sunday
        end: Local midnight of the following Sunday
        day_keys: Maps each date in the week (YYYY-MM-DD) to 0 (Sunday)..6 (Saturday)
    """

    start: datetime.datetime
    end: datetime.datetime
    day_keys: Mapping[str, int]

    def index_for(self, day_key: str) -> Optional[int]:
        """Bucket index for ``day_key``, or None if the date is outside the week."""
        return self.day_keys.get(day_key)

    def contains(self, instant: datetime.datetime) -> bool:
        return self.start <= to_local(instant) < self.end

    @property
    def dates(self) -> tuple[datetime.date, ...]:
        return tuple(
            self.start.date() + datetime.timedelta(days=offset) for offset in range(DAYS_PER_WEEK)
        )


def week_boundaries(now: datetime.datetime) -> WeekWindow:
    """Compute the current week containing ``now``.

    Args:
        now: Reference instant. Naive values are local wall-clock time.

    Returns:
        WeekWindow starting at the most recent Sunday's local midnight
    """
    today = to_local(now).date()
    # date.weekday() is Monday=0..Sunday=6; shift so Sunday=0.
    days_since_sunday = (today.weekday() + 1) % DAYS_PER_WEEK
    first_day = today - datetime.timedelta(days=days_since_sunday)

    day_keys = {
        (first_day + datetime.timedelta(days=offset)).isoformat(): offset
        for offset in range(DAYS_PER_WEEK)
    }

    return WeekWindow(
        start=local_midnight(first_day),
        end=local_midnight(first_day + datetime.timedelta(days=DAYS_PER_WEEK)),
        day_keys=MappingProxyType(day_keys),
    )
