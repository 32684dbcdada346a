"""Shared fixtures for family_dashboard tests."""

from __future__ import annotations

import asyncio
import datetime
import time
from collections.abc import Callable, Generator
from typing import Any, Optional

import pytest

from family_dashboard.calendar.models import CalendarConfig, FetchedEvent
from family_dashboard.core.exceptions import CalendarFetchError

# Wednesday in the week of Sunday 2024-06-09 .. Saturday 2024-06-15.
REFERENCE_NOW = datetime.datetime(2024, 6, 12, 10, 30)

# US Pacific rules as a POSIX TZ string so tests do not need the tz database.
PACIFIC_POSIX_TZ = "PST8PDT,M3.2.0,M11.1.0"


class FakeFetcher:
    """In-memory CalendarFetcher.

    ``events`` maps calendar id to the list returned for it; ``errors`` maps
    calendar id to the exception raised instead. ``gate`` (if set) blocks
    every fetch until the test releases it.
    """

    def __init__(
        self,
        events: Optional[dict[str, list[FetchedEvent]]] = None,
        errors: Optional[dict[str, Exception]] = None,
    ) -> None:
        self.events = events or {}
        self.errors = errors or {}
        self.calls: list[tuple[str, datetime.datetime, datetime.datetime]] = []
        self.gate: Optional[asyncio.Event] = None
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_events(
        self, calendar_id: str, start: datetime.datetime, end: datetime.datetime
    ) -> list[FetchedEvent]:
        self.calls.append((calendar_id, start, end))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if calendar_id in self.errors:
                raise self.errors[calendar_id]
            return list(self.events.get(calendar_id, []))
        finally:
            self.in_flight -= 1


@pytest.fixture
def reference_now() -> datetime.datetime:
    return REFERENCE_NOW


@pytest.fixture
def calendars() -> tuple[CalendarConfig, ...]:
    return (
        CalendarConfig(name="Alice", id="a1"),
        CalendarConfig(name="Bob", id="b2"),
    )


@pytest.fixture
def make_event() -> Callable[..., FetchedEvent]:
    """Factory for FetchedEvent records in Google Calendar's JSON shape."""

    def _make(
        event_id: str = "e1",
        summary: str = "Event",
        *,
        date: Optional[str] = None,
        date_time: Optional[str] = None,
        original_date: Optional[str] = None,
        original_date_time: Optional[str] = None,
    ) -> FetchedEvent:
        raw: dict[str, Any] = {"id": event_id, "summary": summary}
        start = {k: v for k, v in (("date", date), ("dateTime", date_time)) if v}
        if start:
            raw["start"] = start
        original = {
            k: v for k, v in (("date", original_date), ("dateTime", original_date_time)) if v
        }
        if original:
            raw["originalStartTime"] = original
        return FetchedEvent.model_validate(raw)

    return _make


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def failing_fetch_error() -> CalendarFetchError:
    return CalendarFetchError("b2", "Google API error 503: backend unavailable")


@pytest.fixture
def pacific_time(monkeypatch: pytest.MonkeyPatch) -> Generator[None, Any, None]:
    """Run the test with US Pacific as the process's local zone."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset() is not available on this platform")
    monkeypatch.setenv("TZ", PACIFIC_POSIX_TZ)
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture(autouse=True)
def clean_dashboard_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep FAMILY_DASHBOARD_* variables from the host out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("FAMILY_DASHBOARD_"):
            monkeypatch.delenv(key, raising=False)
