"""Data models for calendar configuration, fetched events and weekly snapshots.

Snapshot models are frozen and serialize with the field names the wall
display's front-end polls for (``memberCalendars``, ``dayName``, ...).
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DAY_LABELS: tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


class CalendarConfig(BaseModel):
    """One configured calendar: display name plus Google calendar id."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Column heading on the dashboard")
    id: str = Field(..., description="Google calendar id, e.g. an email address")


class CalendarList(BaseModel):
    """Top-level shape of the calendar list file."""

    calendars: list[CalendarConfig]


class EventDateTime(BaseModel):
    """Start or original-start of a Google Calendar event.

    All-day events carry ``date`` (YYYY-MM-DD); timed events carry
    ``dateTime`` (RFC 3339).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    date: Optional[str] = None
    date_time: Optional[str] = Field(default=None, alias="dateTime")
    time_zone: Optional[str] = Field(default=None, alias="timeZone")


class FetchedEvent(BaseModel):
    """A single-occurrence event as returned by the calendar backend."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    summary: str = ""
    start: Optional[EventDateTime] = None
    original_start_time: Optional[EventDateTime] = Field(default=None, alias="originalStartTime")
    recurring_event_id: Optional[str] = Field(default=None, alias="recurringEventId")


class Event(BaseModel):
    """An event placed in a day bucket."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., alias="eventId")
    title: str = Field(..., alias="eventName")
    day_key: date = Field(..., alias="dayKey")


class DayBucket(BaseModel):
    """Events of one weekday, in fetch (start time) order."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str = Field(..., alias="dayName")
    events: tuple[Event, ...] = ()


class CalendarSnapshot(BaseModel):
    """One calendar's week: exactly seven buckets, Sunday first."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    calendar_name: str = Field(..., alias="memberName")
    days: tuple[DayBucket, ...]

    @field_validator("days")
    @classmethod
    def _seven_days(cls, days: tuple[DayBucket, ...]) -> tuple[DayBucket, ...]:
        if len(days) != len(DAY_LABELS):
            raise ValueError(f"expected {len(DAY_LABELS)} day buckets, got {len(days)}")
        return days

    @classmethod
    def empty(cls, calendar_name: str) -> "CalendarSnapshot":
        """Calendar with seven labeled, empty buckets."""
        return cls(
            calendar_name=calendar_name,
            days=tuple(DayBucket(label=label) for label in DAY_LABELS),
        )

    @property
    def event_count(self) -> int:
        return sum(len(day.events) for day in self.days)


class FamilySnapshot(BaseModel):
    """The complete weekly bucketing for every configured calendar.

    This is the only state visible to HTTP readers. Instances are never
    mutated; each refresh builds a new one.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    calendars: tuple[CalendarSnapshot, ...] = Field(default=(), alias="memberCalendars")
    week_start: Optional[datetime] = Field(default=None, alias="weekStart")
    week_end: Optional[datetime] = Field(default=None, alias="weekEnd")
    generated_at: Optional[datetime] = Field(default=None, alias="generatedAt")
    dropped_events: int = Field(default=0, alias="droppedEvents")

    @classmethod
    def empty(cls, configs: Any = ()) -> "FamilySnapshot":
        """Placeholder snapshot: every calendar present with empty buckets."""
        return cls(calendars=tuple(CalendarSnapshot.empty(cfg.name) for cfg in configs))

    @property
    def event_count(self) -> int:
        return sum(cal.event_count for cal in self.calendars)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict using the front-end's field names."""
        return self.model_dump(mode="json", by_alias=True)
