"""Build one weekly FamilySnapshot from the configured calendars."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Sequence

from family_dashboard.calendar.day_key import extract_day_key
from family_dashboard.calendar.fetcher import CalendarFetcher
from family_dashboard.calendar.models import (
    DAY_LABELS,
    CalendarConfig,
    CalendarSnapshot,
    DayBucket,
    Event,
    FamilySnapshot,
    FetchedEvent,
)
from family_dashboard.calendar.week_window import WeekWindow, to_local, week_boundaries
from family_dashboard.core.exceptions import CalendarFetchError

logger = logging.getLogger(__name__)


def bucket_events(
    calendar_name: str, fetched: Sequence[FetchedEvent], window: WeekWindow
) -> tuple[CalendarSnapshot, int]:
    """Place fetched events into the seven weekday buckets of ``window``.

    Events keep their fetch order within a bucket. Events without a day key,
    or whose day key falls outside the window, are dropped.

    Returns:
        The calendar snapshot and the number of dropped events
    """
    buckets: list[list[Event]] = [[] for _ in DAY_LABELS]
    dropped = 0

    for item in fetched:
        day_key = extract_day_key(item)
        index = window.index_for(day_key) if day_key else None
        if index is None:
            dropped += 1
            logger.debug(
                "Dropping event %r (%r) from %s: day key %r is not in the current week",
                item.id,
                item.summary,
                calendar_name,
                day_key,
            )
            continue

        if item.recurring_event_id and item.original_start_time is not None:
            logger.debug(
                "Event %r of series %r kept on its original day %s",
                item.id,
                item.recurring_event_id,
                day_key,
            )
        buckets[index].append(
            Event(id=item.id, title=item.summary, day_key=datetime.date.fromisoformat(day_key))
        )

    snapshot = CalendarSnapshot(
        calendar_name=calendar_name,
        days=tuple(
            DayBucket(label=label, events=tuple(events))
            for label, events in zip(DAY_LABELS, buckets)
        ),
    )
    return snapshot, dropped


async def _fetch_for_calendar(
    config: CalendarConfig, fetcher: CalendarFetcher, window: WeekWindow
) -> list[FetchedEvent]:
    try:
        return await fetcher.fetch_events(config.id, window.start, window.end)
    except CalendarFetchError as exc:
        logger.warning("Calendar %r is empty this cycle, fetch failed: %s", config.name, exc)
    except Exception:
        logger.exception("Calendar %r is empty this cycle, unexpected fetch error", config.name)
    return []


async def build_snapshot(
    configs: Sequence[CalendarConfig],
    fetcher: CalendarFetcher,
    now: datetime.datetime,
) -> FamilySnapshot:
    """Fetch and bucket every calendar for the week containing ``now``.

    Calendars are processed one after another and independently: a failed
    fetch leaves that calendar with seven empty buckets and does not affect
    the others. The result shares nothing with any earlier snapshot.

    Args:
        configs: Calendars in display order
        fetcher: Calendar backend
        now: Reference instant selecting the week

    Returns:
        A complete FamilySnapshot, calendars in ``configs`` order
    """
    window = week_boundaries(now)
    logger.debug("Building snapshot for week %s .. %s", window.start, window.end)

    calendars: list[CalendarSnapshot] = []
    total_dropped = 0

    for config in configs:
        fetched = await _fetch_for_calendar(config, fetcher, window)
        calendar_snapshot, dropped = bucket_events(config.name, fetched, window)
        calendars.append(calendar_snapshot)
        total_dropped += dropped

    if total_dropped:
        logger.info("Dropped %d events without a day key in the current week", total_dropped)

    return FamilySnapshot(
        calendars=tuple(calendars),
        week_start=window.start,
        week_end=window.end,
        generated_at=to_local(now),
        dropped_events=total_dropped,
    )
