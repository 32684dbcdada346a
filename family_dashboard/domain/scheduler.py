"""Periodic snapshot refresh driven by a single background task."""

from __future__ import annotations

import asyncio
import datetime
import logging
from collections.abc import Sequence
from typing import Callable, Optional

from family_dashboard.calendar.fetcher import CalendarFetcher
from family_dashboard.calendar.models import CalendarConfig
from family_dashboard.calendar.week_window import now_local
from family_dashboard.core.health_tracker import HealthTracker
from family_dashboard.domain.publisher import SnapshotPublisher
from family_dashboard.domain.snapshot_builder import build_snapshot

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL_SECONDS = 30


class RefreshScheduler:
    """Rebuilds and publishes the snapshot at startup and on a fixed period.

    Refreshes never overlap: ``refresh_once`` is a no-op while another
    refresh holds the lock, and ``run`` awaits each refresh before waiting
    for the next tick. Ticks are fixed multiples of the interval from the
    loop start; ticks that pass while a refresh is running are skipped.
    """

    def __init__(
        self,
        calendars: Sequence[CalendarConfig],
        fetcher: CalendarFetcher,
        publisher: SnapshotPublisher,
        interval_seconds: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
        health_tracker: Optional[HealthTracker] = None,
        time_provider: Callable[[], datetime.datetime] = now_local,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._calendars = tuple(calendars)
        self._fetcher = fetcher
        self._publisher = publisher
        self._interval = interval_seconds
        self._health = health_tracker or HealthTracker()
        self._time_provider = time_provider
        self._refresh_lock = asyncio.Lock()
        self.skipped_ticks = 0

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_lock.locked()

    async def refresh_once(self) -> bool:
        """Build a new snapshot and publish it.

        Returns:
            True if a snapshot was published. False if a refresh was already
            running or the build failed; the previous snapshot stays visible.
        """
        if self._refresh_lock.locked():
            logger.warning("Refresh already in progress; skipping this one")
            return False

        async with self._refresh_lock:
            self._health.record_refresh_attempt()
            self._health.record_background_heartbeat()
            try:
                snapshot = await build_snapshot(
                    self._calendars, self._fetcher, self._time_provider()
                )
            except Exception:
                logger.exception("Refresh failed; keeping the previous snapshot")
                self._health.record_refresh_failure()
                return False

            version = self._publisher.publish(snapshot)
            self._health.record_refresh_success(snapshot.event_count, snapshot.dropped_events)
            logger.debug(
                "Published snapshot v%d: %d calendars, %d events",
                version,
                len(snapshot.calendars),
                snapshot.event_count,
            )
            return True

    async def run_initial(self) -> bool:
        """Refresh once before the server starts accepting requests."""
        logger.info("Starting initial refresh of %d calendars", len(self._calendars))
        published = await self.refresh_once()
        if published:
            logger.info(
                "Initial refresh completed - ready to serve (%d events)",
                self._publisher.current().event_count,
            )
        return published

    async def run(self, stop_event: asyncio.Event) -> None:
        """Refresh every interval until ``stop_event`` is set."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._interval
        logger.debug("Refresh loop starting with interval %s seconds", self._interval)

        while not stop_event.is_set():
            delay = next_tick - loop.time()
            if delay > 0:
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
                else:
                    break

            await self.refresh_once()

            next_tick += self._interval
            now = loop.time()
            if next_tick <= now:
                missed = int((now - next_tick) // self._interval) + 1
                self.skipped_ticks += missed
                logger.warning("Refresh overran the interval; skipping %d tick(s)", missed)
                next_tick += missed * self._interval

        logger.debug("Refresh loop stopped")
