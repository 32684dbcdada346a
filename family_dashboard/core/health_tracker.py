"""Health tracking and monitoring for the family_dashboard server."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Any, Optional

# No successful refresh for this long marks the server degraded.
STALE_REFRESH_SECONDS = 900


@dataclass
class HealthStatus:
    """Health status information for the server."""

    status: str  # "ok" or "degraded"
    server_time_iso: str
    uptime_seconds: int
    pid: int
    event_count: int
    dropped_event_count: int
    last_refresh_success_age_seconds: Optional[int]
    last_refresh_attempt_age_seconds: Optional[int]
    last_refresh_failure_age_seconds: Optional[int]
    background_tasks: list[dict[str, Any]]


@dataclass
class SystemDiagnostics:
    """System diagnostics information."""

    platform: str
    python_version: str
    event_loop_running: bool


def _age_seconds(timestamp: Optional[float]) -> Optional[int]:
    if timestamp is None:
        return None
    return int(time.time() - timestamp)


class HealthTracker:
    """Health tracking for server monitoring.

    Only the event loop thread writes to the tracker.
    """

    def __init__(self) -> None:
        self._start_time: float = time.time()
        self._last_refresh_attempt: Optional[float] = None
        self._last_refresh_success: Optional[float] = None
        self._last_refresh_failure: Optional[float] = None
        self._current_event_count: int = 0
        self._dropped_event_count: int = 0
        self._background_task_heartbeat: Optional[float] = None

    def record_refresh_attempt(self) -> None:
        """Record that a refresh attempt was made."""
        self._last_refresh_attempt = time.time()

    def record_refresh_success(self, event_count: int, dropped_count: int = 0) -> None:
        """Record a successful refresh.

        Args:
            event_count: Number of bucketed events in the new snapshot
            dropped_count: Number of events that could not be bucketed
        """
        self._last_refresh_success = time.time()
        self._current_event_count = event_count
        self._dropped_event_count = dropped_count

    def record_refresh_failure(self) -> None:
        """Record a refresh that did not publish a snapshot."""
        self._last_refresh_failure = time.time()

    def record_background_heartbeat(self) -> None:
        """Record that the refresh task is alive."""
        self._background_task_heartbeat = time.time()

    def get_uptime_seconds(self) -> int:
        """Get server uptime in seconds."""
        return int(time.time() - self._start_time)

    def get_last_refresh_age_seconds(self) -> Optional[int]:
        """Get age of last successful refresh in seconds.

        Returns:
            Seconds since last successful refresh, or None if never refreshed
        """
        if self._last_refresh_success is None:
            return None
        return int(time.time() - self._last_refresh_success)

    def get_last_refresh_attempt_age_seconds(self) -> Optional[int]:
        """Seconds since the last refresh attempt, or None if none was made."""
        return _age_seconds(self._last_refresh_attempt)

    def get_last_refresh_failure_age_seconds(self) -> Optional[int]:
        """Seconds since the last failed refresh, or None if none failed."""
        return _age_seconds(self._last_refresh_failure)

    def get_background_task_status(self) -> dict[str, Any]:
        """Get refresh task status."""
        if self._background_task_heartbeat is None:
            return {
                "name": "refresh_scheduler",
                "status": "unknown",
                "last_heartbeat_age_s": None,
            }

        heartbeat_age = int(time.time() - self._background_task_heartbeat)
        status = "running" if heartbeat_age < 600 else "stale"  # 10 minutes

        return {
            "name": "refresh_scheduler",
            "status": status,
            "last_heartbeat_age_s": heartbeat_age,
        }

    def determine_overall_status(self) -> str:
        """Determine overall health status.

        Returns:
            "ok" or "degraded"
        """
        last_success_age = self.get_last_refresh_age_seconds()

        if last_success_age is None:
            return "degraded"

        if last_success_age > STALE_REFRESH_SECONDS:
            return "degraded"

        return "ok"

    def get_health_status(self, current_time_iso: str) -> HealthStatus:
        """Get comprehensive health status.

        Args:
            current_time_iso: Current time in ISO format
        """
        return HealthStatus(
            status=self.determine_overall_status(),
            server_time_iso=current_time_iso,
            uptime_seconds=self.get_uptime_seconds(),
            pid=os.getpid(),
            event_count=self._current_event_count,
            dropped_event_count=self._dropped_event_count,
            last_refresh_success_age_seconds=self.get_last_refresh_age_seconds(),
            last_refresh_attempt_age_seconds=self.get_last_refresh_attempt_age_seconds(),
            last_refresh_failure_age_seconds=self.get_last_refresh_failure_age_seconds(),
            background_tasks=[self.get_background_task_status()],
        )


def get_system_diagnostics() -> SystemDiagnostics:
    """Get system diagnostics information."""
    import asyncio
    import platform
    import sys

    event_loop_running = False
    try:
        asyncio.get_running_loop()
        event_loop_running = True
    except RuntimeError:
        pass

    return SystemDiagnostics(
        platform=platform.platform(),
        python_version=sys.version.split()[0],
        event_loop_running=event_loop_running,
    )
