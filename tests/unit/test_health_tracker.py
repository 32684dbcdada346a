"""Unit tests for family_dashboard.core.health_tracker."""

import time

import pytest

from family_dashboard.core.health_tracker import (
    STALE_REFRESH_SECONDS,
    HealthTracker,
    get_system_diagnostics,
)

pytestmark = pytest.mark.unit


class TestHealthTracker:
    """Tests for HealthTracker class."""

    def setup_method(self):
        self.tracker = HealthTracker()

    def test_initial_state(self):
        """Should be degraded until the first successful refresh."""
        status = self.tracker.get_health_status("2024-06-12T10:30:00")

        assert status.status == "degraded"
        assert status.server_time_iso == "2024-06-12T10:30:00"
        assert status.uptime_seconds >= 0
        assert status.event_count == 0
        assert status.last_refresh_success_age_seconds is None

    def test_record_refresh_success(self):
        """Should report ok with the latest counts after a refresh."""
        self.tracker.record_refresh_attempt()
        self.tracker.record_refresh_success(12, dropped_count=2)

        status = self.tracker.get_health_status("now")

        assert status.status == "ok"
        assert status.event_count == 12
        assert status.dropped_event_count == 2
        assert status.last_refresh_success_age_seconds == 0

    def test_stale_refresh_is_degraded(self):
        """Should turn degraded once the last success is too old."""
        self.tracker.record_refresh_success(3)
        self.tracker._last_refresh_success = time.time() - STALE_REFRESH_SECONDS - 5

        assert self.tracker.determine_overall_status() == "degraded"

    def test_failure_keeps_last_success(self):
        """A failed refresh should not erase the previous success."""
        self.tracker.record_refresh_success(3)
        self.tracker.record_refresh_attempt()
        self.tracker.record_refresh_failure()

        status = self.tracker.get_health_status("now")

        assert status.status == "ok"
        assert status.last_refresh_attempt_age_seconds == 0
        assert status.last_refresh_failure_age_seconds == 0

    def test_no_failure_reported_before_any_failure(self):
        """Attempt and failure ages stay empty until they happen."""
        status = self.tracker.get_health_status("now")

        assert status.last_refresh_attempt_age_seconds is None
        assert status.last_refresh_failure_age_seconds is None

    def test_background_task_status(self):
        """Should report unknown, running and stale heartbeats."""
        assert self.tracker.get_background_task_status()["status"] == "unknown"

        self.tracker.record_background_heartbeat()
        assert self.tracker.get_background_task_status() == {
            "name": "refresh_scheduler",
            "status": "running",
            "last_heartbeat_age_s": 0,
        }

        self.tracker._background_task_heartbeat = time.time() - 601
        assert self.tracker.get_background_task_status()["status"] == "stale"


def test_get_system_diagnostics_outside_loop():
    diagnostics = get_system_diagnostics()

    assert diagnostics.python_version
    assert diagnostics.event_loop_running is False


async def test_get_system_diagnostics_inside_loop():
    assert get_system_diagnostics().event_loop_running is True
