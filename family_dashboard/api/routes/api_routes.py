"""Snapshot and health routes for family_dashboard."""

from __future__ import annotations

import datetime
import logging
from typing import Any, Callable

from aiohttp import web

from family_dashboard.core.health_tracker import HealthTracker, get_system_diagnostics
from family_dashboard.domain.html_renderer import render_snapshot_html
from family_dashboard.domain.publisher import SnapshotPublisher

logger = logging.getLogger(__name__)

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


def _serialize_timestamp(ts: float | None) -> str | None:
    if ts is None:
        return None
    return datetime.datetime.fromtimestamp(ts).astimezone().isoformat()


def register_api_routes(
    app: web.Application,
    publisher: SnapshotPublisher,
    health_tracker: HealthTracker,
    stylesheet_url: str,
    time_provider: Callable[[], datetime.datetime],
) -> None:
    """Register snapshot and health routes.

    Args:
        app: aiohttp web application
        publisher: Source of the current snapshot
        health_tracker: Health tracking instance
        stylesheet_url: Stylesheet linked from the HTML page
        time_provider: Returns the current aware local time
    """

    async def snapshot_json(_request: web.Request) -> web.Response:
        """Current FamilySnapshot as JSON, readable from any origin."""
        snapshot = publisher.current()
        return web.json_response(snapshot.to_wire(), headers=CORS_HEADERS)

    async def snapshot_html(_request: web.Request) -> web.Response:
        """Current FamilySnapshot as an HTML table."""
        snapshot = publisher.current()
        return web.Response(
            text=render_snapshot_html(snapshot, stylesheet_url),
            content_type="text/html",
            charset="utf-8",
        )

    async def health_check(_request: web.Request) -> web.Response:
        """Health check endpoint for monitoring."""
        state = publisher.state()
        health_status = health_tracker.get_health_status(time_provider().isoformat())
        diag = get_system_diagnostics()

        health_data: dict[str, Any] = {
            "status": health_status.status,
            "server_time_iso": health_status.server_time_iso,
            "server_status": {
                "uptime_s": health_status.uptime_seconds,
                "pid": health_status.pid,
            },
            "data_status": {
                "snapshot_version": state.version,
                "published_at_iso": _serialize_timestamp(state.published_at),
                "calendar_count": len(state.snapshot.calendars),
                "event_count": health_status.event_count,
                "dropped_event_count": health_status.dropped_event_count,
                "last_refresh_success_age_s": health_status.last_refresh_success_age_seconds,
                "last_refresh_attempt_age_s": health_status.last_refresh_attempt_age_seconds,
                "last_refresh_failure_age_s": health_status.last_refresh_failure_age_seconds,
            },
            "background_tasks": health_status.background_tasks,
            "system_diagnostics": {
                "platform": diag.platform,
                "python_version": diag.python_version,
                "event_loop_running": diag.event_loop_running,
            },
        }

        http_status = 200 if health_status.status == "ok" else 503
        return web.json_response(health_data, status=http_status)

    app.router.add_get("/json", snapshot_json)
    app.router.add_get("/", snapshot_html)
    app.router.add_get("/api/health", health_check)

    logger.debug("API routes registered")
