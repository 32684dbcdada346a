"""family_dashboard.api.server - asyncio HTTP server for the wall display.

This module wires the pieces together:
- builds the aiohttp application (snapshot JSON/HTML, static assets, health)
- runs the initial refresh before the TCP site starts listening
- runs the RefreshScheduler as a background task until SIGINT/SIGTERM
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from aiohttp import web

from family_dashboard.api.middleware import correlation_id_middleware
from family_dashboard.api.routes import register_api_routes, register_static_routes
from family_dashboard.calendar.fetcher import CalendarFetcher
from family_dashboard.calendar.models import CalendarConfig, FamilySnapshot
from family_dashboard.calendar.week_window import now_local
from family_dashboard.core.config_manager import DEFAULT_CONFIG, get_config_value
from family_dashboard.core.health_tracker import HealthTracker
from family_dashboard.domain.publisher import SnapshotPublisher
from family_dashboard.domain.scheduler import RefreshScheduler

logger = logging.getLogger(__name__)

PUBLISHER_KEY = web.AppKey("publisher", SnapshotPublisher)
HEALTH_TRACKER_KEY = web.AppKey("health_tracker", HealthTracker)


def _setting(config: Any, key: str) -> Any:
    return get_config_value(config, key, DEFAULT_CONFIG[key])


def _make_app(
    config: Any,
    publisher: SnapshotPublisher,
    health_tracker: HealthTracker,
) -> web.Application:
    """Create the aiohttp application with routes reading from ``publisher``."""
    app = web.Application(middlewares=[correlation_id_middleware])
    app[PUBLISHER_KEY] = publisher
    app[HEALTH_TRACKER_KEY] = health_tracker

    register_static_routes(app, Path(_setting(config, "static_dir")))
    register_api_routes(
        app=app,
        publisher=publisher,
        health_tracker=health_tracker,
        stylesheet_url=_setting(config, "stylesheet_url"),
        time_provider=now_local,
    )

    async def _shutdown(_app: web.Application) -> None:
        logger.info("Application shutdown requested")

    app.on_shutdown.append(_shutdown)
    return app


async def _serve(
    config: Any,
    calendars: Sequence[CalendarConfig],
    fetcher: CalendarFetcher,
    external_stop_event: asyncio.Event | None = None,
) -> None:
    """Run the initial refresh, the HTTP site and the refresh loop until stopped.

    Args:
        config: Server configuration dict.
        calendars: Calendars in display order.
        fetcher: Calendar backend.
        external_stop_event: Optional event to signal shutdown. If provided,
            signal handlers are not registered (caller owns signal handling).
    """
    stop_event = external_stop_event or asyncio.Event()
    health_tracker = HealthTracker()
    publisher = SnapshotPublisher(FamilySnapshot.empty(calendars))
    scheduler = RefreshScheduler(
        calendars,
        fetcher,
        publisher,
        interval_seconds=int(_setting(config, "refresh_interval_seconds")),
        health_tracker=health_tracker,
    )

    # First snapshot is built before any request can be served.
    await scheduler.run_initial()

    app = _make_app(config, publisher, health_tracker)
    runner = web.AppRunner(app)
    await runner.setup()

    host = _setting(config, "server_bind")
    port = int(_setting(config, "server_port"))
    site = web.TCPSite(runner, host=host, port=port)
    try:
        await site.start()
    except OSError:
        logger.exception("Failed to start server on %s:%d", host, port)
        await runner.cleanup()
        raise

    logger.info(
        "Server started on %s:%d, refreshing every %s seconds",
        host,
        port,
        scheduler.interval_seconds,
    )

    refresher = asyncio.create_task(scheduler.run(stop_event), name="refresh_scheduler")

    try:
        if external_stop_event is None:
            loop = asyncio.get_running_loop()

            def _on_signal() -> None:
                logger.info("Shutdown signal received")
                stop_event.set()

            for sig in (signal.SIGINT, signal.SIGTERM):
                with contextlib.suppress(NotImplementedError):
                    loop.add_signal_handler(sig, _on_signal)

        await stop_event.wait()
        logger.info("Stop event received, shutting down")
    finally:
        refresher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await refresher

        await runner.cleanup()
        logger.info("Server shutdown complete")


def start_server(
    config: Any,
    calendars: Sequence[CalendarConfig],
    fetcher: CalendarFetcher,
) -> None:
    """Start the asyncio event loop and HTTP server; blocks until shutdown.

    Args:
        config: dict with keys such as server_bind, server_port,
            refresh_interval_seconds, static_dir and stylesheet_url
        calendars: Calendars loaded from the calendar list file
        fetcher: Calendar backend
    """
    asyncio.run(_serve(config, calendars, fetcher))
