"""family_dashboard - weekly family calendar dashboard server.

Fetches a week of events from each configured Google calendar, buckets them
per weekday and serves the snapshot to a wall display over HTTP.
"""

__version__ = "0.1.0"

from typing import Optional


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Installs a colorized stderr handler so startup messages are visible before
    configuration is loaded. Callers may adjust the level later.

    The FAMILY_DASHBOARD_DEBUG environment variable (truthy values: "1",
    "true", "yes", "on") forces DEBUG verbosity.
    """
    import logging
    import os
    import sys

    from colorlog import ColoredFormatter

    from .core.logging_config import DEBUG_ENV_TRUE_VALUES, CorrelationIdFilter

    debug_env = os.environ.get("FAMILY_DASHBOARD_DEBUG", "")
    if debug_env.strip().lower() in DEBUG_ENV_TRUE_VALUES:
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure a handler if none is present to avoid duplicate output.
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.addFilter(CorrelationIdFilter())
        # HH:MM:SS  LEVEL   [request id] logger.name: message
        fmt = (
            "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s "
            "[%(request_id)s] %(name)s: %(message)s"
        )
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )


def run_server(args: Optional[object] = None) -> None:
    """Load configuration and start the dashboard server.

    Args:
        args: Optional parsed command line namespace (--port, --calendars,
            --static-dir, --interval)

    Raises:
        ConfigurationError: if the calendar list or Google credentials
            cannot be loaded. The CLI turns this into a non-zero exit.
    """
    import logging
    import os

    _init_logging(os.environ.get("FAMILY_DASHBOARD_LOG_LEVEL"))

    from .api.server import start_server
    from .calendar.auth import build_calendar_service
    from .calendar.fetcher import GoogleCalendarFetcher
    from .core.config_manager import ConfigManager, load_calendar_list
    from .core.logging_config import configure_logging

    logger = logging.getLogger(__name__)

    cfg = ConfigManager().load_full_config()

    if args is not None:
        overrides = {
            "server_port": getattr(args, "port", None),
            "calendars_file": getattr(args, "calendars", None),
            "static_dir": getattr(args, "static_dir", None),
            "refresh_interval_seconds": getattr(args, "interval", None),
        }
        for key, value in overrides.items():
            if value is not None:
                cfg[key] = value
                logger.debug("Applied command line override %s=%r", key, value)

    configure_logging(level_name=cfg.get("log_level"))

    calendars = load_calendar_list(cfg["calendars_file"])
    logger.info("Loaded %d calendars from %s", len(calendars), cfg["calendars_file"])

    service = build_calendar_service(cfg["credentials_file"], cfg["token_file"])
    fetcher = GoogleCalendarFetcher(service)

    # Blocks until shutdown.
    start_server(cfg, calendars, fetcher)
