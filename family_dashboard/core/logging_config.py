"""
Central logging configuration for family_dashboard.

Sets package log levels, quiets chatty third-party loggers and tags every
record with the current request correlation id.
"""

import logging
import os
from typing import Optional

# Values of FAMILY_DASHBOARD_DEBUG that turn on debug logging.
DEBUG_ENV_TRUE_VALUES = ("1", "true", "yes", "on")

NOISY_LOGGERS: dict[str, int] = {
    "aiohttp.access": logging.WARNING,
    "aiohttp.server": logging.WARNING,
    "aiohttp.web": logging.INFO,
    "asyncio": logging.WARNING,
    "googleapiclient.discovery": logging.WARNING,
    "googleapiclient.discovery_cache": logging.ERROR,
    "google_auth_httplib2": logging.WARNING,
    "google.auth.transport.requests": logging.WARNING,
    "urllib3.connectionpool": logging.WARNING,
}


class CorrelationIdFilter(logging.Filter):
    """Add correlation ID to all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        # Imported here to avoid a core -> api import cycle at module load.
        from family_dashboard.api.middleware import get_request_id

        record.request_id = get_request_id()
        return True


def configure_logging(level_name: Optional[str] = None, force_debug: Optional[bool] = None) -> None:
    """
    Configure logging levels for family_dashboard.

    Args:
        level_name: Root level name from configuration (DEBUG, INFO, WARNING, ERROR)
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        FAMILY_DASHBOARD_DEBUG: Set to "1", "true", "yes" or "on" to force debug logging
    """
    env_debug = os.getenv("FAMILY_DASHBOARD_DEBUG", "").strip().lower() in DEBUG_ENV_TRUE_VALUES

    if force_debug is not None:
        final_debug = force_debug
    else:
        final_debug = env_debug

    root_level = logging.INFO
    if isinstance(level_name, str) and level_name.upper() in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, level_name.upper())
    if final_debug:
        root_level = logging.DEBUG

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    correlation_filter = CorrelationIdFilter()
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] [%(request_id)s] %(levelname)s - %(name)s - %(message)s"
            )
        )
        handler.addFilter(correlation_filter)
        root_logger.addHandler(handler)
    else:
        for existing_handler in root_logger.handlers:
            if not any(isinstance(f, CorrelationIdFilter) for f in existing_handler.filters):
                existing_handler.addFilter(correlation_filter)

    for logger_name, level in NOISY_LOGGERS.items():
        logging.getLogger(logger_name).setLevel(level)

    logging.getLogger("family_dashboard").setLevel(root_level)

    if final_debug:
        root_logger.info("Debug logging enabled; third-party debug logs suppressed")

