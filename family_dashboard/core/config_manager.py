"""Configuration management for the family_dashboard server."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Union

from pydantic import ValidationError

from family_dashboard.calendar.models import CalendarConfig, CalendarList
from family_dashboard.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "calendars_file": "calendars.json",
    "credentials_file": "client_secret.json",
    "token_file": "token.json",
    "static_dir": "static",
    "stylesheet_url": "/static/dashboard.css",
    "refresh_interval_seconds": 30,
    "server_bind": "0.0.0.0",  # nosec: B104 - wall display is reached over the LAN
    "server_port": 8080,
    "log_level": "INFO",
}

# env var -> (config key, is_int)
_ENV_KEYS: dict[str, tuple[str, bool]] = {
    "FAMILY_DASHBOARD_CALENDARS_FILE": ("calendars_file", False),
    "FAMILY_DASHBOARD_CREDENTIALS_FILE": ("credentials_file", False),
    "FAMILY_DASHBOARD_TOKEN_FILE": ("token_file", False),
    "FAMILY_DASHBOARD_STATIC_DIR": ("static_dir", False),
    "FAMILY_DASHBOARD_STYLESHEET_URL": ("stylesheet_url", False),
    "FAMILY_DASHBOARD_REFRESH_INTERVAL": ("refresh_interval_seconds", True),
    "FAMILY_DASHBOARD_SERVER_BIND": ("server_bind", False),
    "FAMILY_DASHBOARD_SERVER_PORT": ("server_port", True),
    "FAMILY_DASHBOARD_LOG_LEVEL": ("log_level", False),
}


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file and return key-value pairs.

    Args:
        path: Path to .env file

    Returns:
        Dictionary of key-value pairs from the .env file.
        Empty dict if file doesn't exist or cannot be read.

    Note:
        - Skips empty lines and comments (lines starting with #)
        - Strips quotes (both single and double) from values
        - Handles KEY=VALUE format with optional whitespace
    """
    if not path.exists():
        return {}

    result: dict[str, str] = {}

    try:
        content = path.read_text(encoding="utf-8")
    except OSError:
        logger.debug("Failed to read .env file (continuing): %s", str(path), exc_info=True)
        return {}

    for raw_line in content.splitlines():
        line = raw_line.strip()

        if not line or line.startswith("#") or "=" not in line:
            continue

        key, val = line.split("=", 1)
        key = key.strip()
        val = val.strip().strip('"').strip("'")

        if key:
            result[key] = val

    return result


class ConfigManager:
    """Manages application configuration from environment variables and .env files."""

    def __init__(self, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Load .env file and set environment variables.

        Only sets variables that are not already in the environment.

        Returns:
            List of environment variable keys that were loaded from .env file
        """
        if not self.env_file_path.exists():
            logger.debug("No .env file found at %s", self.env_file_path)
            return []

        set_keys = []
        for key, val in parse_env_file(self.env_file_path).items():
            if key not in os.environ:
                os.environ[key] = val
                set_keys.append(key)

        if set_keys:
            logger.debug("Loaded .env defaults for keys: %s", ", ".join(set_keys))

        return set_keys

    def build_config_from_env(self) -> dict[str, Any]:
        """Build configuration dictionary from defaults and environment variables.

        Recognizes the FAMILY_DASHBOARD_* variables listed in ``_ENV_KEYS``.
        Integer settings that fail to parse are logged and left at their default.

        Returns:
            Configuration dictionary compatible with start_server
        """
        cfg = dict(DEFAULT_CONFIG)

        for env_name, (key, is_int) in _ENV_KEYS.items():
            raw = os.environ.get(env_name)
            if not raw:
                continue
            if is_int:
                try:
                    cfg[key] = int(raw)
                except ValueError:
                    logger.warning("Invalid %s=%r; ignoring", env_name, raw)
                continue
            cfg[key] = raw

        return cfg

    def load_full_config(self) -> dict[str, Any]:
        """Load .env file and build configuration from environment.

        Returns:
            Configuration dictionary
        """
        self.load_env_file()
        return self.build_config_from_env()


def load_calendar_list(path: Union[str, Path]) -> tuple[CalendarConfig, ...]:
    """Read the calendar list file.

    The file holds ``{"calendars": [{"name": ..., "id": ...}, ...]}`` and is
    read once at startup.

    Args:
        path: Location of the calendar list JSON file

    Returns:
        Calendars in file order

    Raises:
        ConfigurationError: if the file is missing, unreadable, not JSON or
            does not match the expected shape
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Unable to read calendar list {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Calendar list {path} is not valid JSON: {exc}") from exc

    try:
        calendar_list = CalendarList.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Calendar list {path} is malformed: {exc}") from exc

    if not calendar_list.calendars:
        logger.warning("Calendar list %s contains no calendars", path)

    return tuple(calendar_list.calendars)


def get_config_value(config: Any, key: str, default: Any = None) -> Any:
    """Get configuration value supporting both dict and dataclass-like objects.

    Args:
        config: Configuration object (dict or object with attributes)
        key: Configuration key to retrieve
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    if isinstance(config, dict):
        return config.get(key, default)
    return getattr(config, key, default)
