"""Google OAuth credentials and the authenticated Calendar API client.

The cached user token is loaded from ``token_file``; an expired token is
refreshed; a missing or unusable one triggers the installed-app consent flow
and the new token is written back with owner-only permissions.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from family_dashboard.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]

PathLike = Union[str, Path]


def load_cached_token(token_file: PathLike) -> Optional[Credentials]:
    """Read the cached user token, or None if there is no usable one."""
    path = Path(token_file)
    if not path.exists():
        logger.debug("No cached token at %s", path)
        return None
    try:
        return Credentials.from_authorized_user_file(str(path), SCOPES)
    except (ValueError, OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable token file %s: %s", path, exc)
        return None


def save_token(token_file: PathLike, creds: Credentials) -> None:
    """Write ``creds`` to ``token_file`` readable by the owner only."""
    path = Path(token_file)
    logger.info("Saving credential file to: %s", path)
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(creds.to_json())
    except OSError as exc:
        raise ConfigurationError(f"Unable to cache oauth token at {path}: {exc}") from exc


def request_token_from_web(credentials_file: PathLike) -> Credentials:
    """Run the installed-app consent flow and return fresh credentials.

    The consent URL is printed; the browser is not opened automatically since
    the dashboard usually runs headless on the display host.
    """
    path = Path(credentials_file)
    try:
        flow = InstalledAppFlow.from_client_secrets_file(str(path), SCOPES)
    except (ValueError, OSError) as exc:
        raise ConfigurationError(f"Unable to read client secret file {path}: {exc}") from exc

    try:
        return flow.run_local_server(
            port=0,
            open_browser=False,
            authorization_prompt_message="Go to the following link in your browser to authorize: {url}",
        )
    except Exception as exc:
        raise ConfigurationError(f"Unable to retrieve token from web: {exc}") from exc


def get_credentials(credentials_file: PathLike, token_file: PathLike) -> Credentials:
    """Return valid user credentials, refreshing or re-authorizing as needed.

    Raises:
        ConfigurationError: if no valid credentials can be obtained
    """
    creds = load_cached_token(token_file)

    if creds is not None and creds.valid:
        return creds

    if creds is not None and creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
        except GoogleAuthError as exc:
            logger.warning("Token refresh failed, re-authorizing: %s", exc)
        else:
            save_token(token_file, creds)
            return creds

    creds = request_token_from_web(credentials_file)
    save_token(token_file, creds)
    return creds


def build_calendar_service(credentials_file: PathLike, token_file: PathLike) -> Any:
    """Build an authenticated Google Calendar v3 service handle.

    Raises:
        ConfigurationError: if credentials are unavailable or the client
            cannot be constructed
    """
    creds = get_credentials(credentials_file, token_file)
    try:
        service = build("calendar", "v3", credentials=creds, cache_discovery=False)
    except Exception as exc:
        raise ConfigurationError(f"Unable to retrieve Calendar client: {exc}") from exc
    logger.debug("Google Calendar client ready")
    return service
