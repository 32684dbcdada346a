"""Exception hierarchy for family_dashboard.

Two tiers: configuration errors are fatal at startup, fetch errors are
absorbed by the refresh cycle.
"""


class DashboardError(Exception):
    """Base exception for all family_dashboard errors."""


class ConfigurationError(DashboardError):
    """Startup configuration is missing or invalid.

    Raised when:
    - The calendar list file is absent, unreadable or malformed
    - The OAuth client secret or token file cannot be parsed
    - An authenticated calendar client cannot be constructed

    The CLI logs it and exits with a non-zero status.
    """


class CalendarFetchError(DashboardError):
    """Fetching events for a single calendar failed.

    Carries the calendar id so the refresh cycle can log which calendar is
    empty for this cycle.
    """

    def __init__(self, calendar_id: str, message: str) -> None:
        super().__init__(f"{calendar_id}: {message}")
        self.calendar_id = calendar_id
