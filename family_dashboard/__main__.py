"""Command-line entry for family_dashboard."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn

from . import run_server
from .core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the family_dashboard CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="family_dashboard",
        description="Family Dashboard - weekly calendar snapshot server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m family_dashboard                          # Serve on port 8080
  python -m family_dashboard --port 3000              # Serve on port 3000
  python -m family_dashboard --calendars family.json  # Use another calendar list
        """,
    )

    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port number for the web server (default: 8080, or FAMILY_DASHBOARD_SERVER_PORT)",
    )
    parser.add_argument(
        "--calendars",
        metavar="PATH",
        help="Calendar list JSON file (default: calendars.json)",
    )
    parser.add_argument(
        "--static-dir",
        dest="static_dir",
        metavar="DIR",
        help="Directory served under /static/ (default: static)",
    )
    parser.add_argument(
        "--interval",
        type=int,
        metavar="SECONDS",
        help="Refresh interval in seconds (default: 30)",
    )

    return parser


def main() -> NoReturn:
    """Run the family_dashboard CLI.

    Configuration errors are fatal: they are logged and the process exits
    with status 1.
    """
    parser = _create_parser()
    args = parser.parse_args()

    try:
        run_server(args)
    except ConfigurationError as exc:
        logger.critical("Fatal configuration error: %s", exc)
        print(f"family_dashboard: {exc}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)

    sys.exit(0)


if __name__ == "__main__":
    main()
