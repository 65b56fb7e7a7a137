"""Command-line interface for the club trips service."""

from __future__ import annotations

import argparse
import logging
import sys

from club_trips.config import get_settings

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def serve(host: str | None, port: int | None) -> int:
    """Run the API with uvicorn."""
    import uvicorn

    from club_trips.api import create_app

    settings = get_settings()
    uvicorn.run(
        create_app(),
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def sync() -> int:
    """Run one calendar reconciliation pass and print its counters."""
    from club_trips.auth.google import (
        CredentialsNotConfiguredError,
        load_service_account_credentials,
    )
    from club_trips.calendar.google_calendar import GoogleCalendarClient
    from club_trips.calendar.sync import TripCalendarSync
    from club_trips.exceptions import ClubTripsError
    from club_trips.sheets.client import GoogleSheetsClient
    from club_trips.sheets.store import RowStore

    settings = get_settings()
    try:
        credentials = load_service_account_credentials(settings)
    except CredentialsNotConfiguredError as e:
        logger.error(f"Sync aborted: {e}")
        return 1

    trip_sync = TripCalendarSync(
        RowStore(GoogleSheetsClient(settings.spreadsheet_id, credentials=credentials)),
        GoogleCalendarClient(settings.calendar_id, credentials=credentials),
        settings,
    )

    try:
        result = trip_sync.run()
    except ClubTripsError as e:
        logger.error(f"Sync aborted: {e.message}")
        return 1

    print(
        f"rows={result.rows_found} events={result.events_found} "
        f"created={result.events_created} updated={result.events_updated} "
        f"deleted={result.events_deleted} (orphans={result.orphans_deleted}, "
        f"duplicates={result.duplicates_deleted}) unchanged={result.rows_unchanged} "
        f"warnings={len(result.warnings)}"
    )
    for warning in result.warnings:
        print(f"  warning: {warning}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Club Trips - trip planning backed by Google Sheets and Google Calendar"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Bind address (default: HOST setting)")
    serve_parser.add_argument("--port", type=int, help="Port (default: PORT setting)")

    # Sync command
    subparsers.add_parser(
        "sync", help="Reconcile the trip calendar with the Trips sheet once"
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _configure_logging(get_settings().log_level)

    if args.command == "serve":
        return serve(args.host, args.port)
    return sync()


if __name__ == "__main__":
    sys.exit(main())
