"""Pytest fixtures for club trips tests.

This module provides test fixtures that ensure:
1. No Google API calls are made (Sheets and Calendar are in-memory fakes)
2. A fixed clock, so listings and sync windows are deterministic
3. Isolated test environment with controlled configuration
"""

import dataclasses
import os
from datetime import date, datetime, time, timezone

import pytest

# Set test environment BEFORE importing application modules
# This ensures no real services are contacted during test collection
os.environ.setdefault("OFFICER_SECRET", "test-officer-secret")
os.environ.setdefault("SPREADSHEET_ID", "test-spreadsheet-id")
os.environ.setdefault("CALENDAR_ID", "trips@group.calendar.google.com")
os.environ.setdefault("SITE_BASE_URL", "https://club.example.org")
os.environ.setdefault("TIMEZONE", "America/New_York")
os.environ.setdefault("ENVIRONMENT", "development")

from fastapi.testclient import TestClient

from club_trips.api import create_app
from club_trips.api.dependencies import get_calendar, get_clock, get_row_store
from club_trips.calendar.google_calendar import CalendarEvent, EventTime
from club_trips.config import Settings, get_settings
from club_trips.exceptions import ExternalServiceError
from club_trips.sheets.schema import TRIPS
from club_trips.sheets.store import RowStore
from club_trips.trips.service import TripService

OFFICER_SECRET = "test-officer-secret"

# 2024-09-01 08:00 in New York
FIXED_NOW = datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# In-memory Google fakes
# =============================================================================


class FakeSheetsClient:
    """Spreadsheet held in memory: sheet name -> rows of strings."""

    def __init__(self, sheets: dict[str, list[list[str]]] | None = None):
        self.sheets: dict[str, list[list[str]]] = {
            name: [list(row) for row in rows] for name, rows in (sheets or {}).items()
        }
        self.writes: list[tuple] = []

    def has_sheet(self, sheet: str) -> bool:
        return sheet in self.sheets

    def add_sheet(self, sheet: str) -> None:
        self.sheets[sheet] = []
        self.writes.append(("add_sheet", sheet))

    def read_rows(self, sheet: str) -> list[list[str]]:
        return [list(row) for row in self.sheets.get(sheet, [])]

    def _row(self, sheet: str, row_index: int) -> list[str]:
        rows = self.sheets.setdefault(sheet, [])
        while len(rows) < row_index:
            rows.append([])
        return rows[row_index - 1]

    def write_row(self, sheet: str, row_index: int, values: list[str]) -> None:
        row = self._row(sheet, row_index)
        row[:] = list(values)
        self.writes.append(("write_row", sheet, row_index))

    def write_cells(self, sheet: str, row_index: int, cells: dict[int, str]) -> None:
        row = self._row(sheet, row_index)
        for col, value in cells.items():
            while len(row) < col:
                row.append("")
            row[col - 1] = value
        self.writes.append(("write_cells", sheet, row_index, dict(cells)))

    def append_row(self, sheet: str, values: list[str]) -> None:
        self.sheets.setdefault(sheet, []).append(list(values))
        self.writes.append(("append_row", sheet))

    def delete_row(self, sheet: str, row_index: int) -> None:
        del self.sheets[sheet][row_index - 1]
        self.writes.append(("delete_row", sheet, row_index))


def _event_bound(value: EventTime) -> datetime:
    if value.date is not None:
        return datetime.combine(value.date, time(0, 0), tzinfo=timezone.utc)
    return value.date_time


class FakeCalendar:
    """Calendar held in memory; records every mutation."""

    def __init__(self):
        self.events: dict[str, CalendarEvent] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_summaries: set[str] = set()
        self._next_id = 1

    @property
    def mutations(self) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[0] != "list"]

    def add(self, event: CalendarEvent, event_id: str | None = None) -> str:
        """Put an event on the calendar without recording a call."""
        event_id = event_id or self._new_id()
        self.events[event_id] = dataclasses.replace(event, id=event_id)
        return event_id

    def _new_id(self) -> str:
        event_id = f"evt{self._next_id}"
        self._next_id += 1
        return event_id

    def _check(self, event: CalendarEvent) -> None:
        if event.summary in self.fail_summaries:
            raise ExternalServiceError("Calendar API error", service="calendar", status=500)

    def create_event(self, event: CalendarEvent) -> str:
        self._check(event)
        event_id = self.add(event)
        self.calls.append(("create", event_id))
        return event_id

    def update_event(self, event_id: str, event: CalendarEvent) -> bool:
        self._check(event)
        self.calls.append(("update", event_id))
        if event_id not in self.events:
            return False
        self.events[event_id] = dataclasses.replace(event, id=event_id)
        return True

    def delete_event(self, event_id: str) -> None:
        self.calls.append(("delete", event_id))
        self.events.pop(event_id, None)

    def list_events(self, time_min: datetime, time_max: datetime) -> list[CalendarEvent]:
        self.calls.append(("list", ""))
        return [
            event
            for event in self.events.values()
            if _event_bound(event.end) > time_min and _event_bound(event.start) < time_max
        ]


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def officer_secret() -> str:
    return OFFICER_SECRET


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock(now: datetime):
    return lambda: now


@pytest.fixture
def sheets_client() -> FakeSheetsClient:
    return FakeSheetsClient()


@pytest.fixture
def store(sheets_client: FakeSheetsClient) -> RowStore:
    return RowStore(sheets_client)


@pytest.fixture
def calendar() -> FakeCalendar:
    return FakeCalendar()


@pytest.fixture
def trip_service(store: RowStore, calendar: FakeCalendar, settings: Settings, clock) -> TripService:
    return TripService(store, calendar, settings, clock)


@pytest.fixture
def add_trip_row(store: RowStore):
    """Append a Trips row; keyword arguments override the defaults."""

    def add(**values: str) -> dict[str, str]:
        row = {
            "createdAt": "2024-08-01T12:00:00.000Z",
            "tripId": "2024-09-14-ridge-hike-ab12",
            "eventId": "",
            "title": "Ridge Hike",
            "activity": "Hiking",
            "start": "2024-09-14T13:00:00.000Z",
            "end": "2024-09-14T17:00:00.000Z",
            "location": "Blue Ridge Trailhead",
            "leaderName": "Sam",
            "leaderContact": "sam@example.org",
            "difficulty": "Moderate",
            "meetTime": "8:30 AM",
            "meetPlace": "Student center",
            "notes": "",
            "gearAvailable": "headlamp",
            "isAllDay": "0",
            "signupStatus": "REQUEST_OPEN",
        }
        row.update(values)
        store.append_row(TRIPS, row)
        return row

    return add


@pytest.fixture
def client(store: RowStore, calendar: FakeCalendar, clock):
    """API client wired to the in-memory fakes."""
    app = create_app()
    app.dependency_overrides[get_row_store] = lambda: store
    app.dependency_overrides[get_calendar] = lambda: calendar
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def all_day_event() -> CalendarEvent:
    """An all-day event with no trip marker."""
    return CalendarEvent(
        summary="Club meeting",
        description="Weekly meeting",
        start=EventTime(date=date(2024, 9, 3)),
        end=EventTime(date=date(2024, 9, 4)),
    )
