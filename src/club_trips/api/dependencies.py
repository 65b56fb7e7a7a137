"""FastAPI dependencies.

Services are built per request from the cached settings. Tests replace the
Google-backed pieces through `app.dependency_overrides`:

```python
app.dependency_overrides[get_row_store] = lambda: RowStore(FakeSheetsClient())
app.dependency_overrides[get_calendar] = lambda: FakeCalendar()
app.dependency_overrides[get_clock] = lambda: (lambda: fixed_now)
```
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from fastapi import Depends
from google.oauth2.service_account import Credentials

from club_trips.auth.google import load_service_account_credentials
from club_trips.calendar.google_calendar import GoogleCalendarClient
from club_trips.calendar.sync import CalendarAdapter, TripCalendarSync
from club_trips.config import Settings, get_settings
from club_trips.sheets.client import GoogleSheetsClient
from club_trips.sheets.store import RowStore
from club_trips.signups.service import SignupService
from club_trips.site_settings import SiteSettingsService
from club_trips.trips.schedule import utc_now
from club_trips.trips.service import TripService


def get_clock() -> Callable[[], datetime]:
    return utc_now


def get_credentials(settings: Settings = Depends(get_settings)) -> Credentials:
    """Service account credentials, loaded once per request."""
    return load_service_account_credentials(settings)


def get_row_store(
    settings: Settings = Depends(get_settings),
    credentials: Credentials = Depends(get_credentials),
) -> RowStore:
    return RowStore(GoogleSheetsClient(settings.spreadsheet_id, credentials=credentials))


def get_calendar(
    settings: Settings = Depends(get_settings),
    credentials: Credentials = Depends(get_credentials),
) -> CalendarAdapter:
    return GoogleCalendarClient(settings.calendar_id, credentials=credentials)


def get_trip_service(
    store: RowStore = Depends(get_row_store),
    calendar: CalendarAdapter = Depends(get_calendar),
    settings: Settings = Depends(get_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> TripService:
    return TripService(store, calendar, settings, clock)


def get_trip_sync(
    store: RowStore = Depends(get_row_store),
    calendar: CalendarAdapter = Depends(get_calendar),
    settings: Settings = Depends(get_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> TripCalendarSync:
    return TripCalendarSync(store, calendar, settings, clock)


def get_site_settings_service(
    store: RowStore = Depends(get_row_store),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> SiteSettingsService:
    return SiteSettingsService(store, clock)


def get_signup_service(
    store: RowStore = Depends(get_row_store),
    site_settings: SiteSettingsService = Depends(get_site_settings_service),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> SignupService:
    return SignupService(store, site_settings, clock)
