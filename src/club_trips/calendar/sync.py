"""Trip calendar synchronization.

Keeps the trip calendar consistent with the Trips sheet. The sheet is
authoritative; calendar events are a projection of its rows, matched to
them only by the `Trip ID:` line in each event description (the `eventId`
column is a cache hint, not ground truth).

## Sync Process

1. Read every trip row and list calendar events in the sync window
   (default: 30 days back, 365 days ahead)
2. Group events by the trip id in their description; events without one
   are left alone
3. Delete events whose trip id has no row (orphans)
4. Collapse duplicates: keep one event per trip id (the one the row's
   `eventId` points at, if listed) and delete the rest
5. For each row: skip if its event already matches; otherwise update the
   event in place, or create it when there is nothing to update, and save
   the new `eventId` on the row

Running a pass twice with no row changes makes no calendar changes the
second time. A problem with one row is recorded as a warning and the pass
moves on.

## Triggers

- **manual**: officer calls `POST /api/sync`
- **auto**: after each trip create/update/delete (background task)
- **scheduled**: `club-trips sync` from cron
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Protocol

from club_trips.calendar.description import decode_trip_id
from club_trips.calendar.google_calendar import CalendarEvent
from club_trips.calendar.projection import build_trip_event
from club_trips.config import Settings
from club_trips.exceptions import (
    ClubTripsError,
    DataIntegrityError,
    ReconciliationWarning,
)
from club_trips.models.trip import Trip
from club_trips.sheets.schema import TRIPS
from club_trips.sheets.store import RowStore, SheetRow
from club_trips.trips.schedule import TripSchedule, utc_now

logger = logging.getLogger(__name__)


class CalendarAdapter(Protocol):
    """Event operations the sync needs (see `GoogleCalendarClient`)."""

    def create_event(self, event: CalendarEvent) -> str: ...

    def update_event(self, event_id: str, event: CalendarEvent) -> bool: ...

    def delete_event(self, event_id: str) -> None: ...

    def list_events(self, time_min: datetime, time_max: datetime) -> list[CalendarEvent]: ...


@dataclass(frozen=True)
class SyncWindow:
    """Time range whose events a pass inspects."""

    start: datetime
    end: datetime

    @classmethod
    def around(cls, now: datetime, past_days: int, future_days: int) -> SyncWindow:
        return cls(
            start=now - timedelta(days=past_days),
            end=now + timedelta(days=future_days),
        )

    def overlaps(self, schedule: TripSchedule) -> bool:
        """Same rule the Calendar API applies to timeMin/timeMax."""
        return schedule.end > self.start and schedule.start < self.end


@dataclass
class EventDeletion:
    event_id: str
    trip_id: str
    reason: str  # orphan, duplicate


@dataclass
class EventUpsert:
    """Bring one row's event up to date."""

    trip_id: str
    row_index: int
    cached_event_id: str
    target_event_id: str | None  # None: nothing to update, create
    event: CalendarEvent


@dataclass
class EventIdWriteBack:
    """The row's event is current but the row caches a different id."""

    trip_id: str
    event_id: str


@dataclass
class SyncPlan:
    """Calendar changes needed to match the rows."""

    deletions: list[EventDeletion] = field(default_factory=list)
    upserts: list[EventUpsert] = field(default_factory=list)
    write_backs: list[EventIdWriteBack] = field(default_factory=list)
    warnings: list[ReconciliationWarning] = field(default_factory=list)
    rows_unchanged: int = 0
    rows_outside_window: int = 0

    @property
    def is_empty(self) -> bool:
        return not (self.deletions or self.upserts or self.write_backs)


@dataclass
class SyncResult:
    """Result of a sync pass."""

    rows_found: int = 0
    events_found: int = 0
    events_created: int = 0
    events_updated: int = 0
    events_deleted: int = 0
    orphans_deleted: int = 0
    duplicates_deleted: int = 0
    event_ids_saved: int = 0
    rows_unchanged: int = 0
    rows_outside_window: int = 0
    warnings: list[str] = field(default_factory=list)
    synced_at: datetime = field(default_factory=utc_now)

    @property
    def success(self) -> bool:
        return len(self.warnings) == 0

    @property
    def calendar_mutations(self) -> int:
        return self.events_created + self.events_updated + self.events_deleted


def _desired_event(
    row: SheetRow,
    tz: tzinfo,
    tz_name: str,
    site_base_url: str,
) -> tuple[TripSchedule, CalendarEvent]:
    """Canonical event for a row.

    Raises:
        ReconciliationWarning: If the row cannot be projected
    """
    trip_id = row.get("tripId").strip()
    try:
        trip = Trip.from_row(row.values)
    except DataIntegrityError as e:
        raise ReconciliationWarning(e.message, trip_id, row.index) from e

    if trip.start is None:
        raise ReconciliationWarning("missing or invalid start", trip_id, row.index)
    if not trip.title:
        raise ReconciliationWarning("missing title", trip_id, row.index)

    schedule = TripSchedule.from_stored(trip.start, trip.end, trip.is_all_day, tz)
    return schedule, build_trip_event(trip, schedule, tz, tz_name, site_base_url)


def plan_reconciliation(
    rows: list[SheetRow],
    events: list[CalendarEvent],
    window: SyncWindow,
    tz: tzinfo,
    tz_name: str,
    site_base_url: str,
) -> SyncPlan:
    """Work out the calendar changes that make `events` match `rows`.

    Args:
        rows: Every row of the Trips sheet
        events: Calendar events listed for `window`
        window: Range the events were listed for; rows outside it are left
            alone unless one of their events was listed
        tz: Display timezone
        tz_name: IANA name of `tz`, attached to timed events
        site_base_url: Base for join links in descriptions

    Returns:
        SyncPlan; deletions must be applied before upserts
    """
    plan = SyncPlan()

    live: dict[str, SheetRow] = {}
    for row in rows:
        trip_id = row.get("tripId").strip()
        if not trip_id:
            continue
        if trip_id in live:
            plan.warnings.append(
                ReconciliationWarning(
                    f"duplicate row for trip id (first is row {live[trip_id].index}), ignored",
                    trip_id,
                    row.index,
                )
            )
            continue
        live[trip_id] = row

    groups: dict[str, list[CalendarEvent]] = {}
    owners: dict[str, str] = {}
    for event in events:
        trip_id = decode_trip_id(event.description)
        if not trip_id or not event.id:
            continue
        groups.setdefault(trip_id, []).append(event)
        owners[event.id] = trip_id

    survivors: dict[str, CalendarEvent] = {}
    for trip_id, group in groups.items():
        row = live.get(trip_id)
        if row is None:
            plan.deletions.extend(EventDeletion(e.id, trip_id, "orphan") for e in group)
            continue

        cached = row.get("eventId").strip()
        survivor = next((e for e in group if e.id == cached), group[0])
        survivors[trip_id] = survivor
        plan.deletions.extend(
            EventDeletion(e.id, trip_id, "duplicate") for e in group if e is not survivor
        )

    for trip_id, row in live.items():
        try:
            schedule, desired = _desired_event(row, tz, tz_name, site_base_url)
        except ReconciliationWarning as w:
            plan.warnings.append(w)
            continue

        cached = row.get("eventId").strip()
        survivor = survivors.get(trip_id)

        # A listed event still gets moved to the row's new dates
        if survivor is None and not window.overlaps(schedule):
            plan.rows_outside_window += 1
            continue

        if survivor is not None:
            if survivor.matches(desired):
                if survivor.id != cached:
                    plan.write_backs.append(EventIdWriteBack(trip_id, survivor.id))
                else:
                    plan.rows_unchanged += 1
                continue
            target = survivor.id
        elif cached and owners.get(cached, trip_id) == trip_id:
            target = cached
        else:
            target = None

        plan.upserts.append(
            EventUpsert(
                trip_id=trip_id,
                row_index=row.index,
                cached_event_id=cached,
                target_event_id=target,
                event=desired,
            )
        )

    return plan


class TripCalendarSync:
    """Reconciles the trip calendar with the Trips sheet.

    Example:
        ```python
        sync = TripCalendarSync(store, calendar, settings)
        result = sync.run()
        print(result.events_created, result.warnings)
        ```
    """

    def __init__(
        self,
        store: RowStore,
        calendar: CalendarAdapter,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the sync.

        Args:
            store: Row store holding the Trips table
            calendar: Trip calendar
            settings: Timezone, sync window and site URL
            clock: Returns the current UTC time
        """
        self.store = store
        self.calendar = calendar
        self.settings = settings
        self.clock = clock

    def window(self) -> SyncWindow:
        return SyncWindow.around(
            self.clock(),
            self.settings.sync_past_days,
            self.settings.sync_future_days,
        )

    def plan(self) -> tuple[SyncPlan, int, int]:
        """Load rows and events and plan the pass.

        Returns:
            (plan, rows found, events found)
        """
        window = self.window()
        rows = self.store.list_rows(TRIPS.name)
        events = self.calendar.list_events(window.start, window.end)
        plan = plan_reconciliation(
            rows,
            events,
            window,
            self.settings.tz,
            self.settings.timezone,
            self.settings.site_base_url,
        )
        return plan, len(rows), len(events)

    def run(self) -> SyncResult:
        """Run one reconciliation pass.

        Raises:
            ExternalServiceError: If rows or events cannot be listed
        """
        plan, rows_found, events_found = self.plan()
        result = SyncResult(
            rows_found=rows_found,
            events_found=events_found,
            rows_unchanged=plan.rows_unchanged,
            rows_outside_window=plan.rows_outside_window,
        )

        for warning in plan.warnings:
            self._record(result, warning)

        for deletion in plan.deletions:
            try:
                self.calendar.delete_event(deletion.event_id)
            except ClubTripsError as e:
                self._record(result, ReconciliationWarning(
                    f"could not delete {deletion.reason} event {deletion.event_id}: {e.message}",
                    deletion.trip_id,
                ))
                continue
            result.events_deleted += 1
            if deletion.reason == "orphan":
                result.orphans_deleted += 1
            else:
                result.duplicates_deleted += 1

        for write_back in plan.write_backs:
            try:
                self._save_event_id(write_back.trip_id, write_back.event_id)
            except ClubTripsError as e:
                self._record(result, e, write_back.trip_id)
                continue
            result.event_ids_saved += 1

        for upsert in plan.upserts:
            try:
                self._apply_upsert(upsert, result)
            except ClubTripsError as e:
                self._record(result, e, upsert.trip_id, upsert.row_index)

        logger.info(
            f"Trip sync: {result.rows_found} rows, {result.events_found} events, "
            f"{result.events_created} created, {result.events_updated} updated, "
            f"{result.events_deleted} deleted, {len(result.warnings)} warnings"
        )
        return result

    def _apply_upsert(self, upsert: EventUpsert, result: SyncResult) -> None:
        event_id = None
        if upsert.target_event_id and self.calendar.update_event(
            upsert.target_event_id, upsert.event
        ):
            event_id = upsert.target_event_id
            result.events_updated += 1

        if event_id is None:
            event_id = self.calendar.create_event(upsert.event)
            result.events_created += 1

        if event_id != upsert.cached_event_id:
            self._save_event_id(upsert.trip_id, event_id)
            result.event_ids_saved += 1

    def _save_event_id(self, trip_id: str, event_id: str) -> None:
        # Rows may have moved since they were listed
        row = self.store.find_row_by_column(TRIPS.name, "tripId", trip_id)
        if row is None:
            raise ReconciliationWarning(
                f"row was removed before event {event_id} could be saved", trip_id
            )
        self.store.update_cell(TRIPS.name, row.index, "eventId", event_id)

    def _record(
        self,
        result: SyncResult,
        error: ClubTripsError,
        trip_id: str | None = None,
        row_index: int | None = None,
    ) -> None:
        if not isinstance(error, ReconciliationWarning):
            error = ReconciliationWarning(error.message, trip_id, row_index)
        logger.warning(f"Trip sync skipped {error}")
        result.warnings.append(str(error))
