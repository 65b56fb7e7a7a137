"""Tests for trip calendar reconciliation."""

from datetime import datetime, timezone

import pytest

from club_trips.calendar.google_calendar import CalendarEvent
from club_trips.calendar.projection import build_trip_event
from club_trips.calendar.sync import SyncWindow, TripCalendarSync, plan_reconciliation
from club_trips.config import Settings
from club_trips.models.trip import Trip
from club_trips.sheets.schema import TRIPS
from club_trips.sheets.store import RowStore
from club_trips.trips.schedule import TripSchedule

from conftest import FakeCalendar


def canonical_event(row: dict[str, str], settings: Settings) -> CalendarEvent:
    """The event a sync pass would build for a row."""
    trip = Trip.from_row(row)
    schedule = TripSchedule.from_stored(trip.start, trip.end, trip.is_all_day, settings.tz)
    return build_trip_event(trip, schedule, settings.tz, settings.timezone, settings.site_base_url)


def row_value(store: RowStore, trip_id: str, column: str) -> str:
    return store.find_row_by_column(TRIPS.name, "tripId", trip_id).get(column)


@pytest.fixture
def sync(store: RowStore, calendar: FakeCalendar, settings: Settings, clock) -> TripCalendarSync:
    return TripCalendarSync(store, calendar, settings, clock)


class TestCreateAndUpdate:
    """Bringing events in line with rows."""

    def test_creates_missing_event_and_saves_id(self, sync, store, calendar, add_trip_row):
        """A row without an event gets one, and its id is written back."""
        add_trip_row()

        result = sync.run()

        assert result.events_created == 1
        assert list(calendar.events) == ["evt1"]
        assert row_value(store, "2024-09-14-ridge-hike-ab12", "eventId") == "evt1"
        assert calendar.events["evt1"].summary == "Ridge Hike"

    def test_second_pass_makes_no_changes(self, sync, calendar, add_trip_row):
        """Running twice without row edits mutates nothing the second time."""
        add_trip_row()
        add_trip_row(
            tripId="2024-10-05-canoe-day-zz99",
            title="Canoe Day",
            start="2024-10-05T04:00:00.000Z",
            end="2024-10-07T04:00:00.000Z",
            isAllDay="1",
        )
        sync.run()
        mutations_after_first = len(calendar.mutations)

        result = sync.run()

        assert len(calendar.mutations) == mutations_after_first
        assert result.calendar_mutations == 0
        assert result.rows_unchanged == 2
        assert result.success

    def test_edited_row_updates_event_in_place(self, sync, store, calendar, add_trip_row):
        """A changed row updates its existing event."""
        add_trip_row()
        sync.run()
        row = store.find_row_by_column(TRIPS.name, "tripId", "2024-09-14-ridge-hike-ab12")
        store.update_cell(TRIPS.name, row.index, "title", "Ridge Hike (rescheduled)")

        result = sync.run()

        assert result.events_updated == 1
        assert result.events_created == 0
        assert calendar.events["evt1"].summary == "Ridge Hike (rescheduled)"

    def test_stale_cached_id_is_replaced(self, sync, store, calendar, add_trip_row):
        """If the cached event is gone, a new one is created and saved."""
        add_trip_row(eventId="deleted-long-ago")

        result = sync.run()

        assert ("update", "deleted-long-ago") in calendar.calls
        assert result.events_created == 1
        assert row_value(store, "2024-09-14-ridge-hike-ab12", "eventId") == "evt1"

    def test_existing_matching_event_is_adopted(self, sync, store, calendar, settings, add_trip_row):
        """A matching event found by marker only needs its id saved."""
        row = add_trip_row()
        calendar.add(canonical_event(row, settings), "found-by-marker")

        result = sync.run()

        assert calendar.mutations == []
        assert result.event_ids_saved == 1
        assert row_value(store, "2024-09-14-ridge-hike-ab12", "eventId") == "found-by-marker"

    def test_cached_id_of_another_trip_is_not_reused(
        self, sync, store, calendar, add_trip_row
    ):
        """A row pointing at another trip's event gets its own event."""
        add_trip_row()
        add_trip_row(tripId="2024-09-21-lake-swim-cd34", title="Lake Swim")
        sync.run()
        del calendar.events["evt1"]
        row = store.find_row_by_column(TRIPS.name, "tripId", "2024-09-14-ridge-hike-ab12")
        store.update_cell(TRIPS.name, row.index, "eventId", "evt2")

        sync.run()

        assert calendar.events["evt2"].summary == "Lake Swim"
        assert ("update", "evt2") not in calendar.calls
        new_id = row_value(store, "2024-09-14-ridge-hike-ab12", "eventId")
        assert new_id not in ("evt1", "evt2")
        assert calendar.events[new_id].summary == "Ridge Hike"


class TestCleanup:
    """Orphans and duplicates."""

    def test_orphan_event_is_deleted(self, sync, calendar, settings):
        """Events whose trip row is gone are removed."""
        event = canonical_event(
            {
                "tripId": "2024-09-20-removed-trip-qq11",
                "title": "Removed Trip",
                "start": "2024-09-20T13:00:00.000Z",
                "end": "2024-09-20T15:00:00.000Z",
                "signupStatus": "REQUEST_OPEN",
            },
            settings,
        )
        calendar.add(event, "orphan1")

        result = sync.run()

        assert "orphan1" not in calendar.events
        assert result.orphans_deleted == 1

    def test_unmarked_events_are_left_alone(self, sync, calendar, all_day_event):
        """Events without a trip marker are not the sync's business."""
        calendar.add(all_day_event, "meeting1")

        result = sync.run()

        assert "meeting1" in calendar.events
        assert result.calendar_mutations == 0

    def test_duplicates_collapse_to_cached_event(self, sync, store, calendar, settings, add_trip_row):
        """Extra events for one trip are deleted, keeping the cached one."""
        row = add_trip_row(eventId="copy2")
        event = canonical_event(row, settings)
        for event_id in ("copy1", "copy2", "copy3"):
            calendar.add(event, event_id)

        result = sync.run()

        assert list(calendar.events) == ["copy2"]
        assert result.duplicates_deleted == 2
        assert result.events_created == 0
        assert row_value(store, "2024-09-14-ridge-hike-ab12", "eventId") == "copy2"

    def test_duplicates_without_cache_keep_first(self, sync, calendar, settings, add_trip_row):
        """Without a usable cached id, the first listed event survives."""
        row = add_trip_row()
        event = canonical_event(row, settings)
        calendar.add(event, "first")
        calendar.add(event, "second")

        sync.run()

        assert list(calendar.events) == ["first"]


class TestSkippedRows:
    """Rows the pass leaves alone."""

    def test_row_outside_window(self, sync, calendar, add_trip_row):
        """Trips long past are not touched."""
        add_trip_row(start="2023-01-07T14:00:00.000Z", end="2023-01-07T16:00:00.000Z")

        result = sync.run()

        assert calendar.mutations == []
        assert result.rows_outside_window == 1

    def test_row_moved_out_of_window_moves_its_event(self, sync, store, calendar, add_trip_row):
        """An event still in the window follows its row to the new dates."""
        add_trip_row()
        sync.run()
        row = store.find_row_by_column(TRIPS.name, "tripId", "2024-09-14-ridge-hike-ab12")
        store.update_fields(
            TRIPS.name,
            row.index,
            {"start": "2026-09-14T13:00:00.000Z", "end": "2026-09-14T17:00:00.000Z"},
        )

        result = sync.run()

        assert result.events_updated == 1
        assert result.rows_outside_window == 0
        assert calendar.events["evt1"].start.date_time.year == 2026

        mutations = len(calendar.mutations)
        again = sync.run()
        assert len(calendar.mutations) == mutations
        assert again.rows_outside_window == 1

    def test_blank_trip_id_is_silently_skipped(self, sync, calendar, add_trip_row):
        """Rows without an id are ignored without a warning."""
        add_trip_row(tripId="")

        result = sync.run()

        assert calendar.mutations == []
        assert result.warnings == []

    @pytest.mark.parametrize(
        "overrides",
        [{"start": "not-a-date"}, {"title": ""}, {"signupStatus": "MAYBE"}],
    )
    def test_invalid_row_is_warned_and_skipped(self, sync, calendar, add_trip_row, overrides):
        """Bad rows produce a warning; other rows still sync."""
        add_trip_row(tripId="2024-09-15-broken-trip-ee55", **overrides)
        add_trip_row()

        result = sync.run()

        assert result.events_created == 1
        assert len(result.warnings) == 1
        assert "2024-09-15-broken-trip-ee55" in result.warnings[0]

    def test_duplicate_row_is_warned(self, sync, calendar, add_trip_row):
        """Only the first row for a trip id is synced."""
        add_trip_row()
        add_trip_row(title="Ridge Hike (copy)")

        result = sync.run()

        assert result.events_created == 1
        assert calendar.events["evt1"].summary == "Ridge Hike"
        assert len(result.warnings) == 1
        assert "duplicate row" in result.warnings[0]


class TestFailureIsolation:
    """Per-row failures do not stop the pass."""

    def test_calendar_error_on_one_row(self, sync, store, calendar, add_trip_row):
        """A failing row becomes a warning; the next row is still synced."""
        add_trip_row(tripId="2024-09-13-bad-trip-ff66", title="Bad Trip")
        add_trip_row()
        calendar.fail_summaries.add("Bad Trip")

        result = sync.run()

        assert result.events_created == 1
        assert row_value(store, "2024-09-14-ridge-hike-ab12", "eventId") == "evt1"
        assert row_value(store, "2024-09-13-bad-trip-ff66", "eventId") == ""
        assert len(result.warnings) == 1
        assert "2024-09-13-bad-trip-ff66" in result.warnings[0]
        assert not result.success

    def test_write_back_follows_moved_row(self, store, settings, clock, add_trip_row, sheets_client):
        """The event id lands on the trip's row even if rows shifted."""

        class ShiftingCalendar(FakeCalendar):
            def create_event(self, event):
                event_id = super().create_event(event)
                sheets_client.sheets["Trips"].insert(1, ["", "inserted-trip"])
                return event_id

        add_trip_row()
        calendar = ShiftingCalendar()

        TripCalendarSync(store, calendar, settings, clock).run()

        assert row_value(store, "2024-09-14-ridge-hike-ab12", "eventId") == "evt1"
        assert row_value(store, "inserted-trip", "eventId") == ""

    def test_row_removed_before_write_back(self, store, settings, clock, add_trip_row, sheets_client):
        """A row deleted mid-pass is reported, not recreated."""

        class DeletingCalendar(FakeCalendar):
            def create_event(self, event):
                event_id = super().create_event(event)
                del sheets_client.sheets["Trips"][1]
                return event_id

        add_trip_row()
        result = TripCalendarSync(store, DeletingCalendar(), settings, clock).run()

        assert len(result.warnings) == 1
        assert "removed" in result.warnings[0]
        assert len(store.list_rows(TRIPS.name)) == 0


class TestPlan:
    """The pure planning step."""

    def test_plan_orders_deletions_and_upserts(self, store, settings, add_trip_row):
        """Orphans are deleted and missing events planned for creation."""
        add_trip_row()
        orphan = CalendarEvent.from_api(
            {
                "id": "orphan1",
                "summary": "Old",
                "description": "Trip ID: long-gone",
                "start": {"date": "2024-09-20"},
                "end": {"date": "2024-09-21"},
            }
        )
        window = SyncWindow.around(datetime(2024, 9, 1, tzinfo=timezone.utc), 30, 365)

        plan = plan_reconciliation(
            store.list_rows(TRIPS.name),
            [orphan],
            window,
            settings.tz,
            settings.timezone,
            settings.site_base_url,
        )

        assert [(d.event_id, d.reason) for d in plan.deletions] == [("orphan1", "orphan")]
        assert len(plan.upserts) == 1
        assert plan.upserts[0].target_event_id is None
        assert plan.upserts[0].event.summary == "Ridge Hike"

    def test_empty_plan_for_empty_inputs(self, settings):
        """Nothing to do when there are no rows or events."""
        window = SyncWindow.around(datetime(2024, 9, 1, tzinfo=timezone.utc), 30, 365)
        plan = plan_reconciliation([], [], window, settings.tz, settings.timezone, "")
        assert plan.is_empty
