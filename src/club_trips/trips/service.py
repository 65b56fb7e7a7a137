"""Trip use cases.

Officers create, edit and delete trips; anyone can list upcoming ones.
Each mutation writes the calendar first and the Trips sheet second. There is
no transaction across the two: if the sheet write fails after the calendar
write, the next sync pass repairs the calendar from the rows.

Callers check the officer passcode before calling a mutating method.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from club_trips.calendar.google_calendar import CalendarEvent
from club_trips.calendar.projection import build_trip_event, trip_join_url
from club_trips.calendar.sync import CalendarAdapter
from club_trips.config import Settings
from club_trips.exceptions import NotFoundError
from club_trips.models.trip import (
    AdminTrip,
    PublicTrip,
    SignupStatus,
    Trip,
    TripInput,
    TripMutationResult,
    normalize_gear_list,
    optional_text,
    required_text,
)
from club_trips.sheets.schema import TRIPS
from club_trips.sheets.store import RowStore, SheetRow
from club_trips.trips.ids import generate_trip_id
from club_trips.trips.schedule import (
    TripSchedule,
    format_instant,
    normalize_schedule,
    utc_now,
)

logger = logging.getLogger(__name__)


def _start_key(trip: Trip) -> tuple[bool, datetime]:
    # Trips without a usable start sort last
    return (trip.start is None, trip.start or datetime.max.replace(tzinfo=timezone.utc))


class TripService:
    """Create, edit, delete and list trips.

    Example:
        ```python
        service = TripService(store, calendar, settings)
        result = service.create(TripInput(title="Sunset Hike", start_date="2024-09-10"))
        service.update(result.trip_id, TripInput(title="Sunrise Hike", start_date="2024-09-11"))
        service.delete(result.trip_id)
        ```
    """

    def __init__(
        self,
        store: RowStore,
        calendar: CalendarAdapter,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.calendar = calendar
        self.settings = settings
        self.clock = clock

    def request_url(self, trip_id: str) -> str:
        return trip_join_url(self.settings.site_base_url, trip_id)

    # =========================================================================
    # Reads
    # =========================================================================

    def load_trips(self) -> list[Trip]:
        """Every trip row that has an id, in sheet order.

        Raises:
            DataIntegrityError: If a row holds an invalid stored value
        """
        return [
            Trip.from_row(row.values)
            for row in self.store.list_rows(TRIPS.name)
            if row.get("tripId").strip()
        ]

    def list_public(self) -> list[PublicTrip]:
        """Upcoming trips, plus those that started within the grace window."""
        cutoff = self.clock() - timedelta(days=self.settings.public_grace_days)
        trips = [t for t in self.load_trips() if t.start is not None and t.start >= cutoff]
        trips.sort(key=_start_key)

        return [
            PublicTrip(
                trip_id=t.trip_id,
                title=t.title,
                activity=t.activity,
                start=t.start,
                end=t.end,
                location=t.location,
                difficulty=t.difficulty,
                meet_time=t.meet_time,
                meet_place=t.meet_place,
                gear_available=t.gear_available,
                is_all_day=t.is_all_day,
                signup_status=t.signup_status,
                request_url=self.request_url(t.trip_id),
            )
            for t in trips
        ]

    def list_admin(self) -> list[AdminTrip]:
        """All trips with the values needed to refill the edit form."""
        tz = self.settings.tz
        admin_trips = []
        for trip in sorted(self.load_trips(), key=_start_key):
            form: dict[str, str] = {}
            if trip.start is not None:
                schedule = TripSchedule.from_stored(trip.start, trip.end, trip.is_all_day, tz)
                form = schedule.to_form_fields(tz)
            admin_trips.append(
                AdminTrip(
                    **trip.model_dump(),
                    request_url=self.request_url(trip.trip_id),
                    start_date=form.get("startDate", ""),
                    end_date=form.get("endDate", ""),
                    start_time=form.get("startTime", ""),
                    end_time=form.get("endTime", ""),
                )
            )
        return admin_trips

    # =========================================================================
    # Mutations
    # =========================================================================

    def create(self, data: TripInput) -> TripMutationResult:
        """Create a trip: assign an id, create its event, append its row.

        Raises:
            ValidationError: If the input is incomplete or malformed
            ExternalServiceError: If the calendar or sheet write fails
        """
        trip, schedule = self._trip_from_input(data)

        existing = {row.get("tripId").strip() for row in self.store.list_rows(TRIPS.name)}
        trip_id = generate_trip_id(schedule.start, trip.title, self.settings.tz, existing)
        trip = trip.model_copy(
            update={"trip_id": trip_id, "created_at": format_instant(self.clock())}
        )

        event_id = self.calendar.create_event(self._event_for(trip, schedule))
        trip = trip.model_copy(update={"event_id": event_id})
        self.store.append_row(TRIPS, trip.to_row())

        logger.info(f"Created trip {trip_id} (event {event_id})")
        return TripMutationResult(
            trip_id=trip_id,
            event_id=event_id,
            request_url=self.request_url(trip_id),
        )

    def update(self, trip_id: str, data: TripInput) -> TripMutationResult:
        """Replace a trip's fields and recreate its event.

        The trip id and createdAt are kept.

        Raises:
            NotFoundError: If no row has this trip id
            ValidationError: If the input is incomplete or malformed
            ExternalServiceError: If the calendar or sheet write fails
        """
        row = self._find_row(trip_id)
        trip_id = row.get("tripId").strip()
        trip, schedule = self._trip_from_input(data, trip_id=trip_id)
        self.store.ensure_table(TRIPS)

        old_event_id = row.get("eventId").strip()
        if old_event_id:
            self.calendar.delete_event(old_event_id)
        event_id = self.calendar.create_event(self._event_for(trip, schedule))
        trip = trip.model_copy(update={"event_id": event_id})

        fields = trip.to_row()
        del fields["createdAt"], fields["tripId"]
        row = self._find_row(trip_id)
        self.store.update_fields(TRIPS.name, row.index, fields)

        logger.info(f"Updated trip {trip_id} (event {old_event_id or '-'} -> {event_id})")
        return TripMutationResult(
            trip_id=trip_id,
            event_id=event_id,
            request_url=self.request_url(trip_id),
        )

    def delete(self, trip_id: str) -> str:
        """Delete a trip's event and row.

        Returns:
            The deleted trip id

        Raises:
            NotFoundError: If no row has this trip id
        """
        row = self._find_row(trip_id)
        trip_id = row.get("tripId").strip()

        event_id = row.get("eventId").strip()
        if event_id:
            self.calendar.delete_event(event_id)

        row = self._find_row(trip_id)
        self.store.delete_row(TRIPS.name, row.index)

        logger.info(f"Deleted trip {trip_id}")
        return trip_id

    # =========================================================================
    # Helpers
    # =========================================================================

    def _find_row(self, trip_id: str) -> SheetRow:
        row = None
        if trip_id and trip_id.strip():
            row = self.store.find_row_by_column(TRIPS.name, "tripId", trip_id)
        if row is None:
            raise NotFoundError("Trip not found")
        return row

    def _trip_from_input(self, data: TripInput, trip_id: str = "") -> tuple[Trip, TripSchedule]:
        """Validate officer input.

        Raises:
            ValidationError: On missing title/startDate, bad dates or times,
                or an unknown signupStatus
        """
        title = required_text(data.title, "title")
        start_date = required_text(data.start_date, "startDate")
        schedule = normalize_schedule(
            start_date,
            self.settings.tz,
            end_date=optional_text(data.end_date) or None,
            start_time=optional_text(data.start_time) or None,
            end_time=optional_text(data.end_time) or None,
        )
        signup_status = SignupStatus.from_input(data.signup_status)

        trip = Trip(
            trip_id=trip_id,
            title=title,
            activity=optional_text(data.activity),
            location=optional_text(data.location),
            leader_name=optional_text(data.leader_name),
            leader_contact=optional_text(data.leader_contact),
            difficulty=optional_text(data.difficulty),
            meet_time=optional_text(data.meet_time),
            meet_place=optional_text(data.meet_place),
            notes=optional_text(data.notes),
            gear_available=normalize_gear_list(data.gear_available),
            start=schedule.start,
            end=schedule.end,
            is_all_day=schedule.is_all_day,
            signup_status=signup_status,
        )
        return trip, schedule

    def _event_for(self, trip: Trip, schedule: TripSchedule) -> CalendarEvent:
        return build_trip_event(
            trip,
            schedule,
            self.settings.tz,
            self.settings.timezone,
            self.settings.site_base_url,
        )
