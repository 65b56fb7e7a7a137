"""Build the calendar event that represents a trip."""

from __future__ import annotations

from datetime import tzinfo
from urllib.parse import quote

from club_trips.calendar.description import DescriptionFields, encode_description
from club_trips.calendar.google_calendar import CalendarEvent, EventTime
from club_trips.models.trip import Trip
from club_trips.trips.schedule import TripSchedule


def trip_join_url(site_base_url: str, trip_id: str) -> str:
    """Public page where members request to join a trip."""
    return f"{site_base_url.rstrip('/')}/trips.html?tripId={quote(trip_id, safe='')}"


def build_trip_event(
    trip: Trip,
    schedule: TripSchedule,
    tz: tzinfo,
    tz_name: str,
    site_base_url: str,
) -> CalendarEvent:
    """Canonical calendar event for a trip."""
    times = schedule.to_event_times(tz, tz_name)
    if times.is_all_day:
        start = EventTime(date=times.start_date)
        end = EventTime(date=times.end_date)
    else:
        start = EventTime(date_time=times.start, time_zone=times.time_zone)
        end = EventTime(date_time=times.end, time_zone=times.time_zone)

    description = encode_description(
        DescriptionFields(
            trip_id=trip.trip_id,
            activity=trip.activity,
            difficulty=trip.difficulty,
            gear_available=trip.gear_available,
            meet_time=trip.meet_time,
            meet_place=trip.meet_place,
            leader_name=trip.leader_name,
            leader_contact=trip.leader_contact,
            request_url=trip_join_url(site_base_url, trip.trip_id),
            notes=trip.notes,
        )
    )

    return CalendarEvent(
        summary=trip.title,
        description=description,
        location=trip.location or None,
        start=start,
        end=end,
    )
