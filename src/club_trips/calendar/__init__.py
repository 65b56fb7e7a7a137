"""Calendar integration module.

Mirrors trips onto a Google Calendar.

## Features

- Create, update, delete and list trip events
- Encode trip details (and the trip id) in event descriptions
- Reconcile the calendar with the Trips sheet

## Google Calendar API

Uses the Google Calendar API v3:
- https://developers.google.com/calendar/api/v3/reference

## Event Processing

1. Normalize officer date/time input (`club_trips.trips.schedule`)
2. Build the event summary, location and description
3. Write the event; store its id on the trip row
4. Periodically reconcile rows and events
"""

from club_trips.calendar.description import (
    DescriptionFields,
    decode_trip_id,
    encode_description,
)
from club_trips.calendar.google_calendar import (
    CalendarEvent,
    EventTime,
    GoogleCalendarClient,
)
from club_trips.calendar.projection import build_trip_event, trip_join_url
from club_trips.calendar.sync import (
    SyncPlan,
    SyncResult,
    SyncWindow,
    TripCalendarSync,
    plan_reconciliation,
)

__all__ = [
    "DescriptionFields",
    "decode_trip_id",
    "encode_description",
    "CalendarEvent",
    "EventTime",
    "GoogleCalendarClient",
    "build_trip_event",
    "trip_join_url",
    "SyncPlan",
    "SyncResult",
    "SyncWindow",
    "TripCalendarSync",
    "plan_reconciliation",
]
