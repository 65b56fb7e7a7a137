"""Google Calendar API client.

Provides the event operations trip sync needs:
- Create events
- Update events (reporting whether the target still exists)
- Delete events (idempotent)
- List events in a time window

## API Documentation

https://developers.google.com/calendar/api/v3/reference

## Authentication

Uses service account credentials (see `club_trips.auth.google`). The
service account must be shared on the calendar with "Make changes to
events" permission.

## Event times

Google represents all-day events with `date` values (end exclusive) and
timed events with `dateTime` + `timeZone`. `EventTime` keeps whichever form
an event was built or fetched with.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from club_trips.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

# Statuses Google returns for events that no longer exist
GONE_STATUSES = (404, 410)


@dataclass(frozen=True)
class EventTime:
    """Start or end of an event: a date (all-day) or an instant (timed)."""

    date: date | None = None
    date_time: datetime | None = None
    time_zone: str | None = None

    @property
    def is_all_day(self) -> bool:
        return self.date is not None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> EventTime:
        """Create from a Google Calendar `start`/`end` object."""
        if data.get("date"):
            return cls(date=date.fromisoformat(data["date"]))
        if data.get("dateTime"):
            return cls(
                date_time=datetime.fromisoformat(data["dateTime"].replace("Z", "+00:00")),
                time_zone=data.get("timeZone"),
            )
        return cls()

    def to_api(self) -> dict[str, Any]:
        """Convert to API `start`/`end` format."""
        if self.date is not None:
            return {"date": self.date.isoformat()}
        body: dict[str, Any] = {"dateTime": self.date_time.isoformat() if self.date_time else None}
        if self.time_zone:
            body["timeZone"] = self.time_zone
        return body

    def same_as(self, other: EventTime) -> bool:
        """Compare by meaning: dates by day, instants by absolute time."""
        if self.is_all_day or other.is_all_day:
            return self.date == other.date
        if self.date_time is None or other.date_time is None:
            return self.date_time is other.date_time
        return self.date_time.astimezone(timezone.utc) == other.date_time.astimezone(timezone.utc)


@dataclass
class CalendarEvent:
    """A calendar event."""

    summary: str
    start: EventTime
    end: EventTime
    id: str | None = None
    description: str | None = None
    location: str | None = None
    status: str = "confirmed"  # confirmed, tentative, cancelled
    etag: str | None = None
    html_link: str | None = None
    raw_data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_all_day(self) -> bool:
        return self.start.is_all_day

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> CalendarEvent:
        """Create from Google Calendar API response."""
        return cls(
            id=data.get("id"),
            summary=data.get("summary", ""),
            description=data.get("description"),
            location=data.get("location"),
            start=EventTime.from_api(data.get("start", {})),
            end=EventTime.from_api(data.get("end", {})),
            status=data.get("status", "confirmed"),
            etag=data.get("etag"),
            html_link=data.get("htmlLink"),
            raw_data=data,
        )

    def to_api_body(self) -> dict[str, Any]:
        """Convert to API insert/update body format."""
        body: dict[str, Any] = {
            "summary": self.summary,
            "description": self.description or "",
            "start": self.start.to_api(),
            "end": self.end.to_api(),
        }
        if self.location:
            body["location"] = self.location
        return body

    def matches(self, other: CalendarEvent) -> bool:
        """True if both events show the same content at the same time."""
        return (
            self.summary == other.summary
            and (self.description or "") == (other.description or "")
            and (self.location or "") == (other.location or "")
            and self.start.same_as(other.start)
            and self.end.same_as(other.end)
        )


class GoogleCalendarClient:
    """Client for the trip calendar.

    Example:
        ```python
        client = GoogleCalendarClient(calendar_id, credentials=creds)

        event_id = client.create_event(event)
        client.update_event(event_id, event)  # False if it was deleted
        events = client.list_events(time_min, time_max)
        client.delete_event(event_id)
        ```
    """

    def __init__(
        self,
        calendar_id: str,
        credentials: Any = None,
        service: Any = None,
    ):
        """Initialize the client.

        Args:
            calendar_id: Calendar that holds trip events
            credentials: google-auth credentials used to build the service
            service: Prebuilt `calendar` v3 service resource
        """
        self.calendar_id = calendar_id
        self._service = service or build(
            "calendar", "v3", credentials=credentials, cache_discovery=False
        )

    def _error(self, action: str, e: Exception) -> ExternalServiceError:
        status = e.resp.status if isinstance(e, HttpError) else None
        logger.error(f"Calendar {action} failed: {e}")
        return ExternalServiceError(
            f"Calendar API error while trying to {action}",
            service="calendar",
            status=status,
        )

    def create_event(self, event: CalendarEvent) -> str:
        """Create an event.

        Returns:
            The new event's ID
        """
        try:
            result = (
                self._service.events()
                .insert(calendarId=self.calendar_id, body=event.to_api_body())
                .execute()
            )
        except (HttpError, GoogleAuthError, OSError) as e:
            raise self._error("create event", e) from e

        logger.debug(f"Created calendar event {result['id']}")
        return result["id"]

    def update_event(self, event_id: str, event: CalendarEvent) -> bool:
        """Replace an event's content.

        Returns:
            False if the event no longer exists (deleted or cancelled)
        """
        try:
            result = (
                self._service.events()
                .update(
                    calendarId=self.calendar_id,
                    eventId=event_id,
                    body=event.to_api_body(),
                )
                .execute()
            )
        except HttpError as e:
            if e.resp.status in GONE_STATUSES:
                logger.info(f"Calendar event {event_id} no longer exists")
                return False
            raise self._error("update event", e) from e
        except (GoogleAuthError, OSError) as e:
            raise self._error("update event", e) from e

        return result.get("status") != "cancelled"

    def delete_event(self, event_id: str) -> None:
        """Delete an event; deleting a missing event is not an error."""
        try:
            (
                self._service.events()
                .delete(calendarId=self.calendar_id, eventId=event_id)
                .execute()
            )
        except HttpError as e:
            if e.resp.status in GONE_STATUSES:
                logger.debug(f"Calendar event {event_id} already deleted")
                return
            raise self._error("delete event", e) from e
        except (GoogleAuthError, OSError) as e:
            raise self._error("delete event", e) from e

    def list_events(
        self,
        time_min: datetime,
        time_max: datetime,
        max_results: int = 250,
    ) -> list[CalendarEvent]:
        """List events overlapping a time window.

        Args:
            time_min: Events ending after this instant are included
            time_max: Events starting before this instant are included
            max_results: Page size

        Returns:
            Non-cancelled events, recurring events expanded
        """
        events: list[CalendarEvent] = []
        page_token = None

        params: dict[str, Any] = {
            "calendarId": self.calendar_id,
            "timeMin": time_min.isoformat(),
            "timeMax": time_max.isoformat(),
            "maxResults": max_results,
            "singleEvents": True,  # Expand recurring events
            "orderBy": "startTime",
        }

        while True:
            if page_token:
                params["pageToken"] = page_token

            try:
                result = self._service.events().list(**params).execute()
            except (HttpError, GoogleAuthError, OSError) as e:
                raise self._error("list events", e) from e

            for item in result.get("items", []):
                if item.get("status") == "cancelled":
                    continue
                events.append(CalendarEvent.from_api(item))

            page_token = result.get("nextPageToken")
            if not page_token:
                break

        return events
