"""Trip date/time normalization.

Officers enter trips as local dates and times (`YYYY-MM-DD`, `HH:MM`) in the
club's display timezone. This module turns that input into concrete UTC
instants and back.

## All-day trips

Entered without a start time. Officers give an *inclusive* end date; the
stored end (and the calendar's end date) is the *exclusive* day after it:

    startDate=2024-06-01, endDate=2024-06-01  ->  end date 2024-06-02

## Timed trips

Start and end are local wall-clock times interpreted in the display
timezone. Without an end time the trip lasts two hours. Zero-length trips
are rejected.

## Storage

`start`/`end` are always timezone-aware UTC datetimes. Local times that do
not exist (the spring-forward gap) are shifted to the instant the timezone
maps them to. An end time in the repeated fall-back hour means its second
occurrence, and a default end landing in that hour is moved there too, so
`local_parts()` round-trips every instant produced here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from club_trips.exceptions import InvalidFormatError, InvalidRangeError

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^\d{2}:\d{2}$")

DEFAULT_DURATION = timedelta(hours=2)


@dataclass(frozen=True)
class LocalParts:
    """A local date and time as shown in an edit form."""

    date: str
    time: str


@dataclass(frozen=True)
class EventTimes:
    """Calendar-ready start/end values.

    All-day trips carry `start_date`/`end_date` (end exclusive); timed trips
    carry local `start`/`end` datetimes plus the IANA zone name.
    """

    is_all_day: bool
    start_date: date | None = None
    end_date: date | None = None
    start: datetime | None = None
    end: datetime | None = None
    time_zone: str | None = None


@dataclass(frozen=True)
class TripSchedule:
    """Normalized trip timing."""

    start: datetime
    end: datetime
    is_all_day: bool

    @classmethod
    def from_stored(
        cls,
        start: datetime,
        end: datetime | None,
        is_all_day: bool,
        tz: tzinfo,
    ) -> TripSchedule:
        """Rebuild a schedule from row values.

        A missing end (or one not after start) falls back to the default
        length: one day for all-day trips, two hours for timed ones.
        """
        start = start.astimezone(timezone.utc)
        if end is not None:
            end = end.astimezone(timezone.utc)
        if end is None or end <= start:
            if is_all_day:
                first_day = start.astimezone(tz).date()
                end = _start_of_day(first_day + timedelta(days=1), tz)
            else:
                end = start + DEFAULT_DURATION
        return cls(start=start, end=end, is_all_day=is_all_day)

    def to_event_times(self, tz: tzinfo, tz_name: str) -> EventTimes:
        """Calendar representation of this schedule in the display timezone."""
        if self.is_all_day:
            return EventTimes(
                is_all_day=True,
                start_date=self.start.astimezone(tz).date(),
                end_date=self.end.astimezone(tz).date(),
            )
        return EventTimes(
            is_all_day=False,
            start=self.start.astimezone(tz),
            end=self.end.astimezone(tz),
            time_zone=tz_name,
        )

    def to_form_fields(self, tz: tzinfo) -> dict[str, str]:
        """Recover the officer input that produces this schedule.

        All-day trips report the inclusive end date and no times.
        """
        start = local_parts(self.start, tz)
        if self.is_all_day:
            last_day = self.end.astimezone(tz).date() - timedelta(days=1)
            return {
                "startDate": start.date,
                "endDate": max(last_day, self.start.astimezone(tz).date()).isoformat(),
                "startTime": "",
                "endTime": "",
            }
        end = local_parts(self.end, tz)
        return {
            "startDate": start.date,
            "endDate": end.date,
            "startTime": start.time,
            "endTime": end.time,
        }


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_date(value: str, field: str) -> date:
    """Parse a strict `YYYY-MM-DD` date."""
    value = (value or "").strip()
    if not DATE_PATTERN.match(value):
        raise InvalidFormatError(field, value, "YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidFormatError(field, value, "a real calendar date") from e


def parse_time(value: str, field: str) -> time:
    """Parse a strict 24-hour `HH:MM` time."""
    value = (value or "").strip()
    if not TIME_PATTERN.match(value):
        raise InvalidFormatError(field, value, "HH:MM")
    hours, minutes = int(value[:2]), int(value[3:])
    if hours > 23 or minutes > 59:
        raise InvalidFormatError(field, value, "a 24-hour time")
    return time(hours, minutes)


def local_datetime(day: date, at: time, tz: tzinfo) -> datetime:
    """Interpret a wall-clock time in `tz` and return it as UTC."""
    return datetime.combine(day, at, tzinfo=tz).astimezone(timezone.utc)


def _end_datetime(day: date, at: time, tz: tzinfo) -> datetime:
    """Like `local_datetime`, but an ambiguous wall time takes its later reading."""
    first = datetime.combine(day, at, tzinfo=tz)
    second = first.replace(fold=1)
    if first.utcoffset() == second.utcoffset():
        return first.astimezone(timezone.utc)
    # Offsets also differ inside the spring-forward gap; only a repeated hour
    # maps back to the same wall time
    later = second.astimezone(timezone.utc)
    if later.astimezone(tz).replace(tzinfo=None) != second.replace(tzinfo=None):
        return first.astimezone(timezone.utc)
    return later


def _start_of_day(day: date, tz: tzinfo) -> datetime:
    return local_datetime(day, time(0, 0), tz)


def local_parts(instant: datetime, tz: tzinfo) -> LocalParts:
    """Split an instant into the local date/time strings an edit form shows."""
    local = instant.astimezone(tz)
    return LocalParts(date=local.strftime("%Y-%m-%d"), time=local.strftime("%H:%M"))


def normalize_schedule(
    start_date: str,
    tz: tzinfo,
    end_date: str | None = None,
    start_time: str | None = None,
    end_time: str | None = None,
) -> TripSchedule:
    """Convert officer date/time input into a `TripSchedule`.

    Args:
        start_date: First day, `YYYY-MM-DD`
        tz: Display timezone the input is expressed in
        end_date: Inclusive last day (defaults to start_date)
        start_time: `HH:MM`; omit for an all-day trip
        end_time: `HH:MM`; omit for the two-hour default

    Returns:
        TripSchedule with UTC start/end (end exclusive for all-day trips)

    Raises:
        InvalidFormatError: A field does not match its strict format
        InvalidRangeError: The end is not after the start
    """
    first_day = parse_date(start_date, "startDate")
    last_day = parse_date(end_date, "endDate") if end_date else first_day

    if not start_time:
        if last_day < first_day:
            raise InvalidRangeError("endDate must be on or after startDate", field="endDate")
        return TripSchedule(
            start=_start_of_day(first_day, tz),
            end=_start_of_day(last_day + timedelta(days=1), tz),
            is_all_day=True,
        )

    start = local_datetime(first_day, parse_time(start_time, "startTime"), tz)
    if end_time:
        end = _end_datetime(last_day, parse_time(end_time, "endTime"), tz)
    else:
        default_end = (start + DEFAULT_DURATION).astimezone(tz)
        end = _end_datetime(
            default_end.date(), time(default_end.hour, default_end.minute), tz
        )

    if end <= start:
        raise InvalidRangeError(
            "End (endDate/endTime) must be after the start", field="endTime"
        )

    return TripSchedule(start=start, end=end, is_all_day=False)


def format_instant(value: datetime) -> str:
    """Format a UTC instant the way rows store it (`2024-06-01T04:00:00.000Z`)."""
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_instant(value: str | None) -> datetime | None:
    """Parse a stored ISO-8601 instant; None for blank or unparseable values.

    Values without an offset are taken as UTC.
    """
    value = (value or "").strip()
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
