"""Tests for trip date/time normalization."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from club_trips.exceptions import InvalidFormatError, InvalidRangeError
from club_trips.trips.schedule import (
    TripSchedule,
    format_instant,
    local_parts,
    normalize_schedule,
    parse_instant,
)

NY = ZoneInfo("America/New_York")


class TestAllDayTrips:
    """Trips entered without a start time."""

    def test_single_day_has_exclusive_end(self):
        """A one-day trip ends at the start of the next day."""
        schedule = normalize_schedule("2024-06-01", NY, end_date="2024-06-01")
        assert schedule.is_all_day is True
        assert schedule.start == datetime(2024, 6, 1, 4, 0, tzinfo=timezone.utc)
        assert schedule.end == datetime(2024, 6, 2, 4, 0, tzinfo=timezone.utc)

    def test_calendar_end_date_is_next_day(self):
        """Calendar date values use the exclusive end."""
        times = normalize_schedule("2024-06-01", NY).to_event_times(NY, "America/New_York")
        assert times.start_date == date(2024, 6, 1)
        assert times.end_date == date(2024, 6, 2)
        assert times.start is None

    def test_multi_day_range(self):
        """A weekend trip covers both days."""
        times = normalize_schedule("2024-06-01", NY, end_date="2024-06-02").to_event_times(
            NY, "America/New_York"
        )
        assert times.end_date == date(2024, 6, 3)

    def test_end_before_start_names_end_date(self):
        """Reversed ranges are rejected with a message about endDate."""
        with pytest.raises(InvalidRangeError) as exc_info:
            normalize_schedule("2024-06-02", NY, end_date="2024-06-01")
        assert "endDate" in exc_info.value.message
        assert exc_info.value.field == "endDate"

    def test_range_across_dst_change_uses_calendar_days(self):
        """The exclusive end is a calendar day, not 24 hours."""
        schedule = normalize_schedule("2024-03-09", NY, end_date="2024-03-10")
        assert schedule.end.astimezone(NY).date() == date(2024, 3, 11)
        assert schedule.end.astimezone(NY).hour == 0


class TestTimedTrips:
    """Trips with a start time."""

    def test_default_duration_is_two_hours(self):
        """Without an end time the trip lasts two hours."""
        schedule = normalize_schedule("2024-09-10", NY, start_time="18:00")
        assert schedule.is_all_day is False
        assert schedule.start == datetime(2024, 9, 10, 22, 0, tzinfo=timezone.utc)
        assert schedule.end - schedule.start == timedelta(hours=2)

    def test_explicit_end(self):
        """End time is read on the end date."""
        schedule = normalize_schedule(
            "2024-09-10", NY, end_date="2024-09-11", start_time="18:00", end_time="09:30"
        )
        assert schedule.end == datetime(2024, 9, 11, 13, 30, tzinfo=timezone.utc)

    def test_zero_length_rejected(self):
        """End equal to start is not allowed."""
        with pytest.raises(InvalidRangeError):
            normalize_schedule("2024-09-10", NY, start_time="18:00", end_time="18:00")

    def test_end_before_start_rejected(self):
        """End before start on the same day is not allowed."""
        with pytest.raises(InvalidRangeError):
            normalize_schedule("2024-09-10", NY, start_time="18:00", end_time="17:00")

    def test_event_times_carry_zone_name(self):
        """Timed calendar values are local times with the IANA zone."""
        times = normalize_schedule("2024-09-10", NY, start_time="18:00").to_event_times(
            NY, "America/New_York"
        )
        assert times.time_zone == "America/New_York"
        assert times.start.hour == 18
        assert times.end.hour == 20

    def test_default_duration_is_absolute_across_dst(self):
        """Two hours means two elapsed hours, even across fall-back."""
        schedule = normalize_schedule("2024-11-03", NY, start_time="00:30")
        assert schedule.end - schedule.start == timedelta(hours=2)
        assert local_parts(schedule.end, NY).time == "01:30"


class TestStrictParsing:
    """Malformed input is rejected with the offending field."""

    @pytest.mark.parametrize("value", ["2024-6-1", "06/01/2024", "2024-06-01T00:00", ""])
    def test_bad_date_format(self, value: str):
        """Dates must be YYYY-MM-DD."""
        with pytest.raises(InvalidFormatError) as exc_info:
            normalize_schedule(value, NY)
        assert exc_info.value.field == "startDate"

    def test_impossible_date(self):
        """Dates must exist on the calendar."""
        with pytest.raises(InvalidFormatError):
            normalize_schedule("2024-02-30", NY)

    @pytest.mark.parametrize("value", ["6:00", "18:00:00", "24:00", "12:60"])
    def test_bad_time(self, value: str):
        """Times must be 24-hour HH:MM."""
        with pytest.raises(InvalidFormatError) as exc_info:
            normalize_schedule("2024-09-10", NY, start_time=value)
        assert exc_info.value.field == "startTime"

    def test_bad_end_date_field(self):
        """The error names endDate when the end date is malformed."""
        with pytest.raises(InvalidFormatError) as exc_info:
            normalize_schedule("2024-09-10", NY, end_date="tomorrow")
        assert exc_info.value.field == "endDate"


class TestFormFields:
    """Recovering edit-form values from stored instants."""

    def test_timed_round_trip(self):
        """Form fields reproduce the original input."""
        schedule = normalize_schedule(
            "2024-09-10", NY, end_date="2024-09-10", start_time="18:00", end_time="21:15"
        )
        assert schedule.to_form_fields(NY) == {
            "startDate": "2024-09-10",
            "endDate": "2024-09-10",
            "startTime": "18:00",
            "endTime": "21:15",
        }

    def test_all_day_reports_inclusive_end(self):
        """All-day trips show the last day, not the exclusive end."""
        schedule = normalize_schedule("2024-06-01", NY, end_date="2024-06-02")
        assert schedule.to_form_fields(NY) == {
            "startDate": "2024-06-01",
            "endDate": "2024-06-02",
            "startTime": "",
            "endTime": "",
        }

    def test_dst_gap_time_is_canonicalized(self):
        """A nonexistent local time round-trips to the time it maps to."""
        schedule = normalize_schedule("2024-03-10", NY, start_time="02:30")
        parts = local_parts(schedule.start, NY)
        again = normalize_schedule(parts.date, NY, start_time=parts.time)
        assert again.start == schedule.start

    def test_default_end_in_repeated_hour_round_trips(self):
        """Re-saving a fall-back night trip keeps its two hours."""
        schedule = normalize_schedule("2024-11-03", NY, start_time="00:00")
        assert schedule.end == datetime(2024, 11, 3, 6, 0, tzinfo=timezone.utc)

        form = schedule.to_form_fields(NY)
        assert form["endTime"] == "01:00"
        again = normalize_schedule(
            form["startDate"],
            NY,
            end_date=form["endDate"],
            start_time=form["startTime"],
            end_time=form["endTime"],
        )
        assert (again.start, again.end) == (schedule.start, schedule.end)

    def test_default_end_in_first_repeated_hour_is_moved_to_second(self):
        """A default end read back from the form resolves to the same instant."""
        schedule = normalize_schedule("2024-11-02", NY, start_time="23:30")
        assert schedule.end == datetime(2024, 11, 3, 6, 30, tzinfo=timezone.utc)

        form = schedule.to_form_fields(NY)
        again = normalize_schedule(
            form["startDate"],
            NY,
            end_date=form["endDate"],
            start_time=form["startTime"],
            end_time=form["endTime"],
        )
        assert again.end == schedule.end

    def test_explicit_end_in_gap_is_unchanged(self):
        """Spring-forward end times keep the first reading."""
        schedule = normalize_schedule("2024-03-10", NY, start_time="00:30", end_time="02:30")
        assert schedule.end == datetime(2024, 3, 10, 7, 30, tzinfo=timezone.utc)


class TestStoredValues:
    """Row storage of instants and schedules."""

    def test_format_instant(self):
        """Instants are stored as UTC with milliseconds."""
        value = datetime(2024, 9, 10, 18, 0, tzinfo=NY)
        assert format_instant(value) == "2024-09-10T22:00:00.000Z"

    def test_parse_instant(self):
        """Stored strings parse back to UTC instants."""
        parsed = parse_instant("2024-09-10T22:00:00.000Z")
        assert parsed == datetime(2024, 9, 10, 22, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["", None, "not a date"])
    def test_parse_instant_invalid(self, value):
        """Blank or garbage values parse to None."""
        assert parse_instant(value) is None

    def test_from_stored_defaults_missing_end(self):
        """A timed row without an end lasts two hours."""
        start = datetime(2024, 9, 10, 22, 0, tzinfo=timezone.utc)
        schedule = TripSchedule.from_stored(start, None, False, NY)
        assert schedule.end == start + timedelta(hours=2)

    def test_from_stored_all_day_missing_end(self):
        """An all-day row without an end lasts one day."""
        start = datetime(2024, 6, 1, 4, 0, tzinfo=timezone.utc)
        schedule = TripSchedule.from_stored(start, None, True, NY)
        assert schedule.end == datetime(2024, 6, 2, 4, 0, tzinfo=timezone.utc)
