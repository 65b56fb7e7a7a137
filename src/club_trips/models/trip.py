"""Trip models.

`Trip` mirrors one row of the `Trips` sheet. Rows are stored as strings, so
`Trip.from_row()` and `Trip.to_row()` do the conversions:

- `gearAvailable` is a comma-joined list of known gear tags
- `isAllDay` is `1`/`0` (`true` is also accepted when reading)
- `start`/`end` are ISO-8601 UTC instants
- `signupStatus` must be one of `SignupStatus`; anything else in a stored row
  is a data-integrity error
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from club_trips.exceptions import DataIntegrityError, ValidationError
from club_trips.trips.schedule import format_instant, parse_instant

GEAR_OPTIONS: tuple[str, ...] = (
    "tent",
    "sleeping bag",
    "sleeping pad",
    "stove",
    "headlamp",
)


class SignupStatus(str, Enum):
    """How members may sign up for a trip."""

    REQUEST_OPEN = "REQUEST_OPEN"  # Members submit join requests online
    MEETING_ONLY = "MEETING_ONLY"  # Sign-up happens at a weekly meeting
    FULL = "FULL"

    @classmethod
    def from_input(cls, value: str | None) -> SignupStatus:
        """Parse officer input; blank means requests are open."""
        raw = (value or "").strip().upper()
        if not raw:
            return cls.REQUEST_OPEN
        try:
            return cls(raw)
        except ValueError:
            raise ValidationError(
                f"Invalid signupStatus: {raw}", field="signupStatus"
            ) from None

    @classmethod
    def from_stored(cls, value: str | None) -> SignupStatus:
        """Parse a stored value; there is no default for stored rows."""
        raw = (value or "").strip().upper()
        try:
            return cls(raw)
        except ValueError:
            raise DataIntegrityError(
                f"Invalid signupStatus: {raw or '(missing)'}"
            ) from None


def normalize_gear_list(value: str | Iterable[str] | None) -> list[str]:
    """Reduce gear input to known tags, keeping first-seen order.

    Accepts a list of tags or a comma-separated string. Unknown tags are
    dropped.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [str(item) for item in value]

    gear: list[str] = []
    for item in items:
        tag = item.strip().lower()
        if tag in GEAR_OPTIONS and tag not in gear:
            gear.append(tag)
    return gear


def required_text(value: str | None, field: str) -> str:
    """Trimmed text, or ValidationError("<field> is required") if blank."""
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field} is required", field=field)
    return text


def optional_text(value: str | None) -> str:
    return (value or "").strip()


def parse_bool_flag(value: str | None) -> bool:
    raw = (value or "").strip().lower()
    return raw in ("1", "true")


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class OfficerRequest(CamelModel):
    """Body of an officer-only request that carries nothing but the passcode."""

    model_config = ConfigDict(extra="ignore")

    officer_secret: str | None = None


class TripInput(OfficerRequest):
    """Officer-submitted trip fields.

    Everything is optional here so the service can report missing fields
    with its own messages. Unknown keys are ignored.
    """

    title: str | None = None
    activity: str | None = None
    location: str | None = None
    leader_name: str | None = None
    leader_contact: str | None = None
    difficulty: str | None = None
    meet_time: str | None = None
    meet_place: str | None = None
    notes: str | None = None
    gear_available: list[str] | str | None = None
    signup_status: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None


class Trip(CamelModel):
    """A club trip as stored in the Trips sheet."""

    trip_id: str
    event_id: str = ""
    created_at: str = ""
    title: str = ""
    activity: str = ""
    location: str = ""
    leader_name: str = ""
    leader_contact: str = ""
    difficulty: str = ""
    meet_time: str = ""
    meet_place: str = ""
    notes: str = ""
    gear_available: list[str] = Field(default_factory=list)
    start: datetime | None = None
    end: datetime | None = None
    is_all_day: bool = False
    signup_status: SignupStatus = SignupStatus.REQUEST_OPEN

    @classmethod
    def from_row(cls, row: Mapping[str, str]) -> Trip:
        """Build a trip from a header-keyed row.

        Raises:
            DataIntegrityError: If the stored signupStatus is invalid
        """

        def text(column: str) -> str:
            return (row.get(column) or "").strip()

        return cls(
            trip_id=text("tripId"),
            event_id=text("eventId"),
            created_at=text("createdAt"),
            title=text("title"),
            activity=text("activity"),
            location=text("location"),
            leader_name=text("leaderName"),
            leader_contact=text("leaderContact"),
            difficulty=text("difficulty"),
            meet_time=text("meetTime"),
            meet_place=text("meetPlace"),
            notes=text("notes"),
            gear_available=normalize_gear_list(row.get("gearAvailable")),
            start=parse_instant(row.get("start")),
            end=parse_instant(row.get("end")),
            is_all_day=parse_bool_flag(row.get("isAllDay")),
            signup_status=SignupStatus.from_stored(row.get("signupStatus")),
        )

    def to_row(self) -> dict[str, str]:
        """Header-keyed string values for the Trips sheet."""
        return {
            "createdAt": self.created_at,
            "tripId": self.trip_id,
            "eventId": self.event_id,
            "title": self.title,
            "activity": self.activity,
            "start": format_instant(self.start) if self.start else "",
            "end": format_instant(self.end) if self.end else "",
            "location": self.location,
            "leaderName": self.leader_name,
            "leaderContact": self.leader_contact,
            "difficulty": self.difficulty,
            "meetTime": self.meet_time,
            "meetPlace": self.meet_place,
            "notes": self.notes,
            "gearAvailable": ",".join(self.gear_available),
            "isAllDay": "1" if self.is_all_day else "0",
            "signupStatus": self.signup_status.value,
        }


class PublicTrip(CamelModel):
    """Trip fields shown to anyone browsing the site."""

    trip_id: str
    title: str
    activity: str
    start: datetime
    end: datetime | None
    location: str
    difficulty: str
    meet_time: str
    meet_place: str
    gear_available: list[str]
    is_all_day: bool
    signup_status: SignupStatus
    request_url: str


class AdminTrip(Trip):
    """All trip fields plus the values that refill the officer edit form."""

    request_url: str = ""
    start_date: str = ""
    end_date: str = ""
    start_time: str = ""
    end_time: str = ""


class TripMutationResult(CamelModel):
    """Response data for create/update."""

    trip_id: str
    event_id: str
    request_url: str
