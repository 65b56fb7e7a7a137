"""Member-submitted signup requests and trip suggestions."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum

from pydantic import ConfigDict, Field

from club_trips.exceptions import DataIntegrityError, ValidationError
from club_trips.models.trip import CamelModel, OfficerRequest, normalize_gear_list


class RequestStatus(str, Enum):
    """Officer review state of a signup request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"

    @classmethod
    def from_input(cls, value: str | None) -> RequestStatus:
        raw = (value or "").strip().upper()
        try:
            return cls(raw)
        except ValueError:
            raise ValidationError(
                f"Invalid status: {raw or '(missing)'}", field="status"
            ) from None

    @classmethod
    def from_stored(cls, value: str | None) -> RequestStatus:
        raw = (value or "").strip().upper()
        try:
            return cls(raw)
        except ValueError:
            raise DataIntegrityError(f"Invalid request status: {raw or '(missing)'}") from None


class SignupRequestInput(CamelModel):
    """A member's request to join a trip."""

    model_config = ConfigDict(extra="ignore")

    trip_id: str | None = None
    name: str | None = None
    contact: str | None = None
    carpool: str | None = None
    gear_needed: list[str] | str | None = None
    notes: str | None = None


class SignupRequest(CamelModel):
    """A stored signup request row."""

    request_id: str
    submitted_at: str = ""
    trip_id: str = ""
    name: str = ""
    contact: str = ""
    carpool: str = ""
    gear_needed: list[str] = Field(default_factory=list)
    notes: str = ""
    status: RequestStatus = RequestStatus.PENDING

    @classmethod
    def from_row(cls, row: Mapping[str, str]) -> SignupRequest:
        def text(column: str) -> str:
            return (row.get(column) or "").strip()

        return cls(
            request_id=text("requestId"),
            submitted_at=text("submittedAt"),
            trip_id=text("tripId"),
            name=text("name"),
            contact=text("contact"),
            carpool=text("carpool"),
            gear_needed=normalize_gear_list(row.get("gearNeeded")),
            notes=text("notes"),
            status=RequestStatus.from_stored(row.get("status")),
        )

    def to_row(self) -> dict[str, str]:
        return {
            "submittedAt": self.submitted_at,
            "requestId": self.request_id,
            "tripId": self.trip_id,
            "name": self.name,
            "contact": self.contact,
            "carpool": self.carpool,
            "gearNeeded": ",".join(self.gear_needed),
            "notes": self.notes,
            "status": self.status.value,
        }


class SuggestionInput(CamelModel):
    """A member's idea for a future trip."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    email: str | None = None
    willing_to_lead: str | None = None
    idea: str | None = None
    location: str | None = None
    timing: str | None = None
    notes: str | None = None


class RequestListInput(OfficerRequest):
    """Officer listing of signup requests, optionally for one trip."""

    trip_id: str | None = None


class RequestStatusInput(OfficerRequest):
    """Officer decision on a signup request."""

    status: str | None = None
