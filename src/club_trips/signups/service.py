"""Signup requests and suggestions.

Members ask to join a trip through its join link; the request lands in the
`Requests` sheet as PENDING and officers approve or decline it. Only trips
with signupStatus REQUEST_OPEN take online requests; the others answer with
the matching message from site settings.

Suggestions are free-form trip ideas appended to the `Suggestions` sheet.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from club_trips.exceptions import NotFoundError, ValidationError
from club_trips.models.signup import (
    RequestStatus,
    SignupRequest,
    SignupRequestInput,
    SuggestionInput,
)
from club_trips.models.trip import (
    CamelModel,
    SignupStatus,
    Trip,
    normalize_gear_list,
    optional_text,
    required_text,
)
from club_trips.sheets.schema import REQUESTS, SUGGESTIONS, TRIPS
from club_trips.sheets.store import RowStore, SheetRow
from club_trips.site_settings import SiteSettingsService
from club_trips.trips.schedule import format_instant, utc_now

logger = logging.getLogger(__name__)

# signupStatus -> site setting holding the message for closed trips
CLOSED_MESSAGE_KEYS = {
    SignupStatus.MEETING_ONLY: "meetingOnlyMessage",
    SignupStatus.FULL: "fullTripMessage",
}


class SignupReceipt(CamelModel):
    """Response data for a submitted request."""

    request_id: str
    status: RequestStatus
    message: str


class SignupService:
    """Handle member requests and suggestions."""

    def __init__(
        self,
        store: RowStore,
        site_settings: SiteSettingsService,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.site_settings = site_settings
        self.clock = clock

    def submit_request(self, data: SignupRequestInput) -> SignupReceipt:
        """Record a request to join a trip.

        Gear requests are limited to what the trip offers.

        Raises:
            ValidationError: Missing fields, or the trip does not take online requests
            NotFoundError: Unknown trip id
        """
        trip_id = required_text(data.trip_id, "tripId")
        name = required_text(data.name, "name")
        contact = required_text(data.contact, "contact")

        row = self.store.find_row_by_column(TRIPS.name, "tripId", trip_id)
        if row is None:
            raise NotFoundError("Trip not found")
        trip = Trip.from_row(row.values)

        messages = self.site_settings.get().settings
        if trip.signup_status in CLOSED_MESSAGE_KEYS:
            raise ValidationError(
                messages[CLOSED_MESSAGE_KEYS[trip.signup_status]], field="tripId"
            )

        request = SignupRequest(
            request_id=uuid.uuid4().hex,
            submitted_at=format_instant(self.clock()),
            trip_id=trip.trip_id,
            name=name,
            contact=contact,
            carpool=optional_text(data.carpool),
            gear_needed=[
                g for g in normalize_gear_list(data.gear_needed) if g in trip.gear_available
            ],
            notes=optional_text(data.notes),
            status=RequestStatus.PENDING,
        )
        self.store.append_row(REQUESTS, request.to_row())

        logger.info(f"Signup request {request.request_id} for trip {trip.trip_id}")
        return SignupReceipt(
            request_id=request.request_id,
            status=request.status,
            message=messages["requestReceivedMessage"],
        )

    def list_requests(self, trip_id: str | None = None) -> list[SignupRequest]:
        """Requests in submission order, optionally for one trip.

        Raises:
            DataIntegrityError: If a stored status is invalid
        """
        wanted = (trip_id or "").strip()
        requests = [
            SignupRequest.from_row(row.values)
            for row in self.store.list_rows(REQUESTS.name)
            if row.get("requestId").strip()
            and (not wanted or row.get("tripId").strip() == wanted)
        ]
        requests.sort(key=lambda r: r.submitted_at)
        return requests

    def set_request_status(self, request_id: str, status: str | None) -> SignupRequest:
        """Approve, decline or reopen a request.

        Raises:
            NotFoundError: Unknown request id
            ValidationError: Status is not PENDING, APPROVED or DECLINED
        """
        row = self._find_request(request_id)
        new_status = RequestStatus.from_input(status)
        self.store.update_cell(REQUESTS.name, row.index, "status", new_status.value)

        logger.info(f"Signup request {request_id} -> {new_status.value}")
        return SignupRequest.from_row({**row.values, "status": new_status.value})

    def submit_suggestion(self, data: SuggestionInput) -> None:
        """Record a trip idea.

        Raises:
            ValidationError: If name or idea is missing
        """
        name = required_text(data.name, "name")
        idea = required_text(data.idea, "idea")

        self.store.append_row(
            SUGGESTIONS,
            {
                "submittedAt": format_instant(self.clock()),
                "name": name,
                "email": optional_text(data.email),
                "willingToLead": optional_text(data.willing_to_lead),
                "idea": idea,
                "location": optional_text(data.location),
                "timing": optional_text(data.timing),
                "notes": optional_text(data.notes),
            },
        )
        logger.info(f"Trip suggestion from {name}")

    def _find_request(self, request_id: str) -> SheetRow:
        row = None
        if request_id and request_id.strip():
            row = self.store.find_row_by_column(REQUESTS.name, "requestId", request_id)
        if row is None:
            raise NotFoundError("Request not found")
        return row
