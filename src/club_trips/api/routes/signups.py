"""Signup request and suggestion routes.

- POST /api/rsvp: request to join a trip (public)
- POST /api/rsvp/admin: list requests (officer)
- PATCH /api/rsvp/{request_id}: approve/decline/reopen (officer)
- POST /api/suggest: suggest a trip (public)
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from club_trips.api.dependencies import get_signup_service
from club_trips.api.errors import success
from club_trips.auth.officer import require_officer
from club_trips.config import Settings, get_settings
from club_trips.models.signup import (
    RequestListInput,
    RequestStatusInput,
    SignupRequestInput,
    SuggestionInput,
)
from club_trips.signups.service import SignupService

router = APIRouter()


@router.post("/rsvp")
def submit_request(
    body: SignupRequestInput,
    service: SignupService = Depends(get_signup_service),
) -> dict[str, Any]:
    """Ask to join a trip."""
    return success(service.submit_request(body))


@router.post("/rsvp/admin")
def list_requests(
    body: RequestListInput,
    service: SignupService = Depends(get_signup_service),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Signup requests, optionally filtered by trip."""
    require_officer(body.officer_secret, settings)
    return success({"requests": service.list_requests(body.trip_id)})


@router.patch("/rsvp/{request_id}")
def set_request_status(
    request_id: str,
    body: RequestStatusInput,
    service: SignupService = Depends(get_signup_service),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Record an officer decision on a request."""
    require_officer(body.officer_secret, settings)
    request = service.set_request_status(request_id, body.status)
    return success({"requestId": request.request_id, "status": request.status})


@router.post("/suggest")
def submit_suggestion(
    body: SuggestionInput,
    service: SignupService = Depends(get_signup_service),
) -> dict[str, Any]:
    """Suggest a future trip."""
    service.submit_suggestion(body)
    return success()
