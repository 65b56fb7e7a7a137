"""Officer passcode check used by the dashboard login form."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from club_trips.api.errors import success
from club_trips.auth.officer import require_officer
from club_trips.config import Settings, get_settings
from club_trips.models.trip import OfficerRequest

router = APIRouter()


@router.post("/verify")
def verify_officer(
    body: OfficerRequest,
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    require_officer(body.officer_secret, settings)
    return success()
