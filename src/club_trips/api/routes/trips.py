"""Trip routes.

- GET /api/trips: public listing
- POST /api/trips: create (officer)
- POST /api/trips/admin: full listing for the officer dashboard
- PATCH /api/trips/{trip_id}: edit (officer)
- DELETE /api/trips/{trip_id}: delete (officer)

The officer passcode travels in the JSON body as `officerSecret`. Successful
mutations schedule a calendar sync when `AUTO_SYNC` is on.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends

from club_trips.api.dependencies import get_trip_service, get_trip_sync
from club_trips.api.errors import success
from club_trips.api.routes.sync import run_background_sync
from club_trips.auth.officer import require_officer
from club_trips.calendar.sync import TripCalendarSync
from club_trips.config import Settings, get_settings
from club_trips.models.trip import OfficerRequest, TripInput
from club_trips.trips.service import TripService

router = APIRouter()


def _schedule_sync(
    background_tasks: BackgroundTasks,
    sync: TripCalendarSync,
    settings: Settings,
) -> None:
    if settings.auto_sync:
        background_tasks.add_task(run_background_sync, sync)


@router.get("")
def list_trips(service: TripService = Depends(get_trip_service)) -> dict[str, Any]:
    """Upcoming trips for the public site."""
    return success({"trips": service.list_public()})


@router.post("")
def create_trip(
    body: TripInput,
    background_tasks: BackgroundTasks,
    service: TripService = Depends(get_trip_service),
    sync: TripCalendarSync = Depends(get_trip_sync),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Create a trip and its calendar event."""
    require_officer(body.officer_secret, settings)
    result = service.create(body)
    _schedule_sync(background_tasks, sync, settings)
    return success(result)


# Declared before /{trip_id} so "admin" is not taken as a trip id
@router.post("/admin")
def list_trips_admin(
    body: OfficerRequest,
    service: TripService = Depends(get_trip_service),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Every trip with all fields, for the officer dashboard."""
    require_officer(body.officer_secret, settings)
    return success({"trips": service.list_admin()})


@router.patch("/{trip_id}")
def update_trip(
    trip_id: str,
    body: TripInput,
    background_tasks: BackgroundTasks,
    service: TripService = Depends(get_trip_service),
    sync: TripCalendarSync = Depends(get_trip_sync),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Replace a trip's fields and its calendar event."""
    require_officer(body.officer_secret, settings)
    result = service.update(trip_id, body)
    _schedule_sync(background_tasks, sync, settings)
    return success(result)


@router.delete("/{trip_id}")
def delete_trip(
    trip_id: str,
    body: OfficerRequest,
    background_tasks: BackgroundTasks,
    service: TripService = Depends(get_trip_service),
    sync: TripCalendarSync = Depends(get_trip_sync),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Delete a trip and its calendar event."""
    require_officer(body.officer_secret, settings)
    deleted_id = service.delete(trip_id)
    _schedule_sync(background_tasks, sync, settings)
    return success({"tripId": deleted_id})
