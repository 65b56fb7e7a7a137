"""Calendar sync routes.

`POST /api/sync` runs one reconciliation pass on demand. Trip mutations
schedule the same pass as a background task (`run_background_sync`).
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends

from club_trips.api.dependencies import get_trip_sync
from club_trips.api.errors import success
from club_trips.auth.officer import require_officer
from club_trips.calendar.sync import SyncResult, TripCalendarSync
from club_trips.config import Settings, get_settings
from club_trips.models.trip import CamelModel, OfficerRequest

logger = logging.getLogger(__name__)

router = APIRouter()


class SyncResultResponse(CamelModel):
    """Sync result response."""

    rows_found: int
    events_found: int
    events_created: int
    events_updated: int
    events_deleted: int
    orphans_deleted: int
    duplicates_deleted: int
    event_ids_saved: int
    rows_unchanged: int
    rows_outside_window: int
    warnings: list[str]
    synced_at: datetime

    @classmethod
    def from_result(cls, result: SyncResult) -> SyncResultResponse:
        return cls(
            rows_found=result.rows_found,
            events_found=result.events_found,
            events_created=result.events_created,
            events_updated=result.events_updated,
            events_deleted=result.events_deleted,
            orphans_deleted=result.orphans_deleted,
            duplicates_deleted=result.duplicates_deleted,
            event_ids_saved=result.event_ids_saved,
            rows_unchanged=result.rows_unchanged,
            rows_outside_window=result.rows_outside_window,
            warnings=result.warnings,
            synced_at=result.synced_at,
        )


def run_background_sync(sync: TripCalendarSync) -> None:
    """Reconcile after a trip mutation; failures are only logged."""
    try:
        sync.run()
    except Exception:
        logger.exception("Background trip sync failed")


@router.post("")
def sync_trips(
    body: OfficerRequest,
    sync: TripCalendarSync = Depends(get_trip_sync),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Reconcile the trip calendar with the Trips sheet."""
    require_officer(body.officer_secret, settings)
    result = sync.run()
    return success(SyncResultResponse.from_result(result))
