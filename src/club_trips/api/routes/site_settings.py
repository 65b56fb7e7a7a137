"""Site settings routes.

- GET /api/site-settings: effective settings and sheet warnings
- POST /api/site-settings: update settings (officer)
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from club_trips.api.dependencies import get_site_settings_service
from club_trips.api.errors import success
from club_trips.auth.officer import require_officer
from club_trips.config import Settings, get_settings
from club_trips.site_settings import SiteSettingsService, SiteSettingsUpdate

router = APIRouter()


@router.get("")
def get_site_settings(
    service: SiteSettingsService = Depends(get_site_settings_service),
) -> dict[str, Any]:
    return success(service.get())


@router.post("")
def update_site_settings(
    body: SiteSettingsUpdate,
    service: SiteSettingsService = Depends(get_site_settings_service),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Validate and store new values; unknown keys are rejected."""
    require_officer(body.officer_secret, settings)
    return success(service.update(body.settings))
