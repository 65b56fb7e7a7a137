"""Editable site copy.

Officers manage a handful of strings shown on the public site (contact
email, meeting details, signup messages) through the `SiteSettings` sheet,
one `key`/`value` row per setting. Reads never fail because of sheet
contents: unknown keys, repeated keys and invalid values are skipped with a
warning and the default is used instead.

| Key | Validation |
|---|---|
| contactEmail | email address |
| volLinkUrl, groupMeUrl | https URL |
| everything else | non-empty text, at most 800 characters |
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from club_trips.exceptions import ValidationError
from club_trips.models.trip import OfficerRequest
from club_trips.sheets.schema import SITE_SETTINGS
from club_trips.sheets.store import RowStore, SheetRow
from club_trips.trips.schedule import format_instant, utc_now

logger = logging.getLogger(__name__)

DEFAULT_SITE_SETTINGS: dict[str, str] = {
    "contactEmail": "officers@example.org",
    "volLinkUrl": "https://example.org/volunteer",
    "groupMeUrl": "https://groupme.com/",
    "meetingSchedule": "Every Week - 7:00 PM",
    "meetingLocation": "Student Center, Room 101",
    "meetingNote": (
        "We meet every week at 7pm. This is where trips are discussed, gear is "
        "handed out and returned, and members connect before adventures. Meeting "
        "attendance is considered for limited-capacity trips."
    ),
    "requestIntroMessage": (
        "Submit your request below. Officers review requests before confirming rosters."
    ),
    "meetingOnlyMessage": (
        "This trip is meeting sign-up only. Please attend a weekly meeting to request a spot."
    ),
    "fullTripMessage": (
        "This trip is currently full. We appreciate your interest and hope you can "
        "join a future trip."
    ),
    "requestReceivedMessage": (
        "Request received. Officers will review it; this is not a confirmed spot."
    ),
}

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
HTTPS_KEYS = ("volLinkUrl", "groupMeUrl")
MAX_MESSAGE_LENGTH = 800


class SiteSettingsView(BaseModel):
    """Effective settings plus any problems found in the sheet."""

    settings: dict[str, str]
    warnings: list[str] = Field(default_factory=list)


class SiteSettingsUpdate(OfficerRequest):
    """Officer request body for changing settings."""

    settings: dict[str, Any] | None = None


def normalize_setting_value(key: str, raw: Any) -> str:
    """Validate one setting value.

    Raises:
        ValidationError: If the value is blank or invalid for its key
    """
    value = "" if raw is None else str(raw).strip()
    if not value:
        raise ValidationError(f"{key} is required", field=key)

    if key == "contactEmail":
        if not EMAIL_PATTERN.match(value):
            raise ValidationError(f"{key} must be a valid email address", field=key)
        return value

    if key in HTTPS_KEYS:
        parts = urlsplit(value)
        if not parts.scheme or not parts.netloc:
            raise ValidationError(f"{key} must be a valid URL", field=key)
        if parts.scheme.lower() != "https":
            raise ValidationError(f"{key} must use https://", field=key)
        return value

    if len(value) > MAX_MESSAGE_LENGTH:
        raise ValidationError(
            f"{key} is too long (max {MAX_MESSAGE_LENGTH} characters)", field=key
        )
    return value


def parse_site_settings(rows: list[SheetRow]) -> SiteSettingsView:
    """Overlay stored rows on the defaults; the first valid row per key wins."""
    settings = dict(DEFAULT_SITE_SETTINGS)
    seen: set[str] = set()
    warnings: list[str] = []

    for row in rows:
        key = row.get("key").strip()
        if not key:
            continue
        if key not in DEFAULT_SITE_SETTINGS:
            warnings.append(f'Ignoring unsupported SiteSettings key "{key}" at row {row.index}.')
            continue
        if key in seen:
            warnings.append(f'Ignoring duplicate SiteSettings key "{key}" at row {row.index}.')
            continue
        try:
            settings[key] = normalize_setting_value(key, row.get("value"))
        except ValidationError as e:
            warnings.append(
                f'Ignoring invalid SiteSettings value for "{key}" at row {row.index}: {e.message}.'
            )
            continue
        seen.add(key)

    return SiteSettingsView(settings=settings, warnings=warnings)


class SiteSettingsService:
    """Read and update site settings."""

    def __init__(self, store: RowStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def get(self) -> SiteSettingsView:
        """Current settings; a missing sheet yields the defaults."""
        view = parse_site_settings(self.store.list_rows(SITE_SETTINGS.name))
        if view.warnings:
            logger.warning(f"Site settings warnings: {' | '.join(view.warnings)}")
        return view

    def update(self, updates: Mapping[str, Any] | None) -> SiteSettingsView:
        """Validate and store settings.

        Every value is validated before anything is written. Keys that
        already have a row are updated in place; others are appended.

        Raises:
            ValidationError: On an empty update, an unknown key or an
                invalid value
            SheetSchemaError: If existing rows lack a value/updatedAt column
        """
        if not isinstance(updates, Mapping):
            raise ValidationError("settings object is required", field="settings")
        if not updates:
            raise ValidationError("settings must include at least one key", field="settings")

        validated: dict[str, str] = {}
        for key, raw in updates.items():
            if key not in DEFAULT_SITE_SETTINGS:
                raise ValidationError(f"Unsupported setting key: {key}", field="settings")
            validated[key] = normalize_setting_value(key, raw)

        row_by_key: dict[str, int] = {}
        for row in self.store.list_rows(SITE_SETTINGS.name):
            key = row.get("key").strip()
            if key and key not in row_by_key:
                row_by_key[key] = row.index

        updated_at = format_instant(self.clock())
        for key, value in validated.items():
            if key in row_by_key:
                self.store.update_fields(
                    SITE_SETTINGS.name,
                    row_by_key[key],
                    {"value": value, "updatedAt": updated_at},
                )
            else:
                self.store.append_row(
                    SITE_SETTINGS,
                    {"key": key, "value": value, "updatedAt": updated_at},
                )

        logger.info(f"Updated site settings: {', '.join(validated)}")
        return self.get()
