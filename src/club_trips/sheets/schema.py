"""Table schemas for the club spreadsheet.

Each table is a sheet whose first row holds column names. A schema lists
the columns the service needs; `RowStore.ensure_table()` creates missing
sheets and appends missing columns but never reorders or renames existing
ones, so officers can keep extra columns of their own.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TableSchema:
    """A sheet name plus the columns it must have."""

    name: str
    columns: tuple[str, ...]


TRIPS = TableSchema(
    name="Trips",
    columns=(
        "createdAt",
        "tripId",
        "eventId",
        "title",
        "activity",
        "start",
        "end",
        "location",
        "leaderName",
        "leaderContact",
        "difficulty",
        "meetTime",
        "meetPlace",
        "notes",
        "gearAvailable",
        "isAllDay",
        "signupStatus",
    ),
)

REQUESTS = TableSchema(
    name="Requests",
    columns=(
        "submittedAt",
        "requestId",
        "tripId",
        "name",
        "contact",
        "carpool",
        "gearNeeded",
        "notes",
        "status",
    ),
)

SUGGESTIONS = TableSchema(
    name="Suggestions",
    columns=(
        "submittedAt",
        "name",
        "email",
        "willingToLead",
        "idea",
        "location",
        "timing",
        "notes",
    ),
)

SITE_SETTINGS = TableSchema(
    name="SiteSettings",
    columns=("key", "value", "updatedAt"),
)
