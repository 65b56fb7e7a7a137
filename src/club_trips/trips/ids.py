"""Trip identifiers.

Format: `<local start date>-<title slug>-<4 random chars>`, for example
`2024-09-10-sunset-hike-k3f9`. Ids are never reused; a collision with an
existing row draws a new suffix.
"""

from __future__ import annotations

import re
import secrets
import string
from collections.abc import Collection
from datetime import datetime, tzinfo

from club_trips.exceptions import DataIntegrityError

SLUG_MAX_LENGTH = 32
SUFFIX_LENGTH = 4
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
MAX_ATTEMPTS = 20


def slugify(title: str) -> str:
    """Lowercase ASCII words joined by hyphens; `trip` if nothing is left."""
    slug = re.sub(r"[^a-z0-9]+", "-", (title or "").lower()).strip("-")
    return slug[:SLUG_MAX_LENGTH].strip("-") or "trip"


def random_suffix(length: int = SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(length))


def generate_trip_id(
    start: datetime,
    title: str,
    tz: tzinfo,
    existing_ids: Collection[str] = (),
) -> str:
    """Build a new trip id that is not in `existing_ids`.

    Args:
        start: Trip start instant
        title: Trip title
        tz: Display timezone; the date part is the local start date
        existing_ids: Ids already present in the Trips table
    """
    prefix = f"{start.astimezone(tz).strftime('%Y-%m-%d')}-{slugify(title)}"
    for _ in range(MAX_ATTEMPTS):
        trip_id = f"{prefix}-{random_suffix()}"
        if trip_id not in existing_ids:
            return trip_id
    raise DataIntegrityError(f"Could not find an unused trip id for {prefix}")
