"""Calendar event description codec.

Trip events carry a plain-text description members read in their calendar
app. The `Trip ID:` line is also the only link between an event and its
row in the Trips sheet, so `decode_trip_id(encode_description(f))` must
always give back `f.trip_id`.

Example:

```
Trip ID: 2024-09-10-sunset-hike-x7k2
Activity: Hiking
Difficulty: Easy
Club gear available: headlamp

Meet time: 5:30 PM
Meet place: Student center
Leader: Sam

Request to join: https://club.example.org/trips.html?tripId=2024-09-10-sunset-hike-x7k2

Notes:
Bring water.
```
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

TRIP_ID_PATTERN = re.compile(r"Trip ID:[ \t]*([^\r\n]*)", re.IGNORECASE)


@dataclass
class DescriptionFields:
    """Trip metadata rendered into an event description."""

    trip_id: str
    activity: str = ""
    difficulty: str = ""
    gear_available: list[str] = field(default_factory=list)
    meet_time: str = ""
    meet_place: str = ""
    leader_name: str = ""
    leader_contact: str = ""
    request_url: str = ""
    notes: str = ""


def _line(label: str, value: str) -> list[str]:
    value = (value or "").strip()
    return [f"{label}: {value}"] if value else []


def encode_description(fields: DescriptionFields) -> str:
    """Render trip metadata; empty fields produce no line."""
    sections = [
        [f"Trip ID: {fields.trip_id}"]
        + _line("Activity", fields.activity)
        + _line("Difficulty", fields.difficulty)
        + _line("Club gear available", ", ".join(fields.gear_available)),
        _line("Meet time", fields.meet_time)
        + _line("Meet place", fields.meet_place)
        + _line("Leader", fields.leader_name)
        + _line("Leader contact", fields.leader_contact),
        _line("Request to join", fields.request_url),
    ]
    notes = (fields.notes or "").strip()
    if notes:
        sections.append(["Notes:", notes])

    return "\n\n".join("\n".join(lines) for lines in sections if lines)


def decode_trip_id(description: str | None) -> str | None:
    """Extract the trip id from the first `Trip ID:` line, if any."""
    if not description:
        return None
    match = TRIP_ID_PATTERN.search(description)
    if not match:
        return None
    return match.group(1).strip() or None
