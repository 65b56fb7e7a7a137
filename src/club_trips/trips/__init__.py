"""Trip scheduling and use cases.

- `schedule`: officer date/time input -> UTC start/end instants
- `ids`: trip id generation
- `service`: create/update/delete/list trips (`TripService`)
"""

from club_trips.trips.schedule import (
    TripSchedule,
    local_parts,
    normalize_schedule,
)

__all__ = [
    "TripSchedule",
    "local_parts",
    "normalize_schedule",
]
