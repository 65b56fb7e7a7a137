"""Domain models for club trips."""

from club_trips.models.trip import (
    GEAR_OPTIONS,
    AdminTrip,
    OfficerRequest,
    PublicTrip,
    SignupStatus,
    Trip,
    TripInput,
    TripMutationResult,
    normalize_gear_list,
    optional_text,
    required_text,
)
from club_trips.models.signup import (
    RequestListInput,
    RequestStatus,
    RequestStatusInput,
    SignupRequest,
    SignupRequestInput,
    SuggestionInput,
)

__all__ = [
    # Trip
    "GEAR_OPTIONS",
    "AdminTrip",
    "OfficerRequest",
    "PublicTrip",
    "SignupStatus",
    "Trip",
    "TripInput",
    "TripMutationResult",
    "normalize_gear_list",
    "optional_text",
    "required_text",
    # Signup
    "RequestListInput",
    "RequestStatus",
    "RequestStatusInput",
    "SignupRequest",
    "SignupRequestInput",
    "SuggestionInput",
]
