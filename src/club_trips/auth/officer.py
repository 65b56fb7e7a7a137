"""Officer authorization.

Officers prove their role with a shared passcode sent in the JSON body of
every mutating request (`officerSecret`). The comparison is constant-time.
"""

from __future__ import annotations

import hmac
import logging

from club_trips.config import Settings
from club_trips.exceptions import AuthorizationError

logger = logging.getLogger(__name__)


def is_officer(secret: str | None, settings: Settings) -> bool:
    """Check a submitted passcode against the configured one."""
    if not secret:
        return False
    return hmac.compare_digest(secret.encode(), settings.officer_secret.encode())


def require_officer(secret: str | None, settings: Settings) -> None:
    """Raise unless the passcode matches.

    Raises:
        AuthorizationError: If the passcode is missing or wrong
    """
    if not is_officer(secret, settings):
        logger.warning("Rejected request with invalid officer secret")
        raise AuthorizationError("Not authorized")
