"""Member signup requests and trip suggestions."""

from club_trips.signups.service import SignupReceipt, SignupService

__all__ = ["SignupReceipt", "SignupService"]
