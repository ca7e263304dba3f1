"""
Test doubles shared across the suite.
"""

from datetime import datetime, timedelta, timezone

from licenses.ports.authorizer import Authorizer

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
ADMIN_TOKEN = "test-admin-token"


class FixedClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class DenyAllAuthorizer(Authorizer):
    """Authorizer refusing every caller."""

    def is_authorized(self, caller, operation) -> bool:
        return False
