"""
Time source for the domain.

Handlers take a ``Clock`` so expiry can be evaluated at an arbitrary instant.
"""
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current timezone-aware UTC time."""
    return datetime.now(timezone.utc)
