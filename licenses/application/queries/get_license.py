"""
GetLicenseQuery.

Query to read one license with its derived status.
"""
from dataclasses import dataclass, field

from core.domain.value_objects import ActorContext


@dataclass(frozen=True)
class GetLicenseQuery:
    """Query to get a license by key."""

    license_key: str
    actor: ActorContext = field(default_factory=ActorContext)
