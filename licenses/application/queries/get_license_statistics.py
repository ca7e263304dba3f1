"""
GetLicenseStatisticsQuery.

Query to aggregate counts over all licenses.
"""
from dataclasses import dataclass, field

from core.domain.value_objects import ActorContext


@dataclass(frozen=True)
class GetLicenseStatisticsQuery:
    """Query to get license statistics."""

    actor: ActorContext = field(default_factory=ActorContext)
