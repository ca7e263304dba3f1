"""
ListUsageLogsQuery.

Query to read the audit trail of one license.
"""
from dataclasses import dataclass, field

from core.domain.value_objects import ActorContext


@dataclass(frozen=True)
class ListUsageLogsQuery:
    """Query to list usage log entries for a license key, newest first."""

    license_key: str
    limit: int = 100
    actor: ActorContext = field(default_factory=ActorContext)
