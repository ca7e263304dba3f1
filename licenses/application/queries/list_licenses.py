"""
ListLicensesQuery.

Query to list every license, newest first.
"""
from dataclasses import dataclass, field

from core.domain.value_objects import ActorContext


@dataclass(frozen=True)
class ListLicensesQuery:
    """Query to list licenses."""

    actor: ActorContext = field(default_factory=ActorContext)
