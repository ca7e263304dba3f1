"""
BulkGenerateLicensesCommand.

Command to create a batch of licenses with generated keys.
"""
from dataclasses import dataclass, field
from typing import Optional

from core.domain.value_objects import ActorContext


@dataclass(frozen=True)
class BulkGenerateLicensesCommand:
    """Command to generate ``count`` licenses sharing edition and expiry."""

    count: int
    expiry_days: int
    edition: str
    key_prefix: Optional[str] = None
    actor: ActorContext = field(default_factory=ActorContext)
