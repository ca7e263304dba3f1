"""
RevokeLicenseCommand.

Command to permanently revoke a license.
"""
from dataclasses import dataclass, field
from typing import Optional

from core.domain.value_objects import ActorContext


@dataclass(frozen=True)
class RevokeLicenseCommand:
    """Command to revoke a license."""

    license_key: str
    reason: Optional[str] = None
    actor: ActorContext = field(default_factory=ActorContext)
