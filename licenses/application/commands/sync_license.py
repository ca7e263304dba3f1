"""
SyncLicenseCommand.

Command sent periodically by an installed client to compare its cached
revision with the server's.
"""
from dataclasses import dataclass, field

from core.domain.value_objects import ActorContext


@dataclass(frozen=True)
class SyncLicenseCommand:
    """Command to sync a client's view of a license."""

    license_key: str
    hwid: str
    local_revision: int
    actor: ActorContext = field(default_factory=ActorContext)
