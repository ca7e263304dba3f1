"""
ActivateLicenseCommand.

Command to bind a license to a device, or confirm an existing binding.
"""
from dataclasses import dataclass, field

from core.domain.value_objects import ActorContext


@dataclass(frozen=True)
class ActivateLicenseCommand:
    """Command to activate a license on a hardware id."""

    license_key: str
    hwid: str
    actor: ActorContext = field(default_factory=ActorContext)
