"""
CreateLicenseCommand.

Command to create a single license with a caller-chosen key.
"""
from dataclasses import dataclass, field
from typing import Optional

from core.domain.value_objects import ActorContext


@dataclass(frozen=True)
class CreateLicenseCommand:
    """
    Command to create a license.

    The license starts unbound and active at revision 1.
    """

    license_key: str
    expiry_days: int
    edition: str
    owner_email: Optional[str] = None
    notes: Optional[str] = None
    actor: ActorContext = field(default_factory=ActorContext)
