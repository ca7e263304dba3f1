"""
RenewLicenseCommand.

Command to renew (extend) a license.
"""
from dataclasses import dataclass, field

from core.domain.value_objects import ActorContext

DEFAULT_RENEWAL_DAYS = 365


@dataclass(frozen=True)
class RenewLicenseCommand:
    """Command to extend a license's expiry baseline by ``extension_days``."""

    license_key: str
    extension_days: int = DEFAULT_RENEWAL_DAYS
    actor: ActorContext = field(default_factory=ActorContext)
