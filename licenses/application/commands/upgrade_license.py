"""
UpgradeLicenseCommand.

Command to change a license's edition.
"""
from dataclasses import dataclass, field

from core.domain.value_objects import ActorContext


@dataclass(frozen=True)
class UpgradeLicenseCommand:
    """Command to change a license's edition. ``new_edition`` is parsed by the handler."""

    license_key: str
    new_edition: str
    actor: ActorContext = field(default_factory=ActorContext)
