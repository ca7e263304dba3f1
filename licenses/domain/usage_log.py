"""
License usage log entry.

One entry per attempt against an existing license, successful or not.
Entries are append-only.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from core.domain.value_objects import ActorContext, AuditAction, OperationStatus
from licenses.domain.license import License


@dataclass(frozen=True)
class LicenseUsageLogEntry:
    """Audit record with before/after edition and expiry snapshots."""

    license_key: str
    action: AuditAction
    outcome: OperationStatus
    created_at: datetime
    hwid: Optional[str] = None
    old_edition: Optional[str] = None
    new_edition: Optional[str] = None
    old_expiry_days: Optional[int] = None
    new_expiry_days: Optional[int] = None
    server_revision: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    actor: Optional[str] = None
    notes: Optional[str] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def record(
        cls,
        action: AuditAction,
        outcome: OperationStatus,
        before: Optional[License],
        after: Optional[License],
        created_at: datetime,
        hwid: Optional[str] = None,
        actor: Optional[ActorContext] = None,
        notes: Optional[str] = None,
        license_key: Optional[str] = None,
    ) -> "LicenseUsageLogEntry":
        """
        Build an entry from the record as it was read and as it was left.

        Args:
            action: What was attempted
            outcome: Status returned to the caller
            before: Record before the attempt (None for creations)
            after: Record after the attempt (same as before when unchanged)
            created_at: When the attempt happened
            hwid: Hardware id supplied by the caller, if any
            actor: Transport-level caller context
            notes: Free-form notes such as a revoke reason
            license_key: Key, when neither snapshot is available

        Returns:
            LicenseUsageLogEntry instance
        """
        snapshot = after or before
        actor = actor or ActorContext()
        return cls(
            license_key=license_key or snapshot.key,
            action=action,
            outcome=outcome,
            created_at=created_at,
            hwid=hwid,
            old_edition=before.edition.value if before else None,
            new_edition=after.edition.value if after else None,
            old_expiry_days=before.expiry_days if before else None,
            new_expiry_days=after.expiry_days if after else None,
            server_revision=snapshot.server_revision if snapshot else None,
            ip_address=actor.ip_address,
            user_agent=actor.user_agent,
            actor=actor.caller,
            notes=notes,
        )
