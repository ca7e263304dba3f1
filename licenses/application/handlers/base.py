"""
Shared plumbing for license handlers.
"""
import logging
from datetime import datetime
from typing import Optional

from core.domain.clock import Clock, utc_now
from core.domain.exceptions import AdminAuthorizationError, LicenseValidationError
from core.domain.value_objects import (
    ActorContext,
    AdminOperation,
    AuditAction,
    HardwareId,
    OperationStatus,
)
from core.metrics import license_operations_total
from licenses.application.services.audit_recorder import AuditRecorder
from licenses.application.services.optimistic_mutation import (
    DEFAULT_MAX_ATTEMPTS,
    OptimisticMutationRunner,
)
from licenses.domain.license import MAX_EXPIRY_DAYS, License
from licenses.domain.usage_log import LicenseUsageLogEntry
from licenses.ports.audit_sink import AuditSink
from licenses.ports.authorizer import Authorizer
from licenses.ports.license_store import LicenseStore

logger = logging.getLogger(__name__)


def require_key(license_key: str) -> str:
    """
    Validate and normalise a license key supplied by a caller.

    Raises:
        LicenseValidationError: If the key is blank
    """
    if not license_key or not license_key.strip():
        raise LicenseValidationError("License key is required")
    return license_key.strip()


def require_hwid(hwid: str) -> str:
    """
    Validate a hardware id supplied by a caller.

    Raises:
        LicenseValidationError: If the hardware id is blank or too long
    """
    try:
        return HardwareId(hwid).value
    except ValueError as e:
        raise LicenseValidationError(str(e)) from e


def require_days(days: Optional[int], max_days: int, label: str) -> int:
    """
    Validate a day count supplied by a caller.

    Raises:
        LicenseValidationError: If ``days`` is missing or outside 1..max_days
    """
    if days is None or not 1 <= days <= max_days:
        raise LicenseValidationError(f"{label} must be between 1 and {max_days}")
    return days


def ensure_authorized(authorizer: Authorizer, actor: ActorContext, operation: AdminOperation) -> None:
    """
    Ask the authorizer before an admin operation.

    Raises:
        AdminAuthorizationError: If the caller is refused
    """
    if not authorizer.is_authorized(actor.caller, operation):
        logger.warning(
            f"Refused {operation} for caller {actor.caller!r}",
            extra={"operation": operation.value, "ip_address": actor.ip_address},
        )
        raise AdminAuthorizationError(f"Caller may not perform {operation}")


class LicenseHandler:
    """Base for handlers that write to the license store and the audit log."""

    operation = "license"

    def __init__(
        self,
        license_store: LicenseStore,
        audit_sink: AuditSink,
        clock: Clock = utc_now,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        max_expiry_days: int = MAX_EXPIRY_DAYS,
    ):
        """
        Initialize handler with its collaborators.

        Args:
            license_store: License store
            audit_sink: Usage log sink
            clock: Source of the current UTC time
            max_attempts: Conditional write attempts per request
            max_expiry_days: Longest expiry baseline accepted, capped at MAX_EXPIRY_DAYS
        """
        self.license_store = license_store
        self.audit_recorder = AuditRecorder(audit_sink)
        self.clock = clock
        self.runner = OptimisticMutationRunner(license_store, max_attempts=max_attempts)
        self.max_expiry_days = min(max_expiry_days, MAX_EXPIRY_DAYS)

    def _count(self, status: OperationStatus) -> None:
        license_operations_total.labels(operation=self.operation, status=status.value).inc()

    async def _audit(
        self,
        action: AuditAction,
        outcome: OperationStatus,
        before: Optional[License],
        after: Optional[License],
        now: datetime,
        actor: ActorContext,
        license_key: Optional[str] = None,
        hwid: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        entry = LicenseUsageLogEntry.record(
            action=action,
            outcome=outcome,
            before=before,
            after=after,
            created_at=now,
            hwid=hwid,
            actor=actor,
            notes=notes,
            license_key=license_key,
        )
        await self.audit_recorder.record(entry)
