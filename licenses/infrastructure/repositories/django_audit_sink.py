"""
Django implementation of the AuditSink port.
"""
from typing import List

from asgiref.sync import sync_to_async
from django.db import DatabaseError

from core.domain.exceptions import AuditWriteError, LicenseStorageError
from core.domain.value_objects import AuditAction, OperationStatus
from licenses.domain.usage_log import LicenseUsageLogEntry
from licenses.infrastructure.models import LicenseUsageLog
from licenses.ports.audit_sink import AuditSink


class DjangoAuditSink(AuditSink):
    """Writes usage log entries to the ``license_usage_logs`` table."""

    def _to_domain(self, model: LicenseUsageLog) -> LicenseUsageLogEntry:
        return LicenseUsageLogEntry(
            id=model.id,
            license_key=model.license_key,
            action=AuditAction(model.action),
            outcome=OperationStatus(model.outcome),
            created_at=model.created_at,
            hwid=model.hwid,
            old_edition=model.old_edition,
            new_edition=model.new_edition,
            old_expiry_days=model.old_expiry_days,
            new_expiry_days=model.new_expiry_days,
            server_revision=model.server_revision,
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            actor=model.actor,
            notes=model.notes,
        )

    @sync_to_async
    def append(self, entry: LicenseUsageLogEntry) -> None:
        """
        Append an entry.

        Args:
            entry: Entry to append
        """
        try:
            LicenseUsageLog.objects.create(
                id=entry.id,
                license_key=entry.license_key,
                action=entry.action.value,
                outcome=entry.outcome.value,
                hwid=entry.hwid,
                old_edition=entry.old_edition,
                new_edition=entry.new_edition,
                old_expiry_days=entry.old_expiry_days,
                new_expiry_days=entry.new_expiry_days,
                server_revision=entry.server_revision,
                ip_address=entry.ip_address,
                user_agent=(entry.user_agent or "")[:500] or None,
                actor=entry.actor,
                notes=entry.notes,
                created_at=entry.created_at,
            )
        except DatabaseError as e:
            raise AuditWriteError(f"Failed to write audit entry: {e}") from e

    @sync_to_async
    def find_by_key(self, license_key: str, limit: int = 100) -> List[LicenseUsageLogEntry]:
        """
        Return entries for a license key, newest first.

        Args:
            license_key: License key string
            limit: Maximum number of entries

        Returns:
            List of LicenseUsageLogEntry
        """
        try:
            models = LicenseUsageLog.objects.filter(license_key=license_key).order_by("-created_at")[:limit]
            return [self._to_domain(model) for model in models]
        except DatabaseError as e:
            raise LicenseStorageError(f"Failed to read audit log: {e}") from e
