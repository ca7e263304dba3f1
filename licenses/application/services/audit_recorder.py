"""
Best-effort audit recording.

A failed audit write is logged and counted but never changes the outcome
already decided for the caller.
"""
import logging

from core.metrics import audit_write_failures_total
from licenses.domain.usage_log import LicenseUsageLogEntry
from licenses.ports.audit_sink import AuditSink

logger = logging.getLogger(__name__)


class AuditRecorder:
    """Appends usage log entries to an AuditSink without propagating failures."""

    def __init__(self, audit_sink: AuditSink):
        """Initialize recorder with an audit sink."""
        self.audit_sink = audit_sink

    async def record(self, entry: LicenseUsageLogEntry) -> bool:
        """
        Append ``entry``.

        Args:
            entry: Usage log entry

        Returns:
            True if the sink accepted the entry
        """
        try:
            await self.audit_sink.append(entry)
            return True
        except Exception as e:  # pylint: disable=broad-exception-caught
            audit_write_failures_total.labels(action=entry.action.value).inc()
            logger.error(
                f"Failed to write audit entry {entry.action} {entry.outcome} "
                f"for {entry.license_key}: {e}",
                exc_info=True,
                extra={"license_key": entry.license_key, "action": entry.action.value},
            )
            return False
