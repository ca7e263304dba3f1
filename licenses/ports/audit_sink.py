"""
AuditSink port (interface).

Append-only destination for license usage log entries.
"""
from abc import ABC, abstractmethod
from typing import List

from licenses.domain.usage_log import LicenseUsageLogEntry


class AuditSink(ABC):
    """Abstract append-only audit log."""

    @abstractmethod
    async def append(self, entry: LicenseUsageLogEntry) -> None:
        """
        Append an entry.

        Args:
            entry: Entry to append

        Raises:
            AuditWriteError: If the entry could not be written
        """
        pass

    @abstractmethod
    async def find_by_key(self, license_key: str, limit: int = 100) -> List[LicenseUsageLogEntry]:
        """
        Return entries for a license key, newest first.

        Args:
            license_key: License key string
            limit: Maximum number of entries

        Returns:
            List of LicenseUsageLogEntry
        """
        pass
