"""
In-memory implementations of the LicenseStore and AuditSink ports.

Suitable for development, management-command dry runs and tests.
Records are immutable License entities, so handing them out is safe.
"""
import asyncio
import logging
import threading
from typing import Dict, List, Optional

from core.domain.exceptions import DuplicateLicenseKeyError
from licenses.domain.license import License
from licenses.domain.usage_log import LicenseUsageLogEntry
from licenses.ports.audit_sink import AuditSink
from licenses.ports.license_store import LicenseStore

logger = logging.getLogger(__name__)


class InMemoryLicenseStore(LicenseStore):
    """
    Dictionary-backed license store.

    Every call yields to the event loop once before touching state, the way
    a network round-trip would, so concurrent callers interleave.
    """

    def __init__(self, licenses: Optional[List[License]] = None):
        """Initialize the store, optionally seeded."""
        self._records: Dict[str, License] = {}
        self._lock = threading.Lock()
        for license in licenses or []:
            self._records[license.key] = license

    async def find_by_key(self, key: str) -> Optional[License]:
        await asyncio.sleep(0)
        with self._lock:
            return self._records.get(key)

    async def exists(self, key: str) -> bool:
        await asyncio.sleep(0)
        with self._lock:
            return key in self._records

    async def insert(self, license: License) -> License:
        await asyncio.sleep(0)
        with self._lock:
            if license.key in self._records:
                raise DuplicateLicenseKeyError(key=license.key)
            self._records[license.key] = license
        return license

    async def insert_many(self, licenses: List[License]) -> List[License]:
        await asyncio.sleep(0)
        with self._lock:
            seen = set()
            for license in licenses:
                if license.key in self._records or license.key in seen:
                    raise DuplicateLicenseKeyError(key=license.key)
                seen.add(license.key)
            for license in licenses:
                self._records[license.key] = license
        return list(licenses)

    async def compare_and_swap(self, license: License, expected_revision: int) -> bool:
        await asyncio.sleep(0)
        with self._lock:
            current = self._records.get(license.key)
            if current is None or current.server_revision != expected_revision:
                return False
            self._records[license.key] = license
            return True

    async def list_all(self) -> List[License]:
        await asyncio.sleep(0)
        with self._lock:
            records = list(self._records.values())
        return sorted(records, key=lambda license: license.created_at, reverse=True)


class InMemoryAuditSink(AuditSink):
    """List-backed audit sink."""

    def __init__(self):
        """Initialize an empty log."""
        self.entries: List[LicenseUsageLogEntry] = []
        self._lock = threading.Lock()

    async def append(self, entry: LicenseUsageLogEntry) -> None:
        with self._lock:
            self.entries.append(entry)
        logger.debug(f"Audit {entry.action} {entry.outcome} for {entry.license_key}")

    async def find_by_key(self, license_key: str, limit: int = 100) -> List[LicenseUsageLogEntry]:
        with self._lock:
            matching = [e for e in reversed(self.entries) if e.license_key == license_key]
        matching.sort(key=lambda e: e.created_at, reverse=True)
        return matching[:limit]
