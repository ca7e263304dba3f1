"""
License domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from core.domain.exceptions import KeyGenerationError
from core.domain.value_objects import Edition, LicenseStatus
from licenses.domain.license import License
from licenses.domain.license_key import generate_license_key, validate_prefix
from licenses.ports.license_store import LicenseStore

DEFAULT_KEY_ATTEMPTS = 10


class LicenseKeyGenerator:
    """
    Domain service for unique license key generation.

    Candidates are drawn from ``key_factory`` and checked against the store
    and against keys already handed out in the same call.
    """

    def __init__(
        self,
        store: LicenseStore,
        max_attempts: int = DEFAULT_KEY_ATTEMPTS,
        key_factory: Callable[[Optional[str]], str] = generate_license_key,
    ):
        """
        Initialize the generator.

        Args:
            store: License store used for existence checks
            max_attempts: Candidates tried per key before giving up
            key_factory: Callable producing a candidate key for a prefix
        """
        self.store = store
        self.max_attempts = max_attempts
        self.key_factory = key_factory

    async def generate(self, count: int = 1, prefix: Optional[str] = None) -> List[str]:
        """
        Generate ``count`` keys that are unique in the store and in the batch.

        Args:
            count: Number of keys
            prefix: Optional key prefix

        Returns:
            List of key strings

        Raises:
            KeyGenerationError: If a unique key was not found within the attempt budget
            ValueError: If the prefix is malformed
        """
        prefix = validate_prefix(prefix)
        keys: List[str] = []
        taken = set()

        for _ in range(count):
            for _attempt in range(self.max_attempts):
                candidate = self.key_factory(prefix)
                if candidate in taken:
                    continue
                if await self.store.exists(candidate):
                    continue
                taken.add(candidate)
                keys.append(candidate)
                break
            else:
                raise KeyGenerationError(
                    f"No unique license key after {self.max_attempts} attempts"
                )

        return keys


@dataclass(frozen=True)
class LicenseStatistics:
    """Counts over every stored license at one instant."""

    total: int = 0
    active: int = 0
    expired: int = 0
    revoked: int = 0
    basic: int = 0
    pro: int = 0
    enterprise: int = 0
    expiring_in_7_days: int = 0
    expiring_in_30_days: int = 0


class LicenseStatisticsAggregator:
    """Domain service for aggregate license counts."""

    @staticmethod
    def _expires_within(license: License, now: datetime, days: int) -> bool:
        return now < license.expires_at <= now + timedelta(days=days)

    @staticmethod
    def aggregate(licenses: Iterable[License], now: datetime) -> LicenseStatistics:
        """
        Count licenses by effective status, edition and upcoming expiry.

        Only active licenses count towards the expiring buckets.

        Args:
            licenses: Licenses to aggregate
            now: Instant to evaluate expiry at

        Returns:
            LicenseStatistics
        """
        counts = {
            "total": 0,
            "active": 0,
            "expired": 0,
            "revoked": 0,
            "basic": 0,
            "pro": 0,
            "enterprise": 0,
            "expiring_in_7_days": 0,
            "expiring_in_30_days": 0,
        }

        for license in licenses:
            counts["total"] += 1
            status = license.effective_status(now)
            if status == LicenseStatus.REVOKED:
                counts["revoked"] += 1
            elif status == LicenseStatus.EXPIRED:
                counts["expired"] += 1
            else:
                counts["active"] += 1
                if LicenseStatisticsAggregator._expires_within(license, now, 7):
                    counts["expiring_in_7_days"] += 1
                if LicenseStatisticsAggregator._expires_within(license, now, 30):
                    counts["expiring_in_30_days"] += 1

            if license.edition == Edition.BASIC:
                counts["basic"] += 1
            elif license.edition == Edition.PRO:
                counts["pro"] += 1
            else:
                counts["enterprise"] += 1

        return LicenseStatistics(**counts)
