"""
License domain entity.

This is the core domain entity representing a license key record.
It contains business logic and is independent of infrastructure.
"""
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional

from core.domain.value_objects import Edition, Email, HardwareId, LicenseStatus

INITIAL_REVISION = 1
MAX_KEY_LENGTH = 64
# Upper bound for the expiry baseline; keeps created_at + expiry_days representable
MAX_EXPIRY_DAYS = 36500


@dataclass(frozen=True)
class License:
    """
    License domain entity.

    Represents one license key, its edition, its expiry baseline and the
    device it is bound to. This is an immutable value object; every
    transition returns a new instance.

    ``server_revision`` is bumped by exactly one on every accepted mutation
    (first bind, renew, upgrade, revoke) and never otherwise.
    """

    key: str
    hwid: Optional[str]
    created_at: datetime
    expiry_days: int
    edition: Edition
    status: LicenseStatus
    server_revision: int
    last_seen: Optional[datetime] = None
    owner_email: Optional[str] = None
    notes: Optional[str] = None

    def __post_init__(self):
        """Validate license entity."""
        if not self.key or len(self.key.strip()) == 0:
            raise ValueError("License key cannot be empty")
        if len(self.key) > MAX_KEY_LENGTH:
            raise ValueError("License key too long")
        if not 1 <= self.expiry_days <= MAX_EXPIRY_DAYS:
            raise ValueError(f"Expiry days must be between 1 and {MAX_EXPIRY_DAYS}")
        if not self.status.is_storable:
            raise ValueError(f"Status {self.status} is derived and cannot be stored")
        if self.server_revision < INITIAL_REVISION:
            raise ValueError("Server revision must be positive")
        if self.hwid is not None:
            HardwareId(self.hwid)
        if self.owner_email:
            Email(self.owner_email)

    @classmethod
    def create(
        cls,
        key: str,
        expiry_days: int,
        edition: Edition,
        created_at: datetime,
        owner_email: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> "License":
        """
        Create a new, unbound and active License.

        Args:
            key: License key string
            expiry_days: Days of validity counted from ``created_at``
            edition: License edition
            created_at: Creation instant
            owner_email: Optional owner email
            notes: Optional free-form notes

        Returns:
            License entity instance
        """
        return cls(
            key=key.strip(),
            hwid=None,
            created_at=created_at,
            expiry_days=expiry_days,
            edition=edition,
            status=LicenseStatus.ACTIVE,
            server_revision=INITIAL_REVISION,
            owner_email=owner_email or None,
            notes=notes or None,
        )

    @property
    def expires_at(self) -> datetime:
        """Instant at which the license stops being valid."""
        return self.created_at + timedelta(days=self.expiry_days)

    @property
    def is_bound(self) -> bool:
        """Whether a device has claimed this license."""
        return self.hwid is not None

    @property
    def is_revoked(self) -> bool:
        """Whether the license has been revoked."""
        return self.status == LicenseStatus.REVOKED

    def is_expired(self, now: datetime) -> bool:
        """
        Check whether the expiry baseline has passed.

        Args:
            now: Instant to evaluate at

        Returns:
            True if ``now`` is strictly after the expiry instant
        """
        return now > self.expires_at

    def effective_status(self, now: datetime) -> LicenseStatus:
        """
        Status as seen by clients at ``now``.

        Revocation wins over expiry; expiry is never stored.
        """
        if self.is_revoked:
            return LicenseStatus.REVOKED
        if self.is_expired(now):
            return LicenseStatus.EXPIRED
        return LicenseStatus.ACTIVE

    def remaining_days(self, now: datetime) -> int:
        """Whole days left before expiry, never negative."""
        remaining = (self.expires_at.date() - now.date()).days
        return remaining if remaining > 0 else 0

    def hwid_matches(self, hwid: Optional[str]) -> bool:
        """Whether ``hwid`` is the device this license is bound to."""
        if self.hwid is None:
            return False
        return HardwareId(self.hwid).matches(hwid)

    def bind(self, hwid: str, now: datetime) -> "License":
        """
        Bind an unbound license to a device.

        Raises:
            ValueError: If the license is already bound
        """
        if self.is_bound:
            raise ValueError("License is already bound to a device")
        return replace(
            self,
            hwid=HardwareId(hwid).value,
            last_seen=now,
            server_revision=self.server_revision + 1,
        )

    def touch(self, now: datetime) -> "License":
        """Record client contact. Does not change the revision."""
        return replace(self, last_seen=now)

    def renew(self, extension_days: int) -> "License":
        """
        Extend the expiry baseline by ``extension_days``.

        Raises:
            ValueError: If the license is revoked, the extension is not positive,
                or the new baseline exceeds MAX_EXPIRY_DAYS
        """
        if self.is_revoked:
            raise ValueError("Cannot renew a revoked license")
        if extension_days < 1:
            raise ValueError("Extension must be at least 1 day")
        if self.expiry_days + extension_days > MAX_EXPIRY_DAYS:
            raise ValueError(f"Expiry cannot exceed {MAX_EXPIRY_DAYS} days")
        return replace(
            self,
            expiry_days=self.expiry_days + extension_days,
            server_revision=self.server_revision + 1,
        )

    def upgrade(self, edition: Edition) -> "License":
        """
        Change the license edition.

        Raises:
            ValueError: If the license is revoked
        """
        if self.is_revoked:
            raise ValueError("Cannot upgrade a revoked license")
        return replace(self, edition=edition, server_revision=self.server_revision + 1)

    def revoke(self) -> "License":
        """
        Revoke the license.

        Revoking an already revoked license returns it unchanged.
        """
        if self.is_revoked:
            return self
        return replace(
            self,
            status=LicenseStatus.REVOKED,
            server_revision=self.server_revision + 1,
        )
