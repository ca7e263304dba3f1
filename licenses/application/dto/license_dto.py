"""
License DTOs for API responses.

Each operation response carries an ``OperationStatus`` and refuses to be
built with a status that operation can never return.
"""
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import ClassVar, FrozenSet, Optional, Tuple

from core.domain.value_objects import OperationStatus as S
from licenses.domain.license import License
from licenses.domain.services import LicenseStatistics


@dataclass(frozen=True)
class OperationResponseDTO:
    """Base for operation responses."""

    ALLOWED_STATUSES: ClassVar[FrozenSet[S]] = frozenset(S)

    status: S

    def __post_init__(self):
        """Validate the status against the operation's outcome set."""
        if self.status not in self.ALLOWED_STATUSES:
            raise ValueError(f"{type(self).__name__} cannot carry status {self.status}")

    @property
    def ok(self) -> bool:
        """Whether the operation succeeded."""
        return self.status in (S.OK, S.NO_CHANGE, S.UPDATE)


@dataclass(frozen=True)
class ActivateLicenseResponseDTO(OperationResponseDTO):
    """DTO for activate license response."""

    ALLOWED_STATUSES: ClassVar[FrozenSet[S]] = frozenset(
        {S.OK, S.INVALID_KEY, S.REVOKED, S.LICENSE_EXPIRED, S.HW_MISMATCH, S.ERROR}
    )

    expiry: Optional[date] = None
    edition: Optional[str] = None
    server_revision: Optional[int] = None
    license_status: Optional[str] = None


@dataclass(frozen=True)
class SyncLicenseResponseDTO(OperationResponseDTO):
    """
    DTO for sync license response.

    ``expiry`` and ``edition`` are only filled in for UPDATE and REVOKED,
    when the client has something to refresh.
    """

    ALLOWED_STATUSES: ClassVar[FrozenSet[S]] = frozenset(
        {S.NO_CHANGE, S.UPDATE, S.REVOKED, S.HW_MISMATCH, S.INVALID_KEY, S.ERROR}
    )

    expiry: Optional[date] = None
    edition: Optional[str] = None
    server_revision: Optional[int] = None
    license_status: Optional[str] = None


@dataclass(frozen=True)
class RenewLicenseResponseDTO(OperationResponseDTO):
    """DTO for renew license response."""

    ALLOWED_STATUSES: ClassVar[FrozenSet[S]] = frozenset({S.OK, S.INVALID_KEY, S.REVOKED, S.ERROR})

    new_expiry: Optional[date] = None
    expiry_days: Optional[int] = None
    server_revision: Optional[int] = None


@dataclass(frozen=True)
class UpgradeLicenseResponseDTO(OperationResponseDTO):
    """DTO for upgrade license response."""

    ALLOWED_STATUSES: ClassVar[FrozenSet[S]] = frozenset(
        {S.OK, S.INVALID_KEY, S.REVOKED, S.INVALID_EDITION, S.ERROR}
    )

    edition: Optional[str] = None
    server_revision: Optional[int] = None


@dataclass(frozen=True)
class RevokeLicenseResponseDTO(OperationResponseDTO):
    """DTO for revoke license response."""

    ALLOWED_STATUSES: ClassVar[FrozenSet[S]] = frozenset({S.OK, S.INVALID_KEY, S.ERROR})

    server_revision: Optional[int] = None


@dataclass(frozen=True)
class LicenseDetailsDTO:
    """DTO for license information, with status and remaining days derived at read time."""

    license_key: str
    hwid: Optional[str]
    edition: str
    license_status: str
    expiry_days: int
    expiry: date
    remaining_days: int
    server_revision: int
    created_at: datetime
    last_seen: Optional[datetime]
    owner_email: Optional[str]
    notes: Optional[str]

    @classmethod
    def from_license(cls, license: License, now: datetime) -> "LicenseDetailsDTO":
        """Build the DTO for ``license`` as seen at ``now``."""
        return cls(
            license_key=license.key,
            hwid=license.hwid,
            edition=license.edition.value,
            license_status=license.effective_status(now).value,
            expiry_days=license.expiry_days,
            expiry=license.expires_at.date(),
            remaining_days=license.remaining_days(now),
            server_revision=license.server_revision,
            created_at=license.created_at,
            last_seen=license.last_seen,
            owner_email=license.owner_email,
            notes=license.notes,
        )


@dataclass(frozen=True)
class CreateLicenseResponseDTO(OperationResponseDTO):
    """DTO for create license response."""

    ALLOWED_STATUSES: ClassVar[FrozenSet[S]] = frozenset(
        {S.OK, S.DUPLICATE_KEY, S.INVALID_EDITION, S.ERROR}
    )

    license: Optional[LicenseDetailsDTO] = None


@dataclass(frozen=True)
class BulkGenerateLicensesResponseDTO(OperationResponseDTO):
    """DTO for bulk generate response. Keys are listed only when the whole batch was stored."""

    ALLOWED_STATUSES: ClassVar[FrozenSet[S]] = frozenset(
        {S.OK, S.DUPLICATE_KEY, S.INVALID_EDITION, S.ERROR}
    )

    license_keys: Tuple[str, ...] = ()
    edition: Optional[str] = None
    expiry_days: Optional[int] = None

    @property
    def generated_count(self) -> int:
        """Number of keys created."""
        return len(self.license_keys)


@dataclass(frozen=True)
class LicenseStatisticsDTO:
    """DTO for license statistics response."""

    total: int
    active: int
    expired: int
    revoked: int
    basic: int
    pro: int
    enterprise: int
    expiring_in_7_days: int
    expiring_in_30_days: int
    generated_at: datetime

    @classmethod
    def from_statistics(cls, statistics: LicenseStatistics, generated_at: datetime) -> "LicenseStatisticsDTO":
        """Build the DTO from aggregated statistics."""
        return cls(
            total=statistics.total,
            active=statistics.active,
            expired=statistics.expired,
            revoked=statistics.revoked,
            basic=statistics.basic,
            pro=statistics.pro,
            enterprise=statistics.enterprise,
            expiring_in_7_days=statistics.expiring_in_7_days,
            expiring_in_30_days=statistics.expiring_in_30_days,
            generated_at=generated_at,
        )


@dataclass(frozen=True)
class UsageLogDTO:
    """DTO for one usage log entry."""

    id: uuid.UUID
    license_key: str
    action: str
    outcome: str
    hwid: Optional[str]
    old_edition: Optional[str]
    new_edition: Optional[str]
    old_expiry_days: Optional[int]
    new_expiry_days: Optional[int]
    server_revision: Optional[int]
    ip_address: Optional[str]
    user_agent: Optional[str]
    actor: Optional[str]
    notes: Optional[str]
    created_at: datetime
