"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True)
class Email(ValueObject):
    """Email value object with validation."""

    value: str

    def __post_init__(self):
        """Validate email format."""
        if not self.value or "@" not in self.value:
            raise ValueError(f"Invalid email address: {self.value}")

    def __str__(self) -> str:
        """Return email as string."""
        return self.value


@dataclass(frozen=True)
class HardwareId(ValueObject):
    """
    Hardware fingerprint of the single device a license is bound to.

    Comparison is case-insensitive; the original spelling is kept for storage.
    """

    value: str

    def __post_init__(self):
        """Validate hardware id."""
        if not self.value or len(self.value.strip()) == 0:
            raise ValueError("Hardware id cannot be empty")
        if len(self.value) > 128:
            raise ValueError("Hardware id too long")

    def matches(self, other: Optional[str]) -> bool:
        """Return True if ``other`` names the same device."""
        if other is None:
            return False
        return self.value.casefold() == other.casefold()

    def __str__(self) -> str:
        """Return hardware id as string."""
        return self.value


class Edition(Enum):
    """License edition (feature tier)."""

    BASIC = "BASIC"
    PRO = "PRO"
    ENTERPRISE = "ENTERPRISE"

    @classmethod
    def parse(cls, value: str) -> "Edition":
        """
        Parse an edition name, ignoring case.

        Raises:
            ValueError: If the name is not a known edition
        """
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().upper())
        except ValueError:
            raise ValueError(f"Invalid edition: {value}") from None

    def __str__(self) -> str:
        """Return edition as string."""
        return self.value


class LicenseStatus(Enum):
    """
    License status value object.

    Only ACTIVE and REVOKED are ever stored. EXPIRED is derived from the
    expiry baseline at read time.
    """

    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"

    @property
    def is_storable(self) -> bool:
        """Whether this status may be persisted on a license record."""
        return self is not LicenseStatus.EXPIRED

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class OperationStatus(Enum):
    """Outcome of a license operation as reported to callers."""

    OK = "OK"
    INVALID_KEY = "INVALID_KEY"
    REVOKED = "REVOKED"
    LICENSE_EXPIRED = "LICENSE_EXPIRED"
    HW_MISMATCH = "HW_MISMATCH"
    INVALID_EDITION = "INVALID_EDITION"
    DUPLICATE_KEY = "DUPLICATE_KEY"
    NO_CHANGE = "NO_CHANGE"
    UPDATE = "UPDATE"
    ERROR = "ERROR"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class AuditAction(Enum):
    """Action recorded on a license usage log entry."""

    CREATE = "CREATE"
    ACTIVATE = "ACTIVATE"
    RENEW = "RENEW"
    UPGRADE = "UPGRADE"
    REVOKE = "REVOKE"
    SYNC = "SYNC"

    def __str__(self) -> str:
        """Return action as string."""
        return self.value


class AdminOperation(Enum):
    """Operations gated behind the external authorization check."""

    CREATE = "create"
    REVOKE = "revoke"
    BULK_GENERATE = "bulk_generate"
    STATISTICS = "statistics"
    READ = "read"

    def __str__(self) -> str:
        """Return operation as string."""
        return self.value


@dataclass(frozen=True)
class ActorContext(ValueObject):
    """Who issued a request, as far as the transport can tell."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    caller: Optional[str] = None
