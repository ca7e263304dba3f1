"""
License state machine.

Pure transition functions over a License record. Each function decides
the outcome of one operation and, when the record must change, the new
record to write. Nothing here touches storage; the application layer
applies the result through a conditional write.

States: UNBOUND-ACTIVE -> BOUND-ACTIVE via first activation; EXPIRED is
derived from the clock; REVOKED is terminal.
"""
from dataclasses import dataclass
from datetime import datetime

from core.domain.exceptions import LicenseValidationError
from core.domain.value_objects import Edition, OperationStatus
from licenses.domain.license import MAX_EXPIRY_DAYS, License


@dataclass(frozen=True)
class Transition:
    """Decision taken for one operation against one record."""

    status: OperationStatus
    license: License
    write: bool = False

    @classmethod
    def unchanged(cls, status: OperationStatus, license: License) -> "Transition":
        """Outcome that leaves the stored record alone."""
        return cls(status=status, license=license, write=False)


class LicenseStateMachine:
    """Domain service deciding license lifecycle transitions."""

    @staticmethod
    def activate(license: License, hwid: str, now: datetime) -> Transition:
        """
        Decide an activation attempt.

        Revocation is checked before expiry, and expiry before binding,
        so an expired license can never be bound.
        """
        if license.is_revoked:
            return Transition.unchanged(OperationStatus.REVOKED, license)
        if license.is_expired(now):
            return Transition.unchanged(OperationStatus.LICENSE_EXPIRED, license)
        if not license.is_bound:
            return Transition(OperationStatus.OK, license.bind(hwid, now), write=True)
        if license.hwid_matches(hwid):
            # Same device again: bookkeeping only, revision stays put.
            return Transition(OperationStatus.OK, license.touch(now), write=True)
        return Transition.unchanged(OperationStatus.HW_MISMATCH, license)

    @staticmethod
    def renew(license: License, extension_days: int, max_expiry_days: int = MAX_EXPIRY_DAYS) -> Transition:
        """
        Decide a renewal. Expired licenses may be renewed, revoked ones may not.

        Raises:
            LicenseValidationError: If the extended baseline would pass ``max_expiry_days``
        """
        if license.is_revoked:
            return Transition.unchanged(OperationStatus.REVOKED, license)
        if license.expiry_days + extension_days > max_expiry_days:
            raise LicenseValidationError(
                f"Renewal would take {license.key} past {max_expiry_days} days of validity"
            )
        return Transition(OperationStatus.OK, license.renew(extension_days), write=True)

    @staticmethod
    def upgrade(license: License, edition: Edition) -> Transition:
        """Decide an edition change."""
        if license.is_revoked:
            return Transition.unchanged(OperationStatus.REVOKED, license)
        return Transition(OperationStatus.OK, license.upgrade(edition), write=True)

    @staticmethod
    def revoke(license: License) -> Transition:
        """Decide a revocation. Revoking twice is a no-op that still succeeds."""
        if license.is_revoked:
            return Transition.unchanged(OperationStatus.OK, license)
        return Transition(OperationStatus.OK, license.revoke(), write=True)

    @staticmethod
    def sync(license: License, hwid: str, local_revision: int, now: datetime) -> Transition:
        """
        Decide a sync exchange.

        Sync never changes the revision. The hardware check comes first,
        then revocation, then the revision comparison. A client claiming a
        revision the server never issued is an integrity fault.
        """
        if not license.hwid_matches(hwid):
            return Transition.unchanged(OperationStatus.HW_MISMATCH, license)
        if license.is_revoked:
            return Transition(OperationStatus.REVOKED, license.touch(now), write=True)
        if local_revision == license.server_revision:
            return Transition(OperationStatus.NO_CHANGE, license.touch(now), write=True)
        if local_revision < license.server_revision:
            return Transition(OperationStatus.UPDATE, license.touch(now), write=True)
        return Transition.unchanged(OperationStatus.ERROR, license)
