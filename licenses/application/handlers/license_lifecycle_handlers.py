"""
License lifecycle handlers.

Handlers for renew, upgrade, and revoke license commands.
"""
import logging
from typing import Optional

from core.domain.clock import Clock, utc_now
from core.domain.exceptions import LicenseStorageError
from core.domain.value_objects import AdminOperation, AuditAction, Edition, OperationStatus
from licenses.application.commands.renew_license import RenewLicenseCommand
from licenses.application.commands.revoke_license import RevokeLicenseCommand
from licenses.application.commands.upgrade_license import UpgradeLicenseCommand
from licenses.application.dto.license_dto import (
    RenewLicenseResponseDTO,
    RevokeLicenseResponseDTO,
    UpgradeLicenseResponseDTO,
)
from licenses.application.handlers.base import (
    LicenseHandler,
    ensure_authorized,
    require_days,
    require_key,
)
from licenses.application.services.optimistic_mutation import DEFAULT_MAX_ATTEMPTS
from licenses.domain.state_machine import LicenseStateMachine
from licenses.ports.audit_sink import AuditSink
from licenses.ports.authorizer import Authorizer
from licenses.ports.license_store import LicenseStore

logger = logging.getLogger(__name__)


class RenewLicenseHandler(LicenseHandler):
    """Handler for RenewLicenseCommand."""

    operation = "renew"

    async def handle(self, command: RenewLicenseCommand) -> RenewLicenseResponseDTO:
        """
        Handle renew license command.

        The extension is added to the existing expiry baseline, so an
        expired license comes back to life only if the extension reaches
        past today.

        Args:
            command: RenewLicenseCommand

        Returns:
            RenewLicenseResponseDTO

        Raises:
            LicenseValidationError: If the key is blank, the extension is out of
                range, or the extended baseline would pass ``max_expiry_days``
        """
        key = require_key(command.license_key)
        extension_days = require_days(command.extension_days, self.max_expiry_days, "Extension days")
        now = self.clock()

        try:
            result = await self.runner.run(
                key,
                lambda license: LicenseStateMachine.renew(license, extension_days, self.max_expiry_days),
                operation=self.operation,
            )
        except LicenseStorageError as e:
            logger.error(f"Renewal of {key} failed: {e.message}", extra={"license_key": key})
            await self._audit(
                AuditAction.RENEW, OperationStatus.ERROR, None, None, now,
                command.actor, license_key=key, notes=e.code,
            )
            self._count(OperationStatus.ERROR)
            return RenewLicenseResponseDTO(status=OperationStatus.ERROR)

        if not result.found:
            self._count(OperationStatus.INVALID_KEY)
            return RenewLicenseResponseDTO(status=OperationStatus.INVALID_KEY)

        status = result.transition.status
        license = result.after
        await self._audit(AuditAction.RENEW, status, result.before, license, now, command.actor)
        self._count(status)

        if status == OperationStatus.OK:
            logger.info(
                f"Renewed {key} by {extension_days} days to revision {license.server_revision}"
            )
            return RenewLicenseResponseDTO(
                status=status,
                new_expiry=license.expires_at.date(),
                expiry_days=license.expiry_days,
                server_revision=license.server_revision,
            )
        return RenewLicenseResponseDTO(status=status, server_revision=license.server_revision)


class UpgradeLicenseHandler(LicenseHandler):
    """Handler for UpgradeLicenseCommand."""

    operation = "upgrade"

    async def handle(self, command: UpgradeLicenseCommand) -> UpgradeLicenseResponseDTO:
        """
        Handle upgrade license command.

        An unknown edition is answered with INVALID_EDITION before the
        store is read, and is not audited.

        Args:
            command: UpgradeLicenseCommand

        Returns:
            UpgradeLicenseResponseDTO

        Raises:
            LicenseValidationError: If the key is blank
        """
        key = require_key(command.license_key)
        try:
            edition = Edition.parse(command.new_edition)
        except ValueError:
            self._count(OperationStatus.INVALID_EDITION)
            return UpgradeLicenseResponseDTO(status=OperationStatus.INVALID_EDITION)
        now = self.clock()

        try:
            result = await self.runner.run(
                key,
                lambda license: LicenseStateMachine.upgrade(license, edition),
                operation=self.operation,
            )
        except LicenseStorageError as e:
            logger.error(f"Upgrade of {key} failed: {e.message}", extra={"license_key": key})
            await self._audit(
                AuditAction.UPGRADE, OperationStatus.ERROR, None, None, now,
                command.actor, license_key=key, notes=e.code,
            )
            self._count(OperationStatus.ERROR)
            return UpgradeLicenseResponseDTO(status=OperationStatus.ERROR)

        if not result.found:
            self._count(OperationStatus.INVALID_KEY)
            return UpgradeLicenseResponseDTO(status=OperationStatus.INVALID_KEY)

        status = result.transition.status
        license = result.after
        await self._audit(AuditAction.UPGRADE, status, result.before, license, now, command.actor)
        self._count(status)

        if status == OperationStatus.OK:
            logger.info(f"Set edition of {key} to {edition} at revision {license.server_revision}")
            return UpgradeLicenseResponseDTO(
                status=status,
                edition=license.edition.value,
                server_revision=license.server_revision,
            )
        return UpgradeLicenseResponseDTO(status=status, server_revision=license.server_revision)


class RevokeLicenseHandler(LicenseHandler):
    """Handler for RevokeLicenseCommand."""

    operation = "revoke"

    def __init__(
        self,
        license_store: LicenseStore,
        audit_sink: AuditSink,
        authorizer: Authorizer,
        clock: Clock = utc_now,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """Initialize handler with store, audit sink and authorizer."""
        super().__init__(license_store, audit_sink, clock=clock, max_attempts=max_attempts)
        self.authorizer = authorizer

    async def handle(self, command: RevokeLicenseCommand) -> RevokeLicenseResponseDTO:
        """
        Handle revoke license command.

        Revoking an already revoked license succeeds without a second
        revision bump.

        Args:
            command: RevokeLicenseCommand

        Returns:
            RevokeLicenseResponseDTO

        Raises:
            AdminAuthorizationError: If the caller may not revoke
            LicenseValidationError: If the key is blank
        """
        key = require_key(command.license_key)
        ensure_authorized(self.authorizer, command.actor, AdminOperation.REVOKE)
        reason: Optional[str] = (command.reason or "").strip() or None
        now = self.clock()

        try:
            result = await self.runner.run(key, LicenseStateMachine.revoke, operation=self.operation)
        except LicenseStorageError as e:
            logger.error(f"Revocation of {key} failed: {e.message}", extra={"license_key": key})
            await self._audit(
                AuditAction.REVOKE, OperationStatus.ERROR, None, None, now,
                command.actor, license_key=key, notes=e.code,
            )
            self._count(OperationStatus.ERROR)
            return RevokeLicenseResponseDTO(status=OperationStatus.ERROR)

        if not result.found:
            self._count(OperationStatus.INVALID_KEY)
            return RevokeLicenseResponseDTO(status=OperationStatus.INVALID_KEY)

        status = result.transition.status
        license = result.after
        await self._audit(
            AuditAction.REVOKE, status, result.before, license, now, command.actor, notes=reason
        )
        self._count(status)
        if result.revision_changed:
            logger.info(f"Revoked {key} at revision {license.server_revision}")
        return RevokeLicenseResponseDTO(status=status, server_revision=license.server_revision)
