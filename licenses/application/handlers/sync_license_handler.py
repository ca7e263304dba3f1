"""
SyncLicenseHandler.

Handles the periodic sync exchange from an installed client.
"""
import logging

from core.domain.exceptions import LicenseStorageError, LicenseValidationError
from core.domain.value_objects import AuditAction, OperationStatus
from licenses.application.commands.sync_license import SyncLicenseCommand
from licenses.application.dto.license_dto import SyncLicenseResponseDTO
from licenses.application.handlers.base import LicenseHandler, require_hwid, require_key
from licenses.domain.state_machine import LicenseStateMachine

logger = logging.getLogger(__name__)


class SyncLicenseHandler(LicenseHandler):
    """Handler for SyncLicenseCommand."""

    operation = "sync"

    async def handle(self, command: SyncLicenseCommand) -> SyncLicenseResponseDTO:
        """
        Handle sync license command.

        Sync never bumps the revision; it only records ``last_seen`` for
        the bound device.

        Args:
            command: SyncLicenseCommand

        Returns:
            SyncLicenseResponseDTO

        Raises:
            LicenseValidationError: If the key, hardware id or local revision is malformed
        """
        key = require_key(command.license_key)
        hwid = require_hwid(command.hwid)
        if command.local_revision is None or command.local_revision < 0:
            raise LicenseValidationError("Local revision must be zero or greater")
        now = self.clock()

        try:
            result = await self.runner.run(
                key,
                lambda license: LicenseStateMachine.sync(license, hwid, command.local_revision, now),
                operation=self.operation,
            )
        except LicenseStorageError as e:
            logger.error(f"Sync of {key} failed: {e.message}", extra={"license_key": key})
            await self._audit(
                AuditAction.SYNC, OperationStatus.ERROR, None, None, now,
                command.actor, license_key=key, hwid=hwid, notes=e.code,
            )
            self._count(OperationStatus.ERROR)
            return SyncLicenseResponseDTO(status=OperationStatus.ERROR)

        if not result.found:
            self._count(OperationStatus.INVALID_KEY)
            return SyncLicenseResponseDTO(status=OperationStatus.INVALID_KEY)

        status = result.transition.status
        license = result.after
        notes = None
        if status == OperationStatus.ERROR:
            notes = f"client revision {command.local_revision} ahead of server"
            logger.warning(
                f"Client reported revision {command.local_revision} for {key}, "
                f"server is at {license.server_revision}",
                extra={"license_key": key},
            )
        await self._audit(
            AuditAction.SYNC, status, result.before, license, now, command.actor, hwid=hwid, notes=notes
        )
        self._count(status)

        if status in (OperationStatus.UPDATE, OperationStatus.REVOKED):
            return SyncLicenseResponseDTO(
                status=status,
                expiry=license.expires_at.date(),
                edition=license.edition.value,
                server_revision=license.server_revision,
                license_status=license.effective_status(now).value,
            )

        return SyncLicenseResponseDTO(
            status=status,
            server_revision=license.server_revision,
            license_status=license.effective_status(now).value,
        )
