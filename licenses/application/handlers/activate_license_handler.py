"""
ActivateLicenseHandler.

Handles the activate license command: the first activation binds the
license to the caller's hardware id, later activations from the same
device succeed without changing the revision.
"""
import logging

from core.domain.exceptions import LicenseStorageError
from core.domain.value_objects import AuditAction, OperationStatus
from licenses.application.commands.activate_license import ActivateLicenseCommand
from licenses.application.dto.license_dto import ActivateLicenseResponseDTO
from licenses.application.handlers.base import LicenseHandler, require_hwid, require_key
from licenses.domain.state_machine import LicenseStateMachine

logger = logging.getLogger(__name__)


class ActivateLicenseHandler(LicenseHandler):
    """Handler for ActivateLicenseCommand."""

    operation = "activate"

    async def handle(self, command: ActivateLicenseCommand) -> ActivateLicenseResponseDTO:
        """
        Handle activate license command.

        Concurrent first activations of one unbound license are serialized
        by the conditional write: exactly one hardware id wins, the others
        re-read the bound record and get HW_MISMATCH.

        Args:
            command: ActivateLicenseCommand

        Returns:
            ActivateLicenseResponseDTO

        Raises:
            LicenseValidationError: If the key or hardware id is blank
        """
        key = require_key(command.license_key)
        hwid = require_hwid(command.hwid)
        now = self.clock()

        try:
            result = await self.runner.run(
                key,
                lambda license: LicenseStateMachine.activate(license, hwid, now),
                operation=self.operation,
            )
        except LicenseStorageError as e:
            logger.error(f"Activation of {key} failed: {e.message}", extra={"license_key": key})
            await self._audit(
                AuditAction.ACTIVATE, OperationStatus.ERROR, None, None, now,
                command.actor, license_key=key, hwid=hwid, notes=e.code,
            )
            self._count(OperationStatus.ERROR)
            return ActivateLicenseResponseDTO(status=OperationStatus.ERROR)

        if not result.found:
            self._count(OperationStatus.INVALID_KEY)
            return ActivateLicenseResponseDTO(status=OperationStatus.INVALID_KEY)

        status = result.transition.status
        license = result.after
        await self._audit(
            AuditAction.ACTIVATE, status, result.before, license, now, command.actor, hwid=hwid
        )
        self._count(status)

        if status == OperationStatus.OK:
            return ActivateLicenseResponseDTO(
                status=status,
                expiry=license.expires_at.date(),
                edition=license.edition.value,
                server_revision=license.server_revision,
                license_status=license.effective_status(now).value,
            )

        return ActivateLicenseResponseDTO(
            status=status,
            server_revision=license.server_revision,
            license_status=license.effective_status(now).value,
        )
