"""
License provisioning handlers.

Handles creating a single license and generating licenses in bulk.
"""
import logging
from typing import Optional

from core.domain.clock import Clock, utc_now
from core.domain.exceptions import (
    DuplicateLicenseKeyError,
    KeyGenerationError,
    LicenseStorageError,
    LicenseValidationError,
)
from core.domain.value_objects import AdminOperation, AuditAction, Edition, OperationStatus
from core.metrics import licenses_created_total
from licenses.application.commands.bulk_generate_licenses import BulkGenerateLicensesCommand
from licenses.application.commands.create_license import CreateLicenseCommand
from licenses.application.dto.license_dto import (
    BulkGenerateLicensesResponseDTO,
    CreateLicenseResponseDTO,
    LicenseDetailsDTO,
)
from licenses.application.handlers.base import (
    LicenseHandler,
    ensure_authorized,
    require_days,
    require_key,
)
from licenses.application.services.optimistic_mutation import DEFAULT_MAX_ATTEMPTS
from licenses.domain.license import MAX_EXPIRY_DAYS, License
from licenses.domain.license_key import validate_prefix
from licenses.domain.services import DEFAULT_KEY_ATTEMPTS, LicenseKeyGenerator
from licenses.ports.audit_sink import AuditSink
from licenses.ports.authorizer import Authorizer
from licenses.ports.license_store import LicenseStore

logger = logging.getLogger(__name__)

DEFAULT_BULK_MAX_COUNT = 1000


class CreateLicenseHandler(LicenseHandler):
    """Handler for CreateLicenseCommand."""

    operation = "create"

    def __init__(
        self,
        license_store: LicenseStore,
        audit_sink: AuditSink,
        authorizer: Authorizer,
        clock: Clock = utc_now,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        max_expiry_days: int = MAX_EXPIRY_DAYS,
    ):
        """Initialize handler with store, audit sink and authorizer."""
        super().__init__(
            license_store,
            audit_sink,
            clock=clock,
            max_attempts=max_attempts,
            max_expiry_days=max_expiry_days,
        )
        self.authorizer = authorizer

    async def handle(self, command: CreateLicenseCommand) -> CreateLicenseResponseDTO:
        """
        Handle create license command.

        Args:
            command: CreateLicenseCommand

        Returns:
            CreateLicenseResponseDTO with the created record on OK

        Raises:
            AdminAuthorizationError: If the caller may not create licenses
            LicenseValidationError: If the key, expiry or email is malformed
        """
        key = require_key(command.license_key)
        ensure_authorized(self.authorizer, command.actor, AdminOperation.CREATE)
        expiry_days = require_days(command.expiry_days, self.max_expiry_days, "Expiry days")
        try:
            edition = Edition.parse(command.edition)
        except ValueError:
            self._count(OperationStatus.INVALID_EDITION)
            return CreateLicenseResponseDTO(status=OperationStatus.INVALID_EDITION)

        now = self.clock()
        try:
            license = License.create(
                key=key,
                expiry_days=expiry_days,
                edition=edition,
                created_at=now,
                owner_email=(command.owner_email or "").strip() or None,
                notes=(command.notes or "").strip() or None,
            )
        except ValueError as e:
            raise LicenseValidationError(str(e)) from e

        try:
            saved = await self.license_store.insert(license)
        except DuplicateLicenseKeyError:
            logger.warning(f"License key {key} already exists", extra={"license_key": key})
            await self._audit(
                AuditAction.CREATE, OperationStatus.DUPLICATE_KEY, None, None, now,
                command.actor, license_key=key,
            )
            self._count(OperationStatus.DUPLICATE_KEY)
            return CreateLicenseResponseDTO(status=OperationStatus.DUPLICATE_KEY)
        except LicenseStorageError as e:
            logger.error(f"Creation of {key} failed: {e.message}", extra={"license_key": key})
            await self._audit(
                AuditAction.CREATE, OperationStatus.ERROR, None, None, now,
                command.actor, license_key=key, notes=e.code,
            )
            self._count(OperationStatus.ERROR)
            return CreateLicenseResponseDTO(status=OperationStatus.ERROR)

        await self._audit(AuditAction.CREATE, OperationStatus.OK, None, saved, now, command.actor)
        self._count(OperationStatus.OK)
        licenses_created_total.labels(edition=saved.edition.value).inc()
        logger.info(f"Created license {key} ({saved.edition}, {saved.expiry_days} days)")

        return CreateLicenseResponseDTO(
            status=OperationStatus.OK,
            license=LicenseDetailsDTO.from_license(saved, now),
        )


class BulkGenerateLicensesHandler(LicenseHandler):
    """Handler for BulkGenerateLicensesCommand."""

    operation = "bulk_generate"

    def __init__(
        self,
        license_store: LicenseStore,
        audit_sink: AuditSink,
        authorizer: Authorizer,
        clock: Clock = utc_now,
        key_generator: Optional[LicenseKeyGenerator] = None,
        key_attempts: int = DEFAULT_KEY_ATTEMPTS,
        max_count: int = DEFAULT_BULK_MAX_COUNT,
        max_expiry_days: int = MAX_EXPIRY_DAYS,
    ):
        """
        Initialize handler.

        Args:
            license_store: License store
            audit_sink: Usage log sink
            authorizer: Admin authorization check
            clock: Source of the current UTC time
            key_generator: Key generator; one over ``license_store`` by default
            key_attempts: Candidates tried per key by the default generator
            max_count: Largest batch accepted
            max_expiry_days: Longest expiry baseline accepted
        """
        super().__init__(license_store, audit_sink, clock=clock, max_expiry_days=max_expiry_days)
        self.authorizer = authorizer
        self.key_generator = key_generator or LicenseKeyGenerator(license_store, max_attempts=key_attempts)
        self.max_count = max_count

    async def handle(self, command: BulkGenerateLicensesCommand) -> BulkGenerateLicensesResponseDTO:
        """
        Handle bulk generate command.

        The batch is stored all or nothing: a duplicate anywhere fails the
        whole batch with DUPLICATE_KEY.

        Args:
            command: BulkGenerateLicensesCommand

        Returns:
            BulkGenerateLicensesResponseDTO listing the generated keys on OK

        Raises:
            AdminAuthorizationError: If the caller may not generate licenses
            LicenseValidationError: If count, expiry or prefix is malformed
        """
        ensure_authorized(self.authorizer, command.actor, AdminOperation.BULK_GENERATE)
        if command.count is None or not 1 <= command.count <= self.max_count:
            raise LicenseValidationError(f"Count must be between 1 and {self.max_count}")
        expiry_days = require_days(command.expiry_days, self.max_expiry_days, "Expiry days")
        try:
            prefix = validate_prefix(command.key_prefix)
        except ValueError as e:
            raise LicenseValidationError(str(e)) from e
        try:
            edition = Edition.parse(command.edition)
        except ValueError:
            self._count(OperationStatus.INVALID_EDITION)
            return BulkGenerateLicensesResponseDTO(status=OperationStatus.INVALID_EDITION)

        now = self.clock()
        try:
            keys = await self.key_generator.generate(command.count, prefix)
            licenses = [
                License.create(key=key, expiry_days=expiry_days, edition=edition, created_at=now)
                for key in keys
            ]
            saved = await self.license_store.insert_many(licenses)
        except DuplicateLicenseKeyError as e:
            logger.warning(f"Bulk generation of {command.count} licenses collided: {e.message}")
            self._count(OperationStatus.DUPLICATE_KEY)
            return BulkGenerateLicensesResponseDTO(status=OperationStatus.DUPLICATE_KEY)
        except (KeyGenerationError, LicenseStorageError) as e:
            logger.error(f"Bulk generation of {command.count} licenses failed: {e.message}")
            self._count(OperationStatus.ERROR)
            return BulkGenerateLicensesResponseDTO(status=OperationStatus.ERROR)

        for license in saved:
            await self._audit(
                AuditAction.CREATE, OperationStatus.OK, None, license, now, command.actor,
                notes="bulk",
            )
        self._count(OperationStatus.OK)
        licenses_created_total.labels(edition=edition.value).inc(len(saved))
        logger.info(f"Generated {len(saved)} {edition} licenses")

        return BulkGenerateLicensesResponseDTO(
            status=OperationStatus.OK,
            license_keys=tuple(license.key for license in saved),
            edition=edition.value,
            expiry_days=expiry_days,
        )
