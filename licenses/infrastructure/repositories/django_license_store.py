"""
Django implementation of the LicenseStore port.

This adapter converts between domain entities and Django ORM models.
"""
import logging
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db import DatabaseError, IntegrityError, transaction

from core.domain.exceptions import DuplicateLicenseKeyError, LicenseStorageError
from core.domain.value_objects import Edition, LicenseStatus
from licenses.domain.license import License
from licenses.infrastructure.models import License as LicenseModel
from licenses.ports.license_store import LicenseStore

logger = logging.getLogger(__name__)


class DjangoLicenseStore(LicenseStore):
    """
    Django ORM implementation of LicenseStore.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to Django models
    3. Implements the conditional write as a filtered UPDATE on
       ``(key, server_revision)``, which the database applies atomically
    """

    def _to_domain(self, model: LicenseModel) -> License:
        """
        Convert Django model to domain entity.

        Args:
            model: Django License model

        Returns:
            License domain entity
        """
        return License(
            key=model.key,
            hwid=model.hwid,
            created_at=model.created_at,
            expiry_days=model.expiry_days,
            edition=Edition(model.edition),
            status=LicenseStatus(model.status),
            server_revision=model.server_revision,
            last_seen=model.last_seen,
            owner_email=model.owner_email,
            notes=model.notes,
        )

    def _to_model(self, license: License) -> LicenseModel:
        """
        Convert domain entity to an unsaved Django model.

        Args:
            license: License domain entity

        Returns:
            Django License model
        """
        return LicenseModel(**self._mutable_fields(license), key=license.key, created_at=license.created_at)

    def _mutable_fields(self, license: License) -> dict:
        return {
            "hwid": license.hwid,
            "expiry_days": license.expiry_days,
            "edition": license.edition.value,
            "status": license.status.value,
            "server_revision": license.server_revision,
            "last_seen": license.last_seen,
            "owner_email": license.owner_email,
            "notes": license.notes,
        }

    @sync_to_async
    def find_by_key(self, key: str) -> Optional[License]:
        """
        Find a license by key string.

        Args:
            key: License key string

        Returns:
            License entity or None if not found
        """
        try:
            model = LicenseModel.objects.get(key=key)
            return self._to_domain(model)
        except LicenseModel.DoesNotExist:
            return None
        except DatabaseError as e:
            raise LicenseStorageError(f"Failed to read license: {e}") from e

    @sync_to_async
    def exists(self, key: str) -> bool:
        """
        Check if a license key is taken.

        Args:
            key: License key string

        Returns:
            True if a record exists, False otherwise
        """
        try:
            return LicenseModel.objects.filter(key=key).exists()
        except DatabaseError as e:
            raise LicenseStorageError(f"Failed to read license: {e}") from e

    @sync_to_async
    def insert(self, license: License) -> License:
        """
        Persist a new license.

        Args:
            license: License entity to insert

        Returns:
            Inserted license entity
        """
        try:
            with transaction.atomic():
                model = self._to_model(license)
                model.save(force_insert=True)
        except IntegrityError as e:
            raise DuplicateLicenseKeyError(key=license.key) from e
        except DatabaseError as e:
            raise LicenseStorageError(f"Failed to insert license: {e}") from e
        return self._to_domain(model)

    @sync_to_async
    def insert_many(self, licenses: List[License]) -> List[License]:
        """
        Persist a batch of new licenses in one transaction.

        Args:
            licenses: License entities to insert

        Returns:
            Inserted license entities
        """
        keys = [license.key for license in licenses]
        if len(set(keys)) != len(keys):
            raise DuplicateLicenseKeyError("Duplicate key within batch")
        try:
            with transaction.atomic():
                LicenseModel.objects.bulk_create([self._to_model(license) for license in licenses])
        except IntegrityError as e:
            raise DuplicateLicenseKeyError("Batch collides with existing keys") from e
        except DatabaseError as e:
            raise LicenseStorageError(f"Failed to insert licenses: {e}") from e
        return list(licenses)

    @sync_to_async
    def compare_and_swap(self, license: License, expected_revision: int) -> bool:
        """
        Update the row only while its revision is still ``expected_revision``.

        Args:
            license: New state of the record
            expected_revision: Revision read before computing ``license``

        Returns:
            True if exactly one row was updated
        """
        try:
            updated = LicenseModel.objects.filter(
                key=license.key, server_revision=expected_revision
            ).update(**self._mutable_fields(license))
        except DatabaseError as e:
            raise LicenseStorageError(f"Failed to update license: {e}") from e
        if not updated:
            logger.debug(f"Conditional write lost for {license.key} at revision {expected_revision}")
        return updated == 1

    @sync_to_async
    def list_all(self) -> List[License]:
        """
        Return every license, newest first.

        Returns:
            List of License entities
        """
        try:
            return [self._to_domain(model) for model in LicenseModel.objects.order_by("-created_at")]
        except DatabaseError as e:
            raise LicenseStorageError(f"Failed to list licenses: {e}") from e
