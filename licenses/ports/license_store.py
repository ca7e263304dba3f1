"""
LicenseStore port (interface).

This defines the contract for license persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from licenses.domain.license import License


class LicenseStore(ABC):
    """
    Abstract keyed store for License entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.

    Writes to existing records only happen through ``compare_and_swap``,
    which succeeds only while the stored revision still equals the one the
    caller read. Implementations raise ``LicenseStorageError`` for
    transient failures.
    """

    @abstractmethod
    async def find_by_key(self, key: str) -> Optional[License]:
        """
        Find a license by key string.

        Args:
            key: License key string

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """
        Check if a license key is taken.

        Args:
            key: License key string

        Returns:
            True if a record exists, False otherwise
        """
        pass

    @abstractmethod
    async def insert(self, license: License) -> License:
        """
        Persist a new license.

        Args:
            license: License entity to insert

        Returns:
            Inserted license entity

        Raises:
            DuplicateLicenseKeyError: If the key already exists
        """
        pass

    @abstractmethod
    async def insert_many(self, licenses: List[License]) -> List[License]:
        """
        Persist a batch of new licenses, all or nothing.

        Args:
            licenses: License entities to insert

        Returns:
            Inserted license entities

        Raises:
            DuplicateLicenseKeyError: If any key exists or repeats in the batch;
                nothing is persisted in that case
        """
        pass

    @abstractmethod
    async def compare_and_swap(self, license: License, expected_revision: int) -> bool:
        """
        Replace the stored record if its revision is still ``expected_revision``.

        Args:
            license: New state of the record
            expected_revision: Revision the caller read before computing ``license``

        Returns:
            True if the write happened, False if another writer got there first
            (or the record vanished)
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[License]:
        """
        Return every license, newest first.

        Returns:
            List of License entities
        """
        pass
