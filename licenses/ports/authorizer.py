"""
Authorizer port (interface).

Admin operations ask this collaborator before touching the store.
The permission model behind it lives outside this service.
"""
from abc import ABC, abstractmethod
from typing import Optional

from core.domain.value_objects import AdminOperation


class Authorizer(ABC):
    """Abstract authorization check for admin operations."""

    @abstractmethod
    def is_authorized(self, caller: Optional[str], operation: AdminOperation) -> bool:
        """
        Decide whether ``caller`` may perform ``operation``.

        Args:
            caller: Caller identity as established by the transport
            operation: Admin operation being attempted

        Returns:
            True if allowed
        """
        pass


class AllowAllAuthorizer(Authorizer):
    """Authorizer for trusted in-process callers such as management commands."""

    def is_authorized(self, caller: Optional[str], operation: AdminOperation) -> bool:
        return True
