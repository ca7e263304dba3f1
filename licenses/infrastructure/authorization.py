"""
Settings-backed implementation of the Authorizer port.

Admin callers present a shared token. Only a fingerprint of the token is
used as the caller identity, so raw tokens never reach the audit log.
"""
import hashlib
import hmac
from typing import Iterable, Optional

from django.conf import settings

from core.domain.value_objects import AdminOperation
from licenses.ports.authorizer import Authorizer


def token_fingerprint(token: Optional[str]) -> Optional[str]:
    """
    Derive a stable caller identity from an admin token.

    Args:
        token: Raw token from the request, if any

    Returns:
        ``token:<16 hex chars>`` or None when no token was supplied
    """
    if not token:
        return None
    digest = hashlib.sha256(token.encode()).hexdigest()
    return f"token:{digest[:16]}"


class SettingsTokenAuthorizer(Authorizer):
    """Grants every admin operation to holders of a configured token."""

    def __init__(self, tokens: Optional[Iterable[str]] = None):
        """
        Initialize authorizer.

        Args:
            tokens: Accepted raw tokens; ``settings.LICENSE_ADMIN_TOKENS`` when omitted
        """
        self._tokens = tokens

    def _fingerprints(self):
        tokens = self._tokens if self._tokens is not None else settings.LICENSE_ADMIN_TOKENS
        return [token_fingerprint(token) for token in tokens if token]

    def is_authorized(self, caller: Optional[str], operation: AdminOperation) -> bool:
        if not caller:
            return False
        # Check every fingerprint so timing does not reveal which one matched
        matched = False
        for fingerprint in self._fingerprints():
            if hmac.compare_digest(caller, fingerprint):
                matched = True
        return matched
