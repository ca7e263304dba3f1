"""
Pytest configuration and shared fixtures.
"""

import pytest

from core.domain.value_objects import ActorContext, Edition
from licenses.domain.license import License
from licenses.infrastructure.authorization import token_fingerprint
from licenses.infrastructure.repositories.django_audit_sink import DjangoAuditSink
from licenses.infrastructure.repositories.django_license_store import DjangoLicenseStore
from licenses.infrastructure.repositories.in_memory_license_store import (
    InMemoryAuditSink,
    InMemoryLicenseStore,
)
from tests.helpers import ADMIN_TOKEN, T0, DenyAllAuthorizer, FixedClock


@pytest.fixture
def clock():
    """Fixture for a clock frozen at T0."""
    return FixedClock()


@pytest.fixture
def license_store():
    """Fixture for an empty in-memory LicenseStore."""
    return InMemoryLicenseStore()


@pytest.fixture
def audit_sink():
    """Fixture for an empty in-memory AuditSink."""
    return InMemoryAuditSink()


@pytest.fixture
def django_license_store():
    """Fixture for the ORM-backed LicenseStore."""
    return DjangoLicenseStore()


@pytest.fixture
def django_audit_sink():
    """Fixture for the ORM-backed AuditSink."""
    return DjangoAuditSink()


@pytest.fixture
def deny_all_authorizer():
    """Fixture for an authorizer that refuses everything."""
    return DenyAllAuthorizer()


@pytest.fixture
def actor():
    """Fixture for a client caller context."""
    return ActorContext(ip_address="203.0.113.7", user_agent="client/1.0")


@pytest.fixture
def admin_actor():
    """Fixture for an admin caller context."""
    return ActorContext(ip_address="198.51.100.1", caller=token_fingerprint(ADMIN_TOKEN))


@pytest.fixture
def make_license():
    """Factory fixture building License entities created at T0."""

    def _make(
        key="ABCD-EFGH-JKLM-NPQR",
        expiry_days=365,
        edition=Edition.BASIC,
        created_at=T0,
        **kwargs,
    ):
        return License.create(key=key, expiry_days=expiry_days, edition=edition, created_at=created_at, **kwargs)

    return _make


@pytest.fixture
def sample_license(make_license):
    """Fixture for an unbound, active BASIC license."""
    return make_license()


@pytest.fixture
def seeded_store(sample_license):
    """Fixture for an in-memory store holding ``sample_license``."""
    return InMemoryLicenseStore([sample_license])


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def admin_client(api_client):
    """Fixture for DRF API client carrying the admin token."""
    api_client.credentials(HTTP_X_ADMIN_TOKEN=ADMIN_TOKEN)
    return api_client
