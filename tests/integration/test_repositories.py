"""
Integration tests for the ORM-backed store and audit sink.
"""

from datetime import timedelta

import pytest
from asgiref.sync import async_to_sync

from core.domain.exceptions import DuplicateLicenseKeyError
from core.domain.value_objects import AuditAction, Edition, LicenseStatus, OperationStatus
from licenses.domain.usage_log import LicenseUsageLogEntry
from licenses.infrastructure.models import License as LicenseModel
from tests.helpers import T0


@pytest.mark.django_db
@pytest.mark.integration
class TestDjangoLicenseStore:
    """Integration tests for DjangoLicenseStore."""

    def test_insert_and_find(self, django_license_store, make_license):
        """Test a license round-trips through the database."""
        license = make_license(edition=Edition.PRO, owner_email="owner@example.com", notes="vip")

        async_to_sync(django_license_store.insert)(license)
        found = async_to_sync(django_license_store.find_by_key)(license.key)

        assert found == license

    def test_find_not_found(self, django_license_store):
        """Test finding a missing key."""
        assert async_to_sync(django_license_store.find_by_key)("NOPE") is None

    def test_exists(self, django_license_store, sample_license):
        """Test checking key existence."""
        assert not async_to_sync(django_license_store.exists)(sample_license.key)
        async_to_sync(django_license_store.insert)(sample_license)
        assert async_to_sync(django_license_store.exists)(sample_license.key)

    def test_insert_duplicate(self, django_license_store, sample_license):
        """Test inserting a taken key."""
        async_to_sync(django_license_store.insert)(sample_license)

        with pytest.raises(DuplicateLicenseKeyError):
            async_to_sync(django_license_store.insert)(sample_license)

    def test_insert_many(self, django_license_store, make_license):
        """Test batch insert."""
        licenses = [make_license(key=f"BATCH-{i}") for i in range(3)]

        async_to_sync(django_license_store.insert_many)(licenses)

        assert LicenseModel.objects.filter(key__startswith="BATCH-").count() == 3

    def test_insert_many_is_atomic(self, django_license_store, make_license):
        """Test a colliding batch stores nothing."""
        async_to_sync(django_license_store.insert)(make_license(key="BATCH-1"))
        licenses = [make_license(key=f"BATCH-{i}") for i in range(3)]

        with pytest.raises(DuplicateLicenseKeyError):
            async_to_sync(django_license_store.insert_many)(licenses)

        assert list(LicenseModel.objects.values_list("key", flat=True)) == ["BATCH-1"]

    def test_insert_many_repeated_key(self, django_license_store, make_license):
        """Test a batch repeating a key is refused."""
        with pytest.raises(DuplicateLicenseKeyError):
            async_to_sync(django_license_store.insert_many)([make_license(key="K"), make_license(key="K")])
        assert LicenseModel.objects.count() == 0

    def test_compare_and_swap(self, django_license_store, sample_license):
        """Test the conditional write."""
        async_to_sync(django_license_store.insert)(sample_license)
        bound = sample_license.bind("HW-1", T0)

        assert async_to_sync(django_license_store.compare_and_swap)(bound, expected_revision=1)
        # Stale writer loses
        assert not async_to_sync(django_license_store.compare_and_swap)(
            sample_license.revoke(), expected_revision=1
        )

        stored = async_to_sync(django_license_store.find_by_key)(sample_license.key)
        assert stored.hwid == "HW-1"
        assert stored.status == LicenseStatus.ACTIVE
        assert stored.server_revision == 2

    def test_compare_and_swap_missing(self, django_license_store, sample_license):
        """Test writing a record that does not exist."""
        assert not async_to_sync(django_license_store.compare_and_swap)(sample_license, expected_revision=1)

    def test_list_all(self, django_license_store, make_license):
        """Test listing newest first."""
        async_to_sync(django_license_store.insert)(make_license(key="OLD", created_at=T0))
        async_to_sync(django_license_store.insert)(make_license(key="NEW", created_at=T0 + timedelta(days=1)))

        licenses = async_to_sync(django_license_store.list_all)()

        assert [license.key for license in licenses] == ["NEW", "OLD"]


@pytest.mark.django_db
@pytest.mark.integration
class TestDjangoAuditSink:
    """Integration tests for DjangoAuditSink."""

    def test_append_and_find(self, django_audit_sink, sample_license, admin_actor):
        """Test entries round-trip, newest first."""
        older = LicenseUsageLogEntry.record(
            action=AuditAction.CREATE,
            outcome=OperationStatus.OK,
            before=None,
            after=sample_license,
            created_at=T0,
            actor=admin_actor,
        )
        newer = LicenseUsageLogEntry.record(
            action=AuditAction.UPGRADE,
            outcome=OperationStatus.OK,
            before=sample_license,
            after=sample_license.upgrade(Edition.PRO),
            created_at=T0 + timedelta(minutes=1),
        )
        async_to_sync(django_audit_sink.append)(older)
        async_to_sync(django_audit_sink.append)(newer)

        entries = async_to_sync(django_audit_sink.find_by_key)(sample_license.key)

        assert entries == [newer, older]
        assert entries[1].actor == admin_actor.caller
        assert entries[0].old_edition == "BASIC"
        assert entries[0].new_edition == "PRO"

    def test_find_limit(self, django_audit_sink, sample_license):
        """Test the limit."""
        for minute in range(3):
            async_to_sync(django_audit_sink.append)(
                LicenseUsageLogEntry.record(
                    action=AuditAction.SYNC,
                    outcome=OperationStatus.NO_CHANGE,
                    before=sample_license,
                    after=sample_license,
                    created_at=T0 + timedelta(minutes=minute),
                )
            )

        assert len(async_to_sync(django_audit_sink.find_by_key)(sample_license.key, limit=2)) == 2
