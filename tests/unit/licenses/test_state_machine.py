"""
Unit tests for LicenseStateMachine.
"""
from datetime import timedelta

import pytest

from core.domain.exceptions import LicenseValidationError
from core.domain.value_objects import Edition, OperationStatus
from licenses.domain.state_machine import LicenseStateMachine
from tests.helpers import T0


class TestActivateTransition:
    """Tests for activation decisions."""

    def test_first_activation_binds(self, sample_license):
        """Test an unbound license is bound and written."""
        transition = LicenseStateMachine.activate(sample_license, "HW-1", T0)

        assert transition.status == OperationStatus.OK
        assert transition.write
        assert transition.license.hwid == "HW-1"
        assert transition.license.server_revision == sample_license.server_revision + 1

    def test_same_device_touches_only(self, sample_license):
        """Test re-activation from the bound device keeps the revision."""
        bound = sample_license.bind("HW-1", T0)
        later = T0 + timedelta(hours=2)
        transition = LicenseStateMachine.activate(bound, "hw-1", later)

        assert transition.status == OperationStatus.OK
        assert transition.license.server_revision == bound.server_revision
        assert transition.license.last_seen == later

    def test_other_device_mismatch(self, sample_license):
        """Test another device is refused without a write."""
        bound = sample_license.bind("HW-1", T0)
        transition = LicenseStateMachine.activate(bound, "HW-2", T0)

        assert transition.status == OperationStatus.HW_MISMATCH
        assert not transition.write
        assert transition.license is bound

    def test_revoked(self, sample_license):
        """Test revoked licenses cannot be activated."""
        transition = LicenseStateMachine.activate(sample_license.revoke(), "HW-1", T0)
        assert transition.status == OperationStatus.REVOKED
        assert not transition.write

    def test_expired_before_binding(self, make_license):
        """Test an expired, never activated license is not bound."""
        license = make_license(expiry_days=1)
        transition = LicenseStateMachine.activate(license, "HW-1", T0 + timedelta(days=2))

        assert transition.status == OperationStatus.LICENSE_EXPIRED
        assert transition.license.hwid is None
        assert not transition.write

    def test_revoked_checked_before_expiry(self, make_license):
        """Test revocation is reported over expiry."""
        license = make_license(expiry_days=1).revoke()
        transition = LicenseStateMachine.activate(license, "HW-1", T0 + timedelta(days=2))
        assert transition.status == OperationStatus.REVOKED


class TestRenewUpgradeRevokeTransitions:
    """Tests for renew, upgrade and revoke decisions."""

    def test_renew(self, sample_license):
        """Test renewal writes the extended record."""
        transition = LicenseStateMachine.renew(sample_license, 30)
        assert transition.status == OperationStatus.OK
        assert transition.license.expiry_days == sample_license.expiry_days + 30

    def test_renew_expired(self, make_license):
        """Test expired licenses may be renewed."""
        license = make_license(expiry_days=1)
        transition = LicenseStateMachine.renew(license, 30)
        assert transition.status == OperationStatus.OK
        assert not transition.license.is_expired(T0 + timedelta(days=2))

    def test_renew_keeps_binding(self, sample_license):
        """Test renewal does not touch the binding."""
        bound = sample_license.bind("HW-1", T0)
        assert LicenseStateMachine.renew(bound, 30).license.hwid == "HW-1"

    def test_renew_revoked(self, sample_license):
        """Test revoked licenses are not renewed."""
        transition = LicenseStateMachine.renew(sample_license.revoke(), 30)
        assert transition.status == OperationStatus.REVOKED
        assert not transition.write

    def test_renew_past_max_expiry(self, sample_license):
        """Test a renewal beyond the expiry cap is rejected."""
        with pytest.raises(LicenseValidationError):
            LicenseStateMachine.renew(sample_license, 100, max_expiry_days=sample_license.expiry_days + 99)

    def test_renew_revoked_ignores_cap(self, sample_license):
        """Test revocation is reported before the cap is checked."""
        transition = LicenseStateMachine.renew(sample_license.revoke(), 10**7)
        assert transition.status == OperationStatus.REVOKED

    def test_upgrade(self, sample_license):
        """Test edition change."""
        transition = LicenseStateMachine.upgrade(sample_license, Edition.PRO)
        assert transition.status == OperationStatus.OK
        assert transition.license.edition == Edition.PRO

    def test_upgrade_revoked(self, sample_license):
        """Test revoked licenses are not upgraded."""
        transition = LicenseStateMachine.upgrade(sample_license.revoke(), Edition.PRO)
        assert transition.status == OperationStatus.REVOKED

    def test_revoke(self, sample_license):
        """Test revocation writes once."""
        transition = LicenseStateMachine.revoke(sample_license)
        assert transition.status == OperationStatus.OK
        assert transition.write

    def test_revoke_already_revoked(self, sample_license):
        """Test revoking a revoked license is an unwritten OK."""
        transition = LicenseStateMachine.revoke(sample_license.revoke())
        assert transition.status == OperationStatus.OK
        assert not transition.write


class TestSyncTransition:
    """Tests for sync decisions."""

    def test_no_change(self, sample_license):
        """Test equal revisions."""
        bound = sample_license.bind("HW-1", T0)
        transition = LicenseStateMachine.sync(bound, "HW-1", bound.server_revision, T0)

        assert transition.status == OperationStatus.NO_CHANGE
        assert transition.license.server_revision == bound.server_revision

    def test_update(self, sample_license):
        """Test a stale client."""
        bound = sample_license.bind("HW-1", T0).upgrade(Edition.PRO)
        transition = LicenseStateMachine.sync(bound, "HW-1", 1, T0)

        assert transition.status == OperationStatus.UPDATE
        assert transition.license.server_revision == bound.server_revision

    def test_client_ahead(self, sample_license):
        """Test a client claiming an unissued revision."""
        bound = sample_license.bind("HW-1", T0)
        transition = LicenseStateMachine.sync(bound, "HW-1", bound.server_revision + 5, T0)

        assert transition.status == OperationStatus.ERROR
        assert not transition.write

    def test_hw_mismatch_before_revision(self, sample_license):
        """Test the hardware check precedes the revision comparison."""
        bound = sample_license.bind("HW-1", T0)
        transition = LicenseStateMachine.sync(bound, "HW-2", 99, T0)
        assert transition.status == OperationStatus.HW_MISMATCH

    def test_unbound_is_mismatch(self, sample_license):
        """Test syncing a license never activated."""
        transition = LicenseStateMachine.sync(sample_license, "HW-1", 1, T0)
        assert transition.status == OperationStatus.HW_MISMATCH

    def test_revoked(self, sample_license):
        """Test revoked licenses report REVOKED without a revision change."""
        revoked = sample_license.bind("HW-1", T0).revoke()
        transition = LicenseStateMachine.sync(revoked, "HW-1", 1, T0)

        assert transition.status == OperationStatus.REVOKED
        assert transition.license.server_revision == revoked.server_revision
