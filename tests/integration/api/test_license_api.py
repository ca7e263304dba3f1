"""
Integration tests for License API endpoints.
"""

from datetime import timedelta

import pytest
from asgiref.sync import async_to_sync
from django.urls import reverse
from django.utils import timezone

from core.domain.value_objects import Edition
from licenses.infrastructure.authorization import token_fingerprint
from licenses.infrastructure.models import License as LicenseModel
from licenses.infrastructure.models import LicenseUsageLog
from tests.helpers import ADMIN_TOKEN

KEY = "ABCD-EFGH-JKLM-NPQR"


@pytest.fixture
def db_license(db, django_license_store, make_license):
    """Fixture for an unbound license created now and saved in the database."""
    license = make_license(key=KEY, created_at=timezone.now(), edition=Edition.BASIC)
    return async_to_sync(django_license_store.insert)(license)


def _activate(api_client, hwid, key=KEY):
    return api_client.post(
        reverse("license:activate-license"),
        {"license_key": key, "hwid": hwid},
        format="json",
    )


@pytest.mark.django_db
@pytest.mark.integration
class TestClientLicenseAPI:
    """Integration tests for client-facing endpoints."""

    def test_activate_success(self, api_client, db_license):
        """Test first activation via API."""
        response = _activate(api_client, "HW-1")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "OK"
        assert data["edition"] == "BASIC"
        assert data["server_revision"] == 2
        assert data["license_status"] == "ACTIVE"
        assert data["expiry"] == db_license.expires_at.date().isoformat()
        assert LicenseModel.objects.get(key=KEY).hwid == "HW-1"

    def test_activate_other_device(self, api_client, db_license):
        """Test HW_MISMATCH is reported in the body with HTTP 200."""
        _activate(api_client, "HW-1")

        response = _activate(api_client, "HW-2")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "HW_MISMATCH"
        assert data["expiry"] is None
        assert LicenseModel.objects.get(key=KEY).hwid == "HW-1"

    def test_activate_unknown_key(self, api_client, db):
        """Test unknown keys."""
        response = _activate(api_client, "HW-1", key="NOPE")

        assert response.status_code == 200
        assert response.json()["status"] == "INVALID_KEY"
        assert LicenseUsageLog.objects.count() == 0

    def test_activate_missing_hwid(self, api_client, db_license):
        """Test request validation."""
        response = api_client.post(
            reverse("license:activate-license"), {"license_key": KEY}, format="json"
        )

        assert response.status_code == 400
        assert "hwid" in response.json()["error"]

    def test_activate_audit_captures_transport(self, api_client, db_license):
        """Test the audit entry records the caller's address and agent."""
        api_client.post(
            reverse("license:activate-license"),
            {"license_key": KEY, "hwid": "HW-1"},
            format="json",
            HTTP_USER_AGENT="client/2.1",
            REMOTE_ADDR="203.0.113.9",
        )

        entry = LicenseUsageLog.objects.get(license_key=KEY)
        assert entry.action == "ACTIVATE"
        assert entry.outcome == "OK"
        assert entry.ip_address == "203.0.113.9"
        assert entry.user_agent == "client/2.1"

    def test_sync_flow(self, api_client, db_license, admin_client):
        """Test NO_CHANGE, then UPDATE after an upgrade, then REVOKED."""
        _activate(api_client, "HW-1")
        url = reverse("license:sync-license")
        payload = {"license_key": KEY, "hwid": "HW-1", "local_revision": 2}

        response = api_client.post(url, payload, format="json")
        assert response.json()["status"] == "NO_CHANGE"
        assert response.json()["expiry"] is None

        api_client.post(
            reverse("license:upgrade-license"), {"license_key": KEY, "new_edition": "PRO"}, format="json"
        )
        response = api_client.post(url, payload, format="json")
        data = response.json()
        assert data["status"] == "UPDATE"
        assert data["edition"] == "PRO"
        assert data["server_revision"] == 3

        admin_client.post(reverse("license:revoke-license"), {"license_key": KEY}, format="json")
        response = api_client.post(url, {**payload, "local_revision": 3}, format="json")
        assert response.json()["status"] == "REVOKED"
        assert response.json()["license_status"] == "REVOKED"
        assert response.json()["edition"] == "PRO"
        assert response.json()["expiry"] == db_license.expires_at.date().isoformat()

    def test_sync_client_ahead(self, api_client, db_license):
        """Test a client ahead of the server."""
        _activate(api_client, "HW-1")

        response = api_client.post(
            reverse("license:sync-license"),
            {"license_key": KEY, "hwid": "HW-1", "local_revision": 7},
            format="json",
        )

        assert response.status_code == 200
        assert response.json()["status"] == "ERROR"

    def test_sync_negative_revision(self, api_client, db_license):
        """Test negative revisions are rejected."""
        response = api_client.post(
            reverse("license:sync-license"),
            {"license_key": KEY, "hwid": "HW-1", "local_revision": -1},
            format="json",
        )
        assert response.status_code == 400

    def test_renew_default_extension(self, api_client, db_license, settings):
        """Test renewal uses the configured default extension."""
        settings.LICENSE_DEFAULT_RENEWAL_DAYS = 30

        response = api_client.post(reverse("license:renew-license"), {"license_key": KEY}, format="json")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "OK"
        assert data["new_expiry"] == (db_license.expires_at + timedelta(days=30)).date().isoformat()
        assert data["server_revision"] == 2
        assert LicenseModel.objects.get(key=KEY).expiry_days == db_license.expiry_days + 30

    def test_renew_extension_too_large(self, api_client, db_license):
        """Test an extension beyond the expiry cap is a request error and nothing is stored."""
        response = api_client.post(
            reverse("license:renew-license"),
            {"license_key": KEY, "extension_days": 10**7},
            format="json",
        )

        assert response.status_code == 400
        stored = LicenseModel.objects.get(key=KEY)
        assert stored.expiry_days == db_license.expiry_days
        assert stored.server_revision == db_license.server_revision

    def test_renew_past_configured_cap(self, api_client, db_license, settings):
        """Test the configured cap applies to the extended baseline."""
        settings.LICENSE_MAX_EXPIRY_DAYS = db_license.expiry_days + 10

        response = api_client.post(
            reverse("license:renew-license"),
            {"license_key": KEY, "extension_days": 11},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert _activate(api_client, "HW-1").json()["status"] == "OK"

    def test_upgrade_invalid_edition(self, api_client, db_license):
        """Test unknown editions are a status, not a request error."""
        response = api_client.post(
            reverse("license:upgrade-license"), {"license_key": KEY, "new_edition": "GOLD"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["status"] == "INVALID_EDITION"
        assert LicenseModel.objects.get(key=KEY).edition == "BASIC"


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminLicenseAPI:
    """Integration tests for admin endpoints."""

    def test_create(self, admin_client):
        """Test creating a license."""
        response = admin_client.post(
            reverse("license:create-license"),
            {
                "license_key": "NEW-0001",
                "expiry_days": 30,
                "edition": "pro",
                "user_email": "owner@example.com",
            },
            format="json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "OK"
        assert data["license"]["license_key"] == "NEW-0001"
        assert data["license"]["edition"] == "PRO"
        assert data["license"]["status"] == "ACTIVE"
        assert data["license"]["user_email"] == "owner@example.com"
        assert data["license"]["remaining_days"] == 30

        entry = LicenseUsageLog.objects.get(license_key="NEW-0001")
        assert entry.action == "CREATE"
        assert entry.actor == token_fingerprint(ADMIN_TOKEN)

    def test_create_duplicate(self, admin_client, db_license):
        """Test creating a taken key."""
        response = admin_client.post(
            reverse("license:create-license"),
            {"license_key": KEY, "expiry_days": 30, "edition": "PRO"},
            format="json",
        )

        assert response.status_code == 409
        assert response.json()["status"] == "DUPLICATE_KEY"

    def test_create_invalid_edition(self, admin_client):
        """Test creating with an unknown edition."""
        response = admin_client.post(
            reverse("license:create-license"),
            {"license_key": "NEW-0001", "expiry_days": 30, "edition": "GOLD"},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["status"] == "INVALID_EDITION"
        assert not LicenseModel.objects.filter(key="NEW-0001").exists()

    def test_create_without_token(self, api_client, db):
        """Test admin endpoints require the token."""
        response = api_client.post(
            reverse("license:create-license"),
            {"license_key": "NEW-0001", "expiry_days": 30, "edition": "PRO"},
            format="json",
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"
        assert not LicenseModel.objects.exists()

    def test_create_wrong_token(self, api_client, db):
        """Test unknown tokens are refused."""
        api_client.credentials(HTTP_X_ADMIN_TOKEN="guess")

        response = api_client.post(
            reverse("license:create-license"),
            {"license_key": "NEW-0001", "expiry_days": 30, "edition": "PRO"},
            format="json",
        )

        assert response.status_code == 403

    def test_revoke_twice(self, admin_client, db_license):
        """Test double revocation via API."""
        url = reverse("license:revoke-license")

        first = admin_client.post(url, {"license_key": KEY, "reason": "refund"}, format="json")
        second = admin_client.post(url, {"license_key": KEY}, format="json")

        assert first.status_code == second.status_code == 200
        assert first.json()["status"] == second.json()["status"] == "OK"
        assert second.json()["server_revision"] == 2
        model = LicenseModel.objects.get(key=KEY)
        assert model.status == "REVOKED"
        assert model.server_revision == 2

    def test_revoke_unknown(self, admin_client, db):
        """Test revoking an unknown key."""
        response = admin_client.post(reverse("license:revoke-license"), {"license_key": "NOPE"}, format="json")

        assert response.status_code == 404
        assert response.json()["status"] == "INVALID_KEY"

    def test_bulk_generate(self, admin_client, db):
        """Test generating licenses in bulk."""
        response = admin_client.post(
            reverse("license:bulk-generate-licenses"),
            {"count": 5, "expiry_days": 365, "edition": "PRO", "key_prefix": "ACME"},
            format="json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["generated_count"] == 5
        assert len(set(data["license_keys"])) == 5
        assert all(key.startswith("ACME-") for key in data["license_keys"])
        for model in LicenseModel.objects.filter(key__in=data["license_keys"]):
            assert model.hwid is None
            assert model.status == "ACTIVE"
            assert model.edition == "PRO"
            assert model.expiry_days == 365
        assert LicenseModel.objects.count() == 5

    def test_bulk_generate_over_limit(self, admin_client, db, settings):
        """Test the configured batch limit."""
        settings.LICENSE_BULK_MAX_COUNT = 3

        response = admin_client.post(
            reverse("license:bulk-generate-licenses"),
            {"count": 4, "expiry_days": 365, "edition": "PRO"},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_statistics(self, admin_client, db_license):
        """Test statistics."""
        response = admin_client.get(reverse("license:license-statistics"))

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["by_status"] == {"active": 1, "expired": 0, "revoked": 0}
        assert data["by_edition"] == {"basic": 1, "pro": 0, "enterprise": 0}
        assert data["expiring"] == {"in_7_days": 0, "in_30_days": 0}

    def test_list_licenses(self, admin_client, db_license):
        """Test listing licenses."""
        response = admin_client.get(reverse("license:list-licenses"))

        assert response.status_code == 200
        assert [item["license_key"] for item in response.json()] == [KEY]

    def test_license_detail(self, admin_client, db_license):
        """Test license details."""
        response = admin_client.get(reverse("license:license-detail", args=[KEY]))

        assert response.status_code == 200
        data = response.json()
        assert data["license_key"] == KEY
        assert data["expiry_date"] == db_license.expires_at.date().isoformat()
        assert data["hwid"] is None

    def test_license_detail_not_found(self, admin_client, db):
        """Test details of an unknown key."""
        response = admin_client.get(reverse("license:license-detail", args=["NOPE"]))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "LICENSE_NOT_FOUND"

    def test_usage_logs(self, admin_client, api_client, db_license):
        """Test reading a license's audit trail."""
        _activate(api_client, "HW-1")
        _activate(api_client, "HW-2")

        response = admin_client.get(reverse("license:license-usage-logs", args=[KEY]), {"limit": 10})

        assert response.status_code == 200
        outcomes = {entry["outcome"] for entry in response.json()}
        assert outcomes == {"OK", "HW_MISMATCH"}

    def test_usage_logs_bad_limit(self, admin_client, db):
        """Test a non-numeric limit."""
        response = admin_client.get(reverse("license:license-usage-logs", args=[KEY]), {"limit": "many"})
        assert response.status_code == 400


@pytest.mark.django_db
@pytest.mark.integration
class TestObservabilityHeaders:
    """Integration tests for response observability headers."""

    def test_license_outcome_headers(self, api_client, db_license):
        """Test a refused activation is flagged although HTTP 200."""
        _activate(api_client, "HW-1")

        response = api_client.post(
            reverse("license:activate-license"),
            {"license_key": KEY, "hwid": "HW-2"},
            format="json",
            HTTP_X_CORRELATION_ID="corr-123",
        )

        assert response.status_code == 200
        assert response["X-License-Status"] == "HW_MISMATCH"
        assert response["X-Request-Status"] == "refused"
        assert response["X-Correlation-ID"] == "corr-123"
