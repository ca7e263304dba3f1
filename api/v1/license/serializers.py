"""
Serializers for License API endpoints.

Editions are accepted as free text so that an unknown edition is answered
with an INVALID_EDITION status rather than a request error.
"""
from rest_framework import serializers

from core.domain.value_objects import OperationStatus
from licenses.domain.license import MAX_EXPIRY_DAYS, MAX_KEY_LENGTH
from licenses.domain.license_key import MAX_PREFIX_LENGTH

STATUS_CHOICES = [status.value for status in OperationStatus]
DATE_FORMAT = "%Y-%m-%d"


class ActivateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for activate license request."""

    license_key = serializers.CharField(required=True, max_length=MAX_KEY_LENGTH)
    hwid = serializers.CharField(required=True, max_length=128)


class SyncLicenseRequestSerializer(serializers.Serializer):
    """Serializer for sync license request."""

    license_key = serializers.CharField(required=True, max_length=MAX_KEY_LENGTH)
    hwid = serializers.CharField(required=True, max_length=128)
    local_revision = serializers.IntegerField(required=True, min_value=0)


class RenewLicenseRequestSerializer(serializers.Serializer):
    """Serializer for renew license request. ``extension_days`` defaults from settings."""

    license_key = serializers.CharField(required=True, max_length=MAX_KEY_LENGTH)
    extension_days = serializers.IntegerField(required=False, min_value=1, max_value=MAX_EXPIRY_DAYS)


class UpgradeLicenseRequestSerializer(serializers.Serializer):
    """Serializer for upgrade license request."""

    license_key = serializers.CharField(required=True, max_length=MAX_KEY_LENGTH)
    new_edition = serializers.CharField(required=True, max_length=32)


class RevokeLicenseRequestSerializer(serializers.Serializer):
    """Serializer for revoke license request."""

    license_key = serializers.CharField(required=True, max_length=MAX_KEY_LENGTH)
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)


class CreateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for create license request."""

    license_key = serializers.CharField(required=True, max_length=MAX_KEY_LENGTH)
    expiry_days = serializers.IntegerField(required=True, min_value=1, max_value=MAX_EXPIRY_DAYS)
    edition = serializers.CharField(required=True, max_length=32)
    user_email = serializers.EmailField(required=False, allow_blank=True, allow_null=True, max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)


class BulkGenerateLicensesRequestSerializer(serializers.Serializer):
    """Serializer for bulk generate request. The upper bound on ``count`` is enforced by the handler."""

    count = serializers.IntegerField(required=True, min_value=1)
    expiry_days = serializers.IntegerField(required=True, min_value=1, max_value=MAX_EXPIRY_DAYS)
    edition = serializers.CharField(required=True, max_length=32)
    key_prefix = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=MAX_PREFIX_LENGTH
    )


class ActivateLicenseResponseSerializer(serializers.Serializer):
    """Serializer for activate license response."""

    status = serializers.ChoiceField(choices=STATUS_CHOICES)
    expiry = serializers.DateField(format=DATE_FORMAT, allow_null=True)
    edition = serializers.CharField(allow_null=True)
    server_revision = serializers.IntegerField(allow_null=True)
    license_status = serializers.CharField(allow_null=True)


class SyncLicenseResponseSerializer(ActivateLicenseResponseSerializer):
    """Serializer for sync license response."""


class RenewLicenseResponseSerializer(serializers.Serializer):
    """Serializer for renew license response."""

    status = serializers.ChoiceField(choices=STATUS_CHOICES)
    new_expiry = serializers.DateField(format=DATE_FORMAT, allow_null=True)
    server_revision = serializers.IntegerField(allow_null=True)


class UpgradeLicenseResponseSerializer(serializers.Serializer):
    """Serializer for upgrade license response."""

    status = serializers.ChoiceField(choices=STATUS_CHOICES)
    edition = serializers.CharField(allow_null=True)
    server_revision = serializers.IntegerField(allow_null=True)


class RevokeLicenseResponseSerializer(serializers.Serializer):
    """Serializer for revoke license response."""

    status = serializers.ChoiceField(choices=STATUS_CHOICES)
    server_revision = serializers.IntegerField(allow_null=True)


class LicenseDetailsSerializer(serializers.Serializer):
    """Serializer for LicenseDetailsDTO."""

    license_key = serializers.CharField()
    hwid = serializers.CharField(allow_null=True)
    expiry_days = serializers.IntegerField()
    expiry_date = serializers.DateField(source="expiry", format=DATE_FORMAT)
    remaining_days = serializers.IntegerField()
    edition = serializers.CharField()
    status = serializers.CharField(source="license_status")
    server_revision = serializers.IntegerField()
    created_at = serializers.DateTimeField()
    last_seen = serializers.DateTimeField(allow_null=True)
    user_email = serializers.EmailField(source="owner_email", allow_null=True)
    notes = serializers.CharField(allow_null=True)


class CreateLicenseResponseSerializer(serializers.Serializer):
    """Serializer for create license response."""

    status = serializers.ChoiceField(choices=STATUS_CHOICES)
    license = LicenseDetailsSerializer(allow_null=True)


class BulkGenerateLicensesResponseSerializer(serializers.Serializer):
    """Serializer for bulk generate response."""

    status = serializers.ChoiceField(choices=STATUS_CHOICES)
    generated_count = serializers.IntegerField()
    license_keys = serializers.ListField(child=serializers.CharField())
    edition = serializers.CharField(allow_null=True)
    expiry_days = serializers.IntegerField(allow_null=True)


class StatusBreakdownSerializer(serializers.Serializer):
    """Counts by effective status."""

    active = serializers.IntegerField()
    expired = serializers.IntegerField()
    revoked = serializers.IntegerField()


class EditionBreakdownSerializer(serializers.Serializer):
    """Counts by edition."""

    basic = serializers.IntegerField()
    pro = serializers.IntegerField()
    enterprise = serializers.IntegerField()


class ExpiringBreakdownSerializer(serializers.Serializer):
    """Counts of active licenses expiring soon."""

    in_7_days = serializers.IntegerField(source="expiring_in_7_days")
    in_30_days = serializers.IntegerField(source="expiring_in_30_days")


class LicenseStatisticsResponseSerializer(serializers.Serializer):
    """Serializer for license statistics response."""

    total = serializers.IntegerField()
    by_status = StatusBreakdownSerializer(source="*")
    by_edition = EditionBreakdownSerializer(source="*")
    expiring = ExpiringBreakdownSerializer(source="*")
    generated_at = serializers.DateTimeField()


class UsageLogSerializer(serializers.Serializer):
    """Serializer for UsageLogDTO."""

    id = serializers.UUIDField()
    license_key = serializers.CharField()
    action = serializers.CharField()
    outcome = serializers.CharField()
    hwid = serializers.CharField(allow_null=True)
    old_edition = serializers.CharField(allow_null=True)
    new_edition = serializers.CharField(allow_null=True)
    old_expiry_days = serializers.IntegerField(allow_null=True)
    new_expiry_days = serializers.IntegerField(allow_null=True)
    server_revision = serializers.IntegerField(allow_null=True)
    ip_address = serializers.CharField(allow_null=True)
    user_agent = serializers.CharField(allow_null=True)
    actor = serializers.CharField(allow_null=True)
    notes = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()
