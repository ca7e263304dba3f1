"""
License and LicenseUsageLog models.
"""
import uuid

from django.db import models


class License(models.Model):
    """
    A license key record, optionally bound to one device.

    ``status`` only ever holds ACTIVE or REVOKED; expiry is derived from
    ``created_at + expiry_days``.
    """

    STATUS_CHOICES = [
        ("ACTIVE", "Active"),
        ("REVOKED", "Revoked"),
    ]

    EDITION_CHOICES = [
        ("BASIC", "Basic"),
        ("PRO", "Pro"),
        ("ENTERPRISE", "Enterprise"),
    ]

    id = models.BigAutoField(primary_key=True)
    key = models.CharField(max_length=64, unique=True, db_index=True)
    hwid = models.CharField(max_length=128, null=True, blank=True)
    expiry_days = models.PositiveIntegerField()
    edition = models.CharField(max_length=32, choices=EDITION_CHOICES, default="BASIC")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="ACTIVE")
    server_revision = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField()
    last_seen = models.DateTimeField(null=True, blank=True)
    owner_email = models.EmailField(max_length=255, null=True, blank=True)
    notes = models.CharField(max_length=500, null=True, blank=True)

    class Meta:
        app_label = "licenses"
        db_table = "licenses"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="licenses_status_idx"),
            models.Index(fields=["edition"], name="licenses_edition_idx"),
        ]

    def __str__(self):
        return self.key


class LicenseUsageLog(models.Model):
    """
    Immutable audit trail of every attempt against a license.
    """

    ACTION_CHOICES = [
        ("CREATE", "Create"),
        ("ACTIVATE", "Activate"),
        ("RENEW", "Renew"),
        ("UPGRADE", "Upgrade"),
        ("REVOKE", "Revoke"),
        ("SYNC", "Sync"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license_key = models.CharField(max_length=64, db_index=True)
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    outcome = models.CharField(max_length=32)
    hwid = models.CharField(max_length=128, null=True, blank=True)
    old_edition = models.CharField(max_length=32, null=True, blank=True)
    new_edition = models.CharField(max_length=32, null=True, blank=True)
    old_expiry_days = models.IntegerField(null=True, blank=True)
    new_expiry_days = models.IntegerField(null=True, blank=True)
    server_revision = models.IntegerField(null=True, blank=True)
    ip_address = models.CharField(max_length=64, null=True, blank=True)
    user_agent = models.CharField(max_length=500, null=True, blank=True)
    actor = models.CharField(max_length=255, null=True, blank=True)
    notes = models.CharField(max_length=500, null=True, blank=True)
    created_at = models.DateTimeField()

    class Meta:
        app_label = "licenses"
        db_table = "license_usage_logs"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["license_key", "created_at"], name="usage_logs_key_created_idx"),
            models.Index(fields=["action"], name="usage_logs_action_idx"),
        ]

    def __str__(self):
        return f"{self.action} {self.outcome} - {self.license_key}"
