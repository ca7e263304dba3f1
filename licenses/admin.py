"""
Django admin configuration for licenses app.

State changes that clients observe (binding, edition, expiry, revocation)
go through the license engine so the revision stays meaningful; the admin
only edits bookkeeping fields.
"""
from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html

from licenses.infrastructure.models import License, LicenseUsageLog
from licenses.infrastructure.repositories.django_license_store import DjangoLicenseStore

_store = DjangoLicenseStore()


@admin.register(License)
class LicenseAdmin(admin.ModelAdmin):
    """Admin interface for License model."""

    list_display = [
        "key",
        "edition",
        "status_display",
        "hwid",
        "expiry_date",
        "remaining_days",
        "server_revision",
        "last_seen",
        "created_at",
    ]
    list_filter = ["status", "edition", "created_at"]
    search_fields = ["key", "hwid", "owner_email"]
    readonly_fields = [
        "id",
        "key",
        "hwid",
        "edition",
        "status",
        "expiry_days",
        "server_revision",
        "created_at",
        "last_seen",
        "expiry_date",
        "remaining_days",
    ]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "key", "edition", "status", "hwid"),
            },
        ),
        (
            "Expiration",
            {
                "fields": ("expiry_days", "expiry_date", "remaining_days"),
            },
        ),
        (
            "Owner",
            {
                "fields": ("owner_email", "notes"),
            },
        ),
        (
            "Sync",
            {
                "fields": ("server_revision", "last_seen", "created_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def _domain(self, obj):
        return _store._to_domain(obj)

    def status_display(self, obj):
        """Display effective status with color coding."""
        colors = {
            "ACTIVE": "green",
            "EXPIRED": "gray",
            "REVOKED": "red",
        }
        status = self._domain(obj).effective_status(timezone.now()).value
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            colors.get(status, "black"),
            status,
        )

    status_display.short_description = "Status"

    def expiry_date(self, obj):
        """Display the derived expiry date."""
        return self._domain(obj).expires_at.date()

    expiry_date.short_description = "Expires"

    def remaining_days(self, obj):
        """Display days left before expiry."""
        remaining = self._domain(obj).remaining_days(timezone.now())
        if remaining == 0:
            return format_html('<span style="color: red;">{}</span>', remaining)
        return remaining

    remaining_days.short_description = "Days Left"

    def has_add_permission(self, request):
        """Licenses are created through the API or management commands."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Licenses are never deleted."""
        return False


@admin.register(LicenseUsageLog)
class LicenseUsageLogAdmin(admin.ModelAdmin):
    """Admin interface for LicenseUsageLog model."""

    list_display = [
        "created_at",
        "license_key",
        "action",
        "outcome",
        "hwid",
        "server_revision",
        "actor",
        "ip_address",
    ]
    list_filter = ["action", "outcome", "created_at"]
    search_fields = ["license_key", "hwid", "actor", "ip_address"]
    readonly_fields = [
        "id",
        "license_key",
        "action",
        "outcome",
        "hwid",
        "old_edition",
        "new_edition",
        "old_expiry_days",
        "new_expiry_days",
        "server_revision",
        "ip_address",
        "user_agent",
        "actor",
        "notes",
        "created_at",
    ]

    def has_add_permission(self, request):
        """Usage logs are read-only."""
        return False

    def has_change_permission(self, request, obj=None):
        """Usage logs are read-only."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Usage logs should not be deleted."""
        return False
