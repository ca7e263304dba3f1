"""
Django management command to print license statistics.
"""

import json
import logging

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand

from licenses.application.handlers.license_query_handlers import GetLicenseStatisticsHandler
from licenses.application.queries.get_license_statistics import GetLicenseStatisticsQuery
from licenses.infrastructure.repositories.django_license_store import DjangoLicenseStore
from licenses.ports.authorizer import AllowAllAuthorizer

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to print license counts by status, edition and expiry window."""

    help = "Print license statistics"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print statistics as JSON",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        handler = GetLicenseStatisticsHandler(DjangoLicenseStore(), AllowAllAuthorizer())
        stats = async_to_sync(handler.handle)(GetLicenseStatisticsQuery())

        if options["json"]:
            payload = {
                "total": stats.total,
                "by_status": {"active": stats.active, "expired": stats.expired, "revoked": stats.revoked},
                "by_edition": {"basic": stats.basic, "pro": stats.pro, "enterprise": stats.enterprise},
                "expiring": {
                    "in_7_days": stats.expiring_in_7_days,
                    "in_30_days": stats.expiring_in_30_days,
                },
                "generated_at": stats.generated_at.isoformat(),
            }
            self.stdout.write(json.dumps(payload, indent=2))
            return

        self.stdout.write(f"Total licenses: {stats.total}")
        self.stdout.write(f"  Active:  {stats.active}")
        self.stdout.write(f"  Expired: {stats.expired}")
        self.stdout.write(f"  Revoked: {stats.revoked}")
        self.stdout.write("By edition:")
        self.stdout.write(f"  BASIC:      {stats.basic}")
        self.stdout.write(f"  PRO:        {stats.pro}")
        self.stdout.write(f"  ENTERPRISE: {stats.enterprise}")
        self.stdout.write(f"Expiring within 7 days:  {stats.expiring_in_7_days}")
        self.stdout.write(f"Expiring within 30 days: {stats.expiring_in_30_days}")
