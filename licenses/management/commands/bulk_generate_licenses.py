"""
Django management command to generate licenses in bulk.

Runs the same handler as the admin API, as a trusted in-process caller.
"""

import logging

from asgiref.sync import async_to_sync
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from core.domain.exceptions import LicenseValidationError
from core.domain.value_objects import ActorContext, OperationStatus
from licenses.application.commands.bulk_generate_licenses import BulkGenerateLicensesCommand
from licenses.application.handlers.provision_license_handler import BulkGenerateLicensesHandler
from licenses.infrastructure.repositories.django_audit_sink import DjangoAuditSink
from licenses.infrastructure.repositories.django_license_store import DjangoLicenseStore
from licenses.ports.authorizer import AllowAllAuthorizer

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to generate a batch of licenses with random keys."""

    help = "Generate licenses in bulk"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument("count", type=int, help="Number of licenses to generate")
        parser.add_argument(
            "--expiry-days",
            type=int,
            default=365,
            help="License validity in days (default: 365)",
        )
        parser.add_argument(
            "--edition",
            type=str,
            default="BASIC",
            help="Edition: BASIC, PRO or ENTERPRISE (default: BASIC)",
        )
        parser.add_argument(
            "--prefix",
            type=str,
            default=None,
            help="Key prefix replacing the first group",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        handler = BulkGenerateLicensesHandler(
            DjangoLicenseStore(),
            DjangoAuditSink(),
            AllowAllAuthorizer(),
            key_attempts=settings.LICENSE_KEY_MAX_ATTEMPTS,
            max_count=settings.LICENSE_BULK_MAX_COUNT,
            max_expiry_days=settings.LICENSE_MAX_EXPIRY_DAYS,
        )
        command = BulkGenerateLicensesCommand(
            count=options["count"],
            expiry_days=options["expiry_days"],
            edition=options["edition"],
            key_prefix=options["prefix"],
            actor=ActorContext(caller="manage.py"),
        )

        try:
            result = async_to_sync(handler.handle)(command)
        except LicenseValidationError as e:
            raise CommandError(e.message) from e

        if result.status != OperationStatus.OK:
            raise CommandError(f"Bulk generation failed: {result.status}")

        for key in result.license_keys:
            self.stdout.write(key)
        self.stdout.write(
            # pylint: disable=no-member
            self.style.SUCCESS(
                f"Generated {result.generated_count} {result.edition} license(s) "
                f"valid for {result.expiry_days} days"
            )
        )
