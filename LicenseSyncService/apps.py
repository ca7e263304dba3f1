"""
App configuration for License Sync Service.
"""
import logging
import os
import sys

from django.apps import AppConfig

logger = logging.getLogger(__name__)

SKIP_SETUP_COMMANDS = [
    "migrate",
    "makemigrations",
    "collectstatic",
    "shell",
    "test",
    "check",
    "createsuperuser",
]


class LicenseSyncServiceConfig(AppConfig):
    """App configuration for LicenseSyncService."""

    name = "LicenseSyncService"
    verbose_name = "License Sync Service"

    def ready(self):
        """Called when Django starts."""
        # Skip for management commands
        if len(sys.argv) > 1 and sys.argv[1] in SKIP_SETUP_COMMANDS:
            return

        # RUN_MAIN is "false" in the autoreloader's parent process
        if os.environ.get("RUN_MAIN") == "false":
            return

        if not hasattr(self, "_initialized"):
            from core.instrumentation import setup_opentelemetry

            logger.info("Setting up observability...")
            setup_opentelemetry()
            self._initialized = True
            logger.info("Observability setup complete")
