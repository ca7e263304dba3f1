"""
Development settings for LicenseSyncService.
"""
import os

from .base import *  # noqa: F403, F401

DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "0.0.0.0"]

# Database - SQLite unless DB_ENGINE=postgresql
if os.environ.get("DB_ENGINE") == "postgresql":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ.get("DB_NAME", "license_sync"),
            "USER": os.environ.get("DB_USER", "postgres"),
            "PASSWORD": os.environ.get("DB_PASSWORD", "postgres"),
            "HOST": os.environ.get("DB_HOST", "localhost"),
            "PORT": os.environ.get("DB_PORT", "5432"),
        }
    }

# Tracing only when an OTLP collector is configured
OTEL_ENABLED = bool(os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT"))

# Local admin token so the admin endpoints are usable out of the box
if not LICENSE_ADMIN_TOKENS:  # noqa: F405
    LICENSE_ADMIN_TOKENS = ["dev-admin-token"]

# Email backend for development
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"
