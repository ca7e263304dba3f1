"""
Base Django settings for LicenseSyncService.

These settings are shared across all environments.
Environment-specific overrides are in dev.py, test.py, and prod.py
"""
import os
from pathlib import Path

from .logging import get_logging_config

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get(
    "SECRET_KEY", "django-insecure-7q0v!n2l$zq8m@w5r#x1k^c4e&b9t(y3u)p6j*h+d%s_f-g=a"
)

# Application definition
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third party
    "rest_framework",
    "drf_spectacular",
    # Local apps
    "LicenseSyncService.apps.LicenseSyncServiceConfig",
    "core",
    "licenses",
    "api",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Custom middleware
    "core.middleware.observability.ObservabilityMiddleware",
    "core.middleware.metrics.MetricsMiddleware",
]

ROOT_URLCONF = "LicenseSyncService.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "LicenseSyncService.wsgi.application"
ASGI_APPLICATION = "LicenseSyncService.asgi.application"

# Database
# https://docs.djangoproject.com/en/5.0/ref/settings/#databases
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# REST Framework
REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "api.exceptions.custom_exception_handler",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

# drf-spectacular settings
SPECTACULAR_SETTINGS = {
    "TITLE": "License Sync Service API",
    "DESCRIPTION": (
        "License activation and offline synchronization API. "
        "Provides client-facing activation, renewal, upgrade and sync "
        "endpoints and admin-facing provisioning and reporting."
    ),
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "COMPONENT_SPLIT_REQUEST": True,
    "SCHEMA_PATH_PREFIX": "/api/v1",
    "TAGS": [
        {"name": "License API", "description": "Client-facing activation and sync"},
        {"name": "License Admin API", "description": "Admin provisioning and reporting"},
        {"name": "Health", "description": "Health check endpoints"},
    ],
}

# License engine
LICENSE_CAS_MAX_ATTEMPTS = int(os.environ.get("LICENSE_CAS_MAX_ATTEMPTS", "5"))
LICENSE_KEY_MAX_ATTEMPTS = int(os.environ.get("LICENSE_KEY_MAX_ATTEMPTS", "10"))
LICENSE_DEFAULT_RENEWAL_DAYS = int(os.environ.get("LICENSE_DEFAULT_RENEWAL_DAYS", "365"))
LICENSE_BULK_MAX_COUNT = int(os.environ.get("LICENSE_BULK_MAX_COUNT", "1000"))
LICENSE_MAX_EXPIRY_DAYS = int(os.environ.get("LICENSE_MAX_EXPIRY_DAYS", "36500"))

# Admin authorization
LICENSE_ADMIN_HEADER = os.environ.get("LICENSE_ADMIN_HEADER", "X-Admin-Token")
LICENSE_ADMIN_TOKENS = [
    token.strip() for token in os.environ.get("LICENSE_ADMIN_TOKENS", "").split(",") if token.strip()
]

# Observability
OTEL_ENABLED = os.environ.get("OTEL_ENABLED", "true").lower() == "true"
LOGGING = get_logging_config(os.environ.get("ENVIRONMENT", "development"))
