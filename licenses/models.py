"""
Model registry for the licenses app.

Django discovers models through ``<app>.models``; the definitions live in
``licenses.infrastructure.models``.
"""
from licenses.infrastructure.models import License, LicenseUsageLog  # noqa: F401
