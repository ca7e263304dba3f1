"""
URL configuration for license API endpoints.
"""
from django.urls import path

from api.v1.license import views

app_name = "license"

urlpatterns = [
    path("activate", views.ActivateLicenseView.as_view(), name="activate-license"),
    path("sync", views.SyncLicenseView.as_view(), name="sync-license"),
    path("renew", views.RenewLicenseView.as_view(), name="renew-license"),
    path("upgrade", views.UpgradeLicenseView.as_view(), name="upgrade-license"),
    # Admin
    path("admin/create", views.CreateLicenseView.as_view(), name="create-license"),
    path("admin/revoke", views.RevokeLicenseView.as_view(), name="revoke-license"),
    path(
        "admin/bulk-generate",
        views.BulkGenerateLicensesView.as_view(),
        name="bulk-generate-licenses",
    ),
    path("admin/statistics", views.LicenseStatisticsView.as_view(), name="license-statistics"),
    path("admin/all", views.ListLicensesView.as_view(), name="list-licenses"),
    path(
        "admin/licenses/<str:license_key>",
        views.LicenseDetailView.as_view(),
        name="license-detail",
    ),
    path(
        "admin/licenses/<str:license_key>/logs",
        views.LicenseUsageLogsView.as_view(),
        name="license-usage-logs",
    ),
]
