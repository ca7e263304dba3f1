"""
License API views.

Client-facing endpoints (installed products):
- Activate a license on a device
- Sync a cached license view
- Renew and upgrade

Admin endpoints (require the admin token header):
- Create, revoke and bulk generate licenses
- Statistics, listings and usage logs

Client operations always answer HTTP 200 and carry the outcome in
``status``; clients act on that field.
"""
from typing import Optional

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.license.serializers import (
    ActivateLicenseRequestSerializer,
    ActivateLicenseResponseSerializer,
    BulkGenerateLicensesRequestSerializer,
    BulkGenerateLicensesResponseSerializer,
    CreateLicenseRequestSerializer,
    CreateLicenseResponseSerializer,
    LicenseDetailsSerializer,
    LicenseStatisticsResponseSerializer,
    RenewLicenseRequestSerializer,
    RenewLicenseResponseSerializer,
    RevokeLicenseRequestSerializer,
    RevokeLicenseResponseSerializer,
    SyncLicenseRequestSerializer,
    SyncLicenseResponseSerializer,
    UpgradeLicenseRequestSerializer,
    UpgradeLicenseResponseSerializer,
    UsageLogSerializer,
)
from core.domain.value_objects import ActorContext, OperationStatus
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.application.commands.activate_license import ActivateLicenseCommand
from licenses.application.commands.bulk_generate_licenses import BulkGenerateLicensesCommand
from licenses.application.commands.create_license import CreateLicenseCommand
from licenses.application.commands.renew_license import RenewLicenseCommand
from licenses.application.commands.revoke_license import RevokeLicenseCommand
from licenses.application.commands.sync_license import SyncLicenseCommand
from licenses.application.commands.upgrade_license import UpgradeLicenseCommand
from licenses.application.handlers.activate_license_handler import ActivateLicenseHandler
from licenses.application.handlers.license_lifecycle_handlers import (
    RenewLicenseHandler,
    RevokeLicenseHandler,
    UpgradeLicenseHandler,
)
from licenses.application.handlers.license_query_handlers import (
    GetLicenseHandler,
    GetLicenseStatisticsHandler,
    ListLicensesHandler,
    ListUsageLogsHandler,
)
from licenses.application.handlers.provision_license_handler import (
    BulkGenerateLicensesHandler,
    CreateLicenseHandler,
)
from licenses.application.handlers.sync_license_handler import SyncLicenseHandler
from licenses.application.queries.get_license import GetLicenseQuery
from licenses.application.queries.get_license_statistics import GetLicenseStatisticsQuery
from licenses.application.queries.list_licenses import ListLicensesQuery
from licenses.application.queries.list_usage_logs import ListUsageLogsQuery
from licenses.infrastructure.authorization import SettingsTokenAuthorizer, token_fingerprint
from licenses.infrastructure.repositories.django_audit_sink import DjangoAuditSink
from licenses.infrastructure.repositories.django_license_store import DjangoLicenseStore

# Initialize adapters (in production, use DI container)
_license_store = DjangoLicenseStore()
_audit_sink = DjangoAuditSink()
_authorizer = SettingsTokenAuthorizer()

tracer = get_tracer(__name__)

ADMIN_TOKEN_PARAMETER = OpenApiParameter(
    name="X-Admin-Token",
    type=str,
    location=OpenApiParameter.HEADER,
    required=True,
    description="Admin token",
)

# HTTP codes for admin operation outcomes
_ADMIN_HTTP_STATUS = {
    OperationStatus.OK: status.HTTP_200_OK,
    OperationStatus.INVALID_KEY: status.HTTP_404_NOT_FOUND,
    OperationStatus.INVALID_EDITION: status.HTTP_400_BAD_REQUEST,
    OperationStatus.DUPLICATE_KEY: status.HTTP_409_CONFLICT,
    OperationStatus.ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _actor(request: Request) -> ActorContext:
    """Build the caller context from transport metadata."""
    forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    ip_address = forwarded_for.split(",")[0].strip() if forwarded_for else request.META.get("REMOTE_ADDR")
    return ActorContext(
        ip_address=ip_address,
        user_agent=request.META.get("HTTP_USER_AGENT") or None,
        caller=token_fingerprint(request.headers.get(settings.LICENSE_ADMIN_HEADER)),
    )


def _annotate(request: Request, license_key: Optional[str], outcome: OperationStatus) -> None:
    """Expose the key and outcome to the observability middleware."""
    request._request.license_key = license_key
    request._request.operation_status = outcome.value


def _record_outcome(span, outcome: OperationStatus) -> None:
    span.set_attribute("license.outcome", outcome.value)
    if outcome == OperationStatus.ERROR:
        span.set_status(Status(StatusCode.ERROR, "License operation failed"))
    else:
        span.set_status(Status(StatusCode.OK))


def _validation_error(span, serializer) -> Response:
    span.set_attribute("error", "validation_failed")
    span.set_status(Status(StatusCode.ERROR, "Validation failed"))
    return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)


class ActivateLicenseView(APIView):
    """View for activating licenses."""

    @extend_schema(
        operation_id="activate_license",
        summary="Activate License",
        description=(
            "Bind a license to a hardware id on first activation. Later activations "
            "from the same device succeed without changing the revision; other "
            "devices get HW_MISMATCH."
        ),
        tags=["License API"],
        request=ActivateLicenseRequestSerializer,
        responses={
            200: ActivateLicenseResponseSerializer,
            400: {"description": "Bad Request"},
        },
    )
    def post(self, request: Request) -> Response:
        """Activate a license."""
        return async_to_sync(self._handle_activate_license)(request)

    async def _handle_activate_license(self, request: Request) -> Response:
        """Async handler for activate license."""
        with tracer.start_as_current_span("activate_license") as span:
            span.set_attribute("operation", "activate_license")

            serializer = ActivateLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _validation_error(span, serializer)

            license_key = serializer.validated_data["license_key"]
            span.set_attribute("license_key", license_key)

            handler = ActivateLicenseHandler(
                _license_store, _audit_sink, max_attempts=settings.LICENSE_CAS_MAX_ATTEMPTS
            )
            result = await handler.handle(
                ActivateLicenseCommand(
                    license_key=license_key,
                    hwid=serializer.validated_data["hwid"],
                    actor=_actor(request),
                )
            )

            _record_outcome(span, result.status)
            _annotate(request, license_key, result.status)
            return Response(ActivateLicenseResponseSerializer(result).data, status=status.HTTP_200_OK)


class SyncLicenseView(APIView):
    """View for syncing a client's cached license state."""

    @extend_schema(
        operation_id="sync_license",
        summary="Sync License",
        description=(
            "Compare the client's cached revision with the server's. Returns NO_CHANGE, "
            "UPDATE with the current license data, or REVOKED so the client can lock itself."
        ),
        tags=["License API"],
        request=SyncLicenseRequestSerializer,
        responses={
            200: SyncLicenseResponseSerializer,
            400: {"description": "Bad Request"},
        },
    )
    def post(self, request: Request) -> Response:
        """Sync a license."""
        return async_to_sync(self._handle_sync_license)(request)

    async def _handle_sync_license(self, request: Request) -> Response:
        """Async handler for sync license."""
        with tracer.start_as_current_span("sync_license") as span:
            span.set_attribute("operation", "sync_license")

            serializer = SyncLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _validation_error(span, serializer)

            license_key = serializer.validated_data["license_key"]
            local_revision = serializer.validated_data["local_revision"]
            span.set_attribute("license_key", license_key)
            span.set_attribute("local_revision", local_revision)

            handler = SyncLicenseHandler(
                _license_store, _audit_sink, max_attempts=settings.LICENSE_CAS_MAX_ATTEMPTS
            )
            result = await handler.handle(
                SyncLicenseCommand(
                    license_key=license_key,
                    hwid=serializer.validated_data["hwid"],
                    local_revision=local_revision,
                    actor=_actor(request),
                )
            )

            _record_outcome(span, result.status)
            _annotate(request, license_key, result.status)
            return Response(SyncLicenseResponseSerializer(result).data, status=status.HTTP_200_OK)


class RenewLicenseView(APIView):
    """View for renewing licenses."""

    @extend_schema(
        operation_id="renew_license",
        summary="Renew License",
        description="Extend a license's expiry baseline by extension_days (default 365).",
        tags=["License API"],
        request=RenewLicenseRequestSerializer,
        responses={
            200: RenewLicenseResponseSerializer,
            400: {"description": "Bad Request"},
        },
    )
    def post(self, request: Request) -> Response:
        """Renew a license."""
        return async_to_sync(self._handle_renew_license)(request)

    async def _handle_renew_license(self, request: Request) -> Response:
        """Async handler for renew license."""
        with tracer.start_as_current_span("renew_license") as span:
            span.set_attribute("operation", "renew_license")

            serializer = RenewLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _validation_error(span, serializer)

            license_key = serializer.validated_data["license_key"]
            extension_days = serializer.validated_data.get(
                "extension_days", settings.LICENSE_DEFAULT_RENEWAL_DAYS
            )
            span.set_attribute("license_key", license_key)
            span.set_attribute("extension_days", extension_days)

            handler = RenewLicenseHandler(
                _license_store,
                _audit_sink,
                max_attempts=settings.LICENSE_CAS_MAX_ATTEMPTS,
                max_expiry_days=settings.LICENSE_MAX_EXPIRY_DAYS,
            )
            result = await handler.handle(
                RenewLicenseCommand(
                    license_key=license_key,
                    extension_days=extension_days,
                    actor=_actor(request),
                )
            )

            _record_outcome(span, result.status)
            _annotate(request, license_key, result.status)
            return Response(RenewLicenseResponseSerializer(result).data, status=status.HTTP_200_OK)


class UpgradeLicenseView(APIView):
    """View for changing a license's edition."""

    @extend_schema(
        operation_id="upgrade_license",
        summary="Upgrade License",
        description="Set a license's edition to BASIC, PRO or ENTERPRISE.",
        tags=["License API"],
        request=UpgradeLicenseRequestSerializer,
        responses={
            200: UpgradeLicenseResponseSerializer,
            400: {"description": "Bad Request"},
        },
    )
    def post(self, request: Request) -> Response:
        """Upgrade a license."""
        return async_to_sync(self._handle_upgrade_license)(request)

    async def _handle_upgrade_license(self, request: Request) -> Response:
        """Async handler for upgrade license."""
        with tracer.start_as_current_span("upgrade_license") as span:
            span.set_attribute("operation", "upgrade_license")

            serializer = UpgradeLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _validation_error(span, serializer)

            license_key = serializer.validated_data["license_key"]
            span.set_attribute("license_key", license_key)
            span.set_attribute("new_edition", serializer.validated_data["new_edition"])

            handler = UpgradeLicenseHandler(
                _license_store, _audit_sink, max_attempts=settings.LICENSE_CAS_MAX_ATTEMPTS
            )
            result = await handler.handle(
                UpgradeLicenseCommand(
                    license_key=license_key,
                    new_edition=serializer.validated_data["new_edition"],
                    actor=_actor(request),
                )
            )

            _record_outcome(span, result.status)
            _annotate(request, license_key, result.status)
            return Response(UpgradeLicenseResponseSerializer(result).data, status=status.HTTP_200_OK)


class CreateLicenseView(APIView):
    """View for creating a license - admin."""

    @extend_schema(
        operation_id="create_license",
        summary="Create License",
        description="Create an unbound, active license with a caller-chosen key.",
        tags=["License Admin API"],
        parameters=[ADMIN_TOKEN_PARAMETER],
        request=CreateLicenseRequestSerializer,
        responses={
            201: CreateLicenseResponseSerializer,
            400: {"description": "Bad Request or invalid edition"},
            403: {"description": "Forbidden - Missing or invalid admin token"},
            409: {"description": "License key already exists"},
        },
    )
    def post(self, request: Request) -> Response:
        """Create a license."""
        return async_to_sync(self._handle_create_license)(request)

    async def _handle_create_license(self, request: Request) -> Response:
        """Async handler for create license."""
        with tracer.start_as_current_span("create_license") as span:
            span.set_attribute("operation", "create_license")

            serializer = CreateLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _validation_error(span, serializer)

            license_key = serializer.validated_data["license_key"]
            span.set_attribute("license_key", license_key)
            span.set_attribute("edition", serializer.validated_data["edition"])

            handler = CreateLicenseHandler(
                _license_store,
                _audit_sink,
                _authorizer,
                max_expiry_days=settings.LICENSE_MAX_EXPIRY_DAYS,
            )
            result = await handler.handle(
                CreateLicenseCommand(
                    license_key=license_key,
                    expiry_days=serializer.validated_data["expiry_days"],
                    edition=serializer.validated_data["edition"],
                    owner_email=serializer.validated_data.get("user_email"),
                    notes=serializer.validated_data.get("notes"),
                    actor=_actor(request),
                )
            )

            _record_outcome(span, result.status)
            _annotate(request, license_key, result.status)
            http_status = _ADMIN_HTTP_STATUS[result.status]
            if result.status == OperationStatus.OK:
                http_status = status.HTTP_201_CREATED
            return Response(CreateLicenseResponseSerializer(result).data, status=http_status)


class RevokeLicenseView(APIView):
    """View for revoking a license - admin."""

    @extend_schema(
        operation_id="revoke_license",
        summary="Revoke License",
        description="Permanently revoke a license. Revoking twice is a no-op.",
        tags=["License Admin API"],
        parameters=[ADMIN_TOKEN_PARAMETER],
        request=RevokeLicenseRequestSerializer,
        responses={
            200: RevokeLicenseResponseSerializer,
            403: {"description": "Forbidden - Missing or invalid admin token"},
            404: {"description": "License not found"},
        },
    )
    def post(self, request: Request) -> Response:
        """Revoke a license."""
        return async_to_sync(self._handle_revoke_license)(request)

    async def _handle_revoke_license(self, request: Request) -> Response:
        """Async handler for revoke license."""
        with tracer.start_as_current_span("revoke_license") as span:
            span.set_attribute("operation", "revoke_license")

            serializer = RevokeLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _validation_error(span, serializer)

            license_key = serializer.validated_data["license_key"]
            span.set_attribute("license_key", license_key)

            handler = RevokeLicenseHandler(
                _license_store,
                _audit_sink,
                _authorizer,
                max_attempts=settings.LICENSE_CAS_MAX_ATTEMPTS,
            )
            result = await handler.handle(
                RevokeLicenseCommand(
                    license_key=license_key,
                    reason=serializer.validated_data.get("reason"),
                    actor=_actor(request),
                )
            )

            _record_outcome(span, result.status)
            _annotate(request, license_key, result.status)
            return Response(
                RevokeLicenseResponseSerializer(result).data,
                status=_ADMIN_HTTP_STATUS[result.status],
            )


class BulkGenerateLicensesView(APIView):
    """View for generating licenses in bulk - admin."""

    @extend_schema(
        operation_id="bulk_generate_licenses",
        summary="Bulk Generate Licenses",
        description="Generate count licenses with random keys. The batch is stored all or nothing.",
        tags=["License Admin API"],
        parameters=[ADMIN_TOKEN_PARAMETER],
        request=BulkGenerateLicensesRequestSerializer,
        responses={
            201: BulkGenerateLicensesResponseSerializer,
            400: {"description": "Bad Request or invalid edition"},
            403: {"description": "Forbidden - Missing or invalid admin token"},
            409: {"description": "Generated keys collided"},
        },
    )
    def post(self, request: Request) -> Response:
        """Generate licenses."""
        return async_to_sync(self._handle_bulk_generate)(request)

    async def _handle_bulk_generate(self, request: Request) -> Response:
        """Async handler for bulk generate."""
        with tracer.start_as_current_span("bulk_generate_licenses") as span:
            span.set_attribute("operation", "bulk_generate_licenses")

            serializer = BulkGenerateLicensesRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _validation_error(span, serializer)

            span.set_attribute("count", serializer.validated_data["count"])
            span.set_attribute("edition", serializer.validated_data["edition"])

            handler = BulkGenerateLicensesHandler(
                _license_store,
                _audit_sink,
                _authorizer,
                key_attempts=settings.LICENSE_KEY_MAX_ATTEMPTS,
                max_count=settings.LICENSE_BULK_MAX_COUNT,
                max_expiry_days=settings.LICENSE_MAX_EXPIRY_DAYS,
            )
            result = await handler.handle(
                BulkGenerateLicensesCommand(
                    count=serializer.validated_data["count"],
                    expiry_days=serializer.validated_data["expiry_days"],
                    edition=serializer.validated_data["edition"],
                    key_prefix=serializer.validated_data.get("key_prefix"),
                    actor=_actor(request),
                )
            )

            span.set_attribute("generated_count", result.generated_count)
            _record_outcome(span, result.status)
            _annotate(request, None, result.status)
            http_status = _ADMIN_HTTP_STATUS[result.status]
            if result.status == OperationStatus.OK:
                http_status = status.HTTP_201_CREATED
            return Response(BulkGenerateLicensesResponseSerializer(result).data, status=http_status)


class LicenseStatisticsView(APIView):
    """View for license statistics - admin."""

    @extend_schema(
        operation_id="license_statistics",
        summary="License Statistics",
        description="Counts by effective status and edition, and licenses expiring within 7 and 30 days.",
        tags=["License Admin API"],
        parameters=[ADMIN_TOKEN_PARAMETER],
        responses={
            200: LicenseStatisticsResponseSerializer,
            403: {"description": "Forbidden - Missing or invalid admin token"},
        },
    )
    def get(self, request: Request) -> Response:
        """Get license statistics."""
        return async_to_sync(self._handle_statistics)(request)

    async def _handle_statistics(self, request: Request) -> Response:
        """Async handler for statistics."""
        with tracer.start_as_current_span("license_statistics") as span:
            span.set_attribute("operation", "license_statistics")

            handler = GetLicenseStatisticsHandler(_license_store, _authorizer)
            result = await handler.handle(GetLicenseStatisticsQuery(actor=_actor(request)))

            span.set_attribute("total", result.total)
            span.set_status(Status(StatusCode.OK))
            return Response(LicenseStatisticsResponseSerializer(result).data, status=status.HTTP_200_OK)


class ListLicensesView(APIView):
    """View for listing licenses - admin."""

    @extend_schema(
        operation_id="list_licenses",
        summary="List Licenses",
        description="All licenses, newest first.",
        tags=["License Admin API"],
        parameters=[ADMIN_TOKEN_PARAMETER],
        responses={
            200: LicenseDetailsSerializer(many=True),
            403: {"description": "Forbidden - Missing or invalid admin token"},
        },
    )
    def get(self, request: Request) -> Response:
        """List licenses."""
        return async_to_sync(self._handle_list_licenses)(request)

    async def _handle_list_licenses(self, request: Request) -> Response:
        """Async handler for list licenses."""
        with tracer.start_as_current_span("list_licenses") as span:
            span.set_attribute("operation", "list_licenses")

            handler = ListLicensesHandler(_license_store, _authorizer)
            result = await handler.handle(ListLicensesQuery(actor=_actor(request)))

            span.set_attribute("licenses.count", len(result))
            span.set_status(Status(StatusCode.OK))
            return Response(LicenseDetailsSerializer(result, many=True).data, status=status.HTTP_200_OK)


class LicenseDetailView(APIView):
    """View for one license's details - admin."""

    @extend_schema(
        operation_id="get_license",
        summary="Get License",
        description="License details with derived status, expiry date and remaining days.",
        tags=["License Admin API"],
        parameters=[ADMIN_TOKEN_PARAMETER],
        responses={
            200: LicenseDetailsSerializer,
            403: {"description": "Forbidden - Missing or invalid admin token"},
            404: {"description": "License not found"},
        },
    )
    def get(self, request: Request, license_key: str) -> Response:
        """Get a license."""
        return async_to_sync(self._handle_get_license)(request, license_key)

    async def _handle_get_license(self, request: Request, license_key: str) -> Response:
        """Async handler for get license."""
        with tracer.start_as_current_span("get_license") as span:
            span.set_attribute("operation", "get_license")
            span.set_attribute("license_key", license_key)

            handler = GetLicenseHandler(_license_store, _authorizer)
            result = await handler.handle(GetLicenseQuery(license_key=license_key, actor=_actor(request)))

            span.set_status(Status(StatusCode.OK))
            return Response(LicenseDetailsSerializer(result).data, status=status.HTTP_200_OK)


class LicenseUsageLogsView(APIView):
    """View for a license's usage log - admin."""

    @extend_schema(
        operation_id="list_license_usage_logs",
        summary="List License Usage Logs",
        description="Audit entries for a license key, newest first.",
        tags=["License Admin API"],
        parameters=[
            ADMIN_TOKEN_PARAMETER,
            OpenApiParameter(
                name="limit",
                type=int,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Maximum number of entries (default 100, max 1000)",
            ),
        ],
        responses={
            200: UsageLogSerializer(many=True),
            400: {"description": "Bad Request"},
            403: {"description": "Forbidden - Missing or invalid admin token"},
        },
    )
    def get(self, request: Request, license_key: str) -> Response:
        """List usage logs for a license."""
        return async_to_sync(self._handle_list_usage_logs)(request, license_key)

    async def _handle_list_usage_logs(self, request: Request, license_key: str) -> Response:
        """Async handler for list usage logs."""
        with tracer.start_as_current_span("list_license_usage_logs") as span:
            span.set_attribute("operation", "list_license_usage_logs")
            span.set_attribute("license_key", license_key)

            try:
                limit = int(request.query_params.get("limit", 100))
            except ValueError:
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response(
                    {"error": {"limit": ["A valid integer is required."]}},
                    status=status.HTTP_400_BAD_REQUEST,
                )

            handler = ListUsageLogsHandler(_audit_sink, _authorizer)
            result = await handler.handle(
                ListUsageLogsQuery(license_key=license_key, limit=limit, actor=_actor(request))
            )

            span.set_attribute("entries.count", len(result))
            span.set_status(Status(StatusCode.OK))
            return Response(UsageLogSerializer(result, many=True).data, status=status.HTTP_200_OK)
