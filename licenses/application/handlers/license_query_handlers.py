"""
License query handlers.

Read-only admin handlers: statistics, license details, listings and the
usage log. None of them touch the revision or write audit entries.
"""
from typing import List

from core.domain.clock import Clock, utc_now
from core.domain.exceptions import LicenseNotFoundError, LicenseValidationError
from core.domain.value_objects import AdminOperation
from licenses.application.dto.license_dto import (
    LicenseDetailsDTO,
    LicenseStatisticsDTO,
    UsageLogDTO,
)
from licenses.application.handlers.base import ensure_authorized, require_key
from licenses.application.queries.get_license import GetLicenseQuery
from licenses.application.queries.get_license_statistics import GetLicenseStatisticsQuery
from licenses.application.queries.list_licenses import ListLicensesQuery
from licenses.application.queries.list_usage_logs import ListUsageLogsQuery
from licenses.domain.services import LicenseStatisticsAggregator
from licenses.ports.audit_sink import AuditSink
from licenses.ports.authorizer import Authorizer
from licenses.ports.license_store import LicenseStore

MAX_USAGE_LOG_LIMIT = 1000


class GetLicenseStatisticsHandler:
    """Handler for GetLicenseStatisticsQuery."""

    def __init__(self, license_store: LicenseStore, authorizer: Authorizer, clock: Clock = utc_now):
        """Initialize handler with store and authorizer."""
        self.license_store = license_store
        self.authorizer = authorizer
        self.clock = clock

    async def handle(self, query: GetLicenseStatisticsQuery) -> LicenseStatisticsDTO:
        """
        Handle get statistics query.

        Args:
            query: GetLicenseStatisticsQuery

        Returns:
            LicenseStatisticsDTO

        Raises:
            AdminAuthorizationError: If the caller may not read statistics
        """
        ensure_authorized(self.authorizer, query.actor, AdminOperation.STATISTICS)
        now = self.clock()
        licenses = await self.license_store.list_all()
        statistics = LicenseStatisticsAggregator.aggregate(licenses, now)
        return LicenseStatisticsDTO.from_statistics(statistics, generated_at=now)


class GetLicenseHandler:
    """Handler for GetLicenseQuery."""

    def __init__(self, license_store: LicenseStore, authorizer: Authorizer, clock: Clock = utc_now):
        """Initialize handler with store and authorizer."""
        self.license_store = license_store
        self.authorizer = authorizer
        self.clock = clock

    async def handle(self, query: GetLicenseQuery) -> LicenseDetailsDTO:
        """
        Handle get license query.

        Args:
            query: GetLicenseQuery

        Returns:
            LicenseDetailsDTO

        Raises:
            AdminAuthorizationError: If the caller may not read licenses
            LicenseNotFoundError: If the key does not exist
        """
        key = require_key(query.license_key)
        ensure_authorized(self.authorizer, query.actor, AdminOperation.READ)
        license = await self.license_store.find_by_key(key)
        if not license:
            raise LicenseNotFoundError(f"License {key} not found")
        return LicenseDetailsDTO.from_license(license, self.clock())


class ListLicensesHandler:
    """Handler for ListLicensesQuery."""

    def __init__(self, license_store: LicenseStore, authorizer: Authorizer, clock: Clock = utc_now):
        """Initialize handler with store and authorizer."""
        self.license_store = license_store
        self.authorizer = authorizer
        self.clock = clock

    async def handle(self, query: ListLicensesQuery) -> List[LicenseDetailsDTO]:
        """
        Handle list licenses query.

        Returns:
            LicenseDetailsDTO list, newest first
        """
        ensure_authorized(self.authorizer, query.actor, AdminOperation.READ)
        now = self.clock()
        licenses = await self.license_store.list_all()
        return [LicenseDetailsDTO.from_license(license, now) for license in licenses]


class ListUsageLogsHandler:
    """Handler for ListUsageLogsQuery."""

    def __init__(self, audit_sink: AuditSink, authorizer: Authorizer):
        """Initialize handler with audit sink and authorizer."""
        self.audit_sink = audit_sink
        self.authorizer = authorizer

    async def handle(self, query: ListUsageLogsQuery) -> List[UsageLogDTO]:
        """
        Handle list usage logs query.

        Returns:
            UsageLogDTO list, newest first

        Raises:
            AdminAuthorizationError: If the caller may not read the audit log
            LicenseValidationError: If the limit is out of range
        """
        key = require_key(query.license_key)
        ensure_authorized(self.authorizer, query.actor, AdminOperation.READ)
        if not 1 <= query.limit <= MAX_USAGE_LOG_LIMIT:
            raise LicenseValidationError(f"Limit must be between 1 and {MAX_USAGE_LOG_LIMIT}")

        entries = await self.audit_sink.find_by_key(key, limit=query.limit)
        return [
            UsageLogDTO(
                id=entry.id,
                license_key=entry.license_key,
                action=entry.action.value,
                outcome=entry.outcome.value,
                hwid=entry.hwid,
                old_edition=entry.old_edition,
                new_edition=entry.new_edition,
                old_expiry_days=entry.old_expiry_days,
                new_expiry_days=entry.new_expiry_days,
                server_revision=entry.server_revision,
                ip_address=entry.ip_address,
                user_agent=entry.user_agent,
                actor=entry.actor,
                notes=entry.notes,
                created_at=entry.created_at,
            )
            for entry in entries
        ]
