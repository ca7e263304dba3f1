"""
Unit tests for license query handlers.
"""
from datetime import timedelta

import pytest

from core.domain.exceptions import (
    AdminAuthorizationError,
    LicenseNotFoundError,
    LicenseValidationError,
)
from core.domain.value_objects import AuditAction, Edition, OperationStatus
from licenses.application.commands.activate_license import ActivateLicenseCommand
from licenses.application.handlers.activate_license_handler import ActivateLicenseHandler
from licenses.application.handlers.license_query_handlers import (
    GetLicenseHandler,
    GetLicenseStatisticsHandler,
    ListLicensesHandler,
    ListUsageLogsHandler,
)
from licenses.application.queries.get_license import GetLicenseQuery
from licenses.application.queries.get_license_statistics import GetLicenseStatisticsQuery
from licenses.application.queries.list_licenses import ListLicensesQuery
from licenses.application.queries.list_usage_logs import ListUsageLogsQuery
from licenses.infrastructure.repositories.in_memory_license_store import InMemoryLicenseStore
from licenses.ports.authorizer import AllowAllAuthorizer
from tests.helpers import T0


@pytest.mark.asyncio
class TestGetLicenseStatisticsHandler:
    """Tests for GetLicenseStatisticsHandler."""

    async def test_statistics(self, make_license, clock):
        """Test counts are derived at the clock's instant."""
        store = InMemoryLicenseStore(
            [
                make_license(key="A", expiry_days=3),
                make_license(key="B", expiry_days=1, edition=Edition.PRO),
                make_license(key="C", edition=Edition.ENTERPRISE).revoke(),
            ]
        )
        clock.advance(days=2)
        handler = GetLicenseStatisticsHandler(store, AllowAllAuthorizer(), clock=clock)

        result = await handler.handle(GetLicenseStatisticsQuery())

        assert result.total == 3
        assert (result.active, result.expired, result.revoked) == (1, 1, 1)
        assert (result.basic, result.pro, result.enterprise) == (1, 1, 1)
        assert result.expiring_in_7_days == 1
        assert result.generated_at == clock.now

    async def test_does_not_mutate(self, seeded_store, sample_license):
        """Test statistics leave every record untouched."""
        await GetLicenseStatisticsHandler(seeded_store, AllowAllAuthorizer()).handle(GetLicenseStatisticsQuery())
        assert (await seeded_store.find_by_key(sample_license.key)) == sample_license

    async def test_unauthorized(self, license_store, deny_all_authorizer):
        """Test refused callers."""
        with pytest.raises(AdminAuthorizationError):
            await GetLicenseStatisticsHandler(license_store, deny_all_authorizer).handle(GetLicenseStatisticsQuery())


@pytest.mark.asyncio
class TestGetLicenseHandler:
    """Tests for GetLicenseHandler."""

    async def test_get(self, seeded_store, sample_license, clock):
        """Test details with derived fields."""
        clock.advance(days=100)
        handler = GetLicenseHandler(seeded_store, AllowAllAuthorizer(), clock=clock)

        result = await handler.handle(GetLicenseQuery(license_key=sample_license.key))

        assert result.license_key == sample_license.key
        assert result.license_status == "ACTIVE"
        assert result.remaining_days == 265
        assert result.expiry == (T0 + timedelta(days=365)).date()

    async def test_not_found(self, license_store):
        """Test unknown keys raise."""
        with pytest.raises(LicenseNotFoundError):
            await GetLicenseHandler(license_store, AllowAllAuthorizer()).handle(GetLicenseQuery(license_key="NOPE"))


@pytest.mark.asyncio
class TestListLicensesHandler:
    """Tests for ListLicensesHandler."""

    async def test_newest_first(self, make_license):
        """Test ordering by creation time."""
        store = InMemoryLicenseStore(
            [
                make_license(key="OLD", created_at=T0),
                make_license(key="NEW", created_at=T0 + timedelta(days=1)),
            ]
        )

        result = await ListLicensesHandler(store, AllowAllAuthorizer()).handle(ListLicensesQuery())

        assert [dto.license_key for dto in result] == ["NEW", "OLD"]


@pytest.mark.asyncio
class TestListUsageLogsHandler:
    """Tests for ListUsageLogsHandler."""

    async def test_entries_newest_first(self, seeded_store, audit_sink, sample_license, clock):
        """Test the audit trail of one key."""
        activate = ActivateLicenseHandler(seeded_store, audit_sink, clock=clock)
        await activate.handle(ActivateLicenseCommand(license_key=sample_license.key, hwid="HW-1"))
        clock.advance(minutes=5)
        await activate.handle(ActivateLicenseCommand(license_key=sample_license.key, hwid="HW-2"))

        result = await ListUsageLogsHandler(audit_sink, AllowAllAuthorizer()).handle(
            ListUsageLogsQuery(license_key=sample_license.key)
        )

        assert [entry.outcome for entry in result] == [
            OperationStatus.HW_MISMATCH.value,
            OperationStatus.OK.value,
        ]
        assert result[0].action == AuditAction.ACTIVATE.value

    async def test_limit(self, seeded_store, audit_sink, sample_license, clock):
        """Test the limit is applied."""
        activate = ActivateLicenseHandler(seeded_store, audit_sink, clock=clock)
        for _ in range(3):
            await activate.handle(ActivateLicenseCommand(license_key=sample_license.key, hwid="HW-1"))

        result = await ListUsageLogsHandler(audit_sink, AllowAllAuthorizer()).handle(
            ListUsageLogsQuery(license_key=sample_license.key, limit=2)
        )

        assert len(result) == 2

    @pytest.mark.parametrize("limit", [0, 1001])
    async def test_limit_bounds(self, audit_sink, limit):
        """Test out of range limits."""
        with pytest.raises(LicenseValidationError):
            await ListUsageLogsHandler(audit_sink, AllowAllAuthorizer()).handle(
                ListUsageLogsQuery(license_key="K", limit=limit)
            )
