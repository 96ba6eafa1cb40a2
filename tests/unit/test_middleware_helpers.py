"""Request id sanitizing, tenant path matching and error status mapping."""

import logging

import pytest

from app.core.exception_handlers import status_for
from app.core.tenant_context import get_tenant_context, get_tenant_context_or_none
from app.domain.exceptions import (
    BusinessRuleException,
    DatabaseConnectionException,
    OfficeException,
    ResourceNotFoundException,
    TenantContextMissingException,
    TenantRequiredException,
    TenantSuspendedException,
)
from app.middleware.request_id import sanitize_request_id
from app.middleware.tenant_context import requires_tenant
from app.shared.telemetry.logging import RequestContextFilter

EXEMPT = ["/api/v1/health", "/api/v1/tenants", "/api/v1/invoices", "/api/v1/plans"]


@pytest.mark.parametrize("raw", ["abc-123", "A_b", "x" * 64])
def test_safe_request_ids_are_kept(raw: str) -> None:
    assert sanitize_request_id(raw) == raw


@pytest.mark.parametrize("raw", [None, "", "has space", "x" * 65, "semi;colon"])
def test_unsafe_request_ids_are_replaced(raw: str | None) -> None:
    value = sanitize_request_id(raw)

    assert value != raw
    assert len(value) == 36


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/api/v1/employees", True),
        ("/api/v1/leave/requests", True),
        ("/api/v1/health/ready", False),
        ("/api/v1/tenants/by-slug/acme", False),
        ("/api/v1/invoices/inv-1", False),
        ("/api/v1/plans/compare", False),
        ("/api/v1/holidays/optional", True),
        ("/docs", False),
    ],
)
def test_requires_tenant(path: str, expected: bool) -> None:
    assert requires_tenant(path, EXEMPT) is expected


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (ResourceNotFoundException("Employee", "e"), 404),
        (TenantRequiredException(), 400),
        (TenantSuspendedException("acme", "SUSPENDED"), 403),
        (BusinessRuleException("no"), 422),
        (DatabaseConnectionException("oms_tenant_acme", "down"), 503),
        (OfficeException("odd", "SOMETHING_ELSE"), 400),
    ],
)
def test_status_for(exc: OfficeException, status: int) -> None:
    assert status_for(exc) == status


def test_tenant_context_missing_outside_request() -> None:
    assert get_tenant_context_or_none() is None
    with pytest.raises(TenantContextMissingException):
        get_tenant_context()


def test_log_records_outside_request_use_placeholders() -> None:
    record = logging.LogRecord("app", logging.INFO, __file__, 1, "hello", None, None)

    assert RequestContextFilter().filter(record) is True
    assert (record.tenant, record.request_id) == ("-", "-")
