"""Unit tests for UsageService (metering, overage, alerts, period invoices)."""

from datetime import UTC, date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from app.application.use_cases.billing import usage_operations
from app.application.use_cases.billing.usage_operations import UsageService, summarize
from app.domain.enums import BillingCycle
from app.domain.exceptions import BusinessRuleException, ValidationException
from app.domain.plans import GB
from tests.factories import make_invoice, make_tenant, make_usage_record

NOW = datetime(2030, 3, 15, 10, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def frozen_now(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(usage_operations, "utc_now", lambda: NOW)


@pytest.fixture
def usage_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.list_for_period.return_value = []
    repo.add_quantity.side_effect = lambda tenant_id, metric_id, start, end, qty, price: (
        make_usage_record(metric_id=metric_id, quantity=qty, unit_price=price)
    )
    repo.set_quantity.side_effect = repo.add_quantity.side_effect
    repo.mark_invoiced.return_value = 2
    return repo


@pytest.fixture
def tenant_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id.return_value = make_tenant()
    return repo


@pytest.fixture
def invoices() -> AsyncMock:
    svc = AsyncMock()
    svc.create_invoice.return_value = make_invoice(id="inv-9")
    return svc


@pytest.fixture
def service(usage_repo: AsyncMock, tenant_repo: AsyncMock, invoices: AsyncMock) -> UsageService:
    return UsageService(usage_repo, tenant_repo, invoices)


def test_summary_bills_above_free_quota() -> None:
    [summary] = summarize(
        [
            make_usage_record(quantity=9000),
            make_usage_record(id="use-2", quantity=3500),
        ]
    )

    assert summary.total_quantity == 12500
    assert summary.free_quota == 10000
    assert summary.billable_quantity == 2500
    assert summary.amount == Decimal("2.50")


async def test_record_usage_goes_to_the_calendar_month(
    service: UsageService, usage_repo: AsyncMock
) -> None:
    await service.record_usage("tenant-1", "api_calls", 3, at=datetime(2030, 2, 28, tzinfo=UTC))

    usage_repo.add_quantity.assert_awaited_once_with(
        "tenant-1", "api_calls", date(2030, 2, 1), date(2030, 2, 28), 3, Decimal("0.001")
    )


async def test_record_usage_rejects_unknown_metric(service: UsageService) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await service.record_usage("tenant-1", "sms_sent", 1)

    assert exc_info.value.details["field"] == "metric_id"


async def test_employee_overage_over_plan_limit(
    service: UsageService, usage_repo: AsyncMock
) -> None:
    record = await service.update_employee_usage("tenant-1", 14)

    assert record.quantity == 4
    args = usage_repo.set_quantity.await_args.args
    assert args[:4] == ("tenant-1", "additional_employee", date(2030, 3, 1), date(2030, 3, 31))


async def test_no_employee_overage_within_plan_or_unlimited(
    service: UsageService, usage_repo: AsyncMock, tenant_repo: AsyncMock
) -> None:
    assert await service.update_employee_usage("tenant-1", 10) is None
    tenant_repo.get_by_id.return_value = make_tenant(plan="enterprise")
    assert await service.update_employee_usage("tenant-1", 5000) is None
    usage_repo.set_quantity.assert_not_awaited()


async def test_storage_overage_rounds_up_to_whole_gb(
    service: UsageService, usage_repo: AsyncMock
) -> None:
    record = await service.update_storage_usage("tenant-1", 6 * GB + 1)

    assert record.metric_id == "additional_storage"
    assert record.quantity == 2


async def test_alerts_at_eighty_percent(service: UsageService, usage_repo: AsyncMock) -> None:
    usage_repo.list_for_period.return_value = [
        make_usage_record(metric_id="additional_employee", quantity=8, unit_price=Decimal("5")),
        make_usage_record(id="use-2", quantity=7000),
    ]

    alerts = await service.get_usage_alerts("tenant-1")

    assert [(a.metric_id, a.usage, a.limit, a.percentage) for a in alerts] == [
        ("additional_employee", 8, 10, 80)
    ]
    usage_repo.list_for_period.assert_awaited_once_with(
        "tenant-1", date(2030, 3, 1), date(2030, 3, 31)
    )


async def test_alert_percentage_is_capped(service: UsageService, usage_repo: AsyncMock) -> None:
    usage_repo.list_for_period.return_value = [make_usage_record(quantity=25000)]

    [alert] = await service.get_usage_alerts("tenant-1")

    assert alert.percentage == 100


async def test_period_invoice_bills_plan_and_usage(
    service: UsageService, usage_repo: AsyncMock, invoices: AsyncMock
) -> None:
    usage_repo.list_for_period.return_value = [
        make_usage_record(quantity=12000),
        make_usage_record(
            id="use-2", metric_id="additional_employee", quantity=3, unit_price=Decimal("5")
        ),
    ]

    invoice = await service.invoice_period("tenant-1", 2030, 3, BillingCycle.YEARLY)

    assert invoice.id == "inv-9"
    tenant_id, lines = invoices.create_invoice.await_args.args
    assert tenant_id == "tenant-1"
    assert [(line.quantity, line.unit_price) for line in lines] == [
        (Decimal("1"), Decimal("290")),
        (Decimal("2000"), Decimal("0.001")),
        (Decimal("3"), Decimal("5")),
    ]
    assert lines[0].period_end == date(2031, 2, 28)
    metadata = invoices.create_invoice.await_args.kwargs["metadata"]
    assert metadata == {"plan": "starter", "billingCycle": "YEARLY", "period": "2030-03"}
    usage_repo.mark_invoiced.assert_awaited_once_with("tenant-1", date(2030, 3, 1), "inv-9", NOW)


async def test_period_already_invoiced(
    service: UsageService, usage_repo: AsyncMock, invoices: AsyncMock
) -> None:
    usage_repo.list_for_period.return_value = [make_usage_record(invoiced=True)]

    with pytest.raises(BusinessRuleException):
        await service.invoice_period("tenant-1", 2030, 3)

    invoices.create_invoice.assert_not_awaited()


async def test_unknown_plan_records_no_overage(
    service: UsageService, tenant_repo: AsyncMock, usage_repo: AsyncMock
) -> None:
    tenant_repo.get_by_id.return_value = make_tenant(plan="legacy")

    assert await service.update_employee_usage("tenant-1", 500) is None
    assert await service.get_usage_alerts("tenant-1") == []
    with pytest.raises(BusinessRuleException):
        await service.invoice_period("tenant-1", 2030, 3)
