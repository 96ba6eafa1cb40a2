"""Plan catalog, tenant plan changes and usage billing routes (no tenant header)."""

from datetime import date
from decimal import Decimal

from httpx import AsyncClient

from app.api.v1.dependencies import get_tenant_service, get_usage_service
from app.application.dtos.billing import TenantUsage, UsageAlert
from app.domain.enums import BillingCycle
from app.domain.exceptions import ValidationException
from tests.factories import make_invoice, make_tenant, make_usage_record


async def test_list_plans_without_tenant_header(client: AsyncClient) -> None:
    response = await client.get("/api/v1/plans")

    assert response.status_code == 200
    plans = {p["id"]: p for p in response.json()}
    assert list(plans) == ["starter", "professional", "enterprise"]
    assert Decimal(plans["starter"]["monthly_price"]) == Decimal("29")
    assert plans["starter"]["yearly_savings_percent"] == 17
    assert plans["enterprise"]["limits"]["max_employees"] == -1


async def test_get_unknown_plan(client: AsyncClient) -> None:
    response = await client.get("/api/v1/plans/platinum")

    assert response.status_code == 404


async def test_compare_plans(client: AsyncClient) -> None:
    response = await client.get("/api/v1/plans/compare?current=enterprise&target=starter")

    assert response.status_code == 200
    assert response.json()["change"] == "downgrade"


async def test_change_tenant_plan(client: AsyncClient, override) -> None:
    svc = override(get_tenant_service)
    svc.change_plan.return_value = make_tenant(plan="professional")

    response = await client.patch("/api/v1/tenants/tenant-1/plan", json={"plan": "professional"})

    assert response.status_code == 200
    assert response.json()["plan"] == "professional"
    svc.change_plan.assert_awaited_once_with("tenant-1", "professional")


async def test_change_tenant_plan_unknown(client: AsyncClient, override) -> None:
    svc = override(get_tenant_service)
    svc.change_plan.side_effect = ValidationException("Unknown plan: platinum", field="plan")

    response = await client.patch("/api/v1/tenants/tenant-1/plan", json={"plan": "platinum"})

    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_record_usage(client: AsyncClient, override) -> None:
    svc = override(get_usage_service)
    svc.record_usage.return_value = make_usage_record(quantity=250)

    response = await client.post(
        "/api/v1/tenants/tenant-1/usage", json={"metric_id": "api_calls", "quantity": 250}
    )

    assert response.status_code == 201
    assert response.json()["quantity"] == 250
    svc.record_usage.assert_awaited_once_with("tenant-1", "api_calls", 250, at=None)


async def test_record_usage_rejects_zero_quantity(client: AsyncClient, override) -> None:
    override(get_usage_service)

    response = await client.post(
        "/api/v1/tenants/tenant-1/usage", json={"metric_id": "api_calls", "quantity": 0}
    )

    assert response.status_code == 422


async def test_employee_usage_within_plan_is_null(client: AsyncClient, override) -> None:
    svc = override(get_usage_service)
    svc.update_employee_usage.return_value = None

    response = await client.put(
        "/api/v1/tenants/tenant-1/usage/employees", json={"active_employees": 8}
    )

    assert response.status_code == 200
    assert response.json() is None


async def test_usage_for_period_and_alerts(client: AsyncClient, override) -> None:
    svc = override(get_usage_service)
    svc.get_usage_for_period.return_value = TenantUsage(
        tenant_id="tenant-1", period_start=date(2030, 3, 1), period_end=date(2030, 3, 31)
    )
    svc.get_usage_alerts.return_value = [
        UsageAlert(metric_id="additional_employee", usage=9, limit=10, percentage=90)
    ]

    period = await client.get("/api/v1/tenants/tenant-1/usage/2030/3")
    alerts = await client.get("/api/v1/tenants/tenant-1/usage/alerts")

    assert period.status_code == 200
    assert period.json()["metrics"] == []
    svc.get_usage_for_period.assert_awaited_once_with("tenant-1", 2030, 3)
    assert alerts.json() == [
        {"metric_id": "additional_employee", "usage": 9, "limit": 10, "percentage": 90}
    ]


async def test_invoice_usage_period(client: AsyncClient, override) -> None:
    svc = override(get_usage_service)
    svc.invoice_period.return_value = make_invoice()

    response = await client.post(
        "/api/v1/tenants/tenant-1/usage/invoice",
        json={"year": 2030, "month": 3, "billing_cycle": "YEARLY"},
    )

    assert response.status_code == 201
    assert response.json()["invoice_number"] == "INV-2030-000001"
    svc.invoice_period.assert_awaited_once_with("tenant-1", 2030, 3, BillingCycle.YEARLY)
