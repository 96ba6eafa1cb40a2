"""Tenant usage (platform billing, master database): metering, alerts, period invoices."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import get_usage_service
from app.application.use_cases.billing import UsageService
from app.core.limiter import limit_writes
from app.schemas.invoice import InvoiceResponse
from app.schemas.plan import (
    EmployeeUsageRequest,
    PeriodInvoiceRequest,
    StorageUsageRequest,
    TenantUsageResponse,
    UsageAlertResponse,
    UsageRecordRequest,
    UsageRecordResponse,
)

router = APIRouter()

Service = Annotated[UsageService, Depends(get_usage_service)]


@router.post("/{tenant_id}/usage", response_model=UsageRecordResponse, status_code=201)
@limit_writes
async def record_usage(request: Request, tenant_id: str, body: UsageRecordRequest, svc: Service):
    record = await svc.record_usage(tenant_id, body.metric_id, body.quantity, at=body.at)
    return UsageRecordResponse.model_validate(record)


@router.put("/{tenant_id}/usage/employees", response_model=UsageRecordResponse | None)
@limit_writes
async def update_employee_usage(
    request: Request, tenant_id: str, body: EmployeeUsageRequest, svc: Service
):
    """Head count above the plan limit becomes this month's overage; null when within the plan."""
    record = await svc.update_employee_usage(tenant_id, body.active_employees)
    return UsageRecordResponse.model_validate(record) if record else None


@router.put("/{tenant_id}/usage/storage", response_model=UsageRecordResponse | None)
@limit_writes
async def update_storage_usage(
    request: Request, tenant_id: str, body: StorageUsageRequest, svc: Service
):
    record = await svc.update_storage_usage(tenant_id, body.storage_bytes)
    return UsageRecordResponse.model_validate(record) if record else None


@router.get("/{tenant_id}/usage/current", response_model=TenantUsageResponse)
async def get_current_usage(tenant_id: str, svc: Service):
    return TenantUsageResponse.model_validate(await svc.get_current_usage(tenant_id))


@router.get("/{tenant_id}/usage/alerts", response_model=list[UsageAlertResponse])
async def get_usage_alerts(tenant_id: str, svc: Service):
    return [UsageAlertResponse.model_validate(a) for a in await svc.get_usage_alerts(tenant_id)]


@router.get("/{tenant_id}/usage/{year}/{month}", response_model=TenantUsageResponse)
async def get_usage_for_period(tenant_id: str, year: int, month: int, svc: Service):
    return TenantUsageResponse.model_validate(
        await svc.get_usage_for_period(tenant_id, year, month)
    )


@router.post("/{tenant_id}/usage/invoice", response_model=InvoiceResponse, status_code=201)
@limit_writes
async def invoice_period(
    request: Request, tenant_id: str, body: PeriodInvoiceRequest, svc: Service
):
    """Plan price plus the month's billable usage; the usage is flagged as invoiced."""
    invoice = await svc.invoice_period(tenant_id, body.year, body.month, body.billing_cycle)
    return InvoiceResponse.model_validate(invoice)
