"""Plan catalog and usage schemas (platform billing)."""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import BillingCycle, PlanChange
from app.domain.plans import Plan, yearly_savings


class PlanLimitsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    max_employees: int
    max_projects: int
    max_storage_bytes: int
    custom_domain: bool
    sso_enabled: bool
    advanced_reports: bool
    api_access: bool
    priority_support: bool


class PlanResponse(BaseModel):
    id: str
    name: str
    monthly_price: Decimal
    yearly_price: Decimal
    yearly_savings_percent: int
    limits: PlanLimitsResponse

    @classmethod
    def from_plan(cls, plan: Plan) -> "PlanResponse":
        return cls(
            id=plan.id,
            name=plan.name,
            monthly_price=plan.monthly_price,
            yearly_price=plan.yearly_price,
            yearly_savings_percent=yearly_savings(plan),
            limits=PlanLimitsResponse.model_validate(plan.limits),
        )


class PlanComparisonResponse(BaseModel):
    current: str
    target: str
    change: PlanChange


class UsageRecordRequest(BaseModel):
    metric_id: str = Field(..., min_length=1, max_length=50)
    quantity: int = Field(default=1, gt=0)
    at: dt.datetime | None = Field(default=None, description="Defaults to now")


class EmployeeUsageRequest(BaseModel):
    active_employees: int = Field(..., ge=0)


class StorageUsageRequest(BaseModel):
    storage_bytes: int = Field(..., ge=0)


class PeriodInvoiceRequest(BaseModel):
    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)
    billing_cycle: BillingCycle = BillingCycle.MONTHLY


class UsageRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    metric_id: str
    quantity: int
    period_start: dt.date
    period_end: dt.date
    unit_price: Decimal
    invoiced: bool
    invoice_id: str | None
    invoiced_at: dt.datetime | None


class UsageSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    metric_id: str
    metric_name: str
    total_quantity: int
    free_quota: int
    billable_quantity: int
    unit_price: Decimal
    amount: Decimal


class TenantUsageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tenant_id: str
    period_start: dt.date
    period_end: dt.date
    metrics: list[UsageSummaryResponse]
    total_amount: Decimal


class UsageAlertResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    metric_id: str
    usage: int
    limit: int
    percentage: int
