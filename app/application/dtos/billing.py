"""DTOs for billing use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class LineItemInput:
    description: str
    quantity: Decimal
    unit_price: Decimal
    period_start: date | None = None
    period_end: date | None = None


@dataclass(frozen=True)
class InvoiceResult:
    id: str
    tenant_id: str
    invoice_number: str
    status: str
    currency: str
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    amount_paid: Decimal
    amount_due: Decimal
    issue_date: datetime
    due_date: datetime
    paid_at: datetime | None = None
    line_items: list[dict[str, Any]] = field(default_factory=list)
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class PaymentResult:
    id: str
    invoice_id: str
    tenant_id: str
    amount: Decimal
    currency: str
    method: str
    reference: str | None
    created_at: datetime | None = None


@dataclass(frozen=True)
class UsageRecordResult:
    id: str
    tenant_id: str
    metric_id: str
    quantity: int
    period_start: date
    period_end: date
    unit_price: Decimal
    invoiced: bool = False
    invoice_id: str | None = None
    invoiced_at: datetime | None = None


@dataclass(frozen=True)
class UsageSummary:
    """One metric's month: quantity above free_quota is billable."""

    metric_id: str
    metric_name: str
    total_quantity: int
    free_quota: int
    billable_quantity: int
    unit_price: Decimal
    amount: Decimal


@dataclass(frozen=True)
class TenantUsage:
    tenant_id: str
    period_start: date
    period_end: date
    metrics: list[UsageSummary] = field(default_factory=list)
    total_amount: Decimal = Decimal("0")


@dataclass(frozen=True)
class UsageAlert:
    metric_id: str
    usage: int
    limit: int
    percentage: int
