"""Billing API schemas (master database)."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.billing import LineItemInput


class LineItemRequest(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    quantity: Decimal = Field(default=Decimal("1"), gt=0)
    unit_price: Decimal = Field(..., ge=0)
    period_start: date | None = None
    period_end: date | None = None

    def to_input(self) -> LineItemInput:
        return LineItemInput(**self.model_dump())


class InvoiceCreateRequest(BaseModel):
    tenant_id: str
    line_items: list[LineItemRequest] = Field(..., min_length=1)
    tax_rate: Decimal | None = Field(default=None, ge=0, le=1)
    due_in_days: int | None = Field(default=None, ge=0, le=365)
    metadata: dict[str, Any] | None = None


class PaymentRequest(BaseModel):
    amount: Decimal | None = Field(
        default=None, gt=0, description="Defaults to the full amount due"
    )
    method: str = Field(default="manual", max_length=50)
    reference: str | None = Field(default=None, max_length=255)


class CreditNoteRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)
    reason: str = Field(..., min_length=1, max_length=500)


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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
    paid_at: datetime | None
    line_items: list[dict[str, Any]]
    metadata: dict[str, Any] | None


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    invoice_id: str
    tenant_id: str
    amount: Decimal
    currency: str
    method: str
    reference: str | None
    created_at: datetime | None


class PaymentRecordedResponse(BaseModel):
    invoice: InvoiceResponse
    payment: PaymentResponse
