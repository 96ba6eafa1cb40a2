"""Billing API (platform administration, master database): invoices, payments, credit notes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import get_invoice_service
from app.application.use_cases.billing import InvoiceService
from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.limiter import limit_writes
from app.schemas.common import PageResponse
from app.schemas.invoice import (
    CreditNoteRequest,
    InvoiceCreateRequest,
    InvoiceResponse,
    PaymentRecordedResponse,
    PaymentRequest,
    PaymentResponse,
)

router = APIRouter()

Service = Annotated[InvoiceService, Depends(get_invoice_service)]


@router.post("", response_model=InvoiceResponse, status_code=201)
@limit_writes
async def create_invoice(request: Request, body: InvoiceCreateRequest, svc: Service):
    """Issue a SENT invoice numbered INV-<year>-<sequence>."""
    invoice = await svc.create_invoice(
        body.tenant_id,
        [item.to_input() for item in body.line_items],
        tax_rate=body.tax_rate,
        due_in_days=body.due_in_days,
        metadata=body.metadata,
    )
    return InvoiceResponse.model_validate(invoice)


@router.get("", response_model=PageResponse[InvoiceResponse])
async def list_tenant_invoices(
    svc: Service,
    tenant_id: str,
    status: str | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
):
    result = await svc.list_tenant_invoices(tenant_id, status=status, page=page, page_size=page_size)
    return PageResponse[InvoiceResponse].from_page(result, InvoiceResponse.model_validate)


@router.get("/overdue", response_model=list[InvoiceResponse])
async def get_overdue_invoices(svc: Service):
    return [InvoiceResponse.model_validate(i) for i in await svc.get_overdue_invoices()]


@router.get("/number/{invoice_number}", response_model=InvoiceResponse)
async def get_invoice_by_number(invoice_number: str, svc: Service):
    return InvoiceResponse.model_validate(await svc.get_invoice_by_number(invoice_number))


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(invoice_id: str, svc: Service):
    return InvoiceResponse.model_validate(await svc.get_invoice(invoice_id))


@router.get("/{invoice_id}/payments", response_model=list[PaymentResponse])
async def list_payments(invoice_id: str, svc: Service):
    return [PaymentResponse.model_validate(p) for p in await svc.list_payments(invoice_id)]


@router.post("/{invoice_id}/payments", response_model=PaymentRecordedResponse, status_code=201)
@limit_writes
async def record_payment(request: Request, invoice_id: str, body: PaymentRequest, svc: Service):
    """Amount defaults to what is still due; the invoice becomes PAID when nothing is left."""
    invoice, payment = await svc.record_payment(
        invoice_id, body.amount, method=body.method, reference=body.reference
    )
    return PaymentRecordedResponse(
        invoice=InvoiceResponse.model_validate(invoice),
        payment=PaymentResponse.model_validate(payment),
    )


@router.post("/{invoice_id}/void", response_model=InvoiceResponse)
@limit_writes
async def void_invoice(request: Request, invoice_id: str, svc: Service):
    return InvoiceResponse.model_validate(await svc.void_invoice(invoice_id))


@router.post("/{invoice_id}/credit-notes", response_model=InvoiceResponse, status_code=201)
@limit_writes
async def create_credit_note(
    request: Request, invoice_id: str, body: CreditNoteRequest, svc: Service
):
    credit_note = await svc.create_credit_note(invoice_id, body.amount, body.reason)
    return InvoiceResponse.model_validate(credit_note)
