"""Tenant invoices in the master database: issue, pay, void, credit."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from app.application.dtos.billing import InvoiceResult, LineItemInput, PaymentResult
from app.application.dtos.common import Page, clamp_page
from app.application.interfaces.repositories import IInvoiceRepository, ITenantRepository
from app.application.interfaces.services import IEventPublisher
from app.application.services.event_emitter import EventEmitter
from app.domain.enums import InvoiceStatus
from app.domain.events import Queue, Topic
from app.domain.exceptions import (
    BusinessRuleException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
SEQUENCE_WIDTH = 6


def money(value: Decimal | int | float | str) -> Decimal:
    """Round to cents (half up)."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def next_invoice_number(last_number: str | None, prefix: str) -> str:
    """prefix + zero-padded sequence following last_number (1 when none)."""
    sequence = 1
    if last_number and last_number.startswith(prefix):
        suffix = last_number[len(prefix):]
        if suffix.isdigit():
            sequence = int(suffix) + 1
    return f"{prefix}{str(sequence).zfill(SEQUENCE_WIDTH)}"


def build_line_items(items: list[LineItemInput]) -> tuple[list[dict[str, Any]], Decimal]:
    """JSON line items and their subtotal."""
    subtotal = Decimal("0")
    lines: list[dict[str, Any]] = []
    for item in items:
        if item.quantity <= 0:
            raise ValidationException("Line item quantity must be positive", field="quantity")
        amount = money(Decimal(item.quantity) * Decimal(item.unit_price))
        subtotal += amount
        lines.append(
            {
                "id": str(uuid.uuid4()),
                "description": item.description,
                "quantity": str(item.quantity),
                "unitPrice": str(money(item.unit_price)),
                "amount": str(amount),
                "periodStart": item.period_start.isoformat() if item.period_start else None,
                "periodEnd": item.period_end.isoformat() if item.period_end else None,
            }
        )
    return lines, money(subtotal)


class InvoiceService:
    """Invoices and payments for tenants."""

    def __init__(
        self,
        invoice_repo: IInvoiceRepository,
        tenant_repo: ITenantRepository,
        publisher: IEventPublisher | None = None,
        *,
        invoice_prefix: str = "INV-",
        credit_note_prefix: str = "CN-",
        due_days: int = 30,
        tax_rate: Decimal = Decimal("0"),
        currency: str = "usd",
    ) -> None:
        self.invoice_repo = invoice_repo
        self.tenant_repo = tenant_repo
        self.events = EventEmitter(publisher)
        self.invoice_prefix = invoice_prefix
        self.credit_note_prefix = credit_note_prefix
        self.due_days = due_days
        self.tax_rate = Decimal(str(tax_rate))
        self.currency = currency

    async def _generate_number(self, prefix: str, now: datetime) -> str:
        year_prefix = f"{prefix}{now.year}-"
        last = await self.invoice_repo.get_last_number(year_prefix)
        return next_invoice_number(last, year_prefix)

    async def _get(self, invoice_id: str) -> InvoiceResult:
        invoice = await self.invoice_repo.get_by_id(invoice_id)
        if not invoice:
            raise ResourceNotFoundException("invoice", invoice_id)
        return invoice

    async def create_invoice(
        self,
        tenant_id: str,
        line_items: list[LineItemInput],
        *,
        tax_rate: Decimal | None = None,
        due_in_days: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> InvoiceResult:
        """Issue a SENT invoice with totals computed from the line items."""
        if not line_items:
            raise ValidationException("Invoice needs at least one line item", field="line_items")
        if not await self.tenant_repo.get_by_id(tenant_id):
            raise ResourceNotFoundException("tenant", tenant_id)

        now = utc_now()
        lines, subtotal = build_line_items(line_items)
        rate = self.tax_rate if tax_rate is None else Decimal(str(tax_rate))
        tax = money(subtotal * rate)
        total = subtotal + tax
        days = self.due_days if due_in_days is None else due_in_days

        invoice = await self.invoice_repo.create_invoice(
            tenant_id=tenant_id,
            invoice_number=await self._generate_number(self.invoice_prefix, now),
            status=InvoiceStatus.SENT.value,
            currency=self.currency,
            subtotal=subtotal,
            tax=tax,
            total=total,
            amount_paid=Decimal("0"),
            amount_due=total,
            issue_date=now,
            due_date=now + timedelta(days=days),
            line_items=lines,
            extra=metadata,
        )
        payload = {
            "invoiceId": invoice.id,
            "tenantId": tenant_id,
            "invoiceNumber": invoice.invoice_number,
            "total": str(total),
            "currency": invoice.currency,
            "dueDate": invoice.due_date.isoformat(),
        }
        await self.events.to_topic(Topic.BILLING_EVENTS, "invoice.created", payload)
        await self.events.to_queue(Queue.BILLING_INVOICE_CREATED, "invoice.created", payload)
        logger.info(
            "Invoice created: %s %s (tenant=%s, total=%s)",
            invoice.id,
            invoice.invoice_number,
            tenant_id,
            total,
        )
        return invoice

    async def get_invoice(self, invoice_id: str) -> InvoiceResult:
        return await self._get(invoice_id)

    async def get_invoice_by_number(self, invoice_number: str) -> InvoiceResult:
        invoice = await self.invoice_repo.get_by_number(invoice_number)
        if not invoice:
            raise ResourceNotFoundException("invoice", invoice_number)
        return invoice

    async def list_tenant_invoices(
        self,
        tenant_id: str,
        status: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Page[InvoiceResult]:
        if status is not None and status not in {s.value for s in InvoiceStatus}:
            raise ValidationException(f"Invalid invoice status: {status}", field="status")
        p, size = clamp_page(page, page_size)
        return await self.invoice_repo.list_for_tenant(
            tenant_id, status=status, page=p, page_size=size
        )

    async def list_payments(self, invoice_id: str) -> list[PaymentResult]:
        await self._get(invoice_id)
        return await self.invoice_repo.list_payments(invoice_id)

    async def get_overdue_invoices(self) -> list[InvoiceResult]:
        """SENT invoices whose due date has passed, oldest due first."""
        return await self.invoice_repo.list_overdue(utc_now())

    async def record_payment(
        self,
        invoice_id: str,
        amount: Decimal | None = None,
        *,
        method: str = "manual",
        reference: str | None = None,
    ) -> tuple[InvoiceResult, PaymentResult]:
        """Apply a payment; the invoice becomes PAID once nothing is due."""
        invoice = await self._get(invoice_id)
        if invoice.status in (InvoiceStatus.CANCELED.value, InvoiceStatus.REFUNDED.value):
            raise BusinessRuleException(
                f"Cannot record a payment on a {invoice.status} invoice",
                status=invoice.status,
            )
        if invoice.status == InvoiceStatus.PAID.value:
            raise BusinessRuleException("Invoice is already paid", invoice_id=invoice_id)
        paid = money(invoice.amount_due if amount is None else amount)
        if paid <= 0:
            raise ValidationException("Payment amount must be positive", field="amount")

        now = utc_now()
        amount_paid = invoice.amount_paid + paid
        remaining = invoice.total - amount_paid
        fully_paid = remaining <= 0
        changes: dict[str, Any] = {
            "amount_paid": amount_paid,
            "amount_due": max(Decimal("0"), remaining),
            "status": InvoiceStatus.PAID.value if fully_paid else invoice.status,
        }
        if fully_paid:
            changes["paid_at"] = now
        payment = await self.invoice_repo.create_payment(
            invoice_id=invoice_id,
            tenant_id=invoice.tenant_id,
            amount=paid,
            currency=invoice.currency,
            method=method,
            reference=reference,
        )
        updated = await self.invoice_repo.update_invoice(invoice_id, changes)

        await self.events.to_queue(
            Queue.BILLING_PAYMENT_RECEIVED,
            "payment.received",
            {
                "paymentId": payment.id,
                "invoiceId": invoice_id,
                "tenantId": invoice.tenant_id,
                "amount": str(paid),
                "currency": invoice.currency,
            },
        )
        if fully_paid:
            await self.events.to_topic(
                Topic.BILLING_EVENTS,
                "invoice.paid",
                {
                    "invoiceId": invoice_id,
                    "tenantId": invoice.tenant_id,
                    "invoiceNumber": invoice.invoice_number,
                    "paymentId": payment.id,
                },
            )
            logger.info("Invoice paid: %s %s", invoice_id, invoice.invoice_number)
        return updated, payment

    async def void_invoice(self, invoice_id: str) -> InvoiceResult:
        invoice = await self._get(invoice_id)
        if invoice.status == InvoiceStatus.PAID.value:
            raise BusinessRuleException("Cannot void a paid invoice", invoice_id=invoice_id)
        if invoice.status == InvoiceStatus.CANCELED.value:
            return invoice
        voided = await self.invoice_repo.update_invoice(
            invoice_id, {"status": InvoiceStatus.CANCELED.value}
        )
        await self.events.to_topic(
            Topic.BILLING_EVENTS,
            "invoice.voided",
            {
                "invoiceId": invoice_id,
                "tenantId": invoice.tenant_id,
                "invoiceNumber": invoice.invoice_number,
            },
        )
        logger.info("Invoice voided: %s", invoice_id)
        return voided

    async def create_credit_note(
        self, invoice_id: str, amount: Decimal, reason: str
    ) -> InvoiceResult:
        """Negative, already settled invoice referencing the original."""
        original = await self._get(invoice_id)
        credit = money(amount)
        if credit <= 0:
            raise ValidationException("Credit amount must be positive", field="amount")
        if credit > original.total:
            raise BusinessRuleException(
                "Credit exceeds the invoice total",
                total=str(original.total),
                requested=str(credit),
            )
        now = utc_now()
        number = await self._generate_number(self.invoice_prefix, now)
        credit_note = await self.invoice_repo.create_invoice(
            tenant_id=original.tenant_id,
            invoice_number=self.credit_note_prefix + number[len(self.invoice_prefix):],
            status=InvoiceStatus.PAID.value,
            currency=original.currency,
            subtotal=-credit,
            tax=Decimal("0"),
            total=-credit,
            amount_paid=-credit,
            amount_due=Decimal("0"),
            issue_date=now,
            due_date=now,
            paid_at=now,
            line_items=[
                {
                    "id": str(uuid.uuid4()),
                    "description": f"Credit Note: {reason}",
                    "quantity": "1",
                    "unitPrice": str(-credit),
                    "amount": str(-credit),
                }
            ],
            extra={"type": "credit_note", "originalInvoiceId": invoice_id, "reason": reason},
        )
        await self.events.to_topic(
            Topic.BILLING_EVENTS,
            "credit_note.created",
            {
                "creditNoteId": credit_note.id,
                "tenantId": original.tenant_id,
                "originalInvoiceId": invoice_id,
                "amount": str(credit),
            },
        )
        logger.info(
            "Credit note created: %s for invoice %s (%s)", credit_note.id, invoice_id, credit
        )
        return credit_note
