"""Invoice and payment repository (master database). Returns DTOs."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.billing import InvoiceResult, PaymentResult
from app.application.dtos.common import Page
from app.domain.enums import InvoiceStatus
from app.infrastructure.persistence.models.invoice import Invoice, Payment
from app.infrastructure.persistence.repositories.base import BaseRepository

_FIELD_ALIASES = {"metadata": "extra"}


def _invoice_to_result(i: Invoice) -> InvoiceResult:
    return InvoiceResult(
        id=i.id,
        tenant_id=i.tenant_id,
        invoice_number=i.invoice_number,
        status=i.status,
        currency=i.currency,
        subtotal=Decimal(i.subtotal),
        tax=Decimal(i.tax),
        total=Decimal(i.total),
        amount_paid=Decimal(i.amount_paid),
        amount_due=Decimal(i.amount_due),
        issue_date=i.issue_date,
        due_date=i.due_date,
        paid_at=i.paid_at,
        line_items=list(i.line_items or []),
        metadata=i.extra,
    )


def _payment_to_result(p: Payment) -> PaymentResult:
    return PaymentResult(
        id=p.id,
        invoice_id=p.invoice_id,
        tenant_id=p.tenant_id,
        amount=Decimal(p.amount),
        currency=p.currency,
        method=p.method,
        reference=p.reference,
        created_at=p.created_at,
    )


class InvoiceRepository(BaseRepository[Invoice]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Invoice)

    async def get_by_id(self, invoice_id: str) -> InvoiceResult | None:
        invoice = await self._get(invoice_id)
        return _invoice_to_result(invoice) if invoice else None

    async def get_by_number(self, invoice_number: str) -> InvoiceResult | None:
        result = await self.db.execute(
            select(Invoice).where(Invoice.invoice_number == invoice_number)
        )
        invoice = result.scalar_one_or_none()
        return _invoice_to_result(invoice) if invoice else None

    async def get_last_number(self, prefix: str) -> str | None:
        result = await self.db.execute(
            select(Invoice.invoice_number)
            .where(Invoice.invoice_number.startswith(prefix))
            .order_by(
                func.length(Invoice.invoice_number).desc(), Invoice.invoice_number.desc()
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def create_invoice(self, **fields: Any) -> InvoiceResult:
        if "metadata" in fields:
            fields["extra"] = fields.pop("metadata")
        return _invoice_to_result(await self._add(Invoice(**fields)))

    async def update_invoice(
        self, invoice_id: str, changes: dict[str, Any]
    ) -> InvoiceResult | None:
        invoice = await self._get(invoice_id)
        if invoice is None:
            return None
        return _invoice_to_result(
            await self._apply_changes(invoice, changes, aliases=_FIELD_ALIASES)
        )

    async def list_for_tenant(
        self, tenant_id: str, status: str | None = None, page: int = 1, page_size: int = 20
    ) -> Page[InvoiceResult]:
        where = [Invoice.tenant_id == tenant_id]
        if status:
            where.append(Invoice.status == status)
        total = (
            await self.db.execute(select(func.count()).select_from(Invoice).where(*where))
        ).scalar_one()
        result = await self.db.execute(
            select(Invoice)
            .where(*where)
            .order_by(Invoice.issue_date.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return Page(
            items=[_invoice_to_result(i) for i in result.scalars().all()],
            total=total,
            page=page,
            page_size=page_size,
        )

    async def list_overdue(self, now: datetime) -> list[InvoiceResult]:
        result = await self.db.execute(
            select(Invoice)
            .where(Invoice.status == InvoiceStatus.SENT.value, Invoice.due_date < now)
            .order_by(Invoice.due_date)
        )
        return [_invoice_to_result(i) for i in result.scalars().all()]

    async def create_payment(self, **fields: Any) -> PaymentResult:
        payment = Payment(**fields)
        self.db.add(payment)
        await self.db.flush()
        await self.db.refresh(payment)
        return _payment_to_result(payment)

    async def list_payments(self, invoice_id: str) -> list[PaymentResult]:
        result = await self.db.execute(
            select(Payment).where(Payment.invoice_id == invoice_id).order_by(Payment.created_at)
        )
        return [_payment_to_result(p) for p in result.scalars().all()]
