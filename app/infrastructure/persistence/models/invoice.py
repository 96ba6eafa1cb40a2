"""Invoice and Payment ORM models (master database)."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import InvoiceStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin

_MONEY = Numeric(14, 2)


class Invoice(CuidMixin, TimestampMixin, Base):
    """Invoice issued to a tenant. line_items is a JSON list of line dicts."""

    __tablename__ = "invoice"

    tenant_id: Mapped[str] = mapped_column(
        String, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    invoice_number: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=InvoiceStatus.SENT.value, index=True
    )
    currency: Mapped[str] = mapped_column(String, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    tax: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    total: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    amount_paid: Mapped[Decimal] = mapped_column(_MONEY, nullable=False, default=0)
    amount_due: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    issue_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    line_items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    extra: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)


class Payment(CuidMixin, TimestampMixin, Base):
    """Payment recorded against an invoice."""

    __tablename__ = "payment"

    invoice_id: Mapped[str] = mapped_column(
        String, ForeignKey("invoice.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    currency: Mapped[str] = mapped_column(String, nullable=False)
    method: Mapped[str] = mapped_column(String, nullable=False, default="manual")
    reference: Mapped[str | None] = mapped_column(String, nullable=True)
