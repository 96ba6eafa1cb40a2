"""Metered usage ORM model (master database)."""

import datetime as dt
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class UsageRecord(CuidMixin, TimestampMixin, Base):
    """Quantity of one metric used by a tenant in one calendar month."""

    __tablename__ = "usage_record"

    tenant_id: Mapped[str] = mapped_column(
        String, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    metric_id: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    period_start: Mapped[dt.date] = mapped_column(Date, nullable=False)
    period_end: Mapped[dt.date] = mapped_column(Date, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)
    invoiced: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    invoice_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("invoice.id", ondelete="SET NULL"), nullable=True
    )
    invoiced_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "metric_id", "period_start", name="uq_usage_tenant_metric_period"
        ),
    )
