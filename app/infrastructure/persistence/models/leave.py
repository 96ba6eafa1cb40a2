"""Leave ORM models (tenant database): types, balances, adjustments, requests."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import LeaveStatus
from app.infrastructure.persistence.database import TenantBase
from app.infrastructure.persistence.models.mixins import (
    ActiveMixin,
    AuditedTenantModel,
    TenantModel,
)

_DAYS = Numeric(6, 1)


class LeaveType(AuditedTenantModel, ActiveMixin, TenantBase):
    """Leave type (annual, sick, ...). Table: leave_type. Unique upper-case code."""

    __tablename__ = "leave_type"

    code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String, nullable=False, default="#3B82F6")
    default_days_per_year: Mapped[Decimal] = mapped_column(_DAYS, nullable=False, default=0)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    requires_approval: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allow_negative_balance: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    allow_half_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    advance_notice_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    carry_forward_allowed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    max_carry_forward_days: Mapped[Decimal] = mapped_column(_DAYS, nullable=False, default=0)


class LeaveBalance(TenantModel, TenantBase):
    """Per employee, leave type and year. Table: leave_balance."""

    __tablename__ = "leave_balance"

    employee_id: Mapped[str] = mapped_column(
        String, ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True
    )
    leave_type_id: Mapped[str] = mapped_column(
        String, ForeignKey("leave_type.id", ondelete="CASCADE"), nullable=False
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    total_days: Mapped[Decimal] = mapped_column(_DAYS, nullable=False, default=0)
    used_days: Mapped[Decimal] = mapped_column(_DAYS, nullable=False, default=0)
    pending_days: Mapped[Decimal] = mapped_column(_DAYS, nullable=False, default=0)
    carry_forward_days: Mapped[Decimal] = mapped_column(_DAYS, nullable=False, default=0)
    adjustment_days: Mapped[Decimal] = mapped_column(_DAYS, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "employee_id", "leave_type_id", "year", name="uq_leave_balance_employee_type_year"
        ),
    )


class LeaveBalanceAdjustment(TenantModel, TenantBase):
    """Audit row for manual balance adjustments."""

    __tablename__ = "leave_balance_adjustment"

    balance_id: Mapped[str] = mapped_column(
        String, ForeignKey("leave_balance.id", ondelete="CASCADE"), nullable=False, index=True
    )
    days: Mapped[Decimal] = mapped_column(_DAYS, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    adjusted_by: Mapped[str | None] = mapped_column(String, nullable=True)


class LeaveRequest(AuditedTenantModel, TenantBase):
    """Leave request. Table: leave_request."""

    __tablename__ = "leave_request"

    employee_id: Mapped[str] = mapped_column(
        String, ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True
    )
    leave_type_id: Mapped[str] = mapped_column(
        String, ForeignKey("leave_type.id", ondelete="RESTRICT"), nullable=False
    )
    from_date: Mapped[date] = mapped_column(Date, nullable=False)
    to_date: Mapped[date] = mapped_column(Date, nullable=False)
    days: Mapped[Decimal] = mapped_column(_DAYS, nullable=False)
    is_half_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    half_day_period: Mapped[str | None] = mapped_column(String, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=LeaveStatus.PENDING.value, index=True
    )
    approver_id: Mapped[str | None] = mapped_column(String, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approver_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
