"""DTOs for leave use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass(frozen=True)
class LeaveTypeResult:
    id: str
    code: str
    name: str
    description: str | None
    color: str
    default_days_per_year: Decimal
    is_paid: bool
    requires_approval: bool
    allow_negative_balance: bool
    allow_half_day: bool
    advance_notice_days: int
    carry_forward_allowed: bool
    max_carry_forward_days: Decimal
    is_active: bool


@dataclass(frozen=True)
class LeaveTypeInput:
    code: str
    name: str
    description: str | None = None
    color: str | None = None
    default_days_per_year: Decimal = Decimal("0")
    is_paid: bool = True
    requires_approval: bool = True
    allow_negative_balance: bool = False
    allow_half_day: bool = True
    advance_notice_days: int = 0
    carry_forward_allowed: bool = False
    max_carry_forward_days: Decimal = Decimal("0")


@dataclass(frozen=True)
class LeaveBalanceResult:
    id: str
    employee_id: str
    leave_type_id: str
    year: int
    total_days: Decimal
    used_days: Decimal
    pending_days: Decimal
    carry_forward_days: Decimal
    adjustment_days: Decimal

    @property
    def available_days(self) -> Decimal:
        return (
            self.total_days
            + self.carry_forward_days
            + self.adjustment_days
            - self.used_days
            - self.pending_days
        )


@dataclass(frozen=True)
class LeaveRequestResult:
    id: str
    employee_id: str
    leave_type_id: str
    from_date: date
    to_date: date
    days: Decimal
    is_half_day: bool
    half_day_period: str | None
    reason: str | None
    status: str
    approver_id: str | None = None
    approved_at: datetime | None = None
    approver_comments: str | None = None
    rejection_reason: str | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class LeaveRequestInput:
    employee_id: str
    leave_type_id: str
    from_date: date
    to_date: date
    is_half_day: bool = False
    half_day_period: str | None = None
    reason: str | None = None


@dataclass(frozen=True)
class LeaveRequestFilters:
    employee_id: str | None = None
    leave_type_id: str | None = None
    status: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    page: int = 1
    page_size: int = 20
