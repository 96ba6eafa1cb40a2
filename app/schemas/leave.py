"""Leave types, balances and requests API schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.leave import LeaveRequestInput, LeaveTypeInput


class LeaveTypeCreateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=20, description="Upper-cased on save")
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    color: str | None = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    default_days_per_year: Decimal = Field(default=Decimal("0"), ge=0)
    is_paid: bool = True
    requires_approval: bool = True
    allow_negative_balance: bool = False
    allow_half_day: bool = True
    advance_notice_days: int = Field(default=0, ge=0)
    carry_forward_allowed: bool = False
    max_carry_forward_days: Decimal = Field(default=Decimal("0"), ge=0)

    def to_input(self) -> LeaveTypeInput:
        return LeaveTypeInput(**self.model_dump())


class LeaveTypeUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    color: str | None = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    default_days_per_year: Decimal | None = Field(default=None, ge=0)
    is_paid: bool | None = None
    requires_approval: bool | None = None
    allow_negative_balance: bool | None = None
    allow_half_day: bool | None = None
    advance_notice_days: int | None = Field(default=None, ge=0)
    carry_forward_allowed: bool | None = None
    max_carry_forward_days: Decimal | None = Field(default=None, ge=0)
    is_active: bool | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class LeaveTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class LeaveBalanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    leave_type_id: str
    year: int
    total_days: Decimal
    used_days: Decimal
    pending_days: Decimal
    carry_forward_days: Decimal
    adjustment_days: Decimal
    available_days: Decimal


class BalanceAdjustRequest(BaseModel):
    leave_type_id: str
    year: int = Field(..., ge=2000, le=2100)
    days: Decimal = Field(..., description="Positive adds days, negative removes them")
    reason: str = Field(..., min_length=1, max_length=500)


class LeaveRequestCreate(BaseModel):
    employee_id: str
    leave_type_id: str
    from_date: date
    to_date: date
    is_half_day: bool = False
    half_day_period: Literal["first_half", "second_half"] | None = None
    reason: str | None = Field(default=None, max_length=1000)

    def to_input(self) -> LeaveRequestInput:
        return LeaveRequestInput(**self.model_dump())


class LeaveApproveRequest(BaseModel):
    approver_id: str
    comments: str | None = Field(default=None, max_length=1000)


class LeaveRejectRequest(BaseModel):
    approver_id: str
    reason: str = Field(..., min_length=1, max_length=1000)


class LeaveCancelRequest(BaseModel):
    cancelled_by: str
    reason: str | None = Field(default=None, max_length=1000)


class LeaveRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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
    approver_id: str | None
    approved_at: datetime | None
    approver_comments: str | None
    rejection_reason: str | None
    cancelled_at: datetime | None
    cancellation_reason: str | None
    created_at: datetime | None
