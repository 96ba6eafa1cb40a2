"""Leave type, balance and request repositories (tenant database). Return DTOs."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.common import Page
from app.application.dtos.leave import (
    LeaveBalanceResult,
    LeaveRequestFilters,
    LeaveRequestInput,
    LeaveRequestResult,
    LeaveTypeInput,
    LeaveTypeResult,
)
from app.domain.enums import LeaveStatus
from app.infrastructure.persistence.models.leave import (
    LeaveBalance,
    LeaveBalanceAdjustment,
    LeaveRequest,
    LeaveType,
)
from app.infrastructure.persistence.repositories.base import BaseRepository

_OPEN_STATUSES = (LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value)


def _type_to_result(t: LeaveType) -> LeaveTypeResult:
    return LeaveTypeResult(
        id=t.id,
        code=t.code,
        name=t.name,
        description=t.description,
        color=t.color,
        default_days_per_year=Decimal(t.default_days_per_year),
        is_paid=t.is_paid,
        requires_approval=t.requires_approval,
        allow_negative_balance=t.allow_negative_balance,
        allow_half_day=t.allow_half_day,
        advance_notice_days=t.advance_notice_days,
        carry_forward_allowed=t.carry_forward_allowed,
        max_carry_forward_days=Decimal(t.max_carry_forward_days),
        is_active=t.is_active,
    )


def _balance_to_result(b: LeaveBalance) -> LeaveBalanceResult:
    return LeaveBalanceResult(
        id=b.id,
        employee_id=b.employee_id,
        leave_type_id=b.leave_type_id,
        year=b.year,
        total_days=Decimal(b.total_days),
        used_days=Decimal(b.used_days),
        pending_days=Decimal(b.pending_days),
        carry_forward_days=Decimal(b.carry_forward_days),
        adjustment_days=Decimal(b.adjustment_days),
    )


def _request_to_result(r: LeaveRequest) -> LeaveRequestResult:
    return LeaveRequestResult(
        id=r.id,
        employee_id=r.employee_id,
        leave_type_id=r.leave_type_id,
        from_date=r.from_date,
        to_date=r.to_date,
        days=Decimal(r.days),
        is_half_day=r.is_half_day,
        half_day_period=r.half_day_period,
        reason=r.reason,
        status=r.status,
        approver_id=r.approver_id,
        approved_at=r.approved_at,
        approver_comments=r.approver_comments,
        rejection_reason=r.rejection_reason,
        cancelled_at=r.cancelled_at,
        cancellation_reason=r.cancellation_reason,
        created_at=r.created_at,
    )


class LeaveTypeRepository(BaseRepository[LeaveType]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, LeaveType)

    async def get_by_id(self, leave_type_id: str) -> LeaveTypeResult | None:
        leave_type = await self._get(leave_type_id)
        return _type_to_result(leave_type) if leave_type else None

    async def get_by_code(self, code: str) -> LeaveTypeResult | None:
        result = await self.db.execute(select(LeaveType).where(LeaveType.code == code))
        leave_type = result.scalar_one_or_none()
        return _type_to_result(leave_type) if leave_type else None

    async def create_type(self, data: LeaveTypeInput) -> LeaveTypeResult:
        return _type_to_result(await self._add(LeaveType(**asdict(data))))

    async def list_types(self, include_inactive: bool = False) -> list[LeaveTypeResult]:
        stmt = select(LeaveType).order_by(LeaveType.name)
        if not include_inactive:
            stmt = stmt.where(LeaveType.is_active.is_(True))
        result = await self.db.execute(stmt)
        return [_type_to_result(t) for t in result.scalars().all()]

    async def update_type(
        self, leave_type_id: str, changes: dict[str, Any]
    ) -> LeaveTypeResult | None:
        leave_type = await self._get(leave_type_id)
        if leave_type is None:
            return None
        return _type_to_result(await self._apply_changes(leave_type, changes))


class LeaveBalanceRepository(BaseRepository[LeaveBalance]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, LeaveBalance)

    async def get_balance(
        self, employee_id: str, leave_type_id: str, year: int
    ) -> LeaveBalanceResult | None:
        result = await self.db.execute(
            select(LeaveBalance).where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.leave_type_id == leave_type_id,
                LeaveBalance.year == year,
            )
        )
        balance = result.scalar_one_or_none()
        return _balance_to_result(balance) if balance else None

    async def list_balances(self, employee_id: str, year: int) -> list[LeaveBalanceResult]:
        result = await self.db.execute(
            select(LeaveBalance)
            .join(LeaveType, LeaveType.id == LeaveBalance.leave_type_id)
            .where(LeaveBalance.employee_id == employee_id, LeaveBalance.year == year)
            .order_by(LeaveType.name)
        )
        return [_balance_to_result(b) for b in result.scalars().all()]

    async def create_balance(
        self, employee_id: str, leave_type_id: str, year: int, total_days: Decimal
    ) -> LeaveBalanceResult:
        balance = LeaveBalance(
            employee_id=employee_id,
            leave_type_id=leave_type_id,
            year=year,
            total_days=total_days,
            used_days=Decimal("0"),
            pending_days=Decimal("0"),
            carry_forward_days=Decimal("0"),
            adjustment_days=Decimal("0"),
        )
        return _balance_to_result(await self._add(balance))

    async def change_balance(
        self,
        balance_id: str,
        *,
        pending: Decimal = Decimal("0"),
        used: Decimal = Decimal("0"),
        adjustment: Decimal = Decimal("0"),
    ) -> LeaveBalanceResult:
        balance = await self._require(balance_id)
        balance.pending_days = Decimal(balance.pending_days) + pending
        balance.used_days = Decimal(balance.used_days) + used
        balance.adjustment_days = Decimal(balance.adjustment_days) + adjustment
        await self.db.flush()
        return _balance_to_result(balance)

    async def add_adjustment(
        self, balance_id: str, days: Decimal, reason: str, adjusted_by: str
    ) -> None:
        self.db.add(
            LeaveBalanceAdjustment(
                balance_id=balance_id, days=days, reason=reason, adjusted_by=adjusted_by
            )
        )
        await self.db.flush()


def _apply_request_filters(stmt: Select, filters: LeaveRequestFilters) -> Select:
    if filters.employee_id:
        stmt = stmt.where(LeaveRequest.employee_id == filters.employee_id)
    if filters.leave_type_id:
        stmt = stmt.where(LeaveRequest.leave_type_id == filters.leave_type_id)
    if filters.status:
        stmt = stmt.where(LeaveRequest.status == filters.status)
    if filters.date_from:
        stmt = stmt.where(LeaveRequest.to_date >= filters.date_from)
    if filters.date_to:
        stmt = stmt.where(LeaveRequest.from_date <= filters.date_to)
    return stmt


class LeaveRequestRepository(BaseRepository[LeaveRequest]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, LeaveRequest)

    async def get_by_id(self, request_id: str) -> LeaveRequestResult | None:
        request = await self._get(request_id)
        return _request_to_result(request) if request else None

    async def create_request(
        self,
        data: LeaveRequestInput,
        days: Decimal,
        status: str,
        approver_id: str | None = None,
        performed_by: str | None = None,
    ) -> LeaveRequestResult:
        request = LeaveRequest(
            employee_id=data.employee_id,
            leave_type_id=data.leave_type_id,
            from_date=data.from_date,
            to_date=data.to_date,
            days=days,
            is_half_day=data.is_half_day,
            half_day_period=data.half_day_period,
            reason=data.reason,
            status=status,
            approver_id=approver_id,
            created_by=performed_by,
            updated_by=performed_by,
        )
        return _request_to_result(await self._add(request))

    async def update_request(
        self, request_id: str, changes: dict[str, Any]
    ) -> LeaveRequestResult:
        request = await self._require(request_id)
        return _request_to_result(await self._apply_changes(request, changes))

    async def find_overlapping(
        self, employee_id: str, from_date: date, to_date: date
    ) -> LeaveRequestResult | None:
        result = await self.db.execute(
            select(LeaveRequest)
            .where(
                LeaveRequest.employee_id == employee_id,
                LeaveRequest.status.in_(_OPEN_STATUSES),
                LeaveRequest.from_date <= to_date,
                LeaveRequest.to_date >= from_date,
            )
            .limit(1)
        )
        request = result.scalar_one_or_none()
        return _request_to_result(request) if request else None

    async def list_requests(
        self, filters: LeaveRequestFilters, page: int = 1, page_size: int = 20
    ) -> Page[LeaveRequestResult]:
        total = (
            await self.db.execute(
                _apply_request_filters(
                    select(func.count()).select_from(LeaveRequest), filters
                )
            )
        ).scalar_one()
        result = await self.db.execute(
            _apply_request_filters(select(LeaveRequest), filters)
            .order_by(LeaveRequest.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return Page(
            items=[_request_to_result(r) for r in result.scalars().all()],
            total=total,
            page=page,
            page_size=page_size,
        )

    async def list_pending_for_employees(
        self, employee_ids: list[str]
    ) -> list[LeaveRequestResult]:
        if not employee_ids:
            return []
        result = await self.db.execute(
            select(LeaveRequest)
            .where(
                LeaveRequest.employee_id.in_(employee_ids),
                LeaveRequest.status == LeaveStatus.PENDING.value,
            )
            .order_by(LeaveRequest.created_at)
        )
        return [_request_to_result(r) for r in result.scalars().all()]

    async def approved_in_range(
        self, employee_id: str, start: date, end: date
    ) -> list[LeaveRequestResult]:
        result = await self.db.execute(
            select(LeaveRequest)
            .where(
                LeaveRequest.employee_id == employee_id,
                LeaveRequest.status == LeaveStatus.APPROVED.value,
                or_(
                    LeaveRequest.from_date.between(start, end),
                    LeaveRequest.to_date.between(start, end),
                    (LeaveRequest.from_date < start) & (LeaveRequest.to_date > end),
                ),
            )
            .order_by(LeaveRequest.from_date)
        )
        return [_request_to_result(r) for r in result.scalars().all()]
