"""Leave requests: request, approve, reject, cancel, list.

Balance accounting: a pending request holds its days in pending_days; on
approval they move to used_days. Rejecting releases pending days;
cancelling releases pending or used days depending on the prior status.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from app.application.dtos.common import Page, clamp_page
from app.application.dtos.leave import (
    LeaveBalanceResult,
    LeaveRequestFilters,
    LeaveRequestInput,
    LeaveRequestResult,
    LeaveTypeResult,
)
from app.application.interfaces.repositories import (
    IAttendanceRepository,
    IEmployeeRepository,
    IHolidayRepository,
    ILeaveBalanceRepository,
    ILeaveRequestRepository,
    ILeaveTypeRepository,
    IOptionalHolidayRepository,
)
from app.application.interfaces.services import IEventPublisher
from app.application.services.event_emitter import EventEmitter
from app.application.services.work_calendar import business_days, business_days_between
from app.application.use_cases.holidays import opted_holiday_ids
from app.domain.enums import EmployeeStatus, LeaveStatus
from app.domain.events import Queue
from app.domain.exceptions import (
    BusinessRuleException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

HALF_DAY = Decimal("0.5")
HALF_DAY_PERIODS = frozenset({"first_half", "second_half"})


class LeaveService:
    """Leave request lifecycle for the current tenant."""

    def __init__(
        self,
        request_repo: ILeaveRequestRepository,
        type_repo: ILeaveTypeRepository,
        balance_repo: ILeaveBalanceRepository,
        employee_repo: IEmployeeRepository,
        holiday_repo: IHolidayRepository,
        attendance_repo: IAttendanceRepository,
        publisher: IEventPublisher | None = None,
        *,
        optional_holiday_repo: IOptionalHolidayRepository | None = None,
    ) -> None:
        self.request_repo = request_repo
        self.type_repo = type_repo
        self.balance_repo = balance_repo
        self.employee_repo = employee_repo
        self.holiday_repo = holiday_repo
        self.attendance_repo = attendance_repo
        self.optional_holiday_repo = optional_holiday_repo
        self.events = EventEmitter(publisher)

    async def _leave_days_in(
        self, start: date, end: date, employee_id: str, department_id: str | None
    ) -> list[date]:
        opted = await opted_holiday_ids(self.optional_holiday_repo, employee_id, start, end)
        holidays = {
            h.date
            for h in await self.holiday_repo.list_in_range(start, end)
            if h.is_day_off(department_id, opted)
        }
        return business_days(start, end, holidays)

    async def _balance_for(
        self, employee_id: str, leave_type: LeaveTypeResult, year: int
    ) -> LeaveBalanceResult:
        balance = await self.balance_repo.get_balance(employee_id, leave_type.id, year)
        if balance is None:
            balance = await self.balance_repo.create_balance(
                employee_id=employee_id,
                leave_type_id=leave_type.id,
                year=year,
                total_days=leave_type.default_days_per_year,
            )
        return balance

    async def _get_request(self, request_id: str) -> LeaveRequestResult:
        request = await self.request_repo.get_by_id(request_id)
        if not request:
            raise ResourceNotFoundException("leave_request", request_id)
        return request

    async def request_leave(
        self, data: LeaveRequestInput, performed_by: str | None = None
    ) -> LeaveRequestResult:
        """Validate dates, notice, balance and overlap; then create the request."""
        if data.from_date > data.to_date:
            raise ValidationException("From date cannot be after to date", field="from_date")
        if data.is_half_day and data.from_date != data.to_date:
            raise ValidationException(
                "Half day leave must be for a single day", field="is_half_day"
            )
        if data.half_day_period and data.half_day_period not in HALF_DAY_PERIODS:
            raise ValidationException(
                f"Invalid half day period: {data.half_day_period}", field="half_day_period"
            )

        leave_type = await self.type_repo.get_by_id(data.leave_type_id)
        if not leave_type or not leave_type.is_active:
            raise ValidationException("Leave type not found or inactive", field="leave_type_id")
        if data.is_half_day and not leave_type.allow_half_day:
            raise BusinessRuleException(
                f"Leave type {leave_type.code} does not allow half days",
                leave_type=leave_type.code,
            )

        today = utc_now().date()
        notice = business_days_between(today, data.from_date)
        if notice < leave_type.advance_notice_days:
            raise BusinessRuleException(
                f"Leave requests require at least {leave_type.advance_notice_days} "
                "business day(s) advance notice",
                required=leave_type.advance_notice_days,
                given=notice,
            )

        employee = await self.employee_repo.get_by_id(data.employee_id)
        if not employee or employee.status != EmployeeStatus.ACTIVE.value:
            raise ValidationException("Employee not found or inactive", field="employee_id")

        valid_days = await self._leave_days_in(
            data.from_date, data.to_date, employee.id, employee.department_id
        )
        if data.is_half_day:
            days = HALF_DAY if valid_days else Decimal("0")
        else:
            days = Decimal(len(valid_days))
        if days == 0:
            raise ValidationException("No valid leave days in the selected range")

        balance = await self._balance_for(data.employee_id, leave_type, data.from_date.year)
        available = balance.available_days
        if days > available and not leave_type.allow_negative_balance:
            raise BusinessRuleException(
                f"Insufficient leave balance. Available: {available} days, "
                f"Requested: {days} days",
                available=str(available),
                requested=str(days),
            )

        overlapping = await self.request_repo.find_overlapping(
            data.employee_id, data.from_date, data.to_date
        )
        if overlapping:
            raise ConflictException(
                "There is an overlapping leave request for this period",
                leave_request_id=overlapping.id,
            )

        auto_approved = not leave_type.requires_approval
        status = LeaveStatus.APPROVED if auto_approved else LeaveStatus.PENDING
        request = await self.request_repo.create_request(
            data,
            days=days,
            status=status.value,
            approver_id=employee.reporting_to_id,
            performed_by=performed_by or data.employee_id,
        )
        if auto_approved:
            await self.balance_repo.change_balance(balance.id, used=days)
            await self._mark_leave_days(request, employee.department_id, performed_by)
        else:
            await self.balance_repo.change_balance(balance.id, pending=days)

        await self.events.to_queue(
            Queue.LEAVE_REQUESTED,
            "leave.requested",
            {
                "leaveRequestId": request.id,
                "employeeId": data.employee_id,
                "leaveTypeId": leave_type.id,
                "leaveTypeName": leave_type.name,
                "fromDate": data.from_date.isoformat(),
                "toDate": data.to_date.isoformat(),
                "totalDays": float(days),
                "status": status.value,
                "reason": data.reason,
            },
        )
        logger.info(
            "Leave requested: %s (employee=%s, days=%s, status=%s)",
            request.id,
            data.employee_id,
            days,
            status.value,
        )
        return request

    async def _mark_leave_days(
        self,
        request: LeaveRequestResult,
        department_id: str | None,
        performed_by: str | None,
    ) -> None:
        days = await self._leave_days_in(
            request.from_date, request.to_date, request.employee_id, department_id
        )
        for day in days:
            await self.attendance_repo.upsert_leave_day(
                request.employee_id, day, request.id, performed_by=performed_by
            )

    async def approve_leave(
        self,
        request_id: str,
        approver_id: str,
        comments: str | None = None,
    ) -> LeaveRequestResult:
        """Approve a pending request: pending days become used, leave days marked on attendance."""
        request = await self._get_request(request_id)
        if request.status != LeaveStatus.PENDING.value:
            raise BusinessRuleException(
                f"Cannot approve leave request with status: {request.status}",
                status=request.status,
            )
        approved_at = utc_now()
        updated = await self.request_repo.update_request(
            request_id,
            {
                "status": LeaveStatus.APPROVED.value,
                "approver_id": approver_id,
                "approved_at": approved_at,
                "approver_comments": comments,
                "updated_by": approver_id,
            },
        )
        balance = await self.balance_repo.get_balance(
            request.employee_id, request.leave_type_id, request.from_date.year
        )
        if balance:
            await self.balance_repo.change_balance(
                balance.id, pending=-request.days, used=request.days
            )
        employee = await self.employee_repo.get_by_id(request.employee_id)
        await self._mark_leave_days(
            request, employee.department_id if employee else None, approver_id
        )

        await self.events.to_queue(
            Queue.LEAVE_APPROVED,
            "leave.approved",
            {
                "leaveRequestId": request_id,
                "employeeId": request.employee_id,
                "approvedBy": approver_id,
                "approvedAt": approved_at.isoformat(),
                "comments": comments,
            },
        )
        logger.info("Leave approved: %s by %s", request_id, approver_id)
        return updated

    async def reject_leave(
        self, request_id: str, approver_id: str, reason: str
    ) -> LeaveRequestResult:
        request = await self._get_request(request_id)
        if request.status != LeaveStatus.PENDING.value:
            raise BusinessRuleException(
                f"Cannot reject leave request with status: {request.status}",
                status=request.status,
            )
        updated = await self.request_repo.update_request(
            request_id,
            {
                "status": LeaveStatus.REJECTED.value,
                "approver_id": approver_id,
                "rejection_reason": reason,
                "updated_by": approver_id,
            },
        )
        balance = await self.balance_repo.get_balance(
            request.employee_id, request.leave_type_id, request.from_date.year
        )
        if balance:
            await self.balance_repo.change_balance(balance.id, pending=-request.days)

        await self.events.to_queue(
            Queue.LEAVE_REJECTED,
            "leave.rejected",
            {
                "leaveRequestId": request_id,
                "employeeId": request.employee_id,
                "rejectedBy": approver_id,
                "reason": reason,
            },
        )
        logger.info("Leave rejected: %s by %s", request_id, approver_id)
        return updated

    async def cancel_leave(
        self, request_id: str, cancelled_by: str, reason: str | None = None
    ) -> LeaveRequestResult:
        """Cancel a pending or approved request and give the days back."""
        request = await self._get_request(request_id)
        if request.status not in (LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value):
            raise BusinessRuleException(
                f"Cannot cancel leave request with status: {request.status}",
                status=request.status,
            )
        was_pending = request.status == LeaveStatus.PENDING.value
        updated = await self.request_repo.update_request(
            request_id,
            {
                "status": LeaveStatus.CANCELLED.value,
                "cancelled_at": utc_now(),
                "cancellation_reason": reason,
                "updated_by": cancelled_by,
            },
        )
        balance = await self.balance_repo.get_balance(
            request.employee_id, request.leave_type_id, request.from_date.year
        )
        if balance:
            if was_pending:
                await self.balance_repo.change_balance(balance.id, pending=-request.days)
            else:
                await self.balance_repo.change_balance(balance.id, used=-request.days)
        if not was_pending:
            removed = await self.attendance_repo.delete_for_leave(request_id)
            logger.debug("Removed %d leave attendance rows for %s", removed, request_id)

        await self.events.to_queue(
            Queue.LEAVE_CANCELLED,
            "leave.cancelled",
            {
                "leaveRequestId": request_id,
                "employeeId": request.employee_id,
                "cancelledBy": cancelled_by,
                "previousStatus": request.status,
                "reason": reason,
            },
        )
        logger.info("Leave cancelled: %s by %s", request_id, cancelled_by)
        return updated

    async def get_leave_request(self, request_id: str) -> LeaveRequestResult:
        return await self._get_request(request_id)

    async def list_leave_requests(
        self, filters: LeaveRequestFilters
    ) -> Page[LeaveRequestResult]:
        page, size = clamp_page(filters.page, filters.page_size)
        return await self.request_repo.list_requests(filters, page=page, page_size=size)

    async def get_pending_approvals(self, manager_id: str) -> list[LeaveRequestResult]:
        """Pending requests of the manager's direct reports, oldest first."""
        reports = await self.employee_repo.get_direct_reports(manager_id)
        if not reports:
            return []
        return await self.request_repo.list_pending_for_employees([e.id for e in reports])
