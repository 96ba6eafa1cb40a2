"""Attendance: check-in/out, breaks, queries and summaries."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from app.application.dtos.attendance import (
    AttendanceFilters,
    AttendanceResult,
    BreakResult,
    DepartmentDailySummary,
    MonthlySummary,
)
from app.application.dtos.common import Page, clamp_page
from app.application.interfaces.repositories import (
    IAttendanceRepository,
    IEmployeeRepository,
    IHolidayRepository,
    ILeaveRequestRepository,
    IOptionalHolidayRepository,
)
from app.application.interfaces.services import IEventPublisher
from app.application.services.attendance_rules import AttendanceRules
from app.application.services.event_emitter import EventEmitter
from app.application.services.work_calendar import (
    business_days,
    clip_range,
    format_minutes_of_day,
    is_weekend,
    month_bounds,
)
from app.application.use_cases.holidays import opted_holiday_ids
from app.domain.enums import AttendanceStatus, EmployeeStatus
from app.domain.events import Queue
from app.domain.exceptions import (
    BusinessRuleException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

BREAK_TYPES = frozenset({"lunch", "short", "other"})


def _average(values: list[int]) -> float | None:
    return sum(values) / len(values) if values else None


class AttendanceService:
    """Daily attendance for employees of the current tenant."""

    def __init__(
        self,
        attendance_repo: IAttendanceRepository,
        employee_repo: IEmployeeRepository,
        holiday_repo: IHolidayRepository,
        leave_repo: ILeaveRequestRepository,
        publisher: IEventPublisher | None = None,
        *,
        rules: AttendanceRules | None = None,
        optional_holiday_repo: IOptionalHolidayRepository | None = None,
    ) -> None:
        self.attendance_repo = attendance_repo
        self.employee_repo = employee_repo
        self.holiday_repo = holiday_repo
        self.leave_repo = leave_repo
        self.events = EventEmitter(publisher)
        self.rules = rules or AttendanceRules()
        self.optional_holiday_repo = optional_holiday_repo

    async def _require_active_employee(self, employee_id: str):
        employee = await self.employee_repo.get_by_id(employee_id)
        if not employee or employee.status != EmployeeStatus.ACTIVE.value:
            raise ValidationException("Employee not found or inactive", field="employee_id")
        return employee

    async def check_in(
        self,
        employee_id: str,
        *,
        location: dict[str, Any] | None = None,
        work_mode: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> AttendanceResult:
        """Record today's check-in; a day can only be checked into once."""
        await self._require_active_employee(employee_id)
        moment = now or utc_now()
        day = self.rules.work_day(moment)

        existing = await self.attendance_repo.get_for_day(employee_id, day)
        if existing and existing.check_out:
            raise ConflictException(
                "Already completed attendance for today", attendance_id=existing.id
            )
        if existing and existing.check_in:
            raise ConflictException(
                "Already checked in. Please check out first.", attendance_id=existing.id
            )

        is_late = self.rules.is_late(moment)
        fields = {
            "check_in": moment,
            "status": AttendanceStatus.PRESENT.value,
            "is_late": is_late,
            "check_in_location": location or {},
            "work_mode": work_mode,
            "notes": notes,
        }
        if existing:
            # Leave or holiday row for the day; the employee came in anyway, so the
            # row stops belonging to the leave request and survives its cancellation.
            attendance = await self.attendance_repo.update_attendance(
                existing.id, {**fields, "leave_request_id": None}
            )
        else:
            attendance = await self.attendance_repo.create_attendance(
                employee_id=employee_id, date=day, **fields
            )

        await self.events.to_queue(
            Queue.ATTENDANCE_CHECK_IN,
            "attendance.check_in",
            {
                "attendanceId": attendance.id,
                "employeeId": employee_id,
                "checkInTime": moment.isoformat(),
                "location": location,
                "workMode": work_mode,
                "isLate": is_late,
            },
        )
        logger.info(
            "Employee checked in: %s (attendance=%s, late=%s)",
            employee_id,
            attendance.id,
            is_late,
        )
        return attendance

    async def check_out(
        self,
        employee_id: str,
        *,
        location: dict[str, Any] | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> AttendanceResult:
        """Close today's attendance: work time, overtime and final status."""
        moment = now or utc_now()
        day = self.rules.work_day(moment)
        attendance = await self.attendance_repo.get_for_day(employee_id, day)
        if not attendance or not attendance.check_in:
            raise BusinessRuleException(
                "Cannot check out without checking in first", employee_id=employee_id
            )
        if attendance.check_out:
            raise ConflictException("Already checked out", attendance_id=attendance.id)

        break_minutes = await self.attendance_repo.completed_break_minutes(attendance.id)
        work = self.rules.work_time(attendance.check_in, moment, break_minutes)
        is_early_leave = self.rules.is_early_leave(moment)
        merged_notes = attendance.notes
        if notes:
            merged_notes = f"{attendance.notes or ''}\n{notes}".strip()

        updated = await self.attendance_repo.update_attendance(
            attendance.id,
            {
                "check_out": moment,
                "check_out_location": location or {},
                "work_minutes": work.work_minutes,
                "break_minutes": work.break_minutes,
                "overtime_minutes": work.overtime_minutes,
                "is_early_leave": is_early_leave,
                "status": work.status.value,
                "notes": merged_notes,
            },
        )
        await self.events.to_queue(
            Queue.ATTENDANCE_CHECK_OUT,
            "attendance.check_out",
            {
                "attendanceId": attendance.id,
                "employeeId": employee_id,
                "checkOutTime": moment.isoformat(),
                "workHours": round(work.work_minutes / 60, 2),
                "overtimeHours": round(work.overtime_minutes / 60, 2),
            },
        )
        logger.info(
            "Employee checked out: %s (work=%d min, overtime=%d min)",
            employee_id,
            work.work_minutes,
            work.overtime_minutes,
        )
        return updated

    async def start_break(
        self,
        attendance_id: str,
        break_type: str = "short",
        now: datetime | None = None,
    ) -> BreakResult:
        if break_type not in BREAK_TYPES:
            raise ValidationException(f"Invalid break type: {break_type}", field="break_type")
        attendance = await self.attendance_repo.get_by_id(attendance_id)
        if not attendance or not attendance.check_in or attendance.check_out:
            raise BusinessRuleException(
                "Invalid attendance record for break", attendance_id=attendance_id
            )
        if await self.attendance_repo.get_active_break(attendance_id):
            raise ConflictException(
                "Already on a break. Please end the current break first.",
                attendance_id=attendance_id,
            )
        record = await self.attendance_repo.start_break(
            attendance_id, break_type=break_type, start_time=now or utc_now()
        )
        logger.debug("Break started: %s (%s)", record.id, break_type)
        return record

    async def end_break(self, break_id: str, now: datetime | None = None) -> BreakResult:
        record = await self.attendance_repo.get_break(break_id)
        if not record:
            raise ResourceNotFoundException("attendance_break", break_id)
        if record.end_time:
            raise ConflictException("Break already ended", break_id=break_id)
        end = now or utc_now()
        duration = max(0, int((end - record.start_time).total_seconds() // 60))
        ended = await self.attendance_repo.end_break(
            break_id, end_time=end, duration_minutes=duration
        )
        logger.debug("Break ended: %s (%d min)", break_id, duration)
        return ended

    async def get_today(
        self, employee_id: str, now: datetime | None = None
    ) -> AttendanceResult | None:
        day = self.rules.work_day(now or utc_now())
        return await self.attendance_repo.get_for_day(employee_id, day)

    async def get_attendance(self, attendance_id: str) -> AttendanceResult:
        attendance = await self.attendance_repo.get_by_id(attendance_id)
        if not attendance:
            raise ResourceNotFoundException("attendance", attendance_id)
        return attendance

    async def list_breaks(self, attendance_id: str) -> list[BreakResult]:
        await self.get_attendance(attendance_id)
        return await self.attendance_repo.list_breaks(attendance_id)

    async def list_attendance(self, filters: AttendanceFilters) -> Page[AttendanceResult]:
        if filters.date_from and filters.date_to and filters.date_from > filters.date_to:
            raise ValidationException("date_from cannot be after date_to", field="date_from")
        page, size = clamp_page(filters.page, filters.page_size)
        return await self.attendance_repo.list_attendance(filters, page=page, page_size=size)

    async def get_monthly_summary(
        self, employee_id: str, year: int, month: int
    ) -> MonthlySummary:
        """Month totals for one employee.

        Working days exclude weekends and holidays that apply to the
        employee's department; optional holidays count only when opted into.
        Approved leave is clipped to the month and counted on working days only.
        """
        if not 1 <= month <= 12:
            raise ValidationException("Month must be between 1 and 12", field="month")
        employee = await self.employee_repo.get_by_id(employee_id)
        if not employee:
            raise ResourceNotFoundException("employee", employee_id)
        start, end = month_bounds(year, month)

        opted = await opted_holiday_ids(self.optional_holiday_repo, employee_id, start, end)
        holidays = [
            h
            for h in await self.holiday_repo.list_in_range(start, end)
            if h.is_day_off(employee.department_id, opted)
        ]
        holiday_dates = {h.date for h in holidays}
        working = business_days(start, end, holiday_dates)
        working_set = set(working)

        records = await self.attendance_repo.list_for_employee_range(employee_id, start, end)
        present = sum(1 for r in records if r.status == AttendanceStatus.PRESENT.value)
        half = sum(1 for r in records if r.status == AttendanceStatus.HALF_DAY.value)
        late = sum(1 for r in records if r.is_late)
        early = sum(1 for r in records if r.is_early_leave)
        work_minutes = sum(r.work_minutes for r in records)
        overtime_minutes = sum(r.overtime_minutes for r in records)
        check_ins = [self.rules.minutes_of_day(r.check_in) for r in records if r.check_in]
        check_outs = [self.rules.minutes_of_day(r.check_out) for r in records if r.check_out]

        leave_days = 0.0
        for leave in await self.leave_repo.approved_in_range(employee_id, start, end):
            clipped = clip_range(leave.from_date, leave.to_date, start, end)
            if clipped is None:
                continue
            if leave.is_half_day:
                leave_days += 0.5 if clipped[0] in working_set else 0.0
            else:
                leave_days += len(business_days(clipped[0], clipped[1], holiday_dates))

        attended = present + half
        avg_in = _average(check_ins)
        avg_out = _average(check_outs)
        return MonthlySummary(
            employee_id=employee_id,
            year=year,
            month=month,
            working_days=len(working),
            present_days=present,
            half_days=half,
            leave_days=leave_days,
            absent_days=max(0.0, len(working) - present - half - leave_days),
            holidays=sum(1 for d in holiday_dates if not is_weekend(d)),
            late_days=late,
            early_leave_days=early,
            total_work_hours=round(work_minutes / 60, 2),
            total_overtime_hours=round(overtime_minutes / 60, 2),
            average_work_hours=round(work_minutes / 60 / attended, 2) if attended else 0.0,
            average_check_in=format_minutes_of_day(avg_in) if avg_in is not None else None,
            average_check_out=format_minutes_of_day(avg_out) if avg_out is not None else None,
        )

    async def get_department_daily_summary(
        self, department_id: str, day: date
    ) -> DepartmentDailySummary:
        total = await self.employee_repo.count_active_in_department(department_id)
        records = await self.attendance_repo.list_for_department_day(department_id, day)
        present = sum(
            1
            for r in records
            if r.status in (AttendanceStatus.PRESENT.value, AttendanceStatus.HALF_DAY.value)
        )
        on_leave = sum(1 for r in records if r.status == AttendanceStatus.ON_LEAVE.value)
        return DepartmentDailySummary(
            department_id=department_id,
            date=day,
            total_employees=total,
            present=present,
            late=sum(1 for r in records if r.is_late),
            on_leave=on_leave,
            absent=max(0, total - present - on_leave),
            not_checked_out=sum(1 for r in records if r.check_in and not r.check_out),
        )
