"""Attendance and break repository (tenant database). Returns DTOs."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.attendance import AttendanceFilters, AttendanceResult, BreakResult
from app.application.dtos.common import Page
from app.domain.enums import AttendanceStatus
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.models.attendance import Attendance, AttendanceBreak
from app.infrastructure.persistence.models.employee import Employee
from app.infrastructure.persistence.repositories.base import BaseRepository


def _attendance_to_result(a: Attendance) -> AttendanceResult:
    return AttendanceResult(
        id=a.id,
        employee_id=a.employee_id,
        date=a.date,
        check_in=a.check_in,
        check_out=a.check_out,
        status=a.status,
        work_minutes=a.work_minutes or 0,
        break_minutes=a.break_minutes or 0,
        overtime_minutes=a.overtime_minutes or 0,
        is_late=a.is_late,
        is_early_leave=a.is_early_leave,
        work_mode=a.work_mode,
        notes=a.notes,
        check_in_location=a.check_in_location,
        check_out_location=a.check_out_location,
        leave_request_id=a.leave_request_id,
    )


def _break_to_result(b: AttendanceBreak) -> BreakResult:
    return BreakResult(
        id=b.id,
        attendance_id=b.attendance_id,
        break_type=b.break_type,
        start_time=b.start_time,
        end_time=b.end_time,
        duration_minutes=b.duration_minutes,
    )


def _apply_filters(stmt: Select, filters: AttendanceFilters) -> Select:
    if filters.employee_id:
        stmt = stmt.where(Attendance.employee_id == filters.employee_id)
    if filters.department_id:
        stmt = stmt.join(Employee, Employee.id == Attendance.employee_id).where(
            Employee.department_id == filters.department_id
        )
    if filters.status:
        stmt = stmt.where(Attendance.status == filters.status)
    if filters.date_from:
        stmt = stmt.where(Attendance.date >= filters.date_from)
    if filters.date_to:
        stmt = stmt.where(Attendance.date <= filters.date_to)
    return stmt


class AttendanceRepository(BaseRepository[Attendance]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Attendance)

    async def _get_for_day(self, employee_id: str, day: date) -> Attendance | None:
        result = await self.db.execute(
            select(Attendance).where(
                Attendance.employee_id == employee_id, Attendance.date == day
            )
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, attendance_id: str) -> AttendanceResult | None:
        attendance = await self._get(attendance_id)
        return _attendance_to_result(attendance) if attendance else None

    async def get_for_day(self, employee_id: str, day: date) -> AttendanceResult | None:
        attendance = await self._get_for_day(employee_id, day)
        return _attendance_to_result(attendance) if attendance else None

    async def create_attendance(self, **fields: Any) -> AttendanceResult:
        return _attendance_to_result(await self._add(Attendance(**fields)))

    async def update_attendance(
        self, attendance_id: str, changes: dict[str, Any]
    ) -> AttendanceResult:
        attendance = await self._require(attendance_id)
        return _attendance_to_result(await self._apply_changes(attendance, changes))

    async def list_attendance(
        self, filters: AttendanceFilters, page: int = 1, page_size: int = 20
    ) -> Page[AttendanceResult]:
        total = (
            await self.db.execute(
                _apply_filters(select(func.count()).select_from(Attendance), filters)
            )
        ).scalar_one()
        stmt = (
            _apply_filters(select(Attendance), filters)
            .order_by(Attendance.date.desc(), Attendance.check_in.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await self.db.execute(stmt)
        return Page(
            items=[_attendance_to_result(a) for a in result.scalars().all()],
            total=total,
            page=page,
            page_size=page_size,
        )

    async def list_for_employee_range(
        self, employee_id: str, start: date, end: date
    ) -> list[AttendanceResult]:
        result = await self.db.execute(
            select(Attendance)
            .where(
                Attendance.employee_id == employee_id,
                Attendance.date >= start,
                Attendance.date <= end,
            )
            .order_by(Attendance.date)
        )
        return [_attendance_to_result(a) for a in result.scalars().all()]

    async def list_for_department_day(
        self, department_id: str, day: date
    ) -> list[AttendanceResult]:
        result = await self.db.execute(
            select(Attendance)
            .join(Employee, Employee.id == Attendance.employee_id)
            .where(Employee.department_id == department_id, Attendance.date == day)
        )
        return [_attendance_to_result(a) for a in result.scalars().all()]

    async def get_break(self, break_id: str) -> BreakResult | None:
        record = await self.db.get(AttendanceBreak, break_id)
        return _break_to_result(record) if record else None

    async def get_active_break(self, attendance_id: str) -> BreakResult | None:
        result = await self.db.execute(
            select(AttendanceBreak)
            .where(
                AttendanceBreak.attendance_id == attendance_id,
                AttendanceBreak.end_time.is_(None),
            )
            .limit(1)
        )
        record = result.scalar_one_or_none()
        return _break_to_result(record) if record else None

    async def list_breaks(self, attendance_id: str) -> list[BreakResult]:
        result = await self.db.execute(
            select(AttendanceBreak)
            .where(AttendanceBreak.attendance_id == attendance_id)
            .order_by(AttendanceBreak.start_time)
        )
        return [_break_to_result(b) for b in result.scalars().all()]

    async def start_break(
        self, attendance_id: str, break_type: str, start_time: datetime
    ) -> BreakResult:
        record = AttendanceBreak(
            attendance_id=attendance_id, break_type=break_type, start_time=start_time
        )
        self.db.add(record)
        await self.db.flush()
        await self.db.refresh(record)
        return _break_to_result(record)

    async def end_break(
        self, break_id: str, end_time: datetime, duration_minutes: int
    ) -> BreakResult:
        record = await self.db.get(AttendanceBreak, break_id)
        if record is None:
            raise ResourceNotFoundException("attendance_break", break_id)
        record.end_time = end_time
        record.duration_minutes = duration_minutes
        await self.db.flush()
        return _break_to_result(record)

    async def completed_break_minutes(self, attendance_id: str) -> int:
        result = await self.db.execute(
            select(func.coalesce(func.sum(AttendanceBreak.duration_minutes), 0)).where(
                AttendanceBreak.attendance_id == attendance_id,
                AttendanceBreak.end_time.is_not(None),
            )
        )
        return int(result.scalar_one())

    async def upsert_leave_day(
        self,
        employee_id: str,
        day: date,
        leave_request_id: str,
        performed_by: str | None = None,
    ) -> None:
        existing = await self._get_for_day(employee_id, day)
        if existing is not None and existing.check_in is not None:
            # the employee worked that day; recorded attendance is kept
            return
        if existing is None:
            self.db.add(
                Attendance(
                    employee_id=employee_id,
                    date=day,
                    status=AttendanceStatus.ON_LEAVE.value,
                    leave_request_id=leave_request_id,
                    created_by=performed_by,
                    updated_by=performed_by,
                )
            )
        else:
            existing.status = AttendanceStatus.ON_LEAVE.value
            existing.leave_request_id = leave_request_id
            existing.updated_by = performed_by
        await self.db.flush()

    async def delete_for_leave(self, leave_request_id: str) -> int:
        result = await self.db.execute(
            delete(Attendance).where(
                Attendance.leave_request_id == leave_request_id,
                Attendance.check_in.is_(None),
            )
        )
        return result.rowcount or 0
