"""DTOs for attendance use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any


@dataclass(frozen=True)
class AttendanceResult:
    """One attendance day (result of check-in/out, get, list)."""

    id: str
    employee_id: str
    date: date
    check_in: datetime | None
    check_out: datetime | None
    status: str
    work_minutes: int
    break_minutes: int
    overtime_minutes: int
    is_late: bool
    is_early_leave: bool
    work_mode: str | None = None
    notes: str | None = None
    check_in_location: dict[str, Any] | None = None
    check_out_location: dict[str, Any] | None = None
    leave_request_id: str | None = None

    @property
    def work_hours(self) -> float:
        return round(self.work_minutes / 60, 2)

    @property
    def overtime_hours(self) -> float:
        return round(self.overtime_minutes / 60, 2)


@dataclass(frozen=True)
class BreakResult:
    id: str
    attendance_id: str
    break_type: str
    start_time: datetime
    end_time: datetime | None
    duration_minutes: int | None


@dataclass(frozen=True)
class AttendanceFilters:
    employee_id: str | None = None
    department_id: str | None = None
    status: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    page: int = 1
    page_size: int = 20


@dataclass(frozen=True)
class MonthlySummary:
    employee_id: str
    year: int
    month: int
    working_days: int
    present_days: int
    half_days: int
    leave_days: float
    absent_days: float
    holidays: int
    late_days: int
    early_leave_days: int
    total_work_hours: float
    total_overtime_hours: float
    average_work_hours: float
    average_check_in: str | None
    average_check_out: str | None


@dataclass(frozen=True)
class DepartmentDailySummary:
    department_id: str
    date: date
    total_employees: int
    present: int
    late: int
    on_leave: int
    absent: int
    not_checked_out: int
