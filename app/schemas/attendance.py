"""Attendance API schemas."""

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.application.use_cases.attendance.attendance_operations import BREAK_TYPES


class CheckInRequest(BaseModel):
    employee_id: str
    location: dict[str, Any] | None = Field(
        default=None, description="Client-reported position, e.g. {lat, lng, address}"
    )
    work_mode: str | None = Field(default=None, description="office, remote or hybrid")
    notes: str | None = Field(default=None, max_length=1000)


class CheckOutRequest(BaseModel):
    employee_id: str
    location: dict[str, Any] | None = None
    notes: str | None = Field(default=None, max_length=1000)


class BreakStartRequest(BaseModel):
    break_type: str = Field(default="short", description=f"One of: {', '.join(sorted(BREAK_TYPES))}")


class AttendanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    date: dt.date
    check_in: dt.datetime | None
    check_out: dt.datetime | None
    status: str
    work_minutes: int
    break_minutes: int
    overtime_minutes: int
    work_hours: float
    overtime_hours: float
    is_late: bool
    is_early_leave: bool
    work_mode: str | None
    notes: str | None
    check_in_location: dict[str, Any] | None
    check_out_location: dict[str, Any] | None
    leave_request_id: str | None


class BreakResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    attendance_id: str
    break_type: str
    start_time: dt.datetime
    end_time: dt.datetime | None
    duration_minutes: int | None


class MonthlySummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class DepartmentDailySummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    department_id: str
    date: dt.date
    total_employees: int
    present: int
    late: int
    on_leave: int
    absent: int
    not_checked_out: int
