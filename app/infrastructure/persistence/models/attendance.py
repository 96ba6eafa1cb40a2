"""Attendance and AttendanceBreak ORM models (tenant database)."""

import datetime as dt
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import AttendanceStatus
from app.infrastructure.persistence.database import TenantBase
from app.infrastructure.persistence.models.mixins import AuditedTenantModel, TenantModel


class Attendance(AuditedTenantModel, TenantBase):
    """One row per employee per day. Table: attendance."""

    __tablename__ = "attendance"

    employee_id: Mapped[str] = mapped_column(
        String, ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    check_in: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    check_out: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=AttendanceStatus.PRESENT.value, index=True
    )
    work_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overtime_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_late: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_early_leave: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    check_in_location: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    check_out_location: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    work_mode: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    leave_request_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)

    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )


class AttendanceBreak(TenantModel, TenantBase):
    """Break within an attendance day. end_time is null while the break is active."""

    __tablename__ = "attendance_break"

    attendance_id: Mapped[str] = mapped_column(
        String, ForeignKey("attendance.id", ondelete="CASCADE"), nullable=False, index=True
    )
    break_type: Mapped[str] = mapped_column(String, nullable=False, default="general")
    start_time: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
