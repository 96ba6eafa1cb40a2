"""Attendance use cases."""

from app.application.use_cases.attendance.attendance_operations import AttendanceService

__all__ = ["AttendanceService"]
