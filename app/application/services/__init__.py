"""Application services: working-day calendar, attendance rules, event emission."""

from app.application.services.attendance_rules import AttendanceRules, WorkTime
from app.application.services.event_emitter import EventEmitter
from app.application.services.work_calendar import (
    business_days_between,
    count_business_days,
    month_bounds,
)

__all__ = [
    "AttendanceRules",
    "EventEmitter",
    "WorkTime",
    "business_days_between",
    "count_business_days",
    "month_bounds",
]
