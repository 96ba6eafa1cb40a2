"""Attendance rules: lateness, early leave, work time and overtime.

AttendanceRules holds the configurable working-day policy; the methods are
pure so check-in/check-out decisions are testable without a database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo

from app.domain.enums import AttendanceStatus
from app.shared.utils.datetime import ensure_utc


def _parse_hhmm(value: str) -> time:
    hours, minutes = value.split(":", 1)
    return time(int(hours), int(minutes))


@dataclass(frozen=True)
class WorkTime:
    """Outcome of a check-out."""

    work_minutes: int
    break_minutes: int
    overtime_minutes: int
    status: AttendanceStatus


@dataclass(frozen=True)
class AttendanceRules:
    """Working-day policy.

    Attributes:
        standard_hours: Expected work hours per day.
        work_start: Day start, HH:MM in the office time zone.
        work_end: Day end, HH:MM in the office time zone.
        late_grace_minutes: Minutes after work_start before a check-in is late.
        early_leave_grace_minutes: Minutes before work_end a check-out may happen.
        overtime_min_minutes: Overtime below this is not counted.
        overtime_max_hours: Daily overtime cap.
        timezone: IANA zone name used for day boundaries.
    """

    standard_hours: float = 8.0
    work_start: str = "09:00"
    work_end: str = "18:00"
    late_grace_minutes: int = 15
    early_leave_grace_minutes: int = 15
    overtime_min_minutes: int = 30
    overtime_max_hours: float = 4.0
    timezone: str = "UTC"

    @classmethod
    def from_settings(cls, settings) -> AttendanceRules:
        return cls(
            standard_hours=settings.attendance_standard_hours,
            work_start=settings.attendance_work_start,
            work_end=settings.attendance_work_end,
            late_grace_minutes=settings.attendance_late_grace_minutes,
            early_leave_grace_minutes=settings.attendance_early_leave_grace_minutes,
            overtime_min_minutes=settings.overtime_min_minutes,
            overtime_max_hours=settings.overtime_max_hours_per_day,
            timezone=settings.attendance_timezone,
        )

    @property
    def tz(self) -> tzinfo:
        if self.timezone.upper() == "UTC":
            return UTC
        return ZoneInfo(self.timezone)

    @property
    def standard_minutes(self) -> int:
        return int(self.standard_hours * 60)

    def local(self, moment: datetime) -> datetime:
        return ensure_utc(moment).astimezone(self.tz)

    def work_day(self, moment: datetime) -> date:
        """Calendar date of moment in the office time zone."""
        return self.local(moment).date()

    def is_late(self, check_in: datetime) -> bool:
        local = self.local(check_in)
        start = datetime.combine(local.date(), _parse_hhmm(self.work_start), tzinfo=self.tz)
        return local > start + timedelta(minutes=self.late_grace_minutes)

    def is_early_leave(self, check_out: datetime) -> bool:
        local = self.local(check_out)
        end = datetime.combine(local.date(), _parse_hhmm(self.work_end), tzinfo=self.tz)
        return local < end - timedelta(minutes=self.early_leave_grace_minutes)

    def overtime_minutes(self, work_minutes: int) -> int:
        extra = work_minutes - self.standard_minutes
        if extra < self.overtime_min_minutes:
            return 0
        return min(extra, int(self.overtime_max_hours * 60))

    def work_time(
        self, check_in: datetime, check_out: datetime, break_minutes: int
    ) -> WorkTime:
        """Work, overtime and day status for a completed day."""
        elapsed = int((ensure_utc(check_out) - ensure_utc(check_in)).total_seconds() // 60)
        work = max(0, elapsed - break_minutes)
        status = (
            AttendanceStatus.HALF_DAY
            if work < self.standard_minutes / 2
            else AttendanceStatus.PRESENT
        )
        return WorkTime(
            work_minutes=work,
            break_minutes=break_minutes,
            overtime_minutes=self.overtime_minutes(work),
            status=status,
        )

    def minutes_of_day(self, moment: datetime) -> int:
        local = self.local(moment)
        return local.hour * 60 + local.minute
