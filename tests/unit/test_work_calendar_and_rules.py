"""Working-day calendar helpers and attendance rules."""

from datetime import UTC, date, datetime

import pytest

from app.application.services.attendance_rules import AttendanceRules
from app.application.services.work_calendar import (
    business_days_between,
    clip_range,
    count_business_days,
    format_minutes_of_day,
    month_bounds,
)
from app.domain.enums import AttendanceStatus


class TestWorkCalendar:
    def test_weekends_and_holidays_are_skipped(self) -> None:
        # Mon 2030-03-04 .. Sun 2030-03-10, Wednesday is a holiday.
        assert count_business_days(date(2030, 3, 4), date(2030, 3, 10)) == 5
        assert count_business_days(date(2030, 3, 4), date(2030, 3, 10), [date(2030, 3, 6)]) == 4

    def test_inverted_range_is_empty(self) -> None:
        assert count_business_days(date(2030, 3, 10), date(2030, 3, 4)) == 0

    def test_notice_from_friday_to_monday(self) -> None:
        assert business_days_between(date(2030, 3, 8), date(2030, 3, 11)) == 1
        assert business_days_between(date(2030, 3, 8), date(2030, 3, 8)) == 0

    def test_month_bounds_leap_february(self) -> None:
        assert month_bounds(2028, 2) == (date(2028, 2, 1), date(2028, 2, 29))

    def test_clip_range(self) -> None:
        march = month_bounds(2030, 3)
        assert clip_range(date(2030, 2, 25), date(2030, 3, 2), *march) == (
            date(2030, 3, 1),
            date(2030, 3, 2),
        )
        assert clip_range(date(2030, 4, 1), date(2030, 4, 2), *march) is None

    @pytest.mark.parametrize(
        ("minutes", "expected"), [(0, "00:00"), (550.4, "09:10"), (1439.6, "00:00")]
    )
    def test_format_minutes_of_day(self, minutes: float, expected: str) -> None:
        assert format_minutes_of_day(minutes) == expected


class TestAttendanceRules:
    def test_grace_period(self) -> None:
        rules = AttendanceRules()
        assert rules.is_late(datetime(2030, 3, 4, 9, 15, tzinfo=UTC)) is False
        assert rules.is_late(datetime(2030, 3, 4, 9, 16, tzinfo=UTC)) is True
        assert rules.is_early_leave(datetime(2030, 3, 4, 17, 45, tzinfo=UTC)) is False
        assert rules.is_early_leave(datetime(2030, 3, 4, 17, 44, tzinfo=UTC)) is True

    def test_office_time_zone(self) -> None:
        rules = AttendanceRules(timezone="Asia/Kolkata")
        # 09:20 and 09:10 in Kolkata (UTC+05:30).
        assert rules.is_late(datetime(2030, 3, 4, 3, 50, tzinfo=UTC)) is True
        assert rules.is_late(datetime(2030, 3, 4, 3, 40, tzinfo=UTC)) is False
        assert rules.work_day(datetime(2030, 3, 4, 20, 0, tzinfo=UTC)) == date(2030, 3, 5)
        assert rules.minutes_of_day(datetime(2030, 3, 4, 3, 40, tzinfo=UTC)) == 550

    def test_naive_datetimes_are_utc(self) -> None:
        rules = AttendanceRules()
        assert rules.is_late(datetime(2030, 3, 4, 9, 30)) is True

    def test_overtime_threshold_and_cap(self) -> None:
        rules = AttendanceRules()
        assert rules.overtime_minutes(480 + 29) == 0
        assert rules.overtime_minutes(480 + 30) == 30
        assert rules.overtime_minutes(480 + 300) == 240

    def test_work_time(self) -> None:
        rules = AttendanceRules()
        result = rules.work_time(
            datetime(2030, 3, 4, 9, tzinfo=UTC), datetime(2030, 3, 4, 18, tzinfo=UTC), 60
        )
        assert result.work_minutes == 480
        assert result.overtime_minutes == 0
        assert result.status == AttendanceStatus.PRESENT

    def test_short_day_is_half_day(self) -> None:
        rules = AttendanceRules()
        result = rules.work_time(
            datetime(2030, 3, 4, 9, tzinfo=UTC), datetime(2030, 3, 4, 12, 59, tzinfo=UTC), 0
        )
        assert result.status == AttendanceStatus.HALF_DAY
