"""Unit tests for AttendanceService (check-in/out, breaks, summaries)."""

from datetime import UTC, date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.attendance import AttendanceFilters
from app.application.use_cases.attendance import AttendanceService
from app.domain.events import Queue
from app.domain.exceptions import (
    BusinessRuleException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from tests.factories import (
    make_attendance,
    make_break,
    make_employee,
    make_holiday,
    make_leave_request,
    make_opt_in,
)


def _at(hour: int, minute: int = 0, day: int = 4) -> datetime:
    return datetime(2030, 3, day, hour, minute, tzinfo=UTC)


@pytest.fixture
def repos() -> dict[str, AsyncMock]:
    attendance_repo = AsyncMock()
    attendance_repo.get_for_day.return_value = None
    attendance_repo.get_active_break.return_value = None
    employee_repo = AsyncMock()
    employee_repo.get_by_id.return_value = make_employee()
    holiday_repo = AsyncMock()
    holiday_repo.list_in_range.return_value = []
    leave_repo = AsyncMock()
    leave_repo.approved_in_range.return_value = []
    return {
        "attendance": attendance_repo,
        "employee": employee_repo,
        "holiday": holiday_repo,
        "leave": leave_repo,
    }


@pytest.fixture
def publisher() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(repos: dict[str, AsyncMock], publisher: AsyncMock) -> AttendanceService:
    return AttendanceService(
        repos["attendance"],
        repos["employee"],
        repos["holiday"],
        repos["leave"],
        publisher,
    )


async def test_check_in_on_time_creates_row(
    service: AttendanceService, repos: dict[str, AsyncMock], publisher: AsyncMock
) -> None:
    repos["attendance"].create_attendance.return_value = make_attendance()

    await service.check_in("emp-1", work_mode="office", now=_at(9, 10))

    kwargs = repos["attendance"].create_attendance.await_args.kwargs
    assert kwargs["date"] == date(2030, 3, 4)
    assert kwargs["is_late"] is False
    assert kwargs["status"] == "present"
    queue, event_type, payload = publisher.send_to_queue.await_args.args
    assert queue == Queue.ATTENDANCE_CHECK_IN
    assert event_type == "attendance.check_in"
    assert payload["isLate"] is False


async def test_check_in_after_grace_is_late(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["attendance"].create_attendance.return_value = make_attendance(is_late=True)

    await service.check_in("emp-1", now=_at(9, 16))

    assert repos["attendance"].create_attendance.await_args.kwargs["is_late"] is True


async def test_check_in_twice_conflicts(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["attendance"].get_for_day.return_value = make_attendance()

    with pytest.raises(ConflictException, match="Already checked in"):
        await service.check_in("emp-1", now=_at(10))


async def test_check_in_after_completed_day_conflicts(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["attendance"].get_for_day.return_value = make_attendance(check_out=_at(18))

    with pytest.raises(ConflictException, match="completed"):
        await service.check_in("emp-1", now=_at(19))


async def test_check_in_over_leave_row_detaches_it_from_the_leave(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["attendance"].get_for_day.return_value = make_attendance(
        check_in=None, status="on_leave", leave_request_id="lr-1"
    )
    repos["attendance"].update_attendance.return_value = make_attendance()

    await service.check_in("emp-1", now=_at(9))

    repos["attendance"].create_attendance.assert_not_awaited()
    attendance_id, fields = repos["attendance"].update_attendance.await_args.args
    assert attendance_id == "att-1"
    assert fields["status"] == "present"
    assert fields["leave_request_id"] is None


async def test_check_in_inactive_employee(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["employee"].get_by_id.return_value = make_employee(status="inactive")

    with pytest.raises(ValidationException):
        await service.check_in("emp-1", now=_at(9))


async def test_check_out_computes_work_and_overtime(
    service: AttendanceService, repos: dict[str, AsyncMock], publisher: AsyncMock
) -> None:
    repos["attendance"].get_for_day.return_value = make_attendance(check_in=_at(8))
    repos["attendance"].completed_break_minutes.return_value = 30
    repos["attendance"].update_attendance.return_value = make_attendance(
        check_out=_at(19), work_minutes=630, overtime_minutes=150
    )

    await service.check_out("emp-1", now=_at(19))

    _, fields = repos["attendance"].update_attendance.await_args.args
    # 11h elapsed - 30 min break = 630 min; 150 min over the 8h standard.
    assert fields["work_minutes"] == 630
    assert fields["break_minutes"] == 30
    assert fields["overtime_minutes"] == 150
    assert fields["is_early_leave"] is False
    assert fields["status"] == "present"
    _, _, payload = publisher.send_to_queue.await_args.args
    assert payload["workHours"] == 10.5
    assert payload["overtimeHours"] == 2.5


async def test_check_out_short_day_is_half_day_and_early(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["attendance"].get_for_day.return_value = make_attendance(check_in=_at(9))
    repos["attendance"].completed_break_minutes.return_value = 0
    repos["attendance"].update_attendance.return_value = make_attendance()

    await service.check_out("emp-1", now=_at(12))

    _, fields = repos["attendance"].update_attendance.await_args.args
    assert fields["status"] == "half_day"
    assert fields["is_early_leave"] is True
    assert fields["overtime_minutes"] == 0


async def test_check_out_appends_notes(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["attendance"].get_for_day.return_value = make_attendance(notes="Morning standup")
    repos["attendance"].completed_break_minutes.return_value = 0
    repos["attendance"].update_attendance.return_value = make_attendance()

    await service.check_out("emp-1", notes="Left for dentist", now=_at(18))

    _, fields = repos["attendance"].update_attendance.await_args.args
    assert fields["notes"] == "Morning standup\nLeft for dentist"


async def test_check_out_without_check_in(service: AttendanceService) -> None:
    with pytest.raises(BusinessRuleException, match="without checking in"):
        await service.check_out("emp-1", now=_at(18))


async def test_check_out_twice_conflicts(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["attendance"].get_for_day.return_value = make_attendance(check_out=_at(17))

    with pytest.raises(ConflictException, match="Already checked out"):
        await service.check_out("emp-1", now=_at(18))


async def test_start_break_invalid_type(service: AttendanceService) -> None:
    with pytest.raises(ValidationException):
        await service.start_break("att-1", "nap")


async def test_start_break_while_on_break(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["attendance"].get_by_id.return_value = make_attendance()
    repos["attendance"].get_active_break.return_value = make_break()

    with pytest.raises(ConflictException, match="Already on a break"):
        await service.start_break("att-1", "short")


async def test_start_break_after_check_out(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["attendance"].get_by_id.return_value = make_attendance(check_out=_at(18))

    with pytest.raises(BusinessRuleException):
        await service.start_break("att-1", "lunch")


async def test_end_break_records_duration(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["attendance"].get_break.return_value = make_break()
    repos["attendance"].end_break.return_value = make_break(
        end_time=_at(12, 45), duration_minutes=45
    )

    await service.end_break("brk-1", now=_at(12, 45))

    repos["attendance"].end_break.assert_awaited_once_with(
        "brk-1", end_time=_at(12, 45), duration_minutes=45
    )


async def test_end_break_twice_conflicts(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["attendance"].get_break.return_value = make_break(end_time=_at(12, 30))

    with pytest.raises(ConflictException):
        await service.end_break("brk-1")


async def test_end_break_not_found(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["attendance"].get_break.return_value = None

    with pytest.raises(ResourceNotFoundException):
        await service.end_break("missing")


async def test_list_attendance_rejects_inverted_range(service: AttendanceService) -> None:
    with pytest.raises(ValidationException):
        await service.list_attendance(
            AttendanceFilters(date_from=date(2030, 3, 10), date_to=date(2030, 3, 1))
        )


async def test_monthly_summary(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    # March 2030: 21 weekdays; one holiday on Friday 2030-03-08.
    repos["holiday"].list_in_range.return_value = [make_holiday(date=date(2030, 3, 8))]
    repos["attendance"].list_for_employee_range.return_value = [
        make_attendance(
            date=date(2030, 3, 4),
            check_in=_at(9, 0, day=4),
            check_out=_at(18, 0, day=4),
            work_minutes=480,
            is_late=False,
        ),
        make_attendance(
            id="att-2",
            date=date(2030, 3, 5),
            check_in=_at(9, 30, day=5),
            check_out=_at(19, 0, day=5),
            work_minutes=540,
            overtime_minutes=60,
            is_late=True,
        ),
        make_attendance(
            id="att-3",
            date=date(2030, 3, 6),
            check_in=_at(9, 0, day=6),
            check_out=_at(12, 0, day=6),
            status="half_day",
            work_minutes=180,
            is_early_leave=True,
        ),
    ]
    repos["leave"].approved_in_range.return_value = [
        make_leave_request(
            from_date=date(2030, 3, 28),
            to_date=date(2030, 4, 2),
            status="approved",
            days=Decimal("4"),
        )
    ]

    summary = await service.get_monthly_summary("emp-1", 2030, 3)

    assert summary.working_days == 20
    assert summary.holidays == 1
    assert summary.present_days == 2
    assert summary.half_days == 1
    # 28 (Thu) and 29 (Fri) fall in March; 30/31 are a weekend.
    assert summary.leave_days == 2.0
    assert summary.absent_days == 15.0
    assert summary.late_days == 1
    assert summary.early_leave_days == 1
    assert summary.total_work_hours == 20.0
    assert summary.total_overtime_hours == 1.0
    assert summary.average_work_hours == 6.67
    assert summary.average_check_in == "09:10"
    assert summary.average_check_out == "16:20"


async def test_monthly_summary_counts_optional_holiday_only_when_opted(
    repos: dict[str, AsyncMock], publisher: AsyncMock
) -> None:
    repos["holiday"].list_in_range.return_value = [
        make_holiday(id="hol-opt", date=date(2030, 3, 5), type="optional"),
    ]
    repos["attendance"].list_for_employee_range.return_value = []
    optional_repo = AsyncMock()
    optional_repo.list_opted.return_value = []
    service = AttendanceService(
        repos["attendance"],
        repos["employee"],
        repos["holiday"],
        repos["leave"],
        publisher,
        optional_holiday_repo=optional_repo,
    )

    summary = await service.get_monthly_summary("emp-1", 2030, 3)
    assert (summary.working_days, summary.holidays) == (21, 0)

    optional_repo.list_opted.return_value = [make_opt_in(holiday_id="hol-opt")]
    summary = await service.get_monthly_summary("emp-1", 2030, 3)
    assert (summary.working_days, summary.holidays) == (20, 1)


async def test_monthly_summary_invalid_month(service: AttendanceService) -> None:
    with pytest.raises(ValidationException):
        await service.get_monthly_summary("emp-1", 2030, 13)


async def test_department_daily_summary(
    service: AttendanceService, repos: dict[str, AsyncMock]
) -> None:
    repos["employee"].count_active_in_department.return_value = 5
    repos["attendance"].list_for_department_day.return_value = [
        make_attendance(is_late=True),
        make_attendance(id="att-2", check_out=_at(18)),
        make_attendance(id="att-3", check_in=None, status="on_leave"),
    ]

    summary = await service.get_department_daily_summary("dep-1", date(2030, 3, 4))

    assert summary.total_employees == 5
    assert summary.present == 2
    assert summary.on_leave == 1
    assert summary.absent == 2
    assert summary.late == 1
    assert summary.not_checked_out == 1
