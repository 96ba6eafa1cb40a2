"""Unit tests for LeaveService and LeaveTypeService (balances, approval flow)."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.leave import LeaveRequestInput, LeaveTypeInput
from app.application.use_cases.leave import LeaveService, LeaveTypeService
from app.domain.events import Queue
from app.domain.exceptions import (
    BusinessRuleException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from tests.factories import (
    make_balance,
    make_employee,
    make_holiday,
    make_leave_request,
    make_leave_type,
    make_opt_in,
)

# 2030-03-04 is a Monday.
MONDAY = date(2030, 3, 4)
WEDNESDAY = date(2030, 3, 6)


def _request_input(**overrides) -> LeaveRequestInput:
    values = {
        "employee_id": "emp-1",
        "leave_type_id": "lt-annual",
        "from_date": MONDAY,
        "to_date": WEDNESDAY,
        "reason": "Family trip",
    }
    values.update(overrides)
    return LeaveRequestInput(**values)


@pytest.fixture
def repos() -> dict[str, AsyncMock]:
    request_repo = AsyncMock()
    request_repo.find_overlapping.return_value = None
    request_repo.create_request.return_value = make_leave_request()
    type_repo = AsyncMock()
    type_repo.get_by_id.return_value = make_leave_type()
    balance_repo = AsyncMock()
    balance_repo.get_balance.return_value = make_balance()
    employee_repo = AsyncMock()
    employee_repo.get_by_id.return_value = make_employee(reporting_to_id="mgr-1")
    holiday_repo = AsyncMock()
    holiday_repo.list_in_range.return_value = []
    attendance_repo = AsyncMock()
    return {
        "request": request_repo,
        "type": type_repo,
        "balance": balance_repo,
        "employee": employee_repo,
        "holiday": holiday_repo,
        "attendance": attendance_repo,
    }


@pytest.fixture
def publisher() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(repos: dict[str, AsyncMock], publisher: AsyncMock) -> LeaveService:
    return LeaveService(
        repos["request"],
        repos["type"],
        repos["balance"],
        repos["employee"],
        repos["holiday"],
        repos["attendance"],
        publisher,
    )


async def test_request_leave_holds_pending_days(
    service: LeaveService, repos: dict[str, AsyncMock], publisher: AsyncMock
) -> None:
    result = await service.request_leave(_request_input())

    assert result.id == "lr-1"
    kwargs = repos["request"].create_request.await_args.kwargs
    assert kwargs["days"] == Decimal("3")
    assert kwargs["status"] == "pending"
    assert kwargs["approver_id"] == "mgr-1"
    repos["balance"].change_balance.assert_awaited_once_with("bal-1", pending=Decimal("3"))
    queue, event_type, payload = publisher.send_to_queue.await_args.args
    assert queue == Queue.LEAVE_REQUESTED
    assert event_type == "leave.requested"
    assert payload["totalDays"] == 3.0


async def test_request_leave_skips_applicable_holidays(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["holiday"].list_in_range.return_value = [
        make_holiday(date=date(2030, 3, 5)),
        make_holiday(
            id="hol-2",
            date=date(2030, 3, 6),
            applies_to_all=False,
            department_ids=["dep-other"],
        ),
    ]

    await service.request_leave(_request_input())

    assert repos["request"].create_request.await_args.kwargs["days"] == Decimal("2")


async def test_optional_holiday_is_a_day_off_only_when_opted(
    repos: dict[str, AsyncMock], publisher: AsyncMock
) -> None:
    repos["holiday"].list_in_range.return_value = [
        make_holiday(id="hol-opt", date=date(2030, 3, 5), type="optional"),
    ]
    optional_repo = AsyncMock()
    optional_repo.list_opted.return_value = []
    service = LeaveService(
        repos["request"],
        repos["type"],
        repos["balance"],
        repos["employee"],
        repos["holiday"],
        repos["attendance"],
        publisher,
        optional_holiday_repo=optional_repo,
    )

    await service.request_leave(_request_input())
    assert repos["request"].create_request.await_args.kwargs["days"] == Decimal("3")

    optional_repo.list_opted.return_value = [make_opt_in(holiday_id="hol-opt")]
    await service.request_leave(_request_input())
    assert repos["request"].create_request.await_args.kwargs["days"] == Decimal("2")
    optional_repo.list_opted.assert_awaited_with("emp-1", 2030)


async def test_request_leave_weekend_only_range_is_rejected(service: LeaveService) -> None:
    with pytest.raises(ValidationException, match="No valid leave days"):
        await service.request_leave(
            _request_input(from_date=date(2030, 3, 9), to_date=date(2030, 3, 10))
        )


async def test_request_leave_auto_approves_and_marks_attendance(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["type"].get_by_id.return_value = make_leave_type(requires_approval=False)
    repos["request"].create_request.return_value = make_leave_request(status="approved")

    await service.request_leave(_request_input())

    assert repos["request"].create_request.await_args.kwargs["status"] == "approved"
    repos["balance"].change_balance.assert_awaited_once_with("bal-1", used=Decimal("3"))
    marked = [c.args[1] for c in repos["attendance"].upsert_leave_day.await_args_list]
    assert marked == [date(2030, 3, 4), date(2030, 3, 5), date(2030, 3, 6)]


async def test_request_leave_insufficient_balance(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["balance"].get_balance.return_value = make_balance(used_days=Decimal("19"))

    with pytest.raises(BusinessRuleException, match="Insufficient leave balance"):
        await service.request_leave(_request_input())

    repos["request"].create_request.assert_not_awaited()


async def test_request_leave_negative_balance_allowed(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["type"].get_by_id.return_value = make_leave_type(allow_negative_balance=True)
    repos["balance"].get_balance.return_value = make_balance(used_days=Decimal("20"))

    await service.request_leave(_request_input())

    repos["request"].create_request.assert_awaited_once()


async def test_request_leave_creates_missing_balance(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["balance"].get_balance.return_value = None
    repos["balance"].create_balance.return_value = make_balance(id="bal-new")

    await service.request_leave(_request_input())

    repos["balance"].create_balance.assert_awaited_once_with(
        employee_id="emp-1", leave_type_id="lt-annual", year=2030, total_days=Decimal("20")
    )
    repos["balance"].change_balance.assert_awaited_once_with("bal-new", pending=Decimal("3"))


async def test_request_leave_half_day_must_be_single_day(service: LeaveService) -> None:
    with pytest.raises(ValidationException, match="single day"):
        await service.request_leave(_request_input(is_half_day=True))


async def test_request_leave_half_day_counts_half(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    await service.request_leave(
        _request_input(to_date=MONDAY, is_half_day=True, half_day_period="first_half")
    )

    assert repos["request"].create_request.await_args.kwargs["days"] == Decimal("0.5")


async def test_request_leave_half_day_not_allowed_by_type(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["type"].get_by_id.return_value = make_leave_type(allow_half_day=False)

    with pytest.raises(BusinessRuleException, match="half days"):
        await service.request_leave(_request_input(to_date=MONDAY, is_half_day=True))


async def test_request_leave_from_after_to(service: LeaveService) -> None:
    with pytest.raises(ValidationException):
        await service.request_leave(_request_input(from_date=WEDNESDAY, to_date=MONDAY))


async def test_request_leave_overlap_conflicts(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["request"].find_overlapping.return_value = make_leave_request(id="lr-old")

    with pytest.raises(ConflictException) as exc_info:
        await service.request_leave(_request_input())

    assert exc_info.value.details["leave_request_id"] == "lr-old"


async def test_request_leave_inactive_employee(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["employee"].get_by_id.return_value = make_employee(status="offboarded")

    with pytest.raises(ValidationException, match="Employee"):
        await service.request_leave(_request_input())


async def test_approve_moves_pending_to_used(
    service: LeaveService, repos: dict[str, AsyncMock], publisher: AsyncMock
) -> None:
    repos["request"].get_by_id.return_value = make_leave_request()
    repos["request"].update_request.return_value = make_leave_request(status="approved")

    result = await service.approve_leave("lr-1", "mgr-1", comments="Enjoy")

    assert result.status == "approved"
    changes = repos["request"].update_request.await_args.args[1]
    assert changes["status"] == "approved"
    assert changes["approver_id"] == "mgr-1"
    repos["balance"].change_balance.assert_awaited_once_with(
        "bal-1", pending=Decimal("-3"), used=Decimal("3")
    )
    assert repos["attendance"].upsert_leave_day.await_count == 3
    queue, event_type, _ = publisher.send_to_queue.await_args.args
    assert (queue, event_type) == (Queue.LEAVE_APPROVED, "leave.approved")


async def test_approve_non_pending_is_rejected(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["request"].get_by_id.return_value = make_leave_request(status="rejected")

    with pytest.raises(BusinessRuleException, match="status: rejected"):
        await service.approve_leave("lr-1", "mgr-1")


async def test_reject_releases_pending_days(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["request"].get_by_id.return_value = make_leave_request()
    repos["request"].update_request.return_value = make_leave_request(status="rejected")

    await service.reject_leave("lr-1", "mgr-1", "Busy sprint")

    repos["balance"].change_balance.assert_awaited_once_with("bal-1", pending=Decimal("-3"))
    assert repos["request"].update_request.await_args.args[1]["rejection_reason"] == "Busy sprint"


async def test_cancel_approved_returns_used_days_and_clears_attendance(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["request"].get_by_id.return_value = make_leave_request(status="approved")
    repos["request"].update_request.return_value = make_leave_request(status="cancelled")
    repos["attendance"].delete_for_leave.return_value = 3

    await service.cancel_leave("lr-1", "emp-1", "Plans changed")

    repos["balance"].change_balance.assert_awaited_once_with("bal-1", used=Decimal("-3"))
    repos["attendance"].delete_for_leave.assert_awaited_once_with("lr-1")


async def test_cancel_pending_releases_pending_days(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["request"].get_by_id.return_value = make_leave_request()
    repos["request"].update_request.return_value = make_leave_request(status="cancelled")

    await service.cancel_leave("lr-1", "emp-1")

    repos["balance"].change_balance.assert_awaited_once_with("bal-1", pending=Decimal("-3"))
    repos["attendance"].delete_for_leave.assert_not_awaited()


async def test_cancel_rejected_is_not_allowed(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["request"].get_by_id.return_value = make_leave_request(status="rejected")

    with pytest.raises(BusinessRuleException):
        await service.cancel_leave("lr-1", "emp-1")


async def test_get_leave_request_not_found(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["request"].get_by_id.return_value = None

    with pytest.raises(ResourceNotFoundException):
        await service.get_leave_request("missing")


async def test_pending_approvals_without_reports(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["employee"].get_direct_reports.return_value = []

    assert await service.get_pending_approvals("mgr-1") == []
    repos["request"].list_pending_for_employees.assert_not_awaited()


async def test_pending_approvals_for_reports(
    service: LeaveService, repos: dict[str, AsyncMock]
) -> None:
    repos["employee"].get_direct_reports.return_value = [
        make_employee(id="e1"),
        make_employee(id="e2"),
    ]
    repos["request"].list_pending_for_employees.return_value = [make_leave_request()]

    result = await service.get_pending_approvals("mgr-1")

    assert len(result) == 1
    repos["request"].list_pending_for_employees.assert_awaited_once_with(["e1", "e2"])


class TestLeaveTypeService:
    @pytest.fixture
    def type_repo(self) -> AsyncMock:
        repo = AsyncMock()
        repo.get_by_code.return_value = None
        repo.list_types.return_value = [
            make_leave_type(),
            make_leave_type(id="lt-sick", code="SICK", default_days_per_year=Decimal("10")),
        ]
        return repo

    @pytest.fixture
    def balance_repo(self) -> AsyncMock:
        return AsyncMock()

    @pytest.fixture
    def types(self, type_repo: AsyncMock, balance_repo: AsyncMock) -> LeaveTypeService:
        return LeaveTypeService(type_repo, balance_repo, default_color="#000000")

    async def test_create_normalizes_code_and_applies_default_color(
        self, types: LeaveTypeService, type_repo: AsyncMock
    ) -> None:
        type_repo.create_type.return_value = make_leave_type(code="CASUAL")

        await types.create_leave_type(LeaveTypeInput(code=" casual ", name="Casual"))

        created = type_repo.create_type.await_args.args[0]
        assert created.code == "CASUAL"
        assert created.color == "#000000"

    async def test_create_duplicate_code(
        self, types: LeaveTypeService, type_repo: AsyncMock
    ) -> None:
        type_repo.get_by_code.return_value = make_leave_type()

        with pytest.raises(ConflictException):
            await types.create_leave_type(LeaveTypeInput(code="annual", name="Annual"))

    async def test_code_cannot_change(self, types: LeaveTypeService) -> None:
        with pytest.raises(ValidationException):
            await types.update_leave_type("lt-annual", {"code": "NEW"})

    async def test_initialize_balances_creates_only_missing(
        self, types: LeaveTypeService, balance_repo: AsyncMock
    ) -> None:
        existing = make_balance()
        balance_repo.get_balance.side_effect = [existing, None]
        balance_repo.create_balance.return_value = make_balance(
            id="bal-sick", leave_type_id="lt-sick", total_days=Decimal("10")
        )

        balances = await types.initialize_balances("emp-1", 2030)

        assert [b.id for b in balances] == ["bal-1", "bal-sick"]
        balance_repo.create_balance.assert_awaited_once_with(
            employee_id="emp-1", leave_type_id="lt-sick", year=2030, total_days=Decimal("10")
        )

    async def test_adjust_balance_records_adjustment(
        self, types: LeaveTypeService, balance_repo: AsyncMock
    ) -> None:
        balance_repo.get_balance.return_value = make_balance()
        balance_repo.change_balance.return_value = make_balance(adjustment_days=Decimal("2"))

        result = await types.adjust_balance(
            "emp-1", "lt-annual", 2030, Decimal("2"), "Overtime credit", "hr-1"
        )

        assert result.available_days == Decimal("22")
        balance_repo.change_balance.assert_awaited_once_with("bal-1", adjustment=Decimal("2"))
        balance_repo.add_adjustment.assert_awaited_once_with(
            "bal-1", days=Decimal("2"), reason="Overtime credit", adjusted_by="hr-1"
        )

    async def test_adjust_balance_zero_rejected(self, types: LeaveTypeService) -> None:
        with pytest.raises(ValidationException):
            await types.adjust_balance("emp-1", "lt-annual", 2030, Decimal("0"), "x", "hr-1")

    async def test_adjust_balance_requires_reason(self, types: LeaveTypeService) -> None:
        with pytest.raises(ValidationException, match="reason"):
            await types.adjust_balance("emp-1", "lt-annual", 2030, Decimal("1"), "  ", "hr-1")
