"""Unit tests for OptionalHolidayService (opt-in quota and cancellation)."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from app.application.use_cases.holidays import OptionalHolidayService, opted_holiday_ids
from app.domain.exceptions import (
    BusinessRuleException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from tests.factories import make_employee, make_holiday, make_opt_in

TODAY = date(2030, 3, 1)
DIWALI = make_holiday(id="hol-1", name="Diwali", date=date(2030, 10, 26), type="optional")
EASTER = make_holiday(id="hol-2", name="Easter Monday", date=date(2030, 2, 18), type="optional")


@pytest.fixture
def holiday_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id.return_value = DIWALI
    repo.list_holidays.return_value = [EASTER, DIWALI]
    return repo


@pytest.fixture
def optional_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.find.return_value = None
    repo.count_opted.return_value = 0
    repo.list_opted.return_value = []
    repo.create_opt_in.side_effect = lambda employee_id, holiday_id, year, opted_at: make_opt_in(
        employee_id=employee_id, holiday_id=holiday_id, year=year, opted_at=opted_at
    )
    return repo


@pytest.fixture
def employee_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id.return_value = make_employee()
    return repo


@pytest.fixture
def service(
    holiday_repo: AsyncMock, optional_repo: AsyncMock, employee_repo: AsyncMock
) -> OptionalHolidayService:
    return OptionalHolidayService(holiday_repo, optional_repo, employee_repo, quota=2)


async def test_list_shows_choice_and_what_can_change(
    service: OptionalHolidayService, holiday_repo: AsyncMock, optional_repo: AsyncMock
) -> None:
    optional_repo.list_opted.return_value = [make_opt_in(holiday_id="hol-2")]

    views = await service.list_optional_holidays("emp-1", 2030, today=TODAY)

    holiday_repo.list_holidays.assert_awaited_once_with(year=2030, holiday_type="optional")
    easter, diwali = views
    assert (easter.opted, easter.can_opt, easter.can_cancel) == (True, False, False)
    assert (diwali.opted, diwali.can_opt, diwali.can_cancel) == (False, True, False)


async def test_opt_in_creates_choice(
    service: OptionalHolidayService, optional_repo: AsyncMock
) -> None:
    choice = await service.opt_in("emp-1", "hol-1", today=TODAY)

    assert (choice.holiday_id, choice.year, choice.status) == ("hol-1", 2030, "OPTED")
    optional_repo.count_opted.assert_awaited_once_with("emp-1", 2030)


async def test_opt_in_reuses_cancelled_choice(
    service: OptionalHolidayService, optional_repo: AsyncMock
) -> None:
    optional_repo.find.return_value = make_opt_in(status="CANCELLED")
    optional_repo.update_opt_in.return_value = make_opt_in()

    await service.opt_in("emp-1", "hol-1", today=TODAY)

    opt_in_id, changes = optional_repo.update_opt_in.await_args.args
    assert opt_in_id == "opt-1"
    assert changes["status"] == "OPTED"
    assert changes["cancelled_at"] is None
    optional_repo.create_opt_in.assert_not_awaited()


async def test_opt_in_rejects_public_holiday(
    service: OptionalHolidayService, holiday_repo: AsyncMock
) -> None:
    holiday_repo.get_by_id.return_value = make_holiday(date=date(2030, 12, 25))

    with pytest.raises(BusinessRuleException):
        await service.opt_in("emp-1", "hol-1", today=TODAY)


async def test_opt_in_rejects_past_day(
    service: OptionalHolidayService, holiday_repo: AsyncMock
) -> None:
    holiday_repo.get_by_id.return_value = EASTER

    with pytest.raises(BusinessRuleException):
        await service.opt_in("emp-1", "hol-2", today=TODAY)


async def test_opt_in_twice_conflicts(
    service: OptionalHolidayService, optional_repo: AsyncMock
) -> None:
    optional_repo.find.return_value = make_opt_in()

    with pytest.raises(ConflictException):
        await service.opt_in("emp-1", "hol-1", today=TODAY)


async def test_opt_in_over_quota(
    service: OptionalHolidayService, optional_repo: AsyncMock
) -> None:
    optional_repo.count_opted.return_value = 2

    with pytest.raises(BusinessRuleException) as exc_info:
        await service.opt_in("emp-1", "hol-1", today=TODAY)

    assert exc_info.value.details == {"quota": 2, "used": 2}
    optional_repo.create_opt_in.assert_not_awaited()


async def test_opt_in_unknown_holiday_or_inactive_employee(
    service: OptionalHolidayService, holiday_repo: AsyncMock, employee_repo: AsyncMock
) -> None:
    holiday_repo.get_by_id.return_value = None
    with pytest.raises(ResourceNotFoundException):
        await service.opt_in("emp-1", "nope", today=TODAY)

    employee_repo.get_by_id.return_value = make_employee(status="offboarded")
    with pytest.raises(ValidationException):
        await service.opt_in("emp-1", "hol-1", today=TODAY)


async def test_cancel_marks_choice_cancelled(
    service: OptionalHolidayService, optional_repo: AsyncMock
) -> None:
    optional_repo.find.return_value = make_opt_in()
    optional_repo.update_opt_in.return_value = make_opt_in(status="CANCELLED")

    result = await service.cancel_opt_in("emp-1", "hol-1", today=TODAY)

    assert result.status == "CANCELLED"
    _, changes = optional_repo.update_opt_in.await_args.args
    assert changes["status"] == "CANCELLED"
    assert changes["cancelled_at"] is not None


async def test_cancel_without_choice(
    service: OptionalHolidayService, optional_repo: AsyncMock
) -> None:
    optional_repo.find.return_value = make_opt_in(status="CANCELLED")

    with pytest.raises(BusinessRuleException):
        await service.cancel_opt_in("emp-1", "hol-1", today=TODAY)


async def test_opted_dates(service: OptionalHolidayService, optional_repo: AsyncMock) -> None:
    optional_repo.list_opted.return_value = [make_opt_in(holiday_id="hol-1")]

    assert await service.get_opted_holiday_dates("emp-1", 2030) == {date(2030, 10, 26)}


async def test_opted_ids_span_years(optional_repo: AsyncMock) -> None:
    optional_repo.list_opted.side_effect = lambda employee_id, year: [
        make_opt_in(holiday_id=f"hol-{year}")
    ]

    ids = await opted_holiday_ids(optional_repo, "emp-1", date(2030, 12, 20), date(2031, 1, 5))

    assert ids == frozenset({"hol-2030", "hol-2031"})
    assert await opted_holiday_ids(None, "emp-1", date(2030, 1, 1), date(2030, 1, 2)) == frozenset()
