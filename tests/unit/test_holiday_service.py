"""Unit tests for HolidayService."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.holiday import HolidayInput
from app.application.use_cases.holidays import HolidayService
from app.domain.exceptions import ConflictException, ResourceNotFoundException, ValidationException
from tests.factories import make_holiday


@pytest.fixture
def holiday_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.find_by_name_and_date.return_value = None
    repo.create_holiday.side_effect = lambda data, performed_by=None: make_holiday(
        name=data.name, date=data.date
    )
    return repo


@pytest.fixture
def service(holiday_repo: AsyncMock) -> HolidayService:
    return HolidayService(holiday_repo)


async def test_create_rejects_unknown_type(service: HolidayService) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await service.create_holiday(HolidayInput("Founders Day", date(2030, 6, 1), type="bank"))

    assert exc_info.value.details["field"] == "type"


async def test_create_rejects_same_name_same_date(
    service: HolidayService, holiday_repo: AsyncMock
) -> None:
    holiday_repo.find_by_name_and_date.return_value = make_holiday()

    with pytest.raises(ConflictException):
        await service.create_holiday(HolidayInput("New Year", date(2030, 1, 1)))


async def test_bulk_create_counts_skipped(
    service: HolidayService, holiday_repo: AsyncMock
) -> None:
    holiday_repo.find_by_name_and_date.side_effect = [None, make_holiday(), None]

    result = await service.bulk_create_holidays(
        [
            HolidayInput("Labour Day", date(2030, 5, 1)),
            HolidayInput("New Year", date(2030, 1, 1)),
            HolidayInput("Christmas", date(2030, 12, 25)),
            HolidayInput("Bad", date(2030, 7, 1), type="unknown"),
        ]
    )

    assert (result.created, result.skipped) == (2, 2)


async def test_range_filters_by_department(
    service: HolidayService, holiday_repo: AsyncMock
) -> None:
    holiday_repo.list_in_range.return_value = [
        make_holiday(id="all"),
        make_holiday(id="eng", applies_to_all=False, department_ids=["dep-eng"]),
        make_holiday(id="ops", applies_to_all=False, department_ids=["dep-ops"]),
    ]

    eng = await service.get_holidays_in_range(date(2030, 1, 1), date(2030, 1, 31), "dep-eng")
    everyone = await service.get_holidays_in_range(date(2030, 1, 1), date(2030, 1, 31))

    assert [h.id for h in eng] == ["all", "eng"]
    assert len(everyone) == 3


async def test_is_holiday(service: HolidayService, holiday_repo: AsyncMock) -> None:
    holiday_repo.list_in_range.return_value = []
    assert await service.is_holiday(date(2030, 1, 2)) is False

    holiday_repo.list_in_range.return_value = [make_holiday()]
    assert await service.is_holiday(date(2030, 1, 1)) is True


async def test_upcoming_limited_to_year_end(
    service: HolidayService, holiday_repo: AsyncMock
) -> None:
    holiday_repo.list_in_range.return_value = [
        make_holiday(id=str(i), date=date(2030, 11, i + 1)) for i in range(6)
    ]

    upcoming = await service.get_upcoming_holidays(limit=3, today=date(2030, 10, 1))

    assert [h.id for h in upcoming] == ["0", "1", "2"]
    holiday_repo.list_in_range.assert_awaited_once_with(date(2030, 10, 1), date(2030, 12, 31))


async def test_update_applies_to_all_clears_departments(
    service: HolidayService, holiday_repo: AsyncMock
) -> None:
    holiday_repo.update_holiday.return_value = make_holiday()

    await service.update_holiday("hol-1", {"applies_to_all": True})

    changes = holiday_repo.update_holiday.await_args.args[1]
    assert changes == {"applies_to_all": True, "department_ids": []}


async def test_delete_missing(service: HolidayService, holiday_repo: AsyncMock) -> None:
    holiday_repo.delete_holiday.return_value = False

    with pytest.raises(ResourceNotFoundException):
        await service.delete_holiday("missing")


async def test_generate_recurring_copies_previous_year(
    service: HolidayService, holiday_repo: AsyncMock
) -> None:
    holiday_repo.list_in_range.return_value = [
        make_holiday(name="New Year", date=date(2028, 1, 1), is_recurring=True),
        make_holiday(id="leap", name="Leap Fest", date=date(2028, 2, 29), is_recurring=True),
        make_holiday(id="once", name="Election", date=date(2028, 11, 7), is_recurring=False),
    ]

    result = await service.generate_recurring_holidays(2029)

    assert result.created == 2
    created = [c.args[0] for c in holiday_repo.create_holiday.await_args_list]
    assert [h.date for h in created] == [date(2029, 1, 1), date(2029, 2, 28)]
    assert all(h.is_recurring for h in created)
    holiday_repo.list_in_range.assert_awaited_once_with(date(2028, 1, 1), date(2028, 12, 31))
