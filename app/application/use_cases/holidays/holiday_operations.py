"""Holiday calendar: create, bulk import, query by range, recurring rollover."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from app.application.dtos.holiday import BulkResult, HolidayInput, HolidayResult
from app.application.interfaces.repositories import IHolidayRepository
from app.domain.enums import HolidayType
from app.domain.exceptions import (
    ConflictException,
    OfficeException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


def _same_day_in_year(day: date, year: int) -> date:
    """day moved to year; 29 February falls back to 28 February."""
    try:
        return day.replace(year=year)
    except ValueError:
        return day.replace(year=year, day=28)


class HolidayService:
    """Holiday operations for the current tenant."""

    def __init__(self, holiday_repo: IHolidayRepository) -> None:
        self.holiday_repo = holiday_repo

    async def create_holiday(
        self, data: HolidayInput, performed_by: str | None = None
    ) -> HolidayResult:
        """Create a holiday; the same name on the same date is rejected."""
        try:
            HolidayType(data.type)
        except ValueError as e:
            raise ValidationException(f"Invalid holiday type: {data.type}", field="type") from e
        if await self.holiday_repo.find_by_name_and_date(data.name, data.date):
            raise ConflictException(
                f"Holiday '{data.name}' already exists on {data.date.isoformat()}",
                name=data.name,
                date=data.date.isoformat(),
            )
        holiday = await self.holiday_repo.create_holiday(data, performed_by=performed_by)
        logger.info("Holiday created: %s %s", holiday.name, holiday.date.isoformat())
        return holiday

    async def bulk_create_holidays(
        self, holidays: list[HolidayInput], performed_by: str | None = None
    ) -> BulkResult:
        """Create each holiday; duplicates and invalid entries are counted as skipped."""
        created = skipped = 0
        for item in holidays:
            try:
                await self.create_holiday(item, performed_by=performed_by)
                created += 1
            except OfficeException as e:
                logger.warning(
                    "Skipped holiday %s on %s: %s", item.name, item.date.isoformat(), e.message
                )
                skipped += 1
        logger.info("Bulk holiday creation: %d created, %d skipped", created, skipped)
        return BulkResult(created=created, skipped=skipped)

    async def get_holiday(self, holiday_id: str) -> HolidayResult:
        holiday = await self.holiday_repo.get_by_id(holiday_id)
        if not holiday:
            raise ResourceNotFoundException("holiday", holiday_id)
        return holiday

    async def update_holiday(
        self,
        holiday_id: str,
        changes: dict[str, Any],
        performed_by: str | None = None,
    ) -> HolidayResult:
        if "type" in changes:
            try:
                HolidayType(changes["type"])
            except ValueError as e:
                raise ValidationException(
                    f"Invalid holiday type: {changes['type']}", field="type"
                ) from e
        if changes.get("applies_to_all"):
            changes = {**changes, "department_ids": []}
        updated = await self.holiday_repo.update_holiday(
            holiday_id, changes, performed_by=performed_by
        )
        if not updated:
            raise ResourceNotFoundException("holiday", holiday_id)
        return updated

    async def delete_holiday(self, holiday_id: str) -> None:
        if not await self.holiday_repo.delete_holiday(holiday_id):
            raise ResourceNotFoundException("holiday", holiday_id)
        logger.info("Holiday deleted: %s", holiday_id)

    async def list_holidays(
        self, year: int | None = None, holiday_type: str | None = None
    ) -> list[HolidayResult]:
        return await self.holiday_repo.list_holidays(year=year, holiday_type=holiday_type)

    async def get_holidays_in_range(
        self, start: date, end: date, department_id: str | None = None
    ) -> list[HolidayResult]:
        """Holidays in [start, end] that apply to the department (all when None)."""
        holidays = await self.holiday_repo.list_in_range(start, end)
        return [h for h in holidays if h.applies_to(department_id)]

    async def get_holiday_dates(
        self, start: date, end: date, department_id: str | None = None
    ) -> set[date]:
        return {h.date for h in await self.get_holidays_in_range(start, end, department_id)}

    async def is_holiday(self, day: date, department_id: str | None = None) -> bool:
        return bool(await self.get_holidays_in_range(day, day, department_id))

    async def get_upcoming_holidays(
        self, limit: int = 5, department_id: str | None = None, today: date | None = None
    ) -> list[HolidayResult]:
        """Next holidays from today until the end of the year."""
        start = today or utc_now().date()
        end = date(start.year, 12, 31)
        return (await self.get_holidays_in_range(start, end, department_id))[:limit]

    async def generate_recurring_holidays(
        self, year: int, performed_by: str | None = None
    ) -> BulkResult:
        """Copy the previous year's recurring holidays into year."""
        previous = await self.holiday_repo.list_in_range(
            date(year - 1, 1, 1), date(year - 1, 12, 31)
        )
        inputs = [
            HolidayInput(
                name=h.name,
                date=_same_day_in_year(h.date, year),
                type=h.type,
                description=h.description,
                is_recurring=True,
                applies_to_all=h.applies_to_all,
                department_ids=list(h.department_ids),
            )
            for h in previous
            if h.is_recurring
        ]
        return await self.bulk_create_holidays(inputs, performed_by=performed_by)
