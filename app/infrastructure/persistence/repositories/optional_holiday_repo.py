"""Optional holiday opt-ins (tenant database)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.holiday import OptedHolidayResult
from app.domain.enums import OptionalHolidayStatus
from app.infrastructure.persistence.models.optional_holiday import EmployeeOptionalHoliday
from app.infrastructure.persistence.repositories.base import BaseRepository

_OPTED = OptionalHolidayStatus.OPTED.value


def _opt_in_to_result(o: EmployeeOptionalHoliday) -> OptedHolidayResult:
    return OptedHolidayResult(
        id=o.id,
        employee_id=o.employee_id,
        holiday_id=o.holiday_id,
        year=o.year,
        status=o.status,
        opted_at=o.opted_at,
        cancelled_at=o.cancelled_at,
    )


class OptionalHolidayRepository(BaseRepository[EmployeeOptionalHoliday]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, EmployeeOptionalHoliday)

    async def find(self, employee_id: str, holiday_id: str) -> OptedHolidayResult | None:
        result = await self.db.execute(
            select(EmployeeOptionalHoliday).where(
                EmployeeOptionalHoliday.employee_id == employee_id,
                EmployeeOptionalHoliday.holiday_id == holiday_id,
            )
        )
        row = result.scalar_one_or_none()
        return _opt_in_to_result(row) if row else None

    async def list_opted(self, employee_id: str, year: int) -> list[OptedHolidayResult]:
        result = await self.db.execute(
            select(EmployeeOptionalHoliday)
            .where(
                EmployeeOptionalHoliday.employee_id == employee_id,
                EmployeeOptionalHoliday.year == year,
                EmployeeOptionalHoliday.status == _OPTED,
            )
            .order_by(EmployeeOptionalHoliday.opted_at.desc())
        )
        return [_opt_in_to_result(o) for o in result.scalars().all()]

    async def count_opted(self, employee_id: str, year: int) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(EmployeeOptionalHoliday)
            .where(
                EmployeeOptionalHoliday.employee_id == employee_id,
                EmployeeOptionalHoliday.year == year,
                EmployeeOptionalHoliday.status == _OPTED,
            )
        )
        return int(result.scalar_one())

    async def create_opt_in(
        self, employee_id: str, holiday_id: str, year: int, opted_at: datetime
    ) -> OptedHolidayResult:
        row = EmployeeOptionalHoliday(
            employee_id=employee_id,
            holiday_id=holiday_id,
            year=year,
            status=_OPTED,
            opted_at=opted_at,
        )
        return _opt_in_to_result(await self._add(row))

    async def update_opt_in(
        self, opt_in_id: str, changes: dict[str, Any]
    ) -> OptedHolidayResult | None:
        row = await self._get(opt_in_id)
        if row is None:
            return None
        return _opt_in_to_result(await self._apply_changes(row, changes))
