"""Employee opt-ins for optional holidays, limited by a yearly quota."""

from __future__ import annotations

import logging
from datetime import date

from app.application.dtos.holiday import HolidayResult, OptedHolidayResult, OptionalHolidayView
from app.application.interfaces.repositories import (
    IEmployeeRepository,
    IHolidayRepository,
    IOptionalHolidayRepository,
)
from app.domain.enums import EmployeeStatus, HolidayType, OptionalHolidayStatus
from app.domain.exceptions import (
    BusinessRuleException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


async def opted_holiday_ids(
    repo: IOptionalHolidayRepository | None, employee_id: str, start: date, end: date
) -> frozenset[str]:
    """Ids of optional holidays the employee opted into for the years spanned by [start, end]."""
    if repo is None:
        return frozenset()
    ids: set[str] = set()
    for year in range(start.year, end.year + 1):
        ids.update(o.holiday_id for o in await repo.list_opted(employee_id, year))
    return frozenset(ids)


class OptionalHolidayService:
    """Opt in and out of optional holidays for the current tenant."""

    def __init__(
        self,
        holiday_repo: IHolidayRepository,
        optional_repo: IOptionalHolidayRepository,
        employee_repo: IEmployeeRepository,
        *,
        quota: int = 2,
    ) -> None:
        self.holiday_repo = holiday_repo
        self.optional_repo = optional_repo
        self.employee_repo = employee_repo
        self.quota = quota

    async def _active_employee(self, employee_id: str) -> None:
        employee = await self.employee_repo.get_by_id(employee_id)
        if not employee or employee.status != EmployeeStatus.ACTIVE.value:
            raise ValidationException("Employee not found or inactive", field="employee_id")

    async def _optional_holiday(self, holiday_id: str) -> HolidayResult:
        holiday = await self.holiday_repo.get_by_id(holiday_id)
        if not holiday:
            raise ResourceNotFoundException("holiday", holiday_id)
        if holiday.type != HolidayType.OPTIONAL.value:
            raise BusinessRuleException(
                "Only optional holidays can be opted into", holiday_id=holiday_id
            )
        return holiday

    async def list_optional_holidays(
        self, employee_id: str, year: int | None = None, today: date | None = None
    ) -> list[OptionalHolidayView]:
        """The year's optional holidays with the employee's choice; only future days can change."""
        today = today or utc_now().date()
        year = year or today.year
        holidays = await self.holiday_repo.list_holidays(
            year=year, holiday_type=HolidayType.OPTIONAL.value
        )
        opted = {o.holiday_id: o for o in await self.optional_repo.list_opted(employee_id, year)}
        views = []
        for holiday in holidays:
            choice = opted.get(holiday.id)
            upcoming = holiday.date > today
            views.append(
                OptionalHolidayView(
                    holiday=holiday,
                    opted=choice is not None,
                    opted_at=choice.opted_at if choice else None,
                    can_opt=choice is None and upcoming,
                    can_cancel=choice is not None and upcoming,
                )
            )
        return views

    async def get_opted_holidays(
        self, employee_id: str, year: int | None = None
    ) -> list[OptedHolidayResult]:
        return await self.optional_repo.list_opted(employee_id, year or utc_now().year)

    async def get_opted_count(self, employee_id: str, year: int | None = None) -> int:
        return await self.optional_repo.count_opted(employee_id, year or utc_now().year)

    async def has_opted(self, employee_id: str, holiday_id: str) -> bool:
        choice = await self.optional_repo.find(employee_id, holiday_id)
        return choice is not None and choice.status == OptionalHolidayStatus.OPTED.value

    async def get_opted_holiday_dates(self, employee_id: str, year: int) -> set[date]:
        ids = await opted_holiday_ids(
            self.optional_repo, employee_id, date(year, 1, 1), date(year, 12, 31)
        )
        holidays = await self.holiday_repo.list_holidays(
            year=year, holiday_type=HolidayType.OPTIONAL.value
        )
        return {h.date for h in holidays if h.id in ids}

    async def opt_in(
        self, employee_id: str, holiday_id: str, today: date | None = None
    ) -> OptedHolidayResult:
        """Opt into a future optional holiday; a cancelled choice is reused."""
        await self._active_employee(employee_id)
        holiday = await self._optional_holiday(holiday_id)
        today = today or utc_now().date()
        if holiday.date <= today:
            raise BusinessRuleException(
                "Cannot opt into past or current day holidays", holiday_id=holiday_id
            )
        existing = await self.optional_repo.find(employee_id, holiday_id)
        if existing and existing.status == OptionalHolidayStatus.OPTED.value:
            raise ConflictException(
                "Already opted for this holiday", employee_id=employee_id, holiday_id=holiday_id
            )
        year = holiday.date.year
        used = await self.optional_repo.count_opted(employee_id, year)
        if used >= self.quota:
            raise BusinessRuleException(
                f"All {self.quota} optional holidays for {year} are already used; "
                "cancel one to opt for another",
                quota=self.quota,
                used=used,
            )

        now = utc_now()
        if existing:
            choice = await self.optional_repo.update_opt_in(
                existing.id,
                {
                    "status": OptionalHolidayStatus.OPTED.value,
                    "opted_at": now,
                    "cancelled_at": None,
                },
            )
        else:
            choice = await self.optional_repo.create_opt_in(employee_id, holiday_id, year, now)
        logger.info(
            "Employee %s opted for optional holiday %s (%s, %d)",
            employee_id,
            holiday_id,
            holiday.name,
            year,
        )
        return choice

    async def cancel_opt_in(
        self, employee_id: str, holiday_id: str, today: date | None = None
    ) -> OptedHolidayResult:
        holiday = await self._optional_holiday(holiday_id)
        if holiday.date <= (today or utc_now().date()):
            raise BusinessRuleException(
                "Cannot cancel opt-in for past holidays", holiday_id=holiday_id
            )
        existing = await self.optional_repo.find(employee_id, holiday_id)
        if not existing or existing.status != OptionalHolidayStatus.OPTED.value:
            raise BusinessRuleException(
                "Employee has not opted for this holiday",
                employee_id=employee_id,
                holiday_id=holiday_id,
            )
        cancelled = await self.optional_repo.update_opt_in(
            existing.id,
            {"status": OptionalHolidayStatus.CANCELLED.value, "cancelled_at": utc_now()},
        )
        logger.info(
            "Employee %s cancelled optional holiday %s (%s)", employee_id, holiday_id, holiday.name
        )
        return cancelled
