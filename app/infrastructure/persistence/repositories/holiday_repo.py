"""Holiday repository (tenant database) with an optional per-year cache."""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import extract, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.holiday import HolidayInput, HolidayResult
from app.core.constants import HOLIDAY_CACHE_TTL
from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.cache.keys import holiday_pattern, holiday_year_key
from app.infrastructure.persistence.models.holiday import Holiday
from app.infrastructure.persistence.repositories.base import BaseRepository


def _holiday_to_result(h: Holiday) -> HolidayResult:
    return HolidayResult(
        id=h.id,
        name=h.name,
        date=h.date,
        type=h.type,
        description=h.description,
        is_recurring=h.is_recurring,
        applies_to_all=h.applies_to_all,
        department_ids=list(h.department_ids or []),
    )


def _holiday_to_dict(h: HolidayResult) -> dict[str, Any]:
    return {
        "id": h.id,
        "name": h.name,
        "date": h.date.isoformat(),
        "type": h.type,
        "description": h.description,
        "is_recurring": h.is_recurring,
        "applies_to_all": h.applies_to_all,
        "department_ids": list(h.department_ids),
    }


def _holiday_from_cached(cached: dict[str, Any]) -> HolidayResult:
    return HolidayResult(**{**cached, "date": date.fromisoformat(cached["date"])})


class HolidayRepository(BaseRepository[Holiday]):
    """Holidays of one tenant.

    When a cache and tenant_slug are given, whole years are cached under
    holiday_year_key(tenant_slug, year); every write drops the tenant's keys.
    """

    def __init__(
        self,
        db: AsyncSession,
        cache_service: CacheProtocol | None = None,
        *,
        tenant_slug: str | None = None,
        cache_ttl: int = HOLIDAY_CACHE_TTL,
    ) -> None:
        super().__init__(db, Holiday)
        self.cache = cache_service
        self.tenant_slug = tenant_slug
        self.cache_ttl = cache_ttl

    def _cache_on(self) -> bool:
        return (
            self.cache is not None
            and self.tenant_slug is not None
            and self.cache.is_available()
        )

    async def _invalidate(self) -> None:
        if self._cache_on():
            await self.cache.delete_pattern(holiday_pattern(self.tenant_slug))

    async def _year(self, year: int) -> list[HolidayResult]:
        if self._cache_on():
            cached = await self.cache.get(holiday_year_key(self.tenant_slug, year))
            if cached is not None:
                return [_holiday_from_cached(c) for c in cached]
        result = await self.db.execute(
            select(Holiday)
            .where(extract("year", Holiday.date) == year)
            .order_by(Holiday.date, Holiday.name)
        )
        holidays = [_holiday_to_result(h) for h in result.scalars().all()]
        if self._cache_on():
            await self.cache.set(
                holiday_year_key(self.tenant_slug, year),
                [_holiday_to_dict(h) for h in holidays],
                ttl=self.cache_ttl,
            )
        return holidays

    async def get_by_id(self, holiday_id: str) -> HolidayResult | None:
        holiday = await self._get(holiday_id)
        return _holiday_to_result(holiday) if holiday else None

    async def find_by_name_and_date(self, name: str, day: date) -> HolidayResult | None:
        result = await self.db.execute(
            select(Holiday).where(Holiday.name == name, Holiday.date == day)
        )
        holiday = result.scalar_one_or_none()
        return _holiday_to_result(holiday) if holiday else None

    async def create_holiday(
        self, data: HolidayInput, performed_by: str | None = None
    ) -> HolidayResult:
        holiday = Holiday(
            name=data.name,
            date=data.date,
            type=data.type,
            description=data.description,
            is_recurring=data.is_recurring,
            applies_to_all=data.applies_to_all,
            department_ids=[] if data.applies_to_all else list(data.department_ids),
            created_by=performed_by,
            updated_by=performed_by,
        )
        created = _holiday_to_result(await self._add(holiday))
        await self._invalidate()
        return created

    async def update_holiday(
        self, holiday_id: str, changes: dict[str, Any], performed_by: str | None = None
    ) -> HolidayResult | None:
        holiday = await self._get(holiday_id)
        if holiday is None:
            return None
        updated = await self._apply_changes(holiday, {**changes, "updated_by": performed_by})
        await self._invalidate()
        return _holiday_to_result(updated)

    async def delete_holiday(self, holiday_id: str) -> bool:
        holiday = await self._get(holiday_id)
        if holiday is None:
            return False
        await self._delete(holiday)
        await self._invalidate()
        return True

    async def list_holidays(
        self, year: int | None = None, holiday_type: str | None = None
    ) -> list[HolidayResult]:
        if year is not None:
            holidays = await self._year(year)
        else:
            result = await self.db.execute(select(Holiday).order_by(Holiday.date, Holiday.name))
            holidays = [_holiday_to_result(h) for h in result.scalars().all()]
        if holiday_type:
            holidays = [h for h in holidays if h.type == holiday_type]
        return holidays

    async def list_in_range(self, start: date, end: date) -> list[HolidayResult]:
        """Holidays in [start, end], ordered by date. Served from the year lists."""
        found: list[HolidayResult] = []
        for year in range(start.year, end.year + 1):
            found.extend(h for h in await self._year(year) if start <= h.date <= end)
        return found
