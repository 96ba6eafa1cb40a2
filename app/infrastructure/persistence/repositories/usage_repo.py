"""Monthly usage repository (master database). Returns DTOs."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.billing import UsageRecordResult
from app.infrastructure.persistence.models.usage import UsageRecord
from app.infrastructure.persistence.repositories.base import BaseRepository


def _usage_to_result(u: UsageRecord) -> UsageRecordResult:
    return UsageRecordResult(
        id=u.id,
        tenant_id=u.tenant_id,
        metric_id=u.metric_id,
        quantity=int(u.quantity),
        period_start=u.period_start,
        period_end=u.period_end,
        unit_price=Decimal(u.unit_price),
        invoiced=u.invoiced,
        invoice_id=u.invoice_id,
        invoiced_at=u.invoiced_at,
    )


class UsageRepository(BaseRepository[UsageRecord]):
    """One row per (tenant, metric, month)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, UsageRecord)

    async def _row(self, tenant_id: str, metric_id: str, period_start: date) -> UsageRecord | None:
        result = await self.db.execute(
            select(UsageRecord)
            .where(
                UsageRecord.tenant_id == tenant_id,
                UsageRecord.metric_id == metric_id,
                UsageRecord.period_start == period_start,
            )
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def _write(
        self,
        tenant_id: str,
        metric_id: str,
        period_start: date,
        period_end: date,
        quantity: int,
        unit_price: Decimal,
        *,
        accumulate: bool,
    ) -> UsageRecordResult:
        row = await self._row(tenant_id, metric_id, period_start)
        if row is None:
            row = UsageRecord(
                tenant_id=tenant_id,
                metric_id=metric_id,
                quantity=quantity,
                period_start=period_start,
                period_end=period_end,
                unit_price=unit_price,
                invoiced=False,
            )
            return _usage_to_result(await self._add(row))
        row.quantity = (row.quantity + quantity) if accumulate else quantity
        await self.db.flush()
        return _usage_to_result(row)

    async def add_quantity(
        self,
        tenant_id: str,
        metric_id: str,
        period_start: date,
        period_end: date,
        quantity: int,
        unit_price: Decimal,
    ) -> UsageRecordResult:
        return await self._write(
            tenant_id, metric_id, period_start, period_end, quantity, unit_price, accumulate=True
        )

    async def set_quantity(
        self,
        tenant_id: str,
        metric_id: str,
        period_start: date,
        period_end: date,
        quantity: int,
        unit_price: Decimal,
    ) -> UsageRecordResult:
        return await self._write(
            tenant_id, metric_id, period_start, period_end, quantity, unit_price, accumulate=False
        )

    async def list_for_period(
        self, tenant_id: str, period_start: date, period_end: date
    ) -> list[UsageRecordResult]:
        result = await self.db.execute(
            select(UsageRecord)
            .where(
                UsageRecord.tenant_id == tenant_id,
                UsageRecord.period_start >= period_start,
                UsageRecord.period_end <= period_end,
            )
            .order_by(UsageRecord.period_start, UsageRecord.metric_id)
        )
        return [_usage_to_result(u) for u in result.scalars().all()]

    async def mark_invoiced(
        self, tenant_id: str, period_start: date, invoice_id: str, invoiced_at: datetime
    ) -> int:
        result = await self.db.execute(
            update(UsageRecord)
            .where(
                UsageRecord.tenant_id == tenant_id,
                UsageRecord.period_start == period_start,
                UsageRecord.invoiced.is_(False),
            )
            .values(invoiced=True, invoice_id=invoice_id, invoiced_at=invoiced_at)
        )
        return result.rowcount or 0
