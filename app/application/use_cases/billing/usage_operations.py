"""Metered usage per tenant and month, plan overage and period invoices."""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal

from app.application.dtos.billing import (
    InvoiceResult,
    LineItemInput,
    TenantUsage,
    UsageAlert,
    UsageRecordResult,
    UsageSummary,
)
from app.application.interfaces.repositories import ITenantRepository, IUsageRepository
from app.application.services.work_calendar import month_bounds
from app.application.use_cases.billing.invoice_operations import InvoiceService, money
from app.domain.enums import BillingCycle
from app.domain.exceptions import (
    BusinessRuleException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.plans import (
    ADDITIONAL_EMPLOYEE,
    ADDITIONAL_STORAGE,
    API_CALLS,
    GB,
    USAGE_METRICS,
    Plan,
    UsageMetric,
    get_plan,
    plan_price,
)
from app.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

ALERT_THRESHOLD_PERCENT = 80


def billing_period(at: datetime | date) -> tuple[date, date]:
    """Calendar month containing at."""
    return month_bounds(at.year, at.month)


def summarize(records: list[UsageRecordResult]) -> list[UsageSummary]:
    """Totals per metric; quantity above the metric's free quota is billable."""
    totals: dict[str, int] = defaultdict(int)
    prices: dict[str, Decimal] = {}
    for record in records:
        totals[record.metric_id] += record.quantity
        prices.setdefault(record.metric_id, record.unit_price)
    summaries = []
    for metric_id, total in totals.items():
        metric = USAGE_METRICS.get(metric_id)
        if metric is None:
            continue
        billable = max(0, total - metric.free_quota)
        summaries.append(
            UsageSummary(
                metric_id=metric_id,
                metric_name=metric.name,
                total_quantity=total,
                free_quota=metric.free_quota,
                billable_quantity=billable,
                unit_price=prices[metric_id],
                amount=money(Decimal(billable) * prices[metric_id]),
            )
        )
    return summaries


class UsageService:
    """Usage recording and usage-based billing (master database)."""

    def __init__(
        self,
        usage_repo: IUsageRepository,
        tenant_repo: ITenantRepository,
        invoice_service: InvoiceService | None = None,
    ) -> None:
        self.usage_repo = usage_repo
        self.tenant_repo = tenant_repo
        self.invoice_service = invoice_service

    async def _plan_for(self, tenant_id: str) -> Plan | None:
        tenant = await self.tenant_repo.get_by_id(tenant_id)
        if not tenant:
            raise ResourceNotFoundException("tenant", tenant_id)
        plan = get_plan(tenant.plan)
        if plan is None:
            logger.warning("Tenant %s is on unknown plan %s", tenant_id, tenant.plan)
        return plan

    @staticmethod
    def _metric(metric_id: str) -> UsageMetric:
        metric = USAGE_METRICS.get(metric_id)
        if metric is None:
            raise ValidationException(f"Unknown usage metric: {metric_id}", field="metric_id")
        return metric

    async def record_usage(
        self,
        tenant_id: str,
        metric_id: str,
        quantity: int = 1,
        at: datetime | None = None,
    ) -> UsageRecordResult:
        """Add quantity to the tenant's row for the month containing at (now by default)."""
        metric = self._metric(metric_id)
        if quantity <= 0:
            raise ValidationException("Usage quantity must be positive", field="quantity")
        start, end = billing_period(at or utc_now())
        record = await self.usage_repo.add_quantity(
            tenant_id, metric_id, start, end, quantity, metric.unit_price
        )
        logger.debug("Usage recorded: tenant=%s %s +%d", tenant_id, metric_id, quantity)
        return record

    async def _set_overage(
        self, tenant_id: str, metric_id: str, overage: int
    ) -> UsageRecordResult:
        metric = self._metric(metric_id)
        start, end = billing_period(utc_now())
        return await self.usage_repo.set_quantity(
            tenant_id, metric_id, start, end, overage, metric.unit_price
        )

    async def update_employee_usage(
        self, tenant_id: str, active_employees: int
    ) -> UsageRecordResult | None:
        """Record head count above the plan's employee limit for this month."""
        plan = await self._plan_for(tenant_id)
        if plan is None:
            return None
        limit = plan.limits.max_employees
        if limit <= 0 or active_employees <= limit:
            return None
        return await self._set_overage(tenant_id, ADDITIONAL_EMPLOYEE, active_employees - limit)

    async def update_storage_usage(
        self, tenant_id: str, storage_bytes: int
    ) -> UsageRecordResult | None:
        """Record storage above the plan's limit for this month, in whole GB rounded up."""
        plan = await self._plan_for(tenant_id)
        if plan is None or storage_bytes <= plan.limits.max_storage_bytes:
            return None
        overage_gb = math.ceil((storage_bytes - plan.limits.max_storage_bytes) / GB)
        return await self._set_overage(tenant_id, ADDITIONAL_STORAGE, overage_gb)

    async def get_usage_for_period(self, tenant_id: str, year: int, month: int) -> TenantUsage:
        if not 1 <= month <= 12:
            raise ValidationException("Month must be between 1 and 12", field="month")
        start, end = month_bounds(year, month)
        metrics = summarize(await self.usage_repo.list_for_period(tenant_id, start, end))
        return TenantUsage(
            tenant_id=tenant_id,
            period_start=start,
            period_end=end,
            metrics=metrics,
            total_amount=money(sum((m.amount for m in metrics), Decimal("0"))),
        )

    async def get_current_usage(self, tenant_id: str) -> TenantUsage:
        now = utc_now()
        return await self.get_usage_for_period(tenant_id, now.year, now.month)

    async def get_usage_alerts(self, tenant_id: str) -> list[UsageAlert]:
        """Metrics at or above 80% of what the plan includes this month."""
        plan = await self._plan_for(tenant_id)
        if plan is None:
            return []
        limits = {
            ADDITIONAL_EMPLOYEE: plan.limits.max_employees,
            ADDITIONAL_STORAGE: plan.limits.max_storage_bytes // GB,
            API_CALLS: USAGE_METRICS[API_CALLS].free_quota,
        }
        usage = await self.get_current_usage(tenant_id)
        alerts = []
        for summary in usage.metrics:
            limit = limits.get(summary.metric_id, 0)
            if limit <= 0:
                continue
            percentage = summary.total_quantity / limit * 100
            if percentage >= ALERT_THRESHOLD_PERCENT:
                alerts.append(
                    UsageAlert(
                        metric_id=summary.metric_id,
                        usage=summary.total_quantity,
                        limit=limit,
                        percentage=min(100, round(percentage)),
                    )
                )
        return alerts

    async def mark_usage_as_invoiced(
        self, tenant_id: str, year: int, month: int, invoice_id: str
    ) -> int:
        start, _ = month_bounds(year, month)
        count = await self.usage_repo.mark_invoiced(tenant_id, start, invoice_id, utc_now())
        logger.info(
            "Usage marked invoiced: tenant=%s %d-%02d invoice=%s (%d rows)",
            tenant_id,
            year,
            month,
            invoice_id,
            count,
        )
        return count

    async def invoice_period(
        self,
        tenant_id: str,
        year: int,
        month: int,
        billing_cycle: BillingCycle = BillingCycle.MONTHLY,
    ) -> InvoiceResult:
        """Invoice the plan price plus the month's billable usage, then flag the usage."""
        if self.invoice_service is None:
            raise BusinessRuleException("Invoicing is not configured for usage billing")
        if not 1 <= month <= 12:
            raise ValidationException("Month must be between 1 and 12", field="month")
        plan = await self._plan_for(tenant_id)
        if plan is None:
            raise BusinessRuleException("Tenant has no billable plan", tenant_id=tenant_id)
        start, end = month_bounds(year, month)
        records = await self.usage_repo.list_for_period(tenant_id, start, end)
        if any(r.invoiced for r in records):
            raise BusinessRuleException(
                f"Usage for {year}-{month:02d} is already invoiced", tenant_id=tenant_id
            )

        plan_end = end
        if billing_cycle == BillingCycle.YEARLY:
            plan_end = start.replace(year=start.year + 1) - timedelta(days=1)
        lines = [
            LineItemInput(
                description=f"{plan.name} plan ({billing_cycle.value.lower()})",
                quantity=Decimal("1"),
                unit_price=plan_price(plan, billing_cycle),
                period_start=start,
                period_end=plan_end,
            )
        ]
        lines.extend(
            LineItemInput(
                description=f"{s.metric_name}: {s.billable_quantity} billable",
                quantity=Decimal(s.billable_quantity),
                unit_price=s.unit_price,
                period_start=start,
                period_end=end,
            )
            for s in summarize(records)
            if s.billable_quantity > 0
        )
        invoice = await self.invoice_service.create_invoice(
            tenant_id,
            lines,
            metadata={
                "plan": plan.id,
                "billingCycle": billing_cycle.value,
                "period": f"{year}-{month:02d}",
            },
        )
        await self.mark_usage_as_invoiced(tenant_id, year, month, invoice.id)
        return invoice
