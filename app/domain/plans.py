"""Subscription plans and metered usage prices.

The catalog is static: a tenant's ``plan`` column names one of PLANS.
A limit of -1 means unlimited.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from app.domain.enums import BillingCycle, PlanChange

GB = 1024**3
UNLIMITED = -1


@dataclass(frozen=True)
class PlanLimits:
    max_employees: int
    max_projects: int
    max_storage_bytes: int
    custom_domain: bool = False
    sso_enabled: bool = False
    advanced_reports: bool = False
    api_access: bool = False
    priority_support: bool = False


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    monthly_price: Decimal
    yearly_price: Decimal
    limits: PlanLimits


@dataclass(frozen=True)
class UsageMetric:
    """Metered line billed per unit above free_quota."""

    id: str
    name: str
    unit_price: Decimal
    free_quota: int = 0


PLANS: dict[str, Plan] = {
    plan.id: plan
    for plan in (
        Plan(
            id="starter",
            name="Starter",
            monthly_price=Decimal("29"),
            yearly_price=Decimal("290"),
            limits=PlanLimits(max_employees=10, max_projects=5, max_storage_bytes=5 * GB),
        ),
        Plan(
            id="professional",
            name="Professional",
            monthly_price=Decimal("79"),
            yearly_price=Decimal("790"),
            limits=PlanLimits(
                max_employees=50,
                max_projects=25,
                max_storage_bytes=25 * GB,
                advanced_reports=True,
                api_access=True,
            ),
        ),
        Plan(
            id="enterprise",
            name="Enterprise",
            monthly_price=Decimal("199"),
            yearly_price=Decimal("1990"),
            limits=PlanLimits(
                max_employees=UNLIMITED,
                max_projects=UNLIMITED,
                max_storage_bytes=100 * GB,
                custom_domain=True,
                sso_enabled=True,
                advanced_reports=True,
                api_access=True,
                priority_support=True,
            ),
        ),
    )
}

ADDITIONAL_EMPLOYEE = "additional_employee"
ADDITIONAL_STORAGE = "additional_storage"
API_CALLS = "api_calls"

USAGE_METRICS: dict[str, UsageMetric] = {
    ADDITIONAL_EMPLOYEE: UsageMetric(ADDITIONAL_EMPLOYEE, "Additional Employee", Decimal("5")),
    ADDITIONAL_STORAGE: UsageMetric(ADDITIONAL_STORAGE, "Additional Storage (GB)", Decimal("0.1")),
    API_CALLS: UsageMetric(API_CALLS, "API Calls", Decimal("0.001"), free_quota=10000),
}


def get_plan(plan_id: str) -> Plan | None:
    return PLANS.get(plan_id)


def plan_has_feature(plan_id: str, feature: str) -> bool:
    """Boolean flags as stored; numeric limits count unless they are 0."""
    plan = PLANS.get(plan_id)
    if plan is None:
        return False
    value = getattr(plan.limits, feature, None)
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return False


def compare_plans(current: str, target: str) -> PlanChange:
    current_plan, target_plan = PLANS.get(current), PLANS.get(target)
    if current_plan is None or target_plan is None:
        return PlanChange.SAME
    if target_plan.monthly_price > current_plan.monthly_price:
        return PlanChange.UPGRADE
    if target_plan.monthly_price < current_plan.monthly_price:
        return PlanChange.DOWNGRADE
    return PlanChange.SAME


def plan_price(plan: Plan, cycle: BillingCycle) -> Decimal:
    return plan.yearly_price if cycle == BillingCycle.YEARLY else plan.monthly_price


def yearly_savings(plan: Plan) -> int:
    """Percent saved by paying yearly instead of twelve monthly payments."""
    full = plan.monthly_price * 12
    if full <= 0:
        return 0
    saved = (full - plan.yearly_price) / full * 100
    return int(saved.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
