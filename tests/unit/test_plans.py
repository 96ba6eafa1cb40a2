"""Plan catalog: features, comparison, prices."""

from decimal import Decimal

import pytest

from app.domain.enums import BillingCycle, PlanChange
from app.domain.plans import (
    PLANS,
    compare_plans,
    get_plan,
    plan_has_feature,
    plan_price,
    yearly_savings,
)


def test_catalog_order_and_lookup() -> None:
    assert list(PLANS) == ["starter", "professional", "enterprise"]
    assert get_plan("professional").limits.max_employees == 50
    assert get_plan("gold") is None


@pytest.mark.parametrize(
    ("plan_id", "feature", "expected"),
    [
        ("starter", "api_access", False),
        ("professional", "api_access", True),
        ("enterprise", "max_employees", True),
        ("starter", "max_projects", True),
        ("starter", "no_such_feature", False),
        ("gold", "api_access", False),
    ],
)
def test_plan_has_feature(plan_id: str, feature: str, expected: bool) -> None:
    assert plan_has_feature(plan_id, feature) is expected


def test_compare_plans_by_monthly_price() -> None:
    assert compare_plans("starter", "enterprise") == PlanChange.UPGRADE
    assert compare_plans("enterprise", "professional") == PlanChange.DOWNGRADE
    assert compare_plans("starter", "starter") == PlanChange.SAME
    assert compare_plans("starter", "gold") == PlanChange.SAME


def test_price_for_billing_cycle() -> None:
    starter = PLANS["starter"]

    assert plan_price(starter, BillingCycle.MONTHLY) == Decimal("29")
    assert plan_price(starter, BillingCycle.YEARLY) == Decimal("290")


def test_yearly_savings_percent() -> None:
    assert yearly_savings(PLANS["starter"]) == 17
    assert yearly_savings(PLANS["enterprise"]) == 17
