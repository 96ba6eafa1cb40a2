"""Plan catalog (public, no tenant header)."""

from fastapi import APIRouter

from app.domain.exceptions import ResourceNotFoundException
from app.domain.plans import PLANS, compare_plans, get_plan
from app.schemas.plan import PlanComparisonResponse, PlanResponse

router = APIRouter()


def _require(plan_id: str):
    plan = get_plan(plan_id)
    if plan is None:
        raise ResourceNotFoundException("plan", plan_id)
    return plan


@router.get("", response_model=list[PlanResponse])
async def list_plans():
    return [PlanResponse.from_plan(p) for p in PLANS.values()]


@router.get("/compare", response_model=PlanComparisonResponse)
async def compare(current: str, target: str):
    """upgrade or downgrade by monthly price."""
    _require(current)
    _require(target)
    return PlanComparisonResponse(
        current=current, target=target, change=compare_plans(current, target)
    )


@router.get("/{plan_id}", response_model=PlanResponse)
async def get_plan_by_id(plan_id: str):
    return PlanResponse.from_plan(_require(plan_id))
