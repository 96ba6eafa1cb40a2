"""Holiday API (tenant-scoped): calendar and optional holiday opt-ins."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import (
    get_current_user_id,
    get_holiday_service,
    get_optional_holiday_service,
)
from app.application.use_cases.holidays import HolidayService, OptionalHolidayService
from app.core.limiter import limit_writes
from app.domain.exceptions import ValidationException
from app.schemas.common import BulkResultResponse
from app.schemas.holiday import (
    HolidayBulkCreateRequest,
    HolidayCreateRequest,
    HolidayResponse,
    HolidayUpdateRequest,
    IsHolidayResponse,
    OptedHolidayResponse,
    OptedHolidaysResponse,
    OptInRequest,
    OptionalHolidayResponse,
)

router = APIRouter()

Service = Annotated[HolidayService, Depends(get_holiday_service)]
OptIns = Annotated[OptionalHolidayService, Depends(get_optional_holiday_service)]
UserId = Annotated[str | None, Depends(get_current_user_id)]


@router.post("", response_model=HolidayResponse, status_code=201)
@limit_writes
async def create_holiday(
    request: Request, body: HolidayCreateRequest, svc: Service, user_id: UserId
):
    return HolidayResponse.model_validate(
        await svc.create_holiday(body.to_input(), performed_by=user_id)
    )


@router.post("/bulk", response_model=BulkResultResponse, status_code=201)
@limit_writes
async def bulk_create_holidays(
    request: Request, body: HolidayBulkCreateRequest, svc: Service, user_id: UserId
):
    """Duplicates and invalid entries are skipped, not fatal."""
    result = await svc.bulk_create_holidays(
        [h.to_input() for h in body.holidays], performed_by=user_id
    )
    return BulkResultResponse(created=result.created, skipped=result.skipped)


@router.post("/recurring/{year}", response_model=BulkResultResponse, status_code=201)
@limit_writes
async def generate_recurring_holidays(
    request: Request, year: int, svc: Service, user_id: UserId
):
    """Copy last year's recurring holidays into year."""
    result = await svc.generate_recurring_holidays(year, performed_by=user_id)
    return BulkResultResponse(created=result.created, skipped=result.skipped)


@router.get("", response_model=list[HolidayResponse])
async def list_holidays(
    svc: Service,
    year: Annotated[int | None, Query(ge=2000, le=2100)] = None,
    type: str | None = None,
):
    return [HolidayResponse.model_validate(h) for h in await svc.list_holidays(year, type)]


@router.get("/range", response_model=list[HolidayResponse])
async def get_holidays_in_range(
    start: date, end: date, svc: Service, department_id: str | None = None
):
    if start > end:
        raise ValidationException("start cannot be after end", field="start")
    holidays = await svc.get_holidays_in_range(start, end, department_id)
    return [HolidayResponse.model_validate(h) for h in holidays]


@router.get("/upcoming", response_model=list[HolidayResponse])
async def get_upcoming_holidays(
    svc: Service,
    limit: Annotated[int, Query(ge=1, le=50)] = 5,
    department_id: str | None = None,
):
    holidays = await svc.get_upcoming_holidays(limit=limit, department_id=department_id)
    return [HolidayResponse.model_validate(h) for h in holidays]


@router.get("/optional", response_model=list[OptionalHolidayResponse])
async def list_optional_holidays(
    employee_id: str,
    svc: OptIns,
    year: Annotated[int | None, Query(ge=2000, le=2100)] = None,
):
    """The year's optional holidays with whether the employee opted in and can still change it."""
    views = await svc.list_optional_holidays(employee_id, year)
    return [OptionalHolidayResponse.model_validate(v) for v in views]


@router.get("/optional/opted", response_model=OptedHolidaysResponse)
async def get_opted_holidays(
    employee_id: str,
    svc: OptIns,
    year: Annotated[int | None, Query(ge=2000, le=2100)] = None,
):
    opted = await svc.get_opted_holidays(employee_id, year)
    return OptedHolidaysResponse(
        quota=svc.quota,
        used=len(opted),
        opted=[OptedHolidayResponse.model_validate(o) for o in opted],
    )


@router.post("/{holiday_id}/opt-in", response_model=OptedHolidayResponse, status_code=201)
@limit_writes
async def opt_in(request: Request, holiday_id: str, body: OptInRequest, svc: OptIns):
    """Only future optional holidays, within the tenant's yearly quota."""
    return OptedHolidayResponse.model_validate(await svc.opt_in(body.employee_id, holiday_id))


@router.delete("/{holiday_id}/opt-in", response_model=OptedHolidayResponse)
@limit_writes
async def cancel_opt_in(request: Request, holiday_id: str, employee_id: str, svc: OptIns):
    return OptedHolidayResponse.model_validate(await svc.cancel_opt_in(employee_id, holiday_id))


@router.get("/check/{day}", response_model=IsHolidayResponse)
async def is_holiday(day: date, svc: Service, department_id: str | None = None):
    return IsHolidayResponse(date=day, is_holiday=await svc.is_holiday(day, department_id))


@router.get("/{holiday_id}", response_model=HolidayResponse)
async def get_holiday(holiday_id: str, svc: Service):
    return HolidayResponse.model_validate(await svc.get_holiday(holiday_id))


@router.patch("/{holiday_id}", response_model=HolidayResponse)
@limit_writes
async def update_holiday(
    request: Request,
    holiday_id: str,
    body: HolidayUpdateRequest,
    svc: Service,
    user_id: UserId,
):
    return HolidayResponse.model_validate(
        await svc.update_holiday(holiday_id, body.changes(), performed_by=user_id)
    )


@router.delete("/{holiday_id}", status_code=204)
@limit_writes
async def delete_holiday(request: Request, holiday_id: str, svc: Service):
    await svc.delete_holiday(holiday_id)
    return Response(status_code=204)
