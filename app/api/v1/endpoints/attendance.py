"""Attendance API (tenant-scoped): check-in/out, breaks, queries and summaries."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from app.api.v1.dependencies import get_attendance_service
from app.application.dtos.attendance import AttendanceFilters
from app.application.use_cases.attendance import AttendanceService
from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.limiter import limit_writes
from app.schemas.attendance import (
    AttendanceResponse,
    BreakResponse,
    BreakStartRequest,
    CheckInRequest,
    CheckOutRequest,
    DepartmentDailySummaryResponse,
    MonthlySummaryResponse,
)
from app.schemas.common import PageResponse

router = APIRouter()

Service = Annotated[AttendanceService, Depends(get_attendance_service)]


@router.post("/check-in", response_model=AttendanceResponse, status_code=201)
@limit_writes
async def check_in(request: Request, body: CheckInRequest, svc: Service):
    """One check-in per employee per day; lateness is judged against the work start time."""
    attendance = await svc.check_in(
        body.employee_id, location=body.location, work_mode=body.work_mode, notes=body.notes
    )
    return AttendanceResponse.model_validate(attendance)


@router.post("/check-out", response_model=AttendanceResponse)
@limit_writes
async def check_out(request: Request, body: CheckOutRequest, svc: Service):
    attendance = await svc.check_out(body.employee_id, location=body.location, notes=body.notes)
    return AttendanceResponse.model_validate(attendance)


@router.post("/{attendance_id}/breaks", response_model=BreakResponse, status_code=201)
@limit_writes
async def start_break(
    request: Request, attendance_id: str, body: BreakStartRequest, svc: Service
):
    return BreakResponse.model_validate(await svc.start_break(attendance_id, body.break_type))


@router.post("/breaks/{break_id}/end", response_model=BreakResponse)
@limit_writes
async def end_break(request: Request, break_id: str, svc: Service):
    return BreakResponse.model_validate(await svc.end_break(break_id))


@router.get("", response_model=PageResponse[AttendanceResponse])
async def list_attendance(
    svc: Service,
    employee_id: str | None = None,
    department_id: str | None = None,
    status: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
):
    filters = AttendanceFilters(
        employee_id=employee_id,
        department_id=department_id,
        status=status,
        date_from=date_from,
        date_to=date_to,
        page=page,
        page_size=page_size,
    )
    result = await svc.list_attendance(filters)
    return PageResponse[AttendanceResponse].from_page(result, AttendanceResponse.model_validate)


@router.get("/today/{employee_id}", response_model=AttendanceResponse | None)
async def get_today(employee_id: str, svc: Service):
    """Today's record in the office time zone; 204 when the employee has none yet."""
    attendance = await svc.get_today(employee_id)
    if attendance is None:
        return Response(status_code=204)
    return AttendanceResponse.model_validate(attendance)


@router.get("/summary/monthly/{employee_id}", response_model=MonthlySummaryResponse)
async def get_monthly_summary(
    employee_id: str,
    svc: Service,
    year: Annotated[int, Query(ge=2000, le=2100)],
    month: Annotated[int, Query(ge=1, le=12)],
):
    return MonthlySummaryResponse.model_validate(
        await svc.get_monthly_summary(employee_id, year, month)
    )


@router.get("/summary/department/{department_id}", response_model=DepartmentDailySummaryResponse)
async def get_department_daily_summary(department_id: str, day: date, svc: Service):
    return DepartmentDailySummaryResponse.model_validate(
        await svc.get_department_daily_summary(department_id, day)
    )


@router.get("/{attendance_id}", response_model=AttendanceResponse)
async def get_attendance(attendance_id: str, svc: Service):
    return AttendanceResponse.model_validate(await svc.get_attendance(attendance_id))


@router.get("/{attendance_id}/breaks", response_model=list[BreakResponse])
async def list_breaks(attendance_id: str, svc: Service):
    return [BreakResponse.model_validate(b) for b in await svc.list_breaks(attendance_id)]
