"""Employee API (tenant-scoped): thin routes delegating to EmployeeService."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import get_current_user_id, get_employee_service
from app.application.dtos.employee import EmployeeFilters
from app.application.use_cases.employees import EmployeeService
from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.limiter import limit_writes
from app.schemas.common import PageResponse
from app.schemas.employee import (
    EmployeeOffboardRequest,
    EmployeeOnboardRequest,
    EmployeeResponse,
    EmployeeStatsResponse,
    EmployeeUpdateRequest,
)

router = APIRouter()

Service = Annotated[EmployeeService, Depends(get_employee_service)]
UserId = Annotated[str | None, Depends(get_current_user_id)]


@router.post("", response_model=EmployeeResponse, status_code=201)
@limit_writes
async def onboard_employee(
    request: Request, body: EmployeeOnboardRequest, svc: Service, user_id: UserId
):
    """Create the user account and employee record; the code is generated when omitted."""
    employee = await svc.onboard_employee(body.to_input(), performed_by=user_id)
    return EmployeeResponse.model_validate(employee)


@router.get("", response_model=PageResponse[EmployeeResponse])
async def list_employees(
    svc: Service,
    search: str | None = None,
    department_id: str | None = None,
    designation_id: str | None = None,
    employment_type: str | None = None,
    work_location: str | None = None,
    status: str | None = None,
    reporting_to_id: str | None = None,
    joining_date_from: date | None = None,
    joining_date_to: date | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
):
    filters = EmployeeFilters(
        search=search,
        department_id=department_id,
        designation_id=designation_id,
        employment_type=employment_type,
        work_location=work_location,
        status=status,
        reporting_to_id=reporting_to_id,
        joining_date_from=joining_date_from,
        joining_date_to=joining_date_to,
        page=page,
        page_size=page_size,
    )
    result = await svc.list_employees(filters)
    return PageResponse[EmployeeResponse].from_page(result, EmployeeResponse.model_validate)


@router.get("/stats", response_model=EmployeeStatsResponse)
async def get_employee_stats(svc: Service):
    return EmployeeStatsResponse.model_validate(await svc.get_employee_stats())


@router.get("/by-user/{user_id}", response_model=EmployeeResponse)
async def get_employee_by_user(user_id: str, svc: Service):
    return EmployeeResponse.model_validate(await svc.get_employee_by_user(user_id))


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(employee_id: str, svc: Service):
    return EmployeeResponse.model_validate(await svc.get_employee(employee_id))


@router.patch("/{employee_id}", response_model=EmployeeResponse)
@limit_writes
async def update_employee(
    request: Request,
    employee_id: str,
    body: EmployeeUpdateRequest,
    svc: Service,
    user_id: UserId,
):
    employee = await svc.update_employee(employee_id, body.changes(), performed_by=user_id)
    return EmployeeResponse.model_validate(employee)


@router.post("/{employee_id}/offboard", response_model=EmployeeResponse)
@limit_writes
async def offboard_employee(
    request: Request,
    employee_id: str,
    body: EmployeeOffboardRequest,
    svc: Service,
    user_id: UserId,
):
    """Refused while the employee still has active direct reports."""
    employee = await svc.offboard_employee(employee_id, body.to_input(), performed_by=user_id)
    return EmployeeResponse.model_validate(employee)


@router.get("/{employee_id}/direct-reports", response_model=list[EmployeeResponse])
async def get_direct_reports(employee_id: str, svc: Service):
    return [EmployeeResponse.model_validate(e) for e in await svc.get_direct_reports(employee_id)]


@router.get("/{employee_id}/reporting-chain", response_model=list[EmployeeResponse])
async def get_reporting_chain(employee_id: str, svc: Service):
    """Managers from the direct manager upwards."""
    return [EmployeeResponse.model_validate(e) for e in await svc.get_reporting_chain(employee_id)]
