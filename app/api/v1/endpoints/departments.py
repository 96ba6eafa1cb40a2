"""Department API (tenant-scoped)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import get_current_user_id, get_department_service
from app.application.use_cases.employees import DepartmentService
from app.core.limiter import limit_writes
from app.schemas.employee import (
    DepartmentCreateRequest,
    DepartmentResponse,
    DepartmentUpdateRequest,
)

router = APIRouter()

Service = Annotated[DepartmentService, Depends(get_department_service)]
UserId = Annotated[str | None, Depends(get_current_user_id)]


@router.post("", response_model=DepartmentResponse, status_code=201)
@limit_writes
async def create_department(
    request: Request, body: DepartmentCreateRequest, svc: Service, user_id: UserId
):
    department = await svc.create_department(**body.model_dump(), performed_by=user_id)
    return DepartmentResponse.model_validate(department)


@router.get("", response_model=list[DepartmentResponse])
async def list_departments(svc: Service, include_inactive: bool = False):
    departments = await svc.list_departments(include_inactive=include_inactive)
    return [DepartmentResponse.model_validate(d) for d in departments]


@router.get("/{department_id}", response_model=DepartmentResponse)
async def get_department(department_id: str, svc: Service):
    return DepartmentResponse.model_validate(await svc.get_department(department_id))


@router.patch("/{department_id}", response_model=DepartmentResponse)
@limit_writes
async def update_department(
    request: Request,
    department_id: str,
    body: DepartmentUpdateRequest,
    svc: Service,
    user_id: UserId,
):
    department = await svc.update_department(department_id, body.changes(), performed_by=user_id)
    return DepartmentResponse.model_validate(department)


@router.post("/{department_id}/deactivate", response_model=DepartmentResponse)
@limit_writes
async def deactivate_department(
    request: Request, department_id: str, svc: Service, user_id: UserId
):
    """Refused while active employees belong to the department."""
    department = await svc.deactivate_department(department_id, performed_by=user_id)
    return DepartmentResponse.model_validate(department)
