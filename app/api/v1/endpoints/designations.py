"""Designation API (tenant-scoped)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import get_current_user_id, get_designation_service
from app.application.use_cases.employees import DesignationService
from app.core.limiter import limit_writes
from app.schemas.employee import (
    DesignationCreateRequest,
    DesignationResponse,
    DesignationUpdateRequest,
)

router = APIRouter()

Service = Annotated[DesignationService, Depends(get_designation_service)]
UserId = Annotated[str | None, Depends(get_current_user_id)]


@router.post("", response_model=DesignationResponse, status_code=201)
@limit_writes
async def create_designation(
    request: Request, body: DesignationCreateRequest, svc: Service, user_id: UserId
):
    designation = await svc.create_designation(**body.model_dump(), performed_by=user_id)
    return DesignationResponse.model_validate(designation)


@router.get("", response_model=list[DesignationResponse])
async def list_designations(svc: Service, include_inactive: bool = False):
    designations = await svc.list_designations(include_inactive=include_inactive)
    return [DesignationResponse.model_validate(d) for d in designations]


@router.get("/{designation_id}", response_model=DesignationResponse)
async def get_designation(designation_id: str, svc: Service):
    return DesignationResponse.model_validate(await svc.get_designation(designation_id))


@router.patch("/{designation_id}", response_model=DesignationResponse)
@limit_writes
async def update_designation(
    request: Request,
    designation_id: str,
    body: DesignationUpdateRequest,
    svc: Service,
    user_id: UserId,
):
    designation = await svc.update_designation(
        designation_id, body.changes(), performed_by=user_id
    )
    return DesignationResponse.model_validate(designation)
