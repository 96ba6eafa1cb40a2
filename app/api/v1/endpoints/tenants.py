"""Tenant API (platform administration, master database): thin routes delegating to TenantService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import get_tenant_service
from app.application.use_cases.tenants import TenantService
from app.core.limiter import limit_provision, limit_writes
from app.domain.enums import TenantStatus
from app.schemas.tenant import (
    TenantProvisionRequest,
    TenantProvisionResponse,
    TenantResponse,
    TenantPlanUpdate,
    TenantStatusUpdate,
)

router = APIRouter()

Service = Annotated[TenantService, Depends(get_tenant_service)]


@router.post("", response_model=TenantProvisionResponse, status_code=201)
@limit_provision
async def provision_tenant(request: Request, body: TenantProvisionRequest, svc: Service):
    """Create the tenant database, seed it (roles, departments, designations, admin) and register it as TRIAL."""
    result = await svc.provision_tenant(body.slug, body.name, body.admin.to_input(), plan=body.plan)
    return TenantProvisionResponse.model_validate(result)


@router.get("", response_model=list[TenantResponse])
async def list_tenants(
    svc: Service,
    status: TenantStatus | None = None,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
):
    tenants = await svc.list_tenants(status=status, skip=skip, limit=limit)
    return [TenantResponse.model_validate(t) for t in tenants]


@router.get("/by-slug/{slug}", response_model=TenantResponse)
async def get_tenant_by_slug(slug: str, svc: Service):
    return TenantResponse.model_validate(await svc.get_tenant_by_slug(slug))


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(tenant_id: str, svc: Service):
    return TenantResponse.model_validate(await svc.get_tenant(tenant_id))


@router.patch("/{tenant_id}/status", response_model=TenantResponse)
@limit_writes
async def update_tenant_status(
    request: Request, tenant_id: str, body: TenantStatusUpdate, svc: Service
):
    """Change status; SUSPENDED and TERMINATED tenants are refused by the tenant middleware."""
    return TenantResponse.model_validate(await svc.update_status(tenant_id, body.status))


@router.patch("/{tenant_id}/plan", response_model=TenantResponse)
@limit_writes
async def change_tenant_plan(
    request: Request, tenant_id: str, body: TenantPlanUpdate, svc: Service
):
    """Switch to another catalog plan (see GET /plans)."""
    return TenantResponse.model_validate(await svc.change_plan(tenant_id, body.plan))
