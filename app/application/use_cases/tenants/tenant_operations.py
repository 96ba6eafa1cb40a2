"""Platform administration of tenants: provision, inspect, change status and plan."""

from __future__ import annotations

import logging

from app.application.dtos.tenant import TenantAdminInput, TenantInfo, TenantProvisionResult
from app.application.interfaces.repositories import ITenantRepository
from app.application.interfaces.services import IEventPublisher, ITenantProvisioner
from app.application.services.event_emitter import EventEmitter
from app.domain.enums import TenantStatus
from app.domain.events import Queue, Topic
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.domain.plans import PLANS, compare_plans, get_plan

logger = logging.getLogger(__name__)


def _require_plan(plan: str) -> None:
    if get_plan(plan) is None:
        raise ValidationException(
            f"Unknown plan: {plan} (expected one of {', '.join(PLANS)})", field="plan"
        )


class TenantService:
    """Tenant registry operations (master database)."""

    def __init__(
        self,
        tenant_repo: ITenantRepository,
        provisioner: ITenantProvisioner,
        publisher: IEventPublisher | None = None,
    ) -> None:
        self.tenant_repo = tenant_repo
        self.provisioner = provisioner
        self.events = EventEmitter(publisher)

    async def provision_tenant(
        self,
        slug: str,
        name: str,
        admin: TenantAdminInput,
        plan: str = "starter",
    ) -> TenantProvisionResult:
        """Create the tenant database with seed data and register the tenant (TRIAL)."""
        slug = slug.strip().lower()
        if not name.strip():
            raise ValidationException("Tenant name is required", field="name")
        _require_plan(plan)
        result = await self.provisioner.provision_tenant(
            slug, name.strip(), admin, plan=plan, status=TenantStatus.TRIAL
        )
        payload = {
            "tenantId": result.tenant_id,
            "tenantSlug": result.slug,
            "databaseName": result.database_name,
            "adminEmail": result.admin_email,
            "adminEmployeeCode": result.admin_employee_code,
            "plan": plan,
        }
        await self.events.to_topic(Topic.TENANT_EVENTS, "tenant.created", payload)
        await self.events.to_queue(Queue.TENANT_PROVISIONED, "tenant.provisioned", payload)
        return result

    async def get_tenant(self, tenant_id: str) -> TenantInfo:
        tenant = await self.tenant_repo.get_by_id(tenant_id)
        if not tenant:
            raise ResourceNotFoundException("tenant", tenant_id)
        return tenant

    async def get_tenant_by_slug(self, slug: str) -> TenantInfo:
        tenant = await self.tenant_repo.get_by_slug(slug)
        if not tenant:
            raise ResourceNotFoundException("tenant", slug)
        return tenant

    async def list_tenants(
        self, status: TenantStatus | None = None, skip: int = 0, limit: int = 100
    ) -> list[TenantInfo]:
        return await self.tenant_repo.list_tenants(
            status=status, skip=max(0, skip), limit=min(max(1, limit), 500)
        )

    async def update_status(self, tenant_id: str, status: TenantStatus) -> TenantInfo:
        """Change tenant status; cached clients and lookups are dropped."""
        current = await self.get_tenant(tenant_id)
        if current.status == status:
            return current
        updated = await self.tenant_repo.update_status(tenant_id, status)
        if not updated:
            raise ResourceNotFoundException("tenant", tenant_id)
        await self.provisioner.invalidate_tenant_cache(updated.slug)
        await self.events.to_topic(
            Topic.TENANT_EVENTS,
            "tenant.status_changed",
            {
                "tenantId": tenant_id,
                "tenantSlug": updated.slug,
                "previousStatus": current.status.value,
                "status": status.value,
            },
        )
        logger.info(
            "Tenant %s status: %s -> %s", updated.slug, current.status.value, status.value
        )
        return updated

    async def change_plan(self, tenant_id: str, plan: str) -> TenantInfo:
        """Move the tenant to another catalog plan; the change direction is published."""
        _require_plan(plan)
        current = await self.get_tenant(tenant_id)
        if current.plan == plan:
            return current
        updated = await self.tenant_repo.update_plan(tenant_id, plan)
        if not updated:
            raise ResourceNotFoundException("tenant", tenant_id)
        await self.provisioner.invalidate_tenant_cache(updated.slug)
        change = compare_plans(current.plan, plan)
        await self.events.to_topic(
            Topic.TENANT_EVENTS,
            "tenant.plan_changed",
            {
                "tenantId": tenant_id,
                "tenantSlug": updated.slug,
                "previousPlan": current.plan,
                "plan": plan,
                "change": change.value,
            },
        )
        logger.info("Tenant %s plan: %s -> %s (%s)", updated.slug, current.plan, plan, change.value)
        return updated
