"""Tenant registry repository (master database) with optional caching. Returns DTOs."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.tenant import TenantInfo
from app.core.constants import TENANT_CACHE_TTL
from app.domain.enums import TenantStatus
from app.domain.exceptions import ConflictException
from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.cache.keys import tenant_key, tenant_slug_key
from app.infrastructure.persistence.models.tenant import Tenant
from app.infrastructure.persistence.repositories.base import BaseRepository


def _tenant_to_result(t: Tenant) -> TenantInfo:
    return TenantInfo(
        id=t.id,
        slug=t.slug,
        name=t.name,
        status=TenantStatus(t.status),
        plan=t.plan,
        database_name=t.database_name,
        database_host=t.database_host,
        database_port=t.database_port,
    )


def _tenant_to_dict(info: TenantInfo) -> dict[str, Any]:
    return {
        "id": info.id,
        "slug": info.slug,
        "name": info.name,
        "status": info.status.value,
        "plan": info.plan,
        "database_name": info.database_name,
        "database_host": info.database_host,
        "database_port": info.database_port,
    }


def _tenant_from_cached(cached: dict[str, Any]) -> TenantInfo:
    return TenantInfo(**{**cached, "status": TenantStatus(cached["status"])})


class TenantRepository(BaseRepository[Tenant]):
    """Tenant registry. Optional cache keyed by id and slug (tenant_key/tenant_slug_key)."""

    def __init__(
        self,
        db: AsyncSession,
        cache_service: CacheProtocol | None = None,
        *,
        cache_ttl: int = TENANT_CACHE_TTL,
    ) -> None:
        super().__init__(db, Tenant)
        self.cache = cache_service
        self.cache_ttl = cache_ttl

    def _cache_on(self) -> bool:
        return self.cache is not None and self.cache.is_available()

    async def _remember(self, info: TenantInfo) -> None:
        if self._cache_on():
            data = _tenant_to_dict(info)
            await self.cache.set(tenant_key(info.id), data, ttl=self.cache_ttl)
            await self.cache.set(tenant_slug_key(info.slug), data, ttl=self.cache_ttl)

    async def _forget(self, info: TenantInfo) -> None:
        if self._cache_on():
            await self.cache.delete(tenant_key(info.id))
            await self.cache.delete(tenant_slug_key(info.slug))

    async def get_by_id(self, tenant_id: str) -> TenantInfo | None:
        """Get tenant by ID, from cache if available."""
        if self._cache_on():
            cached = await self.cache.get(tenant_key(tenant_id))
            if cached is not None:
                return _tenant_from_cached(cached)
        tenant = await self._get(tenant_id)
        if tenant is None:
            return None
        info = _tenant_to_result(tenant)
        await self._remember(info)
        return info

    async def get_by_slug(self, slug: str) -> TenantInfo | None:
        """Get tenant by unique slug, from cache if available."""
        if self._cache_on():
            cached = await self.cache.get(tenant_slug_key(slug))
            if cached is not None:
                return _tenant_from_cached(cached)
        result = await self.db.execute(select(Tenant).where(Tenant.slug == slug))
        tenant = result.scalar_one_or_none()
        if tenant is None:
            return None
        info = _tenant_to_result(tenant)
        await self._remember(info)
        return info

    async def get_status_uncached(self, tenant_id: str) -> TenantStatus | None:
        """Current status straight from the database (bypasses cache)."""
        result = await self.db.execute(select(Tenant.status).where(Tenant.id == tenant_id))
        status = result.scalar_one_or_none()
        return TenantStatus(status) if status else None

    async def create_tenant(
        self,
        slug: str,
        name: str,
        database_name: str,
        status: TenantStatus = TenantStatus.TRIAL,
        plan: str = "starter",
        database_host: str | None = None,
        database_port: int | None = None,
    ) -> TenantInfo:
        """Register a tenant.

        Raises ConflictException on unique constraint violation (duplicate slug).
        """
        tenant = Tenant(
            slug=slug,
            name=name,
            status=status.value,
            plan=plan,
            database_name=database_name,
            database_host=database_host,
            database_port=database_port,
        )
        try:
            created = await self._add(tenant)
        except IntegrityError as e:
            raise ConflictException(f"Tenant '{slug}' already exists", slug=slug) from e
        return _tenant_to_result(created)

    async def update_status(self, tenant_id: str, status: TenantStatus) -> TenantInfo | None:
        tenant = await self._get(tenant_id)
        if tenant is None:
            return None
        updated = _tenant_to_result(
            await self._apply_changes(tenant, {"status": status.value})
        )
        await self._forget(updated)
        return updated

    async def update_plan(self, tenant_id: str, plan: str) -> TenantInfo | None:
        tenant = await self._get(tenant_id)
        if tenant is None:
            return None
        updated = _tenant_to_result(await self._apply_changes(tenant, {"plan": plan}))
        await self._forget(updated)
        return updated

    async def list_tenants(
        self, status: TenantStatus | None = None, skip: int = 0, limit: int = 100
    ) -> list[TenantInfo]:
        stmt = select(Tenant).order_by(Tenant.slug).offset(skip).limit(limit)
        if status is not None:
            stmt = stmt.where(Tenant.status == status.value)
        result = await self.db.execute(stmt)
        return [_tenant_to_result(t) for t in result.scalars().all()]
