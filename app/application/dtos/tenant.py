"""DTOs for tenant registry and tenant database manager (no dependency on ORM)."""

from dataclasses import dataclass

from app.domain.enums import TenantStatus


@dataclass(frozen=True)
class TenantInfo:
    """Tenant registry entry (result of get_by_slug, get_by_id, create_tenant, etc.)."""

    id: str
    slug: str
    name: str
    status: TenantStatus
    plan: str = "starter"
    database_name: str | None = None
    database_host: str | None = None
    database_port: int | None = None


@dataclass(frozen=True)
class TenantManagerStats:
    """Snapshot of the tenant database manager caches."""

    active_tenant_connections: int
    max_cache_size: int
    cache_ttl_seconds: int
    tenant_lookup_cache_size: int


@dataclass(frozen=True)
class TenantAdminInput:
    """Initial administrator created when a tenant database is seeded."""

    email: str
    first_name: str
    last_name: str
    password: str | None = None


@dataclass(frozen=True)
class TenantProvisionResult:
    """Result of provisioning a tenant (registry row + database + seed)."""

    tenant_id: str
    slug: str
    database_name: str
    admin_employee_code: str
    admin_email: str
