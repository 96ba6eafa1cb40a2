"""Tenant context for per-tenant database routing.

Middleware resolves the tenant from the X-Tenant-Slug header and stores a
TenantContext in this context variable. Dependencies and services read it
to reach the tenant's database client; background jobs and queue
consumers enter a context explicitly with run_with_tenant_context().
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, TypeVar

from app.domain.exceptions import TenantContextMissingException, TenantNotFoundException
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.infrastructure.persistence.tenant_db_manager import TenantClient

T = TypeVar("T")


@dataclass(frozen=True)
class TenantContext:
    """Tenant and caller identity for the current request or task."""

    tenant_id: str
    slug: str
    name: str
    status: str
    database_name: str
    client: TenantClient
    request_id: str | None = None
    user_id: str | None = None
    user_roles: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=utc_now)


_current_tenant: ContextVar[TenantContext | None] = ContextVar(
    "current_tenant", default=None
)


def set_tenant_context(ctx: TenantContext | None) -> Token:
    """Set the tenant context; return the token for reset_tenant_context()."""
    return _current_tenant.set(ctx)


def reset_tenant_context(token: Token) -> None:
    """Restore the context that was active before set_tenant_context()."""
    _current_tenant.reset(token)


def get_tenant_context() -> TenantContext:
    """Return the current tenant context.

    Raises:
        TenantContextMissingException: When no tenant context is set.
    """
    ctx = _current_tenant.get()
    if ctx is None:
        raise TenantContextMissingException()
    return ctx


def get_tenant_context_or_none() -> TenantContext | None:
    """Return the current tenant context if set."""
    return _current_tenant.get()


async def run_with_tenant_context(
    tenant: str,
    fn: Callable[[TenantContext], Awaitable[T]],
    *,
    user_id: str | None = None,
    request_id: str | None = None,
) -> T:
    """Resolve tenant by slug (falling back to id), run fn inside its context.

    Used by queue consumers and scheduled jobs that receive a tenant
    reference in an event rather than an HTTP header.
    """
    from app.infrastructure.persistence.tenant_db_manager import get_tenant_db_manager

    manager = get_tenant_db_manager()
    try:
        info = await manager.get_tenant_by_slug(tenant)
    except TenantNotFoundException:
        info = await manager.get_tenant_by_id(tenant)
    client = await manager.get_tenant_client(info.slug)
    ctx = TenantContext(
        tenant_id=info.id,
        slug=info.slug,
        name=info.name,
        status=info.status.value,
        database_name=client.database_name,
        client=client,
        request_id=request_id,
        user_id=user_id,
    )
    token = set_tenant_context(ctx)
    try:
        return await fn(ctx)
    finally:
        reset_tenant_context(token)
