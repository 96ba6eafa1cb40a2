"""Tenant context middleware.

Resolves the tenant from the X-Tenant-Slug header for every /api/v1 route
except the exempt prefixes (health, platform administration and billing), gets
its database client from the tenant database manager and exposes both
through app.core.tenant_context for the duration of the request.
"""

from __future__ import annotations

import logging
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.core.config import get_settings
from app.core.constants import API_PREFIX
from app.core.exception_handlers import status_for
from app.core.tenant_context import TenantContext, reset_tenant_context, set_tenant_context
from app.domain.exceptions import OfficeException, TenantRequiredException
from app.infrastructure.persistence.tenant_db_manager import (
    TenantDatabaseManager,
    get_tenant_db_manager,
)

logger = logging.getLogger(__name__)


def requires_tenant(path: str, exempt_prefixes: list[str]) -> bool:
    """True for API paths that are not exempt from tenant resolution."""
    if not path.startswith(API_PREFIX):
        return False
    return not any(path.startswith(prefix) for prefix in exempt_prefixes)


def _roles(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(r.strip() for r in raw.split(",") if r.strip())


def TenantContextMiddleware(
    app: Callable,
    manager_getter: Callable[[], TenantDatabaseManager] = get_tenant_db_manager,
) -> Callable:
    """Set the tenant context (database client, caller ids) before the route runs."""

    class _Middleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next: Callable) -> Response:
            settings = get_settings()
            if not requires_tenant(request.url.path, settings.exempt_path_prefixes):
                return await call_next(request)

            slug = (request.headers.get(settings.tenant_header_name) or "").strip().lower()
            try:
                if not slug:
                    raise TenantRequiredException(settings.tenant_header_name)
                manager = manager_getter()
                client = await manager.get_tenant_client(slug)
                info = await manager.get_tenant_by_slug(slug)
            except OfficeException as exc:
                return JSONResponse(status_code=status_for(exc), content=exc.to_dict())
            except Exception:
                logger.exception("Failed to resolve tenant %s", slug)
                return JSONResponse(
                    status_code=500,
                    content={
                        "error": "TENANT_CONTEXT_ERROR",
                        "message": "Failed to establish tenant context",
                        "details": {},
                    },
                )

            ctx = TenantContext(
                tenant_id=info.id,
                slug=info.slug,
                name=info.name,
                status=info.status.value,
                database_name=client.database_name,
                client=client,
                request_id=getattr(request.state, "request_id", None),
                user_id=request.headers.get(settings.user_id_header) or None,
                user_roles=_roles(request.headers.get(settings.user_roles_header)),
            )
            request.state.tenant = ctx
            token = set_tenant_context(ctx)
            try:
                return await call_next(request)
            finally:
                reset_tenant_context(token)

    return _Middleware(app)
