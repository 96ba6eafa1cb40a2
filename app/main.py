"""ASGI entry point for the office management API.

`uvicorn app.main:app`. create_app() reads settings when called, so tests set
their environment first and then build a fresh app per fixture.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.api.v1 import api_router
from app.core.config import Settings, get_settings
from app.core.constants import API_PREFIX
from app.core.exception_handlers import register_exception_handlers
from app.core.lifespan import create_lifespan
from app.core.limiter import limiter
from app.middleware import RequestIDMiddleware, TenantContextMiddleware

PLATFORM_TAGS = [
    {"name": "health", "description": "Liveness and readiness probes."},
    {"name": "tenants", "description": "Platform administration: provisioning and lifecycle."},
    {"name": "plans", "description": "Subscription plan catalog."},
    {"name": "usage", "description": "Metered usage and period invoices per tenant."},
    {"name": "invoices", "description": "Platform billing for tenants."},
]
TENANT_TAGS = [
    {"name": name, "description": "Requires the tenant slug header."}
    for name in ("employees", "departments", "designations", "attendance", "leave", "holidays")
]


def _origins(settings: Settings) -> list[str]:
    return [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
        openapi_tags=PLATFORM_TAGS + TENANT_TAGS,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(app)

    # Added innermost first: requests pass CORS, then request id, then tenant resolution.
    app.add_middleware(TenantContextMiddleware)
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_origins(settings),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*", settings.tenant_header_name],
        expose_headers=[settings.request_id_header],
    )

    app.include_router(api_router, prefix=API_PREFIX)
    return app


app = create_app()
