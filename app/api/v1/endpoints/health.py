"""Health check endpoints. No tenant context; used for liveness and readiness probes."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.infrastructure.persistence.database import get_session_factory
from app.infrastructure.persistence.tenant_db_manager import get_tenant_db_manager
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Master database unreachable", "model": ReadinessErrorResponse}},
)
async def readiness_check() -> ReadinessResponse | JSONResponse:
    """Return 200 when the master database answers; 503 otherwise.

    Also reports the event bus mode and how many tenant database clients
    are cached.
    """
    settings = get_settings()
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Readiness check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content=ReadinessErrorResponse(message="Master database unreachable").model_dump(),
        )
    stats = get_tenant_db_manager().get_stats()
    return ReadinessResponse(
        event_bus_mode=settings.resolved_event_bus_mode if settings.event_bus_enabled else None,
        active_tenant_connections=stats.active_tenant_connections,
        tenant_lookup_cache_size=stats.tenant_lookup_cache_size,
    )
