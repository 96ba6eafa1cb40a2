"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (logging, cache, event bus,
tenant database clients, master engine).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, Redis cache (if enabled), event bus (if
    enabled). Shutdown order: event bus, tenant clients, cache
    disconnect, master engine dispose.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    if settings.redis_enabled:
        from app.infrastructure.cache.redis_cache import CacheService

        cache = CacheService(settings=settings)
        await cache.connect()
        app.state.cache = cache
    else:
        app.state.cache = None

    if settings.event_bus_enabled:
        from app.infrastructure.messaging.event_bus import get_event_bus

        app.state.event_bus = get_event_bus(settings.service_name)
    else:
        app.state.event_bus = None

    logger.info("%s %s started (%s)", settings.app_name, settings.app_version, settings.environment)

    yield

    # ---- Shutdown ----
    if getattr(app.state, "event_bus", None) is not None:
        from app.infrastructure.messaging.event_bus import reset_event_bus

        await reset_event_bus()
        app.state.event_bus = None

    from app.infrastructure.persistence.tenant_db_manager import reset_tenant_db_manager

    await reset_tenant_db_manager()
    logger.info("Tenant database clients closed")

    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        logger.info("Cache disconnected")

    from app.infrastructure.persistence.database import dispose_engine

    await dispose_engine()
    logger.info("Database engine disposed")
