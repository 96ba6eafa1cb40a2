"""Tenant database manager: one async engine per tenant database.

Tenants live in the master registry (Tenant table). For each tenant that
serves traffic the manager keeps a TenantClient (engine + session factory)
in an LRU cache with TTL; evicted clients are disposed. Tenant lookups are
cached separately under slug:<slug> and id:<id>.

Provisioning (create database, create tables, seed, register) also lives
here since it needs the same URL building and admin connections.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy import URL, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.application.dtos.tenant import (
    TenantAdminInput,
    TenantInfo,
    TenantManagerStats,
    TenantProvisionResult,
)
from app.core.config import Settings, get_settings
from app.domain.enums import TenantStatus
from app.domain.exceptions import (
    ConflictException,
    DatabaseConnectionException,
    TenantNotFoundException,
    TenantSuspendedException,
    ValidationException,
)
from app.infrastructure.cache.lru import LruTtlCache
from app.infrastructure.persistence.database import TenantBase, get_session_factory
from app.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from app.infrastructure.persistence.tenant_seed import TenantSeeder, admin_employee_code
from app.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]{1,48}[a-z0-9]$")
MAINTENANCE_DATABASE = "postgres"


def validate_slug(slug: str) -> str:
    """Return slug if it is usable as a database name suffix."""
    if not SLUG_PATTERN.match(slug):
        raise ValidationException(
            "Tenant slug must be 3-50 lowercase letters, digits or hyphens",
            field="slug",
        )
    return slug


@dataclass
class TenantClient:
    """Engine and session factory bound to one tenant database."""

    tenant_id: str
    slug: str
    database_name: str
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    created_at: datetime = field(default_factory=utc_now)
    last_accessed_at: datetime = field(default_factory=utc_now)

    def session(self) -> AsyncSession:
        self.last_accessed_at = utc_now()
        return self.session_factory()

    async def dispose(self) -> None:
        await self.engine.dispose()


class TenantDatabaseManager:
    """Resolves tenants and hands out cached per-tenant database clients."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        master_session_factory: Callable[[], AsyncSession] | None = None,
        engine_factory: Callable[..., AsyncEngine] = create_async_engine,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._master_session_factory = master_session_factory
        self._engine_factory = engine_factory
        self._pending_dispose: list[TenantClient] = []
        cache_kwargs: dict[str, Any] = {"clock": clock} if clock else {}
        self._clients: LruTtlCache[TenantClient] = LruTtlCache(
            self.settings.tenant_client_cache_size,
            self.settings.tenant_client_ttl_seconds,
            on_evict=lambda _key, client: self._pending_dispose.append(client),
            **cache_kwargs,
        )
        self._lookups: LruTtlCache[TenantInfo] = LruTtlCache(
            self.settings.tenant_lookup_cache_size,
            self.settings.tenant_lookup_ttl_seconds,
            **cache_kwargs,
        )
        self._client_lock = asyncio.Lock()

    # Master registry

    @asynccontextmanager
    async def _master_session(self) -> AsyncIterator[AsyncSession]:
        factory = self._master_session_factory or get_session_factory()
        async with factory() as session:
            yield session

    def _remember(self, info: TenantInfo) -> TenantInfo:
        self._lookups.set(f"slug:{info.slug}", info)
        self._lookups.set(f"id:{info.id}", info)
        return info

    async def get_tenant_by_slug(self, slug: str) -> TenantInfo:
        cached = self._lookups.get(f"slug:{slug}")
        if cached is not None:
            return cached
        async with self._master_session() as session:
            info = await TenantRepository(session).get_by_slug(slug)
        if info is None:
            raise TenantNotFoundException(slug)
        return self._remember(info)

    async def get_tenant_by_id(self, tenant_id: str) -> TenantInfo:
        cached = self._lookups.get(f"id:{tenant_id}")
        if cached is not None:
            return cached
        async with self._master_session() as session:
            info = await TenantRepository(session).get_by_id(tenant_id)
        if info is None:
            raise TenantNotFoundException(tenant_id)
        return self._remember(info)

    async def refresh_tenant_status(self, slug: str) -> TenantInfo:
        """Re-read the tenant from the master database, replacing cached lookups."""
        async with self._master_session() as session:
            info = await TenantRepository(session).get_by_slug(slug)
        if info is None:
            raise TenantNotFoundException(slug)
        return self._remember(info)

    # Tenant clients

    async def _drain_disposals(self) -> None:
        pending, self._pending_dispose = self._pending_dispose, []
        for client in pending:
            try:
                await client.dispose()
                logger.debug("Disposed tenant client %s", client.slug)
            except Exception:
                logger.warning("Error disposing tenant client %s", client.slug, exc_info=True)

    async def get_tenant_client(
        self, slug: str, *, skip_status_check: bool = False
    ) -> TenantClient:
        """Return the cached client for slug, creating and verifying one if needed.

        A SUSPENDED or TERMINATED lookup is re-read from the master database
        before refusing, so a stale cache does not block a reactivated tenant.

        Raises:
            TenantNotFoundException: slug is not registered.
            TenantSuspendedException: tenant is still blocked after the re-read.
            DatabaseConnectionException: the tenant database does not answer.
        """
        client = self._clients.get(slug)
        await self._drain_disposals()
        if client is not None:
            client.last_accessed_at = utc_now()
            return client

        info = await self.get_tenant_by_slug(slug)
        if not skip_status_check and info.status.is_blocked:
            info = await self.refresh_tenant_status(slug)
            if info.status.is_blocked:
                raise TenantSuspendedException(slug, info.status.value)

        async with self._client_lock:
            client = self._clients.get(slug)
            if client is None:
                client = await self._create_client(info)
                self._clients.set(slug, client)
        await self._drain_disposals()
        return client

    async def get_tenant_client_by_id(self, tenant_id: str) -> TenantClient:
        info = await self.get_tenant_by_id(tenant_id)
        return await self.get_tenant_client(info.slug)

    def _new_engine(self, url: URL, **kwargs: Any) -> AsyncEngine:
        return self._engine_factory(url, pool_pre_ping=True, **kwargs)

    async def _create_client(self, info: TenantInfo) -> TenantClient:
        database_name = info.database_name or self.database_name_for(info.slug)
        engine = self._new_engine(
            self.build_database_url(info),
            pool_size=self.settings.tenant_db_pool_size,
            pool_timeout=self.settings.tenant_db_pool_timeout,
            pool_recycle=3600,
        )
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            await engine.dispose()
            logger.error("Tenant database unreachable: %s (%s)", info.slug, database_name)
            raise DatabaseConnectionException(database_name, str(e)) from e
        logger.info("Tenant client created: %s -> %s", info.slug, database_name)
        return TenantClient(
            tenant_id=info.id,
            slug=info.slug,
            database_name=database_name,
            engine=engine,
            session_factory=async_sessionmaker(
                bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            ),
        )

    # URLs

    def database_name_for(self, slug: str) -> str:
        return f"{self.settings.tenant_db_prefix}{slug}"

    def _url(self, database: str, host: str | None = None, port: int | None = None) -> URL:
        query = {"ssl": "require"} if self.settings.tenant_db_ssl else {}
        return URL.create(
            "postgresql+asyncpg",
            username=self.settings.tenant_db_user,
            password=self.settings.tenant_db_password.get_secret_value() or None,
            host=host or self.settings.tenant_db_host,
            port=port or self.settings.tenant_db_port,
            database=database,
            query=query,
        )

    def build_database_url(self, tenant: TenantInfo) -> URL:
        """URL of a tenant database; host, port and name stored on the tenant win."""
        return self._url(
            tenant.database_name or self.database_name_for(tenant.slug),
            tenant.database_host,
            tenant.database_port,
        )

    # Provisioning

    async def create_tenant_database(self, slug: str) -> str:
        """CREATE DATABASE for slug (autocommit). Returns the name; existing is fine."""
        database_name = self.database_name_for(validate_slug(slug))
        engine = self._new_engine(self._url(MAINTENANCE_DATABASE), isolation_level="AUTOCOMMIT")
        try:
            async with engine.connect() as conn:
                exists = await conn.scalar(
                    text("SELECT 1 FROM pg_database WHERE datname = :name"),
                    {"name": database_name},
                )
                if exists:
                    logger.info("Tenant database already exists: %s", database_name)
                    return database_name
                await conn.execute(text(f'CREATE DATABASE "{database_name}"'))
        except Exception as e:
            raise DatabaseConnectionException(database_name, str(e)) from e
        finally:
            await engine.dispose()
        logger.info("Tenant database created: %s", database_name)
        return database_name

    async def migrate_tenant_database(self, slug: str) -> None:
        """Create every tenant table that does not exist yet."""
        database_name = self.database_name_for(validate_slug(slug))
        engine = self._new_engine(self._url(database_name))
        try:
            async with engine.begin() as conn:
                await conn.run_sync(TenantBase.metadata.create_all)
        finally:
            await engine.dispose()
        logger.info("Tenant database migrated: %s", database_name)

    async def seed_tenant_database(self, slug: str, admin: TenantAdminInput) -> str:
        """Insert default roles, departments, designations and the admin; returns admin code."""
        database_name = self.database_name_for(validate_slug(slug))
        code = admin_employee_code(
            self.settings.employee_code_prefix, self.settings.employee_code_length
        )
        engine = self._new_engine(self._url(database_name))
        try:
            factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
            async with factory() as session, session.begin():
                employee = await TenantSeeder(session).seed(admin, code)
                code = employee.employee_code
        finally:
            await engine.dispose()
        return code

    async def provision_tenant(
        self,
        slug: str,
        name: str,
        admin: TenantAdminInput,
        *,
        plan: str = "starter",
        status: TenantStatus = TenantStatus.TRIAL,
    ) -> TenantProvisionResult:
        """Create, migrate and seed the tenant database, then register the tenant."""
        validate_slug(slug)
        async with self._master_session() as session:
            if await TenantRepository(session).get_by_slug(slug):
                raise ConflictException(f"Tenant '{slug}' already exists", slug=slug)

        database_name = await self.create_tenant_database(slug)
        await self.migrate_tenant_database(slug)
        admin_code = await self.seed_tenant_database(slug, admin)

        async with self._master_session() as session, session.begin():
            info = await TenantRepository(session).create_tenant(
                slug=slug,
                name=name,
                database_name=database_name,
                status=status,
                plan=plan,
            )
        self._remember(info)
        logger.info("Tenant provisioned: %s (%s)", slug, info.id)
        return TenantProvisionResult(
            tenant_id=info.id,
            slug=slug,
            database_name=database_name,
            admin_employee_code=admin_code,
            admin_email=admin.email.lower(),
        )

    # Cleanup

    async def disconnect_tenant(self, slug: str) -> None:
        client = self._clients.pop(slug)
        if client is not None:
            await client.dispose()
            logger.info("Tenant client disconnected: %s", slug)

    async def disconnect_all(self) -> None:
        for _slug, client in self._clients.items():
            self._pending_dispose.append(client)
        self._clients.clear()
        self._lookups.clear()
        await self._drain_disposals()

    async def invalidate_tenant_cache(self, slug: str) -> None:
        """Forget lookups and the client for slug (after a status change)."""
        info = self._lookups.pop(f"slug:{slug}")
        client = self._clients.get(slug)
        tenant_id = info.id if info else client.tenant_id if client else None
        if tenant_id:
            self._lookups.pop(f"id:{tenant_id}")
        await self.disconnect_tenant(slug)

    def get_stats(self) -> TenantManagerStats:
        return TenantManagerStats(
            active_tenant_connections=len(self._clients),
            max_cache_size=self._clients.max_size,
            cache_ttl_seconds=int(self._clients.ttl_seconds),
            tenant_lookup_cache_size=len(self._lookups),
        )


_manager: TenantDatabaseManager | None = None


def get_tenant_db_manager() -> TenantDatabaseManager:
    """Process-wide manager (created on first use)."""
    global _manager
    if _manager is None:
        _manager = TenantDatabaseManager()
    return _manager


async def reset_tenant_db_manager() -> None:
    """Dispose every tenant client and drop the singleton (shutdown, tests)."""
    global _manager
    if _manager is not None:
        await _manager.disconnect_all()
    _manager = None
