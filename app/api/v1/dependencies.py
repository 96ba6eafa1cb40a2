"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for sessions and application use cases.
Tenant-scoped services get sessions from the current tenant's database
client (set by TenantContextMiddleware); platform services (tenants, plans,
invoices, usage) use the master database. Routes depend only on these
dependencies, not on infrastructure directly.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from decimal import Decimal
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.services import IEventPublisher
from app.application.services.attendance_rules import AttendanceRules
from app.application.use_cases import (
    AttendanceService,
    DepartmentService,
    DesignationService,
    EmployeeService,
    HolidayService,
    InvoiceService,
    LeaveService,
    LeaveTypeService,
    OptionalHolidayService,
    TenantService,
    UsageService,
)
from app.core.config import get_settings
from app.core.tenant_context import get_tenant_context
from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.messaging.event_bus import AfterCommitPublisher, EventBus
from app.infrastructure.persistence.database import get_session_factory
from app.infrastructure.persistence.repositories import (
    AttendanceRepository,
    DepartmentRepository,
    DesignationRepository,
    EmployeeRepository,
    HolidayRepository,
    InvoiceRepository,
    LeaveBalanceRepository,
    LeaveRequestRepository,
    LeaveTypeRepository,
    OptionalHolidayRepository,
    RoleRepository,
    TenantRepository,
    UsageRepository,
)
from app.infrastructure.persistence.tenant_db_manager import get_tenant_db_manager


def get_cache(request: Request) -> CacheProtocol | None:
    """Redis cache started in lifespan; None when Redis is disabled."""
    return getattr(request.app.state, "cache", None)


def get_event_bus(request: Request) -> EventBus | None:
    """Event bus started in lifespan; None when EVENT_BUS_ENABLED is false."""
    if not get_settings().event_bus_enabled:
        return None
    return getattr(request.app.state, "event_bus", None)


async def get_event_publisher(
    bus: Annotated[EventBus | None, Depends(get_event_bus)],
) -> AsyncIterator[IEventPublisher | None]:
    """Request-scoped publisher; events go out once the request's transaction commits.

    The session dependencies below depend on this one. FastAPI unwinds
    dependencies in reverse, so the session commits before flush() runs and
    an exception skips the flush entirely.
    """
    if bus is None:
        yield None
        return
    pending = AfterCommitPublisher(bus)
    yield pending
    await pending.flush()


Publisher = Annotated[IEventPublisher | None, Depends(get_event_publisher)]


async def get_current_user_id() -> str | None:
    """Caller id from X-User-Id (recorded as created_by/updated_by)."""
    return get_tenant_context().user_id


async def get_tenant_db_transactional(_events: Publisher) -> AsyncIterator[AsyncSession]:
    """Tenant database session; commits on success, rolls back on exception."""
    async with get_tenant_context().client.session() as session:
        async with session.begin():
            yield session


async def get_master_db_transactional(_events: Publisher) -> AsyncIterator[AsyncSession]:
    """Master database session (tenant registry, billing); same commit rules."""
    async with get_session_factory()() as session:
        async with session.begin():
            yield session


TenantDb = Annotated[AsyncSession, Depends(get_tenant_db_transactional)]
MasterDb = Annotated[AsyncSession, Depends(get_master_db_transactional)]
Cache = Annotated[CacheProtocol | None, Depends(get_cache)]


async def get_holiday_repo(db: TenantDb, cache: Cache) -> HolidayRepository:
    """Holiday repository; years are cached per tenant when Redis is available."""
    return HolidayRepository(db, cache, tenant_slug=get_tenant_context().slug)


def get_employee_service(db: TenantDb, publisher: Publisher) -> EmployeeService:
    settings = get_settings()
    return EmployeeService(
        EmployeeRepository(db),
        DepartmentRepository(db),
        DesignationRepository(db),
        RoleRepository(db),
        publisher,
        code_prefix=settings.employee_code_prefix,
        code_length=settings.employee_code_length,
        auto_generate_code=settings.employee_code_auto_generate,
    )


def get_department_service(db: TenantDb) -> DepartmentService:
    return DepartmentService(DepartmentRepository(db), EmployeeRepository(db))


def get_designation_service(db: TenantDb) -> DesignationService:
    return DesignationService(DesignationRepository(db))


def get_attendance_service(
    db: TenantDb,
    holiday_repo: Annotated[HolidayRepository, Depends(get_holiday_repo)],
    publisher: Publisher,
) -> AttendanceService:
    return AttendanceService(
        AttendanceRepository(db),
        EmployeeRepository(db),
        holiday_repo,
        LeaveRequestRepository(db),
        publisher,
        rules=AttendanceRules.from_settings(get_settings()),
        optional_holiday_repo=OptionalHolidayRepository(db),
    )


def get_leave_service(
    db: TenantDb,
    holiday_repo: Annotated[HolidayRepository, Depends(get_holiday_repo)],
    publisher: Publisher,
) -> LeaveService:
    return LeaveService(
        LeaveRequestRepository(db),
        LeaveTypeRepository(db),
        LeaveBalanceRepository(db),
        EmployeeRepository(db),
        holiday_repo,
        AttendanceRepository(db),
        publisher,
        optional_holiday_repo=OptionalHolidayRepository(db),
    )


def get_leave_type_service(db: TenantDb) -> LeaveTypeService:
    return LeaveTypeService(
        LeaveTypeRepository(db),
        LeaveBalanceRepository(db),
        default_color=get_settings().leave_default_color,
    )


def get_holiday_service(
    holiday_repo: Annotated[HolidayRepository, Depends(get_holiday_repo)],
) -> HolidayService:
    return HolidayService(holiday_repo)


def get_optional_holiday_service(
    db: TenantDb,
    holiday_repo: Annotated[HolidayRepository, Depends(get_holiday_repo)],
) -> OptionalHolidayService:
    return OptionalHolidayService(
        holiday_repo,
        OptionalHolidayRepository(db),
        EmployeeRepository(db),
        quota=get_settings().optional_holiday_quota,
    )


def get_tenant_service(db: MasterDb, cache: Cache, publisher: Publisher) -> TenantService:
    """Platform tenant administration (master database + tenant database manager)."""
    return TenantService(TenantRepository(db, cache), get_tenant_db_manager(), publisher)


def get_invoice_service(db: MasterDb, cache: Cache, publisher: Publisher) -> InvoiceService:
    settings = get_settings()
    return InvoiceService(
        InvoiceRepository(db),
        TenantRepository(db, cache),
        publisher,
        invoice_prefix=settings.invoice_prefix,
        credit_note_prefix=settings.credit_note_prefix,
        due_days=settings.invoice_due_days,
        tax_rate=Decimal(str(settings.default_tax_rate)),
        currency=settings.default_currency,
    )


def get_usage_service(
    db: MasterDb,
    cache: Cache,
    invoices: Annotated[InvoiceService, Depends(get_invoice_service)],
) -> UsageService:
    """Usage billing; period invoices go through the request's InvoiceService."""
    return UsageService(UsageRepository(db), TenantRepository(db, cache), invoices)
