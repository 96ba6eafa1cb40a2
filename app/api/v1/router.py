"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from app.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    attendance,
    departments,
    designations,
    employees,
    health,
    holidays,
    invoices,
    leave,
    plans,
    tenants,
    usage,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tenants.router, prefix="/tenants", tags=["tenants"])
api_router.include_router(usage.router, prefix="/tenants", tags=["usage"])
api_router.include_router(plans.router, prefix="/plans", tags=["plans"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(departments.router, prefix="/departments", tags=["departments"])
api_router.include_router(designations.router, prefix="/designations", tags=["designations"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["attendance"])
api_router.include_router(leave.router, prefix="/leave", tags=["leave"])
api_router.include_router(holidays.router, prefix="/holidays", tags=["holidays"])
