"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.attendance_repo import AttendanceRepository
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.employee_repo import EmployeeRepository
from app.infrastructure.persistence.repositories.holiday_repo import HolidayRepository
from app.infrastructure.persistence.repositories.invoice_repo import InvoiceRepository
from app.infrastructure.persistence.repositories.leave_repo import (
    LeaveBalanceRepository,
    LeaveRequestRepository,
    LeaveTypeRepository,
)
from app.infrastructure.persistence.repositories.optional_holiday_repo import (
    OptionalHolidayRepository,
)
from app.infrastructure.persistence.repositories.organization_repo import (
    DepartmentRepository,
    DesignationRepository,
    RoleRepository,
)
from app.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from app.infrastructure.persistence.repositories.usage_repo import UsageRepository

__all__ = [
    "AttendanceRepository",
    "BaseRepository",
    "DepartmentRepository",
    "DesignationRepository",
    "EmployeeRepository",
    "HolidayRepository",
    "InvoiceRepository",
    "LeaveBalanceRepository",
    "LeaveRequestRepository",
    "LeaveTypeRepository",
    "OptionalHolidayRepository",
    "RoleRepository",
    "TenantRepository",
    "UsageRepository",
]
