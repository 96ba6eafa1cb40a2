"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, event bus, provisioning).
"""

from app.application.interfaces import (
    IEventPublisher,
    ITenantProvisioner,
    ITenantRepository,
)
from app.application.use_cases import (
    AttendanceService,
    DepartmentService,
    DesignationService,
    EmployeeService,
    HolidayService,
    InvoiceService,
    LeaveService,
    LeaveTypeService,
    TenantService,
)

__all__ = [
    "AttendanceService",
    "DepartmentService",
    "DesignationService",
    "EmployeeService",
    "HolidayService",
    "IEventPublisher",
    "ITenantProvisioner",
    "ITenantRepository",
    "InvoiceService",
    "LeaveService",
    "LeaveTypeService",
    "TenantService",
]
