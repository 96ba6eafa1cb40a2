"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IAttendanceRepository,
    IDepartmentRepository,
    IDesignationRepository,
    IEmployeeRepository,
    IHolidayRepository,
    IInvoiceRepository,
    ILeaveBalanceRepository,
    ILeaveRequestRepository,
    ILeaveTypeRepository,
    IRoleRepository,
    ITenantRepository,
)
from app.application.interfaces.services import IEventPublisher, ITenantProvisioner

__all__ = [
    "IAttendanceRepository",
    "IDepartmentRepository",
    "IDesignationRepository",
    "IEmployeeRepository",
    "IEventPublisher",
    "IHolidayRepository",
    "IInvoiceRepository",
    "ILeaveBalanceRepository",
    "ILeaveRequestRepository",
    "ILeaveTypeRepository",
    "IRoleRepository",
    "ITenantProvisioner",
    "ITenantRepository",
]
