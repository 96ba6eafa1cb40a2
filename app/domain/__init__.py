"""Domain layer: enums, events and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import (
    AttendanceStatus,
    EmployeeStatus,
    HolidayType,
    InvoiceStatus,
    LeaveStatus,
    TenantStatus,
)
from app.domain.exceptions import (
    BusinessRuleException,
    ConflictException,
    OfficeException,
    ResourceNotFoundException,
    TenantNotFoundException,
    TenantRequiredException,
    TenantSuspendedException,
    ValidationException,
)

__all__ = [
    # Enums
    "AttendanceStatus",
    "EmployeeStatus",
    "HolidayType",
    "InvoiceStatus",
    "LeaveStatus",
    "TenantStatus",
    # Exceptions
    "BusinessRuleException",
    "ConflictException",
    "OfficeException",
    "ResourceNotFoundException",
    "TenantNotFoundException",
    "TenantRequiredException",
    "TenantSuspendedException",
    "ValidationException",
]
