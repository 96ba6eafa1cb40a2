"""Persistence models: master (Base) and per-tenant (TenantBase) ORM entities."""

from app.infrastructure.persistence.models.attendance import Attendance, AttendanceBreak
from app.infrastructure.persistence.models.department import Department, Designation
from app.infrastructure.persistence.models.employee import Employee
from app.infrastructure.persistence.models.holiday import Holiday
from app.infrastructure.persistence.models.invoice import Invoice, Payment
from app.infrastructure.persistence.models.leave import (
    LeaveBalance,
    LeaveBalanceAdjustment,
    LeaveRequest,
    LeaveType,
)
from app.infrastructure.persistence.models.mixins import (
    ActiveMixin,
    AuditedTenantModel,
    CuidMixin,
    TenantModel,
    TimestampMixin,
    UserAuditMixin,
)
from app.infrastructure.persistence.models.optional_holiday import EmployeeOptionalHoliday
from app.infrastructure.persistence.models.role import Role
from app.infrastructure.persistence.models.tenant import Tenant
from app.infrastructure.persistence.models.usage import UsageRecord
from app.infrastructure.persistence.models.user import User

__all__ = [
    "ActiveMixin",
    "Attendance",
    "AttendanceBreak",
    "AuditedTenantModel",
    "CuidMixin",
    "Department",
    "Designation",
    "Employee",
    "EmployeeOptionalHoliday",
    "Holiday",
    "Invoice",
    "LeaveBalance",
    "LeaveBalanceAdjustment",
    "LeaveRequest",
    "LeaveType",
    "Payment",
    "Role",
    "Tenant",
    "TenantModel",
    "TimestampMixin",
    "UsageRecord",
    "User",
    "UserAuditMixin",
]
