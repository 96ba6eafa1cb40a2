"""Application use cases: one service per workflow."""

from app.application.use_cases.attendance import AttendanceService
from app.application.use_cases.billing import InvoiceService, UsageService
from app.application.use_cases.employees import (
    DepartmentService,
    DesignationService,
    EmployeeService,
)
from app.application.use_cases.holidays import HolidayService, OptionalHolidayService
from app.application.use_cases.leave import LeaveService, LeaveTypeService
from app.application.use_cases.tenants import TenantService

__all__ = [
    "AttendanceService",
    "DepartmentService",
    "DesignationService",
    "EmployeeService",
    "HolidayService",
    "InvoiceService",
    "LeaveService",
    "LeaveTypeService",
    "OptionalHolidayService",
    "TenantService",
    "UsageService",
]
