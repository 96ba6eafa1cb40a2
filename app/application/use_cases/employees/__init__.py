"""Employee and organization use cases."""

from app.application.use_cases.employees.employee_operations import EmployeeService
from app.application.use_cases.employees.organization_operations import (
    DepartmentService,
    DesignationService,
)

__all__ = ["DepartmentService", "DesignationService", "EmployeeService"]
