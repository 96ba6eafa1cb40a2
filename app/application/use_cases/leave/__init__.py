"""Leave use cases."""

from app.application.use_cases.leave.leave_operations import LeaveService
from app.application.use_cases.leave.leave_type_operations import LeaveTypeService

__all__ = ["LeaveService", "LeaveTypeService"]
