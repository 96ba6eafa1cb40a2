"""Employee lifecycle: onboard, query, update, offboard, reporting lines, stats."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from app.application.dtos.common import Page, clamp_page
from app.application.dtos.employee import (
    EmployeeFilters,
    EmployeeResult,
    EmployeeStats,
    OffboardEmployeeInput,
    OnboardEmployeeInput,
)
from app.application.interfaces.repositories import (
    IDepartmentRepository,
    IDesignationRepository,
    IEmployeeRepository,
    IRoleRepository,
)
from app.application.interfaces.services import IEventPublisher
from app.application.services.event_emitter import EventEmitter
from app.domain.enums import EmployeeStatus
from app.domain.events import Queue, Topic
from app.domain.exceptions import (
    BusinessRuleException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

# Fields a caller may change through update_employee.
UPDATABLE_FIELDS = frozenset(
    {
        "department_id",
        "designation_id",
        "reporting_to_id",
        "employment_type",
        "work_location",
        "salary",
        "currency",
        "date_of_birth",
        "gender",
        "address",
        "emergency_contact",
        "metadata",
    }
)


def next_employee_code(last_code: str | None, prefix: str, length: int) -> str:
    """Next code after last_code: prefix + zero-padded number.

    A last code whose suffix is not numeric restarts the sequence at 1.
    """
    number = 1
    if last_code and last_code.startswith(prefix):
        suffix = last_code[len(prefix):]
        if suffix.isdigit():
            number = int(suffix) + 1
    return f"{prefix}{str(number).zfill(length)}"


class EmployeeService:
    """Employee operations inside the current tenant database."""

    def __init__(
        self,
        employee_repo: IEmployeeRepository,
        department_repo: IDepartmentRepository,
        designation_repo: IDesignationRepository,
        role_repo: IRoleRepository,
        publisher: IEventPublisher | None = None,
        *,
        code_prefix: str = "EMP",
        code_length: int = 6,
        auto_generate_code: bool = True,
    ) -> None:
        self.employee_repo = employee_repo
        self.department_repo = department_repo
        self.designation_repo = designation_repo
        self.role_repo = role_repo
        self.events = EventEmitter(publisher)
        self.code_prefix = code_prefix
        self.code_length = code_length
        self.auto_generate_code = auto_generate_code

    async def _require_active_department(self, department_id: str):
        department = await self.department_repo.get_by_id(department_id)
        if not department or not department.is_active:
            raise ValidationException("Department not found or inactive", field="department_id")
        return department

    async def _require_active_designation(self, designation_id: str):
        designation = await self.designation_repo.get_by_id(designation_id)
        if not designation or not designation.is_active:
            raise ValidationException(
                "Designation not found or inactive", field="designation_id"
            )
        return designation

    async def _require_active_manager(self, manager_id: str) -> EmployeeResult:
        manager = await self.employee_repo.get_by_id(manager_id)
        if not manager or manager.status != EmployeeStatus.ACTIVE.value:
            raise ValidationException(
                "Reporting manager not found or inactive", field="reporting_to_id"
            )
        return manager

    async def _resolve_role_id(self, role_id: str | None) -> str:
        role = (
            await self.role_repo.get_by_id(role_id)
            if role_id
            else await self.role_repo.get_default()
        )
        if not role or not role.is_active:
            raise ValidationException("Role not found or inactive", field="role_id")
        return role.id

    async def _resolve_employee_code(self, requested: str | None) -> str:
        if requested:
            code = requested.strip()
        elif self.auto_generate_code:
            last = await self.employee_repo.get_last_code(self.code_prefix)
            code = next_employee_code(last, self.code_prefix, self.code_length)
        else:
            raise ValidationException("Employee code is required", field="employee_code")
        if await self.employee_repo.get_by_code(code):
            raise ConflictException(
                f"Employee code '{code}' already exists", employee_code=code
            )
        return code

    async def onboard_employee(
        self, data: OnboardEmployeeInput, performed_by: str | None = None
    ) -> EmployeeResult:
        """Create user + employee after validating references and uniqueness."""
        department = await self._require_active_department(data.department_id)
        designation = await self._require_active_designation(data.designation_id)
        if data.reporting_to_id:
            await self._require_active_manager(data.reporting_to_id)
        role_id = await self._resolve_role_id(data.role_id)
        email = data.email.strip().lower()
        if await self.employee_repo.email_exists(email):
            raise ConflictException("Email already in use", email=email)
        code = await self._resolve_employee_code(data.employee_code)

        employee = await self.employee_repo.create_employee(
            data,
            email=email,
            employee_code=code,
            role_id=role_id,
            performed_by=performed_by,
        )
        await self.events.to_topic(
            Topic.EMPLOYEE_EVENTS,
            "employee.onboarded",
            {
                "employeeId": employee.id,
                "userId": employee.user_id,
                "employeeCode": code,
                "departmentId": department.id,
                "departmentName": department.name,
                "designationId": designation.id,
                "designationName": designation.name,
                "joiningDate": data.joining_date.isoformat(),
                "reportingToId": data.reporting_to_id,
            },
        )
        logger.info("Employee onboarded: %s (%s)", employee.id, code)
        return employee

    async def get_employee(self, employee_id: str) -> EmployeeResult:
        employee = await self.employee_repo.get_by_id(employee_id)
        if not employee:
            raise ResourceNotFoundException("employee", employee_id)
        return employee

    async def get_employee_by_user(self, user_id: str) -> EmployeeResult:
        employee = await self.employee_repo.get_by_user_id(user_id)
        if not employee:
            raise ResourceNotFoundException("employee", f"user:{user_id}")
        return employee

    async def list_employees(self, filters: EmployeeFilters) -> Page[EmployeeResult]:
        page, size = clamp_page(filters.page, filters.page_size)
        return await self.employee_repo.list_employees(filters, page=page, page_size=size)

    async def update_employee(
        self,
        employee_id: str,
        changes: dict[str, Any],
        performed_by: str | None = None,
    ) -> EmployeeResult:
        """Apply allowed field changes; department moves are announced on their own queue."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}"
            )
        existing = await self.get_employee(employee_id)
        changed: dict[str, dict[str, Any]] = {}

        new_department = changes.get("department_id")
        if new_department and new_department != existing.department_id:
            await self._require_active_department(new_department)
            changed["department_id"] = {"old": existing.department_id, "new": new_department}

        new_designation = changes.get("designation_id")
        if new_designation and new_designation != existing.designation_id:
            await self._require_active_designation(new_designation)
            changed["designation_id"] = {
                "old": existing.designation_id,
                "new": new_designation,
            }

        if "reporting_to_id" in changes and changes["reporting_to_id"] != existing.reporting_to_id:
            manager_id = changes["reporting_to_id"]
            if manager_id == employee_id:
                raise ValidationException(
                    "Employee cannot report to themselves", field="reporting_to_id"
                )
            if manager_id:
                await self._require_active_manager(manager_id)
            changed["reporting_to_id"] = {"old": existing.reporting_to_id, "new": manager_id}

        updated = await self.employee_repo.update_employee(
            employee_id, changes, performed_by=performed_by
        )
        if updated is None:
            raise ResourceNotFoundException("employee", employee_id)

        if "department_id" in changed:
            await self.events.to_queue(
                Queue.EMPLOYEE_DEPARTMENT_CHANGED,
                "employee.department_changed",
                {
                    "employeeId": employee_id,
                    "previousDepartmentId": changed["department_id"]["old"],
                    "newDepartmentId": changed["department_id"]["new"],
                    "changedBy": performed_by,
                },
            )
        await self.events.to_topic(
            Topic.EMPLOYEE_EVENTS,
            "employee.updated",
            {"employeeId": employee_id, "changes": sorted(changes)},
        )
        logger.info("Employee updated: %s (%s)", employee_id, ", ".join(sorted(changes)))
        return updated

    async def offboard_employee(
        self,
        employee_id: str,
        data: OffboardEmployeeInput,
        performed_by: str | None = None,
    ) -> EmployeeResult:
        """Mark offboarded and deactivate the user; refuses while direct reports remain."""
        employee = await self.get_employee(employee_id)
        if employee.status == EmployeeStatus.OFFBOARDED.value:
            raise BusinessRuleException("Employee already offboarded", employee_id=employee_id)
        reports = await self.employee_repo.count_active_direct_reports(employee_id)
        if reports > 0:
            raise BusinessRuleException(
                f"Cannot offboard employee with {reports} direct reports. "
                "Please reassign them first.",
                direct_reports=reports,
            )
        result = await self.employee_repo.offboard_employee(
            employee_id, data, performed_by=performed_by, offboarded_at=utc_now()
        )
        await self.events.to_topic(
            Topic.EMPLOYEE_EVENTS,
            "employee.offboarded",
            {
                "employeeId": employee_id,
                "userId": employee.user_id,
                "lastWorkingDate": data.last_working_date.isoformat(),
                "reason": data.reason,
                "offboardedBy": performed_by,
            },
        )
        logger.info("Employee offboarded: %s (%s)", employee_id, data.reason)
        return result

    async def get_direct_reports(self, employee_id: str) -> list[EmployeeResult]:
        await self.get_employee(employee_id)
        return await self.employee_repo.get_direct_reports(employee_id)

    async def get_reporting_chain(self, employee_id: str) -> list[EmployeeResult]:
        """Managers from the direct manager upwards. Stops on a cycle or a missing manager."""
        chain: list[EmployeeResult] = []
        visited: set[str] = set()
        current = await self.get_employee(employee_id)
        visited.add(current.id)
        while current.reporting_to_id and current.reporting_to_id not in visited:
            manager = await self.employee_repo.get_by_id(current.reporting_to_id)
            if manager is None:
                break
            chain.append(manager)
            visited.add(manager.id)
            current = manager
        return chain

    async def get_employee_stats(self) -> EmployeeStats:
        since = utc_now().date() - timedelta(days=30)
        return await self.employee_repo.get_stats(recent_since=since)
