"""Department and designation reference data."""

from __future__ import annotations

import logging
from typing import Any

from app.application.dtos.employee import DepartmentResult, DesignationResult
from app.application.interfaces.repositories import (
    IDepartmentRepository,
    IDesignationRepository,
    IEmployeeRepository,
)
from app.domain.exceptions import (
    BusinessRuleException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


def normalize_code(code: str) -> str:
    value = code.strip().upper()
    if not value:
        raise ValidationException("Code must not be empty", field="code")
    return value


class DepartmentService:
    """Create, list, update and deactivate departments."""

    def __init__(
        self,
        department_repo: IDepartmentRepository,
        employee_repo: IEmployeeRepository,
    ) -> None:
        self.department_repo = department_repo
        self.employee_repo = employee_repo

    async def create_department(
        self,
        code: str,
        name: str,
        description: str | None = None,
        parent_id: str | None = None,
        head_id: str | None = None,
        performed_by: str | None = None,
    ) -> DepartmentResult:
        normalized = normalize_code(code)
        if await self.department_repo.get_by_code(normalized):
            raise ConflictException(
                f"Department code '{normalized}' already exists", code=normalized
            )
        if parent_id and not await self.department_repo.get_by_id(parent_id):
            raise ValidationException("Parent department not found", field="parent_id")
        created = await self.department_repo.create_department(
            code=normalized,
            name=name,
            description=description,
            parent_id=parent_id,
            head_id=head_id,
            performed_by=performed_by,
        )
        logger.info("Department created: %s (%s)", created.id, normalized)
        return created

    async def get_department(self, department_id: str) -> DepartmentResult:
        department = await self.department_repo.get_by_id(department_id)
        if not department:
            raise ResourceNotFoundException("department", department_id)
        return department

    async def list_departments(self, include_inactive: bool = False) -> list[DepartmentResult]:
        return await self.department_repo.list_departments(include_inactive=include_inactive)

    async def update_department(
        self,
        department_id: str,
        changes: dict[str, Any],
        performed_by: str | None = None,
    ) -> DepartmentResult:
        if changes.get("parent_id") == department_id:
            raise ValidationException(
                "Department cannot be its own parent", field="parent_id"
            )
        if changes.get("is_active") is False:
            await self._ensure_no_active_employees(department_id)
        updated = await self.department_repo.update_department(
            department_id, changes, performed_by=performed_by
        )
        if not updated:
            raise ResourceNotFoundException("department", department_id)
        return updated

    async def deactivate_department(
        self, department_id: str, performed_by: str | None = None
    ) -> DepartmentResult:
        return await self.update_department(
            department_id, {"is_active": False}, performed_by=performed_by
        )

    async def _ensure_no_active_employees(self, department_id: str) -> None:
        count = await self.employee_repo.count_active_in_department(department_id)
        if count:
            raise BusinessRuleException(
                f"Department has {count} active employees", active_employees=count
            )


class DesignationService:
    """Create, list and update designations (job titles with a seniority level)."""

    def __init__(self, designation_repo: IDesignationRepository) -> None:
        self.designation_repo = designation_repo

    async def create_designation(
        self,
        code: str,
        name: str,
        level: int = 1,
        description: str | None = None,
        performed_by: str | None = None,
    ) -> DesignationResult:
        normalized = normalize_code(code)
        if level < 1:
            raise ValidationException("Level must be at least 1", field="level")
        if await self.designation_repo.get_by_code(normalized):
            raise ConflictException(
                f"Designation code '{normalized}' already exists", code=normalized
            )
        return await self.designation_repo.create_designation(
            code=normalized,
            name=name,
            level=level,
            description=description,
            performed_by=performed_by,
        )

    async def get_designation(self, designation_id: str) -> DesignationResult:
        designation = await self.designation_repo.get_by_id(designation_id)
        if not designation:
            raise ResourceNotFoundException("designation", designation_id)
        return designation

    async def list_designations(
        self, include_inactive: bool = False
    ) -> list[DesignationResult]:
        return await self.designation_repo.list_designations(
            include_inactive=include_inactive
        )

    async def update_designation(
        self,
        designation_id: str,
        changes: dict[str, Any],
        performed_by: str | None = None,
    ) -> DesignationResult:
        updated = await self.designation_repo.update_designation(
            designation_id, changes, performed_by=performed_by
        )
        if not updated:
            raise ResourceNotFoundException("designation", designation_id)
        return updated
