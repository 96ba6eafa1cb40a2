"""Role, department and designation repositories (tenant database). Return DTOs."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.employee import DepartmentResult, DesignationResult, RoleResult
from app.infrastructure.persistence.models.department import Department, Designation
from app.infrastructure.persistence.models.role import Role
from app.infrastructure.persistence.repositories.base import BaseRepository


def _role_to_result(r: Role) -> RoleResult:
    return RoleResult(
        id=r.id, code=r.code, name=r.name, is_active=r.is_active, is_default=r.is_default
    )


def _department_to_result(d: Department) -> DepartmentResult:
    return DepartmentResult(
        id=d.id,
        code=d.code,
        name=d.name,
        description=d.description,
        parent_id=d.parent_id,
        head_id=d.head_id,
        is_active=d.is_active,
    )


def _designation_to_result(d: Designation) -> DesignationResult:
    return DesignationResult(
        id=d.id,
        code=d.code,
        name=d.name,
        level=d.level,
        description=d.description,
        is_active=d.is_active,
    )


class RoleRepository(BaseRepository[Role]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Role)

    async def get_by_id(self, role_id: str) -> RoleResult | None:
        role = await self._get(role_id)
        return _role_to_result(role) if role else None

    async def get_by_code(self, code: str) -> RoleResult | None:
        result = await self.db.execute(select(Role).where(Role.code == code))
        role = result.scalar_one_or_none()
        return _role_to_result(role) if role else None

    async def get_default(self) -> RoleResult | None:
        result = await self.db.execute(
            select(Role).where(Role.is_default.is_(True), Role.is_active.is_(True)).limit(1)
        )
        role = result.scalar_one_or_none()
        return _role_to_result(role) if role else None


class DepartmentRepository(BaseRepository[Department]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Department)

    async def get_by_id(self, department_id: str) -> DepartmentResult | None:
        department = await self._get(department_id)
        return _department_to_result(department) if department else None

    async def get_by_code(self, code: str) -> DepartmentResult | None:
        result = await self.db.execute(select(Department).where(Department.code == code))
        department = result.scalar_one_or_none()
        return _department_to_result(department) if department else None

    async def create_department(
        self,
        code: str,
        name: str,
        description: str | None = None,
        parent_id: str | None = None,
        head_id: str | None = None,
        performed_by: str | None = None,
    ) -> DepartmentResult:
        department = Department(
            code=code,
            name=name,
            description=description,
            parent_id=parent_id,
            head_id=head_id,
            created_by=performed_by,
            updated_by=performed_by,
        )
        return _department_to_result(await self._add(department))

    async def list_departments(self, include_inactive: bool = False) -> list[DepartmentResult]:
        stmt = select(Department).order_by(Department.name)
        if not include_inactive:
            stmt = stmt.where(Department.is_active.is_(True))
        result = await self.db.execute(stmt)
        return [_department_to_result(d) for d in result.scalars().all()]

    async def update_department(
        self, department_id: str, changes: dict[str, Any], performed_by: str | None = None
    ) -> DepartmentResult | None:
        department = await self._get(department_id)
        if department is None:
            return None
        updated = await self._apply_changes(
            department, {**changes, "updated_by": performed_by}
        )
        return _department_to_result(updated)


class DesignationRepository(BaseRepository[Designation]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Designation)

    async def get_by_id(self, designation_id: str) -> DesignationResult | None:
        designation = await self._get(designation_id)
        return _designation_to_result(designation) if designation else None

    async def get_by_code(self, code: str) -> DesignationResult | None:
        result = await self.db.execute(select(Designation).where(Designation.code == code))
        designation = result.scalar_one_or_none()
        return _designation_to_result(designation) if designation else None

    async def create_designation(
        self,
        code: str,
        name: str,
        level: int = 1,
        description: str | None = None,
        performed_by: str | None = None,
    ) -> DesignationResult:
        designation = Designation(
            code=code,
            name=name,
            level=level,
            description=description,
            created_by=performed_by,
            updated_by=performed_by,
        )
        return _designation_to_result(await self._add(designation))

    async def list_designations(
        self, include_inactive: bool = False
    ) -> list[DesignationResult]:
        stmt = select(Designation).order_by(Designation.level, Designation.name)
        if not include_inactive:
            stmt = stmt.where(Designation.is_active.is_(True))
        result = await self.db.execute(stmt)
        return [_designation_to_result(d) for d in result.scalars().all()]

    async def update_designation(
        self, designation_id: str, changes: dict[str, Any], performed_by: str | None = None
    ) -> DesignationResult | None:
        designation = await self._get(designation_id)
        if designation is None:
            return None
        updated = await self._apply_changes(
            designation, {**changes, "updated_by": performed_by}
        )
        return _designation_to_result(updated)
