"""Employee repository (tenant database). Employees are read joined with their user."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.common import Page
from app.application.dtos.employee import (
    EmployeeFilters,
    EmployeeResult,
    EmployeeStats,
    OffboardEmployeeInput,
    OnboardEmployeeInput,
)
from app.domain.enums import EmployeeStatus, UserStatus
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.models.department import Department
from app.infrastructure.persistence.models.employee import Employee
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories.base import BaseRepository

# DTO field -> model attribute, where they differ.
_FIELD_ALIASES = {"metadata": "extra"}


def _employee_to_result(e: Employee, u: User) -> EmployeeResult:
    return EmployeeResult(
        id=e.id,
        user_id=e.user_id,
        employee_code=e.employee_code,
        first_name=u.first_name,
        last_name=u.last_name,
        email=u.email,
        department_id=e.department_id,
        designation_id=e.designation_id,
        reporting_to_id=e.reporting_to_id,
        joining_date=e.joining_date,
        employment_type=e.employment_type,
        work_location=e.work_location,
        status=e.status,
        phone=u.phone,
        salary=e.salary,
        currency=e.currency,
        date_of_birth=e.date_of_birth,
        gender=e.gender,
        address=e.address or {},
        emergency_contact=e.emergency_contact or {},
        last_working_date=e.last_working_date,
        offboarding_reason=e.offboarding_reason,
        metadata=e.extra or {},
    )


def _apply_filters(stmt: Select, filters: EmployeeFilters) -> Select:
    if filters.search:
        term = f"%{filters.search.strip()}%"
        stmt = stmt.where(
            or_(
                Employee.employee_code.ilike(term),
                User.first_name.ilike(term),
                User.last_name.ilike(term),
                User.email.ilike(term),
            )
        )
    if filters.department_id:
        stmt = stmt.where(Employee.department_id == filters.department_id)
    if filters.designation_id:
        stmt = stmt.where(Employee.designation_id == filters.designation_id)
    if filters.employment_type:
        stmt = stmt.where(Employee.employment_type == filters.employment_type)
    if filters.work_location:
        stmt = stmt.where(Employee.work_location == filters.work_location)
    if filters.status:
        stmt = stmt.where(Employee.status == filters.status)
    if filters.reporting_to_id:
        stmt = stmt.where(Employee.reporting_to_id == filters.reporting_to_id)
    if filters.joining_date_from:
        stmt = stmt.where(Employee.joining_date >= filters.joining_date_from)
    if filters.joining_date_to:
        stmt = stmt.where(Employee.joining_date <= filters.joining_date_to)
    return stmt


class EmployeeRepository(BaseRepository[Employee]):
    """Employee repository. Writes touch both employee and app_user rows."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Employee)

    def _joined(self) -> Select:
        return select(Employee, User).join(User, User.id == Employee.user_id)

    async def _one(self, stmt: Select) -> EmployeeResult | None:
        row = (await self.db.execute(stmt)).first()
        return _employee_to_result(row[0], row[1]) if row else None

    async def get_by_id(self, employee_id: str) -> EmployeeResult | None:
        return await self._one(self._joined().where(Employee.id == employee_id))

    async def get_by_user_id(self, user_id: str) -> EmployeeResult | None:
        return await self._one(self._joined().where(Employee.user_id == user_id))

    async def get_by_code(self, employee_code: str) -> EmployeeResult | None:
        return await self._one(self._joined().where(Employee.employee_code == employee_code))

    async def get_last_code(self, prefix: str) -> str | None:
        result = await self.db.execute(
            select(Employee.employee_code)
            .where(Employee.employee_code.regexp_match(f"^{re.escape(prefix)}[0-9]+$"))
            .order_by(func.length(Employee.employee_code).desc(), Employee.employee_code.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        result = await self.db.execute(
            select(func.count()).select_from(User).where(func.lower(User.email) == email.lower())
        )
        return (result.scalar_one() or 0) > 0

    async def create_employee(
        self,
        data: OnboardEmployeeInput,
        email: str,
        employee_code: str,
        role_id: str,
        performed_by: str | None = None,
    ) -> EmployeeResult:
        """Insert the user then the employee; both flushed in the caller's transaction."""
        user = User(
            email=email,
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            role_id=role_id,
            status=UserStatus.ACTIVE.value,
            created_by=performed_by,
            updated_by=performed_by,
        )
        self.db.add(user)
        await self.db.flush()
        employee = Employee(
            user_id=user.id,
            employee_code=employee_code,
            department_id=data.department_id,
            designation_id=data.designation_id,
            reporting_to_id=data.reporting_to_id,
            joining_date=data.joining_date,
            employment_type=data.employment_type,
            work_location=data.work_location,
            salary=data.salary,
            currency=data.currency,
            date_of_birth=data.date_of_birth,
            gender=data.gender,
            address=dict(data.address),
            emergency_contact=dict(data.emergency_contact),
            status=EmployeeStatus.ACTIVE.value,
            extra=dict(data.metadata),
            created_by=performed_by,
            updated_by=performed_by,
        )
        employee = await self._add(employee)
        await self.db.refresh(user)
        return _employee_to_result(employee, user)

    async def list_employees(
        self, filters: EmployeeFilters, page: int = 1, page_size: int = 20
    ) -> Page[EmployeeResult]:
        count_stmt = _apply_filters(
            select(func.count())
            .select_from(Employee)
            .join(User, User.id == Employee.user_id),
            filters,
        )
        total = (await self.db.execute(count_stmt)).scalar_one()
        stmt = (
            _apply_filters(self._joined(), filters)
            .order_by(User.first_name, User.last_name, Employee.employee_code)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        rows = (await self.db.execute(stmt)).all()
        return Page(
            items=[_employee_to_result(e, u) for e, u in rows],
            total=total,
            page=page,
            page_size=page_size,
        )

    async def update_employee(
        self, employee_id: str, changes: dict[str, Any], performed_by: str | None = None
    ) -> EmployeeResult | None:
        employee = await self._get(employee_id)
        if employee is None:
            return None
        await self._apply_changes(
            employee, {**changes, "updated_by": performed_by}, aliases=_FIELD_ALIASES
        )
        return await self.get_by_id(employee_id)

    async def offboard_employee(
        self,
        employee_id: str,
        data: OffboardEmployeeInput,
        performed_by: str | None,
        offboarded_at: datetime,
    ) -> EmployeeResult:
        employee = await self._require(employee_id)
        employee.status = EmployeeStatus.OFFBOARDED.value
        employee.last_working_date = data.last_working_date
        employee.offboarding_reason = data.reason
        employee.offboarding_notes = data.notes
        employee.offboarded_at = offboarded_at
        employee.offboarded_by = performed_by
        employee.updated_by = performed_by
        user = await self.db.get(User, employee.user_id, with_for_update=True)
        if user is None:
            raise ResourceNotFoundException("user", employee.user_id)
        user.status = UserStatus.INACTIVE.value
        user.updated_by = performed_by
        await self.db.flush()
        await self.db.refresh(employee)
        return _employee_to_result(employee, user)

    async def count_active_direct_reports(self, employee_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Employee)
            .where(
                Employee.reporting_to_id == employee_id,
                Employee.status == EmployeeStatus.ACTIVE.value,
            )
        )
        return result.scalar_one()

    async def count_active_in_department(self, department_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Employee)
            .where(
                Employee.department_id == department_id,
                Employee.status == EmployeeStatus.ACTIVE.value,
            )
        )
        return result.scalar_one()

    async def get_direct_reports(self, employee_id: str) -> list[EmployeeResult]:
        rows = (
            await self.db.execute(
                self._joined()
                .where(
                    Employee.reporting_to_id == employee_id,
                    Employee.status != EmployeeStatus.OFFBOARDED.value,
                )
                .order_by(User.first_name, User.last_name)
            )
        ).all()
        return [_employee_to_result(e, u) for e, u in rows]

    async def _count_by(self, column: Any) -> dict[str, int]:
        result = await self.db.execute(
            select(column, func.count())
            .select_from(Employee)
            .where(Employee.status != EmployeeStatus.OFFBOARDED.value)
            .group_by(column)
        )
        return {str(key): count for key, count in result.all()}

    async def get_stats(self, recent_since: date) -> EmployeeStats:
        by_status = await self._count_by(Employee.status)
        dept_rows = await self.db.execute(
            select(Department.name, func.count(Employee.id))
            .join(Employee, Employee.department_id == Department.id)
            .where(Employee.status != EmployeeStatus.OFFBOARDED.value)
            .group_by(Department.name)
        )
        recent = await self.db.execute(
            select(func.count())
            .select_from(Employee)
            .where(Employee.joining_date >= recent_since)
        )
        return EmployeeStats(
            total=sum(by_status.values()),
            active=by_status.get(EmployeeStatus.ACTIVE.value, 0),
            on_leave=by_status.get(EmployeeStatus.ON_LEAVE.value, 0),
            by_department={name: count for name, count in dept_rows.all()},
            by_employment_type=await self._count_by(Employee.employment_type),
            by_work_location=await self._count_by(Employee.work_location),
            recent_joiners=recent.scalar_one(),
        )
