"""Default reference data for a new tenant database.

Roles, departments and designations are inserted only when their code is
missing, so seeding a partially seeded database is safe. The first
administrator gets employee code EMP000001 in OPS as CEO.
"""

from __future__ import annotations

import logging
from typing import TypedDict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.tenant import TenantAdminInput
from app.domain.enums import EmployeeStatus, EmploymentType, UserStatus, WorkLocation
from app.infrastructure.persistence.models.department import Department, Designation
from app.infrastructure.persistence.models.employee import Employee
from app.infrastructure.persistence.models.role import Role
from app.infrastructure.persistence.models.user import User
from app.infrastructure.security.password import generate_temporary_password, get_password_hash
from app.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

ADMIN_ROLE_CODE = "tenant_admin"
ADMIN_DEPARTMENT_CODE = "OPS"
ADMIN_DESIGNATION_CODE = "CEO"


class RoleData(TypedDict):
    code: str
    name: str
    description: str
    is_default: bool


DEFAULT_ROLES: list[RoleData] = [
    {"code": "tenant_admin", "name": "Tenant Admin", "description": "Full access to tenant", "is_default": False},
    {"code": "hr_manager", "name": "HR Manager", "description": "Manage employees, attendance, leaves", "is_default": False},
    {"code": "project_manager", "name": "Project Manager", "description": "Manage projects and tasks", "is_default": False},
    {"code": "team_lead", "name": "Team Lead", "description": "Manage team members and tasks", "is_default": False},
    {"code": "employee", "name": "Employee", "description": "Basic employee access", "is_default": True},
    {"code": "viewer", "name": "Viewer", "description": "Read-only access", "is_default": False},
]

# (code, name, description)
DEFAULT_DEPARTMENTS: list[tuple[str, str, str]] = [
    ("ENG", "Engineering", "Software development, architecture, and DevOps"),
    ("PROD", "Product", "Product management and UX/UI design"),
    ("QA", "Quality Assurance", "Testing, automation, and quality control"),
    ("HR", "Human Resources", "Recruitment, employee relations, and payroll"),
    ("FIN", "Finance & Accounts", "Accounting, budgeting, and financial planning"),
    ("OPS", "Operations", "IT infrastructure, facilities, and administration"),
    ("SALES", "Sales", "Business development and client acquisition"),
    ("MKT", "Marketing", "Digital marketing, branding, and content"),
    ("CS", "Customer Success", "Support, client management, and onboarding"),
    ("LEGAL", "Legal & Compliance", "Contracts, compliance, and data privacy"),
]

# (code, name, level); level 1 is the most senior
DEFAULT_DESIGNATIONS: list[tuple[str, str, int]] = [
    ("CEO", "Chief Executive Officer", 1),
    ("CTO", "Chief Technology Officer", 1),
    ("CFO", "Chief Financial Officer", 1),
    ("COO", "Chief Operating Officer", 1),
    ("CPO", "Chief Product Officer", 1),
    ("CMO", "Chief Marketing Officer", 1),
    ("DIR_ENG", "Director of Engineering", 2),
    ("DIR_PROD", "Director of Product", 2),
    ("DIR_HR", "Director of HR", 2),
    ("DIR_SALES", "Director of Sales", 2),
    ("DIR_QA", "Director of QA", 2),
    ("DIR_OPS", "Director of Operations", 2),
    ("MGR_ENG", "Engineering Manager", 3),
    ("MGR_PROJ", "Project Manager", 3),
    ("MGR_PROD", "Product Manager", 3),
    ("MGR_HR", "HR Manager", 3),
    ("MGR_QA", "QA Manager", 3),
    ("MGR_ACC", "Account Manager", 3),
    ("MGR_OPS", "Operations Manager", 3),
    ("TECH_LEAD", "Technical Lead", 4),
    ("TEAM_LEAD", "Team Lead", 4),
    ("QA_LEAD", "QA Lead", 4),
    ("SR_SWE", "Senior Software Engineer", 5),
    ("SR_FE", "Senior Frontend Developer", 5),
    ("SR_BE", "Senior Backend Developer", 5),
    ("SR_FS", "Senior Full Stack Developer", 5),
    ("SR_DEVOPS", "Senior DevOps Engineer", 5),
    ("SR_QA", "Senior QA Engineer", 5),
    ("SR_DESIGN", "Senior UI/UX Designer", 5),
    ("SR_DATA", "Senior Data Analyst", 5),
    ("SR_BA", "Senior Business Analyst", 5),
    ("SWE", "Software Engineer", 6),
    ("FE_DEV", "Frontend Developer", 6),
    ("BE_DEV", "Backend Developer", 6),
    ("FS_DEV", "Full Stack Developer", 6),
    ("DEVOPS", "DevOps Engineer", 6),
    ("QA_ENG", "QA Engineer", 6),
    ("DESIGNER", "UI/UX Designer", 6),
    ("DATA_ANALYST", "Data Analyst", 6),
    ("BA", "Business Analyst", 6),
    ("TECH_WRITER", "Technical Writer", 6),
    ("HR_EXEC", "HR Executive", 6),
    ("ACCOUNTANT", "Accountant", 6),
    ("EXEC_ASST", "Executive Assistant", 6),
    ("OFFICE_ADMIN", "Office Administrator", 6),
    ("TECH_SUPPORT", "Technical Support Engineer", 6),
    ("SALES_EXEC", "Sales Executive", 6),
    ("MKT_EXEC", "Marketing Executive", 6),
    ("CONTENT_WRITER", "Content Writer", 6),
    ("RECRUITER", "Recruiter", 6),
    ("JR_SWE", "Junior Software Engineer", 7),
    ("JR_DEV", "Junior Developer", 7),
    ("JR_QA", "Junior QA Engineer", 7),
    ("ASSOC_DESIGN", "Associate Designer", 7),
    ("TRAINEE", "Trainee", 8),
    ("INTERN", "Intern", 8),
]


def admin_employee_code(prefix: str = "EMP", length: int = 6) -> str:
    """Code of the first employee: prefix + 1 zero-padded to length."""
    return f"{prefix}{1:0{length}d}"


class TenantSeeder:
    """Seeds one tenant database inside the caller's transaction."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _existing_codes(self, model: type[Role] | type[Department] | type[Designation]) -> set[str]:
        result = await self.db.execute(select(model.code))
        return set(result.scalars().all())

    async def seed_roles(self) -> int:
        existing = await self._existing_codes(Role)
        missing = [r for r in DEFAULT_ROLES if r["code"] not in existing]
        for role in missing:
            self.db.add(Role(**role, is_system=True, is_active=True))
        await self.db.flush()
        return len(missing)

    async def seed_departments(self) -> int:
        existing = await self._existing_codes(Department)
        missing = [d for d in DEFAULT_DEPARTMENTS if d[0] not in existing]
        for code, name, description in missing:
            self.db.add(Department(code=code, name=name, description=description))
        await self.db.flush()
        return len(missing)

    async def seed_designations(self) -> int:
        existing = await self._existing_codes(Designation)
        missing = [d for d in DEFAULT_DESIGNATIONS if d[0] not in existing]
        for code, name, level in missing:
            self.db.add(Designation(code=code, name=name, level=level))
        await self.db.flush()
        return len(missing)

    async def _id_by_code(self, model: type[Role] | type[Department] | type[Designation], code: str) -> str:
        result = await self.db.execute(select(model.id).where(model.code == code))
        return result.scalar_one()

    async def create_admin(self, admin: TenantAdminInput, employee_code: str) -> Employee:
        """Create the administrator user and employee; skipped if the email exists."""
        result = await self.db.execute(select(User).where(User.email == admin.email.lower()))
        user = result.scalar_one_or_none()
        if user is not None:
            existing = await self.db.execute(select(Employee).where(Employee.user_id == user.id))
            employee = existing.scalar_one_or_none()
            if employee is not None:
                logger.info("Admin %s already seeded; skipping", admin.email)
                return employee

        if user is None:
            user = User(
                email=admin.email.lower(),
                first_name=admin.first_name,
                last_name=admin.last_name,
                hashed_password=get_password_hash(admin.password or generate_temporary_password()),
                role_id=await self._id_by_code(Role, ADMIN_ROLE_CODE),
                status=UserStatus.ACTIVE.value,
            )
            self.db.add(user)
            await self.db.flush()

        employee = Employee(
            user_id=user.id,
            employee_code=employee_code,
            department_id=await self._id_by_code(Department, ADMIN_DEPARTMENT_CODE),
            designation_id=await self._id_by_code(Designation, ADMIN_DESIGNATION_CODE),
            joining_date=utc_now().date(),
            employment_type=EmploymentType.FULL_TIME.value,
            work_location=WorkLocation.OFFICE.value,
            status=EmployeeStatus.ACTIVE.value,
        )
        self.db.add(employee)
        await self.db.flush()
        return employee

    async def seed(self, admin: TenantAdminInput, employee_code: str) -> Employee:
        roles = await self.seed_roles()
        departments = await self.seed_departments()
        designations = await self.seed_designations()
        employee = await self.create_admin(admin, employee_code)
        logger.info(
            "Tenant seeded: roles=%d departments=%d designations=%d admin=%s",
            roles,
            departments,
            designations,
            employee.employee_code,
        )
        return employee
