"""DTOs for employee, department and designation use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class DepartmentResult:
    id: str
    code: str
    name: str
    description: str | None
    parent_id: str | None
    head_id: str | None
    is_active: bool


@dataclass(frozen=True)
class DesignationResult:
    id: str
    code: str
    name: str
    level: int
    description: str | None
    is_active: bool


@dataclass(frozen=True)
class RoleResult:
    id: str
    code: str
    name: str
    is_active: bool
    is_default: bool


@dataclass(frozen=True)
class EmployeeResult:
    """Employee read-model joined with its user (name, email)."""

    id: str
    user_id: str
    employee_code: str
    first_name: str
    last_name: str
    email: str
    department_id: str
    designation_id: str
    reporting_to_id: str | None
    joining_date: date
    employment_type: str
    work_location: str
    status: str
    phone: str | None = None
    salary: Decimal | None = None
    currency: str = "USD"
    date_of_birth: date | None = None
    gender: str | None = None
    address: dict[str, Any] = field(default_factory=dict)
    emergency_contact: dict[str, Any] = field(default_factory=dict)
    last_working_date: date | None = None
    offboarding_reason: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class OnboardEmployeeInput:
    """Input for onboarding: creates the user and the employee."""

    email: str
    first_name: str
    last_name: str
    department_id: str
    designation_id: str
    joining_date: date
    employment_type: str
    work_location: str
    role_id: str | None = None
    phone: str | None = None
    employee_code: str | None = None
    reporting_to_id: str | None = None
    salary: Decimal | None = None
    currency: str = "USD"
    date_of_birth: date | None = None
    gender: str | None = None
    address: dict[str, Any] = field(default_factory=dict)
    emergency_contact: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class OffboardEmployeeInput:
    last_working_date: date
    reason: str
    notes: str | None = None


@dataclass(frozen=True)
class EmployeeFilters:
    search: str | None = None
    department_id: str | None = None
    designation_id: str | None = None
    employment_type: str | None = None
    work_location: str | None = None
    status: str | None = None
    reporting_to_id: str | None = None
    joining_date_from: date | None = None
    joining_date_to: date | None = None
    page: int = 1
    page_size: int = 20


@dataclass(frozen=True)
class EmployeeStats:
    total: int
    active: int
    on_leave: int
    by_department: dict[str, int]
    by_employment_type: dict[str, int]
    by_work_location: dict[str, int]
    recent_joiners: int
