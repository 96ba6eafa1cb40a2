"""Employee, department and designation API schemas."""

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.application.dtos.employee import OffboardEmployeeInput, OnboardEmployeeInput
from app.domain.enums import EmploymentType, OffboardingReason, WorkLocation


def _changes(model: BaseModel) -> dict[str, Any]:
    """Fields the client actually sent, enums as plain values."""
    return model.model_dump(exclude_unset=True, mode="python")


class EmployeeOnboardRequest(BaseModel):
    """Request body for onboarding: the user account and employee record are created together."""

    model_config = ConfigDict(use_enum_values=True)

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    department_id: str
    designation_id: str
    joining_date: date
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    work_location: WorkLocation = WorkLocation.OFFICE
    role_id: str | None = None
    phone: str | None = Field(default=None, max_length=30)
    employee_code: str | None = Field(default=None, max_length=30)
    reporting_to_id: str | None = None
    salary: Decimal | None = Field(default=None, ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    date_of_birth: date | None = None
    gender: str | None = None
    address: dict[str, Any] = Field(default_factory=dict)
    emergency_contact: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_input(self) -> OnboardEmployeeInput:
        return OnboardEmployeeInput(**self.model_dump(mode="python") | {"email": str(self.email)})


class EmployeeUpdateRequest(BaseModel):
    """Partial update; only fields present in the body are changed."""

    model_config = ConfigDict(use_enum_values=True)

    department_id: str | None = None
    designation_id: str | None = None
    reporting_to_id: str | None = None
    employment_type: EmploymentType | None = None
    work_location: WorkLocation | None = None
    salary: Decimal | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    date_of_birth: date | None = None
    gender: str | None = None
    address: dict[str, Any] | None = None
    emergency_contact: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None

    def changes(self) -> dict[str, Any]:
        return _changes(self)


class EmployeeOffboardRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    last_working_date: date
    reason: OffboardingReason
    notes: str | None = None

    def to_input(self) -> OffboardEmployeeInput:
        return OffboardEmployeeInput(
            last_working_date=self.last_working_date, reason=self.reason, notes=self.notes
        )


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    employee_code: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: str | None
    department_id: str
    designation_id: str
    reporting_to_id: str | None
    joining_date: date
    employment_type: str
    work_location: str
    status: str
    salary: Decimal | None
    currency: str
    date_of_birth: date | None
    gender: str | None
    address: dict[str, Any]
    emergency_contact: dict[str, Any]
    last_working_date: date | None
    offboarding_reason: str | None
    metadata: dict[str, Any]


class EmployeeStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    active: int
    on_leave: int
    by_department: dict[str, int]
    by_employment_type: dict[str, int]
    by_work_location: dict[str, int]
    recent_joiners: int


class DepartmentCreateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=20, description="Upper-cased on save")
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    parent_id: str | None = None
    head_id: str | None = None


class DepartmentUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    parent_id: str | None = None
    head_id: str | None = None
    is_active: bool | None = None

    def changes(self) -> dict[str, Any]:
        return _changes(self)


class DepartmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    name: str
    description: str | None
    parent_id: str | None
    head_id: str | None
    is_active: bool


class DesignationCreateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=20, description="Upper-cased on save")
    name: str = Field(..., min_length=1, max_length=255)
    level: int = Field(default=1, ge=1, description="Seniority; 1 is the most senior")
    description: str | None = None


class DesignationUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    level: int | None = Field(default=None, ge=1)
    description: str | None = None
    is_active: bool | None = None

    def changes(self) -> dict[str, Any]:
        return _changes(self)


class DesignationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    name: str
    level: int
    description: str | None
    is_active: bool
