"""Employee ORM model (tenant database)."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import EmployeeStatus
from app.infrastructure.persistence.database import TenantBase
from app.infrastructure.persistence.models.mixins import AuditedTenantModel


class Employee(AuditedTenantModel, TenantBase):
    """Employee. Table: employee. Unique employee_code and user_id."""

    __tablename__ = "employee"

    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="RESTRICT"), nullable=False, unique=True
    )
    employee_code: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    department_id: Mapped[str] = mapped_column(
        String, ForeignKey("department.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    designation_id: Mapped[str] = mapped_column(
        String, ForeignKey("designation.id", ondelete="RESTRICT"), nullable=False
    )
    reporting_to_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("employee.id", ondelete="SET NULL"), nullable=True, index=True
    )
    joining_date: Mapped[date] = mapped_column(Date, nullable=False)
    employment_type: Mapped[str] = mapped_column(String, nullable=False)
    work_location: Mapped[str] = mapped_column(String, nullable=False)
    salary: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    currency: Mapped[str] = mapped_column(String, nullable=False, default="USD")
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    emergency_contact: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=EmployeeStatus.ACTIVE.value, index=True
    )
    last_working_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    offboarding_reason: Mapped[str | None] = mapped_column(String, nullable=True)
    offboarding_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    offboarded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    offboarded_by: Mapped[str | None] = mapped_column(String, nullable=True)
    extra: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )
