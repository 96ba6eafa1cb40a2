"""Optional holiday opt-in ORM model (tenant database)."""

import datetime as dt

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import OptionalHolidayStatus
from app.infrastructure.persistence.database import TenantBase
from app.infrastructure.persistence.models.mixins import TenantModel


class EmployeeOptionalHoliday(TenantModel, TenantBase):
    """An employee's opt-in to an optional holiday. Cancelled rows are reused on re-opt."""

    __tablename__ = "employee_optional_holiday"

    employee_id: Mapped[str] = mapped_column(
        String, ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True
    )
    holiday_id: Mapped[str] = mapped_column(
        String, ForeignKey("holiday.id", ondelete="CASCADE"), nullable=False
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=OptionalHolidayStatus.OPTED.value
    )
    opted_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    cancelled_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("employee_id", "holiday_id", name="uq_employee_optional_holiday"),
    )
