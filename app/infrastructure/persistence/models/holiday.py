"""Holiday ORM model (tenant database)."""

import datetime as dt

from sqlalchemy import JSON, Boolean, Date, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import HolidayType
from app.infrastructure.persistence.database import TenantBase
from app.infrastructure.persistence.models.mixins import AuditedTenantModel


class Holiday(AuditedTenantModel, TenantBase):
    """Holiday. department_ids lists the departments it applies to when applies_to_all is false."""

    __tablename__ = "holiday"

    name: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    type: Mapped[str] = mapped_column(String, nullable=False, default=HolidayType.PUBLIC.value)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_to_all: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    department_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (UniqueConstraint("name", "date", name="uq_holiday_name_date"),)
