"""Department and Designation ORM models (tenant database reference data)."""

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import TenantBase
from app.infrastructure.persistence.models.mixins import ActiveMixin, AuditedTenantModel


class Department(AuditedTenantModel, ActiveMixin, TenantBase):
    """Department. Table: department. Unique upper-case code."""

    __tablename__ = "department"

    code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    parent_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("department.id", ondelete="SET NULL"), nullable=True
    )
    head_id: Mapped[str | None] = mapped_column(String, nullable=True)


class Designation(AuditedTenantModel, ActiveMixin, TenantBase):
    """Designation (job title). Table: designation. Level 1 is the most senior."""

    __tablename__ = "designation"

    code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
