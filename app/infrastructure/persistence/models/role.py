"""Role ORM model (tenant database). Seeded per tenant; one role is the default."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import TenantBase
from app.infrastructure.persistence.models.mixins import ActiveMixin, TenantModel


class Role(TenantModel, ActiveMixin, TenantBase):
    """Role. Table: role. Unique code."""

    __tablename__ = "role"

    code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
