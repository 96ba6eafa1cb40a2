"""User ORM model (tenant database). Login identity linked 1:1 to an employee."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import UserStatus
from app.infrastructure.persistence.database import TenantBase
from app.infrastructure.persistence.models.mixins import AuditedTenantModel


class User(AuditedTenantModel, TenantBase):
    """User. Table: app_user. Unique email."""

    __tablename__ = "app_user"

    email: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    hashed_password: Mapped[str | None] = mapped_column(String, nullable=True)
    role_id: Mapped[str] = mapped_column(
        String, ForeignKey("role.id", ondelete="RESTRICT"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=UserStatus.ACTIVE.value
    )
