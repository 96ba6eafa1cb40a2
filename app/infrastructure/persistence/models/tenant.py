"""Tenant ORM model (master database). Registry of customer organizations."""

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import TenantStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Tenant(CuidMixin, TimestampMixin, Base):
    """Registered tenant. Table: tenant.

    database_name/host/port are optional overrides; when unset the tenant
    database is tenant_db_prefix + slug on the default tenant host.
    """

    __tablename__ = "tenant"

    slug: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=TenantStatus.TRIAL.value, index=True
    )
    plan: Mapped[str] = mapped_column(String, nullable=False, default="starter")
    database_name: Mapped[str | None] = mapped_column(String, nullable=True)
    database_host: Mapped[str | None] = mapped_column(String, nullable=True)
    database_port: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ({})".format(
                ", ".join(f"'{v}'" for v in TenantStatus.values())
            ),
            name="tenant_status_check",
        ),
    )
