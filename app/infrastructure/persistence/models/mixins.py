"""SQLAlchemy mixins for common model patterns (DRY).

Provides: CuidMixin, TimestampMixin, UserAuditMixin, ActiveMixin and the
combined TenantModel used by every table inside a tenant database. Tenant
databases are physically separate, so no tenant_id column is needed there.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from app.shared.utils.generators import generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TimestampMixin:
    """Mixin for created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class UserAuditMixin:
    """Mixin for created_by / updated_by (user ids from the gateway headers)."""

    @declared_attr
    def created_by(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True)

    @declared_attr
    def updated_by(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True)


class ActiveMixin:
    """Mixin for reference data that is deactivated rather than deleted."""

    @declared_attr
    def is_active(cls) -> Mapped[bool]:
        return mapped_column(Boolean, nullable=False, default=True)


class TenantModel(CuidMixin, TimestampMixin):
    """Combined mixin: CUID + created_at/updated_at. Common for tenant tables."""

    __abstract__ = True


class AuditedTenantModel(CuidMixin, TimestampMixin, UserAuditMixin):
    """Combined mixin: CUID + timestamps + created_by/updated_by."""

    __abstract__ = True
