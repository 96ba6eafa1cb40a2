"""Tenant (platform administration) API schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, SecretStr, field_validator

from app.application.dtos.tenant import TenantAdminInput
from app.domain.enums import TenantStatus


def _normalize_slug(value: str) -> str:
    """Lowercase, no spaces, join with '-' (e.g. 'Acme Corp' -> 'acme-corp')."""
    return "-".join(value.strip().lower().split())


class TenantAdminRequest(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    password: SecretStr | None = Field(
        default=None,
        description="Initial password (min 8 chars); generated when omitted and never returned",
    )

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: SecretStr | None) -> SecretStr | None:
        if v is not None and len(v.get_secret_value()) < 8:
            raise ValueError("password must be at least 8 characters")
        return v

    def to_input(self) -> TenantAdminInput:
        return TenantAdminInput(
            email=str(self.email),
            first_name=self.first_name,
            last_name=self.last_name,
            password=self.password.get_secret_value() if self.password else None,
        )


class TenantProvisionRequest(BaseModel):
    """Request body for provisioning a tenant.

    The slug names the tenant database (prefix + slug with '-' as '_') and
    is what clients send in X-Tenant-Slug. It is normalized to lowercase,
    hyphen-separated.
    """

    slug: str = Field(
        ...,
        min_length=3,
        max_length=50,
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$",
        description="Unique tenant slug",
    )
    name: str = Field(..., min_length=1, max_length=255)
    plan: str = Field(default="starter", max_length=50)
    admin: TenantAdminRequest

    @field_validator("slug", mode="before")
    @classmethod
    def normalize_slug(cls, v: str) -> str:
        """Normalize before pattern/length checks so e.g. 'Acme Corp' becomes 'acme-corp'."""
        return _normalize_slug(v)


class TenantProvisionResponse(BaseModel):
    """Result of provisioning. The admin password is never returned."""

    model_config = ConfigDict(from_attributes=True)

    tenant_id: str
    slug: str
    database_name: str
    admin_employee_code: str
    admin_email: str


class TenantStatusUpdate(BaseModel):
    """Request body for PATCH /tenants/{id}/status."""

    status: TenantStatus


class TenantPlanUpdate(BaseModel):
    """Request body for PATCH /tenants/{id}/plan."""

    plan: str = Field(..., min_length=1, max_length=50)


class TenantResponse(BaseModel):
    """Tenant in list/get responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str
    name: str
    status: TenantStatus
    plan: str
    database_name: str | None = None
