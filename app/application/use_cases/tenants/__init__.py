"""Tenant use cases."""

from app.application.use_cases.tenants.tenant_operations import TenantService

__all__ = ["TenantService"]
