"""Pydantic request/response schemas for the API."""

from app.schemas.common import BulkResultResponse, PageResponse
from app.schemas.health import HealthResponse, ReadinessResponse
from app.schemas.tenant import TenantProvisionRequest, TenantResponse

__all__ = [
    "BulkResultResponse",
    "HealthResponse",
    "PageResponse",
    "ReadinessResponse",
    "TenantProvisionRequest",
    "TenantResponse",
]
