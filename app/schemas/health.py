"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready when the master database answers."""

    status: str = Field(default="ok", description="Readiness status")
    event_bus_mode: str | None = Field(default=None, description="redis or aws; None when disabled")
    active_tenant_connections: int = 0
    tenant_lookup_cache_size: int = 0


class ReadinessErrorResponse(BaseModel):
    """Response for GET /health/ready when the master database is unreachable (503)."""

    status: str = Field(default="not_ready", description="Readiness status")
    message: str = Field(..., description="Reason")
