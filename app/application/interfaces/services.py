"""Service interfaces (ports) for the application layer.

Protocols define contracts for infrastructure services that use cases
depend on (DIP). Event emission goes through IEventPublisher so use cases
never see which transport is active.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol

from app.application.dtos.tenant import TenantAdminInput, TenantProvisionResult
from app.domain.enums import TenantStatus
from app.domain.events import EventContext


class IEventPublisher(Protocol):
    """Protocol for emitting domain events (implemented by EventBus)."""

    async def send_to_queue(
        self,
        queue: str | Enum,
        event_type: str,
        payload: dict[str, Any],
        context: EventContext | None = None,
        *,
        delay_seconds: int = 0,
    ) -> str:
        """Send one event to a queue; return the message id."""
        ...

    async def publish_to_topic(
        self,
        topic: str | Enum,
        event_type: str,
        payload: dict[str, Any],
        context: EventContext | None = None,
    ) -> str:
        """Publish one event to a topic; return the message id."""
        ...


class ITenantProvisioner(Protocol):
    """Protocol for creating tenant databases and dropping cached tenant state."""

    async def provision_tenant(
        self,
        slug: str,
        name: str,
        admin: TenantAdminInput,
        *,
        plan: str = "starter",
        status: TenantStatus = TenantStatus.TRIAL,
    ) -> TenantProvisionResult:
        """Create, migrate and seed the database, then register the tenant."""
        ...

    async def invalidate_tenant_cache(self, slug: str) -> None:
        """Forget cached lookups and the database client of a tenant."""
        ...
