"""Domain events exchanged over the event bus.

BaseEvent is the envelope every producer sends and every consumer
receives, whichever transport (SQS, SNS, Redis) carries it. The wire form
uses camelCase keys so events stay readable by non-Python services on the
same queues.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from app.shared.utils.datetime import utc_now

EVENT_VERSION = "1.0"


class Queue(str, Enum):
    """SQS queue names (point-to-point work)."""

    ATTENDANCE_CHECK_IN = "oms-attendance-check-in"
    ATTENDANCE_CHECK_OUT = "oms-attendance-check-out"
    LEAVE_REQUESTED = "oms-attendance-leave-requested"
    LEAVE_APPROVED = "oms-attendance-leave-approved"
    LEAVE_REJECTED = "oms-attendance-leave-rejected"
    LEAVE_CANCELLED = "oms-attendance-leave-cancelled"
    EMPLOYEE_ONBOARDED = "oms-employee-onboarded"
    EMPLOYEE_UPDATED = "oms-employee-updated"
    EMPLOYEE_OFFBOARDED = "oms-employee-offboarded"
    EMPLOYEE_DEPARTMENT_CHANGED = "oms-employee-department-changed"
    BILLING_INVOICE_CREATED = "oms-billing-invoice-created"
    BILLING_PAYMENT_RECEIVED = "oms-billing-payment-received"
    NOTIFICATION_SEND = "oms-notification-send"
    AUDIT_LOG = "oms-audit-log"
    TENANT_CREATED = "oms-tenant-created"
    TENANT_PROVISIONED = "oms-tenant-provisioned"


class Topic(str, Enum):
    """SNS topic names (fan-out)."""

    TENANT_EVENTS = "oms-tenant-events"
    USER_EVENTS = "oms-user-events"
    EMPLOYEE_EVENTS = "oms-employee-events"
    PROJECT_EVENTS = "oms-project-events"
    SYSTEM_EVENTS = "oms-system-events"
    BILLING_EVENTS = "oms-billing-events"
    ATTENDANCE_EVENTS = "oms-attendance-events"


def destination_name(value: str | Enum) -> str:
    """Queue/topic name from an enum member or a plain string."""
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class EventContext:
    """Who and which tenant an event is emitted for."""

    tenant_id: str | None = None
    tenant_slug: str | None = None
    user_id: str | None = None
    correlation_id: str | None = None
    causation_id: str | None = None


@dataclass
class BaseEvent:
    """Event envelope. id, timestamp and correlation_id are generated when omitted."""

    type: str
    source: str
    payload: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    version: str = EVENT_VERSION
    timestamp: str = field(default_factory=lambda: utc_now().isoformat())
    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    causation_id: str | None = None
    tenant_id: str | None = None
    tenant_slug: str | None = None
    user_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire form (camelCase keys)."""
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "version": self.version,
            "timestamp": self.timestamp,
            "source": self.source,
            "correlationId": self.correlation_id,
            "payload": self.payload,
            "metadata": self.metadata,
        }
        optional = {
            "causationId": self.causation_id,
            "tenantId": self.tenant_id,
            "tenantSlug": self.tenant_slug,
            "userId": self.user_id,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BaseEvent:
        """Deserialize from the wire form. Raises KeyError when type or source is missing."""
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            type=data["type"],
            version=data.get("version", EVENT_VERSION),
            timestamp=data.get("timestamp") or utc_now().isoformat(),
            source=data["source"],
            correlation_id=data.get("correlationId") or str(uuid.uuid4()),
            causation_id=data.get("causationId"),
            tenant_id=data.get("tenantId"),
            tenant_slug=data.get("tenantSlug"),
            user_id=data.get("userId"),
            payload=data.get("payload") or {},
            metadata=data.get("metadata") or {},
        )


def create_event(
    event_type: str,
    payload: dict[str, Any],
    source: str,
    context: EventContext | None = None,
    metadata: dict[str, Any] | None = None,
) -> BaseEvent:
    """Build a BaseEvent, copying tenant/user/correlation fields from context."""
    ctx = context or EventContext()
    event = BaseEvent(
        type=event_type,
        source=source,
        payload=payload,
        causation_id=ctx.causation_id,
        tenant_id=ctx.tenant_id,
        tenant_slug=ctx.tenant_slug,
        user_id=ctx.user_id,
        metadata=metadata or {},
    )
    if ctx.correlation_id:
        event.correlation_id = ctx.correlation_id
    return event
