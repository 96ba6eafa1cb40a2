"""Types shared by the event bus transports."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from app.domain.events import BaseEvent

EventHandler = Callable[[BaseEvent], Awaitable[None]]


@dataclass(frozen=True)
class ReceivedMessage:
    """A message taken from a queue; receipt_handle acknowledges or returns it."""

    message_id: str
    receipt_handle: str
    event: BaseEvent


@dataclass
class BatchSendResult:
    """Event ids that were accepted or rejected by a batch send."""

    successful: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ConsumerStatus:
    consumer_id: str
    queue: str
    is_running: bool
    active_messages: int


def parse_message_body(body: str) -> BaseEvent:
    """Decode a queue message body; SNS notifications carry the event in Message."""
    data: dict[str, Any] = json.loads(body)
    if data.get("Type") == "Notification" and "Message" in data:
        data = json.loads(data["Message"])
    return BaseEvent.from_dict(data)


def message_attributes(event: BaseEvent) -> dict[str, dict[str, str]]:
    """SQS/SNS message attributes describing an event."""
    values = {
        "EventType": event.type,
        "EventVersion": event.version,
        "Source": event.source,
        "TenantId": event.tenant_id,
        "CorrelationId": event.correlation_id,
    }
    return {
        name: {"DataType": "String", "StringValue": value}
        for name, value in values.items()
        if value
    }
