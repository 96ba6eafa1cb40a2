"""Event emission helper for use cases.

Use cases emit after their writes; a transport failure is logged and does
not undo the write. Consumers reconcile from the database when an event is
lost.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from app.application.interfaces.services import IEventPublisher
from app.domain.exceptions import EventBusException

logger = logging.getLogger(__name__)


class EventEmitter:
    """Wraps an optional IEventPublisher; None disables emission (tests, scripts)."""

    def __init__(self, publisher: IEventPublisher | None) -> None:
        self.publisher = publisher

    async def to_queue(
        self, queue: str | Enum, event_type: str, payload: dict[str, Any]
    ) -> str | None:
        """Send to a queue; return message id or None when not sent."""
        if self.publisher is None:
            return None
        try:
            return await self.publisher.send_to_queue(queue, event_type, payload)
        except EventBusException as e:
            logger.warning("Event %s not sent: %s", event_type, e.message)
            return None

    async def to_topic(
        self, topic: str | Enum, event_type: str, payload: dict[str, Any]
    ) -> str | None:
        """Publish to a topic; return message id or None when not published."""
        if self.publisher is None:
            return None
        try:
            return await self.publisher.publish_to_topic(topic, event_type, payload)
        except EventBusException as e:
            logger.warning("Event %s not published: %s", event_type, e.message)
            return None
