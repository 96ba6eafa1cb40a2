"""Event bus facade: one API over SQS/SNS (aws mode) and Redis (redis mode).

Mode comes from Settings.resolved_event_bus_mode. Events emitted without an
explicit EventContext take tenant, user and correlation id from the current
tenant context, so use cases never pass them around.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from app.core.config import Settings, get_settings
from app.core.tenant_context import get_tenant_context_or_none
from app.domain.enums import NotificationPriority
from app.domain.events import BaseEvent, EventContext, Queue, Topic, create_event, destination_name
from app.domain.exceptions import EventBusException, EventBusModeException
from app.infrastructure.messaging.messages import BatchSendResult, ConsumerStatus, EventHandler
from app.infrastructure.messaging.redis_adapter import RedisEventAdapter
from app.infrastructure.messaging.sns import SnsPublisher
from app.infrastructure.messaging.sqs import SqsConsumer, SqsProducer

logger = logging.getLogger(__name__)


def context_from_tenant() -> EventContext:
    """EventContext of the current request or job; empty outside a tenant context."""
    ctx = get_tenant_context_or_none()
    if ctx is None:
        return EventContext()
    return EventContext(
        tenant_id=ctx.tenant_id,
        tenant_slug=ctx.slug,
        user_id=ctx.user_id,
        correlation_id=ctx.request_id,
    )


class EventBus:
    """Implements IEventPublisher plus consumer management."""

    def __init__(
        self,
        service_name: str,
        settings: Settings | None = None,
        *,
        sqs: SqsProducer | None = None,
        sns: SnsPublisher | None = None,
        redis_adapter: RedisEventAdapter | None = None,
        sqs_client: Any = None,
    ) -> None:
        self.service_name = service_name
        self.settings = settings or get_settings()
        self.mode = self.settings.resolved_event_bus_mode
        self._sqs_client = sqs_client
        self._sqs = sqs
        self._sns = sns
        self._redis = redis_adapter
        self._consumers: dict[str, SqsConsumer | str] = {}
        self._subscriptions: dict[str, str] = {}
        logger.info("Event bus ready: service=%s mode=%s", service_name, self.mode)

    @property
    def is_aws(self) -> bool:
        return self.mode == "aws"

    def _sqs_producer(self) -> SqsProducer:
        if self._sqs is None:
            self._sqs = SqsProducer(self._sqs_client, self.settings)
        return self._sqs

    def _sns_publisher(self) -> SnsPublisher:
        if self._sns is None:
            self._sns = SnsPublisher(settings=self.settings)
        return self._sns

    def _redis_adapter(self) -> RedisEventAdapter:
        if self._redis is None:
            self._redis = RedisEventAdapter(settings=self.settings)
        return self._redis

    def build_event(
        self,
        event_type: str,
        payload: dict[str, Any],
        context: EventContext | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> BaseEvent:
        return create_event(
            event_type, payload, self.service_name, context or context_from_tenant(), metadata
        )

    # Producing

    async def send_to_queue(
        self,
        queue: str | Enum,
        event_type: str,
        payload: dict[str, Any],
        context: EventContext | None = None,
        *,
        delay_seconds: int = 0,
    ) -> str:
        event = self.build_event(event_type, payload, context)
        return await self.send_event(queue, event, delay_seconds=delay_seconds)

    async def send_event(
        self, queue: str | Enum, event: BaseEvent, *, delay_seconds: int = 0
    ) -> str:
        if self.is_aws:
            return await self._sqs_producer().send(queue, event, delay_seconds=delay_seconds)
        return await self._redis_adapter().send_message(queue, event, delay_seconds=delay_seconds)

    async def send_batch_to_queue(
        self,
        queue: str | Enum,
        items: list[tuple[str, dict[str, Any]]],
        context: EventContext | None = None,
    ) -> BatchSendResult:
        """Send (event_type, payload) pairs; returns event ids by outcome."""
        events = [self.build_event(t, p, context) for t, p in items]
        if self.is_aws:
            return await self._sqs_producer().send_batch(queue, events)
        outcome = BatchSendResult()
        adapter = self._redis_adapter()
        for event in events:
            await adapter.send_message(queue, event)
            outcome.successful.append(event.id)
        return outcome

    async def publish_to_topic(
        self,
        topic: str | Enum,
        event_type: str,
        payload: dict[str, Any],
        context: EventContext | None = None,
    ) -> str:
        event = self.build_event(event_type, payload, context)
        return await self.publish_event(topic, event)

    async def publish_event(self, topic: str | Enum, event: BaseEvent) -> str:
        if self.is_aws:
            return await self._sns_publisher().publish(topic, event)
        return await self._redis_adapter().publish(topic, event)

    # Consuming

    def start_queue_consumer(
        self,
        queue: str | Enum,
        handler: EventHandler,
        *,
        batch_size: int | None = None,
        concurrency: int | None = None,
    ) -> str:
        name = destination_name(queue)
        if name in self._consumers:
            raise ValueError(f"A consumer is already running for {name}")
        if self.is_aws:
            consumer = SqsConsumer(
                name,
                handler,
                self._sqs_client,
                self.settings,
                batch_size=batch_size,
                concurrency=concurrency,
            )
            consumer_id = consumer.start()
            self._consumers[name] = consumer
        else:
            consumer_id = self._redis_adapter().start_consumer(
                name, handler, batch_size=batch_size
            )
            self._consumers[name] = consumer_id
        logger.info("Queue consumer started: %s (%s)", name, consumer_id)
        return consumer_id

    async def stop_queue_consumer(self, queue: str | Enum) -> None:
        name = destination_name(queue)
        consumer = self._consumers.pop(name, None)
        if consumer is None:
            return
        if isinstance(consumer, SqsConsumer):
            await consumer.stop()
        else:
            await self._redis_adapter().stop_consumer(consumer)
        logger.info("Queue consumer stopped: %s", name)

    async def subscribe_to_topic(self, topic: str | Enum, handler: EventHandler) -> str:
        """Redis only; in aws mode topics reach services through SQS subscriptions."""
        if self.is_aws:
            raise EventBusModeException("subscribe_to_topic", self.mode)
        name = destination_name(topic)
        subscription_id = await self._redis_adapter().subscribe(name, handler)
        self._subscriptions[name] = subscription_id
        logger.info("Subscribed to topic %s", name)
        return subscription_id

    async def unsubscribe_from_topic(self, topic: str | Enum) -> None:
        name = destination_name(topic)
        subscription_id = self._subscriptions.pop(name, None)
        if subscription_id is not None:
            await self._redis_adapter().unsubscribe(name, subscription_id)
            logger.info("Unsubscribed from topic %s", name)

    def list_consumers(self) -> list[ConsumerStatus]:
        statuses: list[ConsumerStatus] = []
        for name, consumer in self._consumers.items():
            if isinstance(consumer, SqsConsumer):
                statuses.append(consumer.status())
            else:
                statuses.extend(
                    s for s in self._redis_adapter().consumer_statuses() if s.queue == name
                )
        return statuses

    # Convenience emitters

    async def emit_tenant_event(
        self,
        event_type: str,
        payload: dict[str, Any],
        tenant_id: str,
        tenant_slug: str,
        correlation_id: str | None = None,
    ) -> str:
        return await self.publish_to_topic(
            Topic.TENANT_EVENTS,
            event_type,
            payload,
            EventContext(
                tenant_id=tenant_id, tenant_slug=tenant_slug, correlation_id=correlation_id
            ),
        )

    async def emit_notification(
        self,
        recipient_id: str,
        channel: str,
        template_id: str,
        template_data: dict[str, Any] | None = None,
        *,
        recipient_type: str = "employee",
        priority: NotificationPriority = NotificationPriority.NORMAL,
        context: EventContext | None = None,
    ) -> str:
        return await self.send_to_queue(
            Queue.NOTIFICATION_SEND,
            "notification.send",
            {
                "recipientId": recipient_id,
                "recipientType": recipient_type,
                "channel": channel,
                "templateId": template_id,
                "templateData": template_data or {},
                "priority": priority.value,
            },
            context,
        )

    async def emit_audit_log(
        self,
        action: str,
        resource_type: str,
        resource_id: str,
        performed_by: str,
        *,
        previous_state: dict[str, Any] | None = None,
        new_state: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        context: EventContext | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "action": action,
            "resourceType": resource_type,
            "resourceId": resource_id,
            "performedBy": performed_by,
        }
        optional = {
            "previousState": previous_state,
            "newState": new_state,
            "ipAddress": ip_address,
            "userAgent": user_agent,
        }
        payload.update({k: v for k, v in optional.items() if v is not None})
        return await self.send_to_queue(Queue.AUDIT_LOG, "audit.log", payload, context)

    # Lifecycle

    async def stop_all(self) -> None:
        for name in list(self._consumers):
            await self.stop_queue_consumer(name)
        for name in list(self._subscriptions):
            await self.unsubscribe_from_topic(name)
        logger.info("All consumers and subscriptions stopped")

    async def shutdown(self) -> None:
        await self.stop_all()
        if self._redis is not None:
            await self._redis.disconnect()
        logger.info("Event bus shut down")


class AfterCommitPublisher:
    """Holds a request's events until its transaction has committed.

    Events are built (and take their tenant context) when the use case emits
    them; flush() hands them to the bus in emission order. A request that
    fails never flushes, so nothing is published for a rolled-back write.
    """

    def __init__(self, bus: EventBus) -> None:
        self.bus = bus
        self._pending: list[tuple[str, str | Enum, BaseEvent, int]] = []

    def __len__(self) -> int:
        return len(self._pending)

    async def send_to_queue(
        self,
        queue: str | Enum,
        event_type: str,
        payload: dict[str, Any],
        context: EventContext | None = None,
        *,
        delay_seconds: int = 0,
    ) -> str:
        event = self.bus.build_event(event_type, payload, context)
        self._pending.append(("queue", queue, event, delay_seconds))
        return event.id

    async def publish_to_topic(
        self,
        topic: str | Enum,
        event_type: str,
        payload: dict[str, Any],
        context: EventContext | None = None,
    ) -> str:
        event = self.bus.build_event(event_type, payload, context)
        self._pending.append(("topic", topic, event, 0))
        return event.id

    async def flush(self) -> int:
        """Send everything held; transport failures are logged per event."""
        pending, self._pending = self._pending, []
        sent = 0
        for kind, destination, event, delay in pending:
            try:
                if kind == "queue":
                    await self.bus.send_event(destination, event, delay_seconds=delay)
                else:
                    await self.bus.publish_event(destination, event)
            except EventBusException as e:
                logger.warning(
                    "Event %s (%s) lost after commit: %s", event.type, event.id, e.message
                )
                continue
            sent += 1
        return sent


_event_bus: EventBus | None = None


def get_event_bus(service_name: str | None = None) -> EventBus:
    """Process-wide EventBus (created on first call)."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus(service_name or get_settings().service_name)
    return _event_bus


async def reset_event_bus() -> None:
    """Shut down and drop the singleton (shutdown, tests)."""
    global _event_bus
    if _event_bus is not None:
        await _event_bus.shutdown()
    _event_bus = None
