"""Redis transport for the event bus (local development and tests).

Mimics SQS/SNS closely enough that services behave the same way:

- queue:<q>        list; LPUSH to send, RPOP to receive
- delayed:<q>      sorted set scored by due time in ms; promoted when due
- processing:<q>   hash receipt handle -> envelope while a handler runs
- queue:<q>-dlq    messages returned max_receive_count times
- topic:<t>        pub/sub channel carrying {messageId, topic, event, timestamp}

All keys get EVENT_BUS_KEY_PREFIX.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from enum import Enum
from typing import Any

import redis.asyncio as redis

from app.core.config import Settings, get_settings
from app.domain.events import BaseEvent, destination_name
from app.domain.exceptions import EventBusException
from app.infrastructure.messaging.messages import ConsumerStatus, EventHandler, ReceivedMessage

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class _RedisConsumer:
    def __init__(
        self,
        adapter: RedisEventAdapter,
        queue: str,
        handler: EventHandler,
        poll_interval: float,
        batch_size: int,
    ) -> None:
        self.adapter = adapter
        self.queue = queue
        self.handler = handler
        self.poll_interval = poll_interval
        self.batch_size = batch_size
        self.consumer_id = f"{queue}-{_now_ms()}"
        self.active_messages = 0
        self.running = True
        self._task = asyncio.create_task(self._run(), name=f"redis-consumer:{queue}")

    async def _run(self) -> None:
        while self.running:
            try:
                await self.poll_once()
            except Exception:
                logger.exception("Poll of %s failed; retrying", self.queue)
            await asyncio.sleep(self.poll_interval)

    async def poll_once(self) -> None:
        try:
            messages = await self.adapter.receive_messages(self.queue, self.batch_size)
        except EventBusException as e:
            logger.error("Polling error on %s: %s", self.queue, e.message)
            return
        for message in messages:
            self.active_messages += 1
            try:
                await self._handle(message)
            finally:
                self.active_messages -= 1

    async def _handle(self, message: ReceivedMessage) -> None:
        try:
            await self.handler(message.event)
        except Exception:
            logger.exception("Handler error for %s on %s", message.message_id, self.queue)
            settle = self.adapter.return_message
        else:
            settle = self.adapter.delete_message
        try:
            await settle(self.queue, message.receipt_handle)
        except EventBusException as e:
            # left in processing:<q>; nothing re-delivers it automatically
            logger.error("Could not settle %s on %s: %s", message.message_id, self.queue, e.message)

    @property
    def is_running(self) -> bool:
        return self.running and not self._task.done()

    async def stop(self) -> None:
        self.running = False
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass


class RedisEventAdapter:
    def __init__(
        self, redis_client: redis.Redis | None = None, settings: Settings | None = None
    ) -> None:
        """Pass redis_client for DI/testing."""
        self.settings = settings or get_settings()
        self.redis = redis_client
        self.prefix = self.settings.event_bus_key_prefix
        self._pubsub: Any = None
        self._listener: asyncio.Task[None] | None = None
        self._subscriptions: dict[str, dict[str, EventHandler]] = {}
        self._consumers: dict[str, _RedisConsumer] = {}

    def _key(self, kind: str, name: str) -> str:
        return f"{self.prefix}{kind}:{name}"

    async def _client(self) -> redis.Redis:
        if self.redis is None:
            password = self.settings.redis_password
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.event_bus_redis_db,
                password=password.get_secret_value() if password else None,
                decode_responses=True,
                socket_connect_timeout=5,
            )
            logger.info("Event bus Redis client created (db=%d)", self.settings.event_bus_redis_db)
        return self.redis

    # Queues

    async def send_message(
        self, queue: str | Enum, event: BaseEvent, *, delay_seconds: int = 0
    ) -> str:
        name = destination_name(queue)
        message_id = str(uuid.uuid4())
        envelope = json.dumps(
            {
                "messageId": message_id,
                "event": event.to_dict(),
                "timestamp": _now_ms(),
                "receiveCount": 0,
            }
        )
        client = await self._client()
        try:
            if delay_seconds:
                await client.zadd(
                    self._key("delayed", name), {envelope: _now_ms() + delay_seconds * 1000}
                )
            else:
                await client.lpush(self._key("queue", name), envelope)
        except redis.RedisError as e:
            raise EventBusException(f"Failed to send {event.type} to {name}", name) from e
        logger.debug("Sent %s to %s (%s, delay=%ds)", event.type, name, message_id, delay_seconds)
        return message_id

    async def _promote_delayed(self, client: redis.Redis, queue: str) -> int:
        delayed_key = self._key("delayed", queue)
        ready = await client.zrangebyscore(delayed_key, 0, _now_ms())
        moved = 0
        for raw in ready:
            # zrem decides which poller owns the message
            if await client.zrem(delayed_key, raw):
                await client.lpush(self._key("queue", queue), raw)
                moved += 1
        return moved

    async def receive_messages(
        self, queue: str | Enum, max_messages: int = 10
    ) -> list[ReceivedMessage]:
        """Pop up to max_messages; each is parked in processing:<q> until deleted or returned."""
        name = destination_name(queue)
        client = await self._client()
        messages: list[ReceivedMessage] = []
        try:
            await self._promote_delayed(client, name)
            while len(messages) < max_messages:
                raw = await client.rpop(self._key("queue", name))
                if raw is None:
                    break
                try:
                    envelope = json.loads(raw)
                    event = BaseEvent.from_dict(envelope["event"])
                except (ValueError, KeyError) as e:
                    logger.error("Dropping unparseable message on %s: %s", name, e)
                    continue
                handle = f"{envelope['messageId']}:{_now_ms()}"
                await client.hset(self._key("processing", name), handle, raw)
                messages.append(ReceivedMessage(envelope["messageId"], handle, event))
        except redis.RedisError as e:
            raise EventBusException(f"Failed to receive from {name}", name) from e
        return messages

    async def delete_message(self, queue: str | Enum, receipt_handle: str) -> None:
        name = destination_name(queue)
        client = await self._client()
        try:
            await client.hdel(self._key("processing", name), receipt_handle)
        except redis.RedisError as e:
            raise EventBusException(f"Failed to delete {receipt_handle} from {name}", name) from e

    async def return_message(self, queue: str | Enum, receipt_handle: str) -> None:
        """Requeue a failed message, or move it to <q>-dlq after max_receive_count tries."""
        name = destination_name(queue)
        client = await self._client()
        processing_key = self._key("processing", name)
        try:
            raw = await client.hget(processing_key, receipt_handle)
            if raw is None:
                return
            envelope = json.loads(raw)
            envelope["receiveCount"] = envelope.get("receiveCount", 0) + 1
            if envelope["receiveCount"] >= self.settings.sqs_max_receive_count:
                target = self._key("queue", f"{name}{self.settings.sqs_dlq_suffix}")
                logger.warning("Message %s moved to DLQ of %s", envelope["messageId"], name)
            else:
                target = self._key("queue", name)
            await client.lpush(target, json.dumps(envelope))
            await client.hdel(processing_key, receipt_handle)
        except redis.RedisError as e:
            raise EventBusException(f"Failed to return {receipt_handle} to {name}", name) from e

    # Topics

    async def publish(self, topic: str | Enum, event: BaseEvent) -> str:
        name = destination_name(topic)
        message_id = str(uuid.uuid4())
        envelope = {
            "messageId": message_id,
            "topic": name,
            "event": event.to_dict(),
            "timestamp": _now_ms(),
        }
        client = await self._client()
        try:
            await client.publish(self._key("topic", name), json.dumps(envelope))
        except redis.RedisError as e:
            raise EventBusException(f"Failed to publish {event.type} to {name}", name) from e
        logger.debug("Published %s to %s (%s)", event.type, name, message_id)
        return message_id

    async def _dispatch(self, channel: str, data: str) -> None:
        topic = channel.removeprefix(self._key("topic", ""))
        handlers = list(self._subscriptions.get(topic, {}).values())
        try:
            event = BaseEvent.from_dict(json.loads(data)["event"])
        except (ValueError, KeyError) as e:
            logger.error("Unparseable message on topic %s: %s", topic, e)
            return
        for handler in handlers:
            try:
                await handler(event)
            except Exception:
                logger.exception("Topic handler error on %s (%s)", topic, event.type)

    async def _listen(self) -> None:
        while self._subscriptions:
            try:
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=1.0
                )
            except redis.RedisError as e:
                logger.error("Topic listener error: %s", e)
                await asyncio.sleep(1.0)
                continue
            if message and message.get("type") == "message":
                await self._dispatch(message["channel"], message["data"])

    async def subscribe(self, topic: str | Enum, handler: EventHandler) -> str:
        name = destination_name(topic)
        subscription_id = str(uuid.uuid4())
        if self._pubsub is None:
            self._pubsub = (await self._client()).pubsub()
        if name not in self._subscriptions:
            self._subscriptions[name] = {}
            await self._pubsub.subscribe(self._key("topic", name))
        self._subscriptions[name][subscription_id] = handler
        if self._listener is None or self._listener.done():
            self._listener = asyncio.create_task(self._listen(), name="redis-topic-listener")
        logger.debug("Subscribed to %s (%s)", name, subscription_id)
        return subscription_id

    async def unsubscribe(self, topic: str | Enum, subscription_id: str) -> None:
        name = destination_name(topic)
        handlers = self._subscriptions.get(name)
        if not handlers:
            return
        handlers.pop(subscription_id, None)
        if not handlers:
            del self._subscriptions[name]
            await self._pubsub.unsubscribe(self._key("topic", name))
        logger.debug("Unsubscribed from %s (%s)", name, subscription_id)

    # Consumers

    def start_consumer(
        self,
        queue: str | Enum,
        handler: EventHandler,
        *,
        poll_interval_ms: int | None = None,
        batch_size: int | None = None,
    ) -> str:
        consumer = _RedisConsumer(
            self,
            destination_name(queue),
            handler,
            (poll_interval_ms or self.settings.event_bus_poll_interval_ms) / 1000,
            batch_size or self.settings.event_bus_batch_size,
        )
        self._consumers[consumer.consumer_id] = consumer
        logger.info("Redis consumer started: %s", consumer.consumer_id)
        return consumer.consumer_id

    async def stop_consumer(self, consumer_id: str) -> None:
        consumer = self._consumers.pop(consumer_id, None)
        if consumer is not None:
            await consumer.stop()
            logger.info("Redis consumer stopped: %s", consumer_id)

    async def stop_all_consumers(self) -> None:
        for consumer_id in list(self._consumers):
            await self.stop_consumer(consumer_id)

    def consumer_statuses(self) -> list[ConsumerStatus]:
        return [
            ConsumerStatus(c.consumer_id, c.queue, c.is_running, c.active_messages)
            for c in self._consumers.values()
        ]

    async def disconnect(self) -> None:
        await self.stop_all_consumers()
        self._subscriptions.clear()
        if self._listener is not None:
            self._listener.cancel()
            try:
                await self._listener
            except asyncio.CancelledError:
                pass
            self._listener = None
        if self._pubsub is not None:
            await self._pubsub.aclose()
            self._pubsub = None
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
        logger.info("Event bus Redis clients disconnected")
