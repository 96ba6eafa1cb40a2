"""SQS producer and long-polling consumer (boto3 via asyncio.to_thread).

Queue URL is SQS_QUEUE_URL_PREFIX + "/" + queue name. Failed messages are
not deleted so SQS redelivers them after the visibility timeout; the
queue's redrive policy moves them to the DLQ after max_receive_count.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from enum import Enum
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import Settings, get_settings
from app.domain.events import BaseEvent, destination_name
from app.domain.exceptions import EventBusException
from app.infrastructure.messaging.aws import create_aws_client
from app.infrastructure.messaging.messages import (
    BatchSendResult,
    ConsumerStatus,
    EventHandler,
    ReceivedMessage,
    message_attributes,
    parse_message_body,
)

logger = logging.getLogger(__name__)

SQS_BATCH_LIMIT = 10


def queue_url(queue: str | Enum, settings: Settings) -> str:
    return f"{settings.sqs_queue_url_prefix.rstrip('/')}/{destination_name(queue)}"


class SqsProducer:
    def __init__(self, client: Any = None, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._client = client or create_aws_client("sqs", self.settings)

    async def send(
        self, queue: str | Enum, event: BaseEvent, *, delay_seconds: int = 0
    ) -> str:
        """Send one event; return the SQS message id."""
        name = destination_name(queue)
        params: dict[str, Any] = {
            "QueueUrl": queue_url(name, self.settings),
            "MessageBody": json.dumps(event.to_dict()),
            "MessageAttributes": message_attributes(event),
        }
        if delay_seconds:
            params["DelaySeconds"] = delay_seconds
        try:
            result = await asyncio.to_thread(self._client.send_message, **params)
        except (BotoCoreError, ClientError) as e:
            logger.error("SQS send failed: queue=%s event=%s: %s", name, event.type, e)
            raise EventBusException(f"Failed to send {event.type} to {name}", name) from e
        logger.debug("Sent %s to %s (%s)", event.type, name, result["MessageId"])
        return result["MessageId"]

    async def send_batch(self, queue: str | Enum, events: list[BaseEvent]) -> BatchSendResult:
        """Send events in chunks of 10; per-entry failures are reported, not raised."""
        name = destination_name(queue)
        outcome = BatchSendResult()
        for start in range(0, len(events), SQS_BATCH_LIMIT):
            chunk = events[start : start + SQS_BATCH_LIMIT]
            entries = [
                {
                    "Id": str(index),
                    "MessageBody": json.dumps(event.to_dict()),
                    "MessageAttributes": message_attributes(event),
                }
                for index, event in enumerate(chunk)
            ]
            try:
                result = await asyncio.to_thread(
                    self._client.send_message_batch,
                    QueueUrl=queue_url(name, self.settings),
                    Entries=entries,
                )
            except (BotoCoreError, ClientError) as e:
                logger.error("SQS batch send failed: queue=%s: %s", name, e)
                outcome.failed.extend(event.id for event in chunk)
                continue
            outcome.successful.extend(chunk[int(r["Id"])].id for r in result.get("Successful", []))
            for failure in result.get("Failed", []):
                event = chunk[int(failure["Id"])]
                logger.warning(
                    "SQS rejected %s on %s: %s", event.id, name, failure.get("Message")
                )
                outcome.failed.append(event.id)
        return outcome


class SqsConsumer:
    """Polls one queue and runs handler for each message.

    At most concurrency handlers run at once. While a handler runs, the
    message visibility is extended every visibility_extension_interval
    seconds. Success deletes the message; failure leaves it for redelivery.
    """

    def __init__(
        self,
        queue: str | Enum,
        handler: EventHandler,
        client: Any = None,
        settings: Settings | None = None,
        *,
        batch_size: int | None = None,
        concurrency: int | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.queue = destination_name(queue)
        self.handler = handler
        self._client = client or create_aws_client("sqs", self.settings)
        self.batch_size = min(batch_size or self.settings.sqs_max_messages, SQS_BATCH_LIMIT)
        self.concurrency = concurrency or self.settings.sqs_consumer_concurrency
        self.consumer_id = f"{self.queue}-{int(time.time() * 1000)}"
        self.active_messages = 0
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._url = queue_url(self.queue, self.settings)

    def is_running(self) -> bool:
        return self._running

    def status(self) -> ConsumerStatus:
        return ConsumerStatus(self.consumer_id, self.queue, self._running, self.active_messages)

    def start(self) -> str:
        if self._running:
            return self.consumer_id
        self._running = True
        self._task = asyncio.create_task(self._poll(), name=f"sqs-consumer:{self.queue}")
        logger.info("SQS consumer started: %s", self.consumer_id)
        return self.consumer_id

    async def stop(self) -> None:
        """Stop polling and wait for in-flight handlers to finish."""
        self._running = False
        if self._task is not None:
            await self._task
            self._task = None
        logger.info("SQS consumer stopped: %s", self.consumer_id)

    async def receive(self, max_messages: int) -> list[ReceivedMessage]:
        result = await asyncio.to_thread(
            self._client.receive_message,
            QueueUrl=self._url,
            MaxNumberOfMessages=max_messages,
            WaitTimeSeconds=self.settings.sqs_wait_time_seconds,
            VisibilityTimeout=self.settings.sqs_visibility_timeout,
            MessageAttributeNames=["All"],
            AttributeNames=["All"],
        )
        messages: list[ReceivedMessage] = []
        for raw in result.get("Messages", []):
            try:
                event = parse_message_body(raw["Body"])
            except (ValueError, KeyError) as e:
                # Left undeleted; the redrive policy moves it to the DLQ.
                logger.error("Unparseable message %s on %s: %s", raw.get("MessageId"), self.queue, e)
                continue
            messages.append(ReceivedMessage(raw["MessageId"], raw["ReceiptHandle"], event))
        return messages

    async def _poll(self) -> None:
        while self._running:
            try:
                free = self.concurrency - self.active_messages
                if free <= 0:
                    await asyncio.sleep(0.1)
                    continue
                messages = await self.receive(min(self.batch_size, free))
                if messages:
                    logger.debug("Received %d messages from %s", len(messages), self.queue)
                    await asyncio.gather(*(self._process(m) for m in messages))
            except Exception:
                logger.exception("Error polling %s", self.queue)
                await asyncio.sleep(self.settings.sqs_poll_error_backoff_seconds)

    async def _extend_visibility(self, message: ReceivedMessage) -> None:
        while True:
            await asyncio.sleep(self.settings.sqs_visibility_extension_interval)
            try:
                await asyncio.to_thread(
                    self._client.change_message_visibility,
                    QueueUrl=self._url,
                    ReceiptHandle=message.receipt_handle,
                    VisibilityTimeout=self.settings.sqs_visibility_timeout,
                )
            except (BotoCoreError, ClientError) as e:
                logger.warning("Failed to extend visibility of %s: %s", message.message_id, e)

    async def _process(self, message: ReceivedMessage) -> bool:
        self.active_messages += 1
        extender = asyncio.create_task(self._extend_visibility(message))
        try:
            try:
                await self.handler(message.event)
            except Exception:
                logger.exception(
                    "Handler failed for %s (%s) on %s",
                    message.message_id,
                    message.event.type,
                    self.queue,
                )
                return False
            try:
                await asyncio.to_thread(
                    self._client.delete_message,
                    QueueUrl=self._url,
                    ReceiptHandle=message.receipt_handle,
                )
            except (BotoCoreError, ClientError) as e:
                # redelivered after the visibility timeout
                logger.error("Failed to delete %s from %s: %s", message.message_id, self.queue, e)
                return False
            return True
        finally:
            extender.cancel()
            self.active_messages -= 1
