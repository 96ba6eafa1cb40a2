"""SNS publisher (boto3 via asyncio.to_thread). Topic ARN is prefix:name."""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import Settings, get_settings
from app.domain.events import BaseEvent, destination_name
from app.domain.exceptions import EventBusException
from app.infrastructure.messaging.aws import create_aws_client
from app.infrastructure.messaging.messages import message_attributes

logger = logging.getLogger(__name__)


def topic_arn(topic: str | Enum, settings: Settings) -> str:
    name = destination_name(topic)
    if not settings.sns_topic_arn_prefix:
        raise EventBusException("SNS_TOPIC_ARN_PREFIX is not configured", name)
    return f"{settings.sns_topic_arn_prefix.rstrip(':')}:{name}"


class SnsPublisher:
    def __init__(self, client: Any = None, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._client = client or create_aws_client("sns", self.settings)

    async def publish(self, topic: str | Enum, event: BaseEvent) -> str:
        """Publish one event; return the SNS message id."""
        name = destination_name(topic)
        arn = topic_arn(name, self.settings)
        try:
            result = await asyncio.to_thread(
                self._client.publish,
                TopicArn=arn,
                Message=json.dumps(event.to_dict()),
                MessageAttributes=message_attributes(event),
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("SNS publish failed: topic=%s event=%s: %s", name, event.type, e)
            raise EventBusException(f"Failed to publish {event.type} to {name}", name) from e
        logger.debug("Published %s to %s (%s)", event.type, name, result["MessageId"])
        return result["MessageId"]
