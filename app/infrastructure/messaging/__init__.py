"""Event bus: SQS/SNS in aws mode, Redis lists and pub/sub in redis mode."""

from app.infrastructure.messaging.event_bus import (
    AfterCommitPublisher,
    EventBus,
    context_from_tenant,
    get_event_bus,
    reset_event_bus,
)
from app.infrastructure.messaging.messages import (
    BatchSendResult,
    ConsumerStatus,
    EventHandler,
    ReceivedMessage,
    parse_message_body,
)
from app.infrastructure.messaging.redis_adapter import RedisEventAdapter
from app.infrastructure.messaging.sns import SnsPublisher
from app.infrastructure.messaging.sqs import SqsConsumer, SqsProducer

__all__ = [
    "AfterCommitPublisher",
    "BatchSendResult",
    "ConsumerStatus",
    "EventBus",
    "EventHandler",
    "ReceivedMessage",
    "RedisEventAdapter",
    "SnsPublisher",
    "SqsConsumer",
    "SqsProducer",
    "context_from_tenant",
    "get_event_bus",
    "parse_message_body",
    "reset_event_bus",
]
