"""boto3 client construction for SQS and SNS."""

from typing import Any

import boto3

from app.core.config import Settings


def create_aws_client(service: str, settings: Settings) -> Any:
    """Sync boto3 client; callers wrap calls in asyncio.to_thread."""
    extra: dict[str, Any] = {}
    if settings.aws_endpoint_url:
        extra["endpoint_url"] = settings.aws_endpoint_url
    secret = settings.aws_secret_access_key
    return boto3.client(
        service,
        region_name=settings.aws_region,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=secret.get_secret_value() if secret else None,
        **extra,
    )
