"""Logging configuration for the application.

Every record carries the tenant slug and request id of the current tenant
context ("-" outside a request), so log lines from different tenant
databases can be told apart.
"""

import logging
import sys

from app.core.config import get_settings
from app.core.tenant_context import get_tenant_context_or_none

LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [tenant=%(tenant)s request=%(request_id)s] "
    "%(message)s"
)


class RequestContextFilter(logging.Filter):
    """Adds tenant and request_id attributes from the tenant context."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_tenant_context_or_none()
        record.tenant = ctx.slug if ctx else "-"
        record.request_id = (ctx.request_id if ctx else None) or "-"
        return True


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=[handler], force=True)
    # boto3 logs every request at DEBUG
    for noisy in ("botocore", "boto3", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name."""
    return logging.getLogger(name)
