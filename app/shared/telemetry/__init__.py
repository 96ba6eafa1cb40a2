"""Shared telemetry: logging setup with tenant and request id on every record."""

from app.shared.telemetry.logging import RequestContextFilter, get_logger, setup_logging

__all__ = [
    "RequestContextFilter",
    "setup_logging",
    "get_logger",
]
