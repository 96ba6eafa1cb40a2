"""Billing use cases (master database)."""

from app.application.use_cases.billing.invoice_operations import InvoiceService
from app.application.use_cases.billing.usage_operations import UsageService

__all__ = ["InvoiceService", "UsageService"]
