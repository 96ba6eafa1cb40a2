"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. DATABASE_URL (master registry database) is validated
at load time; event bus mode is resolved from EVENT_BUS_MODE or the
deployment environment.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

EVENT_BUS_MODES = ("aws", "redis")


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings have defaults except database_url, which is validated in
    validate_required. Event bus settings only need AWS values when the
    resolved mode is 'aws'.
    """

    # App
    app_name: str = "office-management"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    service_name: str = "office-api"

    # Master database (tenant registry, billing)
    database_url: str = ""
    database_echo: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # Tenant databases
    tenant_db_host: str = "localhost"
    tenant_db_port: int = 5432
    tenant_db_user: str = "postgres"
    tenant_db_password: SecretStr = SecretStr("")
    tenant_db_prefix: str = "oms_tenant_"
    tenant_db_ssl: bool = False
    tenant_db_pool_size: int = 5
    tenant_db_pool_timeout: int = 10
    tenant_client_cache_size: int = 100
    tenant_client_ttl_seconds: int = 3600
    tenant_lookup_cache_size: int = 500
    tenant_lookup_ttl_seconds: int = 300

    # CORS
    allowed_origins: str = "http://localhost:3000"

    # Request / middleware
    tenant_header_name: str = "X-Tenant-Slug"
    user_id_header: str = "X-User-Id"
    user_roles_header: str = "X-User-Roles"
    request_id_header: str = "X-Request-ID"
    # Path prefixes served without tenant context (health, platform admin).
    tenant_exempt_paths: str = (
        "/api/v1/health,/api/v1/tenants,/api/v1/invoices,/api/v1/plans"
    )

    # Redis (cache)
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None

    # Event bus
    event_bus_mode: str | None = None
    event_bus_enabled: bool = True
    event_bus_redis_db: int = 1
    event_bus_key_prefix: str = "oms:events:"
    event_bus_poll_interval_ms: int = 1000
    event_bus_batch_size: int = 10
    aws_region: str = "us-east-1"
    aws_endpoint_url: str | None = None
    aws_access_key_id: str | None = None
    aws_secret_access_key: SecretStr | None = None
    sqs_queue_url_prefix: str = ""
    sns_topic_arn_prefix: str = ""
    sqs_wait_time_seconds: int = 20
    sqs_max_messages: int = 10
    sqs_visibility_timeout: int = 30
    sqs_visibility_extension_interval: int = 15
    sqs_max_receive_count: int = 5
    sqs_dlq_suffix: str = "-dlq"
    sqs_consumer_concurrency: int = 10
    sqs_poll_error_backoff_seconds: float = 5.0

    # Attendance rules
    attendance_standard_hours: float = 8.0
    attendance_work_start: str = "09:00"
    attendance_work_end: str = "18:00"
    attendance_late_grace_minutes: int = 15
    attendance_early_leave_grace_minutes: int = 15
    overtime_min_minutes: int = 30
    overtime_max_hours_per_day: float = 4.0
    attendance_timezone: str = "UTC"

    # Leave
    leave_default_color: str = "#3B82F6"

    # Holidays
    optional_holiday_quota: int = 2

    # Employees
    employee_code_prefix: str = "EMP"
    employee_code_length: int = 6
    employee_code_auto_generate: bool = True

    # Billing
    invoice_prefix: str = "INV-"
    credit_note_prefix: str = "CN-"
    invoice_due_days: int = 30
    default_tax_rate: float = 0.0
    default_currency: str = "usd"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate required env and event bus configuration.

        - DATABASE_URL is always required (tenant registry lives there).
        - EVENT_BUS_MODE, when set, must be 'aws' or 'redis'.
        - In aws mode SQS_QUEUE_URL_PREFIX is required.
        """
        if not self.database_url:
            raise ValueError(
                "DATABASE_URL is required (master database holding the tenant registry). "
                "Set in environment or .env file."
            )
        if self.event_bus_mode is not None and self.event_bus_mode not in EVENT_BUS_MODES:
            raise ValueError(
                f"event_bus_mode must be one of {EVENT_BUS_MODES}, got: {self.event_bus_mode!r}"
            )
        if self.event_bus_enabled and self.resolved_event_bus_mode == "aws":
            if not self.sqs_queue_url_prefix:
                raise ValueError(
                    "SQS_QUEUE_URL_PREFIX is required when the event bus runs in 'aws' mode."
                )
        return self

    @property
    def resolved_event_bus_mode(self) -> str:
        """Event bus mode: explicit EVENT_BUS_MODE, else aws in production, redis elsewhere."""
        if self.event_bus_mode:
            return self.event_bus_mode
        return "aws" if self.environment == "production" else "redis"

    @property
    def exempt_path_prefixes(self) -> list[str]:
        """Parsed tenant_exempt_paths."""
        return [p.strip() for p in self.tenant_exempt_paths.split(",") if p.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
