"""Cache: Redis service and cache key utilities.

Used by the tenant and holiday repositories. CacheService uses
app.core.config; key format is in keys.py (DRY).
"""

from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.cache.keys import (
    holiday_pattern,
    holiday_year_key,
    tenant_key,
    tenant_slug_key,
)
from app.infrastructure.cache.lru import LruTtlCache
from app.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "CacheProtocol",
    "CacheService",
    "LruTtlCache",
    "holiday_pattern",
    "holiday_year_key",
    "tenant_key",
    "tenant_slug_key",
]
