"""Core constants: cache key prefixes and shared literal values."""

# Cache key prefixes
CACHE_PREFIX_TENANT = "tenant"
CACHE_PREFIX_HOLIDAY = "holiday"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Tenant lookup cache TTL in the shared Redis cache (seconds)
TENANT_CACHE_TTL = 900
HOLIDAY_CACHE_TTL = 3600

API_PREFIX = "/api/v1"

# List endpoints
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
