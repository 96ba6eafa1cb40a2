"""Cache key builders. Single place for key format (DRY).

Key components (tenant ids, slugs) must not contain CACHE_KEY_SEP to avoid
ambiguous or colliding keys.
"""

from app.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_HOLIDAY, CACHE_PREFIX_TENANT


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value contains the cache key separator."""
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def tenant_key(tenant_id: str) -> str:
    """Cache key for tenant by ID."""
    _validate_key_component(tenant_id, "tenant_id")
    return f"{CACHE_PREFIX_TENANT}{CACHE_KEY_SEP}id{CACHE_KEY_SEP}{tenant_id}"


def tenant_slug_key(slug: str) -> str:
    """Cache key for tenant by slug."""
    _validate_key_component(slug, "slug")
    return f"{CACHE_PREFIX_TENANT}{CACHE_KEY_SEP}slug{CACHE_KEY_SEP}{slug}"


def holiday_year_key(tenant_slug: str, year: int) -> str:
    """Cache key for a tenant's holidays of one year."""
    _validate_key_component(tenant_slug, "tenant_slug")
    return f"{CACHE_PREFIX_HOLIDAY}{CACHE_KEY_SEP}{tenant_slug}{CACHE_KEY_SEP}{year}"


def holiday_pattern(tenant_slug: str) -> str:
    """SCAN pattern matching every holiday key of a tenant."""
    _validate_key_component(tenant_slug, "tenant_slug")
    return f"{CACHE_PREFIX_HOLIDAY}{CACHE_KEY_SEP}{tenant_slug}{CACHE_KEY_SEP}*"
