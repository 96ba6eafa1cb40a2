"""CacheService against a mocked redis client."""

from unittest.mock import AsyncMock, MagicMock

import redis.asyncio as redis

from app.core.config import Settings
from app.infrastructure.cache.redis_cache import CacheService

SETTINGS = Settings(
    database_url="postgresql+asyncpg://u:p@localhost/master",
    event_bus_enabled=False,
    redis_enabled=False,
)


async def _keys(*keys: str):
    for key in keys:
        yield key


async def test_without_client_every_call_misses() -> None:
    cache = CacheService(settings=SETTINGS)
    await cache.connect()

    assert cache.is_available() is False
    assert await cache.get("oms:tenant:acme") is None
    assert await cache.set("oms:tenant:acme", {"slug": "acme"}) is False
    assert await cache.delete_pattern("oms:holiday:*") == 0


async def test_set_then_get_round_trips_json() -> None:
    client = AsyncMock()
    cache = CacheService(client, settings=SETTINGS)

    assert await cache.set("k", {"year": 2024}, ttl=60) is True
    key, ttl, payload = client.setex.await_args.args
    assert (key, ttl) == ("k", 60)

    client.get.return_value = payload
    assert await cache.get("k") == {"year": 2024}


async def test_redis_errors_become_misses() -> None:
    client = AsyncMock()
    client.get.side_effect = redis.ConnectionError("gone")
    client.delete.side_effect = redis.ConnectionError("gone")
    cache = CacheService(client, settings=SETTINGS)

    assert await cache.get("k") is None
    assert await cache.delete("k") is False


async def test_delete_pattern_unlinks_matches() -> None:
    client = AsyncMock()
    client.scan_iter = MagicMock(return_value=_keys("a", "b"))
    client.unlink.return_value = 2
    cache = CacheService(client, settings=SETTINGS)

    assert await cache.delete_pattern("oms:holiday:acme:*") == 2
    client.unlink.assert_awaited_once_with("a", "b")


async def test_disconnect_closes_client() -> None:
    client = AsyncMock()
    cache = CacheService(client, settings=SETTINGS)

    await cache.disconnect()

    client.aclose.assert_awaited_once()
    assert cache.is_available() is False
