"""Shared Redis cache for tenant registry rows and holiday calendars.

Every operation degrades to a miss when Redis is disabled or unreachable,
so repositories always fall back to PostgreSQL.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import redis.asyncio as redis

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNLINK_BATCH = 500


class CacheService:
    """JSON values with a TTL in one Redis database.

    Lifespan owns the connection: connect() on startup, disconnect() on shutdown.
    A client passed in (tests, shared pools) counts as already connected.
    """

    def __init__(
        self, redis_client: redis.Redis | None = None, settings: Settings | None = None
    ) -> None:
        self.settings = settings or get_settings()
        self.redis = redis_client

    def is_available(self) -> bool:
        return self.redis is not None

    async def connect(self) -> None:
        if self.redis is not None:
            return
        if not self.settings.redis_enabled:
            logger.info("Shared cache off (REDIS_ENABLED=false)")
            return
        password = self.settings.redis_password
        client = redis.Redis(
            host=self.settings.redis_host,
            port=self.settings.redis_port,
            db=self.settings.redis_db,
            password=password.get_secret_value() if password else None,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
        )
        try:
            await client.ping()
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning(
                "Shared cache unreachable at %s:%s, continuing without it: %s",
                self.settings.redis_host,
                self.settings.redis_port,
                e,
            )
            await client.aclose()
            return
        self.redis = client
        logger.info("Shared cache ready on db %s", self.settings.redis_db)

    async def disconnect(self) -> None:
        client, self.redis = self.redis, None
        if client is not None:
            await client.aclose()
            logger.info("Shared cache closed")

    async def _run(
        self, op: str, key: str, call: Callable[[redis.Redis], Awaitable[T]], miss: T
    ) -> T:
        if self.redis is None:
            return miss
        try:
            return await call(self.redis)
        except redis.RedisError as e:
            logger.warning("Cache %s on %s failed: %s", op, key, e)
            return miss

    async def get(self, key: str) -> Any | None:
        raw = await self._run("get", key, lambda r: r.get(key), None)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        payload = json.dumps(value, default=str)

        async def _store(r: redis.Redis) -> bool:
            await r.setex(key, ttl, payload)
            return True

        return await self._run("set", key, _store, False)

    async def delete(self, key: str) -> bool:
        async def _drop(r: redis.Redis) -> bool:
            await r.delete(key)
            return True

        return await self._run("delete", key, _drop, False)

    async def delete_pattern(self, pattern: str) -> int:
        """UNLINK every key SCAN finds for ``pattern``, in batches."""

        async def _sweep(r: redis.Redis) -> int:
            removed = 0
            batch: list[str] = []
            async for key in r.scan_iter(match=pattern):
                batch.append(key)
                if len(batch) == UNLINK_BATCH:
                    removed += int(await r.unlink(*batch) or 0)
                    batch.clear()
            if batch:
                removed += int(await r.unlink(*batch) or 0)
            return removed

        removed = await self._run("sweep", pattern, _sweep, 0)
        if removed:
            logger.debug("Cache sweep %s removed %d keys", pattern, removed)
        return removed
