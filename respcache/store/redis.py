"""Redis store for production distributed deployments."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

import redis.asyncio as aioredis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..errors import StoreDeleteError, StoreMiss, StoreReadError, StoreWriteError
from .base import ResponseStore, StoreStats, split_wildcard

logger = logging.getLogger(__name__)

# Characters with special meaning in Redis glob-style MATCH patterns
_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")

DELETE_BATCH_SIZE = 500


def escape_glob(literal: str) -> str:
    """Escape glob metacharacters so ``literal`` only matches itself."""
    return _GLOB_SPECIAL.sub(r"\\\1", literal)


def sanitize_url(url: str) -> str:
    """Remove password from URL for logging."""
    return re.sub(r":([^:@/]+)@", r":***@", url)


class RedisStore(ResponseStore):
    """Redis-backed response store for distributed deployments.

    Payloads are stored as raw bytes with native Redis expiry. Wildcard
    deletes walk the keyspace with SCAN and delete in batches.
    """

    def __init__(
        self,
        redis_url: str,
        prefix: str = "respcache:",
        default_ttl: int = 3600,
    ):
        """Initialize Redis store.

        Args:
            redis_url: Redis connection URL (redis://host:port/db)
            prefix: Namespace prepended to every key
            default_ttl: Default TTL in seconds when not specified
        """
        self._redis_url = redis_url
        self._prefix = prefix
        self._default_ttl = default_ttl
        self._redis: Optional[Redis] = None
        self._hits = 0
        self._misses = 0

    def _make_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _client(self) -> Redis:
        if not self._redis:
            raise RuntimeError("Redis not initialized")
        return self._redis

    async def initialize(self) -> None:
        """Connect to Redis."""
        logger.info(f"Connecting to Redis: {sanitize_url(self._redis_url)}")

        self._redis = aioredis.from_url(
            self._redis_url,
            decode_responses=False,
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30,
        )

        await self._redis.ping()
        logger.info("Redis connection established")

    async def close(self) -> None:
        """Close Redis connection."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Redis connection closed")

    async def get(self, key: str) -> bytes:
        client = self._client()
        try:
            data = await client.get(self._make_key(key))
        except RedisError as exc:
            raise StoreReadError("redis.get", key, exc) from exc

        if data is None:
            self._misses += 1
            raise StoreMiss("redis.get", key)

        self._hits += 1
        return data

    async def set(self, key: str, value: bytes, ttl: Optional[int] = None) -> None:
        client = self._client()
        ttl = ttl or self._default_ttl
        try:
            await client.set(self._make_key(key), value, ex=ttl)
        except RedisError as exc:
            raise StoreWriteError("redis.set", key, exc) from exc

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        client = self._client()
        try:
            return await client.delete(*(self._make_key(key) for key in keys))
        except RedisError as exc:
            raise StoreDeleteError("redis.delete", ",".join(keys), exc) from exc

    async def delete_wildcard(self, pattern: str) -> int:
        client = self._client()
        literal, is_prefix = split_wildcard(pattern)
        if not is_prefix:
            return await self.delete(literal)

        match = escape_glob(self._make_key(literal)) + "*"
        count = 0
        batch: List[bytes] = []
        try:
            async for raw_key in client.scan_iter(match=match, count=100):
                batch.append(raw_key)
                if len(batch) >= DELETE_BATCH_SIZE:
                    count += await client.delete(*batch)
                    batch = []
            if batch:
                count += await client.delete(*batch)
        except RedisError as exc:
            raise StoreDeleteError("redis.delete_wildcard", pattern, exc) from exc

        logger.debug("Deleted %d keys matching %s", count, pattern)
        return count

    async def get_stats(self) -> StoreStats:
        if not self._redis:
            return StoreStats(
                hits=self._hits,
                misses=self._misses,
                size=0,
                max_size=-1,  # Redis doesn't have fixed size
                backend_type="redis",
                connection_info=sanitize_url(self._redis_url),
            )

        info = await self._redis.info("keyspace")
        db_info = info.get("db0", {})
        size = db_info.get("keys", 0) if isinstance(db_info, dict) else 0

        return StoreStats(
            hits=self._hits,
            misses=self._misses,
            size=size,
            max_size=-1,
            backend_type="redis",
            connection_info=sanitize_url(self._redis_url),
        )
