"""Store engine factory and global instance management."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..config.settings import Settings
from .base import ResponseStore, StoreStats
from .memory import MemoryStore

logger = logging.getLogger(__name__)


class StoreEngine(ResponseStore):
    """Central store engine that manages backend lifecycle.

    Chooses Redis when a URL is configured and the in-memory store
    otherwise. The backend is initialized lazily on first use.
    """

    def __init__(self, redis_url: Optional[str] = None):
        """Initialize store engine.

        Args:
            redis_url: Redis connection URL. If not provided,
                      uses RESPCACHE_REDIS_URL or defaults to in-memory.
        """
        self._redis_url = redis_url or Settings.RESPCACHE_REDIS_URL
        self._backend: Optional[ResponseStore] = None
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def backend_type(self) -> str:
        if self._redis_url:
            return "redis"
        return "memory"

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            backend: ResponseStore
            if self._redis_url:
                from .redis import RedisStore

                backend = RedisStore(
                    redis_url=self._redis_url,
                    prefix=Settings.RESPCACHE_KEY_PREFIX,
                    default_ttl=Settings.RESPCACHE_TTL,
                )
            else:
                backend = MemoryStore(
                    max_size=Settings.RESPCACHE_MAX_ENTRIES,
                    default_ttl=Settings.RESPCACHE_TTL,
                )

            try:
                await backend.initialize()
            except Exception:
                await backend.close()
                raise
            self._backend = backend
            self._initialized = True

            logger.info(f"Response store initialized: {self.backend_type}")

    async def close(self) -> None:
        if self._backend:
            await self._backend.close()
            self._backend = None
            self._initialized = False

    @property
    def backend(self) -> ResponseStore:
        """Get the store backend (must be initialized first)."""
        if not self._backend:
            raise RuntimeError("Store engine not initialized. Call initialize() first.")
        return self._backend

    async def get(self, key: str) -> bytes:
        if not self._initialized:
            await self.initialize()
        return await self.backend.get(key)

    async def set(self, key: str, value: bytes, ttl: Optional[int] = None) -> None:
        if not self._initialized:
            await self.initialize()
        await self.backend.set(key, value, ttl)

    async def delete(self, *keys: str) -> int:
        if not self._initialized:
            await self.initialize()
        return await self.backend.delete(*keys)

    async def delete_wildcard(self, pattern: str) -> int:
        if not self._initialized:
            await self.initialize()
        return await self.backend.delete_wildcard(pattern)

    async def get_stats(self) -> StoreStats:
        if not self._initialized:
            await self.initialize()
        return await self.backend.get_stats()


# Global store instance
_store: Optional[StoreEngine] = None
_store_lock: Optional[asyncio.Lock] = None


def _get_store_lock() -> asyncio.Lock:
    global _store_lock
    if _store_lock is None:
        _store_lock = asyncio.Lock()
    return _store_lock


def get_store_engine(redis_url: Optional[str] = None) -> StoreEngine:
    """Return the global store engine without initializing it.

    Args:
        redis_url: Optional Redis URL (only used on first call)
    """
    global _store
    if _store is None:
        _store = StoreEngine(redis_url)
    return _store


async def get_store(redis_url: Optional[str] = None) -> StoreEngine:
    """Get the global store engine, initialized.

    Args:
        redis_url: Optional Redis URL (only used on first call)

    Returns:
        Initialized StoreEngine instance
    """
    if _store is not None and _store.initialized:
        return _store

    lock = _get_store_lock()
    async with lock:
        engine = get_store_engine(redis_url)
        await engine.initialize()
        return engine


async def cleanup_store() -> None:
    """Close and forget the global store engine."""
    global _store, _store_lock

    if _store:
        await _store.close()
        _store = None
    _store_lock = None
