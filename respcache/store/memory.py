"""In-memory store for development and testing."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

from ..errors import StoreMiss
from .base import ResponseStore, StoreStats, split_wildcard

logger = logging.getLogger(__name__)


@dataclass
class StoredEntry:
    """Single stored payload with optional expiration."""

    value: bytes
    expires_at: Optional[float] = None  # Unix timestamp

    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return time.time() > self.expires_at


class MemoryStore(ResponseStore):
    """Asyncio-safe in-memory store with TTL and LRU eviction.

    Suitable for single-process deployments and tests.
    For multi-process/distributed deployments, use Redis.
    """

    def __init__(self, max_size: int = 10000, default_ttl: Optional[int] = None):
        """Initialize memory store.

        Args:
            max_size: Maximum number of entries (LRU eviction when exceeded)
            default_ttl: TTL applied when ``set`` is called without one
        """
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._entries: "OrderedDict[str, StoredEntry]" = OrderedDict()
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0
        self._cleanup_task: Optional[asyncio.Task] = None

    async def initialize(self) -> None:
        """Start background cleanup task."""
        logger.info("Initializing in-memory response store (max_size: %s)", self._max_size)
        self._start_cleanup_task()

    async def close(self) -> None:
        """Stop cleanup task and drop all entries."""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None
        self._entries.clear()
        logger.info("In-memory response store closed")

    def _start_cleanup_task(self) -> None:
        try:
            asyncio.get_running_loop()
            self._cleanup_task = asyncio.create_task(self._periodic_cleanup())
        except RuntimeError:
            pass

    async def _periodic_cleanup(self) -> None:
        while True:
            try:
                await asyncio.sleep(60)
                await self._cleanup_expired()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in response store cleanup: {e}")

    async def _cleanup_expired(self) -> int:
        """Remove all expired entries."""
        async with self._lock:
            expired_keys = [key for key, entry in self._entries.items() if entry.is_expired()]
            for key in expired_keys:
                del self._entries[key]

            if expired_keys:
                logger.debug("Cleaned up %d expired entries", len(expired_keys))

            return len(expired_keys)

    def _evict_lru(self) -> None:
        while len(self._entries) >= self._max_size and self._entries:
            self._entries.popitem(last=False)

    async def get(self, key: str) -> bytes:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                raise StoreMiss("memory.get", key)

            if entry.is_expired():
                del self._entries[key]
                self._misses += 1
                raise StoreMiss("memory.get", key)

            self._hits += 1
            self._entries.move_to_end(key)
            return entry.value

    async def set(self, key: str, value: bytes, ttl: Optional[int] = None) -> None:
        async with self._lock:
            if key not in self._entries:
                self._evict_lru()

            ttl = ttl or self._default_ttl
            expires_at = time.time() + ttl if ttl else None
            self._entries[key] = StoredEntry(value=bytes(value), expires_at=expires_at)
            self._entries.move_to_end(key)

    async def delete(self, *keys: str) -> int:
        async with self._lock:
            count = 0
            for key in keys:
                if self._entries.pop(key, None) is not None:
                    count += 1
            return count

    async def delete_wildcard(self, pattern: str) -> int:
        prefix, is_prefix = split_wildcard(pattern)
        async with self._lock:
            if is_prefix:
                doomed = [key for key in self._entries if key.startswith(prefix)]
            else:
                doomed = [prefix] if prefix in self._entries else []
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    async def get_stats(self) -> StoreStats:
        return StoreStats(
            hits=self._hits,
            misses=self._misses,
            size=len(self._entries),
            max_size=self._max_size,
            backend_type="memory",
            connection_info="in-process",
        )
