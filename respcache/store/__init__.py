"""Response stores for the caching middleware.

Supports an in-memory store (development, tests) and Redis (production).
Configure via the RESPCACHE_REDIS_URL environment variable.

Examples:
    In-memory (default): None or empty
    Redis: redis://localhost:6379/0
    Redis with auth: redis://:password@host:6379/0
"""

from .base import ResponseStore, StoreStats
from .engine import StoreEngine, cleanup_store, get_store, get_store_engine
from .memory import MemoryStore

__all__ = [
    "ResponseStore",
    "StoreStats",
    "MemoryStore",
    "StoreEngine",
    "get_store",
    "get_store_engine",
    "cleanup_store",
]
