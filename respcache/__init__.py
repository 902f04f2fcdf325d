"""HTTP response caching middleware with family-scoped invalidation."""

from .api import ResponseCacheMiddleware, install_response_cache
from .config import CacheConfig
from .store import MemoryStore, ResponseStore, StoreEngine, get_store, cleanup_store

__all__ = [
    "CacheConfig",
    "ResponseCacheMiddleware",
    "install_response_cache",
    "ResponseStore",
    "MemoryStore",
    "StoreEngine",
    "get_store",
    "cleanup_store",
]
