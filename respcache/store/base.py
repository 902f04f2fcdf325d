"""Base store abstractions for multi-backend support."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class StoreStats:
    """Store statistics."""

    hits: int
    misses: int
    size: int
    max_size: int
    backend_type: str
    connection_info: str


class ResponseStore(ABC):
    """Abstract base class for response stores.

    Values are opaque byte payloads. Every failure is raised as one of the
    ``respcache.errors`` kinds so callers can handle all backends alike.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the store backend."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the store backend."""
        ...

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Get a payload from the store.

        Args:
            key: Cache key

        Returns:
            Stored payload

        Raises:
            StoreMiss: If the key is absent or expired
            StoreReadError: If the backend failed
        """
        ...

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl: Optional[int] = None) -> None:
        """Store a payload.

        Args:
            key: Cache key
            value: Payload bytes
            ttl: Time-to-live in seconds (None uses the backend default)

        Raises:
            StoreWriteError: If the backend failed
        """
        ...

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete keys from the store.

        Returns:
            Number of keys that existed and were deleted

        Raises:
            StoreDeleteError: If the backend failed
        """
        ...

    @abstractmethod
    async def delete_wildcard(self, pattern: str) -> int:
        """Delete every key matching a wildcard pattern.

        A trailing ``*`` matches all keys sharing the literal prefix before
        it. A pattern without ``*`` deletes that exact key.

        Returns:
            Number of entries deleted

        Raises:
            StoreDeleteError: If the backend failed
        """
        ...

    @abstractmethod
    async def get_stats(self) -> StoreStats:
        """Get store statistics."""
        ...


def split_wildcard(pattern: str) -> tuple[str, bool]:
    """Split a pattern into its literal prefix and whether it is a prefix match."""
    if pattern.endswith("*"):
        return pattern[:-1], True
    return pattern, False
