"""Immutable configuration for the response caching middleware."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL = 3600
JSON_CONTENT_TYPE = "application/json; charset=utf-8"
CACHE_STATUS_HEADER = "X-Cache"

LogCallback = Callable[..., None]


def _freeze_groups(groups: Optional[Mapping[str, Iterable[str]]]) -> Mapping[str, tuple]:
    frozen = {}
    for family, related in (groups or {}).items():
        if isinstance(related, str):
            raise ValueError(
                f"groups[{family!r}] must be a sequence of families, got the string {related!r}"
            )
        frozen[family] = tuple(related)
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class CacheConfig:
    """Process-wide, read-only caching configuration.

    Attributes:
        ttl: Seconds a newly cached response lives in the store
        groups: Resource family -> related families invalidated along with it
        outdoors: Families whose GET responses are never cached
        logger: ``(format, *args)`` sink for store failures
        content_type: Content type served on a cache hit
        cache_status_header: Header reporting HIT/MISS, or None to omit it
        skip_unscoped_invalidation: Mutations on paths without a family
            (``/v1``, ``/``) delete nothing instead of ``/<version>/*``
    """

    ttl: int = DEFAULT_TTL
    groups: Mapping[str, tuple] = field(default_factory=dict)
    outdoors: frozenset = field(default_factory=frozenset)
    logger: Optional[LogCallback] = None
    content_type: str = JSON_CONTENT_TYPE
    cache_status_header: Optional[str] = CACHE_STATUS_HEADER
    skip_unscoped_invalidation: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.ttl, int) or isinstance(self.ttl, bool) or self.ttl <= 0:
            raise ValueError(f"ttl must be a positive number of seconds, got {self.ttl!r}")
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "groups", _freeze_groups(self.groups))
        if isinstance(self.outdoors, str):
            raise ValueError(f"outdoors must be a collection of families, got {self.outdoors!r}")
        object.__setattr__(self, "outdoors", frozenset(self.outdoors))

    def related_families(self, family: str) -> tuple:
        return self.groups.get(family, ())

    def is_outdoors(self, family: str) -> bool:
        return family in self.outdoors

    def log(self, fmt: str, *args: Any) -> None:
        """Report a diagnostic through the configured sink."""
        sink = self.logger or logger.warning
        sink(fmt, *args)


__all__ = ["CacheConfig", "DEFAULT_TTL", "JSON_CONTENT_TYPE", "CACHE_STATUS_HEADER"]
