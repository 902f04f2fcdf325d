"""Response caching middleware.

GET requests are served from the store when a cached payload exists,
otherwise the downstream response is captured and persisted. Mutating
requests invalidate their resource family and every related family
before reaching the handler. Store failures never reach the caller.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ...config.cache_config import CacheConfig
from ...errors import StoreMiss
from ...store.base import ResponseStore
from .capture import CapturedResponse
from .keys import (
    cache_key_for_request,
    derive_api_version,
    derive_resource_family,
    family_pattern,
)

logger = logging.getLogger(__name__)

INVALIDATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
CACHEABLE_STATUS = 200

# Labels reported to the configured log sink
LABEL_GET = "response_cache.get"
LABEL_SET = "response_cache.set"
LABEL_DELETE_FAMILY = "response_cache.delete_wildcard family"
LABEL_DELETE_RELATED = "response_cache.delete_wildcard related"


class ResponseCacheMiddleware(BaseHTTPMiddleware):
    """Cache successful GET responses and invalidate them on mutation.

    This middleware:
    1. Serves GET requests from the store when a non-empty payload is cached
    2. Persists 200 responses with a non-empty body after they stream out
    3. Deletes ``/<version>/<family>*`` and every related family's entries
       on POST/PUT/PATCH/DELETE, then runs the handler
    4. Leaves families listed in ``outdoors`` uncached for reads
    """

    def __init__(
        self,
        app: ASGIApp,
        store: ResponseStore,
        config: Optional[CacheConfig] = None,
    ):
        super().__init__(app)
        self.store = store
        self.config = config or CacheConfig()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        method = request.method.upper()
        path = request.url.path
        family = derive_resource_family(path)

        if method in INVALIDATING_METHODS:
            await self._invalidate(path, family)
            return await call_next(request)

        if method != "GET":
            return await call_next(request)

        if self.config.is_outdoors(family):
            return await call_next(request)

        return await self._serve_cached(request, call_next)

    async def _serve_cached(self, request: Request, call_next: Callable) -> Response:
        key = cache_key_for_request(request)

        payload = await self._read(key)
        if payload:
            logger.debug("Cache hit for %s", key)
            response = Response(
                content=payload,
                status_code=CACHEABLE_STATUS,
                media_type=self.config.content_type,
            )
            self._mark(response, "HIT")
            return response

        response = await call_next(request)

        if response.status_code == CACHEABLE_STATUS:
            capture = CapturedResponse(response.status_code)

            async def persist(captured: CapturedResponse) -> None:
                await self._write(key, captured)

            response.body_iterator = capture.tee(response.body_iterator, persist)

        self._mark(response, "MISS")
        return response

    async def _read(self, key: str) -> Optional[bytes]:
        try:
            return await self.store.get(key)
        except StoreMiss:
            logger.debug("Cache miss for %s", key)
        except Exception as exc:
            self.config.log("%s %s: %s", LABEL_GET, key, exc)
        return None

    async def _write(self, key: str, captured: CapturedResponse) -> None:
        if captured.status_code != CACHEABLE_STATUS or captured.size == 0:
            return
        try:
            await self.store.set(key, captured.body, self.config.ttl)
        except Exception as exc:
            self.config.log("%s %s: %s", LABEL_SET, key, exc)
            return
        logger.debug("Cached %d bytes for %s", captured.size, key)

    async def _invalidate(self, path: str, family: str) -> None:
        if not family and self.config.skip_unscoped_invalidation:
            logger.debug("No resource family in %s, invalidation skipped", path)
            return

        version = derive_api_version(path)
        await self._delete_pattern(family_pattern(version, family), LABEL_DELETE_FAMILY)

        for related in self.config.related_families(family):
            await self._delete_pattern(family_pattern(version, related), LABEL_DELETE_RELATED)

    async def _delete_pattern(self, pattern: str, label: str) -> None:
        try:
            deleted = await self.store.delete_wildcard(pattern)
        except Exception as exc:
            self.config.log("%s %s: %s", label, pattern, exc)
            return
        logger.debug("Invalidated %s entries matching %s", deleted, pattern)

    def _mark(self, response: Response, status: str) -> None:
        header = self.config.cache_status_header
        if header:
            response.headers[header] = status


__all__ = ["ResponseCacheMiddleware", "INVALIDATING_METHODS"]
