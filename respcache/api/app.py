"""Helpers for attaching the response cache to a FastAPI application."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from ..config.cache_config import CacheConfig
from ..config.settings import Settings
from ..store.base import ResponseStore
from ..store.engine import get_store_engine
from .middleware.response_cache import ResponseCacheMiddleware

logger = logging.getLogger(__name__)


def install_response_cache(
    app: FastAPI,
    store: Optional[ResponseStore] = None,
    config: Optional[CacheConfig] = None,
) -> ResponseStore:
    """Add the response cache middleware to ``app``.

    Defaults to the process-wide store engine (initialized on first use)
    and to a configuration built from the environment. Returns the store
    so the caller can close it on shutdown.
    """
    Settings.refresh_from_env()
    if store is None:
        store = get_store_engine()
    if config is None:
        config = Settings.to_cache_config()

    app.add_middleware(ResponseCacheMiddleware, store=store, config=config)

    logger.info(
        "Response cache installed (ttl=%ss, groups=%d, outdoors=%d)",
        config.ttl,
        len(config.groups),
        len(config.outdoors),
    )
    return store
