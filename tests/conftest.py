"""Pytest configuration and fixtures for respcache tests."""

from __future__ import annotations

import logging
import os
from collections import Counter
from typing import Callable, List, Optional, Tuple
from unittest.mock import patch

import pytest
from fastapi import FastAPI, Request, Response
from fastapi.testclient import TestClient

from respcache.api.middleware import ResponseCacheMiddleware
from respcache.config import CacheConfig
from respcache.store import MemoryStore


@pytest.fixture(autouse=True)
def clean_environment():
    """Keep host RESPCACHE_* variables out of the tests."""
    with patch.dict(os.environ):
        for key in [name for name in os.environ if name.startswith("RESPCACHE_")]:
            del os.environ[key]
        yield


class RecordingStore(MemoryStore):
    """Memory store that records every call made to it."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: List[Tuple[str, str]] = []

    async def get(self, key: str) -> bytes:
        self.calls.append(("get", key))
        return await super().get(key)

    async def set(self, key: str, value: bytes, ttl: Optional[int] = None) -> None:
        self.calls.append(("set", key))
        await super().set(key, value, ttl)

    async def delete_wildcard(self, pattern: str) -> int:
        self.calls.append(("delete_wildcard", pattern))
        return await super().delete_wildcard(pattern)

    def ops(self, name: str) -> List[str]:
        return [target for op, target in self.calls if op == name]


def build_app(store, config: CacheConfig, hits: Counter) -> FastAPI:
    """Small API whose handlers count how often they run."""
    app = FastAPI()
    app.add_middleware(ResponseCacheMiddleware, store=store, config=config)
    flaky_state = {"calls": 0}

    @app.get("/v1/product")
    async def list_products(request: Request):
        hits["product_list"] += 1
        return {"query": dict(request.query_params), "call": hits["product_list"]}

    @app.get("/v1/product/{product_id}")
    async def get_product(product_id: str):
        hits[f"product:{product_id}"] += 1
        return {"id": product_id, "call": hits[f"product:{product_id}"]}

    @app.post("/v1/product")
    async def create_product():
        hits["product_create"] += 1
        return {"created": True}

    @app.api_route("/v1/product/{product_id}", methods=["PUT", "PATCH", "DELETE"])
    async def mutate_product(product_id: str):
        hits["product_mutate"] += 1
        return {"id": product_id, "mutated": True}

    @app.api_route("/v1/product/{product_id}", methods=["OPTIONS"])
    async def product_options(product_id: str):
        hits["product_options"] += 1
        return Response(status_code=204)

    for family in ("category", "brand", "order"):

        def make_handler(name: str) -> Callable:
            async def handler():
                hits[name] += 1
                return {"family": name, "call": hits[name]}

            return handler

        app.add_api_route(f"/v1/{family}", make_handler(family), methods=["GET"])

    @app.get("/v1/auth/me")
    async def me():
        hits["auth"] += 1
        return {"user": "tester", "call": hits["auth"]}

    @app.post("/v1/auth/login")
    async def login():
        hits["auth_login"] += 1
        return {"token": "abc"}

    @app.get("/v1/flaky/{item}")
    async def flaky(item: str):
        flaky_state["calls"] += 1
        hits["flaky"] += 1
        if flaky_state["calls"] == 1:
            return Response(content='{"detail":"not found"}', status_code=404)
        return {"item": item, "call": flaky_state["calls"]}

    @app.get("/v1/empty")
    async def empty():
        hits["empty"] += 1
        return Response(content=b"", status_code=200)

    @app.get("/v1/created")
    async def created():
        hits["created"] += 1
        return Response(content=b'{"ok":true}', status_code=201, media_type="application/json")

    return app


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def hits() -> Counter:
    return Counter()


@pytest.fixture
def make_client(store, hits):
    """Factory returning a TestClient for a given CacheConfig."""
    clients: List[TestClient] = []

    def _make(config: Optional[CacheConfig] = None, store_override=None) -> TestClient:
        app = build_app(store_override or store, config or CacheConfig(ttl=10), hits)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


# Keep library logging quiet unless a test asks for it
logging.getLogger("respcache").setLevel(logging.WARNING)
