"""ASGI integration for the response cache."""

from .app import install_response_cache
from .middleware import ResponseCacheMiddleware

__all__ = ["install_response_cache", "ResponseCacheMiddleware"]
