"""API middleware."""

from .capture import CapturedResponse
from .keys import (
    cache_key_for_request,
    derive_api_version,
    derive_cache_key,
    derive_resource_family,
    family_pattern,
)
from .response_cache import INVALIDATING_METHODS, ResponseCacheMiddleware

__all__ = [
    "CapturedResponse",
    "ResponseCacheMiddleware",
    "INVALIDATING_METHODS",
    "cache_key_for_request",
    "derive_api_version",
    "derive_cache_key",
    "derive_resource_family",
    "family_pattern",
]
