"""Cache key and resource family derivation.

Paths are expected in the form ``/<version>/<family>/...``. The family
scopes invalidation; the key identifies one cached response.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from starlette.requests import Request


def _segments(path: str) -> List[str]:
    return [segment for segment in path.split("/") if segment]


def derive_api_version(path: str) -> str:
    """Return the leading path segment, e.g. ``v1`` for ``/v1/product``."""
    segments = _segments(path)
    return segments[0] if segments else ""


def derive_resource_family(path: str) -> str:
    """Return the resource family of ``path``.

    >>> derive_resource_family("/v1/product/123")
    'product'
    >>> derive_resource_family("/v1")
    ''
    """
    segments = _segments(path)
    if len(segments) >= 2:
        return segments[1]
    return ""


def query_params_from_items(items: Iterable[Tuple[str, str]]) -> Dict[str, List[str]]:
    """Group ``(name, value)`` pairs by name, keeping each name's value order."""
    params: Dict[str, List[str]] = {}
    for name, value in items:
        params.setdefault(name, []).append(value)
    return params


def derive_cache_key(path: str, query_params: Mapping[str, Sequence[str]]) -> str:
    """Build a canonical cache key from a path and its query parameters.

    Parameter names are sorted; values of a repeated name keep their
    original order. Two requests with the same path and parameter
    multiset produce the same key whatever order the parameters came in.
    """
    if not query_params:
        return path

    pairs = [
        f"{name}={value}"
        for name in sorted(query_params)
        for value in query_params[name]
    ]
    return path + "?" + "&".join(pairs)


def cache_key_for_request(request: Request) -> str:
    params = query_params_from_items(request.query_params.multi_items())
    return derive_cache_key(request.url.path, params)


def family_pattern(version: str, family: str) -> str:
    """Wildcard pattern covering every cached key of a resource family."""
    return f"/{version}/{family}*"


__all__ = [
    "derive_api_version",
    "derive_resource_family",
    "derive_cache_key",
    "query_params_from_items",
    "cache_key_for_request",
    "family_pattern",
]
