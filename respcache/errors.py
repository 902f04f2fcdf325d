"""Error kinds raised by response stores and reported by the middleware."""

from __future__ import annotations

from typing import Optional


class StoreError(Exception):
    """Base class for store failures.

    Carries a short label identifying the operation that failed and,
    when available, the backend exception that caused it.
    """

    def __init__(
        self,
        label: str,
        key: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.label = label
        self.key = key
        self.cause = cause
        detail = f"{label} {key}" if key is not None else label
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)


class StoreMiss(StoreError):
    """Key is absent or has expired."""


class StoreReadError(StoreError):
    """Backend failed while reading a key."""


class StoreWriteError(StoreError):
    """Backend failed while writing a key."""


class StoreDeleteError(StoreError):
    """Backend failed while deleting keys."""


__all__ = [
    "StoreError",
    "StoreMiss",
    "StoreReadError",
    "StoreWriteError",
    "StoreDeleteError",
]
