"""Environment-backed settings for the response cache."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import TypeAdapter, ValidationError

from .cache_config import DEFAULT_TTL, CacheConfig

load_dotenv()

logger = logging.getLogger(__name__)

_GROUPS_ADAPTER = TypeAdapter(Dict[str, List[str]])


def _value_from_env(key: str, default: Any = None) -> Any:
    env_val = os.getenv(key)
    if env_val is not None:
        return env_val
    return default


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    return str(value)


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return str(value)


def _as_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return default


def _as_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(item).strip() for item in value if str(item).strip()]
    return [item.strip() for item in str(value).split(",") if item.strip()]


def parse_groups(raw: Optional[str]) -> Dict[str, List[str]]:
    """Parse a JSON object mapping a family to its related families.

    Raises:
        ValueError: If the value is not valid JSON of that shape
    """
    if raw is None or not raw.strip():
        return {}
    try:
        return _GROUPS_ADAPTER.validate_python(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ValueError(f"RESPCACHE_GROUPS must be a JSON object of string lists: {exc}") from exc


class Settings:
    """Response cache settings resolved from the environment."""

    RESPCACHE_REDIS_URL: Optional[str] = None
    RESPCACHE_KEY_PREFIX: str = "respcache:"
    RESPCACHE_TTL: int = DEFAULT_TTL
    RESPCACHE_GROUPS: Dict[str, List[str]] = {}
    RESPCACHE_GROUPS_RAW: Optional[str] = None
    RESPCACHE_OUTDOORS: List[str] = []
    RESPCACHE_MAX_ENTRIES: int = 10000

    LOG_LEVEL: str = "INFO"

    @classmethod
    def _populate(cls) -> None:
        cls.RESPCACHE_REDIS_URL = _as_optional_str(_value_from_env("RESPCACHE_REDIS_URL"))
        cls.RESPCACHE_KEY_PREFIX = _as_str(_value_from_env("RESPCACHE_KEY_PREFIX", "respcache:"))
        cls.RESPCACHE_TTL = _as_int(_value_from_env("RESPCACHE_TTL"), DEFAULT_TTL)
        cls.RESPCACHE_GROUPS_RAW = _as_optional_str(_value_from_env("RESPCACHE_GROUPS"))
        try:
            cls.RESPCACHE_GROUPS = parse_groups(cls.RESPCACHE_GROUPS_RAW)
        except ValueError as exc:
            logger.warning("Ignoring invalid RESPCACHE_GROUPS: %s", exc)
            cls.RESPCACHE_GROUPS = {}
        cls.RESPCACHE_OUTDOORS = _as_list(_value_from_env("RESPCACHE_OUTDOORS"))
        cls.RESPCACHE_MAX_ENTRIES = _as_int(_value_from_env("RESPCACHE_MAX_ENTRIES"), 10000)

        cls.LOG_LEVEL = _as_str(_value_from_env("LOG_LEVEL", "INFO")).upper()

    @classmethod
    def refresh_from_env(cls) -> None:
        cls._populate()

    @classmethod
    def to_cache_config(cls, **overrides: Any) -> CacheConfig:
        """Build an immutable CacheConfig from the current settings.

        Raises:
            ValueError: If RESPCACHE_GROUPS is set but malformed
        """
        values: Dict[str, Any] = {
            "ttl": cls.RESPCACHE_TTL,
            "groups": parse_groups(cls.RESPCACHE_GROUPS_RAW),
            "outdoors": cls.RESPCACHE_OUTDOORS,
        }
        values.update(overrides)
        return CacheConfig(**values)

    @classmethod
    def log_config(cls) -> None:
        logger.info("Response cache configuration:")
        logger.info(f"  Store: {'redis' if cls.RESPCACHE_REDIS_URL else 'memory'}")
        logger.info(f"  Key prefix: {cls.RESPCACHE_KEY_PREFIX}")
        logger.info(f"  TTL: {cls.RESPCACHE_TTL}s")
        logger.info(f"  Groups: {cls.RESPCACHE_GROUPS or 'none'}")
        logger.info(f"  Outdoors: {', '.join(cls.RESPCACHE_OUTDOORS) or 'none'}")


# Populate class attributes on import
Settings.refresh_from_env()


def setup_logging(level_override: Optional[str] = None) -> None:
    """Configure root logging using settings or override."""

    level_name = (level_override or Settings.LOG_LEVEL or "WARNING").upper()

    if level_name in {"NO", "NONE", "OFF"}:
        level = logging.CRITICAL + 10
    else:
        level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,
    )

    logging.getLogger("respcache").setLevel(level)

    noisy_logger_level = max(level, logging.INFO)
    for name in ("redis", "httpx", "uvicorn.access"):
        logging.getLogger(name).setLevel(noisy_logger_level)
