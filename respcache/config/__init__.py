from .cache_config import CacheConfig
from .settings import Settings, setup_logging

__all__ = ["CacheConfig", "Settings", "setup_logging"]
