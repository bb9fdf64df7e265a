from __future__ import annotations

from kvcache.config import CacheSettings, configure_logging, load_settings
from kvcache.domain.entities import Entry
from kvcache.domain.exceptions import (
    KeyExistsError,
    KeyNotFoundError,
    KVCacheError,
    ValidationError,
)
from kvcache.domain.value_objects import (
    DEFAULT_EXPIRATION,
    NO_EXPIRATION,
    TTL,
    Expiration,
    ReaperState,
)
from kvcache.infrastructure.cache import EvictionCallback, TTLCache

__all__ = [
    "DEFAULT_EXPIRATION",
    "NO_EXPIRATION",
    "TTL",
    "CacheSettings",
    "Entry",
    "EvictionCallback",
    "Expiration",
    "KVCacheError",
    "KeyExistsError",
    "KeyNotFoundError",
    "ReaperState",
    "TTLCache",
    "ValidationError",
    "configure_logging",
    "create_cache",
    "load_settings",
]


def create_cache(settings: CacheSettings | None = None) -> TTLCache:
    """Create a TTLCache from settings, loading them from the environment when omitted.

    The caller owns the returned cache and must close() it when a cleanup
    interval is configured.
    """
    if settings is None:
        settings = load_settings()
    return TTLCache(
        default_ttl=settings.default_ttl,
        cleanup_interval=settings.cleanup_interval,
    )
