from __future__ import annotations


class KVCacheError(Exception):
    """Base exception for all kvcache errors."""


class KeyExistsError(KVCacheError):
    """Raised by add() when a live entry already occupies the key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Item {key!r} already exists")


class KeyNotFoundError(KVCacheError):
    """Raised by replace() when the key is absent or its entry has expired."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Item {key!r} doesn't exist")


class ValidationError(KVCacheError):
    """Raised when a TTL, interval or configuration value is invalid."""
