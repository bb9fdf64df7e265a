from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from types import TracebackType
from typing import Any

from kvcache.domain.entities import Entry
from kvcache.domain.exceptions import KeyExistsError, KeyNotFoundError, ValidationError
from kvcache.domain.services import (
    deadline,
    duration_seconds,
    is_live,
    normalize_default_ttl,
    resolve_ttl,
    validate_deadline,
)
from kvcache.domain.value_objects import DEFAULT_EXPIRATION, NO_EXPIRATION, TTL
from kvcache.infrastructure.reaper import Reaper
from kvcache.infrastructure.rwlock import RWLock
from kvcache.infrastructure.time_utils import epoch_to_utc

logger = logging.getLogger(__name__)

EvictionCallback = Callable[[str, Any], None]


class TTLCache:
    """In-process key/value cache with per-entry expiration.

    Reads take the shared side of a reader/writer lock, writes the exclusive
    side. Expired entries are invisible to reads straight away and are
    physically removed by delete(), flush(), delete_expired() or the
    background reaper (when cleanup_interval > 0).

    The eviction callback is always invoked after the lock is released, so it
    may call back into the cache.

    A cache with a reaper owns a background thread: call close() or use the
    cache as a context manager. There is no finalizer; an unclosed cache
    leaks the thread and stays reachable through it.
    """

    def __init__(
        self,
        default_ttl: TTL = NO_EXPIRATION,
        cleanup_interval: float | timedelta = 0,
        items: Mapping[str, Entry] | None = None,
    ) -> None:
        self._default_ttl = normalize_default_ttl(default_ttl)
        self._items: dict[str, Entry] = {}
        if items:
            for key, entry in items.items():
                if not isinstance(entry, Entry):
                    raise ValidationError(f"Expected Entry for key {key!r}, got {type(entry).__name__}")
                validate_deadline(entry.expires_at)
            self._items.update(items)
        self._lock = RWLock()
        self._on_evicted: EvictionCallback | None = None
        self._reaper: Reaper | None = None

        interval = duration_seconds(cleanup_interval)
        if interval > threading.TIMEOUT_MAX:
            raise ValidationError(f"cleanup_interval too large, got {cleanup_interval!r}")
        if interval > 0:
            self._reaper = Reaper(self.delete_expired, interval)
            self._reaper.start()

    @classmethod
    def from_items(
        cls,
        items: Mapping[str, Entry],
        default_ttl: TTL = NO_EXPIRATION,
        cleanup_interval: float | timedelta = 0,
    ) -> TTLCache:
        """Create a cache pre-populated from items (e.g. a snapshot taken with items()).

        The mapping is copied; later changes to it do not affect the cache.
        Entries keep their absolute deadlines, so already-expired ones are
        stored but invisible to reads until reaped.
        """
        return cls(default_ttl, cleanup_interval, items=items)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set(self, key: str, value: Any, ttl: TTL = DEFAULT_EXPIRATION) -> None:
        """Store value under key, replacing any existing entry."""
        entry = self._make_entry(value, ttl)
        with self._lock.write_locked():
            self._items[key] = entry

    def set_default(self, key: str, value: Any) -> None:
        """Store value under key with the cache's default TTL."""
        self.set(key, value, DEFAULT_EXPIRATION)

    def add(self, key: str, value: Any, ttl: TTL = DEFAULT_EXPIRATION) -> None:
        """Store value only if key is absent or its entry has expired.

        Raises KeyExistsError when a live entry occupies key.
        """
        entry = self._make_entry(value, ttl)
        with self._lock.write_locked():
            if self._live_entry(key, time.time()) is not None:
                raise KeyExistsError(key)
            self._items[key] = entry

    def replace(self, key: str, value: Any, ttl: TTL = DEFAULT_EXPIRATION) -> None:
        """Overwrite key only if it currently holds a live entry.

        Raises KeyNotFoundError when key is absent or expired; nothing is stored.
        """
        entry = self._make_entry(value, ttl)
        with self._lock.write_locked():
            if self._live_entry(key, time.time()) is None:
                raise KeyNotFoundError(key)
            self._items[key] = entry

    def delete(self, key: str) -> None:
        """Remove key if present. Fires the eviction callback when something was removed."""
        with self._lock.write_locked():
            entry = self._items.pop(key, None)
            callback = self._on_evicted
        if entry is not None and callback is not None:
            callback(key, entry.value)

    def delete_expired(self) -> int:
        """Remove every expired entry and return how many were removed.

        Removed pairs are collected under the lock; the eviction callback runs
        for each of them after the lock is released. A callback failure is
        logged and does not skip the remaining pairs; the first failure is
        re-raised once every pair has been notified.
        """
        now = time.time()
        evicted: list[tuple[str, Any]] = []
        with self._lock.write_locked():
            expired_keys = [k for k, e in self._items.items() if e.is_expired(now)]
            for k in expired_keys:
                evicted.append((k, self._items.pop(k).value))
            callback = self._on_evicted
        first_error: Exception | None = None
        if callback is not None:
            for k, v in evicted:
                try:
                    callback(k, v)
                except Exception as exc:
                    logger.exception("Eviction callback failed for key %r", k)
                    if first_error is None:
                        first_error = exc
        if first_error is not None:
            raise first_error
        return len(evicted)

    def flush(self) -> None:
        """Remove all entries without invoking the eviction callback."""
        with self._lock.write_locked():
            self._items = {}

    def on_evicted(self, callback: EvictionCallback | None) -> None:
        """Install (or with None, clear) the eviction callback. Not retroactive."""
        with self._lock.write_locked():
            self._on_evicted = callback

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, key: str) -> tuple[Any, bool]:
        """Return (value, True) for a live entry, else (None, False)."""
        with self._lock.read_locked():
            entry = self._live_entry(key, time.time())
        if entry is None:
            return None, False
        return entry.value, True

    def get_with_expiration(self, key: str) -> tuple[Any, datetime | None, bool]:
        """Return (value, expiry, found) for key.

        expiry is the UTC deadline, or None when the entry never expires.
        Missing and expired keys yield (None, None, False).
        """
        with self._lock.read_locked():
            entry = self._live_entry(key, time.time())
        if entry is None:
            return None, None, False
        if entry.expires_at is None:
            return entry.value, None, True
        return entry.value, epoch_to_utc(entry.expires_at), True

    def item_count(self) -> int:
        """Number of stored entries, including expired ones not yet reaped."""
        with self._lock.read_locked():
            return len(self._items)

    def items(self) -> dict[str, Entry]:
        """Snapshot of all live entries."""
        now = time.time()
        with self._lock.read_locked():
            return {k: e for k, e in self._items.items() if is_live(e, now)}

    def objects(self) -> dict[str, Any]:
        """Snapshot of all live values."""
        now = time.time()
        with self._lock.read_locked():
            return {k: e.value for k, e in self._items.items() if is_live(e, now)}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def reaper(self) -> Reaper | None:
        return self._reaper

    def close(self) -> None:
        """Stop the background reaper, if any, and wait for it to exit. Idempotent."""
        if self._reaper is not None:
            self._reaper.stop()

    def __enter__(self) -> TTLCache:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internal helpers (caller holds the lock where noted)
    # ------------------------------------------------------------------

    def _make_entry(self, value: Any, ttl: TTL) -> Entry:
        # The default is resolved now, at write time.
        ttl_seconds = resolve_ttl(ttl, self._default_ttl)
        return Entry(value=value, expires_at=deadline(ttl_seconds, time.time()))

    def _live_entry(self, key: str, now: float) -> Entry | None:
        """Return key's entry if live. Caller holds the lock."""
        entry = self._items.get(key)
        if entry is None or not is_live(entry, now):
            return None
        return entry
