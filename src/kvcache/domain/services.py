from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from kvcache.domain.entities import Entry
from kvcache.domain.exceptions import ValidationError
from kvcache.domain.value_objects import TTL, Expiration

# Latest deadline datetime.fromtimestamp can represent (9999-12-31T23:59:59Z).
MAX_DEADLINE = datetime(9999, 12, 31, 23, 59, 59, tzinfo=timezone.utc).timestamp()


def duration_seconds(duration: int | float | timedelta) -> float:
    """Return a finite duration as float seconds.

    Raises ValidationError for anything that is not a number or timedelta
    (bool included) and for inf or NaN.
    """
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise ValidationError(f"Expected a duration in seconds or a timedelta, got {duration!r}")
    try:
        seconds = float(duration)
    except OverflowError:
        raise ValidationError(f"Duration out of range, got {duration!r}") from None
    if not math.isfinite(seconds):
        raise ValidationError(f"Duration must be finite, got {duration!r}")
    return seconds


def normalize_default_ttl(ttl: TTL) -> float | None:
    """Return the store-wide default as seconds, or None for "never expire".

    A store has no outer default to defer to, so DEFAULT given as the store
    default means NEVER.
    """
    if isinstance(ttl, Expiration):
        return None
    return _positive_seconds(ttl)


def resolve_ttl(ttl: TTL, default: float | None) -> float | None:
    """Resolve a per-write TTL against the store default.

    DEFAULT -> the store default (which may itself be None = never).
    NEVER   -> None.
    finite  -> positive seconds; zero or negative raises ValidationError.
    """
    if ttl is Expiration.DEFAULT:
        return default
    if ttl is Expiration.NEVER:
        return None
    return _positive_seconds(ttl)


def deadline(ttl_seconds: float | None, now: float) -> float | None:
    """Absolute expiration timestamp for a resolved TTL written at now.

    Raises ValidationError when the deadline would fall past MAX_DEADLINE.
    """
    if ttl_seconds is None:
        return None
    return validate_deadline(now + ttl_seconds)


def validate_deadline(expires_at: float | None) -> float | None:
    """Return expires_at unchanged if it is None or a representable finite timestamp."""
    if expires_at is None:
        return None
    if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
        raise ValidationError(f"Deadline must be epoch seconds, got {expires_at!r}")
    # Chained comparison also rejects NaN and inf.
    if not 0 <= expires_at <= MAX_DEADLINE:
        raise ValidationError(f"Deadline out of range, got {expires_at!r}")
    return expires_at


def is_live(entry: Entry, now: float) -> bool:
    """Return True while entry may still be returned by reads."""
    return not entry.is_expired(now)


def _positive_seconds(ttl: TTL) -> float:
    seconds = duration_seconds(ttl)  # type: ignore[arg-type]
    if seconds <= 0:
        raise ValidationError(
            f"TTL must be positive, got {ttl!r}. "
            "Use Expiration.NEVER for entries that should not expire."
        )
    if seconds > MAX_DEADLINE:
        raise ValidationError(f"TTL too large, got {ttl!r}. Use Expiration.NEVER instead.")
    return seconds
