"""Environment-driven settings for building a cache and configuring logging.

Variables:
    KVCACHE_DEFAULT_TTL        "never" (default) or positive seconds
    KVCACHE_CLEANUP_INTERVAL   seconds between reaper sweeps; <= 0 disables (default 0)
    KVCACHE_LOG_LEVEL          logging level name (default INFO)
"""
from __future__ import annotations

import logging
import math
import os
from collections.abc import Mapping
from dataclasses import dataclass

from kvcache.domain.exceptions import ValidationError
from kvcache.domain.value_objects import NO_EXPIRATION, TTL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@dataclass(frozen=True)
class CacheSettings:
    """Constructor parameters for TTLCache plus the log level."""

    default_ttl: TTL = NO_EXPIRATION
    cleanup_interval: float = 0.0
    log_level: str = "INFO"


def load_settings(environ: Mapping[str, str] | None = None) -> CacheSettings:
    """Read CacheSettings from environ (os.environ when omitted).

    Raises ValidationError when a variable cannot be parsed.
    """
    env = os.environ if environ is None else environ
    return CacheSettings(
        default_ttl=_parse_ttl(env.get("KVCACHE_DEFAULT_TTL", "never")),
        cleanup_interval=_parse_float("KVCACHE_CLEANUP_INTERVAL", env.get("KVCACHE_CLEANUP_INTERVAL", "0")),
        log_level=_parse_log_level(env.get("KVCACHE_LOG_LEVEL", "INFO")),
    )


def configure_logging(level: str = "INFO") -> None:
    """Apply the root logging configuration. Intended for applications, not library code."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def _parse_ttl(raw: str) -> TTL:
    value = raw.strip().lower()
    if value in ("", "never"):
        return NO_EXPIRATION
    seconds = _parse_float("KVCACHE_DEFAULT_TTL", value)
    if seconds <= 0:
        raise ValidationError(f"KVCACHE_DEFAULT_TTL must be positive or 'never', got {raw!r}")
    return seconds


def _parse_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be finite, got {raw!r}")
    return value


def _parse_log_level(raw: str) -> str:
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValidationError(f"KVCACHE_LOG_LEVEL is not a logging level: {raw!r}")
    return level
