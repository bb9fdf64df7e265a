from __future__ import annotations

from datetime import timedelta
from enum import Enum
from typing import Union


class Expiration(str, Enum):
    """Sentinel TTLs that are not a finite duration.

    Using (str, Enum) for Python 3.10 compatibility (StrEnum requires 3.11+).
    """

    NEVER = "never"  # entry is only removed by delete or flush
    DEFAULT = "default"  # resolved to the store's default TTL at write time


class ReaperState(str, Enum):
    """Lifecycle of the background sweep thread."""

    IDLE = "idle"
    SWEEPING = "sweeping"
    STOPPED = "stopped"


NO_EXPIRATION = Expiration.NEVER
DEFAULT_EXPIRATION = Expiration.DEFAULT

# A finite TTL is a positive number of seconds or a positive timedelta.
TTL = Union[int, float, timedelta, Expiration]
