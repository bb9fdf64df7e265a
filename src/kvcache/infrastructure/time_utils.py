from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

UTC_TZ: ZoneInfo = ZoneInfo("UTC")


def epoch_to_utc(ts: float) -> datetime:
    """Convert epoch seconds (as returned by time.time()) to an aware UTC datetime."""
    return datetime.fromtimestamp(ts, tz=UTC_TZ)
