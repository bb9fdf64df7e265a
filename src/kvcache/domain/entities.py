from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Entry:
    """A stored value and its absolute expiration deadline."""

    value: Any
    expires_at: float | None = None  # epoch seconds (time.time()); None = never expires

    def is_expired(self, now: float) -> bool:
        """Return True once now has passed the deadline.

        An entry is live at T iff it never expires or T <= expires_at.
        """
        return self.expires_at is not None and now > self.expires_at
