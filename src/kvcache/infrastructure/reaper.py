from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from kvcache.domain.value_objects import ReaperState

logger = logging.getLogger(__name__)


class Reaper:
    """Background thread that calls sweep() every interval seconds until stopped.

    The thread is a daemon so a forgotten store does not block interpreter
    exit, but it holds a strong reference to sweep (and so to the store):
    owners must call stop(), usually through TTLCache.close().
    """

    def __init__(self, sweep: Callable[[], int], interval: float, name: str = "kvcache-reaper") -> None:
        # Chained comparison also rejects NaN; Event.wait cannot take more than TIMEOUT_MAX.
        if not 0 < interval <= threading.TIMEOUT_MAX:
            raise ValueError(
                f"Reaper interval must be positive and at most {threading.TIMEOUT_MAX}, got {interval!r}"
            )
        self._sweep = sweep
        self._interval = interval
        self._stop = threading.Event()
        self._state = ReaperState.IDLE
        self._state_lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def state(self) -> ReaperState:
        return self._state

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> None:
        self._thread.start()
        logger.debug("Reaper %s started (interval=%.3fs)", self._thread.name, self._interval)

    def stop(self, timeout: float | None = None) -> None:
        """Signal the thread to stop and wait for it to exit.

        Safe to call more than once, before start(), and from the reaper
        thread itself (an eviction callback closing its own store); in that
        last case the thread exits once the current sweep returns.
        """
        self._stop.set()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout)
        if not self._thread.is_alive():
            self._set_state(ReaperState.STOPPED)

    def _run(self) -> None:
        # Event.wait returns True only once stop() has been called.
        while not self._stop.wait(self._interval):
            self._set_state(ReaperState.SWEEPING)
            try:
                removed = self._sweep()
                if removed:
                    logger.debug("Reaper swept %d expired entries", removed)
            except Exception:
                logger.exception("Reaper sweep failed; continuing")
            finally:
                self._set_state(ReaperState.IDLE)
        self._set_state(ReaperState.STOPPED)
        logger.debug("Reaper %s stopped", self._thread.name)

    def _set_state(self, state: ReaperState) -> None:
        with self._state_lock:
            # STOPPED is terminal.
            if self._state is not ReaperState.STOPPED:
                self._state = state
