##########################################################################
#                                                                        #
#  Sliding window rate limiting per caller identity                      #
#                                                                        #
##########################################################################

from __future__ import annotations

from collections import deque
import threading
import time
from typing import Any, Callable

from emotionscore.runtime_settings import get_runtime_setting


class RateLimiter:
    def __init__(
        self,
        window_ms: int = 60000,
        max_requests: int = 20,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._window_seconds = max(0, int(window_ms)) / 1000.0
        self._max_requests = max(1, int(max_requests))
        self._clock = clock
        self._windows: dict[str, deque[float]] = {}
        self._last_sweep: float | None = None
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings: dict[str, Any], clock: Callable[[], float] = time.monotonic) -> "RateLimiter":
        return cls(
            window_ms=int(get_runtime_setting(settings, "rate_limit.window_ms", 60000)),
            max_requests=int(get_runtime_setting(settings, "rate_limit.max_requests", 20)),
            clock=clock,
        )

    def _prune(self, window: deque[float], now: float) -> None:
        while window and now - window[0] >= self._window_seconds:
            window.popleft()

    def _sweep(self, now: float) -> None:
        """Forget identities with nothing left in their window."""
        idle = [
            key for key, window in self._windows.items()
            if not window or now - window[-1] >= self._window_seconds
        ]
        for key in idle:
            del self._windows[key]
        self._last_sweep = now

    def is_rate_limited(self, identity: Any) -> bool:
        """Check and record one request; limited calls are not recorded."""
        key = str(identity)
        with self._lock:
            now = self._clock()
            if self._last_sweep is None or now - self._last_sweep >= self._window_seconds:
                self._sweep(now)
            window = self._windows.setdefault(key, deque())
            self._prune(window, now)
            if len(window) >= self._max_requests:
                return True
            window.append(now)
            return False

    def request_count(self, identity: Any) -> int:
        key = str(identity)
        with self._lock:
            window = self._windows.get(key)
            if not window:
                return 0
            self._prune(window, self._clock())
            if not window:
                del self._windows[key]
            return len(window)

    @property
    def tracked_identities(self) -> int:
        with self._lock:
            return len(self._windows)

    def reset(self, identity: Any) -> None:
        with self._lock:
            self._windows.pop(str(identity), None)


__all__ = ["RateLimiter"]
