##########################################################################
#                                                                        #
#  This file (response_cache.py) keeps recent replies keyed by the       #
#  normalised user text, with expiry, LRU eviction and a similarity      #
#  lookup.                                                               #
#                                                                        #
##########################################################################

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
import logging
import re
import threading
import time
from typing import Any, Callable

from emotionscore.affect_scorer import AffectScore
from emotionscore.runtime_settings import get_runtime_setting


logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


@dataclass
class CacheEntry:
    normalized_key: str
    response: str
    created_at: float
    affect: AffectScore


def _jaccard(left: set[str], right: set[str]) -> float:
    union = left | right
    if not union:
        return 0.0
    return len(left & right) / len(union)


class ResponseCache:
    """Bounded response cache with time-based expiry."""

    def __init__(
        self,
        capacity: int = 1000,
        ttl_minutes: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        if capacity < 1:
            raise ValueError("Cache capacity must be at least 1.")
        self._capacity = int(capacity)
        self._ttl_seconds = float(ttl_minutes) * 60.0
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings: dict[str, Any], clock: Callable[[], float] = time.monotonic) -> "ResponseCache":
        return cls(
            capacity=int(get_runtime_setting(settings, "cache.capacity", 1000)),
            ttl_minutes=float(get_runtime_setting(settings, "cache.ttl_minutes", 60)),
            clock=clock,
        )

    @staticmethod
    def normalize_key(text: str) -> str:
        return _WHITESPACE.sub(" ", str(text or "").lower()).strip()

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def capacity(self) -> int:
        return self._capacity

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at > self._ttl_seconds

    def _purge_expired(self, now: float) -> None:
        stale = [key for key, entry in self._entries.items() if self._expired(entry, now)]
        for key in stale:
            del self._entries[key]

    def get(self, text: str) -> CacheEntry | None:
        key = self.normalize_key(text)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return entry

    def set(self, text: str, response: str, affect: AffectScore) -> CacheEntry:
        key = self.normalize_key(text)
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            self._entries.pop(key, None)
            while len(self._entries) >= self._capacity:
                evicted_key, _entry = self._entries.popitem(last=False)
                logger.debug(f"Evicted cache entry: {evicted_key!r}")
            entry = CacheEntry(normalized_key=key, response=response, created_at=now, affect=affect)
            self._entries[key] = entry
            return entry

    def find_similar(self, text: str, threshold: float = 0.8) -> CacheEntry | None:
        words = set(self.normalize_key(text).split())
        if not words:
            return None

        with self._lock:
            now = self._clock()
            best_entry = None
            best_score = 0.0
            for entry in self._entries.values():
                if self._expired(entry, now):
                    continue
                score = _jaccard(words, set(entry.normalized_key.split()))
                if score > best_score:
                    best_score = score
                    best_entry = entry

        if best_entry is not None and best_score >= threshold:
            logger.info(f"Similar cache entry found (score {best_score:.2f})")
            return best_entry
        return None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


__all__ = [
    "CacheEntry",
    "ResponseCache",
]
