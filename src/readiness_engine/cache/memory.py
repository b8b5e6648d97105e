"""Tier 1: in-process score cache with TTL and hit/miss statistics."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from readiness_engine.cache.keys import CacheKey
from readiness_engine.models.enums import CACHE_TTL_S
from readiness_engine.models.score import ScoreResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    evictions: int
    invalidations: int
    size: int

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


class MemoryCache:
    """Thread-safe TTL map from CacheKey to ScoreResult.

    Expired entries are not returned by :meth:`get` but stay in place until
    purged, so the degraded fallback can still reach them through
    :meth:`get_stale`.
    """

    def __init__(
        self,
        ttl_s: float = CACHE_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_s = ttl_s
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[CacheKey, tuple[ScoreResult, float]] = {}
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._invalidations = 0

    def get(self, key: CacheKey) -> ScoreResult | None:
        """Fresh entry for *key*, or None if absent or past TTL."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or self._expired(entry[1]):
                self._misses += 1
                return None
            self._hits += 1
            return entry[0]

    def get_stale(self, key: CacheKey) -> ScoreResult | None:
        """Entry for *key* regardless of age. Only for explicit degraded fallbacks."""
        with self._lock:
            entry = self._entries.get(key)
            return entry[0] if entry else None

    def put(self, key: CacheKey, result: ScoreResult) -> None:
        with self._lock:
            self._entries[key] = (result, self._clock())

    def invalidate(self, key: CacheKey) -> bool:
        with self._lock:
            removed = self._entries.pop(key, None) is not None
            if removed:
                self._invalidations += 1
                logger.debug("Invalidated %s", key)
            return removed

    def purge_expired(self) -> int:
        """Drop every entry past TTL; returns how many were evicted."""
        with self._lock:
            expired = [k for k, (_, stored) in self._entries.items() if self._expired(stored)]
            for key in expired:
                del self._entries[key]
            self._evictions += len(expired)
            return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._invalidations += len(self._entries)
            self._entries.clear()

    @property
    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                invalidations=self._invalidations,
                size=len(self._entries),
            )

    def _expired(self, stored_at: float) -> bool:
        return self._clock() - stored_at >= self.ttl_s
