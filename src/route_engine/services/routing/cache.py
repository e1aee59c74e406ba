"""Time-expiring cache of optimized routes."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Sequence

from ...config import settings
from ...models.domain import Location, RouteConstraints
from .models import OptimizedRoute

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    route: OptimizedRoute
    created_at: datetime

    def is_expired(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.created_at > ttl


def fingerprint(locations: Sequence[Location], constraints: RouteConstraints) -> str:
    """Cache key: sorted location ids plus the constraint signature."""
    location_ids = ",".join(sorted(location.id for location in locations))
    return f"{location_ids}_{constraints.signature()}"


class RouteCache:
    """Mutex-guarded map from request fingerprint to route.

    Concurrent writers for one key resolve as last-writer-wins.
    """

    def __init__(self, clock: Callable[[], datetime], ttl_seconds: float | None = None) -> None:
        self._clock = clock
        self.ttl = timedelta(seconds=ttl_seconds if ttl_seconds is not None else settings.cache_ttl_seconds)
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> OptimizedRoute | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(now, self.ttl):
                del self._entries[key]
                logger.debug(f"Cache entry expired for key {key}")
                return None
            return entry.route

    def put(self, key: str, route: OptimizedRoute) -> None:
        """Store ``route`` and evict every entry that has outlived the TTL."""
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            self._entries[key] = CacheEntry(route=route, created_at=now)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            return self._evict_expired(now)

    def _evict_expired(self, now: datetime) -> int:
        # Caller holds the lock.
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now, self.ttl)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired route(s)")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
