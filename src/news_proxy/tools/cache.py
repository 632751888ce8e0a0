import threading
import time
from typing import Any, Callable, Dict, Tuple

from ..models.news import CacheStats


class TTLCache:
    """In-memory cache with a single TTL (in seconds) shared by every entry.

    Expired entries are dropped lazily when read, and all of them are swept
    whenever `check_period` seconds have passed since the previous sweep.
    A non-positive TTL keeps entries until `flush_all`.
    """

    def __init__(
        self,
        ttl: float,
        check_period: float = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.check_period = check_period
        self._clock = clock
        self._lock = threading.Lock()
        self._store: Dict[str, Tuple[float | None, Any]] = {}
        self._hits = 0
        self._misses = 0
        self._last_sweep = clock()

    def _expires_at(self, now: float) -> float | None:
        if self.ttl <= 0:
            return None
        return now + self.ttl

    @staticmethod
    def _expired(expires_at: float | None, now: float) -> bool:
        return expires_at is not None and now >= expires_at

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep < self.check_period:
            return
        self._purge(now)

    def _purge(self, now: float) -> None:
        stale = [key for key, (expires_at, _) in self._store.items() if self._expired(expires_at, now)]
        for key in stale:
            del self._store[key]
        self._last_sweep = now

    def get(self, key: str) -> Any | None:
        now = self._clock()
        with self._lock:
            self._maybe_sweep(now)
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None
            expires_at, value = entry
            if self._expired(expires_at, now):
                del self._store[key]
                self._misses += 1
                return None
            self._hits += 1
            return value

    def set(self, key: str, value: Any) -> None:
        now = self._clock()
        with self._lock:
            self._maybe_sweep(now)
            self._store[key] = (self._expires_at(now), value)

    def flush_all(self) -> None:
        # Counters survive a flush; only the key set is dropped.
        with self._lock:
            self._store.clear()

    def stats(self) -> CacheStats:
        now = self._clock()
        with self._lock:
            self._purge(now)
            return CacheStats(keys=len(self._store), hits=self._hits, misses=self._misses)

    def __bool__(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
