"""Short-lived memoization of ranked result lists."""
import logging
import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from cachetools import TTLCache

logger = logging.getLogger(__name__)

RECOMMENDATIONS = "recommendations"
SIMILAR_ITEMS = "similar_items"
TRENDING = "trending"
NEW_RELEASES = "new_releases"

DEFAULT_TTLS: Dict[str, float] = {
    RECOMMENDATIONS: 30 * 60,
    SIMILAR_ITEMS: 60 * 60,
    TRENDING: 60 * 60,
    NEW_RELEASES: 30 * 60,
}

CacheKey = Tuple[str, Hashable, int]


class ResultCache:
    """
    Thread-safe TTL cache for ranked results.

    Every operation gets its own TTLCache so each can expire on its own
    schedule. Keys combine the operation, the user or item id and the
    requested size, so differently sized requests never collide.
    """

    def __init__(
        self,
        max_entries: int = 1024,
        ttls: Optional[Dict[str, float]] = None,
        timer: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the cache.

        Args:
            max_entries: Maximum entries kept per operation
            ttls: Seconds to live per operation (merged over the defaults)
            timer: Clock used for expiry; tests pass a fake clock
        """
        self.ttls = {**DEFAULT_TTLS, **(ttls or {})}
        self._caches: Dict[str, TTLCache] = {
            operation: TTLCache(maxsize=max_entries, ttl=ttl, timer=timer)
            for operation, ttl in self.ttls.items()
        }
        self._lock = threading.Lock()

    @staticmethod
    def make_key(operation: str, subject: Hashable, limit: int) -> CacheKey:
        return operation, subject, limit

    def get(self, operation: str, subject: Hashable, limit: int) -> Optional[Any]:
        """Return the cached value or None on a miss or expiry."""
        key = self.make_key(operation, subject, limit)
        with self._lock:
            value = self._caches[operation].get(key)
        if value is not None:
            logger.debug(f"Cache hit: {key}")
        return value

    def set(self, operation: str, subject: Hashable, limit: int, value: Any) -> None:
        """Store a value. A value the cache can't hold is logged and dropped."""
        key = self.make_key(operation, subject, limit)
        try:
            with self._lock:
                self._caches[operation][key] = value
        except ValueError as e:
            # cachetools rejects values larger than maxsize
            logger.warning(f"Could not cache {key}: {str(e)}")

    def clear(self) -> None:
        with self._lock:
            for cache in self._caches.values():
                cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(cache) for cache in self._caches.values())


class NullResultCache(ResultCache):
    """Cache that never stores anything."""

    def __init__(self):
        super().__init__(max_entries=1)

    def get(self, operation: str, subject: Hashable, limit: int) -> Optional[Any]:
        return None

    def set(self, operation: str, subject: Hashable, limit: int, value: Any) -> None:
        return None
