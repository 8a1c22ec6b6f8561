import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from ..config.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    data: T
    timestamp: float


class TTLCache(Generic[T]):
    """In-memory key/value store whose entries expire after a fixed TTL.

    Expiry is lazy: a stale entry is only removed when it is next read.
    There is no size bound and no background sweeper. All operations are
    guarded by a lock, so one instance can be shared between coroutines
    and worker threads.
    """

    def __init__(
        self,
        name: str = "cache",
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.name = name
        self.ttl = settings.config.cache.default_ttl if ttl is None else ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

        logger.debug(f"Cache '{name}' initialized (TTL: {self.ttl}s)")

    def get(self, key: str) -> Optional[T]:
        """Return the value stored under ``key`` if it has not expired"""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                if self._clock() - entry.timestamp < self.ttl:
                    self._hits += 1
                    logger.debug(f"Cache '{self.name}' hit: {key}")
                    return entry.data
                del self._entries[key]
                logger.debug(f"Cache '{self.name}' expired: {key}")
            self._misses += 1

        logger.debug(f"Cache '{self.name}' miss: {key}")
        return None

    def put(self, key: str, value: T) -> None:
        """Store ``value`` under ``key``, replacing any previous entry"""
        entry = CacheEntry(data=value, timestamp=self._clock())
        with self._lock:
            self._entries[key] = entry
        logger.debug(f"Cache '{self.name}' set: {key}")

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info(f"Cache '{self.name}' cleared")

    def stats(self) -> Dict[str, Any]:
        """Entry count and hit/miss counters"""
        with self._lock:
            return {
                "name": self.name,
                "entries": len(self._entries),
                "ttl_seconds": self.ttl,
                "hits": self._hits,
                "misses": self._misses,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
