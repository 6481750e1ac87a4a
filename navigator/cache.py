from __future__ import annotations
import logging
import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

logger = logging.getLogger(__name__)

QueryKey = Tuple[Hashable, ...]


class QueryCache:
    """Read-query cache keyed by query-key tuples, e.g. ("/api/contract-analyses", 7).

    Entries go stale after ``ttl`` seconds; writes invalidate by key prefix.
    """

    def __init__(self, ttl: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[QueryKey, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: QueryKey) -> Optional[Any]:
        with self._lock:
            hit = self._entries.get(key)
            if hit is None:
                return None
            stored_at, value = hit
            if self._clock() - stored_at > self.ttl:
                del self._entries[key]
                return None
            return value

    def set(self, key: QueryKey, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def fetch(self, key: QueryKey, loader: Callable[[], Any]) -> Any:
        value = self.get(key)
        if value is not None:
            return value
        value = loader()
        self.set(key, value)
        return value

    def invalidate(self, prefix: QueryKey) -> int:
        n = len(prefix)
        with self._lock:
            stale = [k for k in self._entries if k[:n] == prefix]
            for k in stale:
                del self._entries[k]
        if stale:
            logger.debug("invalidated %d cache entries under %r", len(stale), prefix)
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: QueryKey) -> bool:
        return self.get(key) is not None
