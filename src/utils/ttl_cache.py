"""In-memory TTL cache with a bounded number of entries."""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any


class TTLCache:
    """Expiring key/value store with capacity-bounded eviction."""

    def __init__(
        self,
        ttl_seconds: float = 300,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Time-to-live for each entry in seconds (default 5 minutes)
            max_entries: Maximum number of entries held at once
            clock: Monotonic time source, injectable for tests
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.ttl = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        # Format: {key: (stored_at, value)}, ordered oldest write first
        self._store: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._lock = threading.RLock()

    def _is_fresh(self, stored_at: float, now: float) -> bool:
        return now - stored_at < self.ttl

    def get(self, key: str) -> Any | None:
        """
        Return the cached value for key if it is still fresh.

        Stale entries are dropped on access and reported as missing.
        """
        with self._lock:
            item = self._store.get(key)
            if item is None:
                return None
            stored_at, value = item
            if not self._is_fresh(stored_at, self._clock()):
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous entry."""
        with self._lock:
            now = self._clock()
            self._store.pop(key, None)
            if len(self._store) >= self.max_entries:
                self.purge_expired()
            while len(self._store) >= self.max_entries:
                self._store.popitem(last=False)
            self._store[key] = (now, value)

    def purge_expired(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired = [k for k, (ts, _) in self._store.items() if not self._is_fresh(ts, now)]
            for key in expired:
                del self._store[key]
            return len(expired)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._store.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
