"""Per-key deduplication of in-flight upstream requests."""

import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any


class RequestCoalescer:
    """
    Single-flight helper: at most one call per key runs at a time.

    The first caller for a key runs the function; callers arriving while it
    is in flight block on the same Future and receive its result or exception.
    """

    def __init__(self):
        self._in_flight: dict[str, Future] = {}
        self._lock = threading.Lock()

    def run(self, key: str, fn: Callable[[], Any]) -> Any:
        """
        Run fn for key, or wait for the call already running for key.

        Args:
            key: Deduplication key (the cache key of the lookup)
            fn: Zero-argument callable performing the fetch

        Returns:
            The value returned by fn

        Raises:
            Whatever fn raised, re-raised in every waiting caller
        """
        with self._lock:
            future = self._in_flight.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._in_flight[key] = future

        if not leader:
            return future.result()

        try:
            result = fn()
        except BaseException as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._in_flight.pop(key, None)

    def in_flight(self) -> int:
        """Number of keys with a call currently running."""
        with self._lock:
            return len(self._in_flight)
