"""In-memory content cache with at-most-once computation per key.

Entries live for the lifetime of the process. On a miss, the first caller
computes the value while later callers for the same key wait for that
computation instead of repeating it:

    caller A ── miss ── register future ── compute ── publish ── result
    caller B ── in flight ──────────────── wait ─────────────── result

Failures are not memoized. The in-flight future is dropped, the error is
raised to the computing caller and to everyone waiting on it, and the next
lookup computes again.
"""

import logging
import threading
from collections.abc import Callable, Hashable
from concurrent.futures import Future
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class ContentCache(Generic[K, V]):
    """Thread-safe memoizing map from keys to computed values.

    The lock only guards map bookkeeping; computations run outside of it,
    so a slow computation for one key never blocks lookups of other keys.
    """

    def __init__(self, compute: Callable[[K], V], *, name: str = "content") -> None:
        """Initialize cache.

        Args:
            compute: Pipeline producing the value for a key; may raise
            name: Label used in log messages
        """
        self._compute = compute
        self._name = name
        self._lock = threading.Lock()
        self._entries: dict[K, V] = {}
        self._pending: dict[K, Future[V]] = {}

    def get(self, key: K) -> V:
        """Return the value for a key, computing it on first use.

        Args:
            key: Cache key

        Returns:
            Cached or freshly computed value

        Raises:
            Exception: Whatever the computation raised, unchanged
        """
        with self._lock:
            if key in self._entries:
                return self._entries[key]
            future = self._pending.get(key)
            owner = future is None
            if future is None:
                future = Future()
                self._pending[key] = future

        if not owner:
            logger.debug(f"Waiting for in-flight {self._name} {key}")
            return future.result()

        logger.debug(f"Cache miss for {self._name} {key}")
        try:
            value = self._compute(key)
        except BaseException as exc:
            with self._lock:
                del self._pending[key]
            future.set_exception(exc)
            raise

        with self._lock:
            self._entries[key] = value
            del self._pending[key]
        future.set_result(value)
        logger.debug(f"Cached {self._name} {key}")
        return value

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
