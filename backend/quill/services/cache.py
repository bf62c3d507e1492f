"""Memoized query cache sitting in front of read paths.

A best-effort, time-bounded key/value map. Entries expire lazily on read and the
map is capped by evicting the oldest inserted key (reads do not refresh an
entry's position). It is not a correctness mechanism: every write path clears
it before returning.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from quill.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cached value plus the clock reading at which it was stored."""

    value: Any
    stored_at: float


class QueryCache:
    """TTL-bounded, size-capped cache with an injectable clock.

    Request handlers may run in a threadpool, so get/set/evict sequences are
    serialized with a lock.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = get_settings()
        self.ttl_seconds = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.max_entries = settings.cache_max_entries if max_entries is None else max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(name: str, options: BaseModel | None = None) -> str:
        """Build a deterministic key from a query name and its option set."""
        if options is None:
            return name
        return f"{name}_{options.model_dump_json()}"

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store a value, evicting the oldest inserted entry when full."""
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def invalidate(self, prefix_or_key: str) -> int:
        """Drop the exact key and every key starting with it. Returns the count."""
        with self._lock:
            doomed = [k for k in self._entries if k.startswith(prefix_or_key)]
            for key in doomed:
                del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.debug("Query cache cleared (%d entries)", count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries
