from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    key: str
    value: str
    expires_at: float
    eviction: Optional[asyncio.TimerHandle] = field(default=None, repr=False)

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now


class ExpiringLocalStore:
    """
    In-process key/value store with per-key TTL. Fallback of last resort
    when the remote cache is unreachable.

    Expiry is enforced twice: an eviction timer on the running event loop
    purges the entry at `expires_at`, and every read re-checks the clock so
    a late (or missing) timer never serves an expired value.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for e in self._entries.values() if not e.is_expired(now))

    def get(self, key: str) -> Optional[str]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(now):
                self._drop(key)
                return None
            return entry.value

    def set(self, key: str, value: str, ttl_seconds: float) -> None:
        with self._lock:
            self._put(key, value, ttl_seconds)

    def delete(self, key: str) -> int:
        now = self._clock()
        with self._lock:
            entry = self._drop(key)
        if entry is None or entry.is_expired(now):
            return 0
        return 1

    def incr(self, key: str, ttl_seconds: float, amount: int = 1) -> int:
        """
        Add amount to the decimal counter under key and restart its TTL from now.
        A missing, expired or non-numeric value counts as 0.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            current = 0
            if entry is not None and not entry.is_expired(now):
                try:
                    current = int(entry.value)
                except ValueError:
                    current = 0
            new_value = current + amount
            self._put(key, str(new_value), ttl_seconds)
            return new_value

    def clear(self) -> None:
        with self._lock:
            for key in list(self._entries):
                self._drop(key)

    def _put(self, key: str, value: str, ttl_seconds: float) -> None:
        # caller holds the lock
        self._drop(key)
        entry = CacheEntry(key=key, value=value, expires_at=self._clock() + ttl_seconds)
        entry.eviction = self._schedule_eviction(entry, ttl_seconds)
        self._entries[key] = entry

    def _drop(self, key: str) -> Optional[CacheEntry]:
        # caller holds the lock
        entry = self._entries.pop(key, None)
        if entry is not None and entry.eviction is not None:
            entry.eviction.cancel()
        return entry

    def _schedule_eviction(
        self, entry: CacheEntry, ttl_seconds: float
    ) -> Optional[asyncio.TimerHandle]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no loop (sync caller): lazy expiry on read is all we get
            return None
        return loop.call_later(max(ttl_seconds, 0), self._evict, entry)

    def _evict(self, entry: CacheEntry) -> None:
        with self._lock:
            # only evict the exact entry the timer was armed for
            if self._entries.get(entry.key) is entry:
                del self._entries[entry.key]
                logger.debug("local cache entry evicted", extra={"key": entry.key})
