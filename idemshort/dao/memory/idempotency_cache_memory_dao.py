"""In-memory idempotency cache store with per-entry expiry.

Expired entries are dropped lazily on access and swept every
`sweep_every` writes, so the dictionary does not grow without bound.
"""

import threading
import time
from collections.abc import Callable

from idemshort.dao.base import IdempotencyCacheBaseDAO


class IdempotencyCacheMemoryDAO(IdempotencyCacheBaseDAO):
    def __init__(self, clock: Callable[[], float] = time.monotonic, sweep_every: int = 100):
        self._entries: dict[str, tuple[str, float]] = {}
        self._clock = clock
        self._sweep_every = sweep_every
        self._writes = 0
        self._lock = threading.Lock()

    def _live(self, key: str) -> str | None:
        # Caller holds the lock
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def _sweep(self) -> None:
        now = self._clock()
        for key in [k for k, (_, expires_at) in self._entries.items() if now >= expires_at]:
            del self._entries[key]

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._live(key)

    def set(self, key: str, value: str, ttl: float, nx: bool = False) -> bool:
        if ttl <= 0:
            raise ValueError(f'TTL must be positive (given value: {ttl}).')
        with self._lock:
            if nx and self._live(key) is not None:
                return False
            self._entries[key] = (value, self._clock() + ttl)
            self._writes += 1
            if self._writes % self._sweep_every == 0:
                self._sweep()
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def delete_if_equals(self, key: str, value: str) -> bool:
        with self._lock:
            if self._live(key) != value:
                return False
            del self._entries[key]
            return True

    def has(self, key: str) -> bool:
        with self._lock:
            return self._live(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
