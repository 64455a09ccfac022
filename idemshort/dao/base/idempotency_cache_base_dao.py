"""Abstract base class for idempotency cache backing stores.

The idempotency cache (see idemshort.core.cache.IdempotentCache) keeps its
entries and per-key locks in a key-value store with per-entry TTL. This
interface is the only thing the cache needs from that store.

Every method raises DataStoreError when the store is unreachable or times out.
The cache turns those into explicit ERROR results; the store does not swallow them.
"""

from abc import ABC, abstractmethod


class IdempotencyCacheBaseDAO(ABC):
    """Interface for idempotency cache backing stores.

    Methods:
        get(key) -> str | None:
            Return the live value for key, None on miss or expiry.

        set(key, value, ttl, nx=False) -> bool:
            Store value with a TTL in seconds. With nx=True the write only
            happens if no live value exists (atomic "set if absent").
            Returns True if the value was written.

        delete(key) -> bool:
            Remove key regardless of its expiry. Returns True if it existed.

        delete_if_equals(key, value) -> bool:
            Atomically remove key only if it currently holds value
            (used to release locks owned by the caller).

        has(key) -> bool:
            Non-mutating existence probe.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str, ttl: float, nx: bool = False) -> bool:
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    def delete_if_equals(self, key: str, value: str) -> bool:
        pass

    @abstractmethod
    def has(self, key: str) -> bool:
        pass
