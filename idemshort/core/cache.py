"""Idempotent compute-or-fetch cache

Serializes concurrent duplicate requests into a single underlying computation.

Protocol for get_or_compute(key, compute):

    1. A live entry is returned as-is; compute is not called.
    2. On a miss, callers race for a per-key lock `<key>:lock` using the store's
       atomic "set if absent". The lock value is a random owner token.
    3. The winner re-checks the entry, computes, publishes the result and
       releases the lock with compare-and-delete on its token.
    4. Losers poll for the published result for up to `lock_wait` seconds. If
       the lock disappears without a result (the winner's compute raised), they
       race for the lock again.
    5. On timeout, or when the store is unreachable, a caller computes on its
       own and publishes with "set if absent". If another result got there
       first, the stored one is returned instead.

Every publish is "set if absent", so whatever happens exactly one result is
stored per key and every caller that finds a stored result returns it. Failed
computations are never stored.

Store failures never abort the caller. Public operations return a CacheResult
with status ERROR and log a warning; get_or_compute degrades to computing.
"""

import time
import uuid
import logging
from collections.abc import Callable
from typing import Any

from idemshort.constants import CacheTTL
from idemshort.dao.base import IdempotencyCacheBaseDAO
from idemshort.dao.exceptions import DataStoreError
from idemshort.models import CacheEnvelope, CacheResult, CacheStatus


logger = logging.getLogger(__name__)


def _short(key: str) -> str:
    return key[:8]


class IdempotentCache:
    """Compute-or-fetch cache on top of an IdempotencyCacheBaseDAO store.

    Args:
        store (IdempotencyCacheBaseDAO):
            Backing store with per-entry TTL and atomic set-if-absent.
        default_ttl (float):
            Entry lifetime in seconds when a call passes no ttl. A ttl <= 0
            means "not cacheable": every call computes and nothing is stored.
        lock_ttl (float):
            Lifetime of the per-key compute lock. Bounds how long a crashed
            winner can block other callers.
        lock_wait (float):
            How long losers wait for the winner's result before computing.
        poll_interval (float):
            Delay between polls while waiting.
        clock, sleep:
            Time source and sleep function (injectable for tests).

    Example:
        >>> cache = IdempotentCache(IdempotencyCacheMemoryDAO())
        >>> cache.get_or_compute('k', lambda: 42)
        42
        >>> cache.get('k')
        CacheResult(status=<CacheStatus.HIT: 'hit'>, value=42, error=None)
    """

    def __init__(
        self,
        store: IdempotencyCacheBaseDAO,
        default_ttl: float = CacheTTL.IDEMPOTENCY,
        lock_ttl: float = CacheTTL.LOCK,
        lock_wait: float = CacheTTL.LOCK_WAIT,
        poll_interval: float = CacheTTL.POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if lock_ttl <= 0:
            raise ValueError(f'Lock TTL must be positive (given value: {lock_ttl}).')
        self.store = store
        self.default_ttl = default_ttl
        self.lock_ttl = lock_ttl
        self.lock_wait = lock_wait
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    # -------------------------------
    # Public operations
    # -------------------------------

    def get(self, key: str, value_type: type | None = None) -> CacheResult:
        """Read a live entry.

        With value_type given, the entry is rebuilt as that type; an entry
        written for another type counts as a miss.
        """
        try:
            blob = self.store.get(key)
        except DataStoreError as e:
            return self._store_error('get', key, e)

        if blob is None:
            return CacheResult(CacheStatus.MISS)

        try:
            envelope = CacheEnvelope.loads(blob)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning('Unreadable cache entry.', extra={'cacheKey': _short(key), 'error': repr(e)})
            return CacheResult(CacheStatus.ERROR, error=e)

        try:
            return CacheResult(CacheStatus.HIT, value=envelope.unwrap(value_type))
        except TypeError:
            logger.debug('Cache entry type mismatch; treating as miss.', extra={'cacheKey': _short(key), 'storedType': envelope.type})
            return CacheResult(CacheStatus.MISS)
        except (ValueError, KeyError) as e:
            logger.warning('Unreadable cache entry.', extra={'cacheKey': _short(key), 'error': repr(e)})
            return CacheResult(CacheStatus.ERROR, error=e)

    def put(self, key: str, value: Any, ttl: float | None = None, only_if_absent: bool = False) -> CacheResult:
        """Store value under key.

        Returns:
            CacheResult: STORED, EXISTS (only_if_absent lost to a live entry),
            SKIPPED (ttl <= 0) or ERROR.
        """
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            return CacheResult(CacheStatus.SKIPPED, value=value)

        blob = CacheEnvelope.wrap(value).dumps()
        try:
            written = self.store.set(key, blob, ttl, nx=only_if_absent)
        except DataStoreError as e:
            return self._store_error('put', key, e)
        return CacheResult(CacheStatus.STORED if written else CacheStatus.EXISTS, value=value)

    def delete(self, key: str) -> CacheResult:
        try:
            removed = self.store.delete(key)
        except DataStoreError as e:
            return self._store_error('delete', key, e)
        return CacheResult(CacheStatus.DELETED if removed else CacheStatus.MISS)

    def exists(self, key: str) -> CacheResult:
        try:
            present = self.store.has(key)
        except DataStoreError as e:
            return self._store_error('exists', key, e)
        return CacheResult(CacheStatus.HIT if present else CacheStatus.MISS, value=present)

    def get_or_compute[T](self, key: str, compute: Callable[[], T], ttl: float | None = None, value_type: type | None = None) -> T:
        """Return the cached value for key, computing and publishing it on a miss.

        Exceptions raised by compute propagate to the caller that ran it and
        nothing is cached. Store failures never propagate.
        """
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            return compute()

        cached = self.get(key, value_type)
        if cached.hit:
            return cached.value
        if not cached.ok:
            return self._compute_and_publish(key, compute, ttl, value_type)

        lock_key = f'{key}:lock'
        deadline = self._clock() + self.lock_wait

        while True:
            token = uuid.uuid4().hex
            try:
                acquired = self.store.set(lock_key, token, self.lock_ttl, nx=True)
            except DataStoreError as e:
                self._store_error('lock', key, e)
                return self._compute_and_publish(key, compute, ttl, value_type)

            if acquired:
                return self._compute_as_owner(key, lock_key, token, compute, ttl, value_type)

            # Another caller computes; wait for its result or for the lock to vanish
            while True:
                if self._clock() >= deadline:
                    logger.warning(
                        'Timed out waiting for concurrent computation; computing directly.',
                        extra={'cacheKey': _short(key), 'lockWait': self.lock_wait},
                    )
                    return self._compute_and_publish(key, compute, ttl, value_type)

                self._sleep(self.poll_interval)

                cached = self.get(key, value_type)
                if cached.hit:
                    logger.debug('Received result computed by concurrent caller.', extra={'cacheKey': _short(key)})
                    return cached.value
                if not cached.ok:
                    return self._compute_and_publish(key, compute, ttl, value_type)

                try:
                    locked = self.store.has(lock_key)
                except DataStoreError as e:
                    self._store_error('lock', key, e)
                    return self._compute_and_publish(key, compute, ttl, value_type)

                if not locked:
                    logger.debug('Lock released without a result; competing again.', extra={'cacheKey': _short(key)})
                    break

    # -------------------------------
    # Internals
    # -------------------------------

    def _compute_as_owner(self, key, lock_key, token, compute, ttl, value_type):
        try:
            # The previous owner may have published between our miss and our lock
            cached = self.get(key, value_type)
            if cached.hit:
                return cached.value
            return self._compute_and_publish(key, compute, ttl, value_type)
        finally:
            self._release(key, lock_key, token)

    def _compute_and_publish(self, key, compute, ttl, value_type):
        value = compute()
        stored = self.put(key, value, ttl, only_if_absent=True)
        if stored.status is not CacheStatus.EXISTS:
            return value

        # Lost the publish race: converge on the stored result
        existing = self.get(key, value_type or type(value))
        if existing.hit:
            logger.debug('Discarding computed value in favour of stored result.', extra={'cacheKey': _short(key)})
            return existing.value
        return value

    def _release(self, key: str, lock_key: str, token: str) -> None:
        try:
            self.store.delete_if_equals(lock_key, token)
        except DataStoreError as e:
            # The lock expires on its own after lock_ttl
            self._store_error('unlock', key, e)

    @staticmethod
    def _store_error(operation: str, key: str, error: DataStoreError) -> CacheResult:
        logger.warning(
            'Idempotency cache unavailable; continuing without it.',
            extra={'operation': operation, 'cacheKey': _short(key), 'error': str(error)},
        )
        return CacheResult(CacheStatus.ERROR, error=error)
