"""Redis-backed store for the idempotency cache

Responsibilities:
    - Keep idempotency entries (serialized CacheEnvelope JSON) with per-entry TTL
    - Provide the atomic "set if absent" used for per-key compute locks
    - Release locks with an atomic compare-and-delete
    - Report every Redis failure, error replies included, as DataStoreError

Key layout:
    cache:<prefix>:idempotency:<fingerprint>        -> envelope JSON (PX ttl)
    cache:<prefix>:idempotency:<fingerprint>:lock   -> lock owner token (PX lock ttl)

Example:
    >>> dao = IdempotencyCacheRedisDAO(redis_host='localhost', prefix='idemshort:dev', strict=False)
    >>> dao.set('Qm9vdHN0', '{"type":"builtins.str","value":"x"}', ttl=10)
    True
    >>> dao.get('Qm9vdHN0')
    '{"type":"builtins.str","value":"x"}'
"""

from beartype import beartype

from idemshort.dao.base import IdempotencyCacheBaseDAO
from idemshort.dao.cache.cache_key_schema import CacheKeySchema
from idemshort.dao.redis.mixins import RedisClientMixin
from idemshort.dao.redis.helpers import handle_redis_error


# KEYS[1] = lock key, ARGV[1] = owner token
COMPARE_AND_DELETE = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
end
return 0
"""


class IdempotencyCacheRedisDAO(RedisClientMixin, IdempotencyCacheBaseDAO):
    """Redis-backed idempotency cache store

    Attributes (via mixins):
        redis (redis.Redis):
            Redis client created with bounded socket timeouts.
        keys (CacheKeySchema):
            Key schema helper for namespaced cache keys.
    """

    key_schema = CacheKeySchema

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # register_script() only hashes the script locally; EVALSHA happens on call
        self._compare_and_delete = self.redis.register_script(COMPARE_AND_DELETE)

    @handle_redis_error
    @beartype
    def get(self, key: str) -> str | None:
        value = self.redis.get(self.keys.entry_key(key))
        if isinstance(value, bytes):
            return value.decode('utf-8')
        return value

    @handle_redis_error
    @beartype
    def set(self, key: str, value: str, ttl: int | float, nx: bool = False) -> bool:
        if ttl <= 0:
            raise ValueError(f'TTL must be positive (given value: {ttl}).')
        # PX keeps sub-second lock TTLs meaningful
        return bool(self.redis.set(self.keys.entry_key(key), value, px=max(1, int(ttl * 1000)), nx=nx))

    @handle_redis_error
    @beartype
    def delete(self, key: str) -> bool:
        return bool(self.redis.delete(self.keys.entry_key(key)))

    @handle_redis_error
    @beartype
    def delete_if_equals(self, key: str, value: str) -> bool:
        return bool(self._compare_and_delete(keys=[self.keys.entry_key(key)], args=[value]))

    @handle_redis_error
    @beartype
    def has(self, key: str) -> bool:
        return bool(self.redis.exists(self.keys.entry_key(key)))
