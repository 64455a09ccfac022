from idemshort.dao.cache.cache_key_schema import CacheKeySchema
from idemshort.dao.cache.idempotency_cache_dao import IdempotencyCacheRedisDAO


__all__ = [
    'CacheKeySchema',
    'IdempotencyCacheRedisDAO',
]
