from idemshort.dao.redis.redis_key_schema import RedisKeySchema
from idemshort.dao.redis.mixins import RedisClientMixin
from idemshort.dao.redis.short_url_redis_dao import ShortURLRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'ShortURLRedisDAO',
]
