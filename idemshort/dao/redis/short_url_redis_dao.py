"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

Responsibilities:
    - Claim shortcodes atomically and retrieve short URL records;
    - Probe shortcode existence for the collision check;
    - Own the global identifier counter;
    - Translate Redis failures into the matching DAO exceptions.

Key layout:
    <prefix>:links:<shortcode>   -> JSON record {"shortcode", "target", "created_at"} (no TTL)
    <prefix>:links:counter       -> global identifier counter (INCR)

Example:
    >>> from idemshort.models import ShortURLModel
    >>> from idemshort.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO(prefix="app:dev")
    >>> dao.insert(ShortURLModel(shortcode="abc1234", target="https://example.com/page"))
    <ShortURLRedisDAO>
    >>> dao.get("abc1234").target
    'https://example.com/page'
"""

import json

from beartype import beartype

from idemshort.models import ShortURLModel
from idemshort.dao.base import ShortURLBaseDAO
from idemshort.dao.redis.mixins import RedisClientMixin
from idemshort.dao.redis.helpers import handle_redis_connection_error
from idemshort.dao.exceptions import DataStoreError, ShortURLAlreadyExistsError, ShortURLNotFoundError


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short URL mappings

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
    """

    @handle_redis_connection_error
    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLRedisDAO':
        """Claim a shortcode by inserting its record into Redis

        The claim is a single SET NX: checking for existence and writing are one
        atomic step, so two writers racing for the same shortcode cannot both win.

        Raises:
            ShortURLAlreadyExistsError:
                If a short URL with the same shortcode already exists.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        link_key = self.keys.link_key(short_url.shortcode)
        record = json.dumps(short_url.to_dict(), separators=(',', ':'), ensure_ascii=False)

        # NOTE: a plain EXISTS + SET leaves a window where a concurrent writer
        #       claims the same shortcode in between:
        #
        #       (lambda 1): EXISTS <app>:links:<shortcode>   => 0
        #       (lambda 2): EXISTS <app>:links:<shortcode>   => 0
        #       (lambda 2): SET <app>:links:<shortcode> <record 2>
        #       (lambda 1): SET <app>:links:<shortcode> <record 1>  => overwrites record 2
        #
        #       With NX the second SET returns nil and lambda 1 sees a collision.
        if not self.redis.set(link_key, record, nx=True):
            raise ShortURLAlreadyExistsError(f"Short URL with code '{short_url.shortcode}' already exists.")
        return self

    @handle_redis_connection_error
    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a stored short URL record by shortcode

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur or the record is corrupt.
        """
        record = self.redis.get(self.keys.link_key(shortcode))
        if record is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")

        try:
            return ShortURLModel.from_dict(json.loads(record))
        except (ValueError, KeyError, TypeError) as e:
            raise DataStoreError(f"Short URL record for code '{shortcode}' is corrupt.") from e

    @handle_redis_connection_error
    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        return bool(self.redis.exists(self.keys.link_key(shortcode)))

    @handle_redis_connection_error
    def count(self, increment: bool = False, **kwargs) -> int:
        """Retrieve global identifier counter

        INCR is atomic in Redis, so concurrent callers across processes each
        observe a distinct value.

        Example:
            >>> dao.count(increment=False)
            1001
            >>> dao.count(increment=True)
            1002
        """
        if increment:
            return int(self.redis.incr(self.keys.counter_key()))
        return int(self.redis.get(self.keys.counter_key()) or 0)

    @handle_redis_connection_error
    @beartype
    def seed_counter(self, value: int, **kwargs) -> bool:
        return bool(self.redis.set(self.keys.counter_key(), value, nx=True))
